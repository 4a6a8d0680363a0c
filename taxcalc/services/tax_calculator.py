"""Multi-bank income aggregation and tax calculation"""

import logging
from enum import Enum
from typing import Iterable, List

from taxcalc.domain.exceptions import AggregationFailedError, DomainException
from taxcalc.domain.models import IncomeAndTaxesResult, Period
from taxcalc.domain.taxes import TaxRates, calculate_income, calculate_taxes
from taxcalc.infrastructure.cache.keys import income_by_period_key
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.base import BankClient
from taxcalc.infrastructure.observability.metrics import (
    aggregation_duration_histogram,
    bank_fetch_failures_counter,
    record_aggregation,
)

logger = logging.getLogger(__name__)


class AggregationFailurePolicy(str, Enum):
    """What to do when one bank fails mid-aggregation"""

    ABORT = "abort"  # raise on the first failing bank
    COLLECT = "collect"  # keep going, report failed banks on the result


class TaxCalculator:
    """Combines income and taxes across every configured bank"""

    def __init__(
        self,
        bank_clients: Iterable[BankClient],
        rates: TaxRates,
        cache: RedisCache,
        policy: AggregationFailurePolicy = AggregationFailurePolicy.ABORT,
    ):
        # Snapshot the iteration order so it stays stable within one call
        self.bank_clients: List[BankClient] = list(bank_clients)
        self.rates = rates
        self.cache = cache
        self.policy = policy

    async def calculate_income_by_period(self, period: Period) -> IncomeAndTaxesResult:
        """
        Main entry point: aggregate income and taxes for a lookback period.

        Flow per bank:
        1. Reuse the cached per-bank result if present
        2. Otherwise fetch raw income, convert to major units and tax it
        3. Cache the per-bank result and add it to the running total

        A failing bank is never counted as zero income. Under the abort policy
        the whole call fails; under the collect policy the bank is listed in
        failed_banks and nothing is cached for it.

        Raises:
            AggregationFailedError: A bank failed and the policy is abort
        """
        with aggregation_duration_histogram.time():
            result = IncomeAndTaxesResult()

            for bank in self.bank_clients:
                try:
                    bank_result = await self._income_for_bank(bank, period)
                except DomainException as e:
                    bank_fetch_failures_counter.labels(bank_id=bank.bank_id, kind=e.kind.value).inc()
                    logger.error(
                        f"Bank failed during aggregation: {e}",
                        extra={"bank_id": bank.bank_id, "kind": e.kind.value, "period": period.cache_token},
                    )
                    if self.policy is AggregationFailurePolicy.ABORT:
                        record_aggregation(complete=False, failed=True)
                        raise AggregationFailedError(bank.bank_id, e) from e

                    result.failed_banks[bank.bank_id] = e.kind.value
                    continue

                result = result.merge(bank_result)

        record_aggregation(complete=result.is_complete)
        return result

    async def _income_for_bank(self, bank: BankClient, period: Period) -> IncomeAndTaxesResult:
        key = income_by_period_key(period, bank.bank_id)

        cached = await self.cache.get(key)
        if cached.hit and cached.decoded and isinstance(cached.value, dict):
            try:
                return IncomeAndTaxesResult.from_cache_payload(cached.value)
            except (AttributeError, KeyError, TypeError):
                logger.warning("Ignoring malformed cached bank result", extra={"cache_key": key})

        incomes = await bank.get_income_by_period(period)

        income = calculate_income(incomes)
        bank_result = IncomeAndTaxesResult(total_income=income, taxes=calculate_taxes(income, self.rates))

        await self.cache.set(key, bank_result.to_cache_payload())
        logger.info(
            "Calculated bank income",
            extra={"bank_id": bank.bank_id, "period": period.cache_token, "income": income},
        )
        return bank_result
