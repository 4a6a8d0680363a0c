"""Monobank implementation of the BankClient capability"""

import logging
import time
from typing import Callable, List

from taxcalc.domain.currency import HOME_CURRENCY, currency_symbol
from taxcalc.domain.models import Period
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.accounts import AccountResolver
from taxcalc.infrastructure.clients.monobank.api import MonobankApi
from taxcalc.infrastructure.clients.monobank.currency import CurrencyRateResolver
from taxcalc.infrastructure.clients.monobank.statements import StatementFetcher
from taxcalc.infrastructure.clients.monobank.throttle import Throttle

logger = logging.getLogger(__name__)


class MonobankClient:
    """Income from Monobank FOP accounts held in foreign currencies"""

    def __init__(
        self,
        api: MonobankApi,
        cache: RedisCache,
        throttle: Throttle,
        bank_id: str = "monobank",
        home_currency: int = HOME_CURRENCY,
        clock: Callable[[], float] = time.time,
    ):
        self.bank_id = bank_id
        self.home_currency = home_currency
        self.accounts = AccountResolver(api, cache, home_currency)
        self.rates = CurrencyRateResolver(api, cache)
        self.statements = StatementFetcher(api, cache, throttle, clock=clock)

    async def get_income_by_period(self, period: Period) -> List[float]:
        """
        Collect incoming amounts of every eligible account, converted to the
        home currency at the current buy rate (minor units).

        Raises:
            DomainException: Any account, rate, statement or cache failure
        """
        accounts = await self.accounts.get_eligible_accounts()
        incomes: List[float] = []

        for account in accounts:
            logger.info(
                "Fetching transactions",
                extra={"account_id": account.id, "currency": currency_symbol(account.currency_code)},
            )

            rate_buy = await self.rates.get_buy_rate(account.currency_code, self.home_currency)
            transactions = await self.statements.fetch_period(account.id, period)

            incomes.extend(txn.operation_amount * rate_buy for txn in transactions if txn.is_income)

        return incomes
