"""Currency rate lookup for converting foreign income to the home currency"""

import logging
from typing import Any, Dict

from taxcalc.domain.currency import currency_symbol
from taxcalc.domain.exceptions import CurrencyRateFetchFailedError, CurrencyRateNotFoundError
from taxcalc.domain.models import CurrencyRate
from taxcalc.infrastructure.cache.keys import currency_rate_key
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.api import MonobankApi

logger = logging.getLogger(__name__)


class CurrencyRateResolver:
    """
    Resolves directed currency pairs against the Monobank rate table.

    Only direct quotes are used: if (from, to) is not published, the lookup fails
    rather than inverting (to, from) or deriving a cross rate.
    """

    def __init__(self, api: MonobankApi, cache: RedisCache):
        self.api = api
        self.cache = cache

    async def get_rate(self, from_code: int, to_code: int) -> CurrencyRate:
        """
        Raises:
            CurrencyRateNotFoundError: Pair absent from the rate table
            CurrencyRateFetchFailedError: Rate table unavailable or malformed
        """
        payload = await self.cache.get_or_fetch(
            currency_rate_key(from_code, to_code),
            lambda: self._fetch_rate(from_code, to_code),
        )
        return parse_rate(payload)

    async def get_buy_rate(self, from_code: int, to_code: int) -> float:
        """
        Raises:
            CurrencyRateNotFoundError: Pair absent, or quoted without a buy rate
        """
        rate = await self.get_rate(from_code, to_code)
        if rate.rate_buy is None:
            raise CurrencyRateNotFoundError(
                f"No buy rate for {currency_symbol(from_code)} -> {currency_symbol(to_code)}"
            )
        return rate.rate_buy

    async def _fetch_rate(self, from_code: int, to_code: int) -> Dict[str, Any]:
        table = await self.api.get_currency_rates()
        logger.info("Fetched currency rates", extra={"quotes": len(table)})

        for quote in table:
            if not isinstance(quote, dict):
                raise CurrencyRateFetchFailedError(f"Malformed quote in Monobank currency table: {quote!r}")

            if quote.get("currencyCodeA") == from_code and quote.get("currencyCodeB") == to_code:
                rate = parse_rate(quote)
                logger.info(
                    "Found currency rate",
                    extra={
                        "pair": f"{currency_symbol(from_code)}/{currency_symbol(to_code)}",
                        "rate_buy": rate.rate_buy,
                    },
                )
                return quote

        raise CurrencyRateNotFoundError(
            f"Monobank does not quote {currency_symbol(from_code)} -> {currency_symbol(to_code)}"
        )


def parse_rate(payload: Any) -> CurrencyRate:
    try:
        return CurrencyRate.from_payload(payload)
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise CurrencyRateFetchFailedError(f"Malformed currency quote from Monobank: {e!r}") from e
