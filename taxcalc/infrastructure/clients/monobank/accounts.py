"""Account discovery and eligibility filtering"""

import logging
from typing import Any, Dict, List

from taxcalc.domain.currency import HOME_CURRENCY
from taxcalc.domain.exceptions import AccountsNotFoundError, EligibleAccountsNotFoundError
from taxcalc.domain.models import Account
from taxcalc.infrastructure.cache.keys import accounts_key
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.api import MonobankApi

logger = logging.getLogger(__name__)


def select_eligible_accounts(accounts: List[Account], home_currency: int = HOME_CURRENCY) -> List[Account]:
    """
    Keep business (FOP) accounts held in a foreign currency.

    Raises:
        EligibleAccountsNotFoundError: If nothing qualifies
    """
    eligible = [account for account in accounts if account.is_eligible(home_currency)]
    if not eligible:
        raise EligibleAccountsNotFoundError("No FOP accounts in a foreign currency")

    logger.info("Found eligible FOP accounts", extra={"count": len(eligible)})
    return eligible


class AccountResolver:
    """Fetches the client's accounts once per cache TTL"""

    def __init__(self, api: MonobankApi, cache: RedisCache, home_currency: int = HOME_CURRENCY):
        self.api = api
        self.cache = cache
        self.home_currency = home_currency

    async def get_accounts_with_foreign_currencies(self) -> List[Account]:
        """
        Raises:
            AccountsNotFoundError: No account list, or an account that cannot be read
        """
        payloads = await self.cache.get_or_fetch(accounts_key(), self._fetch_foreign_accounts)
        return parse_accounts(payloads)

    async def get_eligible_accounts(self) -> List[Account]:
        accounts = await self.get_accounts_with_foreign_currencies()
        return select_eligible_accounts(accounts, self.home_currency)

    async def _fetch_foreign_accounts(self) -> List[Dict[str, Any]]:
        data = await self.api.get_client_info()
        accounts = data.get("accounts") if isinstance(data, dict) else None
        if not isinstance(accounts, list):
            raise AccountsNotFoundError("Monobank client-info carries no account list")

        logger.info("Fetched personal info", extra={"client_id": data.get("clientId")})

        # A malformed account fails here, before anything is cached
        parsed = parse_accounts(accounts)

        # Raw provider payloads are cached so existing entries stay readable
        return [
            payload
            for payload, account in zip(accounts, parsed)
            if account.currency_code != self.home_currency
        ]


def parse_accounts(payloads: Any) -> List[Account]:
    """
    Build accounts from client-info payloads.

    Raises:
        AccountsNotFoundError: If the payload is not a list of well-formed accounts
    """
    try:
        return [Account.from_payload(payload) for payload in payloads]
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        logger.error("Malformed account in Monobank client-info", extra={"error": str(e)})
        raise AccountsNotFoundError(f"Malformed account payload from Monobank: {e!r}") from e
