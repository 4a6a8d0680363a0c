"""Cache key schema shared with previously written cache entries"""

from taxcalc.domain.models import Period

ACCOUNTS_KEY = "accountsWithForeignCurrencies"


def accounts_key() -> str:
    return ACCOUNTS_KEY


def transactions_key(account_id: str, from_time: int, to_time: int) -> str:
    return f"transactions:{account_id}:{from_time}:{to_time}"


def currency_rate_key(from_code: int, to_code: int) -> str:
    return f"currencyRate:{int(from_code)}:{int(to_code)}"


def income_by_period_key(period: Period, bank_id: str) -> str:
    return f"taxcalc:incomeByPeriod:{period.cache_token}:{bank_id}"
