"""ISO-4217 numeric currency table and provider limits"""

from enum import IntEnum


class CurrencyCode(IntEnum):
    """Supported currencies by ISO-4217 numeric code"""

    CAD = 124
    CZK = 203
    JPY = 392
    CHF = 756
    GBP = 826
    USD = 840
    EUR = 978
    UAH = 980
    PLN = 985


HOME_CURRENCY = CurrencyCode.UAH

# Provider amounts are in minor units (kopiyky, cents)
CURRENCY_DENOMINATOR = 100

# Monobank statement limits
MAX_TRANSACTIONS_PER_REQUEST = 500
MAX_STATEMENT_RANGE_SECONDS = 2_682_000  # 31 days + 1 hour


def currency_symbol(code: int) -> str:
    """Human-readable symbol for a numeric code, or the code itself if unknown"""
    try:
        return CurrencyCode(code).name
    except ValueError:
        return str(code)
