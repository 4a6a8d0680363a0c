"""Domain-specific exceptions"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable identifiers for every failure the core can report"""

    ACCOUNTS_NOT_FOUND = "accounts_not_found"
    ELIGIBLE_ACCOUNTS_NOT_FOUND = "eligible_accounts_not_found"
    TRANSACTIONS_NOT_FOUND = "transactions_not_found"
    FETCH_FAILED = "fetch_failed"
    ACCOUNTS_FETCH_FAILED = "accounts_fetch_failed"
    TRANSACTIONS_FETCH_FAILED = "transactions_fetch_failed"
    CURRENCY_RATE_FETCH_FAILED = "currency_rate_fetch_failed"
    CURRENCY_RATE_NOT_FOUND = "currency_rate_not_found"
    CACHE_STORE_FAILED = "cache_store_failed"
    CACHE_EXPIRATION_FAILED = "cache_expiration_failed"
    AGGREGATION_FAILED = "aggregation_failed"


class DomainException(Exception):
    """Base exception for domain layer"""

    kind: ErrorKind


class AccountsNotFoundError(DomainException):
    """Provider response carried no account list"""

    kind = ErrorKind.ACCOUNTS_NOT_FOUND


class EligibleAccountsNotFoundError(DomainException):
    """No business-type foreign-currency account exists"""

    kind = ErrorKind.ELIGIBLE_ACCOUNTS_NOT_FOUND


class TransactionsNotFoundError(DomainException):
    """Provider returned a malformed statement page"""

    kind = ErrorKind.TRANSACTIONS_NOT_FOUND


class FetchFailedError(DomainException):
    """Provider call failed: non-success status, timeout or transport error"""

    kind = ErrorKind.FETCH_FAILED

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AccountsFetchFailedError(FetchFailedError):
    kind = ErrorKind.ACCOUNTS_FETCH_FAILED


class TransactionsFetchFailedError(FetchFailedError):
    kind = ErrorKind.TRANSACTIONS_FETCH_FAILED


class CurrencyRateFetchFailedError(FetchFailedError):
    kind = ErrorKind.CURRENCY_RATE_FETCH_FAILED


class CurrencyRateNotFoundError(DomainException):
    """Provider does not publish the requested currency pair"""

    kind = ErrorKind.CURRENCY_RATE_NOT_FOUND


class CacheStoreFailedError(DomainException):
    """Value could not be written to the cache store"""

    kind = ErrorKind.CACHE_STORE_FAILED


class CacheExpirationFailedError(DomainException):
    """Value was stored but its TTL could not be set"""

    kind = ErrorKind.CACHE_EXPIRATION_FAILED


class AggregationFailedError(DomainException):
    """One bank failed during multi-bank aggregation"""

    kind = ErrorKind.AGGREGATION_FAILED

    def __init__(self, bank_id: str, cause: DomainException):
        super().__init__(f"Bank '{bank_id}' failed: {cause.kind.value}: {cause}")
        self.bank_id = bank_id
        self.cause = cause

    @property
    def cause_kind(self) -> ErrorKind:
        return self.cause.kind
