"""Monobank API HTTP client"""

import httpx
from typing import Any, Dict, List, Type

from taxcalc.domain.exceptions import (
    AccountsFetchFailedError,
    CurrencyRateFetchFailedError,
    FetchFailedError,
    TransactionsFetchFailedError,
)
from taxcalc.infrastructure.observability.metrics import record_provider_request

CLIENT_INFO_PATH = "/personal/client-info"
CURRENCY_PATH = "/bank/currency"


def statement_path(account_id: str, from_time: int, to_time: int) -> str:
    return f"/personal/statement/{account_id}/{from_time}/{to_time}"


def build_http_client(
    base_url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Shared connection pool for every Monobank call made during one aggregation"""
    return httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)


class MonobankApi:
    """Thin wrapper over the three Monobank endpoints the tax calculator needs"""

    def __init__(self, http: httpx.AsyncClient, token: str, timeout: float = 10.0):
        self.http = http
        self.token = token
        self.timeout = timeout

    async def get_client_info(self) -> Any:
        """
        Fetch personal info with the account list.

        Raises:
            AccountsFetchFailedError: On timeout, HTTP errors, or invalid JSON
        """
        response = await self._request("GET", CLIENT_INFO_PATH, AccountsFetchFailedError, "client_info")
        try:
            return response.json()
        except ValueError as e:
            raise AccountsFetchFailedError(f"Invalid client-info payload from Monobank: {e}") from e

    async def get_currency_rates(self) -> List[Dict[str, Any]]:
        """
        Fetch the public currency table.

        Raises:
            CurrencyRateFetchFailedError: On timeout, HTTP errors, or a non-array payload
        """
        response = await self._request(
            "POST", CURRENCY_PATH, CurrencyRateFetchFailedError, "currency", authenticated=False
        )
        try:
            data = response.json()
        except ValueError as e:
            raise CurrencyRateFetchFailedError(f"Invalid currency payload from Monobank: {e}") from e

        if not isinstance(data, list):
            raise CurrencyRateFetchFailedError("Monobank currency table is not an array")
        return data

    async def get_statement(self, account_id: str, from_time: int, to_time: int) -> Any:
        """
        Fetch one statement page for [from_time, to_time].

        Returns the decoded body, or None when the body is not JSON; the caller
        decides what a malformed page means.

        Raises:
            TransactionsFetchFailedError: On timeout or HTTP errors
        """
        response = await self._request(
            "GET",
            statement_path(account_id, from_time, to_time),
            TransactionsFetchFailedError,
            "statement",
        )
        try:
            return response.json()
        except ValueError:
            return None

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[FetchFailedError],
        endpoint: str,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {"X-Token": self.token} if authenticated else {}
        try:
            response = await self.http.request(method, path, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            record_provider_request(endpoint, ok=False)
            raise error_cls(f"Monobank API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            record_provider_request(endpoint, ok=False)
            raise error_cls(
                f"Monobank API error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            record_provider_request(endpoint, ok=False)
            raise error_cls(f"Monobank API unreachable: {e}") from e

        record_provider_request(endpoint, ok=True)
        return response
