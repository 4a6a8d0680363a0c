"""Pytest fixtures for testing"""

import pytest
from typing import Any, Callable, Dict, List, Optional
import httpx
from fastapi.testclient import TestClient

from taxcalc.api.dependencies import get_tax_calculator
from taxcalc.api.main import create_app
from taxcalc.domain.models import Period
from taxcalc.domain.taxes import TaxRates
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.api import MonobankApi
from taxcalc.services.tax_calculator import TaxCalculator

MONOBANK_URL = "https://api.monobank.test"
TOKEN = "test-token"


class FakeRedis:
    """In-memory stand-in for the get/set/expire subset of redis.asyncio.Redis"""

    def __init__(self):
        self.store: Dict[str, bytes] = {}
        self.ttls: Dict[str, int] = {}
        self.expire_result = True
        self.set_calls: List[str] = []

    async def get(self, name: str) -> Optional[bytes]:
        return self.store.get(name)

    async def set(self, name: str, value: Any) -> bool:
        self.set_calls.append(name)
        self.store[name] = value.encode() if isinstance(value, str) else value
        return True

    async def expire(self, name: str, time: int) -> bool:
        if not self.expire_result or name not in self.store:
            return False
        self.ttls[name] = time
        return True


class FakeBankClient:
    """BankClient double returning fixed raw incomes or raising"""

    def __init__(self, bank_id: str, incomes: Optional[List[float]] = None, error: Optional[Exception] = None):
        self.bank_id = bank_id
        self.incomes = incomes or []
        self.error = error
        self.calls: List[Period] = []

    async def get_income_by_period(self, period: Period) -> List[float]:
        self.calls.append(period)
        if self.error is not None:
            raise self.error
        return list(self.incomes)


class RecordingThrottle:
    def __init__(self):
        self.waits = 0

    async def wait(self) -> None:
        self.waits += 1


def make_account(account_id: str, kind: str, currency_code: int) -> Dict[str, Any]:
    return {
        "id": account_id,
        "sendId": f"send-{account_id}",
        "type": kind,
        "currencyCode": currency_code,
        "balance": 1000,
        "creditLimit": 0,
        "maskedPan": [],
        "iban": f"UA00{account_id}",
    }


def make_transaction(txn_id: str, ts: int, operation_amount: int = 10000, currency_code: int = 840) -> Dict[str, Any]:
    return {
        "id": txn_id,
        "time": ts,
        "description": "Payment",
        "mcc": 4829,
        "originalMcc": 4829,
        "amount": operation_amount,
        "operationAmount": operation_amount,
        "currencyCode": currency_code,
        "commissionRate": 0,
        "cashbackAmount": 0,
        "balance": 0,
        "hold": False,
        "counterName": "Client LLC",
    }


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> RedisCache:
    return RedisCache(fake_redis, ttl_seconds=3600)


@pytest.fixture
def tax_rates() -> TaxRates:
    return TaxRates(general=0.05, military=0.01)


@pytest.fixture
def throttle() -> RecordingThrottle:
    return RecordingThrottle()


@pytest.fixture
def make_api() -> Callable[[Callable[[httpx.Request], httpx.Response]], MonobankApi]:
    """Build a MonobankApi whose HTTP traffic is answered by a handler function"""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> MonobankApi:
        http = httpx.AsyncClient(base_url=MONOBANK_URL, transport=httpx.MockTransport(handler))
        return MonobankApi(http, TOKEN, timeout=5.0)

    return factory


@pytest.fixture
def client(cache: RedisCache, tax_rates: TaxRates) -> TestClient:
    """Create FastAPI test client with fake banks and in-memory cache"""
    app = create_app()
    banks = [FakeBankClient("bank-a", [10000, 25000]), FakeBankClient("bank-b", [5000, 15000])]

    def override_get_tax_calculator():
        return TaxCalculator(banks, tax_rates, cache)

    app.dependency_overrides[get_tax_calculator] = override_get_tax_calculator
    return TestClient(app)
