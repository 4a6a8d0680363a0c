"""Unit tests for the cache-aside layer"""

import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import FakeRedis
from taxcalc.domain.exceptions import CacheExpirationFailedError, CacheStoreFailedError
from taxcalc.domain.models import Period
from taxcalc.infrastructure.cache.keys import (
    accounts_key,
    currency_rate_key,
    income_by_period_key,
    transactions_key,
)
from taxcalc.infrastructure.cache.redis_cache import RedisCache


def test_key_schema():
    """Test keys match entries written by earlier deployments"""
    assert accounts_key() == "accountsWithForeignCurrencies"
    assert transactions_key("acc1", 100, 200) == "transactions:acc1:100:200"
    assert currency_rate_key(840, 980) == "currencyRate:840:980"
    assert income_by_period_key(Period(3), "monobank") == "taxcalc:incomeByPeriod:3:monobank"


async def test_set_then_get_roundtrip(cache: RedisCache, fake_redis: FakeRedis):
    value = {"totalIncome": 350.5, "taxes": {"general": 17.5}, "items": [1, 2, 3]}
    await cache.set("k", value)

    lookup = await cache.get("k")

    assert lookup.hit
    assert lookup.decoded
    assert lookup.value == value
    assert fake_redis.ttls["k"] == 3600


async def test_set_with_explicit_ttl(cache: RedisCache, fake_redis: FakeRedis):
    await cache.set("k", [], ttl=60)
    assert fake_redis.ttls["k"] == 60


async def test_set_with_zero_ttl_is_not_replaced_by_default(cache: RedisCache, fake_redis: FakeRedis):
    await cache.set("k", [], ttl=0)
    assert fake_redis.ttls["k"] == 0


async def test_get_miss(cache: RedisCache):
    lookup = await cache.get("missing")
    assert not lookup.hit
    assert lookup.value is None


async def test_get_undecodable_returns_raw(cache: RedisCache, fake_redis: FakeRedis):
    fake_redis.store["k"] = b"not json {"

    lookup = await cache.get("k")

    assert lookup.hit
    assert not lookup.decoded
    assert lookup.value == b"not json {"


async def test_get_store_error_is_miss():
    redis = FakeRedis()
    redis.get = AsyncMock(side_effect=RedisConnectionError("down"))

    lookup = await RedisCache(redis).get("k")

    assert not lookup.hit


async def test_set_store_error(fake_redis: FakeRedis):
    fake_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))

    with pytest.raises(CacheStoreFailedError):
        await RedisCache(fake_redis).set("k", 1)


async def test_set_expire_rejected(cache: RedisCache, fake_redis: FakeRedis):
    """Test a value stored without TTL is reported separately"""
    fake_redis.expire_result = False

    with pytest.raises(CacheExpirationFailedError):
        await cache.set("k", 1)


async def test_set_expire_error(fake_redis: FakeRedis):
    fake_redis.expire = AsyncMock(side_effect=RedisConnectionError("down"))

    with pytest.raises(CacheExpirationFailedError):
        await RedisCache(fake_redis).set("k", 1)


async def test_get_or_fetch_hit_skips_loader(cache: RedisCache):
    await cache.set("k", {"a": 1})
    loader = AsyncMock(return_value={"a": 2})

    assert await cache.get_or_fetch("k", loader) == {"a": 1}
    loader.assert_not_called()


async def test_get_or_fetch_miss_loads_and_stores(cache: RedisCache, fake_redis: FakeRedis):
    loader = AsyncMock(return_value=[1, 2])

    assert await cache.get_or_fetch("k", loader) == [1, 2]
    loader.assert_awaited_once()
    assert (await cache.get("k")).value == [1, 2]


async def test_get_or_fetch_replaces_undecodable(cache: RedisCache, fake_redis: FakeRedis):
    fake_redis.store["k"] = b"garbage"
    loader = AsyncMock(return_value={"fresh": True})

    assert await cache.get_or_fetch("k", loader) == {"fresh": True}
    assert (await cache.get("k")).value == {"fresh": True}


async def test_get_or_fetch_loader_error_writes_nothing(cache: RedisCache, fake_redis: FakeRedis):
    loader = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await cache.get_or_fetch("k", loader)
    assert "k" not in fake_redis.store
