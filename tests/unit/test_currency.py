"""Unit tests for currency rate resolution"""

import httpx
import pytest

from conftest import FakeRedis
from taxcalc.domain.exceptions import CurrencyRateFetchFailedError, CurrencyRateNotFoundError
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.currency import CurrencyRateResolver

RATE_TABLE = [
    {"currencyCodeA": 840, "currencyCodeB": 980, "date": 1700000000, "rateBuy": 41.0, "rateSell": 41.6},
    {"currencyCodeA": 980, "currencyCodeB": 978, "date": 1700000000, "rateBuy": 0.022, "rateSell": 0.023},
    {"currencyCodeA": 985, "currencyCodeB": 980, "date": 1700000000, "rateCross": 10.4},
]


def rate_table_handler(table, calls=None, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=table)

    return handler


async def test_buy_rate_found_and_cached(make_api, cache: RedisCache, fake_redis: FakeRedis):
    calls = []
    resolver = CurrencyRateResolver(make_api(rate_table_handler(RATE_TABLE, calls)), cache)

    assert await resolver.get_buy_rate(840, 980) == 41.0
    assert calls[0].method == "POST"
    assert calls[0].url.path == "/bank/currency"
    assert "X-Token" not in calls[0].headers
    assert "currencyRate:840:980" in fake_redis.store

    # Second lookup is served from cache
    assert await resolver.get_buy_rate(840, 980) == 41.0
    assert len(calls) == 1


async def test_absent_pair_is_not_found_and_not_cached(make_api, cache: RedisCache, fake_redis: FakeRedis):
    """Test 978->980 is missing even though 980->978 is quoted"""
    resolver = CurrencyRateResolver(make_api(rate_table_handler(RATE_TABLE)), cache)

    with pytest.raises(CurrencyRateNotFoundError):
        await resolver.get_rate(978, 980)
    assert "currencyRate:978:980" not in fake_redis.store
    assert fake_redis.set_calls == []


async def test_direction_matters(make_api, cache: RedisCache):
    resolver = CurrencyRateResolver(make_api(rate_table_handler(RATE_TABLE)), cache)

    with pytest.raises(CurrencyRateNotFoundError):
        await resolver.get_rate(980, 840)


async def test_quote_without_buy_rate(make_api, cache: RedisCache):
    resolver = CurrencyRateResolver(make_api(rate_table_handler(RATE_TABLE)), cache)

    rate = await resolver.get_rate(985, 980)
    assert rate.rate_cross == 10.4

    with pytest.raises(CurrencyRateNotFoundError):
        await resolver.get_buy_rate(985, 980)


async def test_rate_table_http_error(make_api, cache: RedisCache):
    resolver = CurrencyRateResolver(make_api(rate_table_handler({"errorDescription": "Too many requests"}, status=429)), cache)

    with pytest.raises(CurrencyRateFetchFailedError) as exc_info:
        await resolver.get_buy_rate(840, 980)
    assert exc_info.value.status_code == 429


async def test_rate_table_not_array(make_api, cache: RedisCache):
    resolver = CurrencyRateResolver(make_api(rate_table_handler({"errorDescription": "oops"})), cache)

    with pytest.raises(CurrencyRateFetchFailedError):
        await resolver.get_buy_rate(840, 980)


async def test_rate_table_timeout(make_api, cache: RedisCache):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(CurrencyRateFetchFailedError):
        await CurrencyRateResolver(make_api(handler), cache).get_buy_rate(840, 980)


async def test_non_object_quote_is_fetch_failure(make_api, cache: RedisCache, fake_redis: FakeRedis):
    resolver = CurrencyRateResolver(make_api(rate_table_handler(["garbage", *RATE_TABLE])), cache)

    with pytest.raises(CurrencyRateFetchFailedError):
        await resolver.get_buy_rate(840, 980)
    assert fake_redis.store == {}


async def test_malformed_cached_quote(make_api, cache: RedisCache):
    await cache.set("currencyRate:840:980", {"rateBuy": 41.0})
    resolver = CurrencyRateResolver(make_api(rate_table_handler(RATE_TABLE)), cache)

    with pytest.raises(CurrencyRateFetchFailedError):
        await resolver.get_buy_rate(840, 980)
