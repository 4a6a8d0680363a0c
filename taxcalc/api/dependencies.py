"""Dependency injection for FastAPI endpoints"""

from typing import AsyncIterator, List

import httpx
from fastapi import Depends, Request
from redis.asyncio import Redis

from taxcalc.config import settings
from taxcalc.domain.taxes import TaxRates
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.base import BankClient
from taxcalc.infrastructure.clients.monobank.api import MonobankApi, build_http_client
from taxcalc.infrastructure.clients.monobank.client import MonobankClient
from taxcalc.infrastructure.clients.monobank.throttle import FixedDelayThrottle, NoThrottle, Throttle
from taxcalc.services.tax_calculator import AggregationFailurePolicy, TaxCalculator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


async def get_cache() -> AsyncIterator[RedisCache]:
    """Redis connection for the duration of one request"""
    client = Redis.from_url(settings.redis_url)
    try:
        yield RedisCache(client, ttl_seconds=settings.redis_cache_ttl)
    finally:
        await client.aclose()


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP connection pool shared by every Monobank call in one request"""
    async with build_http_client(settings.monobank_api_url, settings.http_timeout_seconds) as client:
        yield client


def get_throttle() -> Throttle:
    """A zero delay disables throttling, e.g. against the mock provider"""
    if settings.rate_limit_delay_seconds <= 0:
        return NoThrottle()
    return FixedDelayThrottle(settings.rate_limit_delay_seconds)


def get_bank_clients(
    cache: RedisCache = Depends(get_cache),
    http: httpx.AsyncClient = Depends(get_http_client),
    throttle: Throttle = Depends(get_throttle),
) -> List[BankClient]:
    """Provide every configured bank integration"""
    api = MonobankApi(http, settings.monobank_api_token, timeout=settings.http_timeout_seconds)
    return [MonobankClient(api, cache, throttle)]


def get_tax_calculator(
    bank_clients: List[BankClient] = Depends(get_bank_clients),
    cache: RedisCache = Depends(get_cache),
) -> TaxCalculator:
    """Provide the aggregation engine wired to the configured banks"""
    return TaxCalculator(
        bank_clients,
        TaxRates(general=settings.general_tax_rate, military=settings.military_tax_rate),
        cache,
        policy=AggregationFailurePolicy(settings.aggregation_failure_policy),
    )
