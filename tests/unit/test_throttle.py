"""Unit tests for rate-limit policies"""

from unittest.mock import AsyncMock

from taxcalc.api.dependencies import get_throttle
from taxcalc.config import settings
from taxcalc.infrastructure.clients.monobank.throttle import FixedDelayThrottle, NoThrottle


async def test_fixed_delay_sleeps_configured_seconds():
    sleep = AsyncMock()
    throttle = FixedDelayThrottle(60.0, sleep=sleep)

    await throttle.wait()
    await throttle.wait()

    assert sleep.await_count == 2
    sleep.assert_awaited_with(60.0)


async def test_no_throttle_returns_immediately():
    assert await NoThrottle().wait() is None


def test_zero_delay_selects_no_throttle(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_delay_seconds", 0)
    assert isinstance(get_throttle(), NoThrottle)


def test_configured_delay_selects_fixed_throttle(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_delay_seconds", 60.0)
    throttle = get_throttle()
    assert isinstance(throttle, FixedDelayThrottle)
    assert throttle.delay_seconds == 60.0
