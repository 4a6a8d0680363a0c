"""Windowed statement pagination for Monobank accounts"""

import logging
import time
from typing import Any, Callable, List, Set, Tuple

from taxcalc.domain.currency import MAX_STATEMENT_RANGE_SECONDS, MAX_TRANSACTIONS_PER_REQUEST
from taxcalc.domain.exceptions import TransactionsNotFoundError
from taxcalc.domain.models import Period, Transaction
from taxcalc.infrastructure.cache.keys import transactions_key
from taxcalc.infrastructure.cache.redis_cache import RedisCache
from taxcalc.infrastructure.clients.monobank.api import MonobankApi
from taxcalc.infrastructure.clients.monobank.throttle import Throttle
from taxcalc.utils.period_utils import start_of_day

logger = logging.getLogger(__name__)


class StatementFetcher:
    """
    Retrieves every transaction of an account over a lookback period.

    Monobank caps a statement request both by time range (31 days + 1 hour) and
    by page size (500 items, newest first). The period is split into forward
    windows no longer than the range cap; inside each window the upper bound is
    walked backwards to just before the oldest item of every full page until a
    short page proves the window is drained.
    """

    def __init__(
        self,
        api: MonobankApi,
        cache: RedisCache,
        throttle: Throttle,
        page_size: int = MAX_TRANSACTIONS_PER_REQUEST,
        max_range: int = MAX_STATEMENT_RANGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.api = api
        self.cache = cache
        self.throttle = throttle
        self.page_size = page_size
        self.max_range = max_range
        self.clock = clock

    async def fetch_period(self, account_id: str, period: Period) -> List[Transaction]:
        # Day-aligned bounds keep cache keys stable for repeated runs on one day
        now = start_of_day(int(self.clock()))
        window_start = now - period.to_seconds()
        return await self.fetch_range(account_id, window_start, now)

    async def fetch_range(self, account_id: str, from_time: int, to_time: int) -> List[Transaction]:
        """All transactions in [from_time, to_time], in fetch order, without duplicates"""
        transactions: List[Transaction] = []
        seen: Set[str] = set()

        window_start = from_time
        while window_start < to_time:
            block_end = min(window_start + self.max_range, to_time)

            for txn in await self._drain_window(account_id, window_start, block_end):
                # Bounds are inclusive, so an item stamped exactly at block_end shows up twice
                if txn.id in seen:
                    continue
                seen.add(txn.id)
                transactions.append(txn)

            window_start = block_end

        return transactions

    async def _drain_window(self, account_id: str, window_start: int, block_end: int) -> List[Transaction]:
        items: List[Transaction] = []
        cursor = block_end

        while True:
            page, from_network = await self._fetch_page(account_id, window_start, cursor)
            items.extend(page)

            if len(page) < self.page_size:
                return items

            # The rate limit applies after every full page fetched from the network
            if from_network:
                await self.throttle.wait()

            next_cursor = page[-1].time - 1
            if next_cursor >= cursor:
                raise TransactionsNotFoundError(
                    f"Statement for account {account_id} ignored the upper bound {cursor}"
                )
            cursor = next_cursor

            if cursor < window_start:
                logger.warning(
                    "Full page at window start, cannot narrow further",
                    extra={"account_id": account_id, "from": window_start, "page_size": len(page)},
                )
                return items

    async def _fetch_page(self, account_id: str, from_time: int, to_time: int) -> Tuple[List[Transaction], bool]:
        """Return (page, fetched_from_network)"""
        key = transactions_key(account_id, from_time, to_time)

        cached = await self.cache.get(key)
        if cached.hit and cached.decoded:
            page = self._parse_page(cached.value)
            if page is not None:
                return page, False

        data = await self.api.get_statement(account_id, from_time, to_time)
        page = self._parse_page(data)
        if page is None:
            logger.error(
                "Unexpected statement response from Monobank",
                extra={"account_id": account_id, "from": from_time, "to": to_time},
            )
            # Cache the empty result so the same bad window is not requested again
            await self.cache.set(key, [])
            raise TransactionsNotFoundError(
                f"Malformed statement for account {account_id} [{from_time}, {to_time}]"
            )

        logger.info(
            "Fetched transactions",
            extra={"account_id": account_id, "from": from_time, "to": to_time, "count": len(page)},
        )
        await self.cache.set(key, data)
        return page, True

    @staticmethod
    def _parse_page(data: Any) -> List[Transaction] | None:
        if not isinstance(data, list):
            return None
        try:
            return [Transaction.from_payload(item) for item in data]
        except (KeyError, TypeError):
            return None
