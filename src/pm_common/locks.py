"""Per-market serialisation.

Operations against one market (buy, sell, settle, redeem) must never
interleave their reserve reads and writes; operations against different
markets share nothing and run concurrently. In-process this is an
asyncio.Lock per market id; across processes the repositories also take a
row lock (SELECT ... FOR UPDATE) inside the transaction.
"""

import asyncio
from collections import defaultdict


class MarketLockRegistry:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock_for(self, market_id: str) -> asyncio.Lock:
        return self._locks[market_id]


market_locks = MarketLockRegistry()
