"""Pool of leased B2 upload URLs shared by all transfers"""
import threading
from typing import Awaitable, Callable, List
import structlog

from bucket_migrator.models.models import UploadSlot

logger = structlog.get_logger()


class UploadSlotPool:
    """
    Cache of idle upload slots with mint-on-miss overflow.

    A lease never waits for another transfer to give a slot back: when the
    idle set is empty a new slot is minted. The lock only guards the
    pop/push on the idle list, minting always happens outside of it.
    """

    def __init__(self, mint_func: Callable[[], Awaitable[UploadSlot]], metrics, capacity: int = 20):
        """
        Initialize the pool

        Args:
            mint_func: Coroutine function returning a fresh upload slot
            metrics: Metrics instance
            capacity: Number of slots minted up front by prefill()
        """
        self.mint_func = mint_func
        self.metrics = metrics
        self.capacity = capacity
        self.idle: List[UploadSlot] = []
        self.lock = threading.Lock()

    def __len__(self) -> int:
        with self.lock:
            return len(self.idle)

    async def mint(self, reason: str = "retry") -> UploadSlot:
        """ Request a brand new slot, bypassing the idle set. """
        slot = await self.mint_func()
        self.metrics.upload_slots_minted.labels(reason=reason).inc()
        logger.debug("slot_pool.minted", reason=reason)
        return slot

    async def prefill(self, count: int = None) -> None:
        """ Mint slots up front. Any failure is raised to the caller. """
        count = self.capacity if count is None else count
        for _ in range(count):
            slot = await self.mint(reason="prefill")
            with self.lock:
                self.idle.append(slot)

        logger.info("slot_pool.prefilled", slots=count)

    async def lease(self) -> UploadSlot:
        """ Take an idle slot, or mint one when none is idle. """
        with self.lock:
            slot = self.idle.pop() if self.idle else None

        if slot is None:
            slot = await self.mint(reason="overflow")
        return slot

    def release(self, slot: UploadSlot) -> None:
        """ Return a slot to the idle set. """
        with self.lock:
            self.idle.append(slot)

    def discard(self, slot: UploadSlot, reason: str = "") -> None:
        """ Drop a slot that must not be used again. B2 has no call to revoke it. """
        self.metrics.upload_slots_discarded.inc()
        logger.debug("slot_pool.discarded", upload_url=slot.upload_url, reason=reason)
