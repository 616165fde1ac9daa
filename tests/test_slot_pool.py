"""Tests for the upload slot pool"""
import asyncio
import random

import pytest

from conftest import FakeDestination
from bucket_migrator.errors import SlotMintError
from bucket_migrator.migration.slot_pool import UploadSlotPool


class TestUploadSlotPool:
    """Tests for UploadSlotPool"""

    @pytest.mark.asyncio
    async def test_prefill_mints_capacity(self, metrics, registry):
        destination = FakeDestination()
        pool = UploadSlotPool(destination.get_upload_url, metrics, capacity=5)

        await pool.prefill()

        assert len(pool) == 5
        assert destination.minted == 5
        assert registry.get_sample_value(
            "migrator_upload_slots_minted_total", {"reason": "prefill"}
        ) == 5

    @pytest.mark.asyncio
    async def test_prefill_failure_is_raised(self, metrics):
        async def failing_mint():
            raise SlotMintError("b2_get_upload_url failed")

        pool = UploadSlotPool(failing_mint, metrics, capacity=3)

        with pytest.raises(SlotMintError):
            await pool.prefill()

    @pytest.mark.asyncio
    async def test_lease_pops_idle_slot(self, metrics):
        destination = FakeDestination()
        pool = UploadSlotPool(destination.get_upload_url, metrics)
        await pool.prefill(2)

        slot = await pool.lease()

        assert slot.upload_url == "https://upload.example/2"
        assert len(pool) == 1
        assert destination.minted == 2

    @pytest.mark.asyncio
    async def test_lease_on_empty_pool_mints(self, metrics, registry):
        destination = FakeDestination()
        pool = UploadSlotPool(destination.get_upload_url, metrics)

        first = await pool.lease()
        second = await pool.lease()

        assert first.upload_url != second.upload_url
        assert len(pool) == 0
        assert registry.get_sample_value(
            "migrator_upload_slots_minted_total", {"reason": "overflow"}
        ) == 2

    @pytest.mark.asyncio
    async def test_release_and_discard(self, metrics, registry):
        destination = FakeDestination()
        pool = UploadSlotPool(destination.get_upload_url, metrics)

        kept = await pool.lease()
        dropped = await pool.lease()
        pool.release(kept)
        pool.discard(dropped, reason="DestinationError")

        assert len(pool) == 1
        assert (await pool.lease()) is kept
        assert registry.get_sample_value("migrator_upload_slots_discarded_total") == 1

    @pytest.mark.asyncio
    async def test_idle_count_matches_lease_release_history(self, metrics):
        destination = FakeDestination()
        pool = UploadSlotPool(destination.get_upload_url, metrics)
        await pool.prefill(3)

        rng = random.Random(7)
        leased = []
        releases = 0
        hits = 0

        for _ in range(200):
            if leased and rng.random() < 0.5:
                pool.release(leased.pop(rng.randrange(len(leased))))
                releases += 1
            else:
                had_idle = len(pool) > 0
                leased.append(await pool.lease())
                hits += 1 if had_idle else 0

        assert len(pool) == 3 + releases - hits

    @pytest.mark.asyncio
    async def test_mint_happens_outside_the_lock(self, metrics):
        gate = asyncio.Event()
        started = []

        async def slow_mint():
            assert not pool.lock.locked()
            started.append(True)
            await gate.wait()
            return await FakeDestination().get_upload_url()

        pool = UploadSlotPool(slow_mint, metrics)

        leases = [asyncio.create_task(pool.lease()) for _ in range(3)]
        while len(started) < 3:
            await asyncio.sleep(0)

        # all three leases are minting at the same time
        assert len(started) == 3
        gate.set()
        slots = await asyncio.gather(*leases)
        assert len(slots) == 3
