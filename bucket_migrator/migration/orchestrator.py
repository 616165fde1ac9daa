"""Bounded-concurrency fan-out of transfer tasks"""
import asyncio
import time
from typing import Awaitable, Callable, Iterable, Iterator
import structlog

from bucket_migrator.models.models import RunSummary, TransferOutcome

logger = structlog.get_logger()


class TransferOrchestrator:
    """
    Runs at most `concurrency` transfers at the same time over a key sequence.

    A fixed set of workers pull keys from one shared iterator, so keys are
    read lazily and each key is handed to exactly one transfer. Completion
    order is not defined. A failing transfer never stops the others; only an
    exception escaping a transfer (a failure sink I/O error) aborts the run.
    """

    def __init__(self, run_transfer: Callable[[str], Awaitable[TransferOutcome]],
                 concurrency: int = 10):
        """
        Args:
            run_transfer: Coroutine function running one transfer for a key
            concurrency: Maximum number of transfers in flight
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.run_transfer = run_transfer
        self.concurrency = concurrency

    async def _worker(self, worker_id: int, keys: Iterator[str], summary: RunSummary) -> None:
        for key in keys:
            outcome = await self.run_transfer(key)
            summary.add(outcome)

        logger.debug("orchestrator.worker_done", worker_id=worker_id)

    async def run(self, keys: Iterable[str]) -> RunSummary:
        """
        Transfer every key and wait for all transfers to finish.

        Returns:
            RunSummary: Totals per outcome
        """
        start_time = time.monotonic()
        summary = RunSummary()
        key_iterator = iter(keys)

        logger.info("orchestrator.started", concurrency=self.concurrency)

        workers = [
            asyncio.create_task(self._worker(worker_id, key_iterator, summary))
            for worker_id in range(self.concurrency)
        ]

        try:
            await asyncio.gather(*workers)
        except BaseException:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        logger.info(
            "orchestrator.finished",
            total=summary.total,
            succeeded=summary.succeeded,
            skipped=summary.skipped,
            failed=summary.failed,
            retried=summary.retried,
            elapsed_seconds=round(time.monotonic() - start_time, 3)
        )
        return summary
