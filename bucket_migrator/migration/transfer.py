"""Transfer of a single object from the source to the destination bucket"""
import time
import structlog

from bucket_migrator.models.models import TransferOutcome, TransferStatus

logger = structlog.get_logger()


class TransferTask:
    """
    Moves one object: download, lease a slot, upload, retry on a transient failure.

    The first attempt uses a slot leased from the pool. Every further attempt
    mints a fresh slot instead, since the failure may be tied to the slot
    itself. A slot that failed an upload is discarded, the slot that
    completed the upload goes back to the pool.
    """

    def __init__(self, key: str, source, destination, pool, retry_policy,
                 failure_sink, metrics):
        self.key = key
        self.source = source
        self.destination = destination
        self.pool = pool
        self.retry_policy = retry_policy
        self.failure_sink = failure_sink
        self.metrics = metrics
        self.attempts = 0

    async def _upload_once(self, body: bytes) -> None:
        if self.attempts == 1:
            slot = await self.pool.lease()
        else:
            self.metrics.upload_retries.inc()
            slot = await self.pool.mint(reason="retry")

        try:
            await self.destination.upload_file(slot, self.key, body)
        except Exception as e:
            self.pool.discard(slot, reason=type(e).__name__)
            raise

        self.pool.release(slot)

    async def transfer(self) -> TransferOutcome:
        """
        Run the transfer and raise on a fatal failure.

        Returns:
            TransferOutcome: SUCCESS, or SKIPPED when the source had no body
        """
        logger.info("transfer.started", key=self.key)

        body = await self.source.download(self.key)
        if body is None:
            logger.info("transfer.skipped", key=self.key, reason="no body")
            return TransferOutcome(key=self.key, status=TransferStatus.SKIPPED)

        async for attempt in self.retry_policy.attempts():
            with attempt:
                self.attempts = attempt.retry_state.attempt_number
                await self._upload_once(body)

        self.metrics.bytes_transferred.inc(len(body))
        logger.info("transfer.completed", key=self.key, size=len(body), attempts=self.attempts)

        return TransferOutcome(
            key=self.key,
            status=TransferStatus.SUCCESS,
            attempts=self.attempts,
            size=len(body)
        )

    async def run(self) -> TransferOutcome:
        """
        Run the transfer, recording the key in the failure sink if it fails.

        Only errors writing the failure sink itself are raised.
        """
        self.metrics.transfers_in_flight.inc()
        start_time = time.monotonic()

        try:
            outcome = await self.transfer()
        except Exception as e:
            logger.error(
                "transfer.failed",
                key=self.key,
                attempts=self.attempts,
                error_type=type(e).__name__,
                error=str(e)
            )
            self.failure_sink.record(self.key)
            outcome = TransferOutcome(
                key=self.key,
                status=TransferStatus.FAILED,
                attempts=self.attempts,
                error_message=str(e)
            )
        finally:
            self.metrics.transfers_in_flight.dec()
            self.metrics.transfer_duration.observe(time.monotonic() - start_time)

        self.metrics.transfers.labels(outcome=outcome.status.value).inc()
        return outcome
