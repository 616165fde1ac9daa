"""Core service module for the bucket migrator"""
import os
import time
from functools import partial
import httpx
import structlog
from prometheus_client import start_http_server

from bucket_migrator.config.settings import Settings, load_settings
from bucket_migrator.custom_logging import configure_logging
from bucket_migrator.integrations.b2 import B2Client
from bucket_migrator.integrations.credentials import get_or_update_credential_cache
from bucket_migrator.integrations.s3 import S3Source
from bucket_migrator.migration.failure_sink import FailureSink
from bucket_migrator.migration.listing import ListingEnumerator
from bucket_migrator.migration.orchestrator import TransferOrchestrator
from bucket_migrator.migration.retry import RetryPolicy
from bucket_migrator.migration.slot_pool import UploadSlotPool
from bucket_migrator.migration.spool import SpoolReader, SpoolWriter
from bucket_migrator.migration.transfer import TransferTask
from bucket_migrator.models.models import RunSummary
from bucket_migrator.monitoring.metrics import Metrics

logger = structlog.get_logger()


class BucketMigrator:
    """Migrates every object of an S3 bucket into a B2 bucket"""
    def __init__(self, settings: Settings = None, metrics: Metrics = None):
        self.settings = settings or load_settings()
        self.retry_policy = RetryPolicy.from_settings(self.settings)

        self._initialize_logging()
        self.metrics = metrics or Metrics()

    def _initialize_logging(self):
        """Initialize logging"""
        configure_logging(self.settings.LOG_LEVEL, self.settings.LOG_JSON)

    def _create_source(self) -> S3Source:
        return S3Source(
            bucket_name=self.settings.AWS_BUCKET_NAME,
            region_name=self.settings.AWS_REGION,
            endpoint_url=self.settings.AWS_ENDPOINT_URL,
            timeout=self.settings.REQUEST_TIMEOUT
        )

    def _create_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.REQUEST_TIMEOUT)

    async def build_spool(self, source) -> tuple:
        """
        Make sure a spool exists, listing the source bucket when needed.

        Returns:
            tuple: (path of the spool to read, whether the listing is complete)
        """
        spool_path = self.settings.SPOOL_PATH

        if os.path.exists(spool_path):
            logger.info("spool.reused", path=spool_path)
            return spool_path, True

        enumerator = ListingEnumerator(source, self.metrics, self.settings.LISTING_PAGE_DELAY)

        with SpoolWriter(spool_path) as writer:
            result = await enumerator.drain_to_spool(writer)

            if result.complete:
                return writer.commit(), True

            logger.warning(
                "listing.incomplete",
                spooled=result.spooled,
                error=str(enumerator.last_error)
            )
            return writer.close(), False

    async def transfer_spool(self, spool_path: str, source, destination) -> RunSummary:
        """ Transfer every key of the spool to the destination bucket. """
        pool = UploadSlotPool(
            partial(destination.get_upload_url, self.settings.B2_BUCKET_ID),
            self.metrics,
            capacity=self.settings.UPLOAD_SLOT_POOL_SIZE
        )

        with FailureSink(self.settings.FAILED_TRANSFERS_PATH) as failure_sink:
            await pool.prefill()

            async def run_transfer(key):
                task = TransferTask(
                    key, source, destination, pool,
                    self.retry_policy, failure_sink, self.metrics
                )
                return await task.run()

            orchestrator = TransferOrchestrator(run_transfer, self.settings.CONCURRENCY)
            return await orchestrator.run(SpoolReader(spool_path))

    async def run(self) -> RunSummary:
        """Run one migration from start to finish"""
        start_time = time.monotonic()
        logger.info(
            "migrator.starting",
            source_bucket=self.settings.AWS_BUCKET_NAME,
            destination_bucket=self.settings.B2_BUCKET_ID
        )

        if self.settings.PROMETHEUS_PORT:
            start_http_server(self.settings.PROMETHEUS_PORT)
            logger.info("metrics.server_started", port=self.settings.PROMETHEUS_PORT)

        async with self._create_http_client() as http, self._create_source() as source:
            spool_path, listing_complete = await self.build_spool(source)

            auth = await get_or_update_credential_cache(self.settings, http)
            destination = B2Client(auth, http)

            summary = await self.transfer_spool(spool_path, source, destination)

        summary.listing_complete = listing_complete

        logger.info(
            "migrator.finished",
            elapsed_seconds=round(time.monotonic() - start_time, 3),
            **summary.model_dump()
        )
        return summary
