"""Transfer pipeline for the bucket migrator."""

from bucket_migrator.migration.listing import ListingEnumerator
from bucket_migrator.migration.spool import SpoolReader, SpoolWriter
from bucket_migrator.migration.slot_pool import UploadSlotPool
from bucket_migrator.migration.retry import RetryPolicy
from bucket_migrator.migration.transfer import TransferTask
from bucket_migrator.migration.orchestrator import TransferOrchestrator
from bucket_migrator.migration.failure_sink import FailureSink

__all__ = [
    'ListingEnumerator',
    'SpoolReader',
    'SpoolWriter',
    'UploadSlotPool',
    'RetryPolicy',
    'TransferTask',
    'TransferOrchestrator',
    'FailureSink'
]
