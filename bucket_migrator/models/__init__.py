"""Data models for the bucket migrator."""

from bucket_migrator.models.models import (
    ObjectEntry,
    ListingPage,
    UploadSlot,
    B2Authorization,
    CredentialCache,
    TransferStatus,
    TransferOutcome,
    SpoolResult,
    RunSummary
)

__all__ = [
    'ObjectEntry',
    'ListingPage',
    'UploadSlot',
    'B2Authorization',
    'CredentialCache',
    'TransferStatus',
    'TransferOutcome',
    'SpoolResult',
    'RunSummary'
]
