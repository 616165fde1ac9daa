"""Shared fixtures and fakes for the bucket migrator tests"""
from typing import Dict, List, Optional

import pytest
from prometheus_client import CollectorRegistry

from bucket_migrator.config.settings import Settings
from bucket_migrator.models.models import ListingPage, ObjectEntry, UploadSlot
from bucket_migrator.monitoring.metrics import Metrics


def make_pages(*pages) -> List[ListingPage]:
    """Build chained listing pages from lists of (key, size) pairs"""
    result = []
    for index, entries in enumerate(pages):
        token = str(index + 1) if index < len(pages) - 1 else None
        result.append(ListingPage(
            entries=[ObjectEntry(key=key, size=size) for key, size in entries],
            continuation_token=token
        ))
    return result


class FakeSource:
    """In-memory stand-in for the S3 source"""

    def __init__(self, pages: Optional[List[ListingPage]] = None,
                 objects: Optional[Dict[str, object]] = None):
        self.pages = pages or [ListingPage()]
        self.objects = objects or {}
        self.fail_tokens = set()
        self.list_calls = []
        self.downloads = []

    async def list_page(self, continuation_token=None):
        self.list_calls.append(continuation_token)
        if continuation_token in self.fail_tokens:
            raise RuntimeError("listing unavailable")
        index = 0 if continuation_token is None else int(continuation_token)
        return self.pages[index]

    async def download(self, key):
        self.downloads.append(key)
        value = self.objects[key]
        if isinstance(value, Exception):
            raise value
        return value

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class FakeDestination:
    """In-memory stand-in for the B2 client"""

    def __init__(self, failures: Optional[Dict[str, list]] = None):
        self.failures = failures or {}
        self.uploads = []
        self.minted = 0

    async def get_upload_url(self, bucket_id=""):
        self.minted += 1
        return UploadSlot(
            upload_url=f"https://upload.example/{self.minted}",
            authorization_token=f"token-{self.minted}",
            bucket_id=bucket_id
        )

    async def upload_file(self, slot, file_name, body):
        self.uploads.append((slot.upload_url, file_name, body))
        pending = self.failures.get(file_name)
        if pending:
            raise pending.pop(0)
        return {"fileName": file_name}


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return Metrics(registry=registry)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        AWS_BUCKET_NAME="source-bucket",
        B2_BUCKET_ID="destination-bucket",
        B2_KEY_ID="key-id",
        B2_APPLICATION_KEY="application-key",
        SPOOL_PATH=str(tmp_path / ".aws_files"),
        FAILED_TRANSFERS_PATH=str(tmp_path / ".failed_transfers"),
        CREDENTIAL_CACHE_PATH=str(tmp_path / ".blaze_cache"),
        LISTING_PAGE_DELAY=0,
        CONCURRENCY=3,
        UPLOAD_SLOT_POOL_SIZE=2,
        RETRY_MAX_ATTEMPTS=2,
        RETRYABLE_STATUSES=[401, 503],
        PROMETHEUS_PORT=0
    )
