""" Models for the bucket migrator """
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ObjectEntry(BaseModel):
    """One object as reported by the source listing"""
    key: Optional[str] = None
    size: int = 0

    @property
    def is_transferable(self) -> bool:
        """ Only objects with a key and a non-empty body are worth spooling. """
        return bool(self.key) and self.size > 0


class ListingPage(BaseModel):
    """A page of the source listing plus the cursor for the next one"""
    entries: List[ObjectEntry] = Field(default_factory=list)
    continuation_token: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.continuation_token is None


class UploadSlot(BaseModel):
    """A leased B2 upload URL and the token that goes with it"""
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadUrl")
    authorization_token: str = Field(alias="authorizationToken")
    bucket_id: str = Field(default="", alias="bucketId")


class B2Authorization(BaseModel):
    """Account authorization returned by b2_authorize_account"""
    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    authorization_token: str = Field(alias="authorizationToken")
    api_url: str = Field(alias="apiUrl")
    download_url: str = Field(alias="downloadUrl")
    recommended_part_size: int = Field(default=0, alias="recommendedPartSize")
    absolute_minimum_part_size: int = Field(default=0, alias="absoluteMinimumPartSize")


class CredentialCache(BaseModel):
    """On-disk cache of the B2 authorization"""
    # seconds since epoch
    last_updated: int
    auth: B2Authorization


class TransferStatus(str, Enum):
    """Enum representing how a single transfer ended"""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class TransferOutcome(BaseModel):
    """Result of one transfer task"""
    key: str
    status: TransferStatus
    attempts: int = 0
    size: int = 0
    error_message: Optional[str] = None


class SpoolResult(BaseModel):
    """What the listing enumerator wrote to the spool"""
    scanned: int = 0
    spooled: int = 0
    complete: bool = True


class RunSummary(BaseModel):
    """Totals for one migration run"""
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    retried: int = 0
    listing_complete: bool = True

    def add(self, outcome: TransferOutcome) -> None:
        self.total += 1
        if outcome.status == TransferStatus.SUCCESS:
            self.succeeded += 1
        elif outcome.status == TransferStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

        if outcome.attempts > 1:
            self.retried += 1
