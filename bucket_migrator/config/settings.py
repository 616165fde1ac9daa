""" Configuration settings for the bucket migrator """
import os
from typing import List, Optional
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from bucket_migrator.errors import ConfigurationError

REQUIRED_FIELDS = ("AWS_BUCKET_NAME", "B2_BUCKET_ID", "B2_KEY_ID", "B2_APPLICATION_KEY")


def _statuses_from_env(default: str = "401,503") -> List[int]:
    raw = os.getenv("RETRYABLE_STATUSES", default)
    return [int(part) for part in raw.split(",") if part.strip()]


class Settings(BaseModel):
    """ Configuration settings for the bucket migrator """
    # Source bucket
    AWS_BUCKET_NAME: str = os.getenv("AWS_BUCKET_NAME", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")
    AWS_ENDPOINT_URL: Optional[str] = os.getenv("AWS_ENDPOINT_URL")

    # Destination bucket
    B2_BUCKET_ID: str = os.getenv("B2_BUCKET_ID", "")
    B2_KEY_ID: str = os.getenv("B2_KEY_ID", "")
    B2_APPLICATION_KEY: str = os.getenv("B2_APPLICATION_KEY", "")
    B2_API_URL: str = os.getenv("B2_API_URL", "https://api.backblazeb2.com/b2api/v2")

    # Local state files
    SPOOL_PATH: str = os.getenv("SPOOL_PATH", ".aws_files")
    FAILED_TRANSFERS_PATH: str = os.getenv("FAILED_TRANSFERS_PATH", ".failed_transfers")
    CREDENTIAL_CACHE_PATH: str = os.getenv("CREDENTIAL_CACHE_PATH", ".blaze_cache")
    CREDENTIAL_CACHE_TTL: int = int(os.getenv("CREDENTIAL_CACHE_TTL", str(60 * 60 * 24)))

    # Transfer pipeline
    CONCURRENCY: int = int(os.getenv("CONCURRENCY", "10"))
    UPLOAD_SLOT_POOL_SIZE: int = int(os.getenv("UPLOAD_SLOT_POOL_SIZE", "20"))
    LISTING_PAGE_DELAY: float = float(os.getenv("LISTING_PAGE_DELAY", "1.0"))
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "300"))
    RETRY_MAX_ATTEMPTS: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "2"))
    RETRYABLE_STATUSES: List[int] = _statuses_from_env()
    RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "0"))

    # Observability
    PROMETHEUS_PORT: int = int(os.getenv("PROMETHEUS_PORT", "0"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")

    @field_validator("CONCURRENCY", "UPLOAD_SLOT_POOL_SIZE", "RETRY_MAX_ATTEMPTS")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("LISTING_PAGE_DELAY", "REQUEST_TIMEOUT", "RETRY_BACKOFF")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @model_validator(mode="after")
    def _check_required(self) -> "Settings":
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise ValueError(f"missing required settings: {', '.join(missing)}")
        return self


def load_settings(**overrides) -> Settings:
    """ Build the settings, turning validation failures into a ConfigurationError. """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
