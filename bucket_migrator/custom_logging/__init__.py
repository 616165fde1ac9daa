"""Custom logging module for the bucket migrator."""

from bucket_migrator.custom_logging.structured import configure_logging

__all__ = ['configure_logging']
