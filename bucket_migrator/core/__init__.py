"""Core module for the bucket migrator."""

from bucket_migrator.core.migrator import BucketMigrator

__all__ = ['BucketMigrator']
