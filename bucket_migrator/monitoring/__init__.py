"""Monitoring module for the bucket migrator."""

from bucket_migrator.monitoring.metrics import Metrics

__all__ = ['Metrics']
