"""Configuration module for the bucket migrator."""

from bucket_migrator.config.settings import Settings, load_settings

__all__ = ['Settings', 'load_settings']
