"""Migrates the objects of an S3 bucket into a Backblaze B2 bucket."""

__version__ = "0.1.0"
