"""Storage provider integrations for the bucket migrator."""

from bucket_migrator.integrations.s3 import S3Source
from bucket_migrator.integrations.b2 import B2Client, B2Credentials, encode_file_name, content_sha1
from bucket_migrator.integrations.credentials import get_or_update_credential_cache

__all__ = [
    'S3Source',
    'B2Client',
    'B2Credentials',
    'encode_file_name',
    'content_sha1',
    'get_or_update_credential_cache'
]
