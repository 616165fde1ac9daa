"""S3 source bucket integration for the bucket migrator"""
import asyncio
from typing import Optional
import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from bucket_migrator.errors import SourceError
from bucket_migrator.models.models import ListingPage, ObjectEntry

logger = structlog.get_logger()


class S3Source:
    """Lists and downloads objects from the source S3 bucket"""
    def __init__(self, bucket_name: str, region_name: str = "us-east-1",
                 endpoint_url: Optional[str] = None, timeout: float = 300.0):
        """
        Initialize the S3 source.

        Args:
            bucket_name: Bucket to migrate objects out of
            region_name: AWS region of the bucket
            endpoint_url: Optional endpoint override (S3-compatible stores)
            timeout: Seconds to wait for any single S3 call
        """
        self.bucket_name = bucket_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._session = None
        self._client_cm = None
        self._client = None

    async def open(self):
        """Create the underlying aioboto3 client"""
        if self._client is None:
            self._session = aioboto3.Session()
            self._client_cm = self._session.client(
                "s3",
                region_name=self.region_name,
                endpoint_url=self.endpoint_url
            )
            self._client = await self._client_cm.__aenter__()
        return self

    async def close(self):
        """Close the underlying aioboto3 client"""
        if self._client_cm is not None:
            await self._client_cm.__aexit__(None, None, None)
        self._client_cm = None
        self._client = None

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def list_page(self, continuation_token: Optional[str] = None) -> ListingPage:
        """ Fetch one page of the bucket listing. Errors are raised to the caller. """
        params = {"Bucket": self.bucket_name}
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        response = await asyncio.wait_for(
            self._client.list_objects_v2(**params),
            timeout=self.timeout
        )

        entries = [
            ObjectEntry(key=item.get("Key"), size=item.get("Size") or 0)
            for item in response.get("Contents") or []
        ]

        logger.debug("s3.list_page", entries=len(entries), truncated=response.get("IsTruncated", False))

        return ListingPage(
            entries=entries,
            continuation_token=response.get("NextContinuationToken")
        )

    async def download(self, key: str) -> Optional[bytes]:
        """
        Download the full body of an object.

        Returns:
            The object bytes, or None if S3 returned no body for the key

        Raises:
            SourceError: If S3 rejected the request
            asyncio.TimeoutError: If the call did not finish in time
        """
        try:
            response = await asyncio.wait_for(
                self._client.get_object(Bucket=self.bucket_name, Key=key),
                timeout=self.timeout
            )

            body = response.get("Body")
            if body is None:
                return None

            return await asyncio.wait_for(body.read(), timeout=self.timeout)

        except (BotoCoreError, ClientError) as e:
            raise SourceError(key, str(e)) from e
