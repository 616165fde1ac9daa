"""Tests for the S3 source integration with a mocked aioboto3 client"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from bucket_migrator.errors import SourceError
from bucket_migrator.integrations.s3 import S3Source


def make_source(client, timeout=5.0):
    source = S3Source(bucket_name="source-bucket", timeout=timeout)
    source._client = client
    return source


class TestS3Source:
    """Tests for S3Source"""

    @pytest.mark.asyncio
    async def test_open_and_close_use_aioboto3_session(self):
        with patch("bucket_migrator.integrations.s3.aioboto3") as mock_aioboto3:
            mock_client = AsyncMock()
            mock_client_cm = AsyncMock()
            mock_client_cm.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client_cm.__aexit__ = AsyncMock(return_value=None)
            mock_session = MagicMock()
            mock_session.client = MagicMock(return_value=mock_client_cm)
            mock_aioboto3.Session = MagicMock(return_value=mock_session)

            async with S3Source("source-bucket", region_name="eu-west-1") as source:
                assert source._client is mock_client

            mock_session.client.assert_called_once_with("s3", region_name="eu-west-1", endpoint_url=None)
            mock_client_cm.__aexit__.assert_awaited_once()
            assert source._client is None

    @pytest.mark.asyncio
    async def test_list_page_maps_contents(self):
        client = AsyncMock()
        client.list_objects_v2.return_value = {
            "Contents": [{"Key": "a", "Size": 10}, {"Key": "b", "Size": 0}],
            "IsTruncated": True,
            "NextContinuationToken": "next"
        }

        page = await make_source(client).list_page("previous")

        client.list_objects_v2.assert_awaited_once_with(Bucket="source-bucket", ContinuationToken="previous")
        assert [(e.key, e.size) for e in page.entries] == [("a", 10), ("b", 0)]
        assert page.continuation_token == "next"

    @pytest.mark.asyncio
    async def test_list_page_without_contents_is_final(self):
        client = AsyncMock()
        client.list_objects_v2.return_value = {"IsTruncated": False}

        page = await make_source(client).list_page()

        client.list_objects_v2.assert_awaited_once_with(Bucket="source-bucket")
        assert page.entries == []
        assert page.is_final

    @pytest.mark.asyncio
    async def test_download_reads_body(self):
        body = AsyncMock()
        body.read.return_value = b"content"
        client = AsyncMock()
        client.get_object.return_value = {"Body": body}

        data = await make_source(client).download("a")

        client.get_object.assert_awaited_once_with(Bucket="source-bucket", Key="a")
        assert data == b"content"

    @pytest.mark.asyncio
    async def test_download_without_body_returns_none(self):
        client = AsyncMock()
        client.get_object.return_value = {}

        assert await make_source(client).download("a") is None

    @pytest.mark.asyncio
    async def test_download_client_error_becomes_source_error(self):
        client = AsyncMock()
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "GetObject"
        )

        with pytest.raises(SourceError) as exc_info:
            await make_source(client).download("secret/key")

        assert exc_info.value.key == "secret/key"

    @pytest.mark.asyncio
    async def test_download_times_out(self):
        async def hang(**kwargs):
            await asyncio.sleep(10)

        client = MagicMock()
        client.get_object = hang

        with pytest.raises(asyncio.TimeoutError):
            await make_source(client, timeout=0.01).download("a")
