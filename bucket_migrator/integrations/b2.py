"""Backblaze B2 integration for the bucket migrator"""
import base64
import hashlib
import httpx
import structlog

from bucket_migrator.errors import AuthorizationError, DestinationError, SlotMintError
from bucket_migrator.models.models import B2Authorization, UploadSlot

logger = structlog.get_logger()


def encode_file_name(file_name: str) -> str:
    """ B2 rejects backslashes in names and wants spaces percent-encoded in the header. """
    return file_name.replace("\\", "-").replace(" ", "%20")


def content_sha1(body: bytes) -> str:
    """ Hex SHA-1 of the body, sent as X-Bz-Content-Sha1. """
    return hashlib.sha1(body).hexdigest()


def _destination_error(response: httpx.Response) -> DestinationError:
    """ Build a DestinationError from a failed B2 response. """
    try:
        data = response.json()
    except ValueError:
        return DestinationError(response.status_code, "", response.text)

    return DestinationError(
        int(data.get("status", response.status_code)),
        data.get("code", ""),
        data.get("message", "")
    )


class B2Credentials:
    """ Application key used to authorize the B2 account. """
    def __init__(self, key_id: str, application_key: str,
                 api_url: str = "https://api.backblazeb2.com/b2api/v2"):
        self.key_id = key_id
        self.application_key = application_key
        self.api_url = api_url.rstrip("/")

    def auth_string(self) -> str:
        token = base64.b64encode(f"{self.key_id}:{self.application_key}".encode("utf-8"))
        return f"Basic {token.decode('ascii')}"

    async def authorize(self, http: httpx.AsyncClient) -> B2Authorization:
        """ Call b2_authorize_account and return the account authorization. """
        logger.info("b2.authorize", key_id=self.key_id)

        try:
            response = await http.get(
                f"{self.api_url}/b2_authorize_account",
                headers={"Authorization": self.auth_string()}
            )
        except httpx.HTTPError as e:
            raise AuthorizationError(f"Authorization request failed: {e}") from e

        if response.is_success:
            return B2Authorization.model_validate(response.json())

        logger.error("b2.authorize_failed", status=response.status_code, body=response.text)
        raise AuthorizationError(f"Authorization failed with status {response.status_code}")


class B2Client:
    """Handles the B2 API calls made while transferring objects"""
    def __init__(self, auth: B2Authorization, http: httpx.AsyncClient):
        self.auth = auth
        self.http = http

    async def get_upload_url(self, bucket_id: str) -> UploadSlot:
        """ Lease a fresh upload URL for the bucket. """
        try:
            response = await self.http.post(
                f"{self.auth.api_url}/b2api/v2/b2_get_upload_url",
                headers={"Authorization": self.auth.authorization_token},
                json={"bucketId": bucket_id}
            )
        except httpx.HTTPError as e:
            raise SlotMintError(f"b2_get_upload_url request failed: {e}") from e

        if not response.is_success:
            raise SlotMintError(f"b2_get_upload_url failed: {response.text}")

        return UploadSlot.model_validate(response.json())

    async def upload_file(self, slot: UploadSlot, file_name: str, body: bytes) -> None:
        """
        Upload a whole object through a leased upload URL.

        Raises:
            DestinationError: If B2 answered with a structured failure
            httpx.TransportError: If the request itself failed
        """
        response = await self.http.post(
            slot.upload_url,
            headers={
                "Authorization": slot.authorization_token,
                "Content-Type": "b2/x-auto",
                "Content-Length": str(len(body)),
                "X-Bz-File-Name": encode_file_name(file_name),
                "X-Bz-Content-Sha1": content_sha1(body)
            },
            content=body
        )

        if not response.is_success:
            raise _destination_error(response)

        logger.debug("b2.uploaded", file_name=file_name, bytes=len(body))
