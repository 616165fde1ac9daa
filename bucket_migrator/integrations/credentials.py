"""On-disk cache of the B2 account authorization"""
import time
from typing import Optional
import httpx
import structlog

from bucket_migrator.integrations.b2 import B2Credentials
from bucket_migrator.models.models import B2Authorization, CredentialCache

logger = structlog.get_logger()


def read_credential_cache(path: str) -> Optional[CredentialCache]:
    """ Load the cache file, or None when it is missing or unreadable. """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return CredentialCache.model_validate_json(f.read())
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning("credentials.cache_unreadable", path=path, error=str(e))
        return None


def write_credential_cache(path: str, cache: CredentialCache) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(cache.model_dump_json(by_alias=True))


async def get_or_update_credential_cache(settings, http: httpx.AsyncClient,
                                         now: Optional[int] = None) -> B2Authorization:
    """
    Return a B2 authorization, reusing the cached one while it is fresh.

    Args:
        settings: Migrator settings
        http: Client used when a new authorization is needed
        now: Current time in epoch seconds (defaults to time.time())

    Returns:
        B2Authorization: The cached or freshly issued authorization
    """
    current = int(time.time()) if now is None else now
    cached = read_credential_cache(settings.CREDENTIAL_CACHE_PATH)

    if cached is not None:
        age = current - cached.last_updated
        if 0 <= age <= settings.CREDENTIAL_CACHE_TTL:
            logger.info("credentials.cache_hit", age_seconds=age)
            return cached.auth

        logger.info("credentials.cache_expired", age_seconds=age)

    credentials = B2Credentials(settings.B2_KEY_ID, settings.B2_APPLICATION_KEY, settings.B2_API_URL)
    auth = await credentials.authorize(http)

    write_credential_cache(
        settings.CREDENTIAL_CACHE_PATH,
        CredentialCache(last_updated=current, auth=auth)
    )
    logger.info("credentials.cache_written", path=settings.CREDENTIAL_CACHE_PATH)

    return auth
