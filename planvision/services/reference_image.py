"""
Download of reference images passed to the generative model
"""
import asyncio
from typing import NamedTuple, Optional

import aiohttp
import structlog

from planvision.core.config import settings
from planvision.core.exceptions import ReferenceFetchError

logger = structlog.get_logger()

DEFAULT_MIME_TYPE = "image/jpeg"


class ReferenceImage(NamedTuple):
    data: bytes
    content_type: str


def normalize_content_type(raw: Optional[str]) -> str:
    """Strip parameters and fall back to JPEG for missing or generic types"""
    mime_type = raw.split(";")[0].strip().lower() if raw else ""
    if not mime_type or mime_type == "application/octet-stream":
        return DEFAULT_MIME_TYPE
    return mime_type


class ReferenceImageFetcher:
    """Fetches source images over HTTP"""

    def __init__(self, timeout: int = None):
        self.timeout = timeout or settings.REFERENCE_FETCH_TIMEOUT

    async def fetch(self, url: str) -> ReferenceImage:
        logger.info("Downloading reference image", url=url)
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise ReferenceFetchError(
                            f"Failed to fetch reference image: {response.status} {response.reason}",
                            status_code=response.status,
                        )
                    data = await response.read()
                    content_type = normalize_content_type(response.headers.get("Content-Type"))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Reference image download failed", url=url, error=str(e))
            raise ReferenceFetchError(f"Failed to fetch reference image: {e}") from e

        logger.info("Reference image downloaded", url=url, content_type=content_type, size_bytes=len(data))
        return ReferenceImage(data=data, content_type=content_type)
