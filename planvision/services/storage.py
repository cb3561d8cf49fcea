"""
Storage service for generated images
"""
import asyncio
import time
import uuid
from pathlib import Path
from typing import Optional

import structlog

from planvision.core.config import settings
from planvision.core.exceptions import PersistenceError

logger = structlog.get_logger()

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class StorageService:
    """Writes generated images under a local directory served at a public URL prefix"""

    def __init__(self, storage_dir: str = None, public_url: str = None):
        self.storage_dir = Path(storage_dir or settings.STORAGE_DIR)
        self.public_url_prefix = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/") + "/"

    def get_public_url(self, object_name: str) -> str:
        return f"{self.public_url_prefix}{object_name}"

    async def store(
        self,
        data: bytes,
        content_type: str = "image/jpeg",
        filename: Optional[str] = None,
    ) -> str:
        """Persist bytes and return their public URL"""
        if not filename:
            filename = f"{uuid.uuid4().hex}{_EXTENSIONS.get(content_type, '.bin')}"
        object_name = f"{int(time.time() * 1000)}-{filename}"
        path = self.storage_dir / object_name

        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error("Failed to store generated image", path=str(path), error=str(e))
            raise PersistenceError(f"Failed to store generated image: {e}") from e

        logger.info("Generated image stored", object_name=object_name, size_bytes=len(data))
        return self.get_public_url(object_name)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
