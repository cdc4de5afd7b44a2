"""
Local image storage for post attachments.

Images are written under UPLOAD_DIR with a random file name and
served by the API under UPLOAD_URL_PREFIX.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from core.exceptions import InvalidUploadError
from core.logging import get_logger


logger = get_logger(__name__)


ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}


class ImageStore:
    """Saves uploaded images to a local directory."""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads", max_bytes: int = 5 * 1024 * 1024):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _extension_for(filename: Optional[str], content_type: Optional[str]) -> str:
        if not content_type or not content_type.startswith("image/"):
            raise InvalidUploadError("Only image files are allowed.")

        suffix = Path(filename or "").suffix.lower()
        if suffix in ALLOWED_EXTENSIONS:
            return suffix
        return CONTENT_TYPE_EXTENSIONS.get(content_type, ".img")

    async def save(self, upload) -> str:
        """
        Store an uploaded file and return its public URL.

        Args:
            upload: a starlette UploadFile (anything with filename,
                content_type and an async read(size))

        Raises:
            InvalidUploadError: not an image, or larger than max_bytes
            OSError: the file could not be written
        """
        extension = self._extension_for(upload.filename, upload.content_type)
        self.ensure_directory()

        name = f"{uuid.uuid4().hex}{extension}"
        path = self.upload_dir / name
        written = 0

        try:
            async with aiofiles.open(path, "wb") as out:
                while True:
                    chunk = await upload.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise InvalidUploadError(
                            f"Image exceeds the {self.max_bytes // (1024 * 1024)} MB limit."
                        )
                    await out.write(chunk)
        except BaseException:
            if os.path.exists(path):
                await aiofiles.os.remove(path)
            raise

        logger.info("Image stored", file=name, size=written)
        return f"{self.url_prefix}/{name}"

    async def delete(self, url: Optional[str]) -> bool:
        """Remove a previously stored image. Foreign URLs are ignored."""
        if not url or not url.startswith(f"{self.url_prefix}/"):
            return False

        path = self.upload_dir / url[len(self.url_prefix) + 1:]
        if path.parent != self.upload_dir or not os.path.exists(path):
            return False

        await aiofiles.os.remove(path)
        logger.debug("Image removed", file=path.name)
        return True
