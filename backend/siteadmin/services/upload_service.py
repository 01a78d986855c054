"""
SiteAdmin Backend - Image Upload Service
========================================

What:  Validates and stores uploaded images, returns their public file name.
How:   Checks the declared content type, reads the upload with a hard size cap,
       then writes it under UPLOAD_DIR with a generated name. Nothing touches
       the disk until both checks passed.
Who:   Called by POST /api/upload-image.

Checks (in order):
    1. Content type:  declared type must start with "image/"
    2. Size:          at most MAX_UPLOAD_SIZE bytes (5MB), counted while reading
    3. Store:         exclusive create of <ms-timestamp>-<0..1e9><ext>

File names:
    1712051234567-483920117.jpg
    The millisecond timestamp orders uploads, the random suffix separates
    uploads within one millisecond. The file is opened with mode "xb", so an
    existing name is never overwritten; on a clash a new suffix is drawn.
"""

import asyncio
import logging
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Protocol

import aiofiles

from siteadmin.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Read the upload in chunks so the size cap is enforced without buffering it all
CHUNK_SIZE = 64 * 1024
MAX_NAME_ATTEMPTS = 5
RANDOM_CEILING = 10**9


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


def file_extension(filename: Optional[str]) -> str:
    """
    Extension of the client's file name, dot included ("" when there is none).

    Only the final path component counts, so "../../x.png" yields ".png".
    """
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    suffix = PurePosixPath(name).suffix
    if not suffix or not suffix[1:].isalnum():
        return ""
    return suffix


def generate_filename(extension: str, now: Optional[Callable[[], float]] = None) -> str:
    """<millisecond-timestamp>-<random integer 0..1e9><extension>"""
    millis = int((now or time.time)() * 1000)
    return f"{millis}-{secrets.randbelow(RANDOM_CEILING + 1)}{extension}"


class UploadService:
    """
    Stores validated images under the public upload directory.

    Args:
        upload_dir:  Directory mounted at /uploads
        max_size:    Size ceiling in bytes
        io_timeout:  Seconds allowed for writing one file
    """

    def __init__(self, upload_dir: str, max_size: int = 5 * 1024 * 1024, io_timeout: float = 5.0):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_size = max_size
        self.io_timeout = io_timeout

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate_content_type(self, content_type: Optional[str]) -> None:
        """Reject anything whose declared type is not image/*."""
        if not (content_type or "").lower().startswith("image/"):
            raise ValidationError(
                message="Endast bildfiler tillåtna.",
                field="image",
                context={"content_type": content_type},
            )

    def _too_large(self, size: int) -> ValidationError:
        max_mb = self.max_size / (1024 * 1024)
        return ValidationError(
            message=f"Filen är för stor (max {max_mb:.0f} MB).",
            field="image",
            context={"max_size": self.max_size, "size": size},
        )

    async def read_limited(self, upload: AsyncReadable, declared_size: Optional[int] = None) -> bytes:
        """
        Read the whole upload, failing as soon as it exceeds max_size.

        declared_size (multipart part size, when known) allows rejecting
        before reading anything.
        """
        if declared_size is not None and declared_size > self.max_size:
            raise self._too_large(declared_size)

        chunks = []
        total = 0
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_size:
                raise self._too_large(total)
            chunks.append(chunk)
        return b"".join(chunks)

    async def _write_new(self, content: bytes, extension: str) -> str:
        for _ in range(MAX_NAME_ATTEMPTS):
            filename = generate_filename(extension)
            path = self.upload_dir / filename
            try:
                async with aiofiles.open(path, "xb") as f:
                    await f.write(content)
            except FileExistsError:
                logger.debug("Upload name clash on %s, drawing a new one", filename)
                continue
            except BaseException:
                # Timeout or write failure: no partial image stays under /uploads
                path.unlink(missing_ok=True)
                raise
            return filename
        raise OSError(f"Could not allocate a unique upload name after {MAX_NAME_ATTEMPTS} attempts")

    async def store(self, content: bytes, original_filename: Optional[str]) -> str:
        """
        Write validated content to UPLOAD_DIR.

        Returns:
            The generated file name (relative to UPLOAD_DIR).

        OS errors propagate to the global 500 handler.
        """
        extension = file_extension(original_filename)
        filename = await asyncio.wait_for(
            self._write_new(content, extension), timeout=self.io_timeout
        )
        logger.info("Image stored: %s (%d bytes)", filename, len(content))
        return filename

    async def validate_and_store(
        self,
        upload: AsyncReadable,
        filename: Optional[str],
        content_type: Optional[str],
        declared_size: Optional[int] = None,
    ) -> str:
        """
        Complete upload pipeline: content type → size → store.

        Returns:
            The generated file name.

        Raises:
            ValidationError: Not an image, or larger than max_size
        """
        self.validate_content_type(content_type)
        content = await self.read_limited(upload, declared_size)
        return await self.store(content, filename)
