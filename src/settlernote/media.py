"""Image storage for document bodies."""

from __future__ import annotations

import hashlib
from pathlib import Path

from settlernote.config import (
    ALLOWED_IMAGE_TYPES,
    IMAGE_EXTENSIONS,
    SETTLERNOTE_MAX_UPLOAD_BYTES,
    SETTLERNOTE_MEDIA_PATH,
)
from settlernote.exceptions import ValidationError
from settlernote.fs_utils import list_files_async, mkdir_async, write_bytes_async
from settlernote.schemas import MediaItem
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

MEDIA_URL_PREFIX = "/media/"


class MediaStore:
    """Images kept in one local directory and served under ``/media/``."""

    def __init__(self, root: Path = SETTLERNOTE_MEDIA_PATH, *, max_bytes: int = SETTLERNOTE_MAX_UPLOAD_BYTES) -> None:
        self.root = root
        self.max_bytes = max_bytes

    async def list(self) -> list[MediaItem]:
        """Every stored image; an absent directory simply has none."""
        names = await list_files_async(self.root)
        return [
            MediaItem(name=name, url=f"{MEDIA_URL_PREFIX}{name}")
            for name in names
            if name.lower().endswith(IMAGE_EXTENSIONS)
        ]

    async def upload(self, filename: str, data: bytes, content_type: str | None) -> MediaItem:
        """Store an image under its content hash.

        Raises:
            ValidationError: If the content type is not an image type or the
                payload exceeds the size ceiling.
        """
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Invalid file type. Only images are allowed.")
        if len(data) > self.max_bytes:
            raise ValidationError(f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB.")

        digest = hashlib.md5(data).hexdigest()  # noqa: S324 - content addressing, not security
        extension = filename.rsplit(".", 1)[-1] if "." in filename else ""
        if not (extension.isascii() and extension.isalnum()):
            extension = content_type.split("/", 1)[1]
        name = f"{digest}.{extension.lower()}"

        await mkdir_async(self.root, parents=True, exist_ok=True)
        await write_bytes_async(self.root / name, data)
        logger.info("Image uploaded", extra={"media_name": name, "size": len(data)})
        return MediaItem(name=name, url=f"{MEDIA_URL_PREFIX}{name}")
