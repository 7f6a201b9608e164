"""
Disk storage for uploaded pet images.
"""

import asyncio
import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from ..exceptions import ValidationException

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
MAX_NAME_LENGTH = 100
MAX_IDEMPOTENCY_KEYS = 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(name: str) -> str:
    """
    Reduce a client-supplied file name to a safe basename.

    Directory parts are dropped and anything outside ``[A-Za-z0-9._-]``
    becomes ``_``.
    """
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    if len(cleaned) > MAX_NAME_LENGTH:
        stem, dot, ext = cleaned.rpartition(".")
        cleaned = f"{stem[: MAX_NAME_LENGTH - len(ext) - 1]}{dot}{ext}" if dot else cleaned[:MAX_NAME_LENGTH]
    return cleaned or "upload"


def is_image_name(name: str) -> bool:
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


@dataclass(frozen=True)
class StoredImage:
    filename: str
    url: str


@dataclass(frozen=True)
class StoredFile:
    """Listing entry for a stored file."""

    name: str
    size: int
    modified: datetime
    is_image: bool


class ImageStorage:
    """
    Stores images as ``{timestamp_ms}-{sanitized name}`` under one directory.

    Uploads carrying an idempotency key are remembered in memory, up to
    ``max_idempotency_keys`` of the most recently used keys; repeating a
    remembered key returns the first stored file.
    """

    def __init__(
        self,
        directory: str,
        public_url: str,
        max_bytes: int,
        max_idempotency_keys: int = MAX_IDEMPOTENCY_KEYS,
    ):
        self.directory = Path(directory)
        self.public_url = public_url.rstrip("/")
        self.max_bytes = max_bytes
        self.max_idempotency_keys = max_idempotency_keys
        self._idempotent: "OrderedDict[str, StoredImage]" = OrderedDict()
        self._lock = asyncio.Lock()
        self.directory.mkdir(parents=True, exist_ok=True)

    def url_for(self, filename: str) -> str:
        return f"{self.public_url}/images/{filename}"

    async def save(
        self, original_name: str, data: bytes, idempotency_key: Optional[str] = None
    ) -> StoredImage:
        """
        Write an uploaded image to disk.

        Raises:
            ValidationException: If the file is not an image or is too large
        """
        if not is_image_name(original_name):
            raise ValidationException(
                "Only image files are allowed (jpg, jpeg, png, gif, webp)", field="image"
            )
        if len(data) > self.max_bytes:
            raise ValidationException(
                f"File exceeds the {self.max_bytes} byte limit", field="image"
            )

        async with self._lock:
            if idempotency_key and idempotency_key in self._idempotent:
                self._idempotent.move_to_end(idempotency_key)
                return self._idempotent[idempotency_key]

            filename = f"{int(time.time() * 1000)}-{sanitize_filename(original_name)}"
            await run_in_threadpool((self.directory / filename).write_bytes, data)
            stored = StoredImage(filename=filename, url=self.url_for(filename))
            if idempotency_key:
                self._idempotent[idempotency_key] = stored
                if len(self._idempotent) > self.max_idempotency_keys:
                    self._idempotent.popitem(last=False)

        logger.info(f"Stored upload {filename} ({len(data)} bytes)")
        return stored

    def list_files(self) -> List[StoredFile]:
        """List visible files, newest first."""
        files = []
        for path in self.directory.iterdir():
            if path.name.startswith(".") or not path.is_file():
                continue
            stat = path.stat()
            files.append(
                StoredFile(
                    name=path.name,
                    size=stat.st_size,
                    modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    is_image=is_image_name(path.name),
                )
            )
        files.sort(key=lambda f: f.modified, reverse=True)
        return files
