"""Request-scoped storage of uploaded files."""

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from doclens.config import settings
from doclens.exceptions import UnsupportedFormatError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredUpload:
    """An upload written to disk for the duration of one request."""

    path: Path
    original_name: str
    size: int
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return Path(self.original_name).suffix.lower()


def remove_file(path: Path) -> None:
    """Best-effort delete; failures are logged, never raised."""
    try:
        if path.exists():
            path.unlink()
            logger.info(f"Removed temp file: {path}")
    except OSError as e:
        logger.error(f"Failed to remove temp file {path}: {e}")


class UploadStore:
    """Persists uploads under ``upload_dir`` and removes them afterwards."""

    def __init__(self, upload_dir: str | Path | None = None, max_size: int | None = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_size = max_size or settings.max_upload_size_bytes

    def validate_extension(self, file_name: str, allowed: list[str], label: str) -> str:
        extension = Path(file_name).suffix.lower()
        if extension not in allowed:
            raise UnsupportedFormatError(
                f"Unsupported file format: {extension or '(none)'}. Only {label} are supported"
            )
        return extension

    async def write(self, upload: UploadFile, allowed: list[str], label: str) -> StoredUpload:
        """Validate and write an upload to a uniquely named temp file."""
        original_name = upload.filename or ""
        extension = self.validate_extension(original_name, allowed, label)

        content = await upload.read()
        if len(content) > self.max_size:
            raise ValidationError(f"File size exceeds the limit of {self.max_size} bytes")

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / f"{int(time.time() * 1000)}-{uuid.uuid4()}{extension}"
        path.write_bytes(content)
        logger.info(f"Stored upload {original_name} ({len(content)} bytes) at {path}")

        stored = StoredUpload(
            path=path,
            original_name=original_name,
            size=len(content),
            content_type=upload.content_type,
        )
        if stored.size == 0:
            remove_file(path)
            raise ValidationError("Invalid file: the uploaded file is empty")
        return stored

    @asynccontextmanager
    async def save(
        self,
        upload: UploadFile | None,
        allowed: list[str],
        label: str,
    ) -> AsyncIterator[StoredUpload]:
        """
        Yield the stored upload and delete it on every exit path.

        Raises:
            ValidationError: If no file was uploaded or it is empty
            UnsupportedFormatError: If the extension is not allowed
        """
        if upload is None or not upload.filename:
            raise ValidationError("Please upload a file")

        stored = await self.write(upload, allowed, label)
        try:
            yield stored
        finally:
            remove_file(stored.path)
