"""Storage utility functions and middleware support."""
import mimetypes
import time
from pathlib import Path
from typing import Optional

from core.logging_config import get_logger
from .base import ObjectWriter, StorageProvider
from .exceptions import ValidationError
from .models import WriteResult

logger = get_logger(__name__)


def guess_content_type(filename: str) -> str:
    """Guess content type from filename.

    Args:
        filename: File name or path

    Returns:
        MIME type string
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def safe_join(base: str, relative: str) -> str:
    """Safely join paths preventing traversal attacks.

    Args:
        base: Base path
        relative: Relative path to join

    Returns:
        Safe joined path

    Raises:
        ValidationError: If path would escape base
    """
    clean = relative.lstrip("/")

    base_path = Path(base).resolve()
    full_path = (base_path / clean).resolve()

    try:
        full_path.relative_to(base_path)
    except ValueError:
        raise ValidationError(f"Path escapes base directory: {relative}")

    return str(full_path)


class LoggingWriter:
    """Wraps an ObjectWriter with structured logging of its lifecycle."""

    def __init__(self, writer: ObjectWriter):
        self._writer = writer
        self.bucket = writer.bucket
        self.key = writer.key
        self._started = time.monotonic()

    async def write(self, chunk: bytes) -> None:
        try:
            await self._writer.write(chunk)
        except Exception as e:
            logger.error("storage_write_failed", bucket=self.bucket, key=self.key, error=str(e))
            raise

    async def commit(self) -> WriteResult:
        try:
            result = await self._writer.commit()
        except Exception as e:
            logger.error("storage_commit_failed", bucket=self.bucket, key=self.key, error=str(e))
            raise
        logger.info(
            "storage_write_completed",
            bucket=result.bucket,
            key=result.key,
            size=result.size,
            etag=result.etag,
            duration=round(time.monotonic() - self._started, 3),
        )
        return result

    async def abort(self) -> None:
        logger.warning("storage_write_aborted", bucket=self.bucket, key=self.key)
        await self._writer.abort()


class LoggingStorage:
    """Provider wrapper adding structured logging around writers."""

    def __init__(self, provider: StorageProvider):
        self.provider = provider
        self.config = getattr(provider, "config", None)

    async def open_writer(
        self,
        bucket: str,
        key: str,
        content_type: Optional[str] = None,
    ) -> LoggingWriter:
        logger.info("storage_write_starting", bucket=bucket, key=key, content_type=content_type)
        try:
            writer = await self.provider.open_writer(bucket, key, content_type)
        except Exception as e:
            logger.error("storage_open_failed", bucket=bucket, key=key, error=str(e))
            raise
        return LoggingWriter(writer)

    async def health_check(self) -> bool:
        return await self.provider.health_check()


def apply_logging(provider: StorageProvider, enabled: bool = True) -> StorageProvider:
    """Wrap a provider with logging when enabled."""
    if not enabled:
        return provider
    return LoggingStorage(provider)
