"""Local file system storage provider implementation.

Buckets map to first-level directories under ``local_base_path``.
"""
import hashlib
from pathlib import Path
from typing import Optional
import aiofiles
import aiofiles.os

from core.logging_config import get_logger
from ..config import StorageConfig
from ..models import WriteResult
from ..exceptions import StorageError, ValidationError
from ..utils import safe_join

logger = get_logger(__name__)


class LocalObjectWriter:
    """Writes straight into the destination file; no temp-file rename."""

    def __init__(self, path: Path, bucket: str, key: str, handle, content_type: Optional[str] = None):
        self.path = path
        self.bucket = bucket
        self.key = key
        self.content_type = content_type
        self._handle = handle
        self._size = 0
        self._md5 = hashlib.md5()

    async def write(self, chunk: bytes) -> None:
        try:
            await self._handle.write(chunk)
        except OSError as e:
            raise StorageError(f"Failed to write {self.bucket}/{self.key}: {e}") from e
        self._size += len(chunk)
        self._md5.update(chunk)

    async def commit(self) -> WriteResult:
        try:
            await self._handle.close()
        except OSError as e:
            raise StorageError(f"Failed to finalize {self.bucket}/{self.key}: {e}") from e

        logger.info("local_object_written", bucket=self.bucket, key=self.key, size=self._size)
        return WriteResult(
            bucket=self.bucket,
            key=self.key,
            size=self._size,
            etag=self._md5.hexdigest(),
            content_type=self.content_type,
        )

    async def abort(self) -> None:
        try:
            await self._handle.close()
            if await aiofiles.os.path.exists(self.path):
                await aiofiles.os.remove(self.path)
        except OSError as e:
            logger.warning("local_object_abort_failed", path=str(self.path), error=str(e))


class LocalProvider:
    """Local file system storage provider."""

    def __init__(self, config: StorageConfig):
        """Initialize local storage provider.

        Args:
            config: Storage configuration
        """
        self.config = config
        self.base_path = Path(config.local_base_path).resolve()

        # Ensure base path exists
        self.base_path.mkdir(parents=True, exist_ok=True)

    async def open_writer(
        self,
        bucket: str,
        key: str,
        content_type: Optional[str] = None,
    ) -> LocalObjectWriter:
        """Open ``<base>/<bucket>/<key>`` for writing (truncating any existing file)."""
        bucket_path = Path(safe_join(str(self.base_path), bucket))
        if bucket_path == self.base_path:
            raise ValidationError(f"Invalid bucket: {bucket}")
        file_path = Path(safe_join(str(bucket_path), key))
        if file_path == bucket_path:
            raise ValidationError(f"Invalid key: {key}")

        try:
            await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
            handle = await aiofiles.open(file_path, "wb")
        except OSError as e:
            raise StorageError(f"Failed to open {bucket}/{key}: {e}") from e

        return LocalObjectWriter(file_path, bucket, key, handle, content_type)

    async def health_check(self) -> bool:
        """Check that the base directory is writable."""
        try:
            probe = self.base_path / ".health_check"
            async with aiofiles.open(probe, "wb") as f:
                await f.write(b"ok")
            await aiofiles.os.remove(probe)
            return True
        except OSError as e:
            logger.error("local_health_check_failed", error=str(e))
            return False


async def build_local_provider(config: StorageConfig) -> LocalProvider:
    """Build local storage provider.

    Args:
        config: Storage configuration

    Returns:
        Configured local provider instance
    """
    provider = LocalProvider(config)

    # Check accessibility
    if not await provider.health_check():
        raise StorageError("Failed to access local storage")

    return provider
