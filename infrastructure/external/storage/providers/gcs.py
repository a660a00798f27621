"""Google Cloud Storage provider implementation.

Uses ``google-cloud-storage`` with ambient credentials (Application Default
Credentials: service account key, workload identity or gcloud login).
"""
import hashlib
from typing import Any, Optional
import anyio
from functools import partial

from core.logging_config import get_logger
from ..config import StorageConfig
from ..models import WriteResult
from ..exceptions import (
    StorageError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    ConfigurationError,
)

logger = get_logger(__name__)

# Resumable upload chunks must be a multiple of 256 KiB
CHUNK_ALIGNMENT = 256 * 1024


def map_gcs_exception(e: Exception, operation: str) -> StorageError:
    """Map google-api-core exceptions to storage exceptions."""
    from google.api_core import exceptions as gexc

    if isinstance(e, gexc.NotFound):
        return NotFoundError(f"Not found during {operation}: {e}")
    if isinstance(e, (gexc.Forbidden, gexc.Unauthorized)):
        return PermissionDeniedError(f"Access denied during {operation}: {e}")
    if isinstance(e, (gexc.TooManyRequests, gexc.ServiceUnavailable, gexc.InternalServerError)):
        return TransientError(f"Transient error during {operation}: {e}")
    return StorageError(f"GCS error during {operation}: {e}")


def aligned_chunk_size(part_size: int) -> int:
    return max(CHUNK_ALIGNMENT, part_size - part_size % CHUNK_ALIGNMENT)


class GcsObjectWriter:
    """Streams bytes into one blob through a resumable upload.

    The blob only becomes visible when ``commit`` closes the upload; an
    aborted writer leaves the session unfinalized and nothing is stored.
    """

    def __init__(self, blob: Any, bucket: str, key: str, chunk_size: int, content_type: Optional[str] = None):
        self.blob = blob
        self.bucket = bucket
        self.key = key
        self.content_type = content_type
        self.chunk_size = chunk_size
        self._file = None
        self._buffer = bytearray()
        self._size = 0
        self._md5 = hashlib.md5()

    async def write(self, chunk: bytes) -> None:
        if not chunk:
            return
        self._buffer.extend(chunk)
        self._size += len(chunk)
        self._md5.update(chunk)
        if len(self._buffer) >= self.chunk_size:
            data = bytes(self._buffer)
            self._buffer.clear()
            await self._send(data)

    async def commit(self) -> WriteResult:
        try:
            if self._buffer or self._file is None:
                await self._send(bytes(self._buffer))
            await anyio.to_thread.run_sync(self._file.close)
        except StorageError:
            raise
        except Exception as e:
            raise map_gcs_exception(e, f"commit {self.bucket}/{self.key}") from e
        finally:
            self._buffer.clear()

        etag = getattr(self.blob, "etag", None) or self._md5.hexdigest()
        logger.info("gcs_object_written", bucket=self.bucket, key=self.key, size=self._size)
        return WriteResult(
            bucket=self.bucket,
            key=self.key,
            size=self._size,
            etag=etag,
            content_type=self.content_type,
        )

    async def abort(self) -> None:
        self._buffer.clear()
        if self._file is not None:
            self._file = None
            logger.info("gcs_upload_abandoned", bucket=self.bucket, key=self.key)

    async def _send(self, data: bytes) -> None:
        try:
            if self._file is None:
                kwargs = {"chunk_size": self.chunk_size}
                if self.content_type:
                    kwargs["content_type"] = self.content_type
                self._file = await anyio.to_thread.run_sync(partial(self.blob.open, "wb", **kwargs))
            await anyio.to_thread.run_sync(self._file.write, data)
        except Exception as e:
            raise map_gcs_exception(e, f"upload to {self.bucket}/{self.key}") from e


class GcsProvider:
    """Google Cloud Storage provider."""

    def __init__(self, client: Any, config: StorageConfig):
        """Initialize GCS provider.

        Args:
            client: google.cloud.storage.Client instance
            config: Storage configuration
        """
        self.client = client
        self.config = config

    async def open_writer(
        self,
        bucket: str,
        key: str,
        content_type: Optional[str] = None,
    ) -> GcsObjectWriter:
        """Open a streaming writer; the upload session starts with the first chunk."""
        blob = self.client.bucket(bucket).blob(key)
        return GcsObjectWriter(
            blob,
            bucket,
            key,
            chunk_size=aligned_chunk_size(self.config.part_size),
            content_type=content_type,
        )

    async def health_check(self) -> bool:
        """Check GCS connectivity by listing one bucket of the project."""
        try:
            await anyio.to_thread.run_sync(lambda: list(self.client.list_buckets(max_results=1)))
            logger.info("gcs_health_check_passed")
            return True
        except Exception as e:
            logger.error("gcs_health_check_failed", error=str(e))
            return False


async def build_gcs_provider(config: StorageConfig) -> GcsProvider:
    """Build GCS storage provider.

    Args:
        config: Storage configuration

    Returns:
        Configured GCS provider instance
    """
    try:
        from google.cloud import storage
        from google.auth.exceptions import DefaultCredentialsError
    except ImportError:
        raise ConfigurationError("google-cloud-storage is required for GCS storage")

    try:
        client = storage.Client(project=config.gcs_project)
    except DefaultCredentialsError as e:
        raise ConfigurationError(f"No Google Cloud credentials available: {e}") from e
    return GcsProvider(client, config)
