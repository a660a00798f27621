"""S3-compatible storage provider implementation.

Works against AWS S3 and S3-compatible services such as MinIO.
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

# S3 rejects non-final multipart parts smaller than this
MIN_PART_SIZE = 5 * 1024 * 1024


def _error_code(e: Exception) -> str:
    return str(getattr(e, "response", {}).get("Error", {}).get("Code", ""))


def map_s3_exception(e: Exception, operation: str) -> StorageError:
    """Map botocore exceptions to storage exceptions."""
    error_code = _error_code(e)

    if error_code in ("NoSuchKey", "NoSuchBucket", "404", "NotFound"):
        return NotFoundError(f"Not found during {operation}: {e}")
    if error_code in ("AccessDenied", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch"):
        return PermissionDeniedError(f"Access denied during {operation}: {e}")
    if error_code in ("RequestTimeout", "SlowDown", "ServiceUnavailable", "InternalError"):
        return TransientError(f"Transient error during {operation}: {e}")
    return StorageError(f"S3 error during {operation}: {e}")


class S3ObjectWriter:
    """Streams bytes into one S3 object.

    Data is buffered up to ``part_size``; the first full part starts a
    multipart upload. Objects smaller than one part are written with a single
    ``put_object`` on commit.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        key: str,
        part_size: int,
        extra_args: Optional[dict] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.key = key
        self.part_size = max(part_size, MIN_PART_SIZE)
        self.extra_args = extra_args or {}
        self._buffer = bytearray()
        self._upload_id: Optional[str] = None
        self._parts: list[dict] = []
        self._size = 0
        self._md5 = hashlib.md5()

    async def write(self, chunk: bytes) -> None:
        if not chunk:
            return
        self._buffer.extend(chunk)
        self._size += len(chunk)
        self._md5.update(chunk)
        while len(self._buffer) >= self.part_size:
            part = bytes(self._buffer[: self.part_size])
            del self._buffer[: self.part_size]
            await self._upload_part(part)

    async def commit(self) -> WriteResult:
        try:
            if self._upload_id is None:
                response = await anyio.to_thread.run_sync(
                    partial(
                        self.client.put_object,
                        Bucket=self.bucket,
                        Key=self.key,
                        Body=bytes(self._buffer),
                        **self.extra_args
                    )
                )
            else:
                if self._buffer:
                    await self._upload_part(bytes(self._buffer))
                response = await anyio.to_thread.run_sync(
                    partial(
                        self.client.complete_multipart_upload,
                        Bucket=self.bucket,
                        Key=self.key,
                        UploadId=self._upload_id,
                        MultipartUpload={"Parts": self._parts}
                    )
                )
        except StorageError:
            await self.abort()
            raise
        except Exception as e:
            await self.abort()
            raise map_s3_exception(e, f"commit {self.bucket}/{self.key}") from e
        finally:
            self._buffer.clear()

        etag = ((response or {}).get("ETag") or "").strip('"') or self._md5.hexdigest()
        logger.info(
            "s3_object_written",
            bucket=self.bucket,
            key=self.key,
            size=self._size,
            parts=len(self._parts) or 1,
        )
        return WriteResult(
            bucket=self.bucket,
            key=self.key,
            size=self._size,
            etag=etag,
            content_type=self.extra_args.get("ContentType"),
        )

    async def abort(self) -> None:
        self._buffer.clear()
        if self._upload_id is None:
            return
        upload_id, self._upload_id = self._upload_id, None
        try:
            await anyio.to_thread.run_sync(
                partial(
                    self.client.abort_multipart_upload,
                    Bucket=self.bucket,
                    Key=self.key,
                    UploadId=upload_id
                )
            )
            logger.info("s3_multipart_aborted", bucket=self.bucket, key=self.key)
        except Exception as e:
            logger.warning(
                "s3_multipart_abort_failed",
                bucket=self.bucket,
                key=self.key,
                error=str(e),
            )

    async def _upload_part(self, data: bytes) -> None:
        try:
            if self._upload_id is None:
                response = await anyio.to_thread.run_sync(
                    partial(
                        self.client.create_multipart_upload,
                        Bucket=self.bucket,
                        Key=self.key,
                        **self.extra_args
                    )
                )
                self._upload_id = response["UploadId"]

            part_number = len(self._parts) + 1
            response = await anyio.to_thread.run_sync(
                partial(
                    self.client.upload_part,
                    Bucket=self.bucket,
                    Key=self.key,
                    UploadId=self._upload_id,
                    PartNumber=part_number,
                    Body=data
                )
            )
        except Exception as e:
            raise map_s3_exception(e, f"upload part to {self.bucket}/{self.key}") from e
        self._parts.append({"ETag": response["ETag"], "PartNumber": part_number})


class S3Provider:
    """S3-compatible storage provider."""

    def __init__(
        self,
        client: Any,  # boto3 S3 client
        config: StorageConfig
    ):
        """Initialize S3 provider.

        Args:
            client: Boto3 S3 client instance
            config: Storage configuration
        """
        self.client = client
        self.config = config

    async def open_writer(
        self,
        bucket: str,
        key: str,
        content_type: Optional[str] = None,
    ) -> S3ObjectWriter:
        """Open a streaming writer; nothing is sent until the first part fills."""
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        if self.config.s3_acl:
            extra_args["ACL"] = self.config.s3_acl
        if self.config.s3_sse:
            extra_args["ServerSideEncryption"] = self.config.s3_sse
        return S3ObjectWriter(
            self.client,
            bucket,
            key,
            part_size=self.config.part_size,
            extra_args=extra_args,
        )

    async def health_check(self) -> bool:
        """Check S3 connectivity by listing accessible buckets."""
        try:
            await anyio.to_thread.run_sync(self.client.list_buckets)
            logger.info("s3_health_check_passed")
            return True
        except Exception as e:
            logger.error("s3_health_check_failed", error=str(e))
            return False


async def build_s3_provider(config: StorageConfig) -> S3Provider:
    """Build S3 storage provider.

    Args:
        config: Storage configuration

    Returns:
        Configured S3 provider instance
    """
    try:
        import boto3
        from botocore.config import Config as BotoConfig
    except ImportError:
        raise ConfigurationError("boto3 is required for S3 storage")

    boto_config = BotoConfig(
        region_name=config.region,
        signature_version="s3v4",
        retries={
            "max_attempts": config.max_retry_attempts,
            "mode": "standard"
        },
        connect_timeout=config.timeout,
        read_timeout=config.timeout
    )

    client_args = {
        "service_name": "s3",
        "config": boto_config
    }

    if config.aws_access_key_id and config.aws_secret_access_key:
        client_args.update({
            "aws_access_key_id": config.aws_access_key_id,
            "aws_secret_access_key": config.aws_secret_access_key
        })

    if config.endpoint:
        client_args["endpoint_url"] = config.endpoint
        client_args["use_ssl"] = config.enable_ssl

    client = boto3.client(**client_args)
    return S3Provider(client, config)
