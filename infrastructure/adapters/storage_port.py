"""Infrastructure adapter that implements the application StorageSinkPort
by delegating to the concrete StorageProvider and translating models and
storage errors.
"""
from __future__ import annotations

from typing import Awaitable, Callable

from application.ports.storage import SinkResult, StorageSink, StorageSinkPort
from domain.common.exceptions import StorageWriteException
from infrastructure.external.storage import (
    ObjectWriter,
    StorageError,
    StorageProvider,
    guess_content_type,
)


def _translate(exc: StorageError, bucket: str, key: str) -> StorageWriteException:
    return StorageWriteException(
        str(exc),
        bucket=bucket,
        key=key,
        status_hint=getattr(exc, "status_hint", None),
    )


class ObjectWriterSink(StorageSink):
    def __init__(self, writer: ObjectWriter):
        self.writer = writer

    async def write(self, chunk: bytes) -> None:
        try:
            await self.writer.write(chunk)
        except StorageError as exc:
            raise _translate(exc, self.writer.bucket, self.writer.key) from exc

    async def close(self) -> SinkResult:
        try:
            result = await self.writer.commit()
        except StorageError as exc:
            raise _translate(exc, self.writer.bucket, self.writer.key) from exc
        return SinkResult(
            bucket=getattr(result, "bucket", self.writer.bucket),
            key=getattr(result, "key", self.writer.key),
            size=int(getattr(result, "size", 0) or 0),
            etag=getattr(result, "etag", None),
        )

    async def abort(self) -> None:
        await self.writer.abort()


class StorageProviderSinkAdapter(StorageSinkPort):
    """Resolves the process-wide provider on first sink, so storage
    initialization failures surface as storage errors of the transfer."""

    def __init__(self, provider_getter: Callable[[], Awaitable[StorageProvider]]):
        self._provider_getter = provider_getter

    async def open_sink(self, bucket: str, key: str) -> StorageSink:
        try:
            provider = await self._provider_getter()
            writer = await provider.open_writer(bucket, key, guess_content_type(key))
        except StorageError as exc:
            raise _translate(exc, bucket, key) from exc
        return ObjectWriterSink(writer)
