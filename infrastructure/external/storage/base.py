"""Storage provider protocol definitions."""
from typing import Protocol, runtime_checkable

from .models import WriteResult


@runtime_checkable
class ObjectWriter(Protocol):
    """Streaming writer bound to one bucket/key pair.

    Bytes are pushed with ``write``; ``commit`` finalizes the object and
    ``abort`` discards whatever was written so far.
    """

    bucket: str
    key: str

    async def write(self, chunk: bytes) -> None:
        """Append bytes to the object."""
        ...

    async def commit(self) -> WriteResult:
        """Finalize the object and return its metadata."""
        ...

    async def abort(self) -> None:
        """Discard the partially written object (best-effort)."""
        ...


@runtime_checkable
class StorageProvider(Protocol):
    """Core storage provider protocol for duck typing."""

    async def open_writer(
        self,
        bucket: str,
        key: str,
        content_type: str | None = None,
    ) -> ObjectWriter:
        """Open a streaming writer to ``bucket/key`` (created or overwritten)."""
        ...

    async def health_check(self) -> bool:
        """Check storage connectivity and permissions."""
        ...
