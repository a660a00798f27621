"""Application-owned storage port abstraction (hexagonal architecture).

Defines the minimal write-side methods needed by the transfer use case so
that the application layer does not depend on infrastructure details.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable
from dataclasses import dataclass


@dataclass
class SinkResult:
    bucket: str
    key: str
    size: int
    etag: Optional[str] = None


@runtime_checkable
class StorageSink(Protocol):
    """Writable byte stream bound to a single bucket/object pair."""

    async def write(self, chunk: bytes) -> None: ...

    async def close(self) -> SinkResult: ...

    async def abort(self) -> None: ...


@runtime_checkable
class StorageSinkPort(Protocol):
    async def open_sink(self, bucket: str, key: str) -> StorageSink: ...
