"""Application-owned port for the remote file-transfer session."""
from __future__ import annotations

from typing import AsyncIterator, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class TransferSession(Protocol):
    """One connection to a remote file server, used for exactly one file."""

    async def open(
        self,
        host: str,
        file_name: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ) -> AsyncIterator[bytes]: ...

    async def close(self) -> None: ...


TransferSessionFactory = Callable[[], TransferSession]
