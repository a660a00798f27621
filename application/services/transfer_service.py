"""Application layer orchestration for a single FTP → object storage import."""
from __future__ import annotations

import time
from typing import Any, AsyncIterator

from application.ports.storage import SinkResult, StorageSinkPort
from application.ports.transfer import TransferSession, TransferSessionFactory
from core.logging_config import get_logger
from domain.common.exceptions import (
    BusinessException,
    InvalidMethodException,
    TransferException,
)
from domain.transfer import TransferOutcome, TransferRequest

logger = get_logger(__name__)

ACCEPTED_METHOD = "POST"


class FtpImportService:
    """Validate → connect → pipe → close, turning every failure into an outcome.

    The remote session is created per invocation and closed exactly once on
    every path that reached the connecting stage.
    """

    def __init__(self, storage: StorageSinkPort, session_factory: TransferSessionFactory):
        self._storage = storage
        self._session_factory = session_factory

    async def execute(self, method: str, payload: Any) -> TransferOutcome:
        session: TransferSession | None = None
        started = time.monotonic()
        try:
            if (method or "").upper() != ACCEPTED_METHOD:
                raise InvalidMethodException(method)

            request = TransferRequest.from_payload(payload)

            session = self._session_factory()
            stream = await session.open(
                request.host,
                request.file_name,
                request.user,
                request.password,
            )
            result = await self._pipe(stream, request)
            outcome = TransferOutcome.succeeded(result)
            logger.info(
                "transfer_succeeded",
                host=request.host,
                bucket=result.bucket,
                key=result.key,
                size=result.size,
                duration=round(time.monotonic() - started, 3),
            )
        except BusinessException as exc:
            logger.error(
                "transfer_failed",
                error=exc.message,
                error_type=exc.error_type,
                code=int(exc.code),
                details=exc.details,
            )
            outcome = TransferOutcome.failed(exc)
        except Exception as exc:
            logger.error("transfer_unexpected_error", error=str(exc), exc_info=True)
            outcome = TransferOutcome.failed(TransferException(f"Transfer failed: {exc}"))
        finally:
            if session is not None:
                await self._close_session(session)
        return outcome

    async def _pipe(self, stream: AsyncIterator[bytes], request: TransferRequest) -> SinkResult:
        sink = await self._storage.open_sink(request.bucket_name, request.file_name)
        try:
            async for chunk in stream:
                await sink.write(chunk)
        except BaseException:
            await sink.abort()
            raise
        return await sink.close()

    async def _close_session(self, session: TransferSession) -> None:
        try:
            await session.close()
        except Exception as exc:
            # close failures never override the transfer outcome
            logger.warning("transfer_session_close_failed", error=str(exc))
