"""Domain values describing a single FTP → object storage transfer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from domain.common.exceptions import BusinessException
from .validator import validate_transfer_payload


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class TransferRequest:
    """Validated, immutable transfer parameters."""

    bucket_name: str
    host: str
    file_name: str
    user: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TransferRequest":
        validate_transfer_payload(payload)
        data: Mapping[str, Any] = payload
        return cls(
            bucket_name=data["bucketName"],
            host=data["host"],
            file_name=data["fileName"],
            user=_optional_str(data.get("user")),
            password=_optional_str(data.get("password")),
        )

    def __repr__(self) -> str:
        # password must never reach logs
        return (
            f"TransferRequest(bucket_name={self.bucket_name!r}, host={self.host!r}, "
            f"file_name={self.file_name!r}, user={self.user!r})"
        )


@dataclass(frozen=True)
class TransferOutcome:
    """Tagged result of one transfer: either a success payload or a typed failure."""

    result: Optional[Any] = None
    error: Optional[BusinessException] = None

    @classmethod
    def succeeded(cls, result: Any = None) -> "TransferOutcome":
        return cls(result=result)

    @classmethod
    def failed(cls, error: BusinessException) -> "TransferOutcome":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None
