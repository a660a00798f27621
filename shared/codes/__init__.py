"""
Shared business codes used across layers (Domain/Core/API).

This package exposes BusinessCode at `shared.codes` and keeps
FTP reply specific codes under `shared.codes.ftp_codes`.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes (single source of truth)."""

    # Success
    SUCCESS = 0

    # Parameter errors (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    METHOD_NOT_ALLOWED = 10004

    # Transfer errors (2xxxx)
    TRANSFER_ERROR = 20000
    REMOTE_FILE_NOT_FOUND = 20001

    # Authorization errors (3xxxx)
    REMOTE_UNAUTHORIZED = 30001

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    STORAGE_ERROR = 40001


__all__ = ["BusinessCode"]
