"""Storage service exceptions."""


class StorageError(Exception):
    """Base storage exception."""

    # HTTP status suggested to callers translating the error
    status_hint: int | None = None


class NotFoundError(StorageError):
    """Bucket or object not found in storage."""
    status_hint = 404


class PermissionDeniedError(StorageError):
    """Permission denied for storage operation."""
    status_hint = 403


class TransientError(StorageError):
    """Transient error (network, rate limit, server error)."""
    status_hint = 503


class ConfigurationError(StorageError):
    """Storage configuration error."""
    pass


class ValidationError(StorageError):
    """Storage validation error (e.g. unsafe key)."""
    status_hint = 400
