"""Storage service entry point and lifecycle management."""
import asyncio
from typing import Optional
from functools import lru_cache

from core.config import settings
from core.logging_config import get_logger
from .base import StorageProvider, ObjectWriter
from .config import StorageConfig, StorageType
from .factory import create_provider
from .utils import apply_logging

logger = get_logger(__name__)

# Process-wide storage client, built once and never mutated afterwards
_storage_client: Optional[StorageProvider] = None
_init_lock = asyncio.Lock()


@lru_cache
def get_storage_config() -> StorageConfig:
    """Get storage configuration from settings.

    Assembles StorageConfig from core.config.settings to maintain
    single source of truth for configuration.

    Returns:
        Storage configuration instance
    """
    s = settings.storage
    config_dict = {
        "type": s.type or StorageType.LOCAL,
        "region": s.region,
        "endpoint": s.endpoint,
        # S3 specific
        "aws_access_key_id": s.aws_access_key_id,
        "aws_secret_access_key": s.aws_secret_access_key,
        "s3_sse": s.s3_sse,
        "s3_acl": s.s3_acl,
        "part_size": s.part_size,
        # GCS specific
        "gcs_project": s.gcs_project,
        # Local specific
        "local_base_path": s.local_base_path,
        # Advanced settings
        "max_retry_attempts": s.max_retry_attempts,
        "timeout": s.timeout,
        "enable_ssl": s.enable_ssl,
    }

    return StorageConfig(**config_dict)


async def init_storage_client() -> StorageProvider:
    """Initialize storage client.

    Creates the storage provider based on configuration. Safe to call more
    than once; later calls return the existing client.
    """
    global _storage_client

    async with _init_lock:
        if _storage_client is not None:
            return _storage_client

        config = get_storage_config()
        try:
            provider = await create_provider(config)
        except Exception as e:
            logger.error("storage_init_failed", error=str(e))
            raise

        _storage_client = apply_logging(provider)
        logger.info("storage_client_initialized", provider=config.type)
        return _storage_client


def get_storage_client() -> Optional[StorageProvider]:
    """Get storage client instance.

    Returns:
        Storage provider instance or None if not initialized
    """
    return _storage_client


async def shutdown_storage_client() -> None:
    """Shutdown storage client."""
    global _storage_client

    if _storage_client is None:
        return

    _storage_client = None
    logger.info("storage_client_shutdown")


async def get_storage() -> StorageProvider:
    """FastAPI dependency for storage service.

    Lazily initializes the client on first use when startup did not.

    Returns:
        Storage provider instance
    """
    client = get_storage_client()
    if client is None:
        client = await init_storage_client()
    return client


# Export public interface
__all__ = [
    # Lifecycle
    "init_storage_client",
    "get_storage_client",
    "shutdown_storage_client",
    "get_storage",

    # Configuration
    "get_storage_config",
    "StorageConfig",
    "StorageType",

    # Base types
    "StorageProvider",
    "ObjectWriter",

    # Models
    "WriteResult",

    # Exceptions
    "StorageError",
    "NotFoundError",
    "PermissionDeniedError",
    "TransientError",
    "ConfigurationError",
    "ValidationError",

    # Utils
    "guess_content_type",
    "safe_join",
]

# Import models and exceptions for easier access
from .models import WriteResult
from .exceptions import (
    StorageError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    ConfigurationError,
    ValidationError
)
from .utils import (
    guess_content_type,
    safe_join
)
