"""Storage provider factory with registry pattern."""
from typing import Callable, Awaitable
import importlib

from core.logging_config import get_logger
from .base import StorageProvider
from .config import StorageConfig, StorageType
from .exceptions import ConfigurationError

logger = get_logger(__name__)

# Provider builder type
ProviderBuilder = Callable[[StorageConfig], Awaitable[StorageProvider]]

# Global registry for storage providers
_provider_registry: dict[StorageType, ProviderBuilder] = {}

# Built-in providers, imported lazily so optional SDKs are only required when selected
_BUILTIN_PROVIDERS = [
    (StorageType.S3, "infrastructure.external.storage.providers.s3", "build_s3_provider"),
    (StorageType.LOCAL, "infrastructure.external.storage.providers.local", "build_local_provider"),
    (StorageType.GCS, "infrastructure.external.storage.providers.gcs", "build_gcs_provider"),
]


def register_provider(
    storage_type: StorageType,
    builder: ProviderBuilder
) -> None:
    """Register a storage provider builder.

    Args:
        storage_type: Type of storage provider
        builder: Async function to build provider instance
    """
    _provider_registry[storage_type] = builder
    logger.info("storage_provider_registered", provider=str(storage_type))


async def create_provider(config: StorageConfig) -> StorageProvider:
    """Create storage provider instance based on config.

    Args:
        config: Storage configuration

    Returns:
        Configured storage provider instance

    Raises:
        ConfigurationError: If provider type not registered or creation fails
    """
    if config.type not in _provider_registry:
        _auto_register_providers()

        if config.type not in _provider_registry:
            raise ConfigurationError(
                f"Storage provider '{config.type}' not registered. "
                f"Available: {[str(t) for t in _provider_registry]}"
            )

    builder = _provider_registry[config.type]

    try:
        provider = await builder(config)
    except Exception as e:
        logger.error(
            "storage_provider_create_failed",
            provider=config.type,
            error=str(e)
        )
        raise ConfigurationError(
            f"Failed to create storage provider '{config.type}': {e}"
        ) from e

    logger.info("storage_provider_created", provider=config.type)
    return provider


def _auto_register_providers() -> None:
    """Auto-register built-in storage providers."""
    for storage_type, module_path, builder_name in _BUILTIN_PROVIDERS:
        if storage_type in _provider_registry:
            continue

        try:
            module = importlib.import_module(module_path)
            builder = getattr(module, builder_name)
            register_provider(storage_type, builder)
        except (ImportError, AttributeError) as e:
            logger.debug("storage_provider_unavailable", provider=str(storage_type), error=str(e))
