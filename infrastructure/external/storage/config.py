"""Storage configuration models."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class StorageType(str, Enum):
    """Storage provider types."""
    S3 = "s3"
    LOCAL = "local"
    GCS = "gcs"


class StorageConfig(BaseModel):
    """Storage configuration model.

    The destination bucket comes with every transfer request, so it is not
    part of the provider configuration.
    """
    type: StorageType = StorageType.LOCAL
    region: Optional[str] = None
    endpoint: Optional[str] = None  # e.g. MinIO

    # S3 specific
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    s3_sse: Optional[str] = None  # Server-side encryption
    s3_acl: Optional[str] = None  # Access control list
    part_size: int = 8 * 1024 * 1024

    # GCS specific (ambient credentials; project defaults to the credentials' project)
    gcs_project: Optional[str] = None

    # Local specific
    local_base_path: str = "/tmp/storage"

    # Advanced settings
    max_retry_attempts: int = 3
    timeout: int = 30
    enable_ssl: bool = True

    class Config:
        """Pydantic config."""
        use_enum_values = True
