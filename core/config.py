"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class FtpSettings(BaseModel):
    port: int = 21
    # aioftp socket/connection timeouts（秒），None 表示不限制
    socket_timeout: Optional[float] = 30.0
    connection_timeout: Optional[float] = 30.0
    block_size: int = 8192
    encoding: str = "utf-8"


class StorageSettings(BaseModel):
    type: str = "local"  # local, s3, gcs
    region: Optional[str] = None
    endpoint: Optional[str] = None
    # S3 specific
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    s3_sse: Optional[str] = None
    s3_acl: Optional[str] = None
    part_size: int = 8 * 1024 * 1024  # multipart 分片大小，S3 要求至少 5MB
    # GCS specific（未配置时使用环境默认凭据所属项目）
    gcs_project: Optional[str] = None
    # Local storage specific
    local_base_path: str = "/tmp/storage"
    # Advanced settings
    max_retry_attempts: int = 3
    timeout: int = 30
    enable_ssl: bool = True

    @field_validator("part_size")
    @classmethod
    def _check_part_size(cls, v: int) -> int:
        if v < 5 * 1024 * 1024:
            raise ValueError("storage.part_size 不能小于 5MB")
        return v


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="FTP Storage Bridge")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")

    # 分组配置：FTP/Storage 采用嵌套模型，环境变量形如 STORAGE__TYPE
    ftp: FtpSettings = Field(default_factory=FtpSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    # 日志/请求体记录配置
    LOG_REQUEST_BODY_ENABLE_BY_DEFAULT: bool = Field(default=True)
    LOG_REQUEST_BODY_MAX_BYTES: int = Field(default=2048)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
