"""
API依赖项 - 传输服务装配
"""
from fastapi import Depends

from application.ports.storage import StorageSinkPort
from application.services.transfer_service import FtpImportService
from infrastructure.adapters.storage_port import StorageProviderSinkAdapter
from infrastructure.external.ftp import ftp_session_factory
from infrastructure.external.storage import get_storage


async def get_storage_port() -> StorageSinkPort:
    # 存储客户端为进程级单例，首次写入时才解析，避免初始化失败掩盖 405/400
    return StorageProviderSinkAdapter(get_storage)


async def get_transfer_service(storage: StorageSinkPort = Depends(get_storage_port)) -> FtpImportService:
    # FTP 会话按请求创建
    return FtpImportService(storage=storage, session_factory=ftp_session_factory)
