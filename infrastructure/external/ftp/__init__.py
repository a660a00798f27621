"""
FTP 客户端模块

提供按请求创建的 FTP 传输会话（读取端）
"""
from core.config import settings
from .session import FtpTransferSession, classify_ftp_error

__all__ = [
    "FtpTransferSession",
    "classify_ftp_error",
    "ftp_session_factory",
]


def ftp_session_factory() -> FtpTransferSession:
    """每次调用返回一个新的会话，会话之间不共享连接。"""
    return FtpTransferSession(settings.ftp)
