"""
FTP 传输会话

基于 aioftp 的异步客户端：
- 连接与登录（未提供凭据时使用匿名登录）
- 以异步字节流形式读取单个文件
- 将 FTP 应答码映射为业务异常
- 尽力而为的会话关闭
"""
from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Optional

import aioftp

from core.config import FtpSettings
from core.logging_config import get_logger
from domain.common.exceptions import (
    BusinessException,
    RemoteFileNotFoundException,
    RemoteUnauthorizedException,
    TransferException,
)
from shared.codes import BusinessCode
from shared.codes.ftp_codes import business_code_for_reply

logger = get_logger(__name__)


def _reply_code(exc: aioftp.StatusCodeError) -> Optional[int]:
    """取服务器返回的第一个应答码（received_codes 可能是单个 Code 或元组）"""
    received = getattr(exc, "received_codes", None) or ()
    if isinstance(received, str):
        received = (received,)
    for code in received:
        try:
            return int(str(code))
        except ValueError:
            continue
    return None


def classify_ftp_error(exc: BaseException, *, host: str, file_name: str) -> BusinessException:
    """
    将 aioftp / 网络异常转换为业务异常

    Args:
        exc: 原始异常
        host: FTP 主机
        file_name: 请求的文件名

    Returns:
        对应分类的业务异常
    """
    if isinstance(exc, BusinessException):
        return exc
    if isinstance(exc, aioftp.StatusCodeError):
        reply = _reply_code(exc)
        code = business_code_for_reply(reply)
        if code == BusinessCode.REMOTE_FILE_NOT_FOUND:
            return RemoteFileNotFoundException(file_name, remote_code=reply)
        if code == BusinessCode.REMOTE_UNAUTHORIZED:
            return RemoteUnauthorizedException(host, remote_code=reply)
        return TransferException(f"FTP error from {host}: {exc}", remote_code=reply)
    if isinstance(exc, asyncio.TimeoutError):
        return TransferException(f"FTP timeout talking to {host}")
    return TransferException(f"FTP failure talking to {host}: {exc}")


class FtpTransferSession:
    """单次调用使用的 FTP 会话，仅读取一个文件"""

    def __init__(
        self,
        config: FtpSettings,
        client_factory: Optional[Callable[[], aioftp.Client]] = None,
    ):
        self.config = config
        self._client_factory = client_factory or self._default_client
        self._client: Optional[aioftp.Client] = None
        self._stream = None
        self._host: Optional[str] = None
        self._connected = False

    def _default_client(self) -> aioftp.Client:
        return aioftp.Client(
            socket_timeout=self.config.socket_timeout,
            connection_timeout=self.config.connection_timeout,
            encoding=self.config.encoding,
        )

    async def open(
        self,
        host: str,
        file_name: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ) -> AsyncIterator[bytes]:
        """
        连接、登录并打开文件读取流

        Returns:
            从文件开头开始的异步字节迭代器

        Raises:
            RemoteFileNotFoundException: 550
            RemoteUnauthorizedException: 530
            TransferException: 其它连接/协议错误
        """
        if self._client is not None:
            raise TransferException("FTP session already opened")

        self._host = host
        self._client = self._client_factory()
        credentials = {}
        if user:
            credentials["user"] = user
        if password:
            credentials["password"] = password

        try:
            await self._client.connect(host, self.config.port)
            self._connected = True
            logger.info("ftp_connected", host=host, port=self.config.port)
            await self._client.login(**credentials)
            logger.info("ftp_logged_in", host=host, user=user or "anonymous")
            self._stream = await self._client.download_stream(file_name)
        except (aioftp.AIOFTPException, OSError, asyncio.TimeoutError) as exc:
            raise classify_ftp_error(exc, host=host, file_name=file_name) from exc

        logger.info("ftp_download_started", host=host, file_name=file_name)
        return self._iter_blocks(self._stream, host, file_name)

    async def _iter_blocks(self, stream, host: str, file_name: str) -> AsyncIterator[bytes]:
        received = 0
        try:
            async for block in stream.iter_by_block(self.config.block_size):
                received += len(block)
                yield block
            # 读取 226 传输完成应答
            await stream.finish()
        except (aioftp.AIOFTPException, OSError, asyncio.TimeoutError) as exc:
            raise classify_ftp_error(exc, host=host, file_name=file_name) from exc
        self._stream = None
        logger.info("ftp_download_finished", host=host, file_name=file_name, size=received)

    async def close(self) -> None:
        """结束会话（QUIT 后关闭 socket），任何失败只记录日志"""
        client, self._client = self._client, None
        if client is None:
            return

        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.close()
            except Exception as exc:
                logger.warning("ftp_stream_close_failed", host=self._host, error=str(exc))

        try:
            if self._connected:
                await client.quit()
        except Exception as exc:
            logger.warning("ftp_quit_failed", host=self._host, error=str(exc))
        finally:
            self._connected = False
            try:
                client.close()
            except Exception as exc:
                logger.warning("ftp_client_close_failed", host=self._host, error=str(exc))
        logger.info("ftp_session_closed", host=self._host)
