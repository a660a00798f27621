"""FtpTransferSession against an in-process aioftp server on 127.0.0.1."""
from contextlib import asynccontextmanager

import aioftp
import pytest

from core.config import FtpSettings
from domain.common.exceptions import RemoteFileNotFoundException, RemoteUnauthorizedException
from infrastructure.external.ftp import FtpTransferSession


@asynccontextmanager
async def running_server(root):
    server = aioftp.Server([aioftp.User("alice", "s3cret", base_path=root)])
    await server.start(host="127.0.0.1", port=0)
    try:
        yield server.address[1]
    finally:
        await server.close()


def make_session(port):
    return FtpTransferSession(FtpSettings(port=port, socket_timeout=5, connection_timeout=5, block_size=1024))


@pytest.mark.asyncio
async def test_downloads_file(tmp_path):
    content = b"id,name\n" + b"1,alice\n" * 500
    (tmp_path / "data.csv").write_bytes(content)

    async with running_server(tmp_path) as port:
        session = make_session(port)
        try:
            stream = await session.open("127.0.0.1", "data.csv", "alice", "s3cret")
            received = b"".join([block async for block in stream])
        finally:
            await session.close()

    assert received == content


@pytest.mark.asyncio
async def test_missing_file_is_not_found(tmp_path):
    async with running_server(tmp_path) as port:
        session = make_session(port)
        try:
            with pytest.raises(RemoteFileNotFoundException) as exc_info:
                await session.open("127.0.0.1", "missing.csv", "alice", "s3cret")
        finally:
            await session.close()

    assert exc_info.value.details["remote_code"] == 550


@pytest.mark.asyncio
async def test_wrong_password_is_unauthorized(tmp_path):
    async with running_server(tmp_path) as port:
        session = make_session(port)
        try:
            with pytest.raises(RemoteUnauthorizedException) as exc_info:
                await session.open("127.0.0.1", "data.csv", "alice", "wrong")
        finally:
            await session.close()

    assert exc_info.value.details["remote_code"] == 530
