"""Pytest bootstrap configuration.

Environment defaults are set before any application module is imported,
then shared fakes for the transfer session and the storage sink are exposed
as fixtures.
"""
import os
import tempfile

os.environ.setdefault("STORAGE__TYPE", "local")
os.environ.setdefault("STORAGE__LOCAL_BASE_PATH", os.path.join(tempfile.gettempdir(), "ftp-bridge-tests"))
os.environ.setdefault("DEBUG", "false")

import pytest

from application.ports.storage import SinkResult


class FakeSession:
    """In-memory TransferSession recording every call."""

    def __init__(self, blocks=(b"hello ", b"world"), open_error=None, stream_error=None, close_error=None):
        self.blocks = list(blocks)
        self.open_error = open_error
        self.stream_error = stream_error
        self.close_error = close_error
        self.open_calls = []
        self.close_calls = 0

    async def open(self, host, file_name, user=None, password=None):
        self.open_calls.append((host, file_name, user, password))
        if self.open_error is not None:
            raise self.open_error
        return self._iter()

    async def _iter(self):
        for block in self.blocks:
            yield block
        if self.stream_error is not None:
            raise self.stream_error

    async def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeSink:
    def __init__(self, bucket, key, write_error=None, close_error=None):
        self.bucket = bucket
        self.key = key
        self.write_error = write_error
        self.close_error = close_error
        self.data = bytearray()
        self.closed = False
        self.aborted = False

    async def write(self, chunk):
        if self.write_error is not None:
            raise self.write_error
        self.data.extend(chunk)

    async def close(self):
        if self.close_error is not None:
            raise self.close_error
        self.closed = True
        return SinkResult(bucket=self.bucket, key=self.key, size=len(self.data), etag="etag")

    async def abort(self):
        self.aborted = True


class FakeSinkPort:
    def __init__(self, open_error=None, write_error=None, close_error=None):
        self.open_error = open_error
        self.write_error = write_error
        self.close_error = close_error
        self.sinks = []

    async def open_sink(self, bucket, key):
        if self.open_error is not None:
            raise self.open_error
        sink = FakeSink(bucket, key, self.write_error, self.close_error)
        self.sinks.append(sink)
        return sink


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def fake_sink_port_cls():
    return FakeSinkPort


@pytest.fixture
def valid_payload():
    return {
        "bucketName": "bucket",
        "host": "ftp.example.com",
        "fileName": "data.csv",
        "user": "alice",
        "password": "s3cret",
    }
