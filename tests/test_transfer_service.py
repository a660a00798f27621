import pytest

from application.services.transfer_service import FtpImportService
from domain.common.exceptions import (
    InvalidMethodException,
    RemoteFileNotFoundException,
    RemoteUnauthorizedException,
    RequestValidationException,
    StorageWriteException,
    TransferException,
)


def _service(session, port):
    return FtpImportService(storage=port, session_factory=lambda: session)


@pytest.mark.asyncio
async def test_successful_transfer_pipes_all_bytes(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls(blocks=[b"a" * 10, b"b" * 5])
    port = fake_sink_port_cls()

    outcome = await _service(session, port).execute("POST", valid_payload)

    assert outcome.ok
    assert outcome.result.size == 15
    assert session.open_calls == [("ftp.example.com", "data.csv", "alice", "s3cret")]
    assert session.close_calls == 1
    sink = port.sinks[0]
    assert (sink.bucket, sink.key) == ("bucket", "data.csv")
    assert bytes(sink.data) == b"a" * 10 + b"b" * 5
    assert sink.closed and not sink.aborted


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "get"])
async def test_non_post_is_rejected_before_validation(fake_session_cls, fake_sink_port_cls, method):
    session = fake_session_cls()

    outcome = await _service(session, fake_sink_port_cls()).execute(method, {})

    assert isinstance(outcome.error, InvalidMethodException)
    assert outcome.error.message == "Only POST requests are accepted."
    assert session.open_calls == []
    assert session.close_calls == 0


@pytest.mark.asyncio
async def test_method_check_is_case_insensitive(fake_session_cls, fake_sink_port_cls, valid_payload):
    outcome = await _service(fake_session_cls(), fake_sink_port_cls()).execute("post", valid_payload)
    assert outcome.ok


@pytest.mark.asyncio
async def test_validation_failure_never_opens_session(fake_session_cls, fake_sink_port_cls):
    session = fake_session_cls()

    outcome = await _service(session, fake_sink_port_cls()).execute("POST", {"host": "h", "fileName": "f"})

    assert isinstance(outcome.error, RequestValidationException)
    assert outcome.error.field == "bucketName"
    assert session.open_calls == []
    assert session.close_calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        RemoteFileNotFoundException("data.csv", remote_code=550),
        RemoteUnauthorizedException("ftp.example.com", remote_code=530),
        TransferException("boom", remote_code=421),
    ],
)
async def test_open_failure_is_reported_and_session_closed(fake_session_cls, fake_sink_port_cls, valid_payload, error):
    session = fake_session_cls(open_error=error)
    port = fake_sink_port_cls()

    outcome = await _service(session, port).execute("POST", valid_payload)

    assert outcome.error is error
    assert session.close_calls == 1
    assert port.sinks == []


@pytest.mark.asyncio
async def test_stream_error_aborts_sink(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls(stream_error=TransferException("connection reset"))
    port = fake_sink_port_cls()

    outcome = await _service(session, port).execute("POST", valid_payload)

    assert isinstance(outcome.error, TransferException)
    assert port.sinks[0].aborted
    assert not port.sinks[0].closed
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_sink_write_error_is_storage_failure(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls()
    port = fake_sink_port_cls(write_error=StorageWriteException("disk full", status_hint=507))

    outcome = await _service(session, port).execute("POST", valid_payload)

    assert isinstance(outcome.error, StorageWriteException)
    assert port.sinks[0].aborted
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_sink_open_error_closes_session(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls()
    port = fake_sink_port_cls(open_error=StorageWriteException("bucket unreachable"))

    outcome = await _service(session, port).execute("POST", valid_payload)

    assert isinstance(outcome.error, StorageWriteException)
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_unexpected_error_becomes_transfer_error(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls(open_error=RuntimeError("unexpected"))

    outcome = await _service(session, fake_sink_port_cls()).execute("POST", valid_payload)

    assert isinstance(outcome.error, TransferException)
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_close_failure_does_not_override_outcome(fake_session_cls, fake_sink_port_cls, valid_payload):
    session = fake_session_cls(close_error=ConnectionResetError("gone"))

    outcome = await _service(session, fake_sink_port_cls()).execute("POST", valid_payload)

    assert outcome.ok
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_close_failure_keeps_original_error(fake_session_cls, fake_sink_port_cls, valid_payload):
    original = RemoteFileNotFoundException("data.csv")
    session = fake_session_cls(open_error=original, close_error=OSError("gone"))

    outcome = await _service(session, fake_sink_port_cls()).execute("POST", valid_payload)

    assert outcome.error is original
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_each_invocation_gets_its_own_session(fake_session_cls, fake_sink_port_cls, valid_payload):
    sessions = []

    def factory():
        sessions.append(fake_session_cls())
        return sessions[-1]

    service = FtpImportService(storage=fake_sink_port_cls(), session_factory=factory)
    await service.execute("POST", valid_payload)
    await service.execute("POST", valid_payload)

    assert len(sessions) == 2
    assert [s.close_calls for s in sessions] == [1, 1]
