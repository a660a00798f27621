import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_transfer_service
from application.services.transfer_service import FtpImportService
from domain.common.exceptions import (
    RemoteFileNotFoundException,
    RemoteUnauthorizedException,
    StorageWriteException,
    TransferException,
)
from main import app

URL = "/api/v1/import-ftp"


@pytest.fixture
def wire(fake_session_cls, fake_sink_port_cls):
    """Install a service built from fakes; returns (session, port)."""

    def _wire(**session_kwargs):
        session = fake_session_cls(**session_kwargs.pop("session", {}))
        port = fake_sink_port_cls(**session_kwargs.pop("port", {}))
        service = FtpImportService(storage=port, session_factory=lambda: session)
        app.dependency_overrides[get_transfer_service] = lambda: service
        return session, port

    yield _wire
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
def test_non_post_returns_405(client, wire, valid_payload, method):
    session, _ = wire()

    resp = client.request(method, URL, json=valid_payload)

    assert resp.status_code == 405
    body = resp.json()
    assert body["message"] == "Only POST requests are accepted."
    assert body["error"]["type"] == "InvalidMethod"
    assert session.close_calls == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"bucketName": "b", "fileName": "f"},
        {"host": "h", "fileName": "f"},
        {"host": "h", "bucketName": "b"},
    ],
)
def test_missing_required_field_returns_400(client, wire, payload):
    wire()
    resp = client.post(URL, json=payload)
    assert resp.status_code == 400


def test_empty_body_reports_bucket_name(client, wire):
    wire()

    resp = client.post(URL, json={})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["field"] == "bucketName"
    assert body["message"] == "Required property: bucketName not found"


def test_invalid_json_is_body_required(client, wire):
    wire()

    resp = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["message"] == "Body required"


def test_valid_request_returns_success(client, wire, valid_payload):
    session, port = wire()

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 200
    assert resp.json() == {"message": "success"}
    assert session.close_calls == 1
    assert bytes(port.sinks[0].data) == b"hello world"


def test_request_id_is_echoed(client, wire, valid_payload):
    wire()
    resp = client.post(URL, json=valid_payload, headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


@pytest.mark.parametrize(
    "error, status",
    [
        (RemoteFileNotFoundException("data.csv", remote_code=550), 404),
        (RemoteUnauthorizedException("ftp.example.com", remote_code=530), 401),
        (TransferException("service not available", remote_code=421), 500),
    ],
)
def test_remote_failures_map_to_status(client, wire, valid_payload, error, status):
    session, _ = wire(session={"open_error": error})

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == status
    assert resp.json()["code"] == int(error.code)
    assert session.close_calls == 1


def test_remote_code_is_reported_not_passed_through(client, wire, valid_payload):
    wire(session={"open_error": TransferException("busy", remote_code=421)})

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 500
    assert resp.json()["error"]["details"]["remote_code"] == 421


def test_storage_failure_uses_status_hint(client, wire, valid_payload):
    wire(port={"open_error": StorageWriteException("denied", bucket="bucket", status_hint=403)})

    resp = client.post(URL, json=valid_payload)

    assert resp.status_code == 403
    assert resp.json()["error"]["type"] == "StorageError"


def test_storage_failure_defaults_to_500(client, wire, valid_payload):
    wire(port={"write_error": StorageWriteException("broken pipe")})
    resp = client.post(URL, json=valid_payload)
    assert resp.status_code == 500


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}


def test_end_to_end_into_local_storage(client, fake_session_cls, tmp_path, valid_payload):
    from infrastructure.adapters.storage_port import StorageProviderSinkAdapter
    from infrastructure.external.storage.config import StorageConfig
    from infrastructure.external.storage.providers.local import LocalProvider

    provider = LocalProvider(StorageConfig(type="local", local_base_path=str(tmp_path)))

    async def get_provider():
        return provider

    session = fake_session_cls(blocks=[b"id,name\n", b"1,alice\n"])
    service = FtpImportService(
        storage=StorageProviderSinkAdapter(get_provider),
        session_factory=lambda: session,
    )
    app.dependency_overrides[get_transfer_service] = lambda: service
    try:
        resp = client.post(URL, json=valid_payload)
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert (tmp_path / "bucket" / "data.csv").read_bytes() == b"id,name\n1,alice\n"
    assert session.open_calls == [("ftp.example.com", "data.csv", "alice", "s3cret")]


@pytest.mark.parametrize("origin", ["http://localhost:3000", "http://evil.example"])
def test_cross_origin_preflight_is_405(client, wire, origin):
    session, _ = wire()

    resp = client.request(
        "OPTIONS",
        URL,
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 405
    assert resp.json()["message"] == "Only POST requests are accepted."
    assert session.open_calls == []


@pytest.mark.parametrize("method", ["TRACE", "PROPFIND"])
def test_verbs_rejected_by_router_use_same_405(client, wire, method):
    wire()

    resp = client.request(method, URL)

    assert resp.status_code == 405
    assert resp.headers["Allow"] == "POST"
    body = resp.json()
    assert body["message"] == "Only POST requests are accepted."
    assert body["error"]["type"] == "InvalidMethod"
    assert body["error"]["details"] == {"method": method}


def test_other_routes_keep_plain_405(client):
    resp = client.post("/health")

    assert resp.status_code == 405
    assert resp.json()["error"]["type"] == "HTTPError"
