import pytest

from domain.common.exceptions import RequestValidationException
from domain.transfer import REQUIRED_FIELDS, TransferRequest, validate_transfer_payload
from shared.codes import BusinessCode


def test_required_field_order_is_stable():
    assert REQUIRED_FIELDS == ("bucketName", "host", "fileName")


@pytest.mark.parametrize("payload", [None, [], "text", 42])
def test_missing_or_non_object_body(payload):
    with pytest.raises(RequestValidationException) as exc_info:
        validate_transfer_payload(payload)
    assert exc_info.value.message == "Body required"
    assert exc_info.value.code == BusinessCode.PARAM_MISSING


@pytest.mark.parametrize(
    "payload, missing",
    [
        ({}, "bucketName"),
        ({"fileName": "f"}, "bucketName"),
        ({"bucketName": "b", "fileName": "f"}, "host"),
        ({"host": "h", "fileName": "f"}, "bucketName"),
        ({"host": "h", "bucketName": "b"}, "fileName"),
        ({"bucketName": "", "host": "h", "fileName": "f"}, "bucketName"),
        ({"bucketName": "b", "host": 123, "fileName": "f"}, "host"),
        ({"bucketName": "b", "host": "h", "fileName": None}, "fileName"),
    ],
)
def test_reports_first_missing_field_only(payload, missing):
    with pytest.raises(RequestValidationException) as exc_info:
        validate_transfer_payload(payload)
    assert exc_info.value.field == missing
    assert exc_info.value.message == f"Required property: {missing} not found"


def test_credentials_are_not_validated():
    validate_transfer_payload({"bucketName": "b", "host": "h", "fileName": "f", "user": 5, "password": None})


def test_request_from_payload_is_immutable(valid_payload):
    request = TransferRequest.from_payload(valid_payload)
    assert request.bucket_name == "bucket"
    assert request.file_name == "data.csv"
    assert request.user == "alice"
    with pytest.raises(AttributeError):
        request.host = "other"  # type: ignore[misc]


def test_request_ignores_non_string_credentials():
    request = TransferRequest.from_payload({"bucketName": "b", "host": "h", "fileName": "f", "user": 1})
    assert request.user is None
    assert request.password is None


def test_request_repr_hides_password(valid_payload):
    assert "s3cret" not in repr(TransferRequest.from_payload(valid_payload))
