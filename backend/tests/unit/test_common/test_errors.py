"""
Test application error payloads
"""

from redisweb.common.errors import (
    AppError,
    KeyExistsError,
    MalformedJSONError,
    PartialTTLFailureError,
    StoreUnavailableError,
    TypeConflictError,
    ValidationError,
)


def test_to_dict_shape():
    error = KeyExistsError("user:1")

    assert error.status_code == 409
    assert error.to_dict() == {
        "error": {
            "message": "Key 'user:1' already exists",
            "type": "conflict_error",
            "code": "key_exists",
            "details": {"key": "user:1"},
        }
    }


def test_to_dict_without_details():
    payload = KeyExistsError("user:1").to_dict(include_details=False)

    assert "details" not in payload["error"]


def test_decode_errors_are_validation_errors():
    error = MalformedJSONError("Invalid JSON")

    assert isinstance(error, ValidationError)
    assert error.status_code == 422
    assert error.code == "malformed_json"


def test_partial_ttl_failure_reports_written_value():
    error = PartialTTLFailureError("session:1", "timeout")

    assert isinstance(error, AppError)
    assert error.status_code == 500
    assert error.details["value_written"] is True
    assert "timeout" in error.message


def test_store_errors():
    assert StoreUnavailableError().status_code == 503
    conflict = TypeConflictError("k", "hash", "list")
    assert conflict.details == {"key": "k", "expected": "hash", "actual": "list"}
