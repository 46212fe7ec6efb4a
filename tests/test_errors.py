"""Tests for error classification and rendering."""

import json

from user_microservice import (
    ApiError,
    ConflictError,
    NotImplementedApiError,
    RequestValidationError,
    UnexpectedError,
    UserAlreadyRegisteredError,
)
from user_microservice.errors import normalize_error, render_api_error


def test_api_errors_pass_through_unchanged():
    original = ApiError(418, "Teapot", {"brew": "tea"})

    assert normalize_error(original, "Failed", attach_cause=True, detect_conflict=True) is original


def test_duplicate_registration_becomes_conflict():
    for exc in (UserAlreadyRegisteredError(), ValueError("User already registered")):
        error = normalize_error(exc, "Failed to register user", detect_conflict=True)

        assert isinstance(error, ConflictError)
        assert error.status_code == 409
        assert error.message == "Email is already registered"


def test_conflict_detection_is_opt_in():
    error = normalize_error(UserAlreadyRegisteredError(), "Failed to change password")

    assert isinstance(error, UnexpectedError)
    assert error.status_code == 500


def test_unexpected_error_attaches_cause_only_on_request():
    cause = RuntimeError("socket closed")

    with_cause = normalize_error(cause, "Failed to register user", attach_cause=True)
    without_cause = normalize_error(cause, "Failed to retrieve user profile")

    assert with_cause.cause is cause
    assert with_cause.message == "Failed to register user"
    assert without_cause.cause is None


def test_render_hides_cause_by_default():
    error = UnexpectedError("Failed to register user", cause=RuntimeError("secret"))

    response = render_api_error(error)

    assert response.status_code == 500
    assert json.loads(response.body) == {"status": "error", "message": "Failed to register user"}


def test_render_drops_exception_details():
    error = ApiError(500, "Failed", details=RuntimeError("stack"))

    assert json.loads(render_api_error(error).body) == {"status": "error", "message": "Failed"}


def test_validation_error_carries_failures():
    errors = [{"field": "email", "message": '"email" is required'}]

    error = RequestValidationError(errors)

    assert error.status_code == 400
    assert json.loads(render_api_error(error).body) == {
        "status": "error",
        "message": "Validation Error",
        "details": {"errors": errors},
    }


def test_not_implemented_error():
    error = NotImplementedApiError()

    assert error.status_code == 501
    assert error.message == "Not implemented yet"
