"""Tests for mapping HTTP failures onto the error taxonomy."""

import pytest

from bingo.errors import (
    Conflict,
    Forbidden,
    NotFound,
    Outcome,
    ServerError,
    Unauthorized,
    ValidationError,
    error_for_status,
)


@pytest.mark.parametrize(
    "status, cls",
    [
        (401, Unauthorized),
        (403, Forbidden),
        (404, NotFound),
        (409, Conflict),
        (412, Conflict),
        (429, ServerError),
        (500, ServerError),
    ],
)
def test_status_mapping(status, cls):
    error = error_for_status(status, {"error": "nope"})
    assert type(error) is cls
    assert error.status == status
    assert error.message == "nope"


def test_envelope_with_field_details():
    body = {
        "code": "validation_failed",
        "message": "Invalid board",
        "details": {"fields": {"title": "Title is required"}},
        "requestId": "req-1",
    }
    error = error_for_status(422, body)
    assert isinstance(error, ValidationError)
    assert error.kind == "validation"
    assert error.fields == {"title": "Title is required"}
    assert error.request_id == "req-1"


def test_legacy_error_body_with_data():
    error = error_for_status(400, {"error": "Invalid input", "data": {"size": "too big"}})
    assert isinstance(error, ValidationError)
    assert error.message == "Invalid input"
    assert error.fields == {"size": "too big"}


def test_fastapi_detail_and_plain_bodies():
    assert error_for_status(404, {"detail": "Board not found"}).message == "Board not found"
    assert error_for_status(502, "Bad Gateway").message == "Bad Gateway"
    assert error_for_status(500, None).message == "request_failed"
    assert error_for_status(422, {"detail": [{"loc": ["body"]}]}).fields == {}


def test_outcome():
    assert Outcome.success(3).ok
    failed = Outcome.failure(NotFound("gone"))
    assert not failed.ok
    assert failed.value is None
