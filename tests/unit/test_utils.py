"""Unit tests for error-message extraction and the exception hierarchy."""

import pytest

from src.core.exceptions import (
    BackendRejection,
    FileValidationError,
    TaskError,
    TranscriberError,
    TrackerBusyError,
    TransportError,
)
from src.core.utils import DEFAULT_ERROR_MESSAGE, extract_error_message


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"detail": "Token expired", "error": "other"}, "Token expired"),
        ({"error": "File corrupt"}, "File corrupt"),
        ({"audio": ["This field is required."]}, "This field is required."),
        (["Too", "many", "requests"], "Too many requests"),
        ("Bad Gateway", "Bad Gateway"),
        ({}, DEFAULT_ERROR_MESSAGE),
        ({"detail": ""}, DEFAULT_ERROR_MESSAGE),
        (None, DEFAULT_ERROR_MESSAGE),
        ("   ", DEFAULT_ERROR_MESSAGE),
    ],
)
def test_extract_error_message(body, expected):
    assert extract_error_message(body) == expected


class TestExceptions:
    def test_all_inherit_from_base(self):
        for exc in (
            FileValidationError("too-large"),
            TransportError(),
            BackendRejection("nope"),
            TaskError("t1"),
            TrackerBusyError(),
        ):
            assert isinstance(exc, TranscriberError)
            assert exc.timestamp

    def test_codes(self):
        assert FileValidationError("too-large").code == "VALIDATION_ERROR"
        assert TransportError().code == "TRANSPORT_ERROR"
        assert BackendRejection("x").code == "BACKEND_REJECTION"
        assert TaskError("t1").code == "TASK_ERROR"
        assert TrackerBusyError().code == "TRACKER_BUSY"

    def test_task_error_carries_task_id(self):
        exc = TaskError("t1", "decoder failure")

        assert exc.task_id == "t1"
        assert str(exc) == "decoder failure"

    def test_rejection_status_code(self):
        assert BackendRejection("x", status_code=403).status_code == 403
        assert BackendRejection("x").status_code is None
