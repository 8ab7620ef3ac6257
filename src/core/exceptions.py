"""
Transcriber exception hierarchy.

All application-specific exceptions inherit from TranscriberError,
so the tracker can catch them at one boundary and turn them into a notice.
"""

from datetime import UTC, datetime


class TranscriberError(Exception):
    """Base exception for all transcriber client errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "TRANSCRIBER_ERROR",
    ) -> None:
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class FileValidationError(TranscriberError):
    """Raised when a candidate audio file fails local validation."""

    def __init__(self, reason: str, detail: str | None = None) -> None:
        self.reason = reason
        super().__init__(
            detail=detail or f"Invalid file: {reason}",
            code="VALIDATION_ERROR",
        )


class TransportError(TranscriberError):
    """Raised when a request produced no response from the backend."""

    def __init__(
        self,
        detail: str = "No response received from server. "
        "Please check your network connection.",
    ) -> None:
        super().__init__(detail=detail, code="TRANSPORT_ERROR")


class BackendRejection(TranscriberError):
    """Raised when the backend answers with an explicit failure."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail=detail, code="BACKEND_REJECTION")


class TaskError(TranscriberError):
    """Raised when a backend task reaches the ``error`` status."""

    def __init__(self, task_id: str, detail: str = "Transcription failed") -> None:
        self.task_id = task_id
        super().__init__(detail=detail, code="TASK_ERROR")


class TrackerBusyError(TranscriberError):
    """Raised when an action is refused because an upload or task is unresolved."""

    def __init__(self, detail: str = "An upload or transcription is already in progress") -> None:
        super().__init__(detail=detail, code="TRACKER_BUSY")
