"""
Pydantic v2 models shared by the client, registry and tracker.

Wire models mirror the transcription backend's JSON; ``Task`` is the
locally tracked view of one backend job.
"""

import mimetypes
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Browsers report these types; mimetypes may guess x- variants instead
AUDIO_EXTENSION_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/x-m4a",
    ".mp4": "audio/mp4",
}

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TaskStatus(StrEnum):
    """Backend job status (``uploading`` only exists locally)."""

    queued = "queued"
    uploading = "uploading"
    processing = "processing"
    completed = "completed"
    error = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.completed, TaskStatus.error)


class TrackerState(StrEnum):
    """States of the upload/poll state machine."""

    idle = "idle"
    uploading = "uploading"
    processing = "processing"
    completed = "completed"
    errored = "errored"


class ValidationReason(StrEnum):
    """Why a candidate file was rejected before upload."""

    no_file_selected = "no-file-selected"
    unsupported_type = "unsupported-type"
    too_large = "too-large"


# ---------------------------------------------------------------------------
# Audio files
# ---------------------------------------------------------------------------


class AudioFile(BaseModel):
    """A candidate audio file as selected by the user."""

    filename: str
    content_type: str
    size: int
    data: bytes = b""

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "AudioFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        path = Path(path)
        data = path.read_bytes()
        if content_type is None:
            content_type = AUDIO_EXTENSION_TYPES.get(path.suffix.lower()) or (
                mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            )
        return cls(filename=path.name, content_type=content_type, size=len(data), data=data)


class ValidationResult(BaseModel):
    """Outcome of file validation: ``Valid(file)`` or ``Invalid(reason)``."""

    file: AudioFile | None = None
    reason: ValidationReason | None = None
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.reason is None and self.file is not None


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class Task(BaseModel):
    """A transcription job tracked by the registry.

    ``provisional`` entries carry a locally generated id until the backend
    acknowledges the upload. Finished tasks leave the registry, so the
    transcript lives on the tracker and in the completion event.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    filename: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: TaskStatus = TaskStatus.queued
    progress: int = Field(default=0, ge=0, le=100)
    error_message: str | None = None
    provisional: bool = False


# ---------------------------------------------------------------------------
# Backend payloads
# ---------------------------------------------------------------------------


class SubmitAcknowledgement(BaseModel):
    """``data`` part of a successful submit response."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    task_id: str
    message: str = ""


class IncompleteTask(BaseModel):
    """One entry of the backend's list of unfinished tasks."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    task_id: str
    status: TaskStatus = TaskStatus.queued
    progress: float = 0.0
    error_message: str | None = None
    created_at: datetime | None = None


class PollResponse(BaseModel):
    """Status of a single task as reported by the backend."""

    status: TaskStatus
    progress: float = 0.0
    transcribed_text: str | None = None
    error: str | None = None
    total_time: float | None = None


class CompletionEvent(BaseModel):
    """Emitted to the host once per task that reaches ``completed``."""

    transcribed_text: str
    task_id: str
    total_time: float | None = None


class HistoryItem(BaseModel):
    """A finished transcription from the history endpoint."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    transcribed_text: str = ""
    created_at: datetime | None = None
    is_bookmarked: bool = False
    audio_file: str | None = None
