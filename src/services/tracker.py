"""Upload and job-tracking state machine.

Ties the validator, the HTTP client, the task registry and the single-timer
poller together::

    idle -> uploading -> processing -> completed | errored -> idle

Every handler runs on the event loop, so registry mutations never overlap.
Poll results carry the task id they were issued for and are dropped when
that id is no longer the focused task.

Usage::

    tracker = TranscriptionTracker(client, on_complete=show_transcript)
    await tracker.bootstrap(token)
    tracker.select_file(AudioFile.from_path("talk.wav"))
    await tracker.upload(token)
"""

import logging
from collections.abc import Awaitable, Callable
from uuid import uuid4

from src.core.exceptions import (
    FileValidationError,
    TaskError,
    TrackerBusyError,
    TranscriberError,
)
from src.core.models import (
    AudioFile,
    CompletionEvent,
    PollResponse,
    Task,
    TaskStatus,
    TrackerState,
    ValidationReason,
    ValidationResult,
)
from src.services.api_client import ProgressListener, TranscriptionAPIClient
from src.services.bootstrap import clamp_progress, load_incomplete_tasks
from src.services.poller import StatusPoller
from src.services.registry import TaskRegistry
from src.services.validation import validate_audio_file

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[CompletionEvent], Awaitable[None]]


class TranscriptionTracker:
    """Tracks uploads and outstanding backend tasks for one user session.

    The bearer token is never stored on the tracker; each operation that
    talks to the backend takes it as an argument.

    Args:
        client: Backend API client.
        on_complete: Awaited once per task that reaches ``completed``.
        on_upload_progress: Called synchronously with every upload percentage.
        poll_interval: Seconds between status checks (defaults to settings).
        registry: Optional pre-built registry (mainly for tests).
    """

    def __init__(
        self,
        client: TranscriptionAPIClient,
        on_complete: CompletionCallback | None = None,
        on_upload_progress: ProgressListener | None = None,
        poll_interval: float | None = None,
        registry: TaskRegistry | None = None,
    ) -> None:
        self._client = client
        self._on_complete = on_complete
        self._on_upload_progress = on_upload_progress
        self._registry = registry if registry is not None else TaskRegistry()
        self._poller = StatusPoller(self._check_status, interval=poll_interval)

        self.state = TrackerState.idle
        self.selected_file: AudioFile | None = None
        self.upload_progress = 0
        self.transcript: str | None = None
        self.notice: str | None = None
        self._uploading_id: str | None = None

    # -- read-only view --

    @property
    def busy(self) -> bool:
        return self.state in (TrackerState.uploading, TrackerState.processing)

    @property
    def can_upload(self) -> bool:
        return self.selected_file is not None and not self.busy

    @property
    def poller(self) -> StatusPoller:
        return self._poller

    @property
    def focused_task(self) -> Task | None:
        return self._registry.focused

    def tasks(self) -> tuple[Task, ...]:
        return self._registry.list()

    def dismiss_notice(self) -> None:
        self.notice = None

    # -- file selection and upload --

    def select_file(self, file: AudioFile | None) -> ValidationResult:
        """Validate and remember the file to upload next.

        An invalid file clears the selection and sets the notice.
        """
        result = validate_audio_file(file)
        if result.is_valid:
            self.selected_file = result.file
            self.notice = None
        else:
            self.selected_file = None
            self.notice = result.message
            logger.info("Rejected file selection: %s", result.reason)
        return result

    async def upload(self, token: str) -> Task | None:
        """Submit the selected file and start polling the new task.

        Returns:
            The registered task, or None when the upload failed (the
            failure is recorded in ``notice``).

        Raises:
            TrackerBusyError: If an upload or focused task is unresolved.
            FileValidationError: If no valid file is selected.
        """
        if self.busy:
            raise TrackerBusyError()
        file = self.selected_file
        if file is None:
            raise FileValidationError(
                ValidationReason.no_file_selected, "Please select an audio file first"
            )

        self._poller.disarm()
        provisional = Task(
            id=f"local-{uuid4().hex}",
            filename=file.filename,
            status=TaskStatus.uploading,
            provisional=True,
        )
        self._registry.insert(provisional)
        self._uploading_id = provisional.id
        self.state = TrackerState.uploading
        self.upload_progress = 0
        self.transcript = None
        self.notice = None

        try:
            ack = await self._client.submit_audio(file, token, on_progress=self._report_upload)
        except TranscriberError as exc:
            self._registry.remove(provisional.id)
            self.state = TrackerState.errored
            self.notice = exc.detail
            logger.warning("Upload of %s failed: %s", file.filename, exc.detail)
            return None
        finally:
            self._uploading_id = None

        if ack.task_id in self._registry:
            # Already listed by an earlier bootstrap; the provisional row takes its place
            logger.info("Task %s was already listed; replacing it", ack.task_id)
            self._registry.remove(ack.task_id)
        task = self._registry.replace_id(
            provisional.id,
            ack.task_id,
            status=TaskStatus.processing,
            progress=0,
            provisional=False,
        )
        self.selected_file = None
        self.state = TrackerState.processing
        self._poller.arm(task.id, token)
        return task.model_copy()

    def _report_upload(self, percent: int) -> None:
        self.upload_progress = percent
        if self._uploading_id is not None:
            self._registry.update(self._uploading_id, progress=percent)
        if self._on_upload_progress is not None:
            self._on_upload_progress(percent)

    # -- focus and manual actions --

    def select_task(self, index: int, token: str) -> Task:
        """Focus the task at ``index`` and poll it from now on.

        The cached status is shown immediately; the first check is issued
        right away without waiting for the interval.

        Raises:
            TrackerBusyError: While an upload is in flight.
            IndexError: If ``index`` is out of range.
        """
        if self.state == TrackerState.uploading:
            raise TrackerBusyError("Cannot switch tasks while an upload is in progress")
        task = self._registry.focus(index)
        self.transcript = None
        self.state = TrackerState.processing
        self._poller.arm(task.id, token)
        logger.info("Focused task %s (%s, %d%%)", task.id, task.status, task.progress)
        return task.model_copy()

    async def check_now(self, token: str) -> bool:
        """Poll the focused task once without resetting the interval."""
        return await self._poller.check_now(token)

    def reset(self) -> None:
        """Abandon the focused task locally and return to idle.

        Raises:
            TrackerBusyError: While an upload is in flight.
        """
        if self.state == TrackerState.uploading:
            raise TrackerBusyError("Cannot reset while an upload is in progress")
        self._poller.disarm()
        focused = self._registry.focused
        if self.state == TrackerState.processing and focused is not None:
            self._registry.remove(focused.id)
        self.state = TrackerState.idle
        self.selected_file = None
        self.upload_progress = 0
        self.transcript = None
        self.notice = None

    # -- bootstrap --

    async def bootstrap(self, token: str) -> list[Task]:
        """Seed the registry from the backend's incomplete tasks.

        A failed fetch only sets the notice; local state stays as it was.

        Raises:
            TrackerBusyError: While an upload is in flight.
        """
        if self.state == TrackerState.uploading:
            raise TrackerBusyError("Cannot refresh tasks while an upload is in progress")
        try:
            tasks = await load_incomplete_tasks(self._client, token)
        except TranscriberError as exc:
            self.notice = exc.detail
            logger.warning("Could not load incomplete tasks: %s", exc.detail)
            return []

        self._poller.disarm()
        self._registry.clear()
        for task in tasks:
            if task.id in self._registry:
                logger.warning("Skipping duplicate task %s from backend", task.id)
                continue
            self._registry.append(task)

        first = self._registry.focused
        if first is not None and first.progress < 100:
            self.state = TrackerState.processing
            self._poller.arm(first.id, token)
        else:
            self.state = TrackerState.idle
        return list(self._registry.list())

    async def refresh_tasks(self, token: str) -> list[Task]:
        """Manual task-list refresh; same reconciliation as start-up."""
        return await self.bootstrap(token)

    async def aclose(self) -> None:
        await self._poller.stop()

    # -- status reduction --

    async def _check_status(self, task_id: str, token: str) -> None:
        try:
            response = await self._client.get_progress(task_id, token)
        except TranscriberError as exc:
            if self._is_focused(task_id):
                self.notice = exc.detail
            logger.warning("Status check for %s failed: %s", task_id, exc.detail)
            return
        await self.apply_status(task_id, response)

    async def apply_status(self, task_id: str, response: PollResponse) -> None:
        """Apply one poll response issued for ``task_id``.

        Responses for a task that is no longer focused are discarded.
        """
        if not self._is_focused(task_id):
            logger.debug("Discarding stale %s response for task %s", response.status, task_id)
            return
        logger.debug("Task %s: %s %.0f%%", task_id, response.status, response.progress)

        if response.status == TaskStatus.completed:
            await self._complete(task_id, response)
        elif response.status == TaskStatus.error:
            self._fail(task_id, response)
        else:
            task = self._registry.focused
            self._registry.update(
                task_id,
                status=response.status,
                progress=self._next_progress(task, response),
            )

    @staticmethod
    def _next_progress(task: Task, response: PollResponse) -> int:
        """Progress never goes backwards unless the backend re-queued the task."""
        value = clamp_progress(response.progress)
        if response.status == TaskStatus.queued:
            return value
        return max(task.progress, value)

    async def _complete(self, task_id: str, response: PollResponse) -> None:
        self._poller.disarm()
        self._registry.remove(task_id)
        self.transcript = response.transcribed_text or ""
        self.upload_progress = 0
        self.state = TrackerState.completed
        logger.info("Task %s completed", task_id)

        if self._on_complete is None:
            return
        event = CompletionEvent(
            transcribed_text=self.transcript,
            task_id=task_id,
            total_time=response.total_time,
        )
        try:
            await self._on_complete(event)
        except Exception:
            logger.warning("Completion callback failed for task %s (non-fatal)", task_id)

    def _fail(self, task_id: str, response: PollResponse) -> None:
        error = TaskError(task_id, response.error or "Transcription failed")
        self._poller.disarm()
        self._registry.remove(task_id)
        self.upload_progress = 0
        self.state = TrackerState.errored
        self.notice = error.detail
        logger.warning("Task %s failed: %s", task_id, error.detail)

    def _is_focused(self, task_id: str) -> bool:
        focused = self._registry.focused
        return focused is not None and focused.id == task_id and self._poller.task_id == task_id
