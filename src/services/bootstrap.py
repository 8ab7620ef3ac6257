"""Recovery of outstanding tasks from the backend after a restart."""

import logging
from datetime import UTC, datetime

from src.core.models import IncompleteTask, Task
from src.services.api_client import TranscriptionAPIClient

logger = logging.getLogger(__name__)


def clamp_progress(value: float) -> int:
    """Round a backend progress value into the 0-100 range."""
    return max(0, min(100, round(value)))


def task_from_incomplete(entry: IncompleteTask) -> Task:
    return Task(
        id=entry.task_id,
        created_at=entry.created_at or datetime.now(UTC),
        status=entry.status,
        progress=clamp_progress(entry.progress),
        error_message=entry.error_message,
    )


async def load_incomplete_tasks(client: TranscriptionAPIClient, token: str) -> list[Task]:
    """Fetch the backend's unfinished tasks in the order it reports them.

    Raises:
        TransportError: When the backend does not answer.
        BackendRejection: When the backend refuses the request.
    """
    entries = await client.list_incomplete(token)
    tasks = [task_from_incomplete(entry) for entry in entries]
    logger.info("Backend reports %d incomplete task(s)", len(tasks))
    return tasks
