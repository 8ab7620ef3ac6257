"""Single-timer status poller.

At most one polling ``asyncio.Task`` exists per poller. Arming a new task
id cancels the previous timer before the new one starts, so the number of
live timers never depends on how many tasks are registered.

Usage::

    poller = StatusPoller(check=tracker_check, interval=3.0)
    poller.arm("t1", token)      # first check runs immediately
    await poller.check_now(token)
    await poller.stop()
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from src.core.config import get_settings

logger = logging.getLogger(__name__)

StatusCheck = Callable[[str, str], Awaitable[None]]


class StatusPoller:
    """Periodically runs ``check(task_id, token)`` for the armed task.

    Args:
        check: Coroutine that fetches and applies one status update.
        interval: Seconds between checks (defaults to settings).
    """

    def __init__(self, check: StatusCheck, interval: float | None = None) -> None:
        self._check = check
        self._interval = (
            interval if interval is not None else get_settings().poll_interval_seconds
        )
        self._timer: asyncio.Task | None = None
        self._task_id: str | None = None
        self._token: str | None = None

    @property
    def task_id(self) -> str | None:
        """Id of the task currently being polled, or None when disarmed."""
        return self._task_id

    @property
    def is_armed(self) -> bool:
        return self._timer is not None

    def arm(self, task_id: str, token: str) -> None:
        """Start polling ``task_id``, replacing any existing timer."""
        self.disarm()
        self._task_id = task_id
        self._token = token
        self._timer = asyncio.create_task(
            self._poll_loop(task_id, token), name=f"poll:{task_id}"
        )
        logger.info("Polling armed for task %s every %.1fs", task_id, self._interval)

    def disarm(self) -> None:
        """Stop the current timer.

        Safe to call from inside a check: the running loop is not cancelled
        mid-check, it simply exits before its next sleep.
        """
        timer = self._timer
        self._timer = None
        if self._task_id is not None:
            logger.info("Polling disarmed for task %s", self._task_id)
        self._task_id = None
        self._token = None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    async def check_now(self, token: str | None = None) -> bool:
        """Run one check for the armed task without touching the schedule.

        Returns:
            False when nothing is armed, True otherwise.
        """
        if self._task_id is None:
            return False
        await self._check(self._task_id, token or self._token or "")
        return True

    async def stop(self) -> None:
        """Disarm and wait for the cancelled timer to finish."""
        timer = self._timer
        self.disarm()
        if timer is not None and timer is not asyncio.current_task():
            try:
                await timer
            except asyncio.CancelledError:
                pass

    async def _poll_loop(self, task_id: str, token: str) -> None:
        me = asyncio.current_task()
        try:
            while self._timer is me:
                await self._check(task_id, token)
                if self._timer is not me:
                    break
                await asyncio.sleep(self._interval)
        except Exception:
            logger.exception("Polling loop crashed for task %s", task_id)
            if self._timer is me:
                self._timer = None
                self._task_id = None
                self._token = None
