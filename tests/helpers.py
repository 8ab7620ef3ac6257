"""Helpers shared by event-loop tests."""

import asyncio


def live_poll_timers() -> list[asyncio.Task]:
    """Polling timers that are still running on the current loop."""
    return [
        task
        for task in asyncio.all_tasks()
        if task.get_name().startswith("poll:") and not task.done()
    ]
