"""Shared pytest fixtures for the transcriber client test suite.

Provides settings isolated from the environment, sample audio files, a
mocked API client and a small polling helper for event-loop tests.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.core.config import Settings
from src.core.models import AudioFile

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings pointing at a fake backend, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        api_base_url="http://test/api/",
        poll_interval_seconds=60.0,
        upload_chunk_size=1024,
    )


# ---------------------------------------------------------------------------
# Audio fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def wav_file():
    """A 2 MB WAV file selected by the user."""
    data = b"RIFF" + b"\x00" * (2 * 1024 * 1024 - 4)
    return AudioFile(filename="meeting.wav", content_type="audio/wav", size=len(data), data=data)


@pytest.fixture
def small_wav_file():
    """A 5000-byte WAV file, large enough to span several upload chunks."""
    data = b"\x01" * 5000
    return AudioFile(filename="talk.wav", content_type="audio/wav", size=len(data), data=data)


@pytest.fixture
def png_file():
    data = b"\x89PNG" + b"\x00" * 100
    return AudioFile(filename="photo.png", content_type="image/png", size=len(data), data=data)


# ---------------------------------------------------------------------------
# Client / event-loop helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_client():
    """Create a mock TranscriptionAPIClient.

    Returns:
        AsyncMock: Every coroutine method is an AsyncMock, so tests set
        ``return_value`` / ``side_effect`` per endpoint.
    """
    from src.services.api_client import TranscriptionAPIClient

    return AsyncMock(spec=TranscriptionAPIClient)


@pytest.fixture
def wait_until():
    """Return a coroutine that yields to the loop until ``predicate()`` holds."""

    async def _wait(predicate, timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.001)

    return _wait

