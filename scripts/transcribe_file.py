#!/usr/bin/env python3
"""
Transcribe a single audio file from the command line.

Uploads the file, polls the backend until the task finishes and prints
the transcript. With ``--resume`` the script skips the upload and
follows the most recent task the backend still reports as incomplete.

Usage::

    API_TOKEN=... python scripts/transcribe_file.py talk.wav
    API_TOKEN=... python scripts/transcribe_file.py --resume
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``src`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import get_settings  # noqa: E402
from src.core.models import AudioFile, CompletionEvent, TrackerState  # noqa: E402
from src.core.utils import configure_logging  # noqa: E402
from src.services.api_client import TranscriptionAPIClient  # noqa: E402
from src.services.tracker import TranscriptionTracker  # noqa: E402


async def run(path: str | None, token: str) -> int:
    """Drive the tracker until the focused task reaches a terminal state.

    Returns:
        Exit code: 0 when a transcript was printed, 1 otherwise.
    """

    async def on_complete(event: CompletionEvent) -> None:
        print(f"\n--- Task {event.task_id} ({event.total_time or 0:.1f}s) ---")
        print(event.transcribed_text)

    def on_progress(percent: int) -> None:
        print(f"\rUploading: {percent}%", end="", flush=True)

    async with TranscriptionAPIClient() as client:
        tracker = TranscriptionTracker(
            client, on_complete=on_complete, on_upload_progress=on_progress
        )
        try:
            if path is None:
                await tracker.bootstrap(token)
            else:
                result = tracker.select_file(AudioFile.from_path(path))
                if not result.is_valid:
                    print(result.message)
                    return 1
                await tracker.upload(token)

            while tracker.state == TrackerState.processing:
                await asyncio.sleep(0.5)
        finally:
            await tracker.aclose()

        if tracker.notice:
            print(f"\n{tracker.notice}")
        if tracker.state == TrackerState.idle:
            print("No incomplete tasks to follow.")
        return 0 if tracker.state == TrackerState.completed else 1


def main() -> int:
    """Entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Upload an audio file and wait for its transcript")
    parser.add_argument("file", nargs="?", help="Audio file (MP3, WAV or M4A)")
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Follow the newest incomplete task instead of uploading",
    )
    parser.add_argument("--token", default=None, help="Bearer token (defaults to API_TOKEN)")
    args = parser.parse_args()

    if args.file is None and not args.resume:
        parser.error("a file is required unless --resume is given")

    settings = get_settings()
    configure_logging(settings.log_level)
    token = args.token or settings.api_token
    if not token:
        parser.error("no token given; pass --token or set API_TOKEN")
    return asyncio.run(run(None if args.resume else args.file, token))


if __name__ == "__main__":
    sys.exit(main())
