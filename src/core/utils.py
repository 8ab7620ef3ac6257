"""Shared utility functions for the transcriber client."""

import logging
from typing import Any

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def extract_error_message(body: Any) -> str:
    """Pick a human-readable message out of a backend error body.

    Checks ``detail`` then ``error``; a list is joined with spaces and any
    other mapping yields its first value.
    """
    if isinstance(body, dict):
        for key in ("detail", "error"):
            if body.get(key):
                return _as_text(body[key])
        for value in body.values():
            if value:
                return _as_text(value)
        return DEFAULT_ERROR_MESSAGE
    if isinstance(body, list):
        return " ".join(_as_text(item) for item in body) or DEFAULT_ERROR_MESSAGE
    if isinstance(body, str) and body.strip():
        return body.strip()
    return DEFAULT_ERROR_MESSAGE


def _as_text(value: Any) -> str:
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    return str(value)
