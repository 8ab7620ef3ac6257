"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Transcription client settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        api_base_url: Root of the transcription backend API (trailing slash kept).
        poll_interval_seconds: Delay between status checks of the focused task.
        max_upload_bytes: Largest audio file accepted by the validator.
        request_timeout: Per-request timeout in seconds; None disables it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Backend ---
    api_base_url: str = "https://hillarymutai.pythonanywhere.com/api/"
    api_token: str = ""  # Only read by scripts/; the core takes tokens as arguments
    request_timeout: float | None = None  # Polls wait as long as the backend does

    # --- Polling ---
    poll_interval_seconds: float = 3.0

    # --- Upload validation ---
    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_audio_types: list[str] = Field(
        default_factory=lambda: ["audio/mpeg", "audio/wav", "audio/mp4", "audio/x-m4a"]
    )
    upload_chunk_size: int = 64 * 1024  # Bytes per progress event

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
