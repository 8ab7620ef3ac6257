"""Local validation of audio files before any network call."""

from src.core.config import get_settings
from src.core.models import AudioFile, ValidationReason, ValidationResult

_MESSAGES = {
    ValidationReason.no_file_selected: "No file selected",
    ValidationReason.unsupported_type: "Invalid file type. Please upload MP3, WAV, or M4A.",
    ValidationReason.too_large: "File is too large. Maximum file size is {limit}MB.",
}


def validate_audio_file(
    file: AudioFile | None,
    allowed_types: list[str] | None = None,
    max_bytes: int | None = None,
) -> ValidationResult:
    """Check presence, MIME type and size of a candidate file.

    Args:
        file: The selected file, or None when nothing was picked.
        allowed_types: Accepted MIME types (defaults to settings).
        max_bytes: Inclusive size limit in bytes (defaults to settings).

    Returns:
        ValidationResult carrying either the file or the rejection reason.
    """
    if allowed_types is None or max_bytes is None:
        settings = get_settings()
        allowed_types = allowed_types if allowed_types is not None else settings.allowed_audio_types
        max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes

    if file is None:
        return _invalid(ValidationReason.no_file_selected, max_bytes)
    if file.content_type not in allowed_types:
        return _invalid(ValidationReason.unsupported_type, max_bytes)
    if file.size > max_bytes:
        return _invalid(ValidationReason.too_large, max_bytes)
    return ValidationResult(file=file)


def _invalid(reason: ValidationReason, max_bytes: int) -> ValidationResult:
    message = _MESSAGES[reason].format(limit=max_bytes // (1024 * 1024))
    return ValidationResult(reason=reason, message=message)
