"""
Size and format guards.

Run before any expensive call (network fetch, transcription, OCR, analysis)
so that oversized input is rejected early with LimitExceeded.
"""

from typing import Optional

from .errors import ErrorKind, Failure


def _megabytes(size: int) -> str:
    return f"{size / 1024 / 1024:.1f}MB"


def check_text_length(text: str, max_length: int) -> Optional[Failure]:
    if text is not None and len(text) > max_length:
        return Failure(
            ErrorKind.LIMIT_EXCEEDED,
            f"Text content exceeds {max_length} characters limit ({len(text)} chars)"
        )
    return None


def check_byte_size(data: Optional[bytes], max_bytes: int, label: str = 'File') -> Optional[Failure]:
    if data is None:
        return Failure(ErrorKind.NO_CONTENT, f"{label} is empty")
    if len(data) > max_bytes:
        return Failure(
            ErrorKind.LIMIT_EXCEEDED,
            f"{label} size ({_megabytes(len(data))}) exceeds limit of {_megabytes(max_bytes)}"
        )
    if len(data) == 0:
        return Failure(ErrorKind.NO_CONTENT, f"{label} is empty")
    return None


def check_duration(duration_seconds: Optional[float], max_seconds: int) -> Optional[Failure]:
    if duration_seconds and duration_seconds > max_seconds:
        return Failure(
            ErrorKind.LIMIT_EXCEEDED,
            f"Video duration ({int(duration_seconds)}s) exceeds {max_seconds // 60} minutes"
        )
    return None


def check_mime_subtype(mime_type: str, allowed_subtypes, label: str = 'media') -> Optional[Failure]:
    subtype = (mime_type or '').split(';')[0].split('/')[-1].strip().lower()
    if subtype not in allowed_subtypes:
        return Failure(ErrorKind.UNSUPPORTED_FORMAT, f"Unsupported {label} type: {mime_type or 'unknown'}")
    return None
