"""
Configuration for the content audit pipeline.

Values come from environment variables (set on the Cloud Function) and are
snapshotted into an immutable Settings object. Tests build Settings directly
or use settings.replace(...) to shrink limits for small fixtures.
"""

import dataclasses
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Credentials and service names
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')  # Required for analysis
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash')
ASSEMBLYAI_API_KEY = os.environ.get('ASSEMBLYAI_API_KEY')  # Required for transcription
GOOGLE_SERVICE_ACCOUNT = os.environ.get('GOOGLE_SERVICE_ACCOUNT')  # JSON, optional in Cloud Functions
GCS_BUCKET = os.environ.get('GCS_BUCKET', 'content-audit-records')
SCOPES = ['https://www.googleapis.com/auth/cloud-platform']

# Limits
MAX_TEXT_LENGTH = 100_000
MAX_MEDIA_BYTES = 100 * 1024 * 1024
MAX_AUDIO_BYTES = 25 * 1024 * 1024  # Transcription upload limit
MAX_IMAGE_BYTES = 20 * 1024 * 1024
MAX_WEBPAGE_CHARS = 80_000
MAX_YOUTUBE_DURATION = 600  # seconds

# Minimum usable content
MIN_WEBPAGE_CHARS = 50
MIN_TRANSCRIPT_CHARS = 50
MIN_DOCUMENT_CHARS = 20

# Timeouts (seconds)
REQUEST_TIMEOUT = 10
DOWNLOAD_TIMEOUT = 60
FFMPEG_TIMEOUT = 120

USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'


@dataclass(frozen=True)
class Settings:
    """Runtime limits and credentials for one pipeline instance."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = GEMINI_MODEL
    analysis_temperature: float = 0.1
    assemblyai_api_key: Optional[str] = None
    google_service_account: Optional[str] = None
    gcs_bucket: str = GCS_BUCKET

    max_text_length: int = MAX_TEXT_LENGTH
    max_media_bytes: int = MAX_MEDIA_BYTES
    max_audio_bytes: int = MAX_AUDIO_BYTES
    max_image_bytes: int = MAX_IMAGE_BYTES
    max_webpage_chars: int = MAX_WEBPAGE_CHARS
    max_youtube_duration: int = MAX_YOUTUBE_DURATION

    min_webpage_chars: int = MIN_WEBPAGE_CHARS
    min_transcript_chars: int = MIN_TRANSCRIPT_CHARS
    min_document_chars: int = MIN_DOCUMENT_CHARS

    request_timeout: float = REQUEST_TIMEOUT
    download_timeout: float = DOWNLOAD_TIMEOUT
    ffmpeg_timeout: float = FFMPEG_TIMEOUT

    user_agent: str = USER_AGENT
    extract_claims: bool = False
    scratch_dir: Optional[str] = None  # None means the system temp dir

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from the current environment."""
        return cls(
            gemini_api_key=os.environ.get('GEMINI_API_KEY', GEMINI_API_KEY),
            gemini_model=os.environ.get('GEMINI_MODEL', GEMINI_MODEL),
            analysis_temperature=_env_float('GEMINI_TEMPERATURE', 0.1),
            assemblyai_api_key=os.environ.get('ASSEMBLYAI_API_KEY', ASSEMBLYAI_API_KEY),
            google_service_account=os.environ.get('GOOGLE_SERVICE_ACCOUNT', GOOGLE_SERVICE_ACCOUNT),
            gcs_bucket=os.environ.get('GCS_BUCKET', GCS_BUCKET),
            max_text_length=_env_int('MAX_TEXT_LENGTH', MAX_TEXT_LENGTH),
            max_media_bytes=_env_int('MAX_MEDIA_BYTES', MAX_MEDIA_BYTES),
            max_audio_bytes=_env_int('MAX_AUDIO_BYTES', MAX_AUDIO_BYTES),
            max_image_bytes=_env_int('MAX_IMAGE_BYTES', MAX_IMAGE_BYTES),
            max_webpage_chars=_env_int('MAX_WEBPAGE_CHARS', MAX_WEBPAGE_CHARS),
            max_youtube_duration=_env_int('MAX_YOUTUBE_DURATION', MAX_YOUTUBE_DURATION),
            min_webpage_chars=_env_int('MIN_WEBPAGE_CHARS', MIN_WEBPAGE_CHARS),
            min_transcript_chars=_env_int('MIN_TRANSCRIPT_CHARS', MIN_TRANSCRIPT_CHARS),
            min_document_chars=_env_int('MIN_DOCUMENT_CHARS', MIN_DOCUMENT_CHARS),
            request_timeout=_env_float('REQUEST_TIMEOUT', REQUEST_TIMEOUT),
            download_timeout=_env_float('DOWNLOAD_TIMEOUT', DOWNLOAD_TIMEOUT),
            ffmpeg_timeout=_env_float('FFMPEG_TIMEOUT', FFMPEG_TIMEOUT),
            extract_claims=_env_bool('CLAIMS_EXTRACTION', False),
            scratch_dir=os.environ.get('SCRATCH_DIR') or None,
        )

    def replace(self, **overrides) -> 'Settings':
        return dataclasses.replace(self, **overrides)
