"""Data model for the content audit pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .errors import Result


class ContentType(str, Enum):
    TEXT = 'text'
    URL = 'url'
    WEBPAGE = 'webpage'
    VIDEO = 'video'
    AUDIO = 'audio'
    IMAGE = 'image'
    DOCUMENT = 'document'
    UNKNOWN = 'unknown'


class UrlKind(str, Enum):
    YOUTUBE = 'youtube'
    VIDEO = 'video'
    AUDIO = 'audio'
    WEBPAGE = 'webpage'


@dataclass(frozen=True)
class RawInput:
    """
    One request payload. Exactly one variant is populated:

    - kind="text": value holds the text
    - kind="url": value holds the URL
    - kind="file": data, mime_type and file_name describe the upload
    """

    kind: str
    value: Optional[str] = None
    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    file_name: Optional[str] = None

    @classmethod
    def from_text(cls, value: str) -> 'RawInput':
        return cls(kind='text', value=value)

    @classmethod
    def from_url(cls, value: str) -> 'RawInput':
        return cls(kind='url', value=value)

    @classmethod
    def from_file(cls, data: bytes, mime_type: Optional[str], file_name: Optional[str]) -> 'RawInput':
        return cls(kind='file', data=data, mime_type=mime_type, file_name=file_name)

    def describe(self) -> str:
        """Provenance string stored as the record's original input."""
        if self.kind in ('text', 'url'):
            return self.value or ''
        return self.file_name or 'uploaded file'


@dataclass(frozen=True)
class AuditContext:
    user_id: Optional[str]
    category: Optional[str] = None
    analysis_mode: Optional[str] = None


@dataclass(frozen=True)
class Extraction:
    extracted_text: str
    transcript: str = ''
    source_description: str = ''


ExtractionOutcome = Result[Extraction]


@dataclass(frozen=True)
class AuditRecord:
    """Persisted audit log entry. Never mutated after creation."""

    user_id: str
    content_type: str
    original_input: str
    extracted_text: str
    transcript: str
    audit_result: Dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'contentType': self.content_type,
            'originalInput': self.original_input,
            'extractedText': self.extracted_text,
            'transcript': self.transcript,
            'auditResult': self.audit_result,
            'createdAt': self.created_at.isoformat().replace('+00:00', 'Z'),
        }
