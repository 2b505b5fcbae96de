"""
Error taxonomy for the content audit pipeline.

Every extraction strategy and the analysis invoker return a Result: either a
value or a Failure(kind, message). Only the missing-user precondition is
raised, as UnauthenticatedError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorKind(str, Enum):
    INVALID_URL = 'InvalidUrl'
    ACCESS_DENIED = 'AccessDenied'
    FETCH_FAILED = 'FetchFailed'
    TIMEOUT = 'Timeout'
    NO_CONTENT = 'NoContent'
    NO_READABLE_TEXT = 'NoReadableText'
    TRANSCRIPT_TOO_SHORT = 'TranscriptTooShort'
    TRANSCRIPTION_FAILED = 'TranscriptionFailed'
    UNSUPPORTED_FORMAT = 'UnsupportedFormat'
    LIMIT_EXCEEDED = 'LimitExceeded'
    UNKNOWN_CONTENT_TYPE = 'UnknownContentType'
    ANALYSIS_UNAVAILABLE = 'AnalysisUnavailable'
    INVALID_ANALYSIS_SHAPE = 'InvalidAnalysisShape'
    UNAUTHENTICATED = 'Unauthenticated'


# Human-readable prefixes used in placeholder summaries
ERROR_DESCRIPTIONS = {
    ErrorKind.INVALID_URL: 'Invalid URL',
    ErrorKind.ACCESS_DENIED: 'Access denied or bot protection',
    ErrorKind.FETCH_FAILED: 'Content could not be fetched',
    ErrorKind.TIMEOUT: 'Request timed out',
    ErrorKind.NO_CONTENT: 'Not enough content to audit',
    ErrorKind.NO_READABLE_TEXT: 'No readable text found',
    ErrorKind.TRANSCRIPT_TOO_SHORT: 'Transcript unavailable or too short',
    ErrorKind.TRANSCRIPTION_FAILED: 'Audio transcription failed',
    ErrorKind.UNSUPPORTED_FORMAT: 'Unsupported format',
    ErrorKind.LIMIT_EXCEEDED: 'Content exceeds processing limits',
    ErrorKind.UNKNOWN_CONTENT_TYPE: 'Unable to detect content type',
    ErrorKind.ANALYSIS_UNAVAILABLE: 'Compliance analysis failed',
    ErrorKind.INVALID_ANALYSIS_SHAPE: 'AI response parsing failed',
    ErrorKind.UNAUTHENTICATED: 'Authentication required',
}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    def describe(self) -> str:
        """Summary line suitable for a placeholder audit result."""
        prefix = ERROR_DESCRIPTIONS.get(self.kind, self.kind.value)
        if not self.message:
            return f"{prefix}."
        return f"{prefix}: {self.message}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a pipeline stage: exactly one of value or error is set."""

    value: Optional[T] = None
    error: Optional[Failure] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, value: T) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> 'Result[T]':
        return cls(error=Failure(kind, message))


class UnauthenticatedError(Exception):
    """Raised when process_content is called without a user id."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = 'Authentication required'):
        super().__init__(message)
