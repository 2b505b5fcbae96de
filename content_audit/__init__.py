"""Content audit pipeline: ingest, normalize and audit untrusted content."""

from .config import Settings

from .errors import (
    ErrorKind,
    Failure,
    Result,
    UnauthenticatedError,
)

from .models import (
    AuditContext,
    AuditRecord,
    ContentType,
    Extraction,
    RawInput,
    UrlKind,
)

from .detection import (
    classify_url,
    detect_content_type,
    extract_youtube_video_id,
    is_valid_url,
)

from .analysis import (
    REQUIRED_AUDIT_KEYS,
    AnalysisInvoker,
    placeholder_result,
    validate_audit_result,
)

from .records import (
    GcsRecordStore,
    InMemoryRecordStore,
    RecordPersister,
)

from .pipeline import (
    ContentPipeline,
    build_pipeline,
)

__all__ = [
    # Configuration
    'Settings',
    # Errors
    'ErrorKind',
    'Failure',
    'Result',
    'UnauthenticatedError',
    # Data model
    'AuditContext',
    'AuditRecord',
    'ContentType',
    'Extraction',
    'RawInput',
    'UrlKind',
    # Detection
    'classify_url',
    'detect_content_type',
    'extract_youtube_video_id',
    'is_valid_url',
    # Analysis
    'REQUIRED_AUDIT_KEYS',
    'AnalysisInvoker',
    'placeholder_result',
    'validate_audit_result',
    # Records
    'GcsRecordStore',
    'InMemoryRecordStore',
    'RecordPersister',
    # Pipeline
    'ContentPipeline',
    'build_pipeline',
]
