"""
Pipeline orchestrator.

process_content() detects the content type, routes to one extraction
strategy, invokes analysis, and persists the audit record at most once.
Every business failure comes back as a "Needs Review" placeholder. The only
exception it raises is UnauthenticatedError.
"""

import traceback
from typing import Any, Dict, Optional, Protocol, Tuple

from .analysis import AnalysisInvoker, placeholder_result
from .claims import extract_claims, should_extract_claims
from .clients import AssemblyAITranscriber, GeminiAnalyzer, VisionOCR
from .config import Settings
from .detection import classify_url, detect_content_type, has_media_extension, is_valid_url, resolve_mime_type
from .documents import LocalDocumentTextExtractor, extract_document
from .errors import ErrorKind, Failure, Result, UnauthenticatedError
from .guards import check_byte_size, check_text_length
from .media import extract_image, extract_media, extract_media_url
from .models import AuditContext, ContentType, Extraction, ExtractionOutcome, RawInput, UrlKind
from .records import GcsRecordStore, RecordPersister, build_record
from .webpage import extract_webpage
from .youtube import AudioFallbackMachine, FfmpegAudioNormalizer, YouTubeTranscriptApiFetcher, YtDlpAudioDownloader


class Analyzer(Protocol):
    def analyze(self, content: str, meta: Dict[str, Any]) -> Any: ...


class Transcriber(Protocol):
    def transcribe(self, data: bytes, mime_type: str) -> Dict[str, str]: ...


class OCRService(Protocol):
    def ocr(self, data: bytes) -> str: ...


class DocumentTextExtractor(Protocol):
    def extract_document_text(self, data: bytes, mime_type: str) -> Dict[str, str]: ...


class RecordStore(Protocol):
    def save(self, record) -> Any: ...


class TranscriptFetcher(Protocol):
    def fetch(self, video_id: str) -> str: ...


class AudioDownloader(Protocol):
    def probe(self, url: str) -> Dict[str, Any]: ...

    def download(self, url: str, directory: str) -> str: ...


class AudioNormalizer(Protocol):
    def normalize(self, source_path: str, directory: str) -> str: ...


class ContentPipeline:
    """
    Stateless between calls. Per-request state lives in locals and in the
    RecordPersister created for each call.
    """

    def __init__(
        self,
        settings: Settings,
        analyzer: Analyzer,
        transcriber: Transcriber,
        ocr_service: OCRService,
        document_extractor: DocumentTextExtractor,
        record_store: RecordStore,
        transcript_fetcher: Optional[TranscriptFetcher] = None,
        audio_downloader: Optional[AudioDownloader] = None,
        audio_normalizer: Optional[AudioNormalizer] = None,
        session=None,
    ):
        self.settings = settings
        self.invoker = AnalysisInvoker(analyzer)
        self.transcriber = transcriber
        self.ocr_service = ocr_service
        self.document_extractor = document_extractor
        self.record_store = record_store
        self.session = session
        self.video_machine = AudioFallbackMachine(
            settings,
            transcript_fetcher or YouTubeTranscriptApiFetcher(settings),
            audio_downloader or YtDlpAudioDownloader(settings),
            audio_normalizer or FfmpegAudioNormalizer(settings),
            transcriber,
        )

    def process_content(self, raw_input: RawInput, context: AuditContext) -> Dict[str, Any]:
        if context is None or not (context.user_id or '').strip():
            raise UnauthenticatedError()

        persister = RecordPersister(self.record_store)
        try:
            return self._process(raw_input, context, persister)
        except Exception as e:
            print(f"[Pipeline] Unexpected error: {e}")
            print(traceback.format_exc())
            return placeholder_result(f"Processing failed: {e}")

    def _process(self, raw_input: RawInput, context: AuditContext, persister: RecordPersister) -> Dict[str, Any]:
        content_type = detect_content_type(raw_input)
        content_type, outcome = self._extract(raw_input, content_type)
        if outcome.failed:
            return self._placeholder(outcome.error, content_type)

        extraction = outcome.value
        text = extraction.extracted_text
        if self.settings.extract_claims and should_extract_claims(text):
            text = extract_claims(text)
            print(f"[Pipeline] Claims extracted: {len(extraction.extracted_text)} -> {len(text)} chars")

        meta = {
            'inputType': content_type.value,
            'category': context.category or 'General',
            'analysisMode': context.analysis_mode or 'Standard',
            'source': extraction.source_description,
        }
        analysis = self.invoker.invoke(text, meta)
        if analysis.failed:
            return self._placeholder(analysis.error, content_type)

        audit_result = dict(analysis.value)
        if extraction.transcript and not audit_result.get('transcription'):
            audit_result['transcription'] = extraction.transcript

        record = build_record(context.user_id, content_type, raw_input, extraction, audit_result)
        persister.persist(record)

        print(f"[Pipeline] Completed: {content_type.value} | {audit_result.get('status')}")
        return audit_result

    def _placeholder(self, failure: Failure, content_type: ContentType) -> Dict[str, Any]:
        print(f"[Pipeline] Returning placeholder for {content_type.value}: {failure.kind.value} {failure.message}")
        return placeholder_result(failure.describe())

    def _extract(self, raw_input: RawInput, content_type: ContentType) -> Tuple[ContentType, ExtractionOutcome]:
        if content_type == ContentType.TEXT:
            return content_type, self._extract_text(raw_input.value)

        if content_type == ContentType.URL:
            return self._extract_url(raw_input.value.strip())

        if content_type == ContentType.IMAGE:
            return content_type, extract_image(raw_input.data, self.ocr_service, self.settings)

        if content_type in (ContentType.VIDEO, ContentType.AUDIO):
            return content_type, extract_media(
                raw_input.data, resolve_mime_type(raw_input), self.transcriber, self.settings,
                source_description=f"{content_type.value}:{raw_input.file_name or 'upload'}",
            )

        if content_type == ContentType.DOCUMENT:
            failure = check_byte_size(raw_input.data, self.settings.max_media_bytes, label='Document')
            if failure:
                return content_type, Result(error=failure)
            return content_type, extract_document(
                raw_input.data, resolve_mime_type(raw_input), self.document_extractor, self.settings,
            )

        return content_type, Result.failure(
            ErrorKind.UNKNOWN_CONTENT_TYPE,
            f"Could not classify {raw_input.kind} input {raw_input.describe()!r}"
        )

    def _extract_text(self, text: str) -> ExtractionOutcome:
        failure = check_text_length(text, self.settings.max_text_length)
        if failure:
            return Result(error=failure)
        return Result.success(Extraction(extracted_text=text, transcript='', source_description='text'))

    def _extract_url(self, url: str) -> Tuple[ContentType, ExtractionOutcome]:
        if not is_valid_url(url):
            return ContentType.URL, Result.failure(ErrorKind.INVALID_URL, f"Not an http(s) URL: {url}")

        kind = classify_url(url)
        print(f"[Pipeline] URL classified: {kind.value}")

        if kind == UrlKind.YOUTUBE:
            return ContentType.VIDEO, self.video_machine.extract_youtube(url)
        if kind == UrlKind.VIDEO:
            if has_media_extension(url):
                return ContentType.VIDEO, extract_media_url(url, self.transcriber, self.settings, session=self.session)
            return ContentType.VIDEO, self.video_machine.extract_platform_video(url)
        if kind == UrlKind.AUDIO:
            return ContentType.AUDIO, extract_media_url(url, self.transcriber, self.settings, session=self.session)

        return ContentType.WEBPAGE, extract_webpage(url, self.settings, session=self.session)


def build_pipeline(settings: Settings = None) -> ContentPipeline:
    """Wire the production collaborators. SDK clients are created per call."""
    settings = settings or Settings.from_env()
    return ContentPipeline(
        settings=settings,
        analyzer=GeminiAnalyzer(settings),
        transcriber=AssemblyAITranscriber(settings),
        ocr_service=VisionOCR(settings),
        document_extractor=LocalDocumentTextExtractor(),
        record_store=GcsRecordStore(settings),
    )
