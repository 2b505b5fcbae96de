"""
Media (audio/video upload), image and direct media-URL strategies.

Uploaded audio and video go straight to the transcription collaborator.
Images go to OCR. A transcription error is terminal: there is no text
fallback for media.
"""

from typing import Optional, Tuple
from urllib.parse import urlparse
import os

import requests

from .config import Settings
from .errors import ErrorKind, Failure, Result
from .guards import check_byte_size, check_mime_subtype
from .models import Extraction, ExtractionOutcome
from .text_utils import normalize_whitespace

# MIME subtypes the transcription service accepts
SUPPORTED_MEDIA_SUBTYPES = [
    'mpeg', 'mp3', 'wav', 'webm', 'ogg', 'm4a', 'x-m4a', 'mp4', 'flac', 'quicktime', 'aac',
]

DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Extension -> MIME type for media URLs that arrive without a usable Content-Type
MEDIA_EXTENSION_MIME_TYPES = {
    'mp3': 'audio/mpeg',
    'wav': 'audio/wav',
    'm4a': 'audio/m4a',
    'aac': 'audio/aac',
    'ogg': 'audio/ogg',
    'flac': 'audio/flac',
    'wma': 'audio/x-ms-wma',
    'mp4': 'video/mp4',
    'm4v': 'video/mp4',
    'webm': 'video/webm',
    'mov': 'video/quicktime',
    'avi': 'video/x-msvideo',
    'mkv': 'video/x-matroska',
    'flv': 'video/x-flv',
}


def extract_media(data: bytes, mime_type: str, transcriber, settings: Settings,
                  source_description: str = 'media:upload') -> ExtractionOutcome:
    """Transcribe uploaded audio or video."""
    print(f"[Media] Attempt started: {source_description} ({mime_type})")

    failure = check_byte_size(data, settings.max_media_bytes, label='Media file')
    if failure is None:
        failure = check_mime_subtype(mime_type, SUPPORTED_MEDIA_SUBTYPES, label='media')
    if failure:
        print(f"[Media] Failed: {failure.kind.value} {failure.message}")
        return Result(error=failure)

    try:
        result = transcriber.transcribe(data, mime_type)
    except Exception as e:
        print(f"[Media] Failed: transcription error: {e}")
        return Result.failure(ErrorKind.TRANSCRIPTION_FAILED, str(e))

    transcript = normalize_whitespace((result or {}).get('transcript') or '')
    if not transcript:
        print('[Media] Failed: empty transcript')
        return Result.failure(ErrorKind.NO_CONTENT, 'Transcription returned no speech')

    print(f"[Media] Success: {source_description} | Length: {len(transcript)} chars")
    return Result.success(Extraction(
        extracted_text=transcript,
        transcript=transcript,
        source_description=source_description,
    ))


def extract_image(data: bytes, ocr_service, settings: Settings) -> ExtractionOutcome:
    """OCR an uploaded image."""
    print('[Media] Attempt started: image OCR')

    failure = check_byte_size(data, settings.max_image_bytes, label='Image')
    if failure:
        print(f"[Media] Failed: {failure.kind.value} {failure.message}")
        return Result(error=failure)

    try:
        text = ocr_service.ocr(data)
    except Exception as e:
        print(f"[Media] Failed: OCR error: {e}")
        return Result.failure(ErrorKind.NO_READABLE_TEXT, f"OCR failed: {e}")

    text = (text or '').strip()
    if not text:
        print('[Media] Failed: no readable text in image')
        return Result.failure(ErrorKind.NO_READABLE_TEXT, 'The image contains no readable text')

    print(f"[Media] Success: image OCR | Length: {len(text)} chars")
    return Result.success(Extraction(
        extracted_text=text,
        transcript='',
        source_description='image:ocr',
    ))


def media_mime_type(url: str, content_type: Optional[str]) -> str:
    """Content-Type header if it names audio/video, else a guess from the URL extension."""
    declared = (content_type or '').split(';')[0].strip().lower()
    if declared.startswith(('audio/', 'video/')):
        return declared
    extension = os.path.splitext(urlparse(url).path)[1].lstrip('.').lower()
    return MEDIA_EXTENSION_MIME_TYPES.get(extension, declared or 'application/octet-stream')


def download_media_url(url: str, settings: Settings, session=None) -> Tuple[Optional[bytes], str, Optional[Failure]]:
    """
    Stream a media file into memory, stopping at max_media_bytes.

    Returns:
        Tuple of (data, mime_type, failure)
    """
    http = session or requests
    print(f"[Media] Downloading: {url}")

    try:
        response = http.get(
            url,
            headers={'User-Agent': settings.user_agent},
            timeout=settings.download_timeout,
            stream=True,
            allow_redirects=True,
        )
    except requests.exceptions.Timeout:
        return None, '', Failure(ErrorKind.TIMEOUT, f"Download timed out after {settings.download_timeout}s")
    except requests.exceptions.RequestException as e:
        return None, '', Failure(ErrorKind.FETCH_FAILED, f"Download failed: {e}")

    with response:
        if response.status_code == 403:
            return None, '', Failure(ErrorKind.ACCESS_DENIED, 'HTTP 403')
        if not 200 <= response.status_code < 300:
            return None, '', Failure(ErrorKind.FETCH_FAILED, f"HTTP error: {response.status_code}")

        mime_type = media_mime_type(url, response.headers.get('Content-Type'))

        declared_length = response.headers.get('Content-Length')
        if declared_length and declared_length.isdigit() and int(declared_length) > settings.max_media_bytes:
            return None, mime_type, Failure(
                ErrorKind.LIMIT_EXCEEDED,
                f"Media file is {declared_length} bytes, limit is {settings.max_media_bytes}"
            )

        chunks = []
        total = 0
        try:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                if not chunk:
                    continue
                total += len(chunk)
                if total > settings.max_media_bytes:
                    return None, mime_type, Failure(
                        ErrorKind.LIMIT_EXCEEDED,
                        f"Media file exceeds limit of {settings.max_media_bytes} bytes"
                    )
                chunks.append(chunk)
        except requests.exceptions.Timeout:
            return None, mime_type, Failure(ErrorKind.TIMEOUT, 'Download stalled')
        except requests.exceptions.RequestException as e:
            return None, mime_type, Failure(ErrorKind.FETCH_FAILED, f"Download failed: {e}")

    print(f"[Media] Downloaded {total} bytes ({mime_type})")
    return b''.join(chunks), mime_type, None


def extract_media_url(url: str, transcriber, settings: Settings, session=None) -> ExtractionOutcome:
    data, mime_type, failure = download_media_url(url, settings, session=session)
    if failure:
        print(f"[Media] Failed: {failure.kind.value} {failure.message}")
        return Result(error=failure)

    host = (urlparse(url).hostname or '').replace('www.', '')
    return extract_media(data, mime_type, transcriber, settings, source_description=f"media:{host}")
