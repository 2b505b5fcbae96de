"""
Content-type detection and URL classification.

detect_content_type() is the only place a RawInput is turned into a
ContentType. classify_url() then refines URL input into the extraction path
that will handle it.
"""

import mimetypes
import os
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .models import ContentType, RawInput, UrlKind

# MIME types that count as documents
DOCUMENT_MIME_TYPES = [
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'text/plain',
]

# File-extension fallbacks when the MIME type is missing or unrecognized
IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'gif', 'webp']
VIDEO_EXTENSIONS = ['mp4', 'webm', 'mov', 'avi', 'mkv', 'flv', 'm4v']
AUDIO_EXTENSIONS = ['mp3', 'wav', 'm4a', 'aac', 'ogg', 'flac', 'wma']
DOCUMENT_EXTENSIONS = ['pdf', 'doc', 'docx', 'txt']

# URL patterns
YOUTUBE_HOSTS = ['youtube.com', 'www.youtube.com', 'm.youtube.com', 'music.youtube.com', 'youtu.be', 'www.youtu.be']
VIDEO_PLATFORM_HOSTS = ['vimeo.com', 'dailymotion.com', 'tiktok.com', 'twitch.tv']
VIDEO_PLATFORM_PATHS = ['facebook.com/watch', 'instagram.com/reel']

# Extensions python's mimetypes table does not always know
_EXTRA_MIME_TYPES = {
    'm4a': 'audio/m4a',
    'flac': 'audio/flac',
    'webp': 'image/webp',
    'mkv': 'video/x-matroska',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}


def _file_extension(file_name: Optional[str]) -> str:
    if not file_name:
        return ''
    return os.path.splitext(file_name)[1].lstrip('.').lower()


def _type_from_mime(mime_type: str) -> Optional[ContentType]:
    mime_type = mime_type.split(';')[0].strip().lower()
    if mime_type.startswith('image/'):
        return ContentType.IMAGE
    if mime_type.startswith('video/'):
        return ContentType.VIDEO
    if mime_type.startswith('audio/'):
        return ContentType.AUDIO
    if mime_type in DOCUMENT_MIME_TYPES:
        return ContentType.DOCUMENT
    return None


def _type_from_extension(extension: str) -> Optional[ContentType]:
    if extension in IMAGE_EXTENSIONS:
        return ContentType.IMAGE
    if extension in VIDEO_EXTENSIONS:
        return ContentType.VIDEO
    if extension in AUDIO_EXTENSIONS:
        return ContentType.AUDIO
    if extension in DOCUMENT_EXTENSIONS:
        return ContentType.DOCUMENT
    return None


def detect_content_type(raw_input: RawInput) -> ContentType:
    """
    Classify a request payload.

    Priority order is text, then URL, then file. Files are classified by
    declared MIME type first and by file extension when the MIME type is
    missing or unrecognized.
    """
    if raw_input.kind == 'text':
        content_type = ContentType.TEXT if (raw_input.value or '').strip() else ContentType.UNKNOWN
    elif raw_input.kind == 'url':
        content_type = ContentType.URL if (raw_input.value or '').strip() else ContentType.UNKNOWN
    elif raw_input.kind == 'file':
        content_type = None
        if raw_input.mime_type:
            content_type = _type_from_mime(raw_input.mime_type)
        if content_type is None:
            content_type = _type_from_extension(_file_extension(raw_input.file_name))
            if content_type is not None:
                print(f"[Detection] Fallback used: {content_type.value}")
        if content_type is None:
            content_type = ContentType.UNKNOWN
    else:
        content_type = ContentType.UNKNOWN

    print(f"[Detection] Type detected: {content_type.value}")
    return content_type


def resolve_mime_type(raw_input: RawInput) -> str:
    """Declared MIME type, or one guessed from the file name when it is unrecognized."""
    declared = (raw_input.mime_type or '').split(';')[0].strip().lower()
    if declared and _type_from_mime(declared) is not None:
        return declared

    extension = _file_extension(raw_input.file_name)
    if extension in _EXTRA_MIME_TYPES:
        return _EXTRA_MIME_TYPES[extension]

    guessed, _ = mimetypes.guess_type(raw_input.file_name or '')
    return guessed or declared or 'application/octet-stream'


def is_valid_url(url: str) -> bool:
    """True for parseable http(s) URLs with a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.hostname)


def _hostname(url: str) -> str:
    return (urlparse(url.strip()).hostname or '').lower()


def is_youtube_url(url: str) -> bool:
    return _hostname(url) in YOUTUBE_HOSTS


def classify_url(url: str) -> UrlKind:
    """
    Decide which extraction path handles a URL.

    Order: YouTube hosts, then other video platforms or media file
    extensions, then webpage.
    """
    host = _hostname(url)
    lower_url = url.lower()

    if host in YOUTUBE_HOSTS:
        return UrlKind.YOUTUBE

    for platform in VIDEO_PLATFORM_HOSTS:
        if host == platform or host.endswith('.' + platform):
            return UrlKind.VIDEO

    for pattern in VIDEO_PLATFORM_PATHS:
        if pattern in lower_url:
            return UrlKind.VIDEO

    extension = _file_extension(urlparse(url.strip()).path)
    if extension in VIDEO_EXTENSIONS:
        return UrlKind.VIDEO
    if extension in AUDIO_EXTENSIONS:
        return UrlKind.AUDIO

    return UrlKind.WEBPAGE


def has_media_extension(url: str) -> bool:
    extension = _file_extension(urlparse(url.strip()).path)
    return extension in VIDEO_EXTENSIONS or extension in AUDIO_EXTENSIONS


def extract_youtube_video_id(url: str) -> Optional[str]:
    """
    Extract the video ID from a YouTube URL.

    Supports watch?v=ID, youtu.be/ID, /shorts/ID, /embed/ID and /live/ID.
    Returns None when the URL has none of these shapes.
    """
    if not is_valid_url(url):
        return None

    parsed = urlparse(url.strip())
    host = (parsed.hostname or '').lower()
    if host not in YOUTUBE_HOSTS:
        return None

    video_id = None
    if host.endswith('youtu.be'):
        video_id = parsed.path.lstrip('/').split('/')[0]
    else:
        ids = parse_qs(parsed.query).get('v', [])
        if ids and ids[0]:
            video_id = ids[0]
        else:
            match = re.match(r'^/(?:shorts|embed|live)/([^/?&#]+)', parsed.path)
            if match:
                video_id = match.group(1)

    if video_id and re.fullmatch(r'[A-Za-z0-9_-]{6,20}', video_id):
        return video_id
    return None
