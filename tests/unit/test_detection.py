"""
Unit tests for content-type detection and URL classification.
"""

import pytest

from content_audit.detection import (
    classify_url,
    detect_content_type,
    extract_youtube_video_id,
    has_media_extension,
    is_valid_url,
    resolve_mime_type,
)
from content_audit.models import ContentType, RawInput, UrlKind


class TestDetectContentType:
    """Tests for detect_content_type()"""

    def test_text_input(self):
        assert detect_content_type(RawInput.from_text('Buy now!')) == ContentType.TEXT

    def test_blank_text_is_unknown(self):
        assert detect_content_type(RawInput.from_text('   ')) == ContentType.UNKNOWN

    def test_url_input(self):
        assert detect_content_type(RawInput.from_url('https://example.com')) == ContentType.URL

    def test_blank_url_is_unknown(self):
        assert detect_content_type(RawInput.from_url('')) == ContentType.UNKNOWN

    @pytest.mark.parametrize('mime_type,expected', [
        ('image/png', ContentType.IMAGE),
        ('video/mp4', ContentType.VIDEO),
        ('audio/mpeg', ContentType.AUDIO),
        ('application/pdf', ContentType.DOCUMENT),
        ('application/msword', ContentType.DOCUMENT),
        ('application/vnd.openxmlformats-officedocument.wordprocessingml.document', ContentType.DOCUMENT),
        ('text/plain', ContentType.DOCUMENT),
        ('text/plain; charset=utf-8', ContentType.DOCUMENT),
    ])
    def test_file_by_mime_type(self, mime_type, expected):
        raw = RawInput.from_file(b'data', mime_type, 'upload.bin')
        assert detect_content_type(raw) == expected

    def test_mime_type_wins_over_extension(self):
        raw = RawInput.from_file(b'data', 'image/jpeg', 'photo.mp3')
        assert detect_content_type(raw) == ContentType.IMAGE

    def test_extension_fallback_when_mime_missing(self):
        raw = RawInput.from_file(b'data', None, 'Clip.MOV')
        assert detect_content_type(raw) == ContentType.VIDEO

    def test_extension_fallback_when_mime_unrecognized(self):
        raw = RawInput.from_file(b'data', 'application/octet-stream', 'voice-note.m4a')
        assert detect_content_type(raw) == ContentType.AUDIO

    def test_docx_extension_fallback(self):
        raw = RawInput.from_file(b'data', '', 'brochure.docx')
        assert detect_content_type(raw) == ContentType.DOCUMENT

    def test_unknown_file(self):
        raw = RawInput.from_file(b'data', 'application/zip', 'archive.zip')
        assert detect_content_type(raw) == ContentType.UNKNOWN

    def test_file_without_name_or_mime(self):
        raw = RawInput.from_file(b'data', None, None)
        assert detect_content_type(raw) == ContentType.UNKNOWN

    def test_deterministic(self):
        raw = RawInput.from_file(b'data', None, 'scan.webp')
        assert {detect_content_type(raw) for _ in range(3)} == {ContentType.IMAGE}


class TestResolveMimeType:
    """Tests for resolve_mime_type()"""

    def test_declared_mime_type_is_normalized(self):
        raw = RawInput.from_file(b'', 'Audio/MPEG; charset=binary', 'a.bin')
        assert resolve_mime_type(raw) == 'audio/mpeg'

    def test_guess_from_extension(self):
        raw = RawInput.from_file(b'', None, 'report.pdf')
        assert resolve_mime_type(raw) == 'application/pdf'

    def test_docx_guess(self):
        raw = RawInput.from_file(b'', None, 'letter.docx')
        assert resolve_mime_type(raw) == 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

    def test_unknown_defaults_to_octet_stream(self):
        raw = RawInput.from_file(b'', None, None)
        assert resolve_mime_type(raw) == 'application/octet-stream'

    @pytest.mark.parametrize('file_name,expected', [
        ('ad.txt', 'text/plain'),
        ('ad.mp3', 'audio/mpeg'),
    ])
    def test_unrecognized_declared_type_uses_extension(self, file_name, expected):
        raw = RawInput.from_file(b'', 'application/octet-stream', file_name)
        assert resolve_mime_type(raw) == expected

    def test_unrecognized_declared_type_kept_without_extension(self):
        raw = RawInput.from_file(b'', 'application/zip', 'bundle')
        assert resolve_mime_type(raw) == 'application/zip'


class TestIsValidUrl:
    """Tests for is_valid_url()"""

    @pytest.mark.parametrize('url', [
        'https://example.com',
        'http://example.com/path?q=1',
        'https://youtu.be/dQw4w9WgXcQ',
    ])
    def test_valid(self, url):
        assert is_valid_url(url) is True

    @pytest.mark.parametrize('url', [
        '',
        None,
        'example.com',
        'ftp://example.com/file',
        'javascript:alert(1)',
        'https://',
    ])
    def test_invalid(self, url):
        assert is_valid_url(url) is False


class TestClassifyUrl:
    """Tests for classify_url()"""

    @pytest.mark.parametrize('url', [
        'https://www.youtube.com/watch?v=dQw4w9WgXcQ',
        'https://youtu.be/dQw4w9WgXcQ',
        'https://m.youtube.com/shorts/dQw4w9WgXcQ',
        'https://music.youtube.com/watch?v=dQw4w9WgXcQ',
    ])
    def test_youtube(self, url):
        assert classify_url(url) == UrlKind.YOUTUBE

    @pytest.mark.parametrize('url', [
        'https://vimeo.com/123456',
        'https://player.vimeo.com/video/123456',
        'https://www.tiktok.com/@brand/video/7234',
        'https://www.facebook.com/watch/?v=1234',
        'https://www.instagram.com/reel/Cx1/',
        'https://cdn.example.com/ads/spot.mp4',
    ])
    def test_video(self, url):
        assert classify_url(url) == UrlKind.VIDEO

    def test_audio_extension(self):
        assert classify_url('https://cdn.example.com/podcast/ep1.mp3') == UrlKind.AUDIO

    def test_webpage(self):
        assert classify_url('https://example.com/blog/post') == UrlKind.WEBPAGE

    def test_youtube_lookalike_host_is_webpage(self):
        assert classify_url('https://notyoutube.com/watch?v=dQw4w9WgXcQ') == UrlKind.WEBPAGE

    def test_media_extension_helper(self):
        assert has_media_extension('https://cdn.example.com/a.wav') is True
        assert has_media_extension('https://vimeo.com/123') is False


class TestExtractYoutubeVideoId:
    """Tests for extract_youtube_video_id()"""

    @pytest.mark.parametrize('url', [
        'https://www.youtube.com/watch?v=dQw4w9WgXcQ',
        'https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ',
        'https://youtu.be/dQw4w9WgXcQ',
        'https://youtu.be/dQw4w9WgXcQ?t=42',
        'https://www.youtube.com/shorts/dQw4w9WgXcQ',
        'https://www.youtube.com/embed/dQw4w9WgXcQ',
        'https://www.youtube.com/live/dQw4w9WgXcQ?si=abc',
    ])
    def test_supported_shapes(self, url):
        assert extract_youtube_video_id(url) == 'dQw4w9WgXcQ'

    @pytest.mark.parametrize('url', [
        'https://www.youtube.com/',
        'https://www.youtube.com/channel/UC123',
        'https://www.youtube.com/watch?v=',
        'https://www.youtube.com/watch?v=bad id!',
        'https://example.com/watch?v=dQw4w9WgXcQ',
        'not a url',
    ])
    def test_invalid_shapes(self, url):
        assert extract_youtube_video_id(url) is None
