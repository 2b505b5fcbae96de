"""
Unit tests for the media and image strategies.
"""

import pytest

from content_audit.errors import ErrorKind
from content_audit.media import extract_image, extract_media, media_mime_type

from tests.fakes import LONG_TRANSCRIPT, FakeOCR, FakeTranscriber


class TestExtractMedia:
    """Tests for extract_media()"""

    def test_transcribes_supported_audio(self, settings):
        transcriber = FakeTranscriber()
        result = extract_media(b'ID3audio', 'audio/mpeg', transcriber, settings)

        assert not result.failed
        assert result.value.extracted_text == LONG_TRANSCRIPT
        assert result.value.transcript == LONG_TRANSCRIPT
        assert transcriber.calls == [(b'ID3audio', 'audio/mpeg')]

    @pytest.mark.parametrize('mime_type', ['video/mp4', 'video/quicktime', 'audio/x-m4a', 'audio/webm;codecs=opus'])
    def test_supported_types(self, settings, mime_type):
        assert not extract_media(b'data', mime_type, FakeTranscriber(), settings).failed

    def test_size_limit_checked_before_transcription(self, settings):
        transcriber = FakeTranscriber()
        result = extract_media(b'x' * 11, 'audio/mpeg', transcriber, settings.replace(max_media_bytes=10))
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert transcriber.calls == []

    def test_unsupported_subtype(self, settings):
        transcriber = FakeTranscriber()
        result = extract_media(b'data', 'video/x-msvideo', transcriber, settings)
        assert result.error.kind == ErrorKind.UNSUPPORTED_FORMAT
        assert transcriber.calls == []

    def test_transcription_error_is_terminal(self, settings):
        result = extract_media(b'data', 'audio/wav', FakeTranscriber(error=RuntimeError('bad audio')), settings)
        assert result.error.kind == ErrorKind.TRANSCRIPTION_FAILED
        assert 'bad audio' in result.error.message

    def test_empty_transcript(self, settings):
        result = extract_media(b'data', 'audio/wav', FakeTranscriber(transcript='  '), settings)
        assert result.error.kind == ErrorKind.NO_CONTENT

    def test_empty_file(self, settings):
        assert extract_media(b'', 'audio/wav', FakeTranscriber(), settings).error.kind == ErrorKind.NO_CONTENT


class TestExtractImage:
    """Tests for extract_image()"""

    def test_ocr_text(self, settings):
        result = extract_image(b'\x89PNG', FakeOCR(text='  Lose 10kg in 7 days!  '), settings)
        assert result.value.extracted_text == 'Lose 10kg in 7 days!'
        assert result.value.transcript == ''

    def test_blank_ocr_result(self, settings):
        result = extract_image(b'\x89PNG', FakeOCR(text=' \n '), settings)
        assert result.error.kind == ErrorKind.NO_READABLE_TEXT

    def test_size_limit(self, settings):
        ocr = FakeOCR()
        result = extract_image(b'x' * 11, ocr, settings.replace(max_image_bytes=10))
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert ocr.calls == []

    def test_ocr_exception(self, settings):
        class BrokenOCR:
            def ocr(self, data):
                raise RuntimeError('vision quota')

        result = extract_image(b'\x89PNG', BrokenOCR(), settings)
        assert result.error.kind == ErrorKind.NO_READABLE_TEXT
        assert 'vision quota' in result.error.message


class TestMediaMimeType:

    def test_header_wins(self):
        assert media_mime_type('https://x.com/a.mp3', 'audio/ogg; codecs=opus') == 'audio/ogg'

    def test_extension_when_header_is_generic(self):
        assert media_mime_type('https://x.com/a.mov', 'application/octet-stream') == 'video/quicktime'

    def test_no_information(self):
        assert media_mime_type('https://x.com/a', None) == 'application/octet-stream'
