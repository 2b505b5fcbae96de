"""
YouTube and video-platform extraction strategy.

Runs an explicit state machine over one scratch directory:

    TRANSCRIPT -> AUDIO_PROBE -> AUDIO_DOWNLOAD -> NORMALIZE -> TRANSCRIBE -> DONE

Any state can end in FAILED. The only recovery edge is TRANSCRIPT failing
over to AUDIO_PROBE. Platform URLs (Vimeo, TikTok, ...) have no transcript
source and start at AUDIO_PROBE. Video metadata (title, description) is
never used as a substitute for a transcript.
"""

import os
import subprocess
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import requests
import yt_dlp
from youtube_transcript_api import YouTubeTranscriptApi

from .config import Settings
from .detection import extract_youtube_video_id
from .errors import ErrorKind, Failure, Result
from .guards import check_byte_size, check_duration
from .models import Extraction, ExtractionOutcome
from .text_utils import normalize_whitespace

# Player clients that get past most bot checks
YTDLP_PLAYER_CLIENTS = ['ios', 'android_vr', 'tv_embedded']
YTDLP_USER_AGENT = 'com.google.ios.youtube/19.29.1 (iPhone16,2; U; CPU iOS 17_5_1 like Mac OS X;)'


class FallbackState(str, Enum):
    TRANSCRIPT = 'transcript'
    AUDIO_PROBE = 'audio_probe'
    AUDIO_DOWNLOAD = 'audio_download'
    NORMALIZE = 'normalize'
    TRANSCRIBE = 'transcribe'
    DONE = 'done'
    FAILED = 'failed'


# state -> (next state on success, next state on failure)
TRANSITIONS = {
    FallbackState.TRANSCRIPT: (FallbackState.DONE, FallbackState.AUDIO_PROBE),
    FallbackState.AUDIO_PROBE: (FallbackState.AUDIO_DOWNLOAD, FallbackState.FAILED),
    FallbackState.AUDIO_DOWNLOAD: (FallbackState.NORMALIZE, FallbackState.FAILED),
    FallbackState.NORMALIZE: (FallbackState.TRANSCRIBE, FallbackState.FAILED),
    FallbackState.TRANSCRIBE: (FallbackState.DONE, FallbackState.FAILED),
}

TERMINAL_STATES = (FallbackState.DONE, FallbackState.FAILED)


class TimeoutSession(requests.Session):
    """Session that applies a default timeout to every request."""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault('timeout', self.timeout)
        return super().request(method, url, **kwargs)


class YouTubeTranscriptApiFetcher:
    """Caption transcripts via youtube-transcript-api, bounded by request_timeout."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def fetch(self, video_id: str) -> str:
        with TimeoutSession(self.settings.request_timeout) as session:
            api = YouTubeTranscriptApi(http_client=session)
            fetched = api.fetch(video_id)
        return ' '.join(snippet.text for snippet in fetched if snippet.text)


class YtDlpAudioDownloader:
    """Audio-only downloads via yt-dlp."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _options(self, **extra) -> dict:
        opts = {
            'quiet': True,
            'no_warnings': True,
            'noplaylist': True,
            'extractor_args': {
                'youtube': {
                    'player_client': YTDLP_PLAYER_CLIENTS,
                }
            },
            'http_headers': {
                'User-Agent': YTDLP_USER_AGENT,
            },
            'socket_timeout': self.settings.download_timeout,
            'retries': 1,
        }
        opts.update(extra)
        return opts

    def probe(self, url: str) -> dict:
        """Metadata only (id, title, duration). Nothing is downloaded."""
        with yt_dlp.YoutubeDL(self._options()) as ydl:
            info = ydl.extract_info(url, download=False)
        return {
            'id': info.get('id'),
            'title': info.get('title'),
            'duration': info.get('duration') or 0,
        }

    def download(self, url: str, directory: str) -> str:
        output_template = os.path.join(directory, '%(id)s.%(ext)s')
        opts = self._options(format='bestaudio/best', outtmpl=output_template)

        with yt_dlp.YoutubeDL(opts) as ydl:
            info = ydl.extract_info(url, download=True)
            return ydl.prepare_filename(info)


class FfmpegAudioNormalizer:
    """Re-encode any audio/video file to 16kHz mono MP3 for transcription."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def normalize(self, source_path: str, directory: str) -> str:
        audio_filename = os.path.basename(source_path).rsplit('.', 1)[0] + '.normalized.mp3'
        audio_path = os.path.join(directory, audio_filename)

        subprocess.run([
            'ffmpeg', '-i', source_path,
            '-vn', '-ac', '1', '-ar', '16000',
            '-acodec', 'libmp3lame',
            '-y', audio_path
        ], check=True, capture_output=True, timeout=self.settings.ffmpeg_timeout)
        return audio_path


def download_failure(error: Exception) -> Failure:
    """Map a yt-dlp error onto the failure taxonomy."""
    message = str(error)
    lowered = message.lower()
    if 'timed out' in lowered or 'timeout' in lowered:
        return Failure(ErrorKind.TIMEOUT, message)
    if 'sign in to confirm' in lowered or 'bot' in lowered or 'http error 403' in lowered:
        return Failure(ErrorKind.ACCESS_DENIED, message)
    if 'unsupported url' in lowered:
        return Failure(ErrorKind.UNSUPPORTED_FORMAT, message)
    return Failure(ErrorKind.FETCH_FAILED, message)


@dataclass
class FallbackRun:
    """Mutable state for one pass through the machine."""

    url: str
    video_id: Optional[str]
    scratch_dir: str
    info: dict = field(default_factory=dict)
    downloaded_path: Optional[str] = None
    audio_path: Optional[str] = None
    text: str = ''
    transcript_source: str = ''
    visited: List[FallbackState] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)


class AudioFallbackMachine:
    """
    Transcript-first extraction with an audio transcription fallback.

    Collaborators:
        transcript_fetcher: fetch(video_id) -> str
        audio_downloader: probe(url) -> dict, download(url, directory) -> path
        audio_normalizer: normalize(path, directory) -> path
        transcriber: transcribe(data, mime_type) -> {'transcript': str}
    """

    def __init__(self, settings: Settings, transcript_fetcher, audio_downloader,
                 audio_normalizer, transcriber):
        self.settings = settings
        self.transcript_fetcher = transcript_fetcher
        self.audio_downloader = audio_downloader
        self.audio_normalizer = audio_normalizer
        self.transcriber = transcriber
        self._handlers = {
            FallbackState.TRANSCRIPT: self._fetch_transcript,
            FallbackState.AUDIO_PROBE: self._probe_audio,
            FallbackState.AUDIO_DOWNLOAD: self._download_audio,
            FallbackState.NORMALIZE: self._normalize_audio,
            FallbackState.TRANSCRIBE: self._transcribe_audio,
        }

    def extract_youtube(self, url: str) -> ExtractionOutcome:
        video_id = extract_youtube_video_id(url)
        if not video_id:
            print(f"[YouTube] Failed: no video id in {url}")
            return Result.failure(ErrorKind.INVALID_URL, 'Could not find a YouTube video id in the URL')

        canonical_url = f"https://www.youtube.com/watch?v={video_id}"
        return self.run(canonical_url, video_id, start=FallbackState.TRANSCRIPT)

    def extract_platform_video(self, url: str) -> ExtractionOutcome:
        return self.run(url, None, start=FallbackState.AUDIO_PROBE)

    def run(self, url: str, video_id: Optional[str], start: FallbackState) -> ExtractionOutcome:
        label = f"youtube:{video_id}" if video_id else f"video:{url}"
        print(f"[YouTube] Attempt started: {label} (start={start.value})")

        with tempfile.TemporaryDirectory(prefix='audit_media_', dir=self.settings.scratch_dir) as scratch_dir:
            run = FallbackRun(url=url, video_id=video_id, scratch_dir=scratch_dir)
            state = start
            while state not in TERMINAL_STATES:
                run.visited.append(state)
                failure = self._handlers[state](run)
                on_success, on_failure = TRANSITIONS[state]
                if failure is None:
                    state = on_success
                else:
                    print(f"[YouTube] {state.value} failed: {failure.kind.value} {failure.message}")
                    run.failures.append(failure)
                    state = on_failure
                    if state == FallbackState.AUDIO_PROBE:
                        print('[YouTube] Fallback used: audio transcription')

        if state == FallbackState.FAILED:
            return Result(error=run.failures[-1])

        text = normalize_whitespace(run.text)
        if len(text) < self.settings.min_transcript_chars:
            print(f"[YouTube] Failed: transcript too short ({len(text)} chars)")
            return Result.failure(
                ErrorKind.TRANSCRIPT_TOO_SHORT,
                f"Transcript has {len(text)} characters, need at least {self.settings.min_transcript_chars}"
            )

        print(f"[YouTube] Success: {label} via {run.transcript_source} | Length: {len(text)} chars")
        return Result.success(Extraction(
            extracted_text=text,
            transcript=text,
            source_description=f"{label}:{run.transcript_source}",
        ))

    def _fetch_transcript(self, run: FallbackRun) -> Optional[Failure]:
        try:
            text = self.transcript_fetcher.fetch(run.video_id)
        except requests.exceptions.Timeout as e:
            return Failure(ErrorKind.TIMEOUT, f"Caption transcript request timed out: {e}")
        except Exception as e:
            # Any caption failure (disabled, missing, blocked) falls through to audio
            return Failure(ErrorKind.NO_CONTENT, f"Caption transcript unavailable: {e}")

        text = normalize_whitespace(text or '')
        if not text:
            return Failure(ErrorKind.NO_CONTENT, 'Caption transcript is empty')

        run.text = text
        run.transcript_source = 'captions'
        return None

    def _probe_audio(self, run: FallbackRun) -> Optional[Failure]:
        try:
            run.info = self.audio_downloader.probe(run.url) or {}
        except yt_dlp.utils.DownloadError as e:
            return download_failure(e)

        return check_duration(run.info.get('duration'), self.settings.max_youtube_duration)

    def _download_audio(self, run: FallbackRun) -> Optional[Failure]:
        try:
            path = self.audio_downloader.download(run.url, run.scratch_dir)
        except yt_dlp.utils.DownloadError as e:
            return download_failure(e)

        if not path or not os.path.exists(path):
            return Failure(ErrorKind.FETCH_FAILED, 'Audio download produced no file')

        size = os.path.getsize(path)
        if size > self.settings.max_media_bytes:
            return Failure(ErrorKind.LIMIT_EXCEEDED, f"Downloaded media is {size} bytes")

        run.downloaded_path = path
        return None

    def _normalize_audio(self, run: FallbackRun) -> Optional[Failure]:
        try:
            run.audio_path = self.audio_normalizer.normalize(run.downloaded_path, run.scratch_dir)
        except subprocess.TimeoutExpired:
            return Failure(ErrorKind.TIMEOUT, f"Audio conversion exceeded {self.settings.ffmpeg_timeout}s")
        except (subprocess.CalledProcessError, OSError) as e:
            return Failure(ErrorKind.UNSUPPORTED_FORMAT, f"Audio conversion failed: {e}")
        return None

    def _transcribe_audio(self, run: FallbackRun) -> Optional[Failure]:
        with open(run.audio_path, 'rb') as f:
            data = f.read()

        failure = check_byte_size(data, self.settings.max_audio_bytes, label='Normalized audio')
        if failure:
            return failure

        try:
            result = self.transcriber.transcribe(data, 'audio/mpeg')
        except Exception as e:
            return Failure(ErrorKind.TRANSCRIPTION_FAILED, str(e))

        run.text = (result or {}).get('transcript') or ''
        run.transcript_source = 'audio'
        return None
