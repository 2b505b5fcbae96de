"""
Shared pytest fixtures for content audit tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path

from content_audit.config import Settings
from content_audit.documents import LocalDocumentTextExtractor
from content_audit.pipeline import ContentPipeline
from content_audit.records import InMemoryRecordStore

from tests.fakes import (
    FakeAnalyzer,
    FakeAudioDownloader,
    FakeAudioNormalizer,
    FakeOCR,
    FakeTranscriber,
    FakeTranscriptFetcher,
)

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the Cloud Function module with a unique name at module load time
_audit_function_module = _load_module_from_path(
    'audit_function_main',
    PROJECT_ROOT / 'audit-function' / 'main.py'
)


# ============================================================================
# Pipeline fixtures
# ============================================================================

@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / 'scratch'
    path.mkdir()
    return path


@pytest.fixture
def settings(scratch_dir):
    """Settings with a per-test scratch directory and no credentials."""
    return Settings(scratch_dir=str(scratch_dir))


@pytest.fixture
def fakes():
    """Fresh fake collaborators, keyed by pipeline argument name."""
    return {
        'analyzer': FakeAnalyzer(),
        'transcriber': FakeTranscriber(),
        'ocr_service': FakeOCR(),
        'document_extractor': LocalDocumentTextExtractor(),
        'record_store': InMemoryRecordStore(),
        'transcript_fetcher': FakeTranscriptFetcher(),
        'audio_downloader': FakeAudioDownloader(),
        'audio_normalizer': FakeAudioNormalizer(),
    }


@pytest.fixture
def make_pipeline(settings, fakes):
    """Factory: build a ContentPipeline from the fakes, with overrides."""
    def _make(settings_override=None, **overrides):
        collaborators = dict(fakes)
        collaborators.update(overrides)
        fakes.update(overrides)
        return ContentPipeline(settings=settings_override or settings, **collaborators)

    return _make


# ============================================================================
# HTTP function fixtures
# ============================================================================

@pytest.fixture
def audit_function_module():
    """Returns the audit-function module."""
    return _audit_function_module


@pytest.fixture
def audit_content():
    """Returns main entry point from audit-function."""
    return _audit_function_module.audit_content


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockUpload:
        def __init__(self, data, mimetype, filename):
            self._data = data
            self.mimetype = mimetype
            self.filename = filename

        def read(self):
            return self._data

    class MockForm(dict):
        def to_dict(self):
            return dict(self)

    class MockRequest:
        def __init__(self, json_data=None, form=None, files=None, headers=None, method='POST'):
            self._json = json_data
            self.form = MockForm(form or {})
            self.files = {
                name: MockUpload(*upload) for name, upload in (files or {}).items()
            }
            self.headers = headers or {}
            self.method = method

        def get_json(self, force=False, silent=False):
            return self._json

        def get_data(self):
            return b''

    return MockRequest


@pytest.fixture
def sample_article_html():
    """A readable article page wrapped in navigation chrome."""
    paragraphs = ''.join(
        f"<p>Paragraph {i}: our herbal tonic is marketed as a natural way to support "
        f"digestion, and this review looks at what the label actually promises buyers.</p>"
        for i in range(6)
    )
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <title>Herbal Tonic Review | Example Health</title>
        <meta property="og:title" content="Herbal Tonic Review">
        <script>var tracking = "do not include";</script>
    </head>
    <body>
        <nav>Home | Products | Contact</nav>
        <article>
            <h1>Herbal Tonic Review</h1>
            {paragraphs}
        </article>
        <footer>Copyright Example Health</footer>
    </body>
    </html>
    """
