"""Document strategy: PDF, DOCX and plain text uploads."""

import io

from docx import Document as DocxDocument
from pypdf import PdfReader

from .config import Settings
from .errors import ErrorKind, Result
from .models import Extraction, ExtractionOutcome

PDF_MIME_TYPE = 'application/pdf'
DOCX_MIME_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
TEXT_MIME_TYPE = 'text/plain'


class UnsupportedDocumentError(ValueError):
    """The document MIME type has no local parser."""


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or '' for page in reader.pages]
    return '\n'.join(page for page in pages if page.strip())


def _docx_text(data: bytes) -> str:
    document = DocxDocument(io.BytesIO(data))
    parts = [p.text for p in document.paragraphs if p.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(' | '.join(cells))

    return '\n'.join(parts)


class LocalDocumentTextExtractor:
    """Parses documents in-process with pypdf and python-docx."""

    def extract_document_text(self, data: bytes, mime_type: str) -> dict:
        mime_type = (mime_type or '').split(';')[0].strip().lower()

        if mime_type == PDF_MIME_TYPE:
            return {'text': _pdf_text(data)}
        if mime_type == DOCX_MIME_TYPE:
            return {'text': _docx_text(data)}
        if mime_type == TEXT_MIME_TYPE:
            return {'text': data.decode('utf-8', errors='replace')}

        raise UnsupportedDocumentError(f"Unsupported document type: {mime_type or 'unknown'}")


def extract_document(data: bytes, mime_type: str, extractor, settings: Settings) -> ExtractionOutcome:
    print(f"[Document] Attempt started: {mime_type}")

    if not data:
        return Result.failure(ErrorKind.NO_CONTENT, 'Document is empty')

    try:
        result = extractor.extract_document_text(data, mime_type)
    except UnsupportedDocumentError as e:
        print(f"[Document] Failed: {e}")
        return Result.failure(ErrorKind.UNSUPPORTED_FORMAT, str(e))
    except Exception as e:
        # Corrupt or mislabeled files surface as parser exceptions
        print(f"[Document] Failed: parser error: {e}")
        return Result.failure(ErrorKind.UNSUPPORTED_FORMAT, f"Could not read document: {e}")

    text = ((result or {}).get('text') or '').strip()
    if len(text) < settings.min_document_chars:
        print(f"[Document] Failed: too little text ({len(text)} chars)")
        return Result.failure(
            ErrorKind.NO_CONTENT,
            f"Document has {len(text)} characters of text, need at least {settings.min_document_chars}"
        )

    print(f"[Document] Success: {mime_type} | Length: {len(text)} chars")
    return Result.success(Extraction(
        extracted_text=text,
        transcript='',
        source_description=f"document:{mime_type}",
    ))
