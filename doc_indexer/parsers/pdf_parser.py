"""
PDF extractor (pdfplumber)

Title, subject and keywords come from the document information
dictionary; the body is the text of every page. Requires the 'pdf'
extra.
"""

import importlib.util
import io

from .base import DocumentExtractor, ExtractedDocument
from ..errors import ExtractionError
from ..text import split_keywords


def _metadata_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode('utf-8', errors='replace')
    return str(value).strip()


class PdfExtractor(DocumentExtractor):
    """Extractor for PDF documents"""

    FORMAT = "pdf"
    SUPPORTED_EXTENSIONS = ['.pdf']

    def available(self) -> bool:
        return importlib.util.find_spec('pdfplumber') is not None

    def sniff(self, content: bytes) -> bool:
        return content[:5] == b'%PDF-'

    def extract(self, content: bytes, source_path: str) -> ExtractedDocument:
        import pdfplumber

        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                metadata = pdf.metadata or {}
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            raise ExtractionError(f"Cannot read PDF {source_path}: {e}") from e

        return ExtractedDocument(
            text="\n".join(pages),
            title=_metadata_text(metadata.get('Title')),
            description=_metadata_text(metadata.get('Subject')),
            keywords=split_keywords(_metadata_text(metadata.get('Keywords')))
        )
