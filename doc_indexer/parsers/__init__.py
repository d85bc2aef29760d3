"""Format extractors: raw document bytes to plain text and structural hints"""

from typing import List, Optional

from .base import DocumentExtractor, ExtractedDocument
from .text_parser import TextExtractor
from .html_parser import HtmlExtractor
from .pdf_parser import PdfExtractor


def default_extractors() -> List[DocumentExtractor]:
    return [PdfExtractor(), HtmlExtractor(), TextExtractor()]


def get_extractor_for(file_path: str,
                      content: Optional[bytes] = None,
                      extractors: Optional[List[DocumentExtractor]] = None) -> Optional[DocumentExtractor]:
    """
    Pick the extractor for a document

    The file extension decides first; when it matches nothing and the
    content is given, the content is sniffed (PDF magic, HTML prolog).
    """
    extractors = extractors if extractors is not None else default_extractors()
    for extractor in extractors:
        if extractor.can_extract(file_path):
            return extractor
    if content is not None:
        for extractor in extractors:
            if extractor.available() and extractor.sniff(content):
                return extractor
    return None


__all__ = [
    'DocumentExtractor',
    'ExtractedDocument',
    'TextExtractor',
    'HtmlExtractor',
    'PdfExtractor',
    'default_extractors',
    'get_extractor_for',
]
