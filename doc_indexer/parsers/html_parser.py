"""
HTML extractor (BeautifulSoup)

Reads <title>, <meta name="description">, <meta name="keywords">
and the visible text of <body>. Requires the 'html' extra.
"""

import importlib.util

from .base import DocumentExtractor, ExtractedDocument
from ..errors import ExtractionError
from ..text import split_keywords


class HtmlExtractor(DocumentExtractor):
    """Extractor for HTML pages"""

    FORMAT = "html"
    SUPPORTED_EXTENSIONS = ['.html', '.htm', '.xhtml']

    def available(self) -> bool:
        return importlib.util.find_spec('bs4') is not None

    def sniff(self, content: bytes) -> bool:
        head = content[:512].lstrip().lower()
        return head.startswith(b'<!doctype html') or head.startswith(b'<html')

    def extract(self, content: bytes, source_path: str) -> ExtractedDocument:
        from bs4 import BeautifulSoup

        try:
            soup = BeautifulSoup(content, 'html.parser')
        except Exception as e:
            raise ExtractionError(f"Cannot parse HTML {source_path}: {e}") from e

        title = soup.title.get_text(" ", strip=True) if soup.title else ""
        description = self._meta(soup, 'description')
        keywords = split_keywords(self._meta(soup, 'keywords'))

        # Remove elements that never hold document text
        for element in soup(['script', 'style', 'noscript', 'template']):
            element.decompose()

        body = soup.body if soup.body is not None else soup
        text = body.get_text(separator=' ', strip=True)

        return ExtractedDocument(text=text, title=title, description=description, keywords=keywords)

    @staticmethod
    def _meta(soup, name: str) -> str:
        tag = soup.find('meta', attrs={'name': name})
        if tag is None:
            return ""
        return (tag.get('content') or "").strip()
