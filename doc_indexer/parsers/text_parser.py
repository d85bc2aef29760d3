"""
Plain text extractor

The first non-empty line is the title (Markdown heading markers
stripped); everything after it is the body.
"""

from .base import DocumentExtractor, ExtractedDocument


class TextExtractor(DocumentExtractor):
    """Extractor for .txt and .md files"""

    FORMAT = "text"
    SUPPORTED_EXTENSIONS = ['.txt', '.md', '.rst', '.text']

    def extract(self, content: bytes, source_path: str) -> ExtractedDocument:
        lines = content.decode('utf-8', errors='replace').splitlines()

        for i, line in enumerate(lines):
            title = line.strip().lstrip('#').strip()
            if title:
                return ExtractedDocument(text="\n".join(lines[i + 1:]), title=title)

        return ExtractedDocument(text="")
