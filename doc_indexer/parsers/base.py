"""
Base Document Extractor - Abstract interface for format extractors

Extractors turn raw document bytes into plain text plus the
structural hints the keyword extractor weights differently (title,
description, metadata keywords). They know nothing about keywords,
dictionaries or storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

# Length of the body excerpt used when a document has no description
DESCRIPTION_EXCERPT_LENGTH = 120


@dataclass
class ExtractedDocument:
    """Plain text and structural hints of one document"""
    text: str
    title: str = ""
    description: str = ""
    keywords: List[str] = field(default_factory=list)  # author-supplied metadata keywords

    def summary(self) -> str:
        """Description, or the beginning of the text when there is none"""
        return self.description or excerpt(self.text)


def excerpt(text: str, length: int = DESCRIPTION_EXCERPT_LENGTH) -> str:
    """First characters of text on a single line"""
    return " ".join(text.split())[:length]


class DocumentExtractor(ABC):
    """
    Abstract base class for format extractors

    Subclasses declare the extensions they handle and implement
    extract(). can_extract() also returns False when the optional
    library a format needs is not installed.
    """

    # Must be set by subclasses
    FORMAT: str = None
    SUPPORTED_EXTENSIONS: List[str] = []

    def available(self) -> bool:
        """Whether the libraries this extractor needs are installed"""
        return True

    def can_extract(self, file_path: str) -> bool:
        """
        Check if this extractor can handle the given file

        Args:
            file_path: Path (or bare file name) of the document
        """
        return self.available() and Path(file_path).suffix.lower() in self.SUPPORTED_EXTENSIONS

    def sniff(self, content: bytes) -> bool:
        """Whether content looks like this format regardless of its name"""
        return False

    @abstractmethod
    def extract(self, content: bytes, source_path: str) -> ExtractedDocument:
        """
        Extract text and hints from raw bytes

        Args:
            content: Raw file content
            source_path: Original path or file name, for messages

        Raises:
            ExtractionError: the content cannot be read in this format
        """
