"""
Exception hierarchy for the document indexer

Lookups and keyword extraction never raise: these errors belong to
configuration, offline compilation and the orchestration layer.
"""

from typing import Optional


class IndexerError(Exception):
    """Base class for all indexer errors"""


class ConfigurationError(IndexerError):
    """The process cannot start indexing with the given configuration"""


class StopWordsError(ConfigurationError):
    """The mandatory stop-word list is missing or unreadable"""


class CorpusError(IndexerError):
    """A compilation source holds no usable record"""


class ArtifactError(IndexerError):
    """A binary dictionary artifact has the wrong magic, kind or version"""


class ExtractionError(IndexerError):
    """Text could not be extracted from a document format"""


class StoreError(IndexerError):
    """The keyword store file is corrupt or not a keyword store"""


class DuplicateDocumentError(IndexerError):
    """The digest of a document is already known"""

    def __init__(self, document_digest, message: Optional[str] = None):
        self.document_digest = document_digest
        super().__init__(
            message or f"Document already indexed: {document_digest.hexdigest}"
        )


class DocumentNotFoundError(IndexerError, KeyError):
    """No document with this name in the keyword store"""

    def __str__(self):
        return f"Document not found: {self.args[0]}" if self.args else "Document not found"
