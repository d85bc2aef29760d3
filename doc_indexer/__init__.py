"""
Document Indexer - keyword indexing for natural-language documents

This package provides:
1. A Lemma Dictionary compiled from a GLÀFF-style lexicon
2. A Frequency Dictionary compiled from a plain-text corpus
3. Norvig-style spell correction over the frequency dictionary
4. Stop-word filtering
5. Weighted keyword extraction (title / description / body)
6. Content-addressed digests and storage keys for deduplication

Around that core:
- Format extractors for text, HTML and PDF (optional extras)
- KeywordStore: JSON-backed keyword table with hits-sum search
- IndexingPipeline: dedup -> extract -> store, plus queries with
  spelling suggestions
"""

from .models import (
    PosTag,
    WeightClass,
    ResolutionOutcome,
    LemmaEntry,
    FrequencyEntry,
    Token,
    KeywordRecord,
    DocumentDigest,
    CompilationReport,
    DocType,
    StoredDocument,
    RankedDocument,
    QueryResult
)

from .errors import (
    IndexerError,
    ConfigurationError,
    StopWordsError,
    CorpusError,
    ArtifactError,
    ExtractionError,
    StoreError,
    DuplicateDocumentError,
    DocumentNotFoundError
)

from .stopwords import StopWordSet, load_stopwords
from .lemmas import LemmaDictionary, compile_lemma_dictionary, load_lemma_dictionary
from .frequency import FrequencyDictionary, compile_frequency_dictionary, load_frequency_dictionary
from .spelling import ALPHABET, edits1, edits2, correct, correct_with_outcome, suggest
from .extractor import ExtractorConfig, ExtractionResult, KeywordExtractor, extract_keywords
from .content_store import (
    digest,
    storage_key,
    digest_and_key,
    DigestRegistry,
    InMemoryDigestRegistry,
    ContentAddressedStore
)
from .store import KeywordStore
from .config import IndexerConfig, load_config
from .pipeline import IndexingPipeline, IndexingResult, PipelineStatistics

__version__ = "0.3.0"
__all__ = [
    # Models
    "PosTag",
    "WeightClass",
    "ResolutionOutcome",
    "LemmaEntry",
    "FrequencyEntry",
    "Token",
    "KeywordRecord",
    "DocumentDigest",
    "CompilationReport",
    "DocType",
    "StoredDocument",
    "RankedDocument",
    "QueryResult",
    # Errors
    "IndexerError",
    "ConfigurationError",
    "StopWordsError",
    "CorpusError",
    "ArtifactError",
    "ExtractionError",
    "StoreError",
    "DuplicateDocumentError",
    "DocumentNotFoundError",
    # Dictionaries
    "StopWordSet",
    "load_stopwords",
    "LemmaDictionary",
    "compile_lemma_dictionary",
    "load_lemma_dictionary",
    "FrequencyDictionary",
    "compile_frequency_dictionary",
    "load_frequency_dictionary",
    # Spelling
    "ALPHABET",
    "edits1",
    "edits2",
    "correct",
    "correct_with_outcome",
    "suggest",
    # Extraction
    "ExtractorConfig",
    "ExtractionResult",
    "KeywordExtractor",
    "extract_keywords",
    # Content addressing
    "digest",
    "storage_key",
    "digest_and_key",
    "DigestRegistry",
    "InMemoryDigestRegistry",
    "ContentAddressedStore",
    # Orchestration
    "KeywordStore",
    "IndexerConfig",
    "load_config",
    "IndexingPipeline",
    "IndexingResult",
    "PipelineStatistics"
]
