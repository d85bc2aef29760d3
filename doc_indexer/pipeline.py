"""
Indexing Pipeline - Orchestrates extraction, deduplication and storage

Owns the process-wide resources (stop words, dictionaries, keyword
store) and passes them to the keyword extractor. Documents are
deduplicated on their SHA-256 digest before any text is extracted.
"""

import sys
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import IndexerConfig
from .content_store import ContentAddressedStore, digest_and_key
from .errors import ConfigurationError, DuplicateDocumentError, ExtractionError, IndexerError
from .extractor import KeywordExtractor, ExtractionResult
from .frequency import FrequencyDictionary, load_frequency_dictionary
from .lemmas import LemmaDictionary, load_lemma_dictionary
from .models import DocType, DocumentDigest, QueryResult, StoredDocument, ResolutionOutcome
from .parsers import DocumentExtractor, ExtractedDocument, default_extractors, get_extractor_for
from .spelling import correct, suggest
from .stopwords import StopWordSet, load_stopwords
from .store import KeywordStore
from .text import normalize_word


@dataclass
class IndexingResult:
    """Result of indexing a single document"""
    file_path: str
    success: bool
    document_name: Optional[str] = None
    keywords_created: int = 0
    duplicate: bool = False
    outcomes: Counter = field(default_factory=Counter)
    error: Optional[str] = None
    processing_time_ms: float = 0.0


@dataclass
class PipelineStatistics:
    """Statistics from a pipeline run"""
    files_processed: int = 0
    files_failed: int = 0
    duplicates: int = 0
    total_keywords: int = 0
    outcomes: Dict[str, int] = field(default_factory=dict)
    processing_time_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)


def _load_optional(loader, path: Optional[str], label: str, verbose: bool):
    """Load an optional dictionary; a missing file only degrades normalization"""
    if not path:
        return None
    if not Path(path).exists():
        print(f"Warning: {label} not found at {path}, continuing without it", file=sys.stderr)
        return None
    if verbose:
        print(f"Loading {label}: {path}")
    return loader(path)


class IndexingPipeline:
    """
    Unified pipeline for indexing documents

    Orchestrates:
    1. Loading stop words (mandatory) and dictionaries (optional)
    2. Digesting and deduplicating raw bytes
    3. Extracting text with the matching format extractor
    4. Extracting weighted keywords
    5. Storing records and answering keyword queries
    """

    def __init__(self,
                 config: Optional[IndexerConfig] = None,
                 stopwords: Optional[StopWordSet] = None,
                 lemmas: Optional[LemmaDictionary] = None,
                 dictionary: Optional[FrequencyDictionary] = None,
                 store: Optional[KeywordStore] = None,
                 extractors: Optional[List[DocumentExtractor]] = None,
                 verbose: bool = False):
        """
        Initialize the indexing pipeline

        Components passed explicitly take precedence over the paths
        in config.

        Raises:
            ConfigurationError: no stop-word list available
        """
        self.config = config or IndexerConfig()
        self.verbose = verbose

        if stopwords is None:
            if not self.config.stopwords_path:
                raise ConfigurationError("A stop-word list is required (stopwords_path)")
            stopwords = load_stopwords(self.config.stopwords_path)
        if lemmas is None:
            lemmas = _load_optional(load_lemma_dictionary, self.config.lemmas_path,
                                    "lemma dictionary", verbose)
        if dictionary is None:
            dictionary = _load_optional(load_frequency_dictionary, self.config.dictionary_path,
                                        "frequency dictionary", verbose)

        self.stopwords = stopwords
        self.lemmas = lemmas
        self.dictionary = dictionary
        self.store = store if store is not None else KeywordStore(self.config.store_path)
        self.content_store = ContentAddressedStore(self.store)
        self.extractors = extractors if extractors is not None else default_extractors()
        self.keyword_extractor = KeywordExtractor(
            stopwords, lemmas, dictionary, self.config.extractor_config()
        )

        # Check-and-reserve of digests must be atomic across workers
        self._admission_lock = threading.Lock()

        if verbose:
            print(f"Pipeline ready: {len(stopwords)} stop words, "
                  f"lemmas={'yes' if lemmas is not None else 'no'}, "
                  f"dictionary={'yes' if dictionary is not None else 'no'}")

    # ========== Indexing ==========

    def _reserve(self, data: bytes, filename: str) -> DocumentDigest:
        document_digest = digest_and_key(data, filename)
        with self._admission_lock:
            if self.content_store.is_known(document_digest):
                raise DuplicateDocumentError(document_digest)
            self.store.add(document_digest.sha256)
        return document_digest

    def extract_document(self, content: bytes, filename: str) -> Tuple[ExtractedDocument, ExtractionResult]:
        """Format extraction followed by keyword extraction, without storing anything"""
        extractor = get_extractor_for(filename, content, self.extractors)
        if extractor is None:
            raise ExtractionError(f"Unsupported document format: {filename}")
        document = extractor.extract(content, filename)
        title = " ".join([document.title] + document.keywords)
        result = self.keyword_extractor.extract(document.text, title, document.description)
        return document, result

    def index_bytes(self,
                    content: bytes,
                    filename: str,
                    name: Optional[str] = None,
                    doctype: DocType = DocType.OFFLINE) -> IndexingResult:
        """
        Index a document given as raw bytes

        Args:
            content: Raw document bytes
            filename: Original file name (format detection, storage key)
            name: Document name in the store; defaults to the storage key
            doctype: OFFLINE for uploads, ONLINE for fetched URLs

        Raises:
            DuplicateDocumentError: a document with the same bytes is indexed
            ExtractionError: the format is unsupported or unreadable
        """
        start_time = time.time()
        document_digest = self._reserve(content, filename)
        try:
            document, result = self.extract_document(content, filename)
        except Exception:
            self.store.release(document_digest.sha256)
            raise

        name = name or document_digest.storage_key
        records = result.to_records(name)
        self.store.add_document(
            StoredDocument(
                name=name,
                title=document.title,
                description=document.summary(),
                sha256=document_digest.hexdigest,
                doctype=doctype
            ),
            records
        )

        return IndexingResult(
            file_path=filename,
            success=True,
            document_name=name,
            keywords_created=len(records),
            outcomes=result.outcomes,
            processing_time_ms=(time.time() - start_time) * 1000
        )

    def index_file(self, file_path: str) -> IndexingResult:
        """
        Index a single file; errors are reported in the result

        Args:
            file_path: Path to the file

        Returns:
            IndexingResult with details
        """
        start_time = time.time()
        path = Path(file_path)
        try:
            return self.index_bytes(path.read_bytes(), path.name)
        except DuplicateDocumentError as e:
            return IndexingResult(
                file_path=file_path,
                success=False,
                duplicate=True,
                error=str(e),
                processing_time_ms=(time.time() - start_time) * 1000
            )
        except (IndexerError, OSError) as e:
            return IndexingResult(
                file_path=file_path,
                success=False,
                error=str(e),
                processing_time_ms=(time.time() - start_time) * 1000
            )

    def index_directory(self,
                        directory: str,
                        recursive: bool = True,
                        max_workers: Optional[int] = None,
                        progress_callback: Optional[Callable[[str, int, int], None]] = None
                        ) -> PipelineStatistics:
        """
        Index all supported files in a directory

        Args:
            directory: Path to directory
            recursive: Whether to recurse into subdirectories
            max_workers: Number of parallel workers (defaults to the configured count)
            progress_callback: Called with (file_path, current, total)

        Returns:
            PipelineStatistics with run results
        """
        start_time = time.time()
        path = Path(directory)

        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files_to_process = [
            str(fp) for fp in sorted(path.glob(pattern))
            if fp.is_file() and get_extractor_for(str(fp), extractors=self.extractors)
        ]

        total_files = len(files_to_process)
        if self.verbose:
            print(f"Found {total_files} files to index")

        stats = PipelineStatistics()
        workers = max_workers or self.keyword_extractor.config.workers

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.index_file, fp): fp
                    for fp in files_to_process
                }

                for i, future in enumerate(as_completed(futures)):
                    file_path = futures[future]
                    if progress_callback:
                        progress_callback(file_path, i + 1, total_files)
                    self._update_stats(stats, future.result())
        else:
            for i, file_path in enumerate(files_to_process):
                if progress_callback:
                    progress_callback(file_path, i + 1, total_files)
                self._update_stats(stats, self.index_file(file_path))

        stats.processing_time_seconds = time.time() - start_time
        return stats

    def _update_stats(self, stats: PipelineStatistics, result: IndexingResult):
        """Update statistics from an indexing result"""
        if result.success:
            stats.files_processed += 1
            stats.total_keywords += result.keywords_created
            for outcome, count in result.outcomes.items():
                key = outcome.value if isinstance(outcome, ResolutionOutcome) else str(outcome)
                stats.outcomes[key] = stats.outcomes.get(key, 0) + count
        elif result.duplicate:
            stats.duplicates += 1
        else:
            stats.files_failed += 1
            if result.error:
                stats.errors.append(f"{result.file_path}: {result.error}")

    # ========== Queries ==========

    def normalize_query(self, query: str) -> List[str]:
        words = [normalize_word(w) for w in query.split()]
        if self.lemmas is not None:
            words = [self.lemmas.lemma(w) for w in words]
        return words

    def search(self, query: str) -> QueryResult:
        """
        Search documents matching the words of query

        When the query finds nothing and its spelling suggestion
        differs from it, the suggestion is searched instead and the
        result says so.
        """
        words = self.normalize_query(query)
        if not words:
            return QueryResult()

        suggestion = suggest(query, self.dictionary, self.lemmas,
                             self.keyword_extractor.config.alphabet)
        results = self.store.search(words)
        if results or suggestion == words:
            return QueryResult(results=results)

        return QueryResult(
            results=self.store.search(suggestion),
            spelling_suggestion=" ".join(suggestion),
            using_suggestion=True
        )

    def spelling(self, word: str) -> str:
        """Spell-corrected form of a single word"""
        return correct(word, self.dictionary, self.keyword_extractor.config.alphabet)

    # ========== Persistence / stats ==========

    def save(self, path: Optional[str] = None):
        target = self.store.save(path)
        if self.verbose:
            print(f"Saved keyword store to: {target}")
        return target

    def get_statistics(self) -> Dict[str, int]:
        return {
            **self.store.get_statistics(),
            'stop_words': len(self.stopwords),
            'lemma_forms': len(self.lemmas) if self.lemmas is not None else 0,
            'dictionary_words': len(self.dictionary) if self.dictionary is not None else 0
        }

    def print_statistics(self):
        print(f"{'='*60}")
        print("INDEX STATISTICS")
        print(f"{'='*60}")
        for key, value in self.get_statistics().items():
            print(f"  {key}: {value}")
