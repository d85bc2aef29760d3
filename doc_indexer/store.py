"""
Keyword Store - documents and their keyword records

File-backed (JSON) store used by the pipeline: one KeywordRecord per
word per document, an inverted word -> documents index for queries,
and the set of indexed digests for deduplication. Re-adding a
document replaces its records; counts from separate indexing runs
are never added together.
"""

import json
import os
import threading
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Iterable, Optional, Set, Union

from .errors import DocumentNotFoundError, StoreError
from .models import KeywordRecord, StoredDocument, RankedDocument

STORE_VERSION = 1


class KeywordStore:
    """
    Thread-safe keyword table

    Also satisfies the DigestRegistry protocol (``in`` / ``add`` on
    raw SHA-256 digests), so it can back a ContentAddressedStore.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self.documents: Dict[str, StoredDocument] = {}
        self.keywords: Dict[str, Dict[str, KeywordRecord]] = {}
        self.word_index: Dict[str, Set[str]] = defaultdict(set)
        self._digests: Dict[str, str] = {}  # sha256 hex -> document name
        self._reserved: Set[str] = set()

        if self.path and self.path.exists():
            self.load()

    # ========== Digest registry ==========

    def __contains__(self, sha256: bytes) -> bool:
        key = sha256.hex()
        with self._lock:
            return key in self._digests or key in self._reserved

    def add(self, sha256: bytes) -> None:
        """Reserve a digest before its document is stored"""
        with self._lock:
            self._reserved.add(sha256.hex())

    def release(self, sha256: bytes) -> None:
        """Drop a reservation (e.g. after a failed extraction)"""
        with self._lock:
            self._reserved.discard(sha256.hex())

    def has_digest(self, sha256_hex: str) -> bool:
        with self._lock:
            return sha256_hex in self._digests

    def document_for_digest(self, sha256_hex: str) -> Optional[StoredDocument]:
        with self._lock:
            name = self._digests.get(sha256_hex)
            return self.documents.get(name) if name else None

    # ========== Documents ==========

    def add_document(self, document: StoredDocument, records: Iterable[KeywordRecord]):
        """
        Store a document and its keywords

        Any records previously stored for the same document name are
        discarded first.
        """
        records = list(records)
        for record in records:
            if record.document_key != document.name:
                raise ValueError(
                    f"Record for '{record.document_key}' given for document '{document.name}'"
                )
            if record.occurrences < 1:
                raise ValueError(f"Record '{record.word}' has no occurrence")

        with self._lock:
            if document.name in self.documents:
                self._remove(document.name)

            self.documents[document.name] = document
            table: Dict[str, KeywordRecord] = {}
            for record in records:
                previous = table.get(record.word)
                if previous is not None:
                    # Duplicate word within one batch: keep one record per word
                    previous.occurrences += record.occurrences
                    previous.weight_modifier = max(previous.weight_modifier, record.weight_modifier)
                else:
                    table[record.word] = KeywordRecord(**record.to_dict())
                self.word_index[record.word].add(document.name)
            self.keywords[document.name] = table

            if document.sha256:
                self._digests[document.sha256] = document.name
                self._reserved.discard(document.sha256)

    def _remove(self, name: str):
        for word in self.keywords.pop(name, {}):
            docs = self.word_index.get(word)
            if docs is not None:
                docs.discard(name)
                if not docs:
                    del self.word_index[word]
        document = self.documents.pop(name)
        if document.sha256 and self._digests.get(document.sha256) == name:
            del self._digests[document.sha256]

    def delete_document(self, name: str) -> StoredDocument:
        with self._lock:
            if name not in self.documents:
                raise DocumentNotFoundError(name)
            document = self.documents[name]
            self._remove(name)
            return document

    def get_document(self, name: str) -> Optional[StoredDocument]:
        with self._lock:
            return self.documents.get(name)

    def list_documents(self) -> List[StoredDocument]:
        with self._lock:
            return sorted(self.documents.values(), key=lambda d: d.name)

    def document_keywords(self, name: str) -> List[KeywordRecord]:
        """Keywords of a document, highest occurrences first"""
        with self._lock:
            if name not in self.documents:
                raise DocumentNotFoundError(name)
            records = list(self.keywords.get(name, {}).values())
        records.sort(key=lambda r: (-r.occurrences, r.word))
        return records

    # ========== Queries ==========

    def search(self, words: Iterable[str]) -> List[RankedDocument]:
        """
        Documents matching at least one word

        A document's hits are the summed occurrences of every query
        word it contains; results come in descending hits order.
        """
        hits: Dict[str, int] = defaultdict(int)
        with self._lock:
            for word in words:
                for name in self.word_index.get(word, ()):
                    hits[name] += self.keywords[name][word].occurrences
            ranked = [RankedDocument(self.documents[name], count) for name, count in hits.items()]
        ranked.sort(key=lambda r: (-r.hits, r.document.name))
        return ranked

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            return {
                'documents': len(self.documents),
                'distinct_keywords': len(self.word_index),
                'keyword_records': sum(len(t) for t in self.keywords.values())
            }

    # ========== Persistence ==========

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the store as JSON (atomically)"""
        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("No path given and the store has no default path")
        target.parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            data = {
                'version': STORE_VERSION,
                'documents': [d.to_dict() for d in self.documents.values()],
                'keywords': [
                    r.to_dict()
                    for table in self.keywords.values()
                    for r in table.values()
                ]
            }

        tmp_path = target.with_name(target.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, target)
        return target

    def load(self, path: Optional[Union[str, Path]] = None):
        """Replace the store content with a saved JSON file"""
        source = Path(path) if path else self.path
        if source is None:
            raise ValueError("No path given and the store has no default path")

        with open(source, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise StoreError(f"Invalid JSON in keyword store {source}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"{source} is not a keyword store")

        by_document: Dict[str, List[KeywordRecord]] = defaultdict(list)
        try:
            for item in data.get('keywords', []):
                record = KeywordRecord.from_dict(item)
                by_document[record.document_key].append(record)
            documents = [StoredDocument.from_dict(item) for item in data.get('documents', [])]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed record in keyword store {source}: {e}") from e

        with self._lock:
            self.documents = {}
            self.keywords = {}
            self.word_index = defaultdict(set)
            self._digests = {}
            self._reserved = set()
            for document in documents:
                self.add_document(document, by_document.get(document.name, []))

    def __len__(self) -> int:
        return len(self.documents)
