"""
Keyword Extractor - weighted keyword counts for one document

For every word of the body, title and description:

1. drop words of short_word_length characters or fewer
2. drop stop words
3. resolve to an indexing key: lemma if the lexicon knows the form,
   otherwise the spell corrector's answer against the frequency
   dictionary, otherwise the word itself
4. count the key under its weight class (body / title / description)

The final count of a key is the sum over classes of
occurrences x class weight.

Dictionaries are only read, so large bodies are split into token
chunks resolved on a thread pool; every chunk counts into its own
Counter and the counters are summed at the end. Resolved words are
cached per extractor, so a misspelling is corrected once however
often it occurs.
"""

import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .frequency import FrequencyDictionary
from .lemmas import LemmaDictionary
from .models import Token, WeightClass, ResolutionOutcome, KeywordRecord
from .spelling import ALPHABET, correct_with_outcome
from .stopwords import StopWordSet
from .text import tokenize, normalize_word, is_short_word, DEFAULT_SHORT_WORD_LENGTH

# Distinct words whose resolution is kept per extractor
RESOLUTION_CACHE_SIZE = 1 << 17


@dataclass
class ExtractorConfig:
    """Configuration for keyword extraction"""
    short_word_length: int = DEFAULT_SHORT_WORD_LENGTH  # words this long or shorter are dropped
    body_weight: int = 1
    title_weight: int = 2
    description_weight: int = 2
    max_workers: Optional[int] = None  # None = CPU count
    chunk_size: int = 5000  # tokens per parallel work unit
    alphabet: str = ALPHABET

    def __post_init__(self):
        for name in ('body_weight', 'title_weight', 'description_weight'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if self.short_word_length < 0:
            raise ValueError("short_word_length cannot be negative")

    def weight_for(self, weight_class: WeightClass) -> int:
        if weight_class is WeightClass.TITLE:
            return self.title_weight
        if weight_class is WeightClass.DESCRIPTION:
            return self.description_weight
        return self.body_weight

    @property
    def workers(self) -> int:
        return self.max_workers or os.cpu_count() or 1


@dataclass
class _ChunkTally:
    """Private accumulator of one work unit"""
    weight_class: WeightClass
    counts: Counter = field(default_factory=Counter)
    outcomes: Counter = field(default_factory=Counter)
    seen: int = 0
    dropped: int = 0


@dataclass
class ExtractionResult:
    """
    Keyword counts of one document

    occurrences holds the raw (unweighted) counts per weight class;
    keywords applies the class weights.
    """
    weights: Dict[WeightClass, int]
    occurrences: Dict[WeightClass, Counter] = field(
        default_factory=lambda: {wc: Counter() for wc in WeightClass}
    )
    outcomes: Counter = field(default_factory=Counter)
    tokens_seen: int = 0
    tokens_dropped: int = 0

    def merge(self, tally: _ChunkTally):
        """Add a chunk's counts (summation, never overwrite)"""
        self.occurrences[tally.weight_class].update(tally.counts)
        self.outcomes.update(tally.outcomes)
        self.tokens_seen += tally.seen
        self.tokens_dropped += tally.dropped

    @property
    def keywords(self) -> Dict[str, int]:
        """Weighted count per keyword"""
        weighted: Counter = Counter()
        for weight_class, counts in self.occurrences.items():
            weight = self.weights[weight_class]
            for word, count in counts.items():
                weighted[word] += count * weight
        return dict(weighted)

    def weight_modifier(self, word: str) -> int:
        """Largest class weight among the classes word was seen in"""
        return max(
            (self.weights[wc] for wc, counts in self.occurrences.items() if word in counts),
            default=1
        )

    def to_records(self, document_key: str) -> List[KeywordRecord]:
        """One KeywordRecord per keyword, most frequent first"""
        records = [
            KeywordRecord(
                word=word,
                document_key=document_key,
                occurrences=count,
                weight_modifier=self.weight_modifier(word)
            )
            for word, count in self.keywords.items()
        ]
        records.sort(key=lambda r: (-r.occurrences, r.word))
        return records


class KeywordExtractor:
    """
    Turns document text into weighted keyword counts

    The stop words and both dictionaries are shared, read-only
    inputs owned by the caller. Lemma and frequency dictionaries are
    optional: without them words are kept as they are.
    """

    def __init__(self,
                 stopwords: StopWordSet,
                 lemmas: Optional[LemmaDictionary] = None,
                 dictionary: Optional[FrequencyDictionary] = None,
                 config: Optional[ExtractorConfig] = None):
        self.stopwords = stopwords
        self.lemmas = lemmas
        self.dictionary = dictionary
        self.config = config or ExtractorConfig()
        # One cache per extractor, shared by every chunk and document it handles
        self._resolve_cached = lru_cache(maxsize=RESOLUTION_CACHE_SIZE)(self._resolve_word)

    def _is_discarded(self, word: str) -> bool:
        return is_short_word(word, self.config.short_word_length) or word in self.stopwords

    def resolve(self, word: str) -> Tuple[str, ResolutionOutcome]:
        """
        Indexing key of a (non stop-word) word

        Lemma first; otherwise spell correction, whose answer is
        lemmatized in turn so that "chevals" -> "cheval" and
        "chevaus" -> "chevaux" -> "cheval" meet on the same key.
        """
        word = normalize_word(word)
        if self.lemmas is not None:
            entry = self.lemmas.lookup(word)
            if entry is not None:
                return entry.lemma, ResolutionOutcome.LEMMATIZED

        key, outcome = correct_with_outcome(word, self.dictionary, self.config.alphabet)
        if outcome is ResolutionOutcome.CORRECTED and self.lemmas is not None:
            key = self.lemmas.lemma(key)
        return key, outcome

    def _resolve_word(self, word: str) -> Optional[Tuple[str, ResolutionOutcome]]:
        key, outcome = self.resolve(word)
        # A lemma or a correction may itself be short or a stop word
        return None if self._is_discarded(key) else (key, outcome)

    def _resolve_raw(self, raw: str) -> Optional[Tuple[str, ResolutionOutcome]]:
        word = normalize_word(raw)
        if self._is_discarded(word):
            return None
        return self._resolve_cached(word)

    def cache_info(self):
        """Hit/miss statistics of the resolution cache"""
        return self._resolve_cached.cache_info()

    def _count_chunk(self, words: Sequence[str], weight_class: WeightClass) -> _ChunkTally:
        tally = _ChunkTally(weight_class)
        for raw in words:
            tally.seen += 1
            resolved = self._resolve_raw(raw)
            if resolved is None:
                tally.dropped += 1
                continue
            token = Token(raw=raw, normalized=resolved[0], weight_class=weight_class)
            tally.counts[token.normalized] += 1
            tally.outcomes[resolved[1]] += 1
        return tally

    def _work_units(self, sources: Dict[WeightClass, Optional[str]]) -> List[Tuple[List[str], WeightClass]]:
        size = self.config.chunk_size
        units = []
        for weight_class, text in sources.items():
            words = tokenize(text or "")
            for start in range(0, len(words), size):
                units.append((words[start:start + size], weight_class))
        return units

    def extract(self,
                text: str,
                title: Optional[str] = None,
                description: Optional[str] = None) -> ExtractionResult:
        """
        Extract weighted keywords from one document

        Args:
            text: Document body as plain text
            title: Optional title
            description: Optional description / summary

        Returns:
            ExtractionResult; .keywords is the weighted mapping
        """
        weights = {wc: self.config.weight_for(wc) for wc in WeightClass}
        result = ExtractionResult(weights=weights)

        units = self._work_units({
            WeightClass.BODY: text,
            WeightClass.TITLE: title,
            WeightClass.DESCRIPTION: description
        })

        workers = min(self.config.workers, len(units))
        if workers <= 1:
            tallies = [self._count_chunk(words, wc) for words, wc in units]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                tallies = list(executor.map(lambda unit: self._count_chunk(*unit), units))

        for tally in tallies:
            result.merge(tally)
        return result

    def extract_many(self,
                     documents: Iterable[Tuple[str, Optional[str], Optional[str]]],
                     max_workers: Optional[int] = None) -> List[ExtractionResult]:
        """
        Extract several independent documents in parallel

        Args:
            documents: (text, title, description) tuples
            max_workers: Thread pool size, defaults to the configured one

        Returns:
            One ExtractionResult per document, in input order
        """
        documents = list(documents)
        if not documents:
            return []
        with ThreadPoolExecutor(max_workers=max_workers or self.config.workers) as executor:
            return list(executor.map(lambda doc: self.extract(*doc), documents))


def extract_keywords(document_text: str,
                     title: Optional[str],
                     description: Optional[str],
                     stopwords: StopWordSet,
                     lemma_lookup: Optional[LemmaDictionary] = None,
                     frequency_lookup: Optional[FrequencyDictionary] = None,
                     config: Optional[ExtractorConfig] = None) -> Dict[str, int]:
    """Weighted keyword counts of a document (see KeywordExtractor)"""
    extractor = KeywordExtractor(stopwords, lemma_lookup, frequency_lookup, config)
    return extractor.extract(document_text, title, description).keywords
