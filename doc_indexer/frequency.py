"""
Frequency Dictionary - word counts used as the spelling model

Counts are gathered once from a directory of plain-text files. A
word's count is the unnormalized estimate of P(word) used by the
spell corrector to choose among candidate corrections.
"""

import os
import sys
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .artifacts import write_artifact, read_artifact, StringTable
from .errors import CorpusError
from .models import FrequencyEntry, CompilationReport
from .stopwords import StopWordSet, load_stopwords
from .text import iter_words, normalize_word, is_short_word, DEFAULT_SHORT_WORD_LENGTH

ARTIFACT_KIND = "frequencies"

DEFAULT_CORPUS_EXTENSIONS = ('.txt',)


class FrequencyDictionary:
    """
    Read-only word -> count table, shared freely between threads

    The word column is kept as a StringTable for storage; lookups go
    through a hash view built once at construction, since the spell
    corrector tests thousands of candidates per unknown word.
    """

    def __init__(self, words: StringTable, counts: np.ndarray):
        if len(words) != len(counts):
            raise ValueError("Word and count columns must have the same length")
        self._words = words
        self._counts = counts.astype(np.uint64, copy=False)
        self._index: Dict[str, int] = dict(zip(words, self._counts.tolist()))
        self._total = int(self._counts.sum()) if len(self._counts) else 0

    @classmethod
    def from_counts(cls, counts: Dict[str, int]) -> 'FrequencyDictionary':
        """Build from a mapping; words with a count <= 0 are left out"""
        merged: Counter = Counter()
        for word, count in counts.items():
            word = normalize_word(word)
            if word and count > 0:
                merged[word] += int(count)
        words = sorted(merged)
        return cls(
            StringTable.from_strings(words),
            np.array([merged[w] for w in words], dtype=np.uint64)
        )

    @property
    def total(self) -> int:
        """Sum of all counts"""
        return self._total

    def frequency(self, word: str) -> int:
        """Count of word, 0 when absent"""
        return self._index.get(normalize_word(word), 0)

    def contains(self, word: str) -> bool:
        return normalize_word(word) in self._index

    def probability(self, word: str) -> float:
        if not self._total:
            return 0.0
        return self.frequency(word) / self._total

    def known(self, candidates: Iterable[str]) -> Dict[str, int]:
        """
        Filter candidates down to known words

        Candidates are expected normalized (they come from edits1()).

        Returns:
            {word: count} for every candidate present in the dictionary
        """
        index = self._index
        return {word: index[word] for word in candidates if word in index}

    def entries(self) -> Iterator[FrequencyEntry]:
        """Every (word, count) pair in word order"""
        for word, count in zip(self._words, self._counts.tolist()):
            yield FrequencyEntry(word, count)

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"FrequencyDictionary({len(self)} words, total={self._total})"

    def save(self, path: Union[str, Path]) -> Path:
        return write_artifact(path, ARTIFACT_KIND, {**self._words.columns('words'), 'counts': self._counts})


# ============================================================
# Compilation
# ============================================================

def count_words(texts: Iterable[str],
                stopwords: StopWordSet,
                short_word_length: int = DEFAULT_SHORT_WORD_LENGTH) -> Tuple[Counter, int, int]:
    """
    Count content words across texts

    Short words and stop words are not counted.

    Returns:
        (counter, words seen, words skipped)
    """
    counts: Counter = Counter()
    seen = skipped = 0
    for text in texts:
        for raw in iter_words(text):
            seen += 1
            word = normalize_word(raw)
            if is_short_word(word, short_word_length) or word in stopwords:
                skipped += 1
                continue
            counts[word] += 1
    return counts, seen, skipped


def _corpus_files(directory: Path, extensions: Optional[Sequence[str]]) -> List[Path]:
    files = []
    for file_path in sorted(directory.rglob('*')):
        if not file_path.is_file():
            continue
        if extensions and file_path.suffix.lower() not in extensions:
            continue
        files.append(file_path)
    return files


def _count_file(file_path: Path, stopwords: StopWordSet,
                short_word_length: int) -> Tuple[Counter, int, int]:
    text = file_path.read_text(encoding='utf-8', errors='replace')
    return count_words([text], stopwords, short_word_length)


def compile_frequency_dictionary(corpus_directory: Union[str, Path],
                                 stopwords_path: Union[str, Path],
                                 output_path: Union[str, Path],
                                 max_workers: Optional[int] = None,
                                 extensions: Optional[Sequence[str]] = DEFAULT_CORPUS_EXTENSIONS,
                                 short_word_length: int = DEFAULT_SHORT_WORD_LENGTH,
                                 verbose: bool = False) -> CompilationReport:
    """
    Count every word of a text corpus into a binary frequency artifact

    Each file is counted by a worker into its own Counter; the
    counters are summed once all files are done.

    Args:
        corpus_directory: Directory searched recursively for corpus files
        stopwords_path: Stop-word list (mandatory)
        output_path: Where to write the artifact
        max_workers: Thread pool size (defaults to the CPU count)
        extensions: File suffixes to read, None for every file
        short_word_length: Words this long or shorter are not counted
        verbose: Print progress

    Raises:
        NotADirectoryError: corpus_directory is not a directory
        StopWordsError: the stop-word list is missing
        CorpusError: no word could be counted
    """
    directory = Path(corpus_directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {corpus_directory}")

    stopwords = load_stopwords(stopwords_path)
    files = _corpus_files(directory, extensions)
    if verbose:
        print(f"Found {len(files)} corpus files in {directory}")

    report = CompilationReport(output_path=str(output_path))
    totals: Counter = Counter()

    with ThreadPoolExecutor(max_workers=max_workers or os.cpu_count()) as executor:
        futures = {
            executor.submit(_count_file, fp, stopwords, short_word_length): fp
            for fp in files
        }
        for future in as_completed(futures):
            file_path = futures[future]
            try:
                counts, seen, skipped = future.result()
            except OSError as e:
                report.files_skipped += 1
                report.errors.append(f"{file_path}: {e}")
                continue
            totals.update(counts)
            report.files_read += 1
            report.records_read += seen
            report.records_skipped += skipped

    if not totals:
        raise CorpusError(
            f"No word counted in {corpus_directory} "
            f"({report.files_read} files read, {report.files_skipped} unreadable)"
        )

    dictionary = FrequencyDictionary.from_counts(totals)
    report.output_path = str(dictionary.save(output_path))
    report.entries_written = len(dictionary)

    if verbose:
        for err in report.errors[:10]:
            print(f"Warning: {err}", file=sys.stderr)
        print(f"Compiled frequency dictionary: {report}")
    return report


def load_frequency_dictionary(path: Union[str, Path]) -> FrequencyDictionary:
    """Load a frequency artifact written by compile_frequency_dictionary()"""
    data = read_artifact(path, ARTIFACT_KIND)
    return FrequencyDictionary(StringTable.from_columns(data, 'words'), data['counts'])
