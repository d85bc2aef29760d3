"""
Stop-word filter

Words with no indexing value (articles, conjunctions, ...), loaded
once from a flat list with one word per line. The list is mandatory:
without it the indexer refuses to start.
"""

from pathlib import Path
from typing import Iterable, Iterator, FrozenSet, Union

from .errors import StopWordsError
from .text import normalize_word


class StopWordSet:
    """Immutable set of normalized stop words"""

    def __init__(self, words: Iterable[str] = ()):
        normalized = (normalize_word(w) for w in words)
        self._words: FrozenSet[str] = frozenset(w for w in normalized if w)

    @classmethod
    def from_words(cls, words: Iterable[str]) -> 'StopWordSet':
        return cls(words)

    def is_stop_word(self, word: str) -> bool:
        """Membership test; word is normalized before the lookup"""
        return normalize_word(word) in self._words

    def __contains__(self, word: str) -> bool:
        # Hot path: callers pass already-normalized words
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __repr__(self) -> str:
        return f"StopWordSet({len(self._words)} words)"


def load_stopwords(path: Union[str, Path]) -> StopWordSet:
    """
    Load the stop-word list

    Args:
        path: Text file with one stop word per line (blank lines ignored)

    Raises:
        StopWordsError: the file is missing or cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise StopWordsError(f"Stop-word list not found: {path}")

    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise StopWordsError(f"Cannot read stop-word list {path}: {e}") from e

    return StopWordSet(content.splitlines())
