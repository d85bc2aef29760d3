"""
Text normalization shared by every component

Dictionaries, stop words and extracted tokens all go through
normalize_word() so that lookups compare like with like: Unicode
composed form, case folded, diacritics preserved.
"""

import re
import unicodedata
from typing import List, Iterator

# Runs of letters only; digits, underscores, punctuation and
# apostrophes (', ’) all act as separators
WORD_PATTERN = re.compile(r"[^\W\d_]+")

DEFAULT_SHORT_WORD_LENGTH = 2


def normalize_word(word: str) -> str:
    """Compose accents, strip and lower-case a single word"""
    return unicodedata.normalize('NFC', word).strip().lower()


def iter_words(text: str) -> Iterator[str]:
    """Yield the raw alphabetic words of text, in order"""
    if not text:
        return
    for match in WORD_PATTERN.finditer(unicodedata.normalize('NFC', text)):
        yield match.group(0)


def tokenize(text: str) -> List[str]:
    """
    Split text into words

    Elisions are split on the apostrophe, so "l'arbre" gives
    ['l', 'arbre'] and the short part is later dropped like any
    other short word.
    """
    return list(iter_words(text))


def is_short_word(word: str, max_length: int = DEFAULT_SHORT_WORD_LENGTH) -> bool:
    """True when word has max_length characters or fewer"""
    return len(word) <= max_length


def split_keywords(value: str) -> List[str]:
    """Split a metadata keyword field on commas and spaces"""
    if not value:
        return []
    return [k for k in re.split(r"[,\s]+", value) if k]
