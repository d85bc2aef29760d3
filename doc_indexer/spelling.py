"""
Spell Corrector - Norvig-style correction over the frequency dictionary

    known word            -> unchanged
    known edit-1 variants -> the most frequent one
    known edit-2 variants -> the most frequent one
    nothing known         -> unchanged

Candidate generation enumerates over an explicit alphabet (the
letters of French, accents included) so that edit-2 sets stay
bounded. Ties between equally frequent candidates go to the
lexicographically smallest word, which makes the output a pure
function of the word and the dictionary contents.
"""

from typing import Dict, List, Optional, Set, Tuple

from .frequency import FrequencyDictionary
from .lemmas import LemmaDictionary
from .models import ResolutionOutcome
from .text import normalize_word

ALPHABET = "aàâbcçdeéèëêfghiîïjklmnoôpqrstuûüvwxyÿz"


def edits1(word: str, alphabet: str = ALPHABET) -> Set[str]:
    """
    Every string at edit distance 1 from word

    Deletions, adjacent transpositions, substitutions and insertions;
    the last two draw their letters from alphabet. The word itself is
    not part of the result.
    """
    splits = [(word[:i], word[i:]) for i in range(len(word) + 1)]
    deletes = [left + right[1:] for left, right in splits if right]
    transposes = [left + right[1] + right[0] + right[2:] for left, right in splits if len(right) > 1]
    replaces = [left + c + right[1:] for left, right in splits if right for c in alphabet]
    inserts = [left + c + right for left, right in splits for c in alphabet]

    candidates = set(deletes)
    candidates.update(transposes, replaces, inserts)
    candidates.discard(word)
    return candidates


def edits2(word: str, alphabet: str = ALPHABET) -> Set[str]:
    """Every string at edit distance 2 or less (through edits1) from word"""
    return {e2 for e1 in edits1(word, alphabet) for e2 in edits1(e1, alphabet)}


def best_candidate(candidates: Dict[str, int]) -> Optional[str]:
    """Most frequent candidate, ties broken by lexicographic order"""
    if not candidates:
        return None
    return min(candidates.items(), key=lambda item: (-item[1], item[0]))[0]


def _known_edits2(variants: Set[str], dictionary: FrequencyDictionary, alphabet: str) -> Dict[str, int]:
    # Expanded one edit-1 variant at a time: the full edit-2 set is never built
    found: Dict[str, int] = {}
    for variant in variants:
        found.update(dictionary.known(edits1(variant, alphabet)))
    return found


def correct_with_outcome(word: str,
                         dictionary: Optional[FrequencyDictionary],
                         alphabet: str = ALPHABET) -> Tuple[str, ResolutionOutcome]:
    """
    Most probable spelling of word, and how it was obtained

    Args:
        word: Word to check
        dictionary: Frequency dictionary, None disables correction
        alphabet: Letters used to build substitutions and insertions

    Returns:
        (word, KNOWN), (correction, CORRECTED) or (word, PASSED_THROUGH)
    """
    word = normalize_word(word)
    if dictionary is None or not word:
        return word, ResolutionOutcome.PASSED_THROUGH

    if dictionary.contains(word):
        return word, ResolutionOutcome.KNOWN

    variants = edits1(word, alphabet)
    correction = best_candidate(dictionary.known(variants))
    if correction is None:
        correction = best_candidate(_known_edits2(variants, dictionary, alphabet))

    if correction is None:
        return word, ResolutionOutcome.PASSED_THROUGH
    return correction, ResolutionOutcome.CORRECTED


def correct(word: str,
            dictionary: Optional[FrequencyDictionary],
            alphabet: str = ALPHABET) -> str:
    """Most probable spelling of word (the word itself when nothing better is known)"""
    return correct_with_outcome(word, dictionary, alphabet)[0]


def suggest(query: str,
            dictionary: Optional[FrequencyDictionary],
            lemmas: Optional[LemmaDictionary] = None,
            alphabet: str = ALPHABET) -> List[str]:
    """
    Spelling suggestion for a whitespace-separated query

    Each word is lemmatized, corrected, and the correction lemmatized
    again so the suggestion uses the same keys as the index.
    """
    suggestion = []
    for raw in query.split():
        word = normalize_word(raw)
        if lemmas is not None:
            word = lemmas.lemma(word)
        word = correct(word, dictionary, alphabet)
        if lemmas is not None:
            word = lemmas.lemma(word)
        suggestion.append(word)
    return suggestion
