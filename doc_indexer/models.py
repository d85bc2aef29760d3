"""
Core data models for the document indexer

These models define the common data structures shared by the
dictionaries, the keyword extractor, the content-addressed store
and the keyword store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional


class PosTag(Enum):
    """Part-of-speech category of a lexicon entry"""
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PRONOUN = "pronoun"
    DETERMINER = "determiner"
    ADPOSITION = "adposition"
    CONJUNCTION = "conjunction"
    NUMERAL = "numeral"
    INTERJECTION = "interjection"
    ABBREVIATION = "abbreviation"
    RESIDUAL = "residual"
    PUNCTUATION = "punctuation"
    UNKNOWN = "unknown"

    @classmethod
    def from_grace(cls, tag: str) -> 'PosTag':
        """Map a GRACE morphosyntactic tag (e.g. 'Ncms--') to its category"""
        if not tag:
            return cls.UNKNOWN
        return _GRACE_CATEGORIES.get(tag.strip()[:1].upper(), cls.UNKNOWN)


_GRACE_CATEGORIES = {
    'N': PosTag.NOUN,
    'V': PosTag.VERB,
    'A': PosTag.ADJECTIVE,
    'R': PosTag.ADVERB,
    'P': PosTag.PRONOUN,
    'D': PosTag.DETERMINER,
    'S': PosTag.ADPOSITION,
    'C': PosTag.CONJUNCTION,
    'M': PosTag.NUMERAL,
    'I': PosTag.INTERJECTION,
    'Y': PosTag.ABBREVIATION,
    'X': PosTag.RESIDUAL,
    'F': PosTag.PUNCTUATION,
}

# Stable integer codes used in the binary lemma artifact
POS_CODES: Dict[PosTag, int] = {tag: code for code, tag in enumerate(PosTag)}
POS_BY_CODE: Dict[int, PosTag] = {code: tag for tag, code in POS_CODES.items()}


class WeightClass(Enum):
    """Structural origin of a token inside a document"""
    BODY = "body"
    TITLE = "title"
    DESCRIPTION = "description"


class ResolutionOutcome(Enum):
    """How a token was turned into its indexing key"""
    LEMMATIZED = "lemmatized"
    KNOWN = "known"
    CORRECTED = "corrected"
    PASSED_THROUGH = "passed_through"


@dataclass(frozen=True)
class LemmaEntry:
    """A surface form and its canonical lemma"""
    surface_form: str
    lemma: str
    pos_tag: PosTag = PosTag.UNKNOWN


@dataclass(frozen=True)
class FrequencyEntry:
    """A known word and its corpus count (always positive)"""
    word: str
    count: int


@dataclass(frozen=True)
class Token:
    """A single word occurrence seen during extraction"""
    raw: str
    normalized: str
    weight_class: WeightClass = WeightClass.BODY


@dataclass
class KeywordRecord:
    """
    Weighted occurrences of one normalized word in one document

    ``occurrences`` already includes the structural weighting;
    ``weight_modifier`` is the largest multiplier that contributed
    to it (1 when the word only appears in the body).
    """
    word: str
    document_key: str
    occurrences: int
    weight_modifier: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'word': self.word,
            'document_key': self.document_key,
            'occurrences': self.occurrences,
            'weight_modifier': self.weight_modifier
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeywordRecord':
        """Reconstruct from dictionary"""
        return cls(
            word=data['word'],
            document_key=data['document_key'],
            occurrences=int(data['occurrences']),
            weight_modifier=int(data.get('weight_modifier', 1))
        )


@dataclass(frozen=True)
class DocumentDigest:
    """Deduplication identity and object-storage key of a document"""
    sha256: bytes
    storage_key: str

    @property
    def hexdigest(self) -> str:
        return self.sha256.hex()


@dataclass
class CompilationReport:
    """Summary of an offline dictionary compilation"""
    output_path: str
    records_read: int = 0
    records_skipped: int = 0
    entries_written: int = 0
    files_read: int = 0
    files_skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [f"{self.entries_written} entries written to {self.output_path}"]
        if self.files_read or self.files_skipped:
            parts.append(f"{self.files_read} files read, {self.files_skipped} skipped")
        parts.append(f"{self.records_read} records read, {self.records_skipped} skipped")
        return "; ".join(parts)


class DocType(Enum):
    """Where the original document lives"""
    ONLINE = "online"     # fetched from a URL
    OFFLINE = "offline"   # uploaded, stored under its storage key


@dataclass
class StoredDocument:
    """A document registered in the keyword store"""
    name: str
    title: str = ""
    description: str = ""
    sha256: Optional[str] = None
    doctype: DocType = DocType.OFFLINE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'title': self.title,
            'description': self.description,
            'sha256': self.sha256,
            'doctype': self.doctype.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredDocument':
        return cls(
            name=data['name'],
            title=data.get('title', ''),
            description=data.get('description', ''),
            sha256=data.get('sha256'),
            doctype=DocType(data.get('doctype', DocType.OFFLINE.value))
        )


@dataclass
class RankedDocument:
    """A search hit: a document and the summed occurrences of the query words"""
    document: StoredDocument
    hits: int

    def to_dict(self) -> Dict[str, Any]:
        return {**self.document.to_dict(), 'hits': self.hits}


@dataclass
class QueryResult:
    """Result of a keyword query, with the spelling suggestion if any"""
    results: List[RankedDocument] = field(default_factory=list)
    spelling_suggestion: Optional[str] = None
    using_suggestion: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [r.to_dict() for r in self.results],
            'spelling_suggestion': self.spelling_suggestion,
            'using_suggestion': self.using_suggestion
        }
