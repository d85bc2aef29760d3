"""
Lemma Dictionary - inflected form to canonical lemma

Compiled once from a pipe-delimited lexicon in the GLÀFF layout:

    surface form | GRACE tag | lemma | IPA | SAMPA | frequencies...

Only the first three columns are used. The compiled artifact keeps
three aligned columns (sorted surface forms, lemmas, POS codes) and
lookups are binary searches on the surface forms. When a form is
listed several times the last row wins.
"""

import csv
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np

from .artifacts import write_artifact, read_artifact, StringTable
from .errors import CorpusError
from .models import LemmaEntry, PosTag, POS_CODES, POS_BY_CODE, CompilationReport
from .text import normalize_word

ARTIFACT_KIND = "lemmas"

# Lexicon fields are long free-text lines in some releases
csv.field_size_limit(1 << 24)


class LemmaDictionary:
    """
    Read-only surface form -> (lemma, POS) table

    Safe to share between threads: nothing mutates it after load.
    """

    def __init__(self, surface_forms: StringTable, lemmas: StringTable, pos_codes: np.ndarray):
        if not (len(surface_forms) == len(lemmas) == len(pos_codes)):
            raise ValueError("Lemma columns must have the same length")
        self._forms = surface_forms
        self._lemmas = lemmas
        self._pos = pos_codes

    @classmethod
    def from_entries(cls, entries: Union[Dict[str, str], Iterable[LemmaEntry]]) -> 'LemmaDictionary':
        """
        Build an in-memory dictionary

        Args:
            entries: Either a {surface_form: lemma} mapping or LemmaEntry
                objects; a repeated form keeps its last entry
        """
        if isinstance(entries, dict):
            entries = [LemmaEntry(form, lemma) for form, lemma in entries.items()]

        table: Dict[str, LemmaEntry] = {}
        for entry in entries:
            form = normalize_word(entry.surface_form)
            if form:
                table[form] = LemmaEntry(form, normalize_word(entry.lemma), entry.pos_tag)
        return cls(*_columns(table))

    def lookup(self, word: str) -> Optional[LemmaEntry]:
        """Entry for word, or None when the form is not in the lexicon"""
        form = normalize_word(word)
        idx = self._forms.find(form)
        if idx < 0:
            return None
        return LemmaEntry(
            surface_form=form,
            lemma=self._lemmas[idx],
            pos_tag=POS_BY_CODE.get(int(self._pos[idx]), PosTag.UNKNOWN)
        )

    def lemma(self, word: str) -> str:
        """Lemma of word, or the word itself when unknown"""
        entry = self.lookup(word)
        return entry.lemma if entry else word

    def __contains__(self, word: str) -> bool:
        return self._forms.find(normalize_word(word)) >= 0

    def __len__(self) -> int:
        return len(self._forms)

    def __repr__(self) -> str:
        return f"LemmaDictionary({len(self)} forms)"

    def save(self, path: Union[str, Path]) -> Path:
        """Write the dictionary as a binary artifact"""
        return write_artifact(path, ARTIFACT_KIND, {
            **self._forms.columns('surface_forms'),
            **self._lemmas.columns('lemmas'),
            'pos_codes': self._pos
        })


def _columns(table: Dict[str, LemmaEntry]) -> Tuple[StringTable, StringTable, np.ndarray]:
    """Sorted aligned columns from a {form: entry} table"""
    forms = sorted(table)
    return (
        StringTable.from_strings(forms),
        StringTable.from_strings([table[f].lemma for f in forms]),
        np.array([POS_CODES[table[f].pos_tag] for f in forms], dtype=np.uint8)
    )


# ============================================================
# Compilation
# ============================================================

def parse_lemma_corpus(corpus_path: Union[str, Path]) -> Tuple[Dict[str, LemmaEntry], int, int]:
    """
    Parse a pipe-delimited lexicon

    Rows with fewer than three columns, or with an empty surface form
    or lemma, are skipped. When a surface form appears several times
    the last well-formed row wins.

    Returns:
        (table keyed by normalized surface form, rows read, rows skipped)
    """
    path = Path(corpus_path)
    if not path.is_file():
        raise FileNotFoundError(f"Lexicon not found: {corpus_path}")

    table: Dict[str, LemmaEntry] = {}
    read = skipped = 0

    with open(path, 'r', encoding='utf-8', errors='replace', newline='') as f:
        reader = csv.reader(f, delimiter='|', quoting=csv.QUOTE_NONE)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error:
                read += 1
                skipped += 1
                continue

            read += 1
            if len(row) < 3:
                skipped += 1
                continue

            form = normalize_word(row[0])
            lemma = normalize_word(row[2])
            if not form or not lemma:
                skipped += 1
                continue

            table[form] = LemmaEntry(form, lemma, PosTag.from_grace(row[1]))

    return table, read, skipped


def compile_lemma_dictionary(corpus_path: Union[str, Path],
                             output_path: Union[str, Path],
                             verbose: bool = False) -> CompilationReport:
    """
    Compile a lexicon into a binary lemma artifact

    Args:
        corpus_path: Pipe-delimited lexicon (GLÀFF layout)
        output_path: Where to write the artifact
        verbose: Print progress

    Returns:
        CompilationReport with read/skipped/written counts

    Raises:
        FileNotFoundError: the lexicon does not exist
        CorpusError: the lexicon holds no usable row
    """
    if verbose:
        print(f"Reading lexicon: {corpus_path}")

    table, read, skipped = parse_lemma_corpus(corpus_path)
    if not table:
        raise CorpusError(f"No usable record in {corpus_path} ({read} rows read)")

    if verbose:
        print(f"Writing {len(table)} forms to {output_path}")

    path = LemmaDictionary(*_columns(table)).save(output_path)

    report = CompilationReport(
        output_path=str(path),
        records_read=read,
        records_skipped=skipped,
        entries_written=len(table)
    )
    if verbose:
        print(f"Compiled lemma dictionary: {report}")
    return report


def load_lemma_dictionary(path: Union[str, Path]) -> LemmaDictionary:
    """Load a lemma artifact written by compile_lemma_dictionary()"""
    data = read_artifact(path, ARTIFACT_KIND)
    return LemmaDictionary(
        StringTable.from_columns(data, 'surface_forms'),
        StringTable.from_columns(data, 'lemmas'),
        data['pos_codes']
    )
