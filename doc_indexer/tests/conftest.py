"""Shared fixtures: small in-memory dictionaries and on-disk corpora"""

import pytest

from doc_indexer.frequency import FrequencyDictionary
from doc_indexer.lemmas import LemmaDictionary
from doc_indexer.stopwords import StopWordSet


@pytest.fixture
def stopwords():
    """A few English and French stop words"""
    return StopWordSet(["the", "and", "les", "des", "une", "est", "dans", "être"])


@pytest.fixture
def dictionary():
    """Frequency dictionary used as the spelling model"""
    return FrequencyDictionary.from_counts({
        "cat": 50,
        "dog": 30,
        "cheval": 40,
        "chevaux": 25,
        "sauvage": 10,
        "chat": 20,
        "chien": 15,
    })


@pytest.fixture
def lemmas():
    """Lemma dictionary with a handful of French forms"""
    return LemmaDictionary.from_entries({
        "chevaux": "cheval",
        "sauvages": "sauvage",
        "chats": "chat",
        "chiens": "chien",
        "étaient": "être",
    })


@pytest.fixture
def glaff_file(tmp_path):
    """Pipe-delimited lexicon with two malformed rows and one repeated form"""
    path = tmp_path / "glaff.txt"
    path.write_text(
        "chevaux|Ncmp|cheval|ʃəvo|S@vo|12.5\n"
        "cheval|Ncms|cheval|ʃəval|S@val|30.1\n"
        "mangeait|Vmii3s-|manger|mɑ̃ʒɛ|m@ZE|4.2\n"
        "badline\n"
        "|Ncms|vide\n"
        "chevaux|Afpmp|chevau\n",
        encoding="utf-8"
    )
    return path


@pytest.fixture
def stopwords_file(tmp_path):
    path = tmp_path / "stopwords.txt"
    path.write_text("le\nun\net\ndans\n\nles\n", encoding="utf-8")
    return path


@pytest.fixture
def corpus_dir(tmp_path):
    """Two corpus files and one file with an ignored extension"""
    corpus = tmp_path / "corpus"
    (corpus / "sub").mkdir(parents=True)
    (corpus / "a.txt").write_text("Le chat dort. Le chat mange dans les bois.", encoding="utf-8")
    (corpus / "sub" / "b.txt").write_text("Un chat et un chien.", encoding="utf-8")
    (corpus / "notes.md").write_text("chat chat chat chat", encoding="utf-8")
    return corpus
