"""
Test suite for the indexing core: text helpers, dictionaries,
spell correction, keyword extraction and content addressing

Run with: pytest doc_indexer/tests/ -v
"""

import hashlib

import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from doc_indexer.artifacts import write_artifact, read_artifact, StringTable
from doc_indexer.content_store import (
    digest, storage_key, digest_and_key, ContentAddressedStore, InMemoryDigestRegistry
)
from doc_indexer.errors import (
    ArtifactError, CorpusError, DuplicateDocumentError, StopWordsError
)
from doc_indexer.extractor import ExtractorConfig, KeywordExtractor, extract_keywords
from doc_indexer.frequency import (
    FrequencyDictionary, compile_frequency_dictionary, load_frequency_dictionary
)
from doc_indexer.lemmas import LemmaDictionary, compile_lemma_dictionary, load_lemma_dictionary
from doc_indexer.models import PosTag, ResolutionOutcome, KeywordRecord, LemmaEntry, FrequencyEntry
from doc_indexer.spelling import edits1, correct, correct_with_outcome, suggest
from doc_indexer.stopwords import StopWordSet, load_stopwords
from doc_indexer.text import tokenize, normalize_word, split_keywords


# ============================================================
# Text helpers
# ============================================================

class TestText:
    """Tests for tokenization and normalization"""

    def test_tokenize_splits_on_punctuation_and_digits(self):
        assert tokenize("Hello, world! 42 fois_deux") == ["Hello", "world", "fois", "deux"]

    def test_tokenize_splits_elisions(self):
        assert tokenize("l'arbre d’été") == ["l", "arbre", "d", "été"]

    def test_tokenize_empty(self):
        assert tokenize("") == []

    def test_normalize_composes_accents(self):
        decomposed = "e\u0301te\u0301"
        assert normalize_word(decomposed) == "été"
        assert normalize_word("  ÉTÉ ") == "été"

    def test_split_keywords(self):
        assert split_keywords("python, indexation  lemmes,") == ["python", "indexation", "lemmes"]
        assert split_keywords("") == []


# ============================================================
# Stop words
# ============================================================

class TestStopWords:
    """Tests for the stop-word filter"""

    def test_membership_is_normalized(self):
        stopwords = StopWordSet(["The", " Être "])
        assert stopwords.is_stop_word("THE")
        assert stopwords.is_stop_word("être")
        assert not stopwords.is_stop_word("cat")
        assert len(stopwords) == 2

    def test_load_ignores_blank_lines(self, stopwords_file):
        stopwords = load_stopwords(stopwords_file)
        assert len(stopwords) == 5
        assert "dans" in stopwords

    def test_missing_list_is_fatal(self, tmp_path):
        with pytest.raises(StopWordsError):
            load_stopwords(tmp_path / "missing.txt")


# ============================================================
# Artifacts
# ============================================================

class TestArtifacts:
    """Tests for the binary artifact container"""

    def test_reserved_column_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            write_artifact(tmp_path / "a.npz", "lemmas", {"kind": np.array([1])})

    def test_wrong_kind_rejected(self, tmp_path):
        path = write_artifact(tmp_path / "a.npz", "lemmas", StringTable.from_strings(["a"]).columns("words"))
        with pytest.raises(ArtifactError):
            read_artifact(path, "frequencies")

    def test_foreign_archive_rejected(self, tmp_path):
        path = tmp_path / "foreign.npz"
        np.savez(path, values=np.arange(3))
        with pytest.raises(ArtifactError):
            read_artifact(path, "lemmas")

    def test_garbage_file_rejected(self, tmp_path):
        path = tmp_path / "garbage.npz"
        path.write_bytes(b"this is not an archive")
        with pytest.raises(ArtifactError):
            read_artifact(path, "lemmas")

    def test_string_table_lookup(self):
        table = StringTable.from_strings(["apple", "banana", "cherry", "été"])
        assert len(table) == 4
        assert table.find("banana") == 1
        assert table.find("été") == 3
        assert table.find("zucchini") == -1
        assert table.find("aaa") == -1
        assert table[-1] == "été"
        assert list(table) == ["apple", "banana", "cherry", "été"]

    def test_empty_string_table(self):
        table = StringTable.from_strings([])
        assert len(table) == 0
        assert table.find("a") == -1
        assert list(table) == []

    def test_corrupt_offsets_rejected(self):
        with pytest.raises(ArtifactError):
            StringTable(np.frombuffer(b"abc", dtype=np.uint8), np.array([0, 5], dtype=np.uint64))

    def test_size_follows_total_text_length(self, tmp_path):
        words = [f"word{i:05d}" for i in range(1000)] + ["a" * 2000]
        dictionary = FrequencyDictionary.from_counts({word: 1 for word in words})
        path = dictionary.save(tmp_path / "dictionary.npz")

        text_bytes = sum(len(word.encode("utf-8")) for word in words)
        # text + offsets + counts, plus archive headers
        assert path.stat().st_size < text_bytes + 16 * (len(words) + 1) + 4096
        assert load_frequency_dictionary(path).frequency("a" * 2000) == 1


# ============================================================
# Lemma dictionary
# ============================================================

class TestLemmaDictionary:
    """Tests for lemma compilation and lookup"""

    def test_compile_counts(self, glaff_file, tmp_path):
        report = compile_lemma_dictionary(glaff_file, tmp_path / "lemmas.npz")
        assert report.records_read == 6
        assert report.records_skipped == 2
        assert report.entries_written == 3

    def test_compiled_lookup(self, glaff_file, tmp_path):
        compile_lemma_dictionary(glaff_file, tmp_path / "lemmas.npz")
        lemmas = load_lemma_dictionary(tmp_path / "lemmas.npz")

        entry = lemmas.lookup("cheval")
        assert entry.lemma == "cheval"
        assert entry.pos_tag == PosTag.NOUN
        assert lemmas.lookup("mangeait") == LemmaEntry("mangeait", "manger", PosTag.VERB)
        assert "CHEVAUX" in lemmas

    def test_last_row_wins_for_repeated_form(self, glaff_file, tmp_path):
        """A surface form listed twice keeps the lemma of its later row"""
        compile_lemma_dictionary(glaff_file, tmp_path / "lemmas.npz")
        lemmas = load_lemma_dictionary(tmp_path / "lemmas.npz")
        assert lemmas.lookup("chevaux") == LemmaEntry("chevaux", "chevau", PosTag.ADJECTIVE)

    def test_unknown_form(self, lemmas):
        assert lemmas.lookup("inconnu") is None
        assert lemmas.lemma("inconnu") == "inconnu"

    def test_no_usable_record(self, tmp_path):
        corpus = tmp_path / "bad.txt"
        corpus.write_text("one column\n|Ncms|\n", encoding="utf-8")
        with pytest.raises(CorpusError):
            compile_lemma_dictionary(corpus, tmp_path / "lemmas.npz")

    def test_missing_lexicon(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compile_lemma_dictionary(tmp_path / "missing.txt", tmp_path / "lemmas.npz")

    def test_wrong_artifact_kind(self, glaff_file, tmp_path):
        compile_lemma_dictionary(glaff_file, tmp_path / "lemmas.npz")
        with pytest.raises(ArtifactError):
            load_frequency_dictionary(tmp_path / "lemmas.npz")

    def test_from_entries_objects(self):
        lemmas = LemmaDictionary.from_entries([
            LemmaEntry("Mangeait", "manger", PosTag.VERB),
            LemmaEntry("mangeait", "autre"),
        ])
        assert len(lemmas) == 1
        assert lemmas.lookup("mangeait") == LemmaEntry("mangeait", "autre", PosTag.UNKNOWN)

    def test_pos_from_grace(self):
        assert PosTag.from_grace("Ncms--") == PosTag.NOUN
        assert PosTag.from_grace("Afpmp") == PosTag.ADJECTIVE
        assert PosTag.from_grace("") == PosTag.UNKNOWN
        assert PosTag.from_grace("Zz") == PosTag.UNKNOWN


# ============================================================
# Frequency dictionary
# ============================================================

class TestFrequencyDictionary:
    """Tests for frequency compilation and lookup"""

    def test_compile_and_load(self, corpus_dir, stopwords_file, tmp_path):
        report = compile_frequency_dictionary(
            corpus_dir, stopwords_file, tmp_path / "dictionary.npz", max_workers=2
        )
        assert report.files_read == 2
        assert report.records_read == 14
        assert report.records_skipped == 7
        assert report.entries_written == 5

        dictionary = load_frequency_dictionary(tmp_path / "dictionary.npz")
        assert dictionary.frequency("chat") == 3
        assert dictionary.frequency("CHAT") == 3
        assert dictionary.total == 7

    def test_stop_and_short_words_not_counted(self, corpus_dir, stopwords_file, tmp_path):
        compile_frequency_dictionary(corpus_dir, stopwords_file, tmp_path / "dictionary.npz")
        dictionary = load_frequency_dictionary(tmp_path / "dictionary.npz")
        for word in ("le", "un", "et", "dans", "les"):
            assert word not in dictionary

    def test_extension_filter(self, corpus_dir, stopwords_file, tmp_path):
        compile_frequency_dictionary(
            corpus_dir, stopwords_file, tmp_path / "dictionary.npz", extensions=None
        )
        dictionary = load_frequency_dictionary(tmp_path / "dictionary.npz")
        assert dictionary.frequency("chat") == 7

    def test_empty_corpus(self, tmp_path, stopwords_file):
        corpus = tmp_path / "empty"
        corpus.mkdir()
        (corpus / "only_stop.txt").write_text("le un et", encoding="utf-8")
        with pytest.raises(CorpusError):
            compile_frequency_dictionary(corpus, stopwords_file, tmp_path / "dictionary.npz")

    def test_not_a_directory(self, tmp_path, stopwords_file):
        with pytest.raises(NotADirectoryError):
            compile_frequency_dictionary(stopwords_file, stopwords_file, tmp_path / "d.npz")

    def test_missing_stop_words(self, corpus_dir, tmp_path):
        with pytest.raises(StopWordsError):
            compile_frequency_dictionary(corpus_dir, tmp_path / "none.txt", tmp_path / "d.npz")

    def test_known_filters_candidates(self, dictionary):
        assert dictionary.known(["chat", "chien", "zzz"]) == {"chat": 20, "chien": 15}
        assert dictionary.known([]) == {}

    def test_from_counts_drops_non_positive(self):
        dictionary = FrequencyDictionary.from_counts({"chat": 2, "rien": 0, "Chat": 1})
        assert len(dictionary) == 1
        assert dictionary.frequency("chat") == 3
        assert dictionary.probability("chat") == 1.0

    def test_entries_in_word_order(self):
        dictionary = FrequencyDictionary.from_counts({"dog": 4, "cat": 2})
        assert list(dictionary.entries()) == [FrequencyEntry("cat", 2), FrequencyEntry("dog", 4)]
        assert sum(entry.count for entry in dictionary.entries()) == dictionary.total


# ============================================================
# Spell corrector
# ============================================================

class TestSpelling:
    """Tests for Norvig-style correction"""

    def test_edits1(self):
        variants = edits1("ab")
        assert "ba" in variants       # transposition
        assert "a" in variants        # deletion
        assert "abc" in variants      # insertion at the end
        assert "éb" in variants       # accented substitution
        assert "ab" not in variants

    def test_known_word_unchanged(self, dictionary):
        assert correct_with_outcome("cat", dictionary) == ("cat", ResolutionOutcome.KNOWN)

    def test_transposition(self, dictionary):
        assert correct_with_outcome("cta", dictionary) == ("cat", ResolutionOutcome.CORRECTED)

    def test_most_frequent_candidate_wins(self, dictionary):
        # "sat" is one substitution away from "cat" only
        assert correct("sat", dictionary) == "cat"

    def test_tie_goes_to_smallest_word(self):
        dictionary = FrequencyDictionary.from_counts({"cat": 5, "bat": 5})
        assert correct("zat", dictionary) == "bat"

    def test_edit_distance_two(self, dictionary):
        assert correct("chvl", dictionary) == "cheval"

    def test_nothing_known(self, dictionary):
        assert correct_with_outcome("zzzz", dictionary) == ("zzzz", ResolutionOutcome.PASSED_THROUGH)

    def test_without_dictionary(self):
        assert correct_with_outcome("Cta", None) == ("cta", ResolutionOutcome.PASSED_THROUGH)

    def test_case_insensitive(self, dictionary):
        assert correct("CTA", dictionary) == "cat"

    def test_suggest_lemmatizes_corrections(self, dictionary, lemmas):
        assert suggest("chevaus cta", dictionary, lemmas) == ["cheval", "cat"]


# ============================================================
# Keyword extractor
# ============================================================

class TestKeywordExtractor:
    """Tests for weighted keyword extraction"""

    def test_typo_and_stop_word(self, stopwords, dictionary):
        keywords = extract_keywords("The cta dog", None, None, stopwords, None, dictionary)
        assert keywords == {"cat": 1, "dog": 1}

    def test_corrections_merge_on_one_key(self, stopwords, dictionary):
        """The word sat is one substitution from cat, so it counts as cat instead of passing through"""
        keywords = extract_keywords("The cta sat", None, None, stopwords, None, dictionary)
        assert keywords == {"cat": 2}

    def test_title_weight(self, stopwords):
        keywords = extract_keywords("dog dog", "dog", None, stopwords)
        assert keywords == {"dog": 4}

    def test_weight_is_multiplicative(self, stopwords):
        config = ExtractorConfig(title_weight=3)
        keywords = extract_keywords("", "dog dog", None, stopwords, config=config)
        assert keywords == {"dog": 6}

    def test_description_weight(self, stopwords):
        config = ExtractorConfig(description_weight=5)
        keywords = extract_keywords("cat", None, "cat", stopwords, config=config)
        assert keywords == {"cat": 6}

    def test_short_words_dropped(self, stopwords):
        keywords = extract_keywords("an ox is big", None, None, stopwords)
        assert keywords == {"big": 1}

    def test_stop_words_dropped(self, stopwords):
        keywords = extract_keywords("the dog AND the cat", None, None, stopwords)
        assert keywords == {"dog": 1, "cat": 1}

    def test_lemmatized(self, stopwords, lemmas):
        keywords = extract_keywords("chevaux cheval", None, None, stopwords, lemmas)
        assert keywords == {"cheval": 2}

    def test_correction_is_lemmatized(self, stopwords, lemmas, dictionary):
        extractor = KeywordExtractor(stopwords, lemmas, dictionary)
        assert extractor.resolve("chevaus") == ("cheval", ResolutionOutcome.CORRECTED)

    def test_lemma_that_is_a_stop_word(self, stopwords, lemmas):
        assert extract_keywords("étaient", None, None, stopwords, lemmas) == {}

    def test_empty_document(self, stopwords, dictionary):
        assert extract_keywords("", None, None, stopwords, None, dictionary) == {}

    def test_idempotent(self, stopwords, lemmas, dictionary):
        extractor = KeywordExtractor(stopwords, lemmas, dictionary)
        text = "Les chevaux sauvages et le cta chien"
        first = extractor.extract(text, "Chevaux").keywords
        second = extractor.extract(text, "Chevaux").keywords
        assert first == second

    def test_chunked_parallel_matches_sequential(self, stopwords, lemmas, dictionary):
        text = " ".join(["chevaux cta dog sauvages chien"] * 40)
        sequential = KeywordExtractor(
            stopwords, lemmas, dictionary, ExtractorConfig(max_workers=1)
        ).extract(text, "Chevaux")
        parallel = KeywordExtractor(
            stopwords, lemmas, dictionary, ExtractorConfig(max_workers=4, chunk_size=7)
        ).extract(text, "Chevaux")

        assert parallel.keywords == sequential.keywords
        assert parallel.keywords["cheval"] == 40 + 2
        assert parallel.tokens_seen == sequential.tokens_seen == 201

    def test_outcomes(self, stopwords, dictionary):
        result = KeywordExtractor(stopwords, None, dictionary).extract("The cta dog")
        assert result.outcomes[ResolutionOutcome.CORRECTED] == 1
        assert result.outcomes[ResolutionOutcome.KNOWN] == 1
        assert result.tokens_dropped == 1

    def test_extract_many(self, stopwords, dictionary):
        extractor = KeywordExtractor(stopwords, None, dictionary)
        results = extractor.extract_many([("cta", None, None), ("dog", "dog", None)], max_workers=2)
        assert [r.keywords for r in results] == [{"cat": 1}, {"dog": 3}]

    def test_to_records(self, stopwords):
        result = KeywordExtractor(stopwords).extract("dog dog cat", "cat")
        records = result.to_records("doc-1")
        assert records == [
            KeywordRecord("cat", "doc-1", 3, 2),
            KeywordRecord("dog", "doc-1", 2, 1),
        ]

    def test_resolutions_shared_across_chunks_and_documents(self, stopwords, dictionary):
        extractor = KeywordExtractor(
            stopwords, None, dictionary, ExtractorConfig(max_workers=1, chunk_size=1)
        )
        assert extractor.extract("cta cta cta").keywords == {"cat": 3}
        assert extractor.extract("cta").keywords == {"cat": 1}

        info = extractor.cache_info()
        assert info.misses == 1
        assert info.hits == 3

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            ExtractorConfig(title_weight=0)
        with pytest.raises(ValueError):
            ExtractorConfig(chunk_size=0)


# ============================================================
# Content addressing
# ============================================================

class TestContentStore:
    """Tests for digests, storage keys and duplicate detection"""

    def test_digest_is_sha256(self):
        assert digest(b"abc") == hashlib.sha256(b"abc").digest()
        assert len(digest(b"")) == 32

    def test_storage_key_format(self):
        sha256 = digest(b"abc")
        assert storage_key(sha256, "report.pdf") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad-report.pdf"
        )

    def test_storage_key_encodes_file_name(self):
        key = storage_key(digest(b"abc"), "mon rapport/été.pdf")
        assert key.endswith("-mon%20rapport%2F%C3%A9t%C3%A9.pdf")

    def test_storage_key_keeps_names_apart(self):
        sha256 = digest(b"abc")
        assert storage_key(sha256, "a b") != storage_key(sha256, "a%20b")
        assert storage_key(sha256, "a%20b").endswith("-a%2520b")

    def test_storage_key_rejects_short_digest(self):
        with pytest.raises(ValueError):
            storage_key(b"short", "a.txt")

    def test_same_bytes_different_names(self):
        first = digest_and_key(b"same content", "a.txt")
        second = digest_and_key(b"same content", "b.txt")
        assert first.sha256 == second.sha256
        assert first.storage_key != second.storage_key

    def test_byte_change_alters_digest(self):
        assert digest(b"content") != digest(b"content.")

    def test_admit_detects_duplicates_by_digest(self):
        registry = InMemoryDigestRegistry()
        store = ContentAddressedStore(registry)
        admitted = store.admit(b"payload", "first.txt")
        assert store.is_known(admitted)
        assert len(registry) == 1

        with pytest.raises(DuplicateDocumentError) as excinfo:
            store.admit(b"payload", "renamed.txt")
        assert excinfo.value.document_digest.sha256 == admitted.sha256
        assert admitted.hexdigest in str(excinfo.value)
