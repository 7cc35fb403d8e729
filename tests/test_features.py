"""Tests for tokenization, vocabulary fitting and vectorization.

Covers the smoothed IDF formula, first-seen index assignment, tf
normalization, the unfitted-vectorizer error and the persisted form.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from error_triage.exceptions import VectorizerNotFittedError
from error_triage.features import (
    Document,
    SklearnTfidfVectorizer,
    TfidfVectorizer,
    Vectorizer,
    Vocabulary,
    build_vocabulary,
    create_vectorizer,
    smoothed_idf,
    tokenize,
)


def docs(*texts: str) -> list[Document]:
    return [Document(i, text) for i, text in enumerate(texts)]


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class TestTokenize:

    def test_lowercases_and_splits_on_whitespace(self):
        assert tokenize("Null  Pointer\tin\nRender") == ["null", "pointer", "in", "render"]

    def test_keeps_punctuation(self):
        assert tokenize("TypeError: x.y()") == ["typeerror:", "x.y()"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    def test_blank_input_gives_no_tokens(self, text):
        assert tokenize(text) == []

    def test_leading_and_trailing_whitespace_dropped(self):
        assert tokenize("  a b  ") == ["a", "b"]

    def test_constructor_is_an_ordinary_token(self):
        assert tokenize("Constructor failed") == ["constructor", "failed"]


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

class TestBuildVocabulary:

    def test_idf_formula(self):
        vocabulary = build_vocabulary(docs("error here", "error there", "nothing", "else"))
        assert vocabulary["error"].idf == pytest.approx(math.log(4 / 3) + 1)
        assert vocabulary["error"].idf == pytest.approx(1.2877, abs=1e-4)

    def test_term_in_one_document(self):
        vocabulary = build_vocabulary(docs("a b", "a"))
        assert vocabulary["b"].idf == pytest.approx(smoothed_idf(2, 1))
        assert vocabulary["b"].idf == pytest.approx(1.0)

    def test_multiplicity_within_document_counts_once(self):
        vocabulary = build_vocabulary(docs("x x x", "y"))
        assert vocabulary["x"].idf == pytest.approx(math.log(2 / 2) + 1)

    def test_first_seen_index_order(self):
        vocabulary = build_vocabulary(docs("B a b", "c a"))
        assert vocabulary.terms == ("b", "a", "c")
        assert [vocabulary[t].index for t in ("b", "a", "c")] == [0, 1, 2]

    def test_indices_are_dense(self):
        vocabulary = build_vocabulary(docs("one two three", "two four", "five one six"))
        indices = sorted(vocabulary[term].index for term in vocabulary)
        assert indices == list(range(len(vocabulary)))

    def test_term_set_is_exactly_the_tokens(self):
        vocabulary = build_vocabulary(docs("Alpha beta", "BETA gamma:"))
        assert set(vocabulary) == {"alpha", "beta", "gamma:"}

    def test_deterministic(self):
        corpus = docs("timeout in fetch", "null in render", "fetch timeout again")
        assert build_vocabulary(corpus) == build_vocabulary(corpus)
        assert build_vocabulary(corpus).to_list() == build_vocabulary(corpus).to_list()

    def test_empty_corpus(self):
        vocabulary = build_vocabulary([])
        assert len(vocabulary) == 0

    def test_constructor_term(self):
        vocabulary = build_vocabulary(docs("constructor error"))
        assert "constructor" in vocabulary


class TestVocabulary:

    def test_from_list_sorts_by_index(self):
        vocabulary = Vocabulary.from_list([
            {"term": "b", "index": 1, "idf": 1.5},
            {"term": "a", "index": 0, "idf": 2.0},
        ])
        assert vocabulary.terms == ("a", "b")
        assert vocabulary["b"].idf == 1.5

    def test_from_list_rejects_gaps(self):
        with pytest.raises(ValueError, match="dense"):
            Vocabulary.from_list([{"term": "a", "index": 1, "idf": 1.0}])

    def test_rejects_duplicate_terms(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Vocabulary(terms=("a", "a"), idf=(1.0, 1.0))

    def test_rejects_length_mismatch(self):
        with pytest.raises(ValueError):
            Vocabulary(terms=("a",), idf=())

    def test_is_frozen(self):
        vocabulary = Vocabulary(terms=("a",), idf=(1.0,))
        with pytest.raises(AttributeError):
            vocabulary.terms = ("b",)


# ---------------------------------------------------------------------------
# Vectorizer
# ---------------------------------------------------------------------------

def vectorizer_with(entries: list[tuple[str, float]]) -> Vectorizer:
    return Vectorizer.from_dict({
        "type": "tfidf",
        "vocabulary": [
            {"term": term, "index": index, "idf": idf}
            for index, (term, idf) in enumerate(entries)
        ],
    })


class TestTfidfVectorizer:

    def test_tf_normalization(self):
        vectorizer = vectorizer_with([("a", 2.0), ("b", 1.0)])
        assert vectorizer.get("a a b") == pytest.approx([2.0 * 2 / 3, 1.0 / 3])
        assert vectorizer.get("a a b") == pytest.approx([1.3333333, 0.3333333])

    def test_unknown_terms_ignored_but_counted_in_total(self):
        vectorizer = vectorizer_with([("a", 2.0), ("b", 1.0)])
        assert vectorizer.get("a zzz") == pytest.approx([1.0, 0.0])

    def test_unseen_text_gives_zero_vector(self):
        vectorizer = TfidfVectorizer().fit(docs("error in fetch", "null in render"))
        assert vectorizer.get("zzz_not_in_corpus") == [0.0] * len(vectorizer.vocabulary)

    def test_empty_text_gives_zero_vector(self):
        vectorizer = TfidfVectorizer().fit(docs("error in fetch"))
        assert vectorizer.get("") == [0.0, 0.0, 0.0]
        assert vectorizer.get("  \n") == [0.0, 0.0, 0.0]

    def test_query_is_lowercased(self):
        vectorizer = TfidfVectorizer().fit(docs("timeout", "other"))
        assert vectorizer.get("TIMEOUT") == vectorizer.get("timeout")

    def test_length_matches_vocabulary_after_refit(self):
        vectorizer = TfidfVectorizer().fit(docs("a b"))
        assert len(vectorizer.get("a")) == 2

        vectorizer.fit(docs("a b c d", "e"))
        assert len(vectorizer.get("a")) == 5
        assert vectorizer.vocabulary.terms == ("a", "b", "c", "d", "e")

    def test_unfitted_get_raises(self):
        vectorizer = TfidfVectorizer()
        assert not vectorizer.is_fitted
        with pytest.raises(VectorizerNotFittedError):
            vectorizer.get("anything")

    def test_unfitted_error_is_value_error(self):
        with pytest.raises(ValueError, match="fitted"):
            TfidfVectorizer().transform(["x"])

    def test_empty_corpus_gives_empty_vectors(self):
        vectorizer = TfidfVectorizer().fit([])
        assert vectorizer.is_fitted
        assert vectorizer.get("anything") == []

    def test_transform_shape(self):
        vectorizer = TfidfVectorizer().fit(docs("a b", "b c"))
        matrix = vectorizer.transform(["a", "c c", ""])
        assert isinstance(matrix, np.ndarray)
        assert matrix.shape == (3, 3)
        assert not matrix[2].any()

    def test_transform_no_texts(self):
        vectorizer = TfidfVectorizer().fit(docs("a b"))
        assert vectorizer.transform([]).shape == (0, 2)

    def test_fit_transform_equals_fit_then_transform(self):
        corpus = docs("timeout in fetch", "null in render", "fetch timeout")
        combined = TfidfVectorizer().fit_transform(corpus)
        separate = TfidfVectorizer().fit(corpus).transform(d.text for d in corpus)
        np.testing.assert_allclose(combined, separate)

    def test_persisted_form_restores_vectors(self):
        corpus = docs("timeout in fetch", "null in render", "constructor failed")
        original = TfidfVectorizer().fit(corpus)

        data = original.to_dict()
        assert data["type"] == "tfidf"
        assert [entry["index"] for entry in data["vocabulary"]] == list(range(len(original.vocabulary)))

        restored = Vectorizer.from_dict(data)
        assert isinstance(restored, TfidfVectorizer)
        for text in ("timeout fetch fetch", "constructor", "unknown words"):
            assert restored.get(text) == original.get(text)

    def test_unfitted_to_dict_raises(self):
        with pytest.raises(VectorizerNotFittedError):
            TfidfVectorizer().to_dict()


class TestSklearnTfidfVectorizer:

    def test_alphabetical_order(self):
        vectorizer = SklearnTfidfVectorizer().fit(docs("zeta alpha", "mid alpha"))
        assert vectorizer.vocabulary.terms == ("alpha", "mid", "zeta")

    def test_sklearn_smoothing(self):
        vectorizer = SklearnTfidfVectorizer().fit(docs("a b", "a"))
        assert vectorizer.vocabulary["a"].idf == pytest.approx(1.0)
        assert vectorizer.vocabulary["b"].idf == pytest.approx(math.log(3 / 2) + 1)

    def test_keeps_punctuated_tokens(self):
        vectorizer = SklearnTfidfVectorizer().fit(docs("TypeError: x", "a"))
        assert "typeerror:" in vectorizer.vocabulary
        assert "x" in vectorizer.vocabulary

    def test_tf_normalization_matches_default_variant(self):
        vectorizer = SklearnTfidfVectorizer().fit(docs("a b", "a"))
        a = vectorizer.vocabulary["a"]
        b = vectorizer.vocabulary["b"]
        vector = vectorizer.get("a a b")
        assert vector[a.index] == pytest.approx(a.idf * 2 / 3)
        assert vector[b.index] == pytest.approx(b.idf / 3)

    def test_unfitted_get_raises(self):
        with pytest.raises(VectorizerNotFittedError):
            SklearnTfidfVectorizer().get("x")

    def test_blank_corpus(self):
        vectorizer = SklearnTfidfVectorizer().fit(docs("", "  "))
        assert vectorizer.get("x") == []

    def test_round_trip_keeps_type(self):
        original = SklearnTfidfVectorizer().fit(docs("b a", "c"))
        restored = Vectorizer.from_dict(original.to_dict())
        assert isinstance(restored, SklearnTfidfVectorizer)
        assert restored.get("a c") == original.get("a c")

    def test_min_df_prunes_rare_terms(self):
        vectorizer = SklearnTfidfVectorizer(min_df=2).fit(docs("a b", "a c", "a b d"))
        assert vectorizer.vocabulary.terms == ("a", "b")

    def test_stop_words_removed(self):
        vectorizer = SklearnTfidfVectorizer(stop_words=["the"]).fit(docs("the disk", "the net"))
        assert "the" not in vectorizer.vocabulary
        assert vectorizer.vocabulary.terms == ("disk", "net")

    def test_smooth_idf_off(self):
        vectorizer = SklearnTfidfVectorizer(smooth_idf=False).fit(docs("a b", "a"))
        assert vectorizer.vocabulary["b"].idf == pytest.approx(math.log(2) + 1)

    def test_params_survive_round_trip(self):
        original = SklearnTfidfVectorizer(min_df=2).fit(docs("a b", "a c"))
        restored = Vectorizer.from_dict(original.to_dict())
        assert restored.config["min_df"] == 2
        assert restored.get("a b") == original.get("a b")

    def test_unsupported_param(self):
        with pytest.raises(ValueError, match="ngram_range"):
            SklearnTfidfVectorizer(ngram_range=(1, 2))

    def test_pruning_every_term_is_an_error(self):
        with pytest.raises(ValueError):
            SklearnTfidfVectorizer(min_df=5).fit(docs("a b", "c d"))


def test_default_vectorizer_takes_no_params():
    with pytest.raises(ValueError, match="no parameters"):
        create_vectorizer("tfidf", min_df=2)


def test_create_vectorizer_unknown_type():
    with pytest.raises(ValueError, match="Unknown vectorizer type"):
        create_vectorizer("word2vec")
