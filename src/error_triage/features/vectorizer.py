import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from error_triage.exceptions import VectorizerNotFittedError
from .tokenizer import tokenize
from .vocabulary import Document, Vocabulary, build_vocabulary

logger = logging.getLogger(__name__)


class Vectorizer(ABC):
    """
    Maps raw text to dense TF-IDF vectors over a fitted Vocabulary.

    A vectorizer owns a single Vocabulary. `fit` replaces it wholesale and
    must complete before any `get`; the instance does no locking, so a
    multi-threaded caller has to serialize `fit` against readers.
    """

    vectorizer_type = None

    def __init__(self, **kwargs):
        self._vocabulary: Optional[Vocabulary] = None
        self._config = kwargs

    @abstractmethod
    def fit(self, documents: Iterable[Document]) -> 'Vectorizer': pass

    def get(self, text: str) -> List[float]:
        """
        Vectorize one text. Length always equals the vocabulary size.

        Each known term gets (count / total tokens) * idf; unknown terms
        are ignored and empty text gives an all-zero vector.
        """
        vocabulary = self.vocabulary
        vector = [0.0] * len(vocabulary)

        tokens = tokenize(text)
        total = len(tokens)
        if total == 0:
            return vector

        for term, count in Counter(tokens).items():
            entry = vocabulary.get(term)
            if entry is not None:
                vector[entry.index] = (count / total) * entry.idf

        return vector

    def transform(self, texts: Iterable[str]) -> np.ndarray:
        """Stack `get` rows into a (len(texts), |vocabulary|) array."""
        width = len(self.vocabulary)
        rows = [self.get(text) for text in texts]
        if not rows:
            return np.zeros((0, width))
        return np.asarray(rows, dtype=float)

    def fit_transform(self, documents: List[Document]) -> np.ndarray:
        return self.fit(documents).transform(doc.text for doc in documents)

    @property
    def vocabulary(self) -> Vocabulary:
        if self._vocabulary is None:
            raise VectorizerNotFittedError()
        return self._vocabulary

    @property
    def is_fitted(self):
        return self._vocabulary is not None

    @property
    def config(self):
        return self._config.copy()

    def to_dict(self) -> Dict[str, Any]:
        """Persisted form: enough to rebuild `get` without re-fitting."""
        return {
            "type": self.vectorizer_type,
            "config": self.config,
            "vocabulary": self.vocabulary.to_list(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vectorizer':
        vectorizer = create_vectorizer(data["type"], **data.get("config", {}))
        vectorizer._vocabulary = Vocabulary.from_list(data["vocabulary"])
        return vectorizer

    def __repr__(self):
        name = self.__class__.__name__
        size = len(self._vocabulary) if self._vocabulary is not None else None
        return f"{name}(fitted={self.is_fitted}, vocabulary_size={size}, config={self._config})"


class TfidfVectorizer(Vectorizer):
    """
    TF-IDF vectorizer with first-seen term order and idf = ln(N/(1+df)) + 1.
    """

    vectorizer_type = 'tfidf'

    def __init__(self, **kwargs):
        if kwargs:
            raise ValueError(f"tfidf vectorizer takes no parameters, got {sorted(kwargs)}")
        super().__init__()

    def fit(self, documents: Iterable[Document]) -> 'TfidfVectorizer':
        self._vocabulary = build_vocabulary(documents)
        logger.debug("Fitted %s with %d terms", self.vectorizer_type, len(self._vocabulary))
        return self


# scikit-learn backed variant

from sklearn.feature_extraction.text import TfidfVectorizer as SklearnTfidf

class SklearnTfidfVectorizer(Vectorizer):
    """
    Variant that lets scikit-learn count document frequencies.

    Uses the same tokenizer and tf normalization as TfidfVectorizer, but
    terms are ordered alphabetically and idf follows scikit-learn's default
    smoothing, ln((1 + N) / (1 + df)) + 1.
    """

    vectorizer_type = 'sklearn'

    # scikit-learn options that change the vocabulary or the idf weights
    SUPPORTED_PARAMS = ('min_df', 'max_df', 'max_features', 'stop_words', 'smooth_idf')

    def __init__(self, **kwargs):
        """
        Configurable parameters:
            - min_df: Minimum document frequency for terms
            - max_df: Maximum document frequency for terms
            - max_features: Keep only the most frequent terms
            - stop_words: Stop words to remove
            - smooth_idf: Add one to document frequencies
        """
        unsupported = sorted(set(kwargs) - set(self.SUPPORTED_PARAMS))
        if unsupported:
            raise ValueError(f"Unsupported sklearn vectorizer parameters: {unsupported}")

        params = {
            'min_df': kwargs.get('min_df', 1),
            'max_df': kwargs.get('max_df', 1.0),
            'max_features': kwargs.get('max_features', None),
            'stop_words': kwargs.get('stop_words', None),
            'smooth_idf': kwargs.get('smooth_idf', True),
        }
        super().__init__(**params)

    def fit(self, documents: Iterable[Document]) -> 'SklearnTfidfVectorizer':
        texts = [doc.text for doc in documents]
        if not any(tokenize(text) for text in texts):
            # scikit-learn refuses to fit an empty vocabulary
            self._vocabulary = Vocabulary()
            return self

        estimator = SklearnTfidf(
            tokenizer=tokenize,
            lowercase=False,
            token_pattern=None,
            norm=None,
            **self._config,
        )
        estimator.fit(texts)

        self._vocabulary = Vocabulary(
            terms=tuple(estimator.get_feature_names_out().tolist()),
            idf=tuple(float(weight) for weight in estimator.idf_),
        )
        logger.debug("Fitted %s with %d terms", self.vectorizer_type, len(self._vocabulary))
        return self


"""
Vectorizers persist through `to_dict()` / `Vectorizer.from_dict()`; the
dict is plain JSON (type, config and the vocabulary in index order), so a
restored instance produces identical vectors without re-fitting.
"""

def create_vectorizer(vectorizer_type: str, **kwargs) -> Vectorizer:
    """Factory function to create vectorizer instances based on type."""
    if vectorizer_type == 'tfidf':
        return TfidfVectorizer(**kwargs)
    elif vectorizer_type == 'sklearn':
        return SklearnTfidfVectorizer(**kwargs)
    else:
        raise ValueError(f"Unknown vectorizer type: {vectorizer_type}")
