"""
Features module - tokenization, vocabulary fitting, vectorization and
feature-row assembly.

For training workflows, use the orchestration module.
"""

from .tokenizer import tokenize
from .vocabulary import Document, TermEntry, Vocabulary, build_vocabulary, smoothed_idf
from .vectorizer import (
    Vectorizer,
    TfidfVectorizer,
    SklearnTfidfVectorizer,
    create_vectorizer
)
from .assembly import FeatureAssembler, FeatureSet

__all__ = [
    'tokenize',
    'Document',
    'TermEntry',
    'Vocabulary',
    'build_vocabulary',
    'smoothed_idf',
    'Vectorizer',
    'TfidfVectorizer',
    'SklearnTfidfVectorizer',
    'create_vectorizer',
    'FeatureAssembler',
    'FeatureSet'
]
