"""
Exception hierarchy shared by the data, features and engine modules.
"""


class ErrorTriageError(Exception):
    """Base class for all errors raised by error_triage."""


class CorpusValidationError(ErrorTriageError):
    """A corpus line is not valid JSON or does not match the record schema."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"Invalid record on line {line_number}: {message}")


class VectorizerNotFittedError(ErrorTriageError, ValueError):
    """Raised when a vectorizer is queried before `fit` was called."""

    def __init__(self, message: str = "Vectorizer must be fitted before transformation"):
        super().__init__(message)


class UnknownCategoryError(ErrorTriageError, KeyError):
    """A record's category is not part of the category set."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(category)

    def __str__(self):
        return f"Unknown category: '{self.category}'"


class RaggedFeaturesError(ErrorTriageError):
    """Feature rows have different widths and cannot form a matrix."""


class ClassifierNotReadyError(ErrorTriageError):
    """The classifier is missing its model, vectorizer or categories."""
