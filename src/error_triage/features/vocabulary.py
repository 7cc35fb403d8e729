"""
Vocabulary construction: document frequencies and smoothed IDF weights.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Tuple, Union

from .tokenizer import tokenize


class Document(NamedTuple):
    id: Union[int, float]
    text: str


class TermEntry(NamedTuple):
    index: int
    idf: float


def smoothed_idf(document_count: int, document_frequency: int) -> float:
    """ln(N / (1 + df)) + 1"""
    return math.log(document_count / (1 + document_frequency)) + 1


@dataclass(frozen=True)
class Vocabulary:
    """
    Immutable term -> (index, idf) mapping produced by a single fit.

    `terms` fixes the feature layout: a term's index is its position in
    the tuple. Instances are never mutated after construction and can be
    shared between readers.
    """

    terms: Tuple[str, ...] = ()
    idf: Tuple[float, ...] = ()
    _lookup: Mapping[str, TermEntry] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if len(self.terms) != len(self.idf):
            raise ValueError(
                f"Vocabulary has {len(self.terms)} terms but {len(self.idf)} idf values"
            )
        lookup = {}
        for index, (term, weight) in enumerate(zip(self.terms, self.idf)):
            if term in lookup:
                raise ValueError(f"Duplicate vocabulary term: '{term}'")
            lookup[term] = TermEntry(index, weight)
        object.__setattr__(self, "_lookup", lookup)

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: str) -> bool:
        return term in self._lookup

    def __iter__(self) -> Iterator[str]:
        return iter(self.terms)

    def get(self, term: str):
        return self._lookup.get(term)

    def __getitem__(self, term: str) -> TermEntry:
        return self._lookup[term]

    def to_list(self) -> List[Dict[str, Any]]:
        """Serializable form, in index order."""
        return [
            {"term": term, "index": index, "idf": weight}
            for index, (term, weight) in enumerate(zip(self.terms, self.idf))
        ]

    @classmethod
    def from_list(cls, entries: Iterable[Mapping[str, Any]]) -> "Vocabulary":
        ordered = sorted(entries, key=lambda entry: entry["index"])
        for position, entry in enumerate(ordered):
            if entry["index"] != position:
                raise ValueError(
                    f"Vocabulary indices must be dense, found {entry['index']} at position {position}"
                )
        return cls(
            terms=tuple(entry["term"] for entry in ordered),
            idf=tuple(float(entry["idf"]) for entry in ordered),
        )


def count_document_frequencies(texts: Iterable[str]) -> Tuple[List[str], Dict[str, int], int]:
    """
    Count, for every token, the number of texts containing it at least once.

    Returns the terms in first-seen order, the df mapping and the number of
    texts consumed.
    """
    ordered_terms: List[str] = []
    frequencies: Dict[str, int] = {}
    document_count = 0

    for text in texts:
        document_count += 1
        # dict.fromkeys keeps first-seen order while collapsing repeats
        for term in dict.fromkeys(tokenize(text)):
            if term not in frequencies:
                frequencies[term] = 0
                ordered_terms.append(term)
            frequencies[term] += 1

    return ordered_terms, frequencies, document_count


def build_vocabulary(documents: Iterable[Document]) -> Vocabulary:
    """Fit a vocabulary over `documents` in iteration order."""
    terms, frequencies, document_count = count_document_frequencies(
        doc.text for doc in documents
    )
    weights = tuple(smoothed_idf(document_count, frequencies[term]) for term in terms)
    return Vocabulary(terms=tuple(terms), idf=weights)
