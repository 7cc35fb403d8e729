"""
Whitespace tokenizer shared by every vectorizer at fit and query time.
"""

import re
from typing import List

_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """
    Lowercase `text` and split it on runs of whitespace.

    No punctuation stripping, stemming or stop-word removal is applied, so
    "Error:" and "error" are different tokens. Empty and all-whitespace
    input yields an empty list.

    Terms are stored in a plain dict, which has no reserved keys; a token
    such as "constructor" needs no substitution and is kept as-is.
    """
    return [token for token in _WHITESPACE_RE.split(text.lower()) if token]
