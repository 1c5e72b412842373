"""Turn free text into the word lists the classifier consumes."""

from __future__ import annotations

import re

_WORD_RE = re.compile(r"\b[a-zA-Z][a-zA-Z'-]*[a-zA-Z]\b|\b[a-zA-Z]\b")


def tokenize(text: str, unique: bool = False) -> list[str]:
    """Extract lowercase word tokens from text.

    Args:
        text: Raw text.
        unique: Drop repeated tokens, keeping first occurrences.
    """
    tokens = [m.group().lower() for m in _WORD_RE.finditer(text)]
    if unique:
        return list(dict.fromkeys(tokens))
    return tokens
