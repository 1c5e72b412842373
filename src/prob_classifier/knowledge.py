"""Word/category count storage consumed by the classifier.

The engine only depends on the :class:`KnowledgeBase` protocol. The package
ships :class:`InMemoryKnowledgeBase`, a read-only table of counts that can be
built from a dict or a JSON file, and :func:`reference_knowledge_base` with
the small Spam/Ham corpus used throughout the tests and the CLI demo.

JSON layout::

    {
        "categories": ["Spam", "Ham"],
        "message_counts": [103, 57],
        "word_counts": {"free": [57, 6], "monad": [0, 22]}
    }
"""

from __future__ import annotations

import json
from collections.abc import Hashable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Protocol, runtime_checkable


@runtime_checkable
class KnowledgeBase(Protocol):
    """Read-only source of message and word counts."""

    def categories(self) -> Sequence[Hashable]:
        """Ordered category labels."""
        ...

    def known_words(self) -> Sequence[str]:
        """Words with at least one entry in the table."""
        ...

    def message_count(self, category: Hashable) -> int:
        """Messages seen for *category* (0 for unknown categories)."""
        ...

    def word_count(self, word: str, category: Hashable) -> int:
        """Occurrences of *word* under *category* (0 when unknown)."""
        ...


class InMemoryKnowledgeBase:
    """Immutable in-memory count table.

    Args:
        categories: Ordered, distinct category labels.
        message_counts: Message count per category, aligned with *categories*.
        word_counts: ``{word: [count per category]}``, each list aligned with
            *categories*.

    Raises:
        ValueError: On duplicate categories, misaligned rows, or negative counts.
    """

    def __init__(
        self,
        categories: Sequence[Hashable],
        message_counts: Sequence[int],
        word_counts: Mapping[str, Sequence[int]] | None = None,
    ) -> None:
        cats = tuple(categories)
        if len(set(cats)) != len(cats):
            raise ValueError(f"Categories must be distinct, got {list(cats)}")
        if len(message_counts) != len(cats):
            raise ValueError(
                f"message_counts ({len(message_counts)}) and categories ({len(cats)}) "
                "must have same length"
            )
        _check_counts("message_counts", message_counts)

        table: dict[str, tuple[int, ...]] = {}
        for word, row in (word_counts or {}).items():
            if len(row) != len(cats):
                raise ValueError(
                    f"Word '{word}' has {len(row)} counts, expected {len(cats)}"
                )
            _check_counts(f"word_counts['{word}']", row)
            table[word] = tuple(int(c) for c in row)

        self._categories = cats
        self._index = {c: i for i, c in enumerate(cats)}
        self._message_counts = tuple(int(c) for c in message_counts)
        self._word_counts = MappingProxyType(table)

    def categories(self) -> tuple[Hashable, ...]:
        return self._categories

    def known_words(self) -> tuple[str, ...]:
        return tuple(self._word_counts)

    def message_count(self, category: Hashable) -> int:
        idx = self._index.get(category)
        if idx is None:
            return 0
        return self._message_counts[idx]

    def word_count(self, word: str, category: Hashable) -> int:
        idx = self._index.get(category)
        row = self._word_counts.get(word)
        if idx is None or row is None:
            return 0
        return row[idx]

    @property
    def total_messages(self) -> int:
        return sum(self._message_counts)

    def __repr__(self) -> str:
        return (
            f"InMemoryKnowledgeBase(categories={list(self._categories)!r}, "
            f"words={len(self._word_counts)})"
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "categories": list(self._categories),
            "message_counts": list(self._message_counts),
            "word_counts": {w: list(row) for w, row in self._word_counts.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "InMemoryKnowledgeBase":
        """Build a knowledge base from the JSON layout described above.

        Raises:
            ValueError: If a required key is missing or malformed.
        """
        missing = [k for k in ("categories", "message_counts") if k not in data]
        if missing:
            raise ValueError(f"Knowledge base is missing keys: {', '.join(missing)}")
        return cls(
            categories=list(data["categories"]),
            message_counts=list(data["message_counts"]),
            word_counts=dict(data.get("word_counts", {})),
        )

    @classmethod
    def load(cls, path: str | Path) -> "InMemoryKnowledgeBase":
        """Load a knowledge base from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or has a bad layout.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Cannot parse {path} as JSON: {exc}") from exc
        return cls.from_dict(data)


def _check_counts(name: str, counts: Sequence[int]) -> None:
    if any(c < 0 for c in counts):
        raise ValueError(f"{name} must be non-negative, got {list(counts)}")


# ---------------------------------------------------------------------------
# Reference corpus
# ---------------------------------------------------------------------------

SPAM = "Spam"
HAM = "Ham"

_REFERENCE_WORD_COUNTS: dict[str, list[int]] = {
    "the": [1, 2],
    "quick": [1, 1],
    "brown": [0, 1],
    "fox": [0, 1],
    "jumps": [0, 1],
    "over": [0, 1],
    "lazy": [0, 1],
    "dog": [0, 1],
    "make": [1, 0],
    "money": [1, 0],
    "in": [1, 0],
    "online": [1, 0],
    "casino": [1, 0],
    "free": [57, 6],
    "bayes": [1, 10],
    "monad": [0, 22],
    "hello": [30, 32],
    "asdf": [40, 2],
}


def reference_knowledge_base() -> InMemoryKnowledgeBase:
    """The Spam/Ham reference table: 103 spam and 57 ham messages."""
    return InMemoryKnowledgeBase(
        categories=[SPAM, HAM],
        message_counts=[103, 57],
        word_counts=_REFERENCE_WORD_COUNTS,
    )
