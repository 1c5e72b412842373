"""Shared test fixtures for prob-doc-classifier tests."""

from __future__ import annotations

import pytest

from prob_classifier.classifier import Classifier, new_classifier
from prob_classifier.knowledge import InMemoryKnowledgeBase, reference_knowledge_base


@pytest.fixture
def kb() -> InMemoryKnowledgeBase:
    """The Spam/Ham reference knowledge base (103 spam, 57 ham)."""
    return reference_knowledge_base()


@pytest.fixture
def bayes_classifier(kb: InMemoryKnowledgeBase) -> Classifier:
    return new_classifier(kb, "bayes")


@pytest.fixture
def fisher_classifier(kb: InMemoryKnowledgeBase) -> Classifier:
    return new_classifier(kb, "fisher")


@pytest.fixture
def news_kb() -> InMemoryKnowledgeBase:
    """A three-category table for tests that need more than two labels."""
    return InMemoryKnowledgeBase(
        categories=["sports", "politics", "tech"],
        message_counts=[40, 30, 30],
        word_counts={
            "goal": [30, 1, 0],
            "match": [25, 2, 3],
            "election": [0, 25, 1],
            "senate": [1, 20, 0],
            "python": [0, 0, 18],
            "server": [1, 2, 22],
            "today": [10, 9, 8],
        },
    )


@pytest.fixture
def mixed_words() -> list[str]:
    """Reference corpus entry mixing spam, ham, and unknown words."""
    return ["free", "monad", "asdf", "bayes", "quick", "jump", "test"]
