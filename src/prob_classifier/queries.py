"""Probability queries over a knowledge base.

With ``S`` the category and ``W`` a word::

    P(S)                  prior_over_categories
    P(W == word | S)      likelihood
    P(S | W == word)      posterior_given_word   = < P(W == word | S) * prior >
    P(S | W1, W2, ...)    posterior_given_words  (iterated single-word updates)

where ``< ... >`` denotes normalization. Folding over several words may
round differently depending on word order because every step normalizes;
the exact result does not depend on it.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from .distribution import Distribution, certainly, choose, from_counts, just
from .knowledge import KnowledgeBase


def prior_over_categories(kb: KnowledgeBase) -> Distribution:
    """P(S), proportional to the message count of each category."""
    categories = list(kb.categories())
    return from_counts(categories, [kb.message_count(c) for c in categories])


def likelihood(kb: KnowledgeBase, word: str, category: Hashable) -> Distribution[bool]:
    """P(W == word | S == category) as a ``True``/``False`` distribution.

    A category without messages carries no evidence for the word.
    """
    total = kb.message_count(category)
    p = kb.word_count(word, category) / total if total else 0.0
    return choose(p, True, False)


def posterior_given_word(
    kb: KnowledgeBase,
    word: str,
    prior: Distribution | None = None,
) -> Distribution:
    """P(S | W == word) by Bayes' rule, starting from *prior*.

    Raises:
        ZeroMass: If the word is impossible under every category of the prior.
    """
    if prior is None:
        prior = prior_over_categories(kb)
    return prior.dependent(
        lambda t: likelihood(kb, word, t).event_dependent(just(True), lambda _: certainly(t))
    ).normalize()


def posterior_given_words(
    kb: KnowledgeBase,
    words: Iterable[str],
    prior: Distribution | None = None,
) -> Distribution:
    """P(S | W1, W2, ...), folding :func:`posterior_given_word` over *words*."""
    belief = prior if prior is not None else prior_over_categories(kb)
    for word in words:
        belief = posterior_given_word(kb, word, belief)
    return belief
