"""Strategies combining per-word classifier distributions into a posterior.

Each per-word distribution handed to a strategy is ``P_uni(S | Wi)``, the
category posterior for a single word computed from a *uniform* prior. For a
uniform ``P_uni``::

    P_uni(S | Wi)   = < P(Wi | S) * P_uni(S) > = < P(Wi | S) >
    P_prior(S | Wi) = < P(Wi | S) * P_prior(S) > = < P_uni(S | Wi) * P_prior(S) >

so the cached distributions can be combined with any prior by multiplying
masses of matching categories and normalizing once at the end.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Hashable, Sequence

from .distribution import INVALID, Distribution, weighted

logger = logging.getLogger(__name__)


def tag_if_matches(category: Hashable, dist: Distribution) -> Distribution:
    """Keep the mass of *category* in *dist*; every other outcome becomes invalid."""
    return dist.map(lambda other: category if other == category else INVALID)


class CombinationStrategy(ABC):
    """Combine per-word category distributions with a prior.

    Implementations must not mutate their inputs.
    """

    name: str = ""

    @abstractmethod
    def combine(
        self,
        classifiers: Sequence[Distribution],
        prior: Distribution,
        n: int,
        words: Sequence[str],
    ) -> Distribution:
        """Return the final distribution over categories.

        Args:
            classifiers: Selected per-word ``P_uni(S | Wi)`` distributions.
            prior: Prior over categories.
            n: Number of classifiers that was requested.
            words: The original input words.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class NaiveBayesStrategy(CombinationStrategy):
    """Product of per-word likelihoods times the prior, normalized once.

    The running belief starts at the prior. Each classifier is folded in with
    :meth:`Distribution.dependent`, keeping only pairs where the believed
    category and the classifier's category agree. Disagreeing pairs pile up
    as invalid mass and are dropped by the final normalization.
    """

    name = "bayes"

    def combine(
        self,
        classifiers: Sequence[Distribution],
        prior: Distribution,
        n: int,
        words: Sequence[str],
    ) -> Distribution:
        belief = prior
        for dist in classifiers:
            belief = belief.dependent(lambda t, d=dist: tag_if_matches(t, d))
        logger.debug(
            "Naive Bayes over %d classifiers: invalid mass %.6g",
            len(classifiers),
            belief.invalid_mass,
        )
        return belief.normalize()


def chi_square_tail(chi: float, dof: int) -> float:
    """Upper tail of a chi-square distribution with ``2 * dof`` degrees of freedom.

    Uses the closed-form series for even degrees of freedom::

        Q = exp(-m) * sum(m**i / i! for i in range(dof)),   m = chi / 2

    The result is clamped to at most 1.0. With ``dof <= 1`` only the first
    term is used.
    """
    if math.isinf(chi):
        return 0.0
    m = 0.5 * chi
    term = math.exp(-m)
    total = term
    for i in range(1, dof):
        term *= m / i
        total += term
    return min(total, 1.0)


class FisherStrategy(CombinationStrategy):
    """Fisher's method on top of the naive-Bayes hypothesis.

    For each category ``k`` with hypothesis probability ``p``, ``chi = -2 ln p``
    is turned into a tail probability with ``dof = len(classifiers)``. The
    score of ``k`` is ``sum(1 - tail[other] for other != k)``.

    The returned distribution is *not* normalized. Only the ordering of the
    scores is meaningful; call ``.normalize()`` if probabilities are needed.
    """

    name = "fisher"

    def __init__(self, hypothesis: CombinationStrategy | None = None) -> None:
        self._hypothesis = hypothesis or NaiveBayesStrategy()

    def combine(
        self,
        classifiers: Sequence[Distribution],
        prior: Distribution,
        n: int,
        words: Sequence[str],
    ) -> Distribution:
        hypothesis = self._hypothesis.combine(classifiers, prior, n, words)
        dof = len(classifiers)

        tails: dict[Hashable, float] = {}
        for category, p in hypothesis.items():
            chi = -2.0 * math.log(p) if p > 0 else math.inf
            tails[category] = chi_square_tail(chi, dof)

        scores = {
            category: sum(1.0 - tail for other, tail in tails.items() if other != category)
            for category in tails
        }
        logger.debug("Fisher tails (dof=%d): %s", dof, tails)
        return weighted(scores)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_STRATEGIES: dict[str, type[CombinationStrategy]] = {
    NaiveBayesStrategy.name: NaiveBayesStrategy,
    FisherStrategy.name: FisherStrategy,
}


def available_strategies() -> list[str]:
    """Names accepted by :func:`get_strategy`."""
    return sorted(_STRATEGIES)


def get_strategy(name: str) -> CombinationStrategy:
    """Instantiate a registered strategy by name.

    Raises:
        ValueError: If no strategy is registered under *name*.
    """
    try:
        return _STRATEGIES[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown strategy '{name}'. Available: {', '.join(available_strategies())}"
        ) from None
