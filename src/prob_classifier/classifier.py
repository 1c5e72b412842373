"""Per-word classifiers and the classification orchestrator.

At construction, :class:`Classifier` derives one :class:`WordClassifier` per
known word of the knowledge base: the word's category posterior under a
uniform prior (floored so that no category has zero mass) and an
informativeness score, the distance of that posterior from uniform. A query
then picks up to ``n`` of the cached records for the words present in the
input and hands their distributions to a :class:`CombinationStrategy`.

Example::

    classifier = new_classifier(reference_knowledge_base(), "bayes")
    classifier.classify(["free"])            # "Spam"
    classifier.posterior_over_categories(["monad"]).probability("Ham")  # ~0.99

Selection order:
    Candidates are sorted by *ascending* score before the first ``n`` are
    taken, i.e. the least informative words present are used. This matches
    the reference behavior. Set ``ClassifierSettings.most_informative_first``
    to keep the most informative words instead.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .config import ClassifierSettings
from .distribution import Distribution, uniform, weighted
from .errors import ZeroMass
from .knowledge import KnowledgeBase
from .queries import posterior_given_word, prior_over_categories
from .strategies import CombinationStrategy, get_strategy

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-word records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WordClassifier:
    """Cached evidence for a single known word.

    Attributes:
        word: The word.
        score: Informativeness, the total variation distance of the word's
            uniform-prior posterior from the uniform distribution.
        distribution: Floored ``P_uni(S | word)``.
    """

    word: str
    score: float
    distribution: Distribution


def default_smoothing_floor(kb: KnowledgeBase) -> float:
    """``1 / (total messages + number of categories)``."""
    categories = list(kb.categories())
    total = sum(kb.message_count(c) for c in categories)
    return 1.0 / (total + len(categories))


def adjust_minimums(dist: Distribution, floor: float) -> Distribution:
    """Raise every category mass below *floor* to *floor* and renormalize.

    Keeps a word that never occurred under some category from zeroing that
    category in later products (and from reaching ``log(0)`` in Fisher's
    method).

    Raises:
        ValueError: If *floor* is not in ``(0, 1)``.
    """
    if not 0.0 < floor < 1.0:
        raise ValueError(f"floor must be between 0.0 and 1.0 (exclusive), got {floor}")
    return weighted({value: max(mass, floor) for value, mass in dist.items()}).normalize()


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class ClassificationResult:
    """Outcome of classifying a set of words.

    ``scores`` holds whatever the strategy returned, which is not
    necessarily normalized (see :class:`~prob_classifier.strategies.FisherStrategy`).
    ``confidence`` is the predicted category's share of the total score.
    """

    predicted_class: Hashable
    confidence: float
    scores: dict[Hashable, float]
    words_used: list[str] = field(default_factory=list)
    strategy: str = ""

    def to_dict(self) -> dict:
        return {
            "predicted_class": self.predicted_class,
            "confidence": round(self.confidence, 4),
            "strategy": self.strategy,
            "words_used": list(self.words_used),
            "scores": {
                str(k): round(v, 6) for k, v in sorted(
                    self.scores.items(),
                    key=lambda x: x[1],
                    reverse=True,
                )
            },
        }


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class Classifier:
    """Classify word collections against a knowledge base.

    The per-word table is built eagerly and never modified afterwards, so a
    constructed instance can be shared between threads for read-only use.

    Args:
        knowledge_base: Source of message and word counts.
        strategy: How per-word distributions are combined.
        settings: Optional tunables; defaults to :class:`ClassifierSettings`.
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        strategy: CombinationStrategy,
        settings: ClassifierSettings | None = None,
    ) -> None:
        self._kb = knowledge_base
        self._strategy = strategy
        self._settings = settings or ClassifierSettings()

        self._uniform = uniform(knowledge_base.categories())
        self._prior = prior_over_categories(knowledge_base)
        floor = self._settings.smoothing_floor or default_smoothing_floor(knowledge_base)
        self._classifiers: Mapping[str, WordClassifier] = MappingProxyType(
            self._build_classifiers(floor)
        )
        logger.info(
            "Built %d word classifiers over %d categories (strategy=%s, floor=%.6g)",
            len(self._classifiers),
            len(self._uniform),
            self.strategy_name,
            floor,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self._kb

    @property
    def strategy(self) -> CombinationStrategy:
        return self._strategy

    @property
    def strategy_name(self) -> str:
        return self._strategy.name or self._strategy.__class__.__name__

    @property
    def settings(self) -> ClassifierSettings:
        return self._settings

    @property
    def categories(self) -> list[Hashable]:
        return self._uniform.outcomes()

    @property
    def prior(self) -> Distribution:
        """Prior over categories from the message counts."""
        return self._prior

    @property
    def vocabulary(self) -> list[str]:
        """Words with a cached classifier."""
        return list(self._classifiers)

    def __contains__(self, word: object) -> bool:
        return word in self._classifiers

    def __len__(self) -> int:
        return len(self._classifiers)

    def __getitem__(self, word: str) -> WordClassifier:
        return self._classifiers[word]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def word_classifiers(self, words: Iterable[str], n: int | None = None) -> list[WordClassifier]:
        """Select up to *n* cached records for the known words in *words*.

        Unknown words are skipped. Records are ordered by ascending score
        (descending with ``most_informative_first``); ties keep input order.

        Raises:
            ValueError: If *n* is negative.
        """
        n = self._resolve_n(n)
        candidates = [self._classifiers[w] for w in words if w in self._classifiers]
        candidates.sort(key=lambda c: c.score, reverse=self._settings.most_informative_first)
        return candidates[:n]

    def posterior_over_categories(
        self,
        words: Iterable[str],
        n: int | None = None,
        prior: Distribution | None = None,
    ) -> Distribution:
        """Distribution returned by the strategy for *words*.

        Args:
            words: Input words; unknown ones contribute nothing.
            n: Maximum number of per-word classifiers (default ``settings.top_n``).
            prior: Prior over categories (default: from message counts).

        Raises:
            ZeroMass: If the strategy rejects every category.
        """
        words = list(words)
        return self._combine(words, self.word_classifiers(words, n), n, prior)

    def classify(self, words: Iterable[str], n: int | None = None) -> Hashable:
        """Most probable category for *words*."""
        return self.posterior_over_categories(words, n).most_probable()

    def explain(
        self,
        words: Iterable[str],
        n: int | None = None,
        prior: Distribution | None = None,
    ) -> ClassificationResult:
        """Classify *words* and report the scores and the words used."""
        words = list(words)
        selected = self.word_classifiers(words, n)
        result = self._combine(words, selected, n, prior)
        predicted = result.most_probable()
        total = result.valid_mass
        return ClassificationResult(
            predicted_class=predicted,
            confidence=result.probability(predicted) / total if total > 0 else 0.0,
            scores=result.to_dict(),
            words_used=[c.word for c in selected],
            strategy=self.strategy_name,
        )

    def most_informative_words(self, top_n: int = 20) -> list[tuple[str, float]]:
        """Vocabulary ranked by informativeness score (descending).

        Args:
            top_n: Number of words to return.

        Returns:
            List of ``(word, score)`` tuples.
        """
        ranked = sorted(
            ((c.word, c.score) for c in self._classifiers.values()),
            key=lambda x: x[1],
            reverse=True,
        )
        return ranked[:top_n]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_classifiers(self, floor: float) -> dict[str, WordClassifier]:
        table: dict[str, WordClassifier] = {}
        for word in self._kb.known_words():
            try:
                posterior = posterior_given_word(self._kb, word, self._uniform)
            except ZeroMass:
                # All-zero row: the word is as good as unknown.
                logger.debug("Skipping '%s': no occurrences in any category", word)
                continue
            table[word] = WordClassifier(
                word=word,
                score=posterior.distance_from(self._uniform),
                distribution=adjust_minimums(posterior, floor),
            )
        return table

    def _combine(
        self,
        words: list[str],
        selected: list[WordClassifier],
        n: int | None,
        prior: Distribution | None,
    ) -> Distribution:
        logger.debug(
            "Classifying %d words with %s using %s",
            len(words),
            self.strategy_name,
            [c.word for c in selected],
        )
        return self._strategy.combine(
            [c.distribution for c in selected],
            self._prior if prior is None else prior,
            self._resolve_n(n),
            words,
        )

    def _resolve_n(self, n: int | None) -> int:
        n = self._settings.top_n if n is None else n
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        return n


def new_classifier(
    knowledge_base: KnowledgeBase,
    strategy: CombinationStrategy | str | None = None,
    settings: ClassifierSettings | None = None,
) -> Classifier:
    """Build a :class:`Classifier`.

    Args:
        knowledge_base: Source of counts.
        strategy: A strategy instance, a registered name (``"bayes"``,
            ``"fisher"``), or ``None`` for ``settings.strategy``.
        settings: Optional tunables.

    Raises:
        ValueError: If *strategy* names no registered strategy.
    """
    settings = settings or ClassifierSettings()
    if strategy is None:
        strategy = settings.strategy
    if isinstance(strategy, str):
        strategy = get_strategy(strategy)
    return Classifier(knowledge_base, strategy, settings)
