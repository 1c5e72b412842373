"""Classifier settings, with optional overrides from the environment.

Recognized environment variables::

    PROB_CLASSIFIER_TOP_N                   int, default 15
    PROB_CLASSIFIER_STRATEGY                "bayes" or "fisher", default "bayes"
    PROB_CLASSIFIER_MOST_INFORMATIVE_FIRST  bool, default false
    PROB_CLASSIFIER_SMOOTHING_FLOOR         float in (0, 1), default derived
                                            from the knowledge base
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

ENV_PREFIX = "PROB_CLASSIFIER_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ClassifierSettings:
    """Tunables for :class:`~prob_classifier.classifier.Classifier`.

    Attributes:
        top_n: Default number of per-word classifiers combined per query.
        strategy: Registered strategy name used by the CLI and
            :func:`~prob_classifier.classifier.new_classifier` when no
            strategy object is given.
        most_informative_first: Select the words with the *highest*
            informativeness score instead of the lowest.
        smoothing_floor: Minimum mass of any category in a per-word
            distribution. ``None`` means ``1 / (total messages + categories)``.
    """

    top_n: int = 15
    strategy: str = "bayes"
    most_informative_first: bool = False
    smoothing_floor: Optional[float] = None

    def __post_init__(self) -> None:
        if self.top_n < 0:
            raise ValueError("top_n must be non-negative")
        if not self.strategy:
            raise ValueError("strategy must not be empty")
        if self.smoothing_floor is not None and not (0.0 < self.smoothing_floor < 1.0):
            raise ValueError("smoothing_floor must be between 0.0 and 1.0 (exclusive)")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClassifierSettings":
        """Build settings from ``PROB_CLASSIFIER_*`` variables.

        Raises:
            ValueError: If a variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        top_n = env.get(ENV_PREFIX + "TOP_N")
        if top_n is not None:
            try:
                kwargs["top_n"] = int(top_n)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}TOP_N must be an integer, got '{top_n}'") from None

        strategy = env.get(ENV_PREFIX + "STRATEGY")
        if strategy is not None:
            kwargs["strategy"] = strategy.strip().lower()

        flag = env.get(ENV_PREFIX + "MOST_INFORMATIVE_FIRST")
        if flag is not None:
            kwargs["most_informative_first"] = _parse_bool(flag, "MOST_INFORMATIVE_FIRST")

        floor = env.get(ENV_PREFIX + "SMOOTHING_FLOOR")
        if floor is not None:
            try:
                kwargs["smoothing_floor"] = float(floor)
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX}SMOOTHING_FLOOR must be a number, got '{floor}'"
                ) from None

        return cls(**kwargs)


def _parse_bool(value: str, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got '{value}'")
