"""Discrete probability distributions with monadic composition.

A :class:`Distribution` maps outcomes to non-negative probability mass. Its
backing store is keyed by an explicit sum type: every real outcome is wrapped
in :class:`Valid`, and mass that belongs to no outcome at all (a rejected
branch of a computation) is kept under the :data:`INVALID` key. Invalid mass
is carried through every composition step and only discarded by
:meth:`Distribution.normalize`, so Bayesian conditioning can be written as a
chain of :meth:`Distribution.dependent` calls followed by one normalization.

Example::

    prior = from_counts(["spam", "ham"], [103, 57])
    posterior = prior.dependent(
        lambda t: choose(p_word[t]).event_dependent(just(True), lambda _: certainly(t))
    ).normalize()
    posterior.most_probable()  # "spam"
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, TypeVar, Union

from .errors import DegenerateDistribution, EmptyDomain, InvalidProbability, ZeroMass

T = TypeVar("T", bound=Hashable)
U = TypeVar("U", bound=Hashable)


# ---------------------------------------------------------------------------
# Outcome keys
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Valid(Generic[T]):
    """A real outcome of a distribution.

    Outcomes compare with ordinary Python key equality, so values that are
    equal and hash alike (``True`` and ``1``, ``1`` and ``1.0``) are the same
    outcome and their masses merge.
    """

    value: T

    def __repr__(self) -> str:
        return f"Valid({self.value!r})"


class _Invalid(Enum):
    INVALID = "invalid"

    def __repr__(self) -> str:
        return "INVALID"


#: Key of the bucket holding mass that belongs to no valid outcome.
INVALID = _Invalid.INVALID

Outcome = Union[Valid[Any], _Invalid]


def _accumulate(pairs: Iterable[tuple[Outcome, float]]) -> dict[Outcome, float]:
    """Sum masses per outcome, preserving first-seen order."""
    masses: dict[Outcome, float] = {}
    for outcome, mass in pairs:
        masses[outcome] = masses.get(outcome, 0.0) + mass
    return masses


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Distribution(Generic[T]):
    """Immutable mapping from outcome to probability mass.

    Masses are not required to sum to 1 until :meth:`normalize` is called.
    Iteration, :meth:`items` and :meth:`outcomes` expose valid outcomes only,
    in insertion order.

    Args:
        masses: Mapping from :class:`Valid` keys (or :data:`INVALID`) to
            non-negative masses. The mapping is copied.
    """

    masses: Mapping[Outcome, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for outcome, mass in self.masses.items():
            if not isinstance(outcome, Valid) and outcome is not INVALID:
                raise TypeError(f"Distribution keys must be Valid or INVALID, got {outcome!r}")
            if not mass >= 0:
                raise ValueError(f"Invalid mass {mass} for outcome {outcome!r}")
        object.__setattr__(self, "masses", MappingProxyType(dict(self.masses)))

    def __hash__(self) -> int:
        return hash(frozenset(self.masses.items()))

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def probability(self, value: T) -> float:
        """Mass of *value* (0.0 when the outcome is absent)."""
        return self.masses.get(Valid(value), 0.0)

    @property
    def invalid_mass(self) -> float:
        """Mass accumulated in the invalid bucket."""
        return self.masses.get(INVALID, 0.0)

    @property
    def valid_mass(self) -> float:
        return sum(m for o, m in self.masses.items() if o is not INVALID)

    @property
    def total_mass(self) -> float:
        """Valid plus invalid mass."""
        return sum(self.masses.values())

    def outcomes(self) -> list[T]:
        """Valid outcome values in insertion order."""
        return [o.value for o in self.masses if o is not INVALID]

    def items(self) -> list[tuple[T, float]]:
        """``(value, mass)`` pairs for valid outcomes."""
        return [(o.value, m) for o, m in self.masses.items() if o is not INVALID]

    def to_dict(self) -> dict[T, float]:
        return dict(self.items())

    def __iter__(self) -> Iterator[T]:
        return iter(self.outcomes())

    def __len__(self) -> int:
        return sum(1 for o in self.masses if o is not INVALID)

    def __contains__(self, value: object) -> bool:
        return Valid(value) in self.masses

    def __str__(self) -> str:
        lines = [f"{value}: {mass:.6f}" for value, mass in self.items()]
        if INVALID in self.masses:
            lines.append(f"<invalid>: {self.invalid_mass:.6f}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def dependent(self, f: Callable[[T], Distribution[U]]) -> Distribution[U]:
        """Monadic bind.

        The result assigns to each outcome ``b`` the mass
        ``sum(self[a] * f(a)[b] for a in self)``. Invalid mass in ``self``
        moves to the result's invalid bucket untouched (``f`` is not called
        for it), and invalid mass produced by ``f(a)`` is scaled by
        ``self[a]`` into the same bucket.
        """
        pairs: list[tuple[Outcome, float]] = []
        for outcome, mass in self.masses.items():
            if outcome is INVALID:
                pairs.append((INVALID, mass))
                continue
            for inner, inner_mass in f(outcome.value).masses.items():
                pairs.append((inner, mass * inner_mass))
        return Distribution(_accumulate(pairs))

    def event_dependent(
        self,
        event: Callable[[T], bool],
        f: Callable[[T], Distribution[U]],
    ) -> Distribution[U]:
        """Bind restricted to outcomes satisfying *event*.

        Mass of outcomes for which ``event`` is false is moved to the invalid
        bucket, which encodes "this evidence was observed".
        """

        def step(value: T) -> Distribution[U]:
            if event(value):
                return f(value)
            return Distribution({INVALID: 1.0})

        return self.dependent(step)

    def map(self, f: Callable[[T], U | _Invalid]) -> Distribution[U]:
        """Apply *f* to every valid outcome, merging outcomes that collide.

        ``f`` may return :data:`INVALID` to reject an outcome.
        """
        pairs: list[tuple[Outcome, float]] = []
        for outcome, mass in self.masses.items():
            if outcome is INVALID:
                pairs.append((INVALID, mass))
                continue
            mapped = f(outcome.value)
            pairs.append((INVALID if mapped is INVALID else Valid(mapped), mass))
        return Distribution(_accumulate(pairs))

    def filter(self, event: Callable[[T], bool]) -> Distribution[T]:
        """Move mass of outcomes failing *event* into the invalid bucket."""
        return self.map(lambda value: value if event(value) else INVALID)

    def normalize(self) -> Distribution[T]:
        """Drop the invalid bucket and rescale valid masses to sum to 1.

        Raises:
            ZeroMass: If no valid mass remains.
        """
        valid = {o: m for o, m in self.masses.items() if o is not INVALID}
        total = sum(valid.values())
        if total <= 0:
            raise ZeroMass("Cannot normalize a distribution without valid mass")
        return Distribution({o: m / total for o, m in valid.items()})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def most_probable(self) -> T:
        """Valid outcome with the greatest mass.

        Ties are broken by insertion order: the first outcome wins, which
        includes the case where every valid outcome has zero mass.

        Raises:
            ZeroMass: If there is no valid outcome at all.
        """
        best: Outcome | None = None
        best_mass = 0.0
        for outcome, mass in self.masses.items():
            if outcome is INVALID:
                continue
            if best is None or mass > best_mass:
                best, best_mass = outcome, mass
        if best is None:
            raise ZeroMass("Distribution has no valid outcome")
        return best.value

    def distance_from(self, other: Distribution[T]) -> float:
        """Total variation distance between the valid parts of two distributions.

        Outcomes missing from one side count as zero mass there.
        """
        values = list(dict.fromkeys(self.outcomes() + other.outcomes()))
        return 0.5 * sum(abs(self.probability(v) - other.probability(v)) for v in values)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def uniform(outcomes: Iterable[T]) -> Distribution[T]:
    """Equal mass for every distinct outcome.

    Raises:
        EmptyDomain: If *outcomes* is empty.
    """
    values = list(dict.fromkeys(outcomes))
    if not values:
        raise EmptyDomain("Cannot build a uniform distribution over no outcomes")
    mass = 1.0 / len(values)
    return Distribution({Valid(v): mass for v in values})


def from_counts(outcomes: Iterable[T], counts: Iterable[float]) -> Distribution[T]:
    """Mass proportional to each outcome's count.

    Outcomes with a zero count are kept with zero mass.

    Raises:
        ValueError: If lengths differ or a count is negative.
        DegenerateDistribution: If every count is zero.
    """
    values = list(outcomes)
    weights = [float(c) for c in counts]
    if len(values) != len(weights):
        raise ValueError(
            f"outcomes ({len(values)}) and counts ({len(weights)}) must have same length"
        )
    if any(w < 0 for w in weights):
        raise ValueError(f"Counts must be non-negative, got {weights}")
    total = sum(weights)
    if total == 0:
        raise DegenerateDistribution("Cannot build a distribution from all-zero counts")
    return Distribution(_accumulate((Valid(v), w / total) for v, w in zip(values, weights)))


def from_mapping(weights: Mapping[T, float]) -> Distribution[T]:
    """:func:`from_counts` over a ``{outcome: count}`` mapping."""
    return from_counts(weights.keys(), weights.values())


def weighted(scores: Mapping[T, float]) -> Distribution[T]:
    """Wrap raw non-negative scores as a distribution without normalizing."""
    return Distribution({Valid(v): float(s) for v, s in scores.items()})


def choose(p: float, true_outcome: Any = True, false_outcome: Any = False) -> Distribution:
    """Two-outcome distribution: *p* on *true_outcome*, ``1 - p`` on the other.

    Raises:
        InvalidProbability: If *p* is outside ``[0, 1]``.
    """
    if not 0.0 <= p <= 1.0:
        raise InvalidProbability(f"Probability must be within [0, 1], got {p}")
    return Distribution(_accumulate([(Valid(true_outcome), p), (Valid(false_outcome), 1.0 - p)]))


def certainly(value: T) -> Distribution[T]:
    """Distribution with all mass on *value*."""
    return Distribution({Valid(value): 1.0})


def just(value: Any) -> Callable[[Any], bool]:
    """Event predicate matching exactly *value*."""
    return lambda outcome: outcome == value
