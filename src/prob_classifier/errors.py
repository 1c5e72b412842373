"""Exceptions raised by the probability engine.

All of them derive from :class:`ProbabilityError`, which is itself a
``ValueError`` so callers that already guard against bad values keep working.
"""

from __future__ import annotations


class ProbabilityError(ValueError):
    """Base class for engine errors."""


class EmptyDomain(ProbabilityError):
    """A uniform distribution was requested over no outcomes."""


class DegenerateDistribution(ProbabilityError):
    """A distribution was built from counts that are all zero."""


class ZeroMass(ProbabilityError):
    """No valid probability mass is left to normalize or choose from."""


class InvalidProbability(ProbabilityError):
    """A probability outside ``[0, 1]`` was supplied."""
