"""Probabilistic document classifier -- naive Bayes and Fisher's method over word counts."""

__version__ = "0.1.0"

from .classifier import (
    ClassificationResult,
    Classifier,
    WordClassifier,
    adjust_minimums,
    default_smoothing_floor,
    new_classifier,
)
from .config import ClassifierSettings
from .distribution import (
    INVALID,
    Distribution,
    Valid,
    certainly,
    choose,
    from_counts,
    from_mapping,
    just,
    uniform,
    weighted,
)
from .errors import (
    DegenerateDistribution,
    EmptyDomain,
    InvalidProbability,
    ProbabilityError,
    ZeroMass,
)
from .knowledge import InMemoryKnowledgeBase, KnowledgeBase, reference_knowledge_base
from .preprocessing import tokenize
from .queries import (
    likelihood,
    posterior_given_word,
    posterior_given_words,
    prior_over_categories,
)
from .strategies import (
    CombinationStrategy,
    FisherStrategy,
    NaiveBayesStrategy,
    available_strategies,
    chi_square_tail,
    get_strategy,
    tag_if_matches,
)

__all__ = [
    # Distributions
    "Distribution",
    "Valid",
    "INVALID",
    "uniform",
    "from_counts",
    "from_mapping",
    "weighted",
    "choose",
    "certainly",
    "just",
    # Errors
    "ProbabilityError",
    "EmptyDomain",
    "DegenerateDistribution",
    "ZeroMass",
    "InvalidProbability",
    # Knowledge base
    "KnowledgeBase",
    "InMemoryKnowledgeBase",
    "reference_knowledge_base",
    # Queries
    "prior_over_categories",
    "likelihood",
    "posterior_given_word",
    "posterior_given_words",
    # Strategies
    "CombinationStrategy",
    "NaiveBayesStrategy",
    "FisherStrategy",
    "chi_square_tail",
    "tag_if_matches",
    "get_strategy",
    "available_strategies",
    # Classification
    "Classifier",
    "ClassifierSettings",
    "ClassificationResult",
    "WordClassifier",
    "adjust_minimums",
    "default_smoothing_floor",
    "new_classifier",
    "tokenize",
]
