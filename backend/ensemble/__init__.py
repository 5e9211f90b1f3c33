from .aggregator import EnsembleAggregator, EnsembleOutcome, NO_AGENTS_AVAILABLE
from .classifier import Classification, VerdictClassifier
from .credibility import CredibilityScorer

__all__ = [
    "EnsembleAggregator",
    "EnsembleOutcome",
    "NO_AGENTS_AVAILABLE",
    "Classification",
    "VerdictClassifier",
    "CredibilityScorer",
]
