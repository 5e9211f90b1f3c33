from .requests import (
    ContentCategory,
    ReviewContent,
    SubmitterMetadata,
    RelatedReview,
    VerificationRequest,
)
from .credibility import (
    CredibilityTier,
    SourceCredibilityRecord,
    FactCheckRating,
    Corroboration,
)
from .agents import (
    AgentTier,
    ErrorKind,
    ScoreDirection,
    AgentDescriptor,
    AgentResult,
)
from .verdicts import (
    VerdictLabel,
    AgentContribution,
    EnsembleVerdict,
    CacheEntry,
)

__all__ = [
    "ContentCategory",
    "ReviewContent",
    "SubmitterMetadata",
    "RelatedReview",
    "VerificationRequest",

    "CredibilityTier",
    "SourceCredibilityRecord",
    "FactCheckRating",
    "Corroboration",

    "AgentTier",
    "ErrorKind",
    "ScoreDirection",
    "AgentDescriptor",
    "AgentResult",

    "VerdictLabel",
    "AgentContribution",
    "EnsembleVerdict",
    "CacheEntry",
]
