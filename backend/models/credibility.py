from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredibilityTier(str, Enum):
    HIGHLY_TRUSTED = "HIGHLY_TRUSTED"
    TRUSTED = "TRUSTED"
    MODERATE = "MODERATE"
    LOW = "LOW"
    UNRELIABLE = "UNRELIABLE"


class SourceCredibilityRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    score: int = Field(ge=0, le=100)
    tier: CredibilityTier


class FactCheckRating(str, Enum):
    TRUE = "TRUE"
    FALSE = "FALSE"
    MISLEADING = "MISLEADING"
    UNVERIFIED = "UNVERIFIED"


class Corroboration(BaseModel):
    """One external fact-check or publication bearing on a claim."""
    model_config = ConfigDict(frozen=True)

    source_url: str
    publisher: Optional[str] = None
    rating: FactCheckRating = FactCheckRating.UNVERIFIED
    credibility: SourceCredibilityRecord
