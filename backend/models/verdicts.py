from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .agents import ErrorKind
from .requests import ContentCategory


class VerdictLabel(str, Enum):
    AUTHENTIC = "AUTHENTIC"
    REQUIRES_REVIEW = "REQUIRES_REVIEW"
    SUSPICIOUS = "SUSPICIOUS"
    MANIPULATED = "MANIPULATED"
    TRUE = "TRUE"
    FALSE = "FALSE"
    MISLEADING = "MISLEADING"
    UNVERIFIED = "UNVERIFIED"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class AgentContribution(BaseModel):
    """Per-agent line of the verdict breakdown."""
    model_config = ConfigDict(frozen=True)

    agent_id: str
    succeeded: bool
    error_kind: Optional[ErrorKind] = None
    authenticity: Optional[float] = None
    confidence: Optional[float] = None
    effective_weight: float = 0.0
    elapsed: float = 0.0


class EnsembleVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: ContentCategory
    content_fingerprint: str
    overall_score: float = Field(ge=0.0, le=1.0)
    overall_confidence: float = Field(ge=0.0, le=1.0)
    label: VerdictLabel
    indicators: List[str] = Field(default_factory=list)
    recommendation: str
    agents_considered: int = 0
    agents_failed: int = 0
    corroborating_sources: int = 0
    agent_breakdown: List[AgentContribution] = Field(default_factory=list)
    computed_at: datetime


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    verdict: EnsembleVerdict
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
