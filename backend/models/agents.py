from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .credibility import Corroboration
from .requests import ContentCategory


class AgentTier(str, Enum):
    """Informational only. Never changes how a result is combined."""
    CORE = "CORE"
    EXTERNAL = "EXTERNAL"


class ErrorKind(str, Enum):
    AGENT_TIMEOUT = "AGENT_TIMEOUT"
    AGENT_UNAVAILABLE = "AGENT_UNAVAILABLE"
    AGENT_INVALID_RESPONSE = "AGENT_INVALID_RESPONSE"
    AGENT_REJECTED = "AGENT_REJECTED"
    AGENT_NOT_APPLICABLE = "AGENT_NOT_APPLICABLE"
    AGENT_INTERNAL_ERROR = "AGENT_INTERNAL_ERROR"


class ScoreDirection(str, Enum):
    SUSPICION = "SUSPICION"
    AUTHENTICITY = "AUTHENTICITY"


@dataclass(frozen=True)
class AgentDescriptor:
    id: str
    weight: float
    applies_to: FrozenSet[ContentCategory]
    timeout: float
    tier: AgentTier = AgentTier.CORE

    def applies(self, category: ContentCategory) -> bool:
        return category in self.applies_to


class AgentResult(BaseModel):
    """Outcome of one agent invocation. Failures are values, not exceptions."""
    model_config = ConfigDict(frozen=True)

    agent_id: str
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    direction: ScoreDirection = ScoreDirection.SUSPICION
    indicators: List[str] = Field(default_factory=list)
    corroborations: List[Corroboration] = Field(default_factory=list)
    succeeded: bool = True
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    elapsed: float = 0.0

    @property
    def authenticity(self) -> float:
        """Score expressed in the authenticity direction (higher = more trustworthy)."""
        if self.direction == ScoreDirection.SUSPICION:
            return 1.0 - self.score
        return self.score

    @classmethod
    def failure(cls, agent_id: str, error_kind: ErrorKind, message: Optional[str] = None, elapsed: float = 0.0) -> "AgentResult":
        return cls(
            agent_id=agent_id,
            succeeded=False,
            error_kind=error_kind,
            error_message=message,
            elapsed=elapsed,
        )
