from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ClassifierConfig:
    AUTHENTIC_THRESHOLD: float = 0.70
    SUSPICIOUS_THRESHOLD: float = 0.40
    MIN_CONFIDENCE: float = 0.30


@dataclass(frozen=True)
class CorroborationConfig:
    """Confidence floor granted when independent fact-checkers agree."""
    BASE_FLOOR: float = 0.60
    STEP_PER_SOURCE: float = 0.10
    MAX_FLOOR: float = 0.95

    def floor_for(self, agreeing_sources: int) -> float:
        if agreeing_sources <= 0:
            return 0.0
        return min(self.MAX_FLOOR, self.BASE_FLOOR + self.STEP_PER_SOURCE * (agreeing_sources - 1))


@dataclass(frozen=True)
class HTTPConfig:
    """Outbound contract shared by every external agent."""
    MAX_ATTEMPTS: int = 2
    RETRY_BASE_DELAY: float = 0.2
    RETRY_MAX_DELAY: float = 1.0
    DEFAULT_TIMEOUT: float = 5.0
    USER_AGENT: str = "verdict-engine/1.0"
    BREAKER_FAILURE_THRESHOLD: int = 5
    BREAKER_RECOVERY_TIMEOUT: float = 30.0


@dataclass(frozen=True)
class RateLimitsPerSecond:
    HUGGINGFACE: float = 5.0
    GOOGLE_FACT_CHECK: float = 10.0
    GOOGLE_CUSTOM_SEARCH: float = 5.0
    COFACTS: float = 5.0
    HOSTED_MODEL: float = 20.0
    YOUTUBE: float = 10.0


@dataclass(frozen=True)
class CacheConfig:
    KEY_PREFIX: str = "verdict"
    DEFAULT_TIMEOUT: float = 0.5


@dataclass(frozen=True)
class RecommendationTemplates:
    TEMPLATES: Dict[str, str] = field(default_factory=lambda: {
        "AUTHENTIC": "Signals are consistent with authentic content. No action needed.",
        "REQUIRES_REVIEW": "Signals are mixed or too sparse to decide. Route to a human reviewer.",
        "SUSPICIOUS": "Multiple signals indicate inauthentic activity. Hide pending moderator review.",
        "MANIPULATED": "Media shows signs of manipulation. Label it and verify against the original source.",
        "TRUE": "Claim is supported by the available evidence.",
        "FALSE": "Claim is contradicted by the available evidence. Flag it and link the fact-checks.",
        "MISLEADING": "Claim is partly accurate but misleading. Add context before sharing.",
        "UNVERIFIED": "Claim could not be verified. Cross-reference with trusted sources.",
        "NOT_APPLICABLE": "No detectors are configured for this content type.",
    })

    def for_label(self, label: str) -> str:
        return self.TEMPLATES.get(label, self.TEMPLATES["REQUIRES_REVIEW"])


CLASSIFIER_CONFIG = ClassifierConfig()
CORROBORATION_CONFIG = CorroborationConfig()
HTTP_CONFIG = HTTPConfig()
RATE_LIMITS_PER_SECOND = RateLimitsPerSecond()
CACHE_CONFIG = CacheConfig()
RECOMMENDATIONS = RecommendationTemplates()
