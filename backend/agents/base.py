import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

from config import Settings, logger, settings as default_settings
from config.constants import HTTP_CONFIG
from ensemble.credibility import CredibilityScorer
from exceptions import (
    AgentException,
    AgentInvalidResponseException,
    AgentNotApplicableException,
    AgentTimeoutException,
    AgentUnavailableException,
)
from models.agents import AgentResult, ErrorKind, ScoreDirection
from models.credibility import Corroboration
from models.requests import VerificationRequest
from utils.circuit_breaker import CircuitBreaker
from utils.rate_limiter import RateLimiter

from .http import AgentHTTPClient


@dataclass(frozen=True)
class AgentDependencies:
    """Collaborators handed to every agent at construction."""
    settings: Settings = field(default_factory=lambda: default_settings)
    http: Optional[AgentHTTPClient] = None
    credibility: CredibilityScorer = field(default_factory=CredibilityScorer)


class Agent(ABC):
    """An independent detector. `analyze` never raises for recoverable conditions."""

    agent_id: str

    @abstractmethod
    async def analyze(self, request: VerificationRequest, deadline: float) -> AgentResult:
        ...


class BaseAgent(Agent):
    """
    Runs `evaluate` and turns any AgentException it raises into a failed
    result, so implementations can simply raise.
    """

    direction = ScoreDirection.SUSPICION

    def __init__(self, agent_id: str, deps: Optional[AgentDependencies] = None):
        self.agent_id = agent_id
        self.deps = deps or AgentDependencies()

    async def analyze(self, request: VerificationRequest, deadline: float) -> AgentResult:
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            result = await self.evaluate(request, deadline)
        except AgentException as e:
            elapsed = loop.time() - started
            if e.error_kind != ErrorKind.AGENT_NOT_APPLICABLE.value:
                logger.warning(
                    f"Agent {self.agent_id} failed: {e.reason}",
                    extra={"agent_id": self.agent_id, "error_kind": e.error_kind, "elapsed": elapsed}
                )
            return AgentResult.failure(self.agent_id, ErrorKind(e.error_kind), e.reason, elapsed)
        return result.model_copy(update={"elapsed": loop.time() - started})

    @abstractmethod
    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        ...

    def result(
        self,
        score: float,
        confidence: float,
        indicators: Optional[List[str]] = None,
        corroborations: Optional[List[Corroboration]] = None
    ) -> AgentResult:
        return AgentResult(
            agent_id=self.agent_id,
            score=max(0.0, min(1.0, score)),
            confidence=max(0.0, min(1.0, confidence)),
            direction=self.direction,
            indicators=indicators or [],
            corroborations=corroborations or [],
        )

    def not_applicable(self, reason: str) -> AgentNotApplicableException:
        return AgentNotApplicableException(self.agent_id, reason)


class ExternalAgent(BaseAgent):
    """Thin client to one external collaborator, behind a breaker and a rate limiter."""

    calls_per_second: float = 10.0

    def __init__(self, agent_id: str, deps: Optional[AgentDependencies] = None):
        super().__init__(agent_id, deps)
        self.breaker = CircuitBreaker(
            failure_threshold=HTTP_CONFIG.BREAKER_FAILURE_THRESHOLD,
            recovery_timeout=HTTP_CONFIG.BREAKER_RECOVERY_TIMEOUT,
            expected_exception=(AgentUnavailableException, AgentTimeoutException),
            name=agent_id,
        )
        self.limiter = RateLimiter(self.calls_per_second, burst=int(self.calls_per_second))

    async def call_json(self, method: str, url: str, deadline: float, **kwargs) -> Any:
        if self.deps.http is None:
            raise self.not_applicable("no HTTP client configured")
        await self.limiter.acquire()
        return await self.breaker.call(
            self.deps.http.request_json, self.agent_id, method, url, deadline, **kwargs
        )

    def require(self, value: Any, reason: str) -> Any:
        if not value:
            raise self.not_applicable(reason)
        return value

    def invalid(self, reason: str) -> AgentInvalidResponseException:
        return AgentInvalidResponseException(self.agent_id, reason)

    @staticmethod
    def probability(value: Any) -> Optional[float]:
        """Accepts 0-1 or 0-100 numbers; anything else is None."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if value > 1.0:
            value = value / 100.0
        if value < 0.0 or value > 1.0:
            return None
        return float(value)
