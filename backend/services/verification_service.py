import asyncio
from datetime import datetime, timezone
from typing import Optional

from config import Settings, logger, settings as default_settings
from ensemble import EnsembleAggregator, VerdictClassifier
from exceptions import CacheUnavailableException
from middleware.context import get_request_id
from models.requests import VerificationRequest
from models.verdicts import EnsembleVerdict
from registry import AgentRegistry
from services.cache import CacheStore, InMemoryCacheStore, cache_key
from services.orchestration import Orchestrator


class VerificationService:
    """The single entry point: one request in, one EnsembleVerdict out."""

    def __init__(
        self,
        registry: AgentRegistry,
        cache: Optional[CacheStore] = None,
        active_settings: Optional[Settings] = None,
        aggregator: Optional[EnsembleAggregator] = None,
        classifier: Optional[VerdictClassifier] = None
    ):
        self.registry = registry
        self.orchestrator = Orchestrator(registry)
        self.cache = cache if cache is not None else InMemoryCacheStore()
        self.settings = active_settings or default_settings
        self.aggregator = aggregator or EnsembleAggregator()
        self.classifier = classifier or VerdictClassifier()

    def reload_registry(self, registry: AgentRegistry):
        """Swap in a new, already validated registry. In-flight requests keep the old one."""
        self.registry = registry
        self.orchestrator = Orchestrator(registry)
        logger.info(f"Agent registry reloaded (version {registry.version})")

    async def verify_content(self, request: VerificationRequest) -> EnsembleVerdict:
        """
        Verify one piece of content.

        Content-level failures never raise: if every agent fails the caller
        gets a zero-confidence verdict, which is not cached. Cache outages
        fall back to uncached computation.
        """
        orchestrator = self.orchestrator
        registry = orchestrator.registry
        category = request.category
        key = cache_key(category, request.content_fingerprint)

        cached = await self._cache_get(key)
        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return cached
        logger.info(f"Cache miss for {key}")

        loop = asyncio.get_running_loop()
        started = loop.time()
        descriptors = registry.agents_for(category)

        results = await orchestrator.run(request, descriptors, self._loop_deadline(request))
        outcome = self.aggregator.aggregate(results, {d.id: d for d in descriptors})

        if descriptors:
            classification = self.classifier.classify(
                category, outcome.overall_score, outcome.overall_confidence, results
            )
        else:
            classification = self.classifier.not_applicable(category)

        verdict = EnsembleVerdict(
            category=category,
            content_fingerprint=request.content_fingerprint,
            overall_score=outcome.overall_score,
            overall_confidence=classification.confidence,
            label=classification.label,
            indicators=outcome.indicators,
            recommendation=classification.recommendation,
            agents_considered=outcome.agents_considered,
            agents_failed=outcome.agents_failed,
            corroborating_sources=classification.corroborating_sources,
            agent_breakdown=outcome.contributions,
            computed_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"Verified {category.value} {request.content_fingerprint[:12]} as {verdict.label.value} "
            f"(score={verdict.overall_score:.3f}, confidence={verdict.overall_confidence:.3f}) "
            f"in {loop.time() - started:.2f}s",
            extra={"request_id": get_request_id(), "agents_failed": verdict.agents_failed},
        )

        if verdict.agents_considered == 0:
            logger.warning(f"No agent produced a result for {key}; verdict not cached.")
            return verdict

        return await self._cache_put(key, verdict, self.settings.cache_ttl_for(category))

    @staticmethod
    def _loop_deadline(request: VerificationRequest) -> Optional[float]:
        if request.deadline is None:
            return None
        deadline = request.deadline
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        remaining = (deadline - datetime.now(timezone.utc)).total_seconds()
        return asyncio.get_running_loop().time() + remaining

    async def _cache_get(self, key: str) -> Optional[EnsembleVerdict]:
        try:
            return await self.cache.get(key)
        except CacheUnavailableException as e:
            logger.warning(f"{e.message}; computing without cache")
            return None

    async def _cache_put(self, key: str, verdict: EnsembleVerdict, ttl: int) -> EnsembleVerdict:
        try:
            if await self.cache.put(key, verdict, ttl):
                return verdict
            # another request won the race; serve what it stored
            stored = await self.cache.get(key)
        except CacheUnavailableException as e:
            logger.warning(f"{e.message}; verdict not cached")
            return verdict
        return stored if stored is not None else verdict
