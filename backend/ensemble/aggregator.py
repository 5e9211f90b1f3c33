from dataclasses import dataclass, field
from typing import Dict, List

from config import logger
from models.agents import AgentDescriptor, AgentResult
from models.verdicts import AgentContribution

NO_AGENTS_AVAILABLE = "no_agents_available"


@dataclass(frozen=True)
class EnsembleOutcome:
    overall_score: float
    overall_confidence: float
    coverage: float
    indicators: List[str]
    effective_weights: Dict[str, float]
    agents_considered: int
    agents_failed: int
    contributions: List[AgentContribution] = field(default_factory=list)


class EnsembleAggregator:
    """Combines per-agent results into one weighted score and confidence."""

    def aggregate(
        self,
        results: List[AgentResult],
        descriptors: Dict[str, AgentDescriptor]
    ) -> EnsembleOutcome:
        """
        Combine agent results for one request.

        Weights are renormalized over the agents that succeeded, so the
        effective weights of whatever ran always sum to 1.0. Confidence is
        then scaled by the coverage factor (share of the original ensemble
        weight that actually ran).

        Args:
            results: Every result for the request, succeeded or failed
            descriptors: Agent id -> descriptor for the request's category
        Returns:
            EnsembleOutcome with score, confidence and ordered indicators
        """
        survivors = [
            r for r in results
            if r.succeeded and r.agent_id in descriptors and descriptors[r.agent_id].weight > 0
        ]
        # a zero-weight agent that answered is neither considered nor failed
        failed = sum(1 for r in results if not r.succeeded)

        if not survivors:
            logger.warning(
                f"No agents succeeded ({failed} failed); returning zero-confidence outcome."
            )
            return EnsembleOutcome(
                overall_score=0.0,
                overall_confidence=0.0,
                coverage=0.0,
                indicators=[NO_AGENTS_AVAILABLE],
                effective_weights={},
                agents_considered=0,
                agents_failed=failed,
                contributions=self._contributions(results, {}),
            )

        survivor_weight = sum(descriptors[r.agent_id].weight for r in survivors)
        effective_weights = {
            r.agent_id: descriptors[r.agent_id].weight / survivor_weight
            for r in survivors
        }

        overall_score = sum(effective_weights[r.agent_id] * r.authenticity for r in survivors)
        weighted_confidence = sum(effective_weights[r.agent_id] * r.confidence for r in survivors)
        # invariant: applicable weights sum to 1.0, so the survivor sum is already the coverage share
        coverage = min(1.0, survivor_weight)
        overall_confidence = weighted_confidence * coverage

        indicators = self._merge_indicators(survivors, effective_weights)

        logger.info(
            f"Ensemble: {len(survivors)} survived, {failed} failed, "
            f"coverage={coverage:.2f} score={overall_score:.3f} confidence={overall_confidence:.3f}"
        )

        return EnsembleOutcome(
            overall_score=self._clamp(overall_score),
            overall_confidence=self._clamp(overall_confidence),
            coverage=coverage,
            indicators=indicators,
            effective_weights=effective_weights,
            agents_considered=len(survivors),
            agents_failed=failed,
            contributions=self._contributions(results, effective_weights),
        )

    @staticmethod
    def _merge_indicators(survivors: List[AgentResult], effective_weights: Dict[str, float]) -> List[str]:
        # sorted() is stable: equal weights keep orchestration order
        ordered = sorted(survivors, key=lambda r: effective_weights[r.agent_id], reverse=True)
        seen = set()
        merged = []
        for result in ordered:
            for indicator in result.indicators:
                if indicator not in seen:
                    seen.add(indicator)
                    merged.append(indicator)
        return merged

    @staticmethod
    def _contributions(results: List[AgentResult], effective_weights: Dict[str, float]) -> List[AgentContribution]:
        return [
            AgentContribution(
                agent_id=r.agent_id,
                succeeded=r.succeeded,
                error_kind=r.error_kind,
                authenticity=round(r.authenticity, 4) if r.succeeded else None,
                confidence=round(r.confidence, 4) if r.succeeded else None,
                effective_weight=round(effective_weights.get(r.agent_id, 0.0), 4),
                elapsed=round(r.elapsed, 4),
            )
            for r in results
        ]

    @staticmethod
    def _clamp(value: float) -> float:
        return max(0.0, min(1.0, value))
