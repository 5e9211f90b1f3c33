from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from config import logger
from config.constants import (
    CLASSIFIER_CONFIG,
    CORROBORATION_CONFIG,
    RECOMMENDATIONS,
    ClassifierConfig,
    CorroborationConfig,
    RecommendationTemplates,
)
from models.agents import AgentResult
from models.credibility import Corroboration, CredibilityTier, FactCheckRating
from models.requests import ContentCategory
from models.verdicts import VerdictLabel

# label for (score >= authentic, middle band, score < suspicious)
CATEGORY_BANDS: Dict[ContentCategory, Tuple[VerdictLabel, VerdictLabel, VerdictLabel]] = {
    ContentCategory.REVIEW: (VerdictLabel.AUTHENTIC, VerdictLabel.REQUIRES_REVIEW, VerdictLabel.SUSPICIOUS),
    ContentCategory.IMAGE: (VerdictLabel.AUTHENTIC, VerdictLabel.REQUIRES_REVIEW, VerdictLabel.MANIPULATED),
    ContentCategory.VIDEO: (VerdictLabel.AUTHENTIC, VerdictLabel.REQUIRES_REVIEW, VerdictLabel.MANIPULATED),
    ContentCategory.CLAIM: (VerdictLabel.TRUE, VerdictLabel.UNVERIFIED, VerdictLabel.FALSE),
}

RATING_LABELS = {
    FactCheckRating.TRUE: VerdictLabel.TRUE,
    FactCheckRating.FALSE: VerdictLabel.FALSE,
    FactCheckRating.MISLEADING: VerdictLabel.MISLEADING,
}

# tie-break when corroborating sources split evenly: most conservative first
CONSERVATIVE_ORDER = [FactCheckRating.FALSE, FactCheckRating.MISLEADING, FactCheckRating.TRUE]


@dataclass(frozen=True)
class Classification:
    label: VerdictLabel
    confidence: float
    recommendation: str
    corroborating_sources: int = 0


class VerdictClassifier:
    """Maps (score, confidence) to a category label and recommendation."""

    def __init__(
        self,
        config: ClassifierConfig = None,
        corroboration: CorroborationConfig = None,
        templates: RecommendationTemplates = None
    ):
        self.config = config or CLASSIFIER_CONFIG
        self.corroboration = corroboration or CORROBORATION_CONFIG
        self.templates = templates or RECOMMENDATIONS

    def classify(
        self,
        category: ContentCategory,
        score: float,
        confidence: float,
        results: Optional[List[AgentResult]] = None
    ) -> Classification:
        """
        Assign the verdict label.

        For claims, the majority rating of corroborating external sources
        wins when any exist, with confidence raised to a floor that grows
        with the number of independent agreeing sources. Everything else
        goes through the score bands, and anything under the minimum
        confidence is demoted to the "requires review" label.
        """
        if category == ContentCategory.CLAIM:
            majority = self.corroborated_rating(results or [])
            if majority is not None:
                rating, agreeing = majority
                floor = self.corroboration.floor_for(agreeing)
                boosted = max(confidence, floor)
                label = RATING_LABELS[rating]
                logger.info(
                    f"Claim corroborated by {agreeing} source(s): {rating.value}, "
                    f"confidence {confidence:.3f} -> {boosted:.3f}"
                )
                return Classification(label, boosted, self.templates.for_label(label.value), agreeing)

        label = self.label_for(category, score, confidence)
        return Classification(label, confidence, self.templates.for_label(label.value))

    def label_for(self, category: ContentCategory, score: float, confidence: float) -> VerdictLabel:
        authentic, review, suspicious = CATEGORY_BANDS[category]
        if confidence < self.config.MIN_CONFIDENCE:
            return review
        if score >= self.config.AUTHENTIC_THRESHOLD:
            return authentic
        if score < self.config.SUSPICIOUS_THRESHOLD:
            return suspicious
        return review

    def not_applicable(self, category: ContentCategory) -> Classification:
        """Label for a category with no configured agents."""
        label = VerdictLabel.UNVERIFIED if category == ContentCategory.CLAIM else VerdictLabel.NOT_APPLICABLE
        return Classification(label, 0.0, self.templates.for_label(VerdictLabel.NOT_APPLICABLE.value))

    @staticmethod
    def corroborated_rating(results: List[AgentResult]) -> Optional[Tuple[FactCheckRating, int]]:
        """
        Majority rating across corroborating sources of successful agents.
        Returns:
            (rating, distinct agreeing domains), or None without usable corroboration
        """
        by_domain: Dict[str, Corroboration] = {}
        for result in results:
            if not result.succeeded:
                continue
            for item in result.corroborations:
                if item.rating == FactCheckRating.UNVERIFIED:
                    continue
                if item.credibility.tier == CredibilityTier.UNRELIABLE:
                    continue
                current = by_domain.get(item.credibility.domain)
                # one vote per domain: keep its most credible entry
                if current is None or item.credibility.score > current.credibility.score:
                    by_domain[item.credibility.domain] = item

        if not by_domain:
            return None

        counts: Dict[FactCheckRating, int] = defaultdict(int)
        credibility: Dict[FactCheckRating, int] = defaultdict(int)
        for item in by_domain.values():
            counts[item.rating] += 1
            credibility[item.rating] += item.credibility.score

        winner = max(
            counts,
            key=lambda rating: (counts[rating], credibility[rating], -CONSERVATIVE_ORDER.index(rating))
        )
        return winner, counts[winner]
