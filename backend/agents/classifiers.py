from typing import Any, List

from config.constants import RATE_LIMITS_PER_SECOND
from models.agents import AgentResult
from models.requests import VerificationRequest

from .base import ExternalAgent


class HostedReviewClassifierAgent(ExternalAgent):
    """
    Client for a self-hosted fake-review model.

    Request:  POST {"text": ..., "rating": ...}
    Response: {"fake_probability": 0-1 or 0-100, "confidence": ..., "red_flags": [...]}
    """

    endpoint_setting = "SVM_CLASSIFIER_ENDPOINT"
    calls_per_second = RATE_LIMITS_PER_SECOND.HOSTED_MODEL

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        endpoint = self.require(getattr(self.deps.settings, self.endpoint_setting), f"{self.endpoint_setting} not set")
        review = request.review
        if review is None or not review.text:
            raise self.not_applicable("no review text")

        data = await self.call_json(
            "POST", endpoint, deadline,
            json={"text": review.text, "rating": review.rating},
        )
        return self.parse(data, request)

    def parse(self, data: Any, request: VerificationRequest) -> AgentResult:
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")

        fake = self.probability(data.get("fake_probability", data.get("fake_score")))
        if fake is None:
            raise self.invalid("missing or out-of-range fake_probability")

        confidence = self.probability(data.get("confidence"))
        if confidence is None:
            # distance from the decision boundary
            confidence = abs(fake - 0.5) * 2

        return self.result(fake, confidence, self._flags(data.get("red_flags")))

    def _flags(self, raw: Any) -> List[str]:
        if not isinstance(raw, list):
            return []
        flags = []
        for flag in raw:
            if isinstance(flag, str):
                flags.append(f"{self.agent_id}:{flag}")
            elif isinstance(flag, dict) and flag.get("type"):
                flags.append(f"{self.agent_id}:{flag['type']}")
        return flags


class SvmClassifierAgent(HostedReviewClassifierAgent):
    endpoint_setting = "SVM_CLASSIFIER_ENDPOINT"


class BertClassifierAgent(HostedReviewClassifierAgent):
    endpoint_setting = "BERT_ENDPOINT"


class SentimentMismatchAgent(HostedReviewClassifierAgent):
    """
    Disagreement between the text's sentiment and its star rating.

    The sentiment service answers {"compound": -1..1}; a five-star review
    with strongly negative text (or the reverse) is suspicious.
    """

    endpoint_setting = "SENTIMENT_ENDPOINT"

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        if request.review is None or request.review.rating is None:
            raise self.not_applicable("no star rating to compare against")
        return await super().evaluate(request, deadline)

    def parse(self, data: Any, request: VerificationRequest) -> AgentResult:
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")
        compound = data.get("compound")
        if isinstance(compound, bool) or not isinstance(compound, (int, float)) or not -1.0 <= compound <= 1.0:
            raise self.invalid("missing or out-of-range compound score")

        expected = (request.review.rating - 3) / 2
        mismatch = abs(compound - expected) / 2
        indicators = ["sentiment_rating_mismatch"] if mismatch > 0.5 else []
        confidence = 0.5 + 0.4 * abs(compound)
        return self.result(mismatch, confidence, indicators)


class ListingScraperAgent(ExternalAgent):
    """
    Compares the review with what the store listing claims.

    Request:  POST {"url": listing_url, "review_text": ...}
    Response: {"mismatch_score": 0-1, "confidence": 0-1, "red_flags": [...]}
    """

    calls_per_second = RATE_LIMITS_PER_SECOND.HOSTED_MODEL

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        endpoint = self.require(self.deps.settings.LISTING_SCRAPER_ENDPOINT, "LISTING_SCRAPER_ENDPOINT not set")
        listing_url = self.require(request.listing_url, "no listing URL")
        review_text = request.review.text if request.review else None

        data = await self.call_json(
            "POST", endpoint, deadline,
            json={"url": listing_url, "review_text": review_text},
        )
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")

        mismatch = self.probability(data.get("mismatch_score"))
        if mismatch is None:
            raise self.invalid("missing or out-of-range mismatch_score")
        confidence = self.probability(data.get("confidence"))
        flags = [f for f in data.get("red_flags") or [] if isinstance(f, str)]
        if mismatch > 0.5:
            flags.insert(0, "listing_claims_mismatch")
        return self.result(mismatch, confidence if confidence is not None else 0.5, flags)


class MediaForensicsAgent(ExternalAgent):
    """
    Pixel and container level manipulation analysis by the forensics service.

    Request:  POST {"media_url": ..., "category": "IMAGE" | "VIDEO" | "REVIEW"}
    Response: {"manipulation_score": 0-1, "confidence": 0-1, "findings": [...]}
    """

    calls_per_second = RATE_LIMITS_PER_SECOND.HOSTED_MODEL

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        endpoint = self.require(self.deps.settings.MEDIA_FORENSICS_ENDPOINT, "MEDIA_FORENSICS_ENDPOINT not set")
        media_url = self.require(request.media_url, "no media URL")

        data = await self.call_json(
            "POST", endpoint, deadline,
            json={"media_url": media_url, "category": request.category.value},
        )
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")

        manipulation = self.probability(data.get("manipulation_score"))
        confidence = self.probability(data.get("confidence"))
        if manipulation is None or confidence is None:
            raise self.invalid("missing manipulation_score or confidence")

        findings = [f for f in data.get("findings") or [] if isinstance(f, str)]
        if manipulation > 0.5:
            findings.insert(0, "manipulation_detected")
        return self.result(manipulation, confidence, findings)
