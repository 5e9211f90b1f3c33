from typing import Any, Dict, List

from config.constants import RATE_LIMITS_PER_SECOND
from models.agents import AgentResult
from models.credibility import Corroboration, FactCheckRating
from models.requests import VerificationRequest

from .base import ExternalAgent

COFACTS_QUERY = """
query SearchArticles($text: String!, $limit: Int) {
  ListArticles(
    filter: { moreLikeThis: { like: $text, minimumShouldMatch: "0%" } }
    orderBy: [{ _score: DESC }]
    first: $limit
  ) {
    edges {
      node {
        id
        text
        articleReplies(status: NORMAL) {
          reply { id type text }
        }
      }
      score
    }
  }
}
"""

ZERO_SHOT_LABELS = ["true", "false", "misleading", "unverified", "opinion"]


def normalize_rating(textual_rating: str) -> FactCheckRating:
    """Map a publisher's free-text rating onto TRUE / FALSE / MISLEADING / UNVERIFIED."""
    rating = (textual_rating or "").lower().strip()
    if not rating:
        return FactCheckRating.UNVERIFIED
    if any(term in rating for term in ("misleading", "half true", "mostly false", "partly false", "half-true")):
        return FactCheckRating.MISLEADING
    if any(term in rating for term in ("false", "incorrect", "pants on fire", "fake", "not true", "inaccurate")):
        return FactCheckRating.FALSE
    if any(term in rating for term in ("true", "correct", "accurate", "verified")):
        return FactCheckRating.TRUE
    return FactCheckRating.UNVERIFIED


class CommunityFactCheckAgent(ExternalAgent):
    """
    Community replies from the Cofacts GraphQL API.

    Similar reported articles are matched; the share of them answered as
    rumor drives the suspicion score, and the community consensus (if any)
    is reported as one corroboration.
    """

    calls_per_second = RATE_LIMITS_PER_SECOND.COFACTS
    ARTICLE_URL = "https://cofacts.tw/article/{id}"

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        endpoint = self.require(self.deps.settings.COFACTS_ENDPOINT, "COFACTS_ENDPOINT not set")
        text = self.require(request.text_under_review, "no text to look up")

        data = await self.call_json(
            "POST", endpoint, deadline,
            json={"query": COFACTS_QUERY, "variables": {"text": text, "limit": 10}},
        )
        articles = self._articles(data)
        answered = [a for a in articles if a["replies"]]
        if not answered:
            raise self.not_applicable("no community replies for this text")

        total = len(answered)
        rumor_rate = sum(1 for a in answered if "RUMOR" in a["replies"]) / total
        not_rumor_rate = sum(1 for a in answered if "NOT_RUMOR" in a["replies"]) / total
        opinion_rate = sum(1 for a in answered if "OPINIONATED" in a["replies"]) / total

        if rumor_rate > 0.6:
            score = 0.70 + (rumor_rate - 0.6) * 0.75
            consensus = FactCheckRating.FALSE
        elif rumor_rate > 0.4:
            score = 0.40 + (rumor_rate - 0.4) * 1.5
            consensus = None
        elif not_rumor_rate > 0.6:
            score = 0.10 + (1 - not_rumor_rate) * 0.25
            consensus = FactCheckRating.TRUE
        else:
            score = 0.30 + (rumor_rate - not_rumor_rate) * 0.5
            consensus = FactCheckRating.MISLEADING if opinion_rate > 0.5 else None

        indicators = []
        corroborations = []
        if consensus is not None:
            indicators.append(f"community_consensus_{consensus.value.lower()}")
            url = self.ARTICLE_URL.format(id=answered[0]["id"])
            corroborations.append(Corroboration(
                source_url=url,
                publisher="Cofacts",
                rating=consensus,
                credibility=self.deps.credibility.score(url),
            ))

        confidence = min(0.5 + total * 0.05, 0.9)
        return self.result(score, confidence, indicators, corroborations)

    def _articles(self, data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")
        errors = data.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise self.invalid(f"GraphQL error: {message}")
        try:
            edges = data["data"]["ListArticles"]["edges"]
            return [
                {
                    "id": edge["node"]["id"],
                    "replies": {
                        ar["reply"]["type"]
                        for ar in edge["node"].get("articleReplies") or []
                        if ar.get("reply") and ar["reply"].get("type")
                    },
                }
                for edge in edges
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise self.invalid(f"unexpected response shape: {e!r}")


class FactCheckIndexAgent(ExternalAgent):
    """Published fact-checks from the Google Fact Check Tools claim search."""

    calls_per_second = RATE_LIMITS_PER_SECOND.GOOGLE_FACT_CHECK

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        settings = self.deps.settings
        api_key = self.require(settings.GOOGLE_FACT_CHECK_API_KEY, "GOOGLE_FACT_CHECK_API_KEY not set")
        claim = self.require(request.claim_text, "no claim text")

        data = await self.call_json(
            "GET", settings.GOOGLE_FACT_CHECK_ENDPOINT, deadline,
            params={"query": claim, "key": api_key, "languageCode": "en"},
        )
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")

        corroborations = self._corroborations(data.get("claims") or [])
        if not corroborations:
            raise self.not_applicable("no published fact-checks")

        rated = [c for c in corroborations if c.rating != FactCheckRating.UNVERIFIED]
        if not rated:
            return self.result(0.5, 0.3, ["fact_checks_inconclusive"], corroborations)

        weights = [max(c.credibility.score, 1) for c in rated]
        suspicion = sum(
            w * {FactCheckRating.FALSE: 1.0, FactCheckRating.MISLEADING: 0.5}.get(c.rating, 0.0)
            for w, c in zip(weights, rated)
        ) / sum(weights)

        indicators = sorted({f"fact_checked_{c.rating.value.lower()}" for c in rated})
        confidence = min(0.95, 0.5 + 0.1 * len(rated))
        return self.result(suspicion, confidence, indicators, corroborations)

    def _corroborations(self, claims: Any) -> List[Corroboration]:
        if not isinstance(claims, list):
            raise self.invalid("'claims' is not a list")
        found = []
        for claim in claims:
            if not isinstance(claim, dict):
                continue
            reviews = claim.get("claimReview") or []
            if not isinstance(reviews, list):
                raise self.invalid("'claimReview' is not a list")
            for review in reviews:
                url = review.get("url") if isinstance(review, dict) else None
                if not url or not isinstance(url, str):
                    continue
                publisher = review.get("publisher") or {}
                if not isinstance(publisher, dict):
                    raise self.invalid(f"'publisher' is not an object: {publisher!r}")
                rating = review.get("textualRating")
                if rating is not None and not isinstance(rating, str):
                    raise self.invalid(f"'textualRating' is not a string: {rating!r}")
                try:
                    found.append(Corroboration(
                        source_url=url,
                        publisher=publisher.get("name") or publisher.get("site") or self.deps.credibility.extract_domain(url),
                        rating=normalize_rating(rating),
                        credibility=self.deps.credibility.score(url),
                    ))
                except ValueError as e:
                    raise self.invalid(f"unusable claim review: {e}")
        return found


class ZeroShotClaimAgent(ExternalAgent):
    """
    Hugging Face zero-shot classification of the claim.

    Suspicion = p(false) + p(misleading) + half of p(unverified) and p(opinion).
    Confidence is the probability of the top label.
    """

    calls_per_second = RATE_LIMITS_PER_SECOND.HUGGINGFACE

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        settings = self.deps.settings
        api_key = self.require(settings.HUGGINGFACE_API_KEY, "HUGGINGFACE_API_KEY not set")
        claim = self.require(request.claim_text, "no claim text")

        url = f"{settings.HUGGINGFACE_BASE_URL.rstrip('/')}/models/{settings.ZERO_SHOT_MODEL}"
        data = await self.call_json(
            "POST", url, deadline,
            json={"inputs": claim, "parameters": {"candidate_labels": ZERO_SHOT_LABELS}},
            headers={"Authorization": f"Bearer {api_key}"},
        )
        probabilities = self._probabilities(data)

        suspicion = (
            probabilities.get("false", 0.0)
            + probabilities.get("misleading", 0.0)
            + 0.5 * (probabilities.get("unverified", 0.0) + probabilities.get("opinion", 0.0))
        )
        top_label = max(probabilities, key=probabilities.get)
        return self.result(suspicion, probabilities[top_label], [f"zero_shot_{top_label}"])

    def _probabilities(self, data: Any) -> Dict[str, float]:
        if isinstance(data, list) and data:
            data = data[0]
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")
        labels = data.get("labels")
        scores = data.get("scores")
        if not isinstance(labels, list) or not isinstance(scores, list) or len(labels) != len(scores) or not labels:
            raise self.invalid("labels and scores missing or mismatched")
        probabilities = {}
        for label, score in zip(labels, scores):
            value = self.probability(score)
            if value is None or label not in ZERO_SHOT_LABELS:
                raise self.invalid(f"unexpected label or score: {label}={score}")
            probabilities[label] = value
        return probabilities
