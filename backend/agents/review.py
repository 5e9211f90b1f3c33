"""
Local review heuristics: review text, posting timing, rating distribution,
submitter behavior and duplicate content. All scores are suspicion scores.
"""
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from models.agents import AgentResult
from models.requests import RelatedReview, VerificationRequest
from utils.similarity import jaccard_similarity, text_cosine_similarity, tokenize

from .base import BaseAgent

GPT_PATTERNS = [
    re.compile(r"as an? (ai|bot|user|customer)", re.IGNORECASE),
    re.compile(r"i (recently|highly) recommend", re.IGNORECASE),
    re.compile(r"this app (truly|really|definitely) (stands out|exceeds)", re.IGNORECASE),
    re.compile(r"the (interface|design|experience) is (intuitive|seamless|user-friendly)", re.IGNORECASE),
    re.compile(r"overall,? i('m| am) (impressed|satisfied|pleased)", re.IGNORECASE),
    re.compile(r"in conclusion", re.IGNORECASE),
    re.compile(r"highly recommended? for (anyone|everyone)", re.IGNORECASE),
]

TEMPLATE_PHRASES = [
    "great app",
    "highly recommend",
    "easy to use",
    "must have",
    "works perfectly",
    "love it",
    "5 stars",
    "best app ever",
]

SPAM_KEYWORDS = [
    "click here",
    "download now",
    "limited time",
    "free gift",
    "promo code",
    "discount",
    "coupon",
    "http://",
    "https://",
    "bit.ly",
]

MIN_TEXT_LENGTH = 10
NEAR_DUPLICATE_THRESHOLD = 0.85


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _timestamps(request: VerificationRequest) -> List[datetime]:
    stamps = [_aware(r.created_at) for r in request.related_reviews if r.created_at]
    if request.review and request.review.created_at:
        stamps.append(_aware(request.review.created_at))
    return sorted(stamps)


class ReviewLexicalAgent(BaseAgent):
    """Template, LLM-style and spam phrasing in the review text."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        text = request.review.text if request.review else None
        if text is None:
            raise self.not_applicable("no review text")

        if len(text) < MIN_TEXT_LENGTH:
            return self.result(0.5, 0.4, ["text_too_short"])

        lowered = text.lower()
        score = 0.0
        indicators = []

        if sum(1 for p in GPT_PATTERNS if p.search(lowered)) >= 2:
            score += 0.35
            indicators.append("gpt_style_phrasing")

        if sum(1 for phrase in TEMPLATE_PHRASES if phrase in lowered) >= 3:
            score += 0.25
            indicators.append("template_phrasing")

        if any(keyword in lowered for keyword in SPAM_KEYWORDS):
            score += 0.40
            indicators.append("spam_keywords")

        # more text, more evidence either way
        confidence = min(0.9, 0.5 + len(tokenize(text)) / 100)
        return self.result(score, confidence, indicators)


class ReviewTimingAgent(BaseAgent):
    """Bursts, same-minute clusters and coordinated posting among reviews of the same app."""

    BURST_SIZE = 10
    BURST_WINDOW = timedelta(hours=1)
    SAME_MINUTE_LIMIT = 5
    VELOCITY_LIMIT = 100

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        stamps = _timestamps(request)
        if len(stamps) < 3:
            raise self.not_applicable("fewer than 3 timestamped reviews")

        score = 0.0
        indicators = []

        for i in range(len(stamps) - self.BURST_SIZE + 1):
            if stamps[i + self.BURST_SIZE - 1] - stamps[i] < self.BURST_WINDOW:
                score += 0.30
                indicators.append("review_burst")
                break

        per_minute = Counter(s.replace(second=0, microsecond=0) for s in stamps)
        if max(per_minute.values()) >= self.SAME_MINUTE_LIMIT:
            score += 0.25
            indicators.append("same_minute_cluster")

        window_start = stamps[-1] - timedelta(hours=24)
        if sum(1 for s in stamps if s > window_start) > self.VELOCITY_LIMIT:
            score += 0.20
            indicators.append("abnormal_velocity")

        if self._coordinated(request.related_reviews):
            score += 0.30
            indicators.append("coordinated_campaign")

        confidence = min(0.9, 0.4 + len(stamps) / 50)
        return self.result(score, confidence, indicators)

    @staticmethod
    def _coordinated(related: List[RelatedReview]) -> bool:
        """More than 10% of reviewers posted several reviews within one day."""
        if len(related) < 10:
            return False
        by_user = {}
        for review in related:
            if review.user_id and review.created_at:
                by_user.setdefault(review.user_id, []).append(_aware(review.created_at))
        if not by_user:
            return False
        clustered = sum(
            1 for times in by_user.values()
            if len(times) > 1 and max(times) - min(times) < timedelta(days=1)
        )
        return clustered / len(by_user) > 0.1


class RatingDistributionAgent(BaseAgent):

    MIN_REVIEWS = 10
    STREAK_LENGTH = 20

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        related = sorted(
            (r for r in request.related_reviews if r.rating is not None),
            key=lambda r: _aware(r.created_at) if r.created_at else datetime.min.replace(tzinfo=timezone.utc),
        )
        ratings = [r.rating for r in related]
        if request.review and request.review.rating is not None:
            ratings.append(request.review.rating)

        if len(ratings) < self.MIN_REVIEWS:
            raise self.not_applicable(f"fewer than {self.MIN_REVIEWS} rated reviews")

        score = 0.0
        indicators = []
        total = len(ratings)

        if sum(1 for r in ratings if r == 5) / total > 0.8:
            score += 0.25
            indicators.append("five_star_concentration")

        if sum(1 for r in ratings if r in (1, 5)) / total > 0.75:
            score += 0.20
            indicators.append("rating_polarization")

        recent = ratings[-self.STREAK_LENGTH:]
        if len(recent) == self.STREAK_LENGTH and all(r == 5 for r in recent):
            score += 0.30
            indicators.append("recent_five_star_streak")

        confidence = min(0.9, 0.3 + total / 100)
        return self.result(score, confidence, indicators)


class SubmitterBehaviorAgent(BaseAgent):
    """Account age at review time, bulk reviewing and single-purpose accounts."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        submitter = request.submitter
        if submitter is None:
            raise self.not_applicable("no submitter metadata")

        score = 0.0
        indicators = []
        signals_checked = 0

        review_time = self._review_time(request)
        if submitter.account_created_at and review_time:
            signals_checked += 1
            if review_time - _aware(submitter.account_created_at) < timedelta(hours=24):
                score += 0.30
                indicators.append("new_account")

        if submitter.total_reviews is not None:
            signals_checked += 1
            if submitter.total_reviews > 50:
                score += 0.15
                indicators.append("bulk_reviewer")

        if submitter.reviewed_apps:
            signals_checked += 1
            if len(set(submitter.reviewed_apps)) == 1:
                score += 0.20
                indicators.append("single_purpose_account")

        if signals_checked == 0:
            raise self.not_applicable("submitter metadata has no behavioral fields")

        confidence = 0.3 + 0.2 * signals_checked
        return self.result(score, confidence, indicators)

    @staticmethod
    def _review_time(request: VerificationRequest) -> Optional[datetime]:
        if request.review and request.review.created_at:
            return _aware(request.review.created_at)
        return None


class DuplicateContentAgent(BaseAgent):
    """Exact and near-duplicate text between this review and others of the same app."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        text = request.review.text if request.review else None
        if not text:
            raise self.not_applicable("no review text")

        others = [r.text for r in request.related_reviews if r.text]
        if not others:
            raise self.not_applicable("no related reviews to compare against")

        normalized = " ".join(text.lower().split())
        tokens = set(tokenize(text))
        exact = 0
        near = 0

        for other in others:
            if " ".join(other.lower().split()) == normalized:
                exact += 1
                continue
            if (
                jaccard_similarity(tokens, set(tokenize(other))) > NEAR_DUPLICATE_THRESHOLD
                or text_cosine_similarity(text, other) > 0.95
            ):
                near += 1

        score = 0.0
        indicators = []
        if exact:
            score = 0.8
            indicators.append("exact_duplicate")
        elif near:
            score = 0.6
            indicators.append("near_duplicate")
        if exact + near > 1:
            score += min(0.2, 0.05 * (exact + near - 1))

        confidence = min(0.9, 0.4 + 0.05 * len(others))
        return self.result(score, confidence, indicators)
