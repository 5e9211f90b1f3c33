import re

from models.agents import AgentResult, ScoreDirection
from models.credibility import CredibilityTier
from models.requests import VerificationRequest

from .base import BaseAgent

SENSATIONAL_PATTERNS = [
    re.compile(r"shocking", re.IGNORECASE),
    re.compile(r"you won'?t believe", re.IGNORECASE),
    re.compile(r"doctors hate", re.IGNORECASE),
    re.compile(r"\bsecret\b", re.IGNORECASE),
    re.compile(r"\brevealed\b", re.IGNORECASE),
]

CONSPIRACY_PATTERNS = [
    re.compile(r"cover.?up", re.IGNORECASE),
    re.compile(r"they don'?t want you to know", re.IGNORECASE),
    re.compile(r"wake up", re.IGNORECASE),
    re.compile(r"do your own research", re.IGNORECASE),
]

URGENCY_PATTERN = re.compile(r"\b(urgent|immediately|today only|act fast|share before)\b", re.IGNORECASE)
ABSOLUTE_PATTERN = re.compile(r"\b(never|always|completely|totally|absolutely|100%)\b", re.IGNORECASE)
ALL_CAPS_PATTERN = re.compile(r"\b[A-Z]{4,}\b")


class SensationalLanguageAgent(BaseAgent):
    """Emotional trigger phrases and shouting in a claim or video transcript."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        text = request.text_under_review
        if not text:
            raise self.not_applicable("no claim text or transcript")

        score = 0.0
        indicators = []

        sensational = sum(1 for p in SENSATIONAL_PATTERNS if p.search(text))
        if sensational:
            score += 0.2 * sensational
            indicators.append("sensational_language")

        conspiracy = sum(1 for p in CONSPIRACY_PATTERNS if p.search(text))
        if conspiracy:
            score += 0.2 * conspiracy
            indicators.append("conspiracy_framing")

        if URGENCY_PATTERN.search(text):
            score += 0.1
            indicators.append("urgency_pressure")

        if len(ABSOLUTE_PATTERN.findall(text)) > 2:
            score += 0.1
            indicators.append("absolute_claims")

        if text.count("!") > 3:
            score += 0.15
            indicators.append("excessive_punctuation")

        if len(ALL_CAPS_PATTERN.findall(text)) > 2:
            score += 0.1
            indicators.append("excessive_caps")

        words = len(text.split())
        confidence = min(0.8, 0.3 + words / 200)
        return self.result(score, confidence, indicators)


class CitedSourceCredibilityAgent(BaseAgent):
    """
    Credibility of the URLs a claim cites.

    Score is in the authenticity direction: the mean credibility of the
    cited sources on a 0-1 scale. A claim citing nothing gets a weak
    low-authenticity result rather than a failure.
    """

    direction = ScoreDirection.AUTHENTICITY

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        if not request.claim_text and not request.cited_urls:
            raise self.not_applicable("no claim text")

        if not request.cited_urls:
            return self.result(0.4, 0.3, ["no_sources_cited"])

        records = self.deps.credibility.score_many(request.cited_urls)
        if not records:
            return self.result(0.4, 0.3, ["no_sources_cited"])

        mean = sum(r.score for r in records) / len(records) / 100
        indicators = []

        if any(r.tier == CredibilityTier.UNRELIABLE for r in records):
            indicators.append("unreliable_source_cited")
        if mean < 0.4:
            indicators.append("low_credibility_sources")
        elif mean >= 0.8:
            indicators.append("highly_trusted_sources")
        if any(self.deps.credibility.is_shortener(r.domain) for r in records):
            indicators.append("url_shortener_cited")

        distinct = len({r.domain for r in records})
        confidence = min(0.9, 0.5 + 0.1 * distinct)
        return self.result(mean, confidence, indicators)
