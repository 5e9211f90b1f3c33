import re
from typing import Any

from config.constants import RATE_LIMITS_PER_SECOND
from exceptions import AgentRejectedException
from models.agents import AgentResult
from models.credibility import CredibilityTier
from models.requests import VerificationRequest

from .base import ExternalAgent

YOUTUBE_URL_PATTERN = re.compile(
    r"^https?://(?:www\.|m\.)?(?:youtube\.com/(?:watch\?v=|shorts/|embed/)|youtu\.be/)[\w-]{6,}",
    re.IGNORECASE,
)


class ReverseImageSearchAgent(ExternalAgent):
    """
    Looks the image up with Google Custom Search (image search).

    An image already circulating on many other sites, or on known
    unreliable ones, is more likely to be recycled out of context.
    """

    calls_per_second = RATE_LIMITS_PER_SECOND.GOOGLE_CUSTOM_SEARCH

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        settings = self.deps.settings
        api_key = self.require(settings.GOOGLE_CUSTOM_SEARCH_API_KEY, "GOOGLE_CUSTOM_SEARCH_API_KEY not set")
        cx = self.require(settings.GOOGLE_CUSTOM_SEARCH_CX, "GOOGLE_CUSTOM_SEARCH_CX not set")
        media_url = self.require(request.media_url, "no image URL")

        data = await self.call_json(
            "GET", settings.GOOGLE_CUSTOM_SEARCH_ENDPOINT, deadline,
            params={"key": api_key, "cx": cx, "q": media_url, "searchType": "image", "num": 10},
        )
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")
        items = data.get("items") or []
        if not isinstance(items, list):
            raise self.invalid("'items' is not a list")

        origin = self.deps.credibility.extract_domain(media_url)
        pages = []
        for item in items:
            if not isinstance(item, dict):
                continue
            page = (item.get("image") or {}).get("contextLink") or item.get("link")
            if page:
                pages.append(page)

        records = [r for r in self.deps.credibility.score_many(pages) if r.domain and r.domain != origin]
        domains = {r.domain for r in records}

        if not domains:
            return self.result(0.1, 0.5, [])

        score = min(0.9, 0.2 + 0.07 * len(domains))
        indicators = ["image_reused_elsewhere"]
        if any(r.tier == CredibilityTier.UNRELIABLE for r in records):
            score += 0.2
            indicators.append("found_on_unreliable_source")
        return self.result(score, 0.6, indicators)


class VideoProvenanceAgent(ExternalAgent):
    """Availability and uploader of a YouTube video via the public oEmbed endpoint."""

    calls_per_second = RATE_LIMITS_PER_SECOND.YOUTUBE

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        media_url = self.require(request.media_url, "no video URL")
        if not YOUTUBE_URL_PATTERN.match(media_url):
            raise self.not_applicable("not a YouTube URL")

        try:
            data = await self.call_json(
                "GET", self.deps.settings.YOUTUBE_OEMBED_ENDPOINT, deadline,
                params={"url": media_url, "format": "json"},
            )
        except AgentRejectedException as e:
            if e.status_code in (401, 403, 404):
                # removed, private or embedding disabled
                return self.result(0.7, 0.6, ["video_unavailable"])
            raise

        return self._from_oembed(data)

    def _from_oembed(self, data: Any) -> AgentResult:
        if not isinstance(data, dict):
            raise self.invalid("expected a JSON object")
        if not data.get("title"):
            raise self.invalid("oEmbed response has no title")
        if not data.get("author_name"):
            return self.result(0.5, 0.4, ["unknown_uploader"])
        return self.result(0.2, 0.5, [])
