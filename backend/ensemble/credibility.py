from typing import Dict, FrozenSet, Iterable, List
from urllib.parse import urlparse

from config.source_credibility import (
    CREDIBLE_DOMAINS,
    UNRELIABLE_DOMAINS,
    THROWAWAY_TLDS,
    URL_SHORTENERS,
    UNRELIABLE_SCORE,
)
from models.credibility import CredibilityTier, SourceCredibilityRecord


class CredibilityScorer:
    """Ranks external sources 0-100 from reference lists and URL heuristics."""

    def __init__(
        self,
        credible_domains: Dict[str, int] = None,
        unreliable_domains: FrozenSet[str] = None
    ):
        """
        Initialize credibility scorer.
        Args:
            credible_domains: Known credible domain -> score table
            unreliable_domains: Known unreliable domains
        """
        self.credible_domains = credible_domains if credible_domains is not None else CREDIBLE_DOMAINS
        self.unreliable_domains = unreliable_domains if unreliable_domains is not None else UNRELIABLE_DOMAINS

    @staticmethod
    def extract_domain(url: str) -> str:
        if not url:
            return ""
        hostname = urlparse(url).hostname or ""
        hostname = hostname.lower()
        return hostname[4:] if hostname.startswith("www.") else hostname

    def score(self, url: str) -> SourceCredibilityRecord:
        """
        Score a single source URL.
        Args:
            url: Source URL
        Returns:
            Immutable credibility record for the URL's domain
        """
        domain = self.extract_domain(url)

        if self._lookup(domain, self.unreliable_domains):
            return SourceCredibilityRecord(domain=domain, score=UNRELIABLE_SCORE, tier=CredibilityTier.UNRELIABLE)

        known = self._known_score(domain)
        if known is not None:
            return SourceCredibilityRecord(domain=domain, score=known, tier=self.tier_for(known))

        raw = (
            self._domain_age_score(domain) * 1.5
            + self._https_score(url) * 1.5
            + self._url_structure_score(url) * 2
        )
        score = max(0, min(100, round(raw)))
        return SourceCredibilityRecord(domain=domain, score=score, tier=self.tier_for(score))

    def score_many(self, urls: Iterable[str]) -> List[SourceCredibilityRecord]:
        return [self.score(url) for url in urls if url]

    @staticmethod
    def tier_for(score: float) -> CredibilityTier:
        if score >= 80:
            return CredibilityTier.HIGHLY_TRUSTED
        elif score >= 60:
            return CredibilityTier.TRUSTED
        elif score >= 40:
            return CredibilityTier.MODERATE
        elif score >= 20:
            return CredibilityTier.LOW
        else:
            return CredibilityTier.UNRELIABLE

    def _known_score(self, domain: str):
        # subdomains inherit the registrable domain's entry (edition.bbc.com -> bbc.com)
        parts = domain.split(".")
        for i in range(len(parts) - 1):
            candidate = ".".join(parts[i:])
            if candidate in self.credible_domains:
                return self.credible_domains[candidate]
        return None

    @staticmethod
    def _lookup(domain: str, domains: FrozenSet[str]) -> bool:
        return any(domain == d or domain.endswith("." + d) for d in domains)

    @classmethod
    def is_shortener(cls, domain: str) -> bool:
        """Whole-domain match: t.co is a shortener, nypost.com is not."""
        return cls._lookup(domain, URL_SHORTENERS)

    def _domain_age_score(self, domain: str) -> int:
        if self._known_score(domain) is not None:
            return 15
        if domain.rsplit(".", 1)[-1] in THROWAWAY_TLDS:
            return 2
        return 8

    @staticmethod
    def _https_score(url: str) -> int:
        if not url:
            return 0
        return 20 if url.lower().startswith("https") else 5

    @staticmethod
    def _url_structure_score(url: str) -> int:
        if not url:
            return 0
        parsed = urlparse(url)
        hostname = (parsed.hostname or "").lower()

        score = 10
        if CredibilityScorer.is_shortener(CredibilityScorer.extract_domain(url)):
            score -= 2
        if "redirect" in hostname or "short-url" in hostname:
            score -= 3
        if "-." in hostname or "--" in hostname:
            score -= 2
        if ".." in parsed.path or "//" in parsed.path:
            score -= 3
        return max(0, score)
