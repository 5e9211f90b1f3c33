import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).parent.parent))

from agents import Agent, AgentDependencies
from config import Settings
from models.agents import AgentResult, ScoreDirection
from models.credibility import Corroboration
from models.requests import ContentCategory, VerificationRequest
from registry import AgentRegistry


class StubAgent(Agent):
    """Agent with scripted behavior: fixed result, optional delay, optional exception."""

    def __init__(
        self,
        agent_id: str,
        score: float = 0.1,
        confidence: float = 0.9,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        direction: ScoreDirection = ScoreDirection.SUSPICION,
        indicators: Optional[List[str]] = None,
        corroborations: Optional[List[Corroboration]] = None
    ):
        self.agent_id = agent_id
        self.score = score
        self.confidence = confidence
        self.delay = delay
        self.error = error
        self.direction = direction
        self.indicators = indicators or []
        self.corroborations = corroborations or []
        self.calls = 0
        self.cancelled = False

    async def analyze(self, request: VerificationRequest, deadline: float) -> AgentResult:
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return AgentResult(
            agent_id=self.agent_id,
            score=self.score,
            confidence=self.confidence,
            direction=self.direction,
            indicators=self.indicators,
            corroborations=self.corroborations,
        )


@pytest.fixture
def stub_agent():
    """Factory for StubAgent instances."""
    return StubAgent


@pytest.fixture
def build_registry():
    """Build a registry of stub agents: entries are (agent, weight) or (agent, weight, timeout)."""
    def _build(entries, category: ContentCategory = ContentCategory.REVIEW) -> AgentRegistry:
        table = {"version": "test", "agents": []}
        classes = {}
        for entry in entries:
            agent, weight = entry[0], entry[1]
            timeout = entry[2] if len(entry) > 2 else 1.0
            table["agents"].append({
                "id": agent.agent_id,
                "tier": "CORE",
                "weight": weight,
                "applies_to": [category.value],
                "timeout_seconds": timeout,
            })
            classes[agent.agent_id] = lambda agent_id, deps, _agent=agent: _agent
        return AgentRegistry(table, agent_classes=classes)
    return _build


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        HUGGINGFACE_API_KEY="hf_test",
        GOOGLE_FACT_CHECK_API_KEY="gfc_test",
        GOOGLE_CUSTOM_SEARCH_API_KEY="gcs_test",
        GOOGLE_CUSTOM_SEARCH_CX="cx_test",
        SVM_CLASSIFIER_ENDPOINT="http://models.test/svm",
        SENTIMENT_ENDPOINT="http://models.test/sentiment",
        BERT_ENDPOINT="http://models.test/bert",
        LISTING_SCRAPER_ENDPOINT="http://models.test/scrape",
        MEDIA_FORENSICS_ENDPOINT="http://models.test/forensics",
        COFACTS_ENDPOINT="http://cofacts.test/graphql",
    )


@pytest.fixture
def deps(test_settings):
    return AgentDependencies(settings=test_settings)


@pytest.fixture
def review_request():
    return VerificationRequest(
        category=ContentCategory.REVIEW,
        review={
            "text": "Great app, works perfectly. Syncs my notes across devices without issues.",
            "rating": 5,
            "created_at": "2024-03-01T12:00:00+00:00",
            "app_id": "com.example.notes",
        },
        submitter={
            "user_id": "u-1",
            "account_created_at": "2023-01-10T08:00:00+00:00",
            "total_reviews": 12,
            "reviewed_apps": ["com.example.notes", "com.example.maps"],
            "ip_address": "81.2.69.160",
            "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/122.0 Safari/537.36",
        },
    )


@pytest.fixture
def claim_request():
    return VerificationRequest(
        category=ContentCategory.CLAIM,
        claim_text="The city council approved the new transit budget on Tuesday.",
        cited_urls=["https://www.reuters.com/world/transit-budget"],
    )


@pytest.fixture
def image_request():
    return VerificationRequest(
        category=ContentCategory.IMAGE,
        media_url="https://images.example.com/photo.jpg",
        media_metadata={"DateTimeOriginal": "2024:02:11 09:30:00", "Make": "Canon", "Model": "EOS R6"},
    )


@pytest.fixture
def test_client():
    """TestClient with startup and shutdown events run."""
    import main
    with TestClient(main.app) as client:
        yield client
