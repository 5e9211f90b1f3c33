from typing import Dict, Type

from .base import Agent, AgentDependencies, BaseAgent, ExternalAgent
from .http import AgentHTTPClient
from .claims import CitedSourceCredibilityAgent, SensationalLanguageAgent
from .classifiers import (
    BertClassifierAgent,
    ListingScraperAgent,
    MediaForensicsAgent,
    SentimentMismatchAgent,
    SvmClassifierAgent,
)
from .fact_check import CommunityFactCheckAgent, FactCheckIndexAgent, ZeroShotClaimAgent
from .media import MediaMetadataAgent
from .network import DeviceFingerprintAgent, NetworkAnalysisAgent
from .review import (
    DuplicateContentAgent,
    RatingDistributionAgent,
    ReviewLexicalAgent,
    ReviewTimingAgent,
    SubmitterBehaviorAgent,
)
from .search import ReverseImageSearchAgent, VideoProvenanceAgent

AGENT_CLASSES: Dict[str, Type[BaseAgent]] = {
    "review_lexical": ReviewLexicalAgent,
    "review_timing": ReviewTimingAgent,
    "rating_distribution": RatingDistributionAgent,
    "submitter_behavior": SubmitterBehaviorAgent,
    "network_ip": NetworkAnalysisAgent,
    "duplicate_content": DuplicateContentAgent,
    "device_fingerprint": DeviceFingerprintAgent,
    "svm_classifier": SvmClassifierAgent,
    "sentiment_mismatch": SentimentMismatchAgent,
    "bert_classifier": BertClassifierAgent,
    "listing_scraper": ListingScraperAgent,
    "review_media_forensics": MediaForensicsAgent,
    "community_factcheck": CommunityFactCheckAgent,
    "sensational_language": SensationalLanguageAgent,
    "cited_source_credibility": CitedSourceCredibilityAgent,
    "zero_shot_claim": ZeroShotClaimAgent,
    "fact_check_index": FactCheckIndexAgent,
    "media_metadata": MediaMetadataAgent,
    "media_forensics": MediaForensicsAgent,
    "reverse_image_search": ReverseImageSearchAgent,
    "video_provenance": VideoProvenanceAgent,
}

__all__ = [
    "Agent",
    "AgentDependencies",
    "AgentHTTPClient",
    "BaseAgent",
    "ExternalAgent",
    "AGENT_CLASSES",
]
