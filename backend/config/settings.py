from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AGENT_WEIGHTS_PATH = str(Path(__file__).parent / "agent_weights.json")


class Settings(BaseSettings):
    """Loads all environment variables into a single, accessible object."""
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    AGENT_WEIGHTS_PATH: str = DEFAULT_AGENT_WEIGHTS_PATH

    REDIS_URL: Optional[str] = None
    CACHE_DEFAULT_TTL: int = 3600
    CACHE_TTL_CLAIM: int = 600
    CACHE_TTL_IMAGE: int = 86400
    CACHE_TTL_VIDEO: int = 86400
    CACHE_TTL_REVIEW: Optional[int] = None

    HUGGINGFACE_API_KEY: Optional[str] = None
    HUGGINGFACE_BASE_URL: str = "https://api-inference.huggingface.co"
    ZERO_SHOT_MODEL: str = "facebook/bart-large-mnli"

    GOOGLE_FACT_CHECK_API_KEY: Optional[str] = None
    GOOGLE_FACT_CHECK_ENDPOINT: str = "https://factchecktools.googleapis.com/v1alpha1/claims:search"

    GOOGLE_CUSTOM_SEARCH_API_KEY: Optional[str] = None
    GOOGLE_CUSTOM_SEARCH_CX: Optional[str] = None
    GOOGLE_CUSTOM_SEARCH_ENDPOINT: str = "https://www.googleapis.com/customsearch/v1"

    COFACTS_ENDPOINT: str = "https://cofacts-api.g0v.tw/graphql"

    SVM_CLASSIFIER_ENDPOINT: Optional[str] = "http://localhost:5001/predict"
    SENTIMENT_ENDPOINT: Optional[str] = "http://localhost:5002/analyze"
    BERT_ENDPOINT: Optional[str] = "http://localhost:5003/classify"
    LISTING_SCRAPER_ENDPOINT: Optional[str] = "http://localhost:5004/scrape"
    MEDIA_FORENSICS_ENDPOINT: Optional[str] = "http://localhost:5005/analyze"

    YOUTUBE_OEMBED_ENDPOINT: str = "https://www.youtube.com/oembed"

    def cache_ttl_for(self, category: str) -> int:
        """TTL in seconds for verdicts of the given category."""
        name = getattr(category, "value", category)
        override = getattr(self, f"CACHE_TTL_{str(name).upper()}", None)
        return override if override else self.CACHE_DEFAULT_TTL

settings = Settings()
