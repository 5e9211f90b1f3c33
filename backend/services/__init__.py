from .cache import CacheStore, InMemoryCacheStore, RedisCacheStore, build_cache_store, cache_key
from .orchestration import Orchestrator
from .verification_service import VerificationService

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
    "cache_key",
    "Orchestrator",
    "VerificationService",
]
