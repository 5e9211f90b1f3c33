import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from .settings import Settings, settings
from .constants import (
    CLASSIFIER_CONFIG,
    CORROBORATION_CONFIG,
    HTTP_CONFIG,
    RATE_LIMITS_PER_SECOND,
    RECOMMENDATIONS,
    CACHE_CONFIG,
)

COLLABORATOR_KEYS = {
    "zero_shot_claim": "HUGGINGFACE_API_KEY",
    "fact_check_index": "GOOGLE_FACT_CHECK_API_KEY",
    "reverse_image_search": "GOOGLE_CUSTOM_SEARCH_API_KEY",
}


def check_api_keys_on_startup(active_settings: Settings = None):
    """Log which external collaborators are unconfigured."""
    active_settings = active_settings or settings
    missing_keys = []
    for agent_id, key_name in COLLABORATOR_KEYS.items():
        if not getattr(active_settings, key_name, None):
            missing_keys.append(f"{key_name} ({agent_id})")

    if missing_keys:
        logger.warning(
            f"Missing API keys: {', '.join(missing_keys)}. "
            "Those agents will report AGENT_NOT_APPLICABLE."
        )
    else:
        logger.info("All external collaborator keys are configured.")
    return missing_keys

__all__ = [
    "logger",
    "Settings",
    "settings",
    "check_api_keys_on_startup",
    "CLASSIFIER_CONFIG",
    "CORROBORATION_CONFIG",
    "HTTP_CONFIG",
    "RATE_LIMITS_PER_SECOND",
    "RECOMMENDATIONS",
    "CACHE_CONFIG",
]
