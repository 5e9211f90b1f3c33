import hashlib
import json
from datetime import datetime
from typing import Any, Dict

from .validation import InputValidator


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        return InputValidator.normalize_for_fingerprint(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if hasattr(value, "value"):
        return _normalize(value.value)
    return value


def content_fingerprint(category: str, content: Dict[str, Any]) -> str:
    """
    Deterministic sha256 over the normalized content of a request.
    Args:
        category: Content category the request targets
        content: Content fields (anything that influences a verdict)
    Returns:
        Hex digest, identical across processes for identical content
    """
    document = {
        "category": _normalize(category),
        "content": _normalize(content),
    }
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
