from .similarity import cosine_similarity, text_cosine_similarity, jaccard_similarity, tokenize
from .fingerprint import content_fingerprint

__all__ = [
    "cosine_similarity",
    "text_cosine_similarity",
    "jaccard_similarity",
    "tokenize",
    "content_fingerprint",
]
