import re
from collections import Counter
from typing import List, Set
from math import sqrt

TOKEN_PATTERN = re.compile(r"[a-z0-9']+")


def tokenize(text: str) -> List[str]:
    """Lowercased word tokens."""
    if not text:
        return []
    return TOKEN_PATTERN.findall(text.lower())


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """Compute cosine similarity between two vectors."""
    if not vec1 or not vec2 or len(vec1) != len(vec2):
        return 0.0

    dot_product = 0.0
    mag_vec1_sq = 0.0
    mag_vec2_sq = 0.0

    for v1, v2 in zip(vec1, vec2):
        dot_product += v1 * v2
        mag_vec1_sq += v1**2
        mag_vec2_sq += v2**2

    mag_vec1 = sqrt(mag_vec1_sq)
    mag_vec2 = sqrt(mag_vec2_sq)

    if mag_vec1 == 0 or mag_vec2 == 0:
        return 0.0

    return dot_product / (mag_vec1 * mag_vec2)


def text_cosine_similarity(text1: str, text2: str) -> float:
    """Cosine similarity of bag-of-words term-frequency vectors."""
    counts1 = Counter(tokenize(text1))
    counts2 = Counter(tokenize(text2))
    vocabulary = sorted(set(counts1) | set(counts2))
    return cosine_similarity(
        [float(counts1[t]) for t in vocabulary],
        [float(counts2[t]) for t in vocabulary],
    )


def jaccard_similarity(tokens1: Set[str], tokens2: Set[str]) -> float:
    if not tokens1 or not tokens2:
        return 0.0
    union = tokens1 | tokens2
    return len(tokens1 & tokens2) / len(union)
