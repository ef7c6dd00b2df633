"""
Pure helpers over sparse interest vectors (topic -> weight mappings).

Nothing here holds state; every function returns a new mapping.
"""

import math
from collections.abc import Iterable, Mapping

from loguru import logger

InterestVector = dict[str, float]


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp value into [minimum, maximum]."""
    return min(max(value, minimum), maximum)


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity over the union of both key sets.

    Returns 0.0 when either vector is empty or has zero magnitude.
    """
    keys = set(a) | set(b)
    if not keys:
        return 0.0

    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for key in keys:
        value_a = a.get(key, 0.0)
        value_b = b.get(key, 0.0)
        dot += value_a * value_b
        mag_a += value_a * value_a
        mag_b += value_b * value_b

    if mag_a == 0 or mag_b == 0:
        return 0.0

    # Rounding can push |a.a| / (|a||a|) a hair past 1
    return clamp(dot / (math.sqrt(mag_a) * math.sqrt(mag_b)), -1.0, 1.0)


def normalize_vector(vector: Mapping[str, float]) -> InterestVector:
    """L1-normalize a vector. A zero-sum vector is returned unchanged."""
    total = sum(abs(value) for value in vector.values())
    if total == 0:
        return dict(vector)
    return {key: value / total for key, value in vector.items()}


def merge_interest_vectors(base: Mapping[str, float], delta: Mapping[str, float], weight: float) -> InterestVector:
    """Add delta * weight onto base, clamping every touched topic into [0, 1]."""
    result = dict(base)
    for key, value in delta.items():
        result[key] = clamp(result.get(key, 0.0) + value * weight, 0.0, 1.0)
    return result


def sanitize_vector(vector: Mapping[str, float] | None) -> InterestVector:
    """
    Lowercase and trim topic keys and drop values that are not finite numbers.

    Keys that collapse onto the same topic are summed.
    """
    if not vector:
        return {}

    cleaned: InterestVector = {}
    for topic, value in vector.items():
        key = str(topic).strip().lower()
        if not key:
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Dropping non-numeric weight for topic '{key}': {value!r}")
            continue
        if not math.isfinite(number):
            logger.warning(f"Dropping non-finite weight for topic '{key}'")
            continue
        cleaned[key] = cleaned.get(key, 0.0) + number
    return cleaned


def build_interest_vector_from_tags(tags: Iterable[str]) -> InterestVector:
    """Spread equal weight over trimmed, lowercased tags and L1-normalize."""
    tags = list(tags)
    if not tags:
        return {}

    weight = 1 / len(tags)
    vector: InterestVector = {}
    for tag in tags:
        trimmed = tag.strip().lower()
        if not trimmed:
            continue
        vector[trimmed] = vector.get(trimmed, 0.0) + weight
    return normalize_vector(vector)
