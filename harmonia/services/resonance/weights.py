import math
from collections.abc import Mapping

from harmonia.core.constants import WEIGHT_PRUNE_THRESHOLD
from harmonia.models.resonance import CategoryWeights


def normalize_weights(weights: Mapping[str, float]) -> CategoryWeights:
    """
    Scale positive, finite weights to sum to 1.

    Everything else is dropped. Returns {} when nothing positive remains.
    """
    positive = {key: value for key, value in weights.items() if value and math.isfinite(value) and value > 0}
    total = sum(positive.values())
    if total <= 0:
        return {}
    return {key: value / total for key, value in positive.items()}


def decay_weights(
    weights: Mapping[str, float], last_updated: float | None, timestamp: float, half_life: float
) -> CategoryWeights:
    """
    Decay every weight by exp(-elapsed / half_life) since last_updated.

    Resonance memories fade on this e-folding curve rather than the true
    half-life the interest store uses. Weights that end up at or below the
    prune threshold are dropped.
    """
    if not last_updated or not weights:
        return dict(weights)
    elapsed = max(0.0, timestamp - last_updated)
    if elapsed == 0:
        return dict(weights)

    factor = math.exp(-elapsed / half_life) if half_life > 0 else 1.0
    decayed: CategoryWeights = {}
    for key, value in weights.items():
        if value <= WEIGHT_PRUNE_THRESHOLD:
            continue
        next_value = value * factor
        if next_value > WEIGHT_PRUNE_THRESHOLD:
            decayed[key] = next_value
    return decayed
