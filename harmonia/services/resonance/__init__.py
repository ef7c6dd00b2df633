"""
Resonance colors - dual-timescale category memory projected onto a display color.
"""

from harmonia.services.resonance.categories import (
    RESONANCE_CATEGORIES,
    get_category_config,
    get_category_legend,
    interest_vector_to_category_weights,
    resolve_categories_for_topic,
)
from harmonia.services.resonance.engine import ResonanceColorEngine

__all__ = [
    "RESONANCE_CATEGORIES",
    "ResonanceColorEngine",
    "get_category_config",
    "get_category_legend",
    "interest_vector_to_category_weights",
    "resolve_categories_for_topic",
]
