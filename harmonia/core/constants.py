"""
Core constants used across the engine. Keep these simple and documented.
"""

from typing import Final

MS_PER_DAY: Final[float] = 24 * 60 * 60 * 1000.0
MS_PER_MINUTE: Final[float] = 60 * 1000.0
MS_PER_HOUR: Final[float] = 60 * MS_PER_MINUTE

# Interest profiles
MIN_HALF_LIFE_DAYS: Final[float] = 1.0

# Feed labels (cosine similarity against the viewer's interest vector)
RESONANT_THRESHOLD: Final[float] = 0.6
EXPLORATORY_THRESHOLD: Final[float] = 0.25

# Split between the primary pool and the curiosity pool
CANDIDATE_SPLIT_THRESHOLD: Final[float] = 0.2

CURIOSITY_RATIO_MIN: Final[float] = 0.05
CURIOSITY_RATIO_MAX: Final[float] = 0.5

# Content tags that mark an item as flagged when the nsfw flag is unset
FLAGGED_TAG_PATTERN: Final[str] = r"nsfw|18\+|mature"

# Engagement weights applied to the viewer's interest profile
ENGAGEMENT_INTEREST_WEIGHTS: Final[dict[str, float]] = {
    "view": 0.05,
    "like": 0.12,
    "comment": 0.18,
    "share": 0.25,
}

# Engagement boosts applied to the content's engagement score
ENGAGEMENT_SCORE_BOOSTS: Final[dict[str, float]] = {
    "view": 0.2,
    "like": 1.0,
    "comment": 1.5,
    "share": 2.0,
}

COMMENT_SCORE_BOOST: Final[float] = 0.5

# Resonance composite
RECENT_BIAS: Final[float] = 0.65
BASELINE_BIAS: Final[float] = 1 - RECENT_BIAS
RECENT_CONTRIBUTION: Final[float] = 1.0
BASELINE_CONTRIBUTION: Final[float] = 0.4
WEIGHT_PRUNE_THRESHOLD: Final[float] = 1e-4

# Intensity is clamped to this range, then mapped onto the lerp fraction range
INTENSITY_MIN: Final[float] = 0.05
INTENSITY_MAX: Final[float] = 1.5
LERP_MIN: Final[float] = 0.25
LERP_MAX: Final[float] = 0.75

RESONANCE_DEFAULT_COLOR: Final[str] = "#6366f1"
RESONANCE_DEFAULT_CATEGORY: Final[str] = "social"
