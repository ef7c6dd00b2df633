"""
Static resonance taxonomy and the topic -> category resolver.

Resolution order for a topic:
1. exact keyword lookup in a precomputed index
2. whole-word match against every category's keywords (all matches returned)
3. ordered substring rules
4. the default category
"""

import re
from collections.abc import Mapping
from typing import NamedTuple

from harmonia.core.constants import RESONANCE_DEFAULT_CATEGORY, RESONANCE_DEFAULT_COLOR
from harmonia.models.resonance import CategoryWeights, ResonanceCategory
from harmonia.services.resonance.weights import normalize_weights
from harmonia.utils.color import blend_colors
from harmonia.utils.vector import normalize_vector, sanitize_vector

RESONANCE_CATEGORIES: tuple[ResonanceCategory, ...] = (
    ResonanceCategory(
        id="art",
        label="Art & Visuals",
        description="Illustration, design, photography, generative visuals, galleries.",
        color="#7c3aed",
        keywords=(
            "art",
            "visual",
            "illustration",
            "design",
            "gallery",
            "aesthetic",
            "painting",
            "render",
            "3d",
            "vr",
            "ar",
            "graphic",
            "creative",
            "architecture",
            "fashion",
        ),
    ),
    ResonanceCategory(
        id="music",
        label="Music & Audio",
        description="Composition, performance, synthesis, sonic experimentation.",
        color="#2563eb",
        keywords=(
            "music",
            "audio",
            "sound",
            "song",
            "album",
            "beat",
            "dj",
            "synth",
            "vocal",
            "melody",
            "rhythm",
            "orchestra",
            "podcast",
            "ambient",
        ),
    ),
    ResonanceCategory(
        id="science",
        label="Science & Engineering",
        description="Research, code, robotics, quantum systems, hardware.",
        color="#06b6d4",
        keywords=(
            "science",
            "engineering",
            "tech",
            "technology",
            "coding",
            "code",
            "software",
            "hardware",
            "robot",
            "quantum",
            "data",
            "analysis",
            "biology",
            "physics",
            "chemistry",
            "space",
            "nasa",
            "ai",
            "machine learning",
            "ml",
            "dev",
            "cyber",
        ),
    ),
    ResonanceCategory(
        id="philosophy",
        label="Philosophy & Spirituality",
        description="Meditation, ethics, consciousness, metaphysics, myth.",
        color="#facc15",
        keywords=(
            "philosophy",
            "spiritual",
            "spirituality",
            "meditation",
            "mindfulness",
            "consciousness",
            "ethics",
            "ritual",
            "myth",
            "ancestral",
            "wisdom",
            "psychology",
            "esoteric",
            "metaphysics",
            "sacred",
        ),
    ),
    ResonanceCategory(
        id="social",
        label="Social & Community",
        description="Community building, collaboration, mutual aid, dialogue.",
        color="#ec4899",
        keywords=(
            "community",
            "social",
            "mutual aid",
            "collaboration",
            "cooperative",
            "relationship",
            "connection",
            "network",
            "allyship",
            "support",
            "organizing",
            "together",
            "gathering",
            "story",
            "friend",
            "chat",
            "message",
        ),
    ),
    ResonanceCategory(
        id="comedy",
        label="Comedy & Entertainment",
        description="Humor, playful media, games, light-hearted resonance.",
        color="#f97316",
        keywords=(
            "comedy",
            "humor",
            "funny",
            "meme",
            "entertainment",
            "game",
            "gaming",
            "play",
            "joy",
            "laughter",
            "festival",
            "party",
            "dance",
            "fun",
            "celebration",
        ),
    ),
    ResonanceCategory(
        id="news",
        label="News & Global Events",
        description="Current events, policy, climate, social impact briefings.",
        color="#f43f5e",
        keywords=(
            "news",
            "politics",
            "policy",
            "climate",
            "global",
            "crisis",
            "justice",
            "activism",
            "economy",
            "finance",
            "geopolitics",
            "report",
            "update",
            "press",
            "world",
        ),
    ),
)

CATEGORY_IDS: tuple[str, ...] = tuple(category.id for category in RESONANCE_CATEGORIES)

_CATEGORIES_BY_ID: dict[str, ResonanceCategory] = {category.id: category for category in RESONANCE_CATEGORIES}

_KEYWORD_INDEX: dict[str, str] = {
    keyword.lower(): category.id for category in RESONANCE_CATEGORIES for keyword in category.keywords
}

# One alternation per category, compiled once
_WORD_MATCHERS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (
        category.id,
        re.compile(r"\b(?:" + "|".join(re.escape(keyword.lower()) for keyword in category.keywords) + r")\b"),
    )
    for category in RESONANCE_CATEGORIES
)


class SubstringRule(NamedTuple):
    """Fallback: the topic contains any of the tokens."""

    category: str
    tokens: tuple[str, ...]

    def matches(self, topic: str) -> bool:
        return any(token in topic for token in self.tokens)


# Order matters: the first matching rule wins
FALLBACK_RULES: tuple[SubstringRule, ...] = (
    SubstringRule("art", ("art", "visual")),
    SubstringRule("music", ("music", "audio", "sound")),
    SubstringRule("science", ("science", "tech", "code", "engineering", "robot", "quantum", "ai", "data", "dev")),
    SubstringRule("philosophy", ("philosophy", "spirit", "meditat", "mindful", "conscious", "myth", "ethic")),
    SubstringRule("comedy", ("comedy", "humor", "meme", "fun", "game", "play", "entertain")),
    SubstringRule("news", ("news", "politic", "policy", "climate", "global", "event", "report")),
    SubstringRule("social", ("community", "social", "friend", "chat", "message", "gather", "collab", "connect")),
)


def is_known_category(category_id: str) -> bool:
    return category_id in _CATEGORIES_BY_ID


def get_category_config(category_id: str) -> ResonanceCategory:
    """Category by id; unknown ids fall back to the first taxonomy entry."""
    return _CATEGORIES_BY_ID.get(category_id, RESONANCE_CATEGORIES[0])


def get_category_legend() -> list[ResonanceCategory]:
    return list(RESONANCE_CATEGORIES)


def resolve_categories_for_topic(topic: str) -> list[str]:
    """
    Every category a free-text topic belongs to.

    Ambiguous topics fan out to several categories instead of picking one.
    Blank topics resolve to nothing; anything else resolves to at least the
    default category.
    """
    normalized = topic.strip().lower()
    if not normalized:
        return []

    direct = _KEYWORD_INDEX.get(normalized)
    if direct:
        return [direct]

    matches = [category_id for category_id, pattern in _WORD_MATCHERS if pattern.search(normalized)]
    if matches:
        return matches

    for rule in FALLBACK_RULES:
        if rule.matches(normalized):
            return [rule.category]

    return [RESONANCE_DEFAULT_CATEGORY]


def interest_vector_to_category_weights(vector: Mapping[str, float] | None) -> CategoryWeights:
    """
    Project a topic vector onto the taxonomy.

    Each topic's normalized value is split evenly across its categories, then
    the per-category totals are normalized.
    """
    normalized = normalize_vector(sanitize_vector(vector))
    weights: CategoryWeights = {}

    for topic, value in normalized.items():
        if value <= 0:
            continue
        matches = resolve_categories_for_topic(topic) or [RESONANCE_DEFAULT_CATEGORY]
        share = value / len(matches)
        for category_id in matches:
            weights[category_id] = weights.get(category_id, 0.0) + share

    return normalize_weights(weights)


def blend_category_colors(weights: Mapping[str, float]) -> str:
    """Weighted RGB blend of category base colors, or the default color."""
    blended = blend_colors(
        (get_category_config(category_id).color, value)
        for category_id, value in weights.items()
        if is_known_category(category_id)
    )
    return blended or RESONANCE_DEFAULT_COLOR
