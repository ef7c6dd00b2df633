from enum import Enum

from pydantic import BaseModel, Field


class Visibility(str, Enum):
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class EngagementType(str, Enum):
    VIEW = "view"
    LIKE = "like"
    COMMENT = "comment"
    SHARE = "share"


class FeedMode(str, Enum):
    RESONANT = "resonant"
    EXPLORATORY = "exploratory"
    ALL = "all"


class FeedLabel(str, Enum):
    RESONANT = "Resonant"
    NEUTRAL = "Neutral"
    EXPLORATORY = "Exploratory"


class ContentItem(BaseModel):
    """
    A post, reel or comment as supplied by a content repository.

    The ranking engine treats items as read-only.
    """

    content_id: str
    author_id: str
    interest_vector: dict[str, float] = Field(default_factory=dict)
    visibility: Visibility = Visibility.PUBLIC
    timestamp: float = Field(description="Epoch milliseconds of publication")
    engagement_score: float = 0.0
    nsfw: bool = False
    tags: list[str] = Field(default_factory=list)


class FeedEntry(BaseModel):
    content: ContentItem
    similarity: float
    label: FeedLabel
    curiosity_boosted: bool = False


class FeedOptions(BaseModel):
    mode: FeedMode = FeedMode.RESONANT
    limit: int | None = Field(default=None, description="Falls back to settings.FEED_DEFAULT_LIMIT")
    curiosity_ratio: float | None = Field(default=None, description="Clamped into [0.05, 0.5]")
