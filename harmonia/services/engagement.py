import uuid
from collections.abc import Mapping

from loguru import logger

from harmonia.core.config import settings
from harmonia.core.constants import COMMENT_SCORE_BOOST, ENGAGEMENT_INTEREST_WEIGHTS, ENGAGEMENT_SCORE_BOOSTS
from harmonia.models.content import ContentItem, EngagementType, Visibility
from harmonia.services.collaborators import InMemoryContentRepository
from harmonia.services.interest.store import InterestProfileStore
from harmonia.services.resonance.engine import ResonanceColorEngine
from harmonia.utils.clock import now_ms
from harmonia.utils.vector import build_interest_vector_from_tags, normalize_vector, sanitize_vector


class EngagementRecorder:
    """
    Routes engagement events into the interest store and the resonance engine.

    Each event reinforces the user's interests and moves their resonance color,
    then pulses the dominant category of the user's updated composite.
    """

    def __init__(
        self,
        interests: InterestProfileStore,
        resonance: ResonanceColorEngine,
        content: InMemoryContentRepository,
    ):
        self.interests = interests
        self.resonance = resonance
        self.content = content

    @staticmethod
    def content_vector(vector: Mapping[str, float] | None, tags: list[str]) -> dict[str, float]:
        """Explicit vector when given, otherwise one built from tags. Always L1-normalized."""
        cleaned = sanitize_vector(vector)
        return normalize_vector(cleaned if cleaned else build_interest_vector_from_tags(tags))

    def _resonate(self, user_id: str, vector: Mapping[str, float], intensity: float, timestamp: float) -> None:
        result = self.resonance.register_interest_engagement(user_id, vector, intensity=intensity, timestamp=timestamp)
        if result.dominant_category:
            self.resonance.register_content_pulse(user_id, result.dominant_category, timestamp=timestamp)

    def publish_content(
        self,
        author_id: str,
        interest_vector: Mapping[str, float] | None = None,
        tags: list[str] | None = None,
        visibility: Visibility = Visibility.PUBLIC,
        nsfw: bool = False,
        content_id: str | None = None,
        timestamp: float | None = None,
    ) -> ContentItem:
        """
        Add a new item to the content pool.

        Public items also feed the author's own interests at the public content weight.
        """
        tags = tags or []
        timestamp = now_ms() if timestamp is None else timestamp
        item = ContentItem(
            content_id=content_id or f"content-{uuid.uuid4().hex[:12]}",
            author_id=author_id,
            interest_vector=self.content_vector(interest_vector, tags),
            visibility=visibility,
            timestamp=timestamp,
            nsfw=nsfw,
            tags=tags,
        )
        self.content.add(item)

        if visibility == Visibility.PUBLIC and item.interest_vector:
            self.interests.integrate_public_content(author_id, item.interest_vector, timestamp=timestamp)
            self._resonate(author_id, item.interest_vector, 1.0, timestamp)

        logger.info(f"[{author_id}] Published {item.content_id} ({visibility.value}, {len(item.interest_vector)} topics)")
        return item

    def record_engagement(
        self,
        content_id: str,
        user_id: str,
        engagement: EngagementType,
        timestamp: float | None = None,
    ) -> ContentItem | None:
        """
        Apply a view / like / comment / share.

        Returns:
            The updated item, or None if the content does not exist
        """
        item = self.content.get(content_id)
        if item is None:
            logger.debug(f"[{user_id}] Engagement on unknown content {content_id}")
            return None

        timestamp = now_ms() if timestamp is None else timestamp
        boost = ENGAGEMENT_SCORE_BOOSTS[engagement.value]
        updated = self.content.update(content_id, engagement_score=item.engagement_score + boost)

        self.interests.record_interaction(
            user_id,
            item.interest_vector,
            weight=ENGAGEMENT_INTEREST_WEIGHTS[engagement.value],
            timestamp=timestamp,
        )
        if item.interest_vector:
            self._resonate(user_id, item.interest_vector, boost, timestamp)

        logger.debug(f"[{user_id}] {engagement.value} on {content_id}")
        return updated

    def add_comment(
        self,
        content_id: str,
        author_id: str,
        interest_vector: Mapping[str, float] | None = None,
        timestamp: float | None = None,
    ) -> ContentItem | None:
        """
        Comment on an item: the commenter's interests take the comment vector
        (falling back to the parent's tags, then its vector) and the parent
        gains engagement.
        """
        parent = self.content.get(content_id)
        if parent is None:
            return None

        timestamp = now_ms() if timestamp is None else timestamp
        vector = self.content_vector(interest_vector, parent.tags) or parent.interest_vector
        updated = self.content.update(content_id, engagement_score=parent.engagement_score + COMMENT_SCORE_BOOST)
        self.interests.record_interaction(author_id, vector, weight=settings.COMMENT_AUTHOR_WEIGHT, timestamp=timestamp)
        if vector:
            self._resonate(author_id, vector, 1.0, timestamp)

        logger.debug(f"[{author_id}] Commented on {content_id}")
        return updated
