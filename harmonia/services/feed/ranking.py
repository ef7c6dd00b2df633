import math
from typing import NamedTuple

from loguru import logger

from harmonia.core.config import settings
from harmonia.core.constants import (
    CANDIDATE_SPLIT_THRESHOLD,
    CURIOSITY_RATIO_MAX,
    CURIOSITY_RATIO_MIN,
    EXPLORATORY_THRESHOLD,
    RESONANT_THRESHOLD,
)
from harmonia.models.content import ContentItem, FeedEntry, FeedLabel, FeedMode, FeedOptions
from harmonia.services.collaborators import ContentRepository, FriendGraph, ViewerPreferences
from harmonia.services.feed.filtering import FeedFiltering
from harmonia.services.feed.sampling import curiosity_seed
from harmonia.services.interest.store import InterestProfileStore
from harmonia.utils.vector import InterestVector, clamp, cosine_similarity, sanitize_vector


class _Scored(NamedTuple):
    entry: FeedEntry
    seed: float


def label_for_similarity(similarity: float) -> FeedLabel:
    if similarity >= RESONANT_THRESHOLD:
        return FeedLabel.RESONANT
    if similarity < EXPLORATORY_THRESHOLD:
        return FeedLabel.EXPLORATORY
    return FeedLabel.NEUTRAL


class FeedRankingEngine:
    """
    Ranks a content pool against a viewer's interests with an exploration quota.

    Ranking only reads interest state: the viewer's decayed vector is taken
    once per call and everything after that is pure computation.
    """

    def __init__(
        self,
        interests: InterestProfileStore,
        content: ContentRepository,
        friends: FriendGraph,
        preferences: ViewerPreferences,
    ):
        self.interests = interests
        self.content = content
        self.friends = friends
        self.preferences = preferences

    def get_feed_for_user(
        self, user_id: str, options: FeedOptions | None = None, timestamp: float | None = None
    ) -> list[FeedEntry]:
        """
        Build the user's feed.

        Args:
            user_id: Viewer
            options: Mode, limit and curiosity ratio
            timestamp: Decay the viewer's interests to this time (epoch ms)

        Returns:
            Entries in assembly order: primary fill, curiosity picks, backfill
        """
        options = options or FeedOptions()
        user_vector = self.interests.get_interest_vector(user_id, timestamp=timestamp)
        pool = FeedFiltering.filter_pool(
            self.content.list_items(),
            user_id,
            self.friends,
            self.preferences.allows_flagged_content(user_id),
        )
        feed = self.rank(user_vector, pool, options)
        logger.debug(
            f"[{user_id}] Ranked {len(pool)} items into {len(feed)} ({options.mode.value}, "
            f"{sum(1 for entry in feed if entry.curiosity_boosted)} curiosity)"
        )
        return feed

    @staticmethod
    def rank(user_vector: InterestVector, pool: list[ContentItem], options: FeedOptions) -> list[FeedEntry]:
        """Rank an already-filtered pool. Pool order defines each item's seed index."""
        mode = options.mode
        limit = settings.FEED_DEFAULT_LIMIT if options.limit is None else max(0, options.limit)
        ratio = settings.FEED_CURIOSITY_RATIO if options.curiosity_ratio is None else options.curiosity_ratio
        if not math.isfinite(ratio):
            ratio = settings.FEED_CURIOSITY_RATIO
        curiosity_ratio = clamp(ratio, CURIOSITY_RATIO_MIN, CURIOSITY_RATIO_MAX)

        scored: list[_Scored] = []
        for index, item in enumerate(pool):
            similarity = cosine_similarity(user_vector, sanitize_vector(item.interest_vector))
            entry = FeedEntry(content=item, similarity=similarity, label=label_for_similarity(similarity))
            scored.append(_Scored(entry, curiosity_seed(item.timestamp, index)))

        if mode == FeedMode.ALL:
            scored.sort(key=lambda s: s.entry.content.timestamp, reverse=True)
        else:
            scored.sort(key=lambda s: (s.entry.similarity, s.entry.content.engagement_score), reverse=True)

        base_count = min(limit, len(scored))
        if mode == FeedMode.ALL:
            return [s.entry for s in scored[:base_count]]

        curiosity_count = max(1, math.floor(base_count * curiosity_ratio))

        resonant_candidates = [s for s in scored if s.entry.similarity >= CANDIDATE_SPLIT_THRESHOLD]
        exploratory_candidates = [s for s in scored if s.entry.similarity < CANDIDATE_SPLIT_THRESHOLD]

        # Exploratory mode fills its primary slots with curiosity_count items, not the complement
        if mode == FeedMode.RESONANT:
            primary = resonant_candidates[: max(0, base_count - curiosity_count)]
            opposite = exploratory_candidates
        else:
            primary = exploratory_candidates[:curiosity_count]
            opposite = resonant_candidates

        curiosity = [
            s.entry.model_copy(update={"curiosity_boosted": True, "label": FeedLabel.EXPLORATORY})
            for s in sorted(opposite, key=lambda s: s.seed)[:curiosity_count]
        ]

        feed = [s.entry for s in primary] + curiosity
        if len(feed) < base_count:
            used = {entry.content.content_id for entry in feed}
            for s in scored:
                if len(feed) >= base_count:
                    break
                if s.entry.content.content_id not in used:
                    feed.append(s.entry)
                    used.add(s.entry.content.content_id)

        return feed[:base_count]
