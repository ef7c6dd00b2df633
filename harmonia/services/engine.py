from loguru import logger

from harmonia.core.locks import UserLocks
from harmonia.services.collaborators import (
    InMemoryContentRepository,
    InMemoryFriendGraph,
    InMemoryPresenceRegistry,
    InMemoryViewerPreferences,
)
from harmonia.services.engagement import EngagementRecorder
from harmonia.services.feed.ranking import FeedRankingEngine
from harmonia.services.interest.store import InterestProfileStore
from harmonia.services.resonance.engine import ResonanceColorEngine


class ResonanceEngine:
    """
    Wires the interest store, feed ranking and resonance colors together.

    One instance per application; callers get it injected rather than reaching
    for module-level state. Both stores share one per-user lock registry.
    """

    def __init__(
        self,
        content: InMemoryContentRepository | None = None,
        friends: InMemoryFriendGraph | None = None,
        preferences: InMemoryViewerPreferences | None = None,
        presence: InMemoryPresenceRegistry | None = None,
        default_half_life_days: float | None = None,
    ):
        self.locks = UserLocks()
        self.content = content or InMemoryContentRepository()
        self.friends = friends or InMemoryFriendGraph()
        self.preferences = preferences or InMemoryViewerPreferences()
        self.presence = presence or InMemoryPresenceRegistry()

        self.interests = InterestProfileStore(default_half_life_days=default_half_life_days, locks=self.locks)
        self.resonance = ResonanceColorEngine(self.presence, locks=self.locks)
        self.feed = FeedRankingEngine(self.interests, self.content, self.friends, self.preferences)
        self.engagement = EngagementRecorder(self.interests, self.resonance, self.content)

    def remove_user(self, user_id: str) -> None:
        """Account deletion: drop interest and resonance state and authored content."""
        self.interests.remove_profile(user_id)
        self.resonance.remove_user(user_id)
        removed = self.content.remove_by_author(user_id)
        self.locks.discard(user_id)
        logger.info(f"[{user_id}] Removed user state ({removed} content items)")
