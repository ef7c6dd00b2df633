import re

from harmonia.core.constants import FLAGGED_TAG_PATTERN
from harmonia.models.content import ContentItem, Visibility
from harmonia.services.collaborators import FriendGraph

_FLAGGED_TAG = re.compile(FLAGGED_TAG_PATTERN)


class FeedFiltering:
    """
    Visibility and content-safety rules applied before ranking.
    """

    @staticmethod
    def is_flagged(item: ContentItem) -> bool:
        """Flagged when marked nsfw or tagged nsfw / 18+ / mature."""
        if item.nsfw:
            return True
        return any(_FLAGGED_TAG.search(tag.lower()) for tag in item.tags)

    @staticmethod
    def is_visible(item: ContentItem, viewer_id: str, friends: FriendGraph) -> bool:
        """
        Public is visible to everyone, private to the author only, and
        friends-only to the author and the author's friends.
        """
        if item.visibility == Visibility.PUBLIC:
            return True
        if item.author_id == viewer_id:
            return True
        if item.visibility == Visibility.PRIVATE:
            return False
        return friends.is_friend(viewer_id, item.author_id)

    @staticmethod
    def filter_pool(
        items: list[ContentItem], viewer_id: str, friends: FriendGraph, allow_flagged: bool
    ) -> list[ContentItem]:
        return [
            item
            for item in items
            if FeedFiltering.is_visible(item, viewer_id, friends)
            and (allow_flagged or not FeedFiltering.is_flagged(item))
        ]
