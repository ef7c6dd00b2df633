"""
Boundaries the engine consumes but does not own, plus in-memory versions of each.

The in-memory versions back the HTTP app and the tests; a deployment swaps in
whatever satisfies the protocol.
"""

import threading
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from loguru import logger

from harmonia.models.content import ContentItem
from harmonia.utils.color import coerce_hex_color


@runtime_checkable
class ContentRepository(Protocol):
    def list_items(self) -> list[ContentItem]: ...


@runtime_checkable
class FriendGraph(Protocol):
    def is_friend(self, viewer_id: str, author_id: str) -> bool: ...


@runtime_checkable
class ViewerPreferences(Protocol):
    def allows_flagged_content(self, user_id: str) -> bool: ...


@runtime_checkable
class PresenceRegistry(Protocol):
    def get_color(self, user_id: str) -> str | None: ...

    def set_color(self, user_id: str, color: str) -> None: ...


class InMemoryContentRepository:
    """Content kept in publication order, newest first."""

    def __init__(self, items: Iterable[ContentItem] | None = None):
        self._items: dict[str, ContentItem] = {}
        self._order: list[str] = []
        self._lock = threading.RLock()
        for item in items or []:
            self.add(item)

    def add(self, item: ContentItem) -> ContentItem:
        with self._lock:
            if item.content_id not in self._items:
                self._order.insert(0, item.content_id)
            self._items[item.content_id] = item
        return item

    def get(self, content_id: str) -> ContentItem | None:
        return self._items.get(content_id)

    def update(self, content_id: str, **changes) -> ContentItem | None:
        with self._lock:
            item = self._items.get(content_id)
            if item is None:
                return None
            updated = item.model_copy(update=changes)
            self._items[content_id] = updated
            return updated

    def remove_by_author(self, author_id: str) -> int:
        with self._lock:
            doomed = [cid for cid, item in self._items.items() if item.author_id == author_id]
            for content_id in doomed:
                del self._items[content_id]
            self._order = [cid for cid in self._order if cid in self._items]
        return len(doomed)

    def list_items(self) -> list[ContentItem]:
        with self._lock:
            return [self._items[content_id] for content_id in self._order]


class InMemoryFriendGraph:
    """Accepted friendships; the relation is symmetric."""

    def __init__(self):
        self._edges: set[frozenset[str]] = set()

    def add_friendship(self, user_a: str, user_b: str) -> None:
        if user_a == user_b:
            return
        self._edges.add(frozenset((user_a, user_b)))

    def remove_friendship(self, user_a: str, user_b: str) -> None:
        self._edges.discard(frozenset((user_a, user_b)))

    def is_friend(self, viewer_id: str, author_id: str) -> bool:
        return frozenset((viewer_id, author_id)) in self._edges


class InMemoryViewerPreferences:
    def __init__(self):
        self._allow_flagged: dict[str, bool] = {}

    def set_allow_flagged(self, user_id: str, allowed: bool) -> None:
        self._allow_flagged[user_id] = allowed

    def allows_flagged_content(self, user_id: str) -> bool:
        return self._allow_flagged.get(user_id, False)


class InMemoryPresenceRegistry:
    """Current display color per user."""

    def __init__(self):
        self._colors: dict[str, str] = {}

    def get_color(self, user_id: str) -> str | None:
        return self._colors.get(user_id)

    def set_color(self, user_id: str, color: str) -> None:
        normalized = coerce_hex_color(color)
        if normalized is None:
            logger.warning(f"[{user_id}] Ignoring invalid presence color {color!r}")
            return
        self._colors[user_id] = normalized
