"""
Shared fixtures: a fixed clock, fresh stores and in-memory collaborators.
"""

import pytest

from harmonia.core.app import create_app
from harmonia.models.content import ContentItem, Visibility
from harmonia.services.collaborators import (
    InMemoryContentRepository,
    InMemoryFriendGraph,
    InMemoryPresenceRegistry,
    InMemoryViewerPreferences,
)
from harmonia.services.engine import ResonanceEngine
from harmonia.services.interest.store import InterestProfileStore
from harmonia.services.resonance.engine import ResonanceColorEngine

T0 = 1_700_000_000_000.0
MINUTE = 60_000.0
HOUR = 60 * MINUTE
DAY = 24 * HOUR


def make_item(
    content_id: str,
    vector: dict[str, float],
    timestamp: float = T0,
    author_id: str = "author",
    visibility: Visibility = Visibility.PUBLIC,
    engagement_score: float = 0.0,
    **extra,
) -> ContentItem:
    return ContentItem(
        content_id=content_id,
        author_id=author_id,
        interest_vector=vector,
        visibility=visibility,
        timestamp=timestamp,
        engagement_score=engagement_score,
        **extra,
    )


@pytest.fixture
def store() -> InterestProfileStore:
    return InterestProfileStore(default_half_life_days=30)


@pytest.fixture
def presence() -> InMemoryPresenceRegistry:
    return InMemoryPresenceRegistry()


@pytest.fixture
def resonance(presence) -> ResonanceColorEngine:
    return ResonanceColorEngine(presence)


@pytest.fixture
def content() -> InMemoryContentRepository:
    return InMemoryContentRepository()


@pytest.fixture
def friends() -> InMemoryFriendGraph:
    return InMemoryFriendGraph()


@pytest.fixture
def viewer_preferences() -> InMemoryViewerPreferences:
    return InMemoryViewerPreferences()


@pytest.fixture
def engine(content, friends, viewer_preferences, presence) -> ResonanceEngine:
    return ResonanceEngine(
        content=content,
        friends=friends,
        preferences=viewer_preferences,
        presence=presence,
        default_half_life_days=30,
    )


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    with TestClient(create_app(engine)) as test_client:
        yield test_client
