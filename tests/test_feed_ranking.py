import pytest

from conftest import HOUR, MINUTE, T0, make_item
from harmonia.models.content import FeedLabel, FeedMode, FeedOptions, Visibility
from harmonia.services.feed.filtering import FeedFiltering
from harmonia.services.feed.ranking import FeedRankingEngine, label_for_similarity
from harmonia.services.feed.sampling import curiosity_seed

USER = {"art": 1.0}


def _pool(aligned: int, disjoint: int) -> list:
    items = [make_item(f"a{i}", {"art": 1.0}, timestamp=T0 - i * MINUTE) for i in range(aligned)]
    items += [make_item(f"d{i}", {"news": 1.0}, timestamp=T0 - i * MINUTE - 1) for i in range(disjoint)]
    return items


def _ids(feed) -> list[str]:
    return [entry.content.content_id for entry in feed]


def test_labels():
    assert label_for_similarity(1.0) == FeedLabel.RESONANT
    assert label_for_similarity(0.6) == FeedLabel.RESONANT
    assert label_for_similarity(0.45) == FeedLabel.NEUTRAL
    assert label_for_similarity(0.25) == FeedLabel.NEUTRAL
    assert label_for_similarity(0.1) == FeedLabel.EXPLORATORY


def test_resonant_quota():
    feed = FeedRankingEngine.rank(USER, _pool(60, 40), FeedOptions(limit=20, curiosity_ratio=0.2))
    assert len(feed) == 20
    primary = [entry for entry in feed if not entry.curiosity_boosted]
    curiosity = [entry for entry in feed if entry.curiosity_boosted]
    assert len(primary) == 16
    assert len(curiosity) == 4
    assert all(entry.similarity >= 0.2 for entry in primary)
    assert all(entry.similarity < 0.2 for entry in curiosity)
    assert all(entry.label == FeedLabel.EXPLORATORY for entry in curiosity)
    # primary fill comes before curiosity picks
    assert feed[:16] == primary


def test_curiosity_picks_follow_seed_order():
    pool = _pool(10, 10)
    feed = FeedRankingEngine.rank(USER, pool, FeedOptions(limit=10, curiosity_ratio=0.2))

    opposite = [(curiosity_seed(item.timestamp, index), item.content_id) for index, item in enumerate(pool)]
    opposite = [pair for pair in opposite if pair[1].startswith("d")]
    expected = [content_id for _, content_id in sorted(opposite)[:2]]
    assert [entry.content.content_id for entry in feed if entry.curiosity_boosted] == expected


def test_ranking_is_deterministic():
    pool = _pool(30, 30)
    options = FeedOptions(limit=25)
    assert _ids(FeedRankingEngine.rank(USER, pool, options)) == _ids(FeedRankingEngine.rank(USER, pool, options))


def test_exploratory_mode_primary_uses_curiosity_count():
    feed = FeedRankingEngine.rank(USER, _pool(60, 40), FeedOptions(mode=FeedMode.EXPLORATORY, limit=20, curiosity_ratio=0.2))
    assert len(feed) == 20
    assert all(entry.content.content_id.startswith("d") for entry in feed[:4])
    assert all(entry.curiosity_boosted and entry.content.content_id.startswith("a") for entry in feed[4:8])
    assert len(set(_ids(feed))) == 20


def test_all_mode_is_recency_only():
    pool = [
        make_item("old-match", {"art": 1.0}, timestamp=T0 - 2 * HOUR),
        make_item("new-miss", {"news": 1.0}, timestamp=T0),
        make_item("mid-match", {"art": 1.0}, timestamp=T0 - HOUR),
    ]
    feed = FeedRankingEngine.rank(USER, pool, FeedOptions(mode=FeedMode.ALL, limit=10))
    assert _ids(feed) == ["new-miss", "mid-match", "old-match"]
    assert not any(entry.curiosity_boosted for entry in feed)


def test_resonant_ties_break_on_engagement_then_pool_order():
    pool = [
        make_item("quiet", {"art": 1.0}),
        make_item("loud", {"art": 1.0}, engagement_score=5.0),
        make_item("quiet-2", {"art": 1.0}),
    ]
    feed = FeedRankingEngine.rank(USER, pool, FeedOptions(limit=3))
    assert _ids(feed) == ["loud", "quiet", "quiet-2"]


def test_backfill_has_no_duplicates():
    feed = FeedRankingEngine.rank(USER, _pool(10, 0), FeedOptions(limit=10, curiosity_ratio=0.2))
    assert len(feed) == 10
    assert len(set(_ids(feed))) == 10
    assert not any(entry.curiosity_boosted for entry in feed)


def test_curiosity_ratio_is_clamped():
    high = FeedRankingEngine.rank(USER, _pool(20, 20), FeedOptions(limit=10, curiosity_ratio=0.9))
    assert sum(entry.curiosity_boosted for entry in high) == 5

    low = FeedRankingEngine.rank(USER, _pool(20, 20), FeedOptions(limit=10, curiosity_ratio=0.0))
    assert sum(entry.curiosity_boosted for entry in low) == 1


def test_empty_pool_and_zero_limit():
    assert FeedRankingEngine.rank(USER, [], FeedOptions()) == []
    assert FeedRankingEngine.rank(USER, _pool(5, 5), FeedOptions(limit=0)) == []


def test_neutral_label_survives_primary():
    pool = [make_item("mixed", {"art": 1.0, "news": 2.0})]
    feed = FeedRankingEngine.rank(USER, pool, FeedOptions(limit=1))
    assert feed[0].label == FeedLabel.NEUTRAL
    assert feed[0].similarity == pytest.approx(1 / 5**0.5)


def test_visibility_rules(friends):
    public = make_item("p", {}, author_id="alice")
    shared = make_item("f", {}, author_id="alice", visibility=Visibility.FRIENDS)
    private = make_item("x", {}, author_id="alice", visibility=Visibility.PRIVATE)
    friends.add_friendship("alice", "bob")

    assert FeedFiltering.is_visible(public, "carol", friends)
    assert not FeedFiltering.is_visible(shared, "carol", friends)
    assert FeedFiltering.is_visible(shared, "bob", friends)
    assert not FeedFiltering.is_visible(private, "bob", friends)
    assert FeedFiltering.is_visible(private, "alice", friends)


@pytest.mark.parametrize(
    "extra,flagged",
    [
        ({"nsfw": True}, True),
        ({"tags": ["NSFW art"]}, True),
        ({"tags": ["18+"]}, True),
        ({"tags": ["mature themes"]}, True),
        ({"tags": ["art", "music"]}, False),
    ],
)
def test_flagged_detection(extra, flagged):
    assert FeedFiltering.is_flagged(make_item("c", {}, **extra)) is flagged


def test_feed_for_user_end_to_end(engine, content, friends, viewer_preferences):
    engine.interests.ensure_profile("viewer", {"art": 1.0}, timestamp=T0)
    content.add(make_item("match", {"art": 1.0}, timestamp=T0 - HOUR))
    content.add(make_item("miss", {"news": 1.0}, timestamp=T0))
    content.add(make_item("hidden", {"art": 1.0}, author_id="stranger", visibility=Visibility.FRIENDS))
    content.add(make_item("flagged", {"art": 1.0}, nsfw=True))

    feed = engine.feed.get_feed_for_user("viewer", FeedOptions(limit=10), timestamp=T0)
    assert _ids(feed) == ["match", "miss"]
    assert feed[0].label == FeedLabel.RESONANT
    assert feed[1].curiosity_boosted

    recency = engine.feed.get_feed_for_user("viewer", FeedOptions(mode=FeedMode.ALL, limit=10), timestamp=T0)
    assert _ids(recency) == ["miss", "match"]

    friends.add_friendship("viewer", "stranger")
    viewer_preferences.set_allow_flagged("viewer", True)
    opened = engine.feed.get_feed_for_user("viewer", FeedOptions(limit=10), timestamp=T0)
    assert set(_ids(opened)) == {"match", "miss", "hidden", "flagged"}


def test_feed_without_profile_is_all_exploratory(engine, content):
    content.add(make_item("a", {"art": 1.0}))
    feed = engine.feed.get_feed_for_user("nobody", FeedOptions(limit=5), timestamp=T0)
    assert len(feed) == 1
    assert feed[0].similarity == 0.0
    assert feed[0].label == FeedLabel.EXPLORATORY


def test_single_interaction_then_rank(engine, content):
    engine.interests.record_interaction("u", {"art": 1.0}, weight=0.5, timestamp=T0)
    assert engine.interests.get_interest_vector("u", timestamp=T0) == {"art": 0.5}

    content.add(make_item("art", {"art": 1.0}, timestamp=T0 - HOUR))
    content.add(make_item("news", {"news": 1.0}, timestamp=T0))

    recency = engine.feed.get_feed_for_user("u", FeedOptions(mode=FeedMode.ALL, limit=2), timestamp=T0)
    assert _ids(recency) == ["news", "art"]

    resonant = engine.feed.get_feed_for_user("u", FeedOptions(mode=FeedMode.RESONANT, limit=2), timestamp=T0)
    assert _ids(resonant)[0] == "art"


def test_non_finite_item_weights_do_not_poison_similarity():
    pool = [
        make_item("broken", {"art": float("nan"), "news": 1.0}),
        make_item("infinite", {"art": float("inf")}),
        make_item("clean", {"art": 1.0}),
    ]
    feed = FeedRankingEngine.rank(USER, pool, FeedOptions(limit=3))

    similarities = {entry.content.content_id: entry.similarity for entry in feed}
    assert similarities == {"broken": 0.0, "infinite": 0.0, "clean": pytest.approx(1.0)}
    assert feed[0].content.content_id == "clean"
