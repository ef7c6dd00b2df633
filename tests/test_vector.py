import math

import pytest

from harmonia.utils.vector import (
    build_interest_vector_from_tags,
    clamp,
    cosine_similarity,
    merge_interest_vectors,
    normalize_vector,
    sanitize_vector,
)


def test_clamp():
    assert clamp(1.4, 0, 1) == 1
    assert clamp(-0.2, 0, 1) == 0
    assert clamp(0.3, 0, 1) == 0.3


@pytest.mark.parametrize(
    "vector",
    [
        {"art": 1.0},
        {"art": 0.3, "music": 0.9, "news": 0.01},
        {"a": -2.0, "b": 5.5},
    ],
)
def test_cosine_of_vector_with_itself_is_one(vector):
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_cosine_bounds():
    a = {"art": 1.0, "news": -3.0}
    b = {"art": -1.0, "news": 3.0, "music": 0.5}
    value = cosine_similarity(a, b)
    assert -1.0 <= value <= 1.0
    assert cosine_similarity(a, {"art": -1.0, "news": 3.0}) == pytest.approx(-1.0)


def test_cosine_disjoint_and_empty():
    assert cosine_similarity({"art": 1.0}, {"news": 1.0}) == 0.0
    assert cosine_similarity({}, {"news": 1.0}) == 0.0
    assert cosine_similarity({}, {}) == 0.0
    assert cosine_similarity({"art": 0.0}, {"art": 1.0}) == 0.0


def test_normalize_vector_sums_to_one_and_is_idempotent():
    vector = {"art": 2.0, "music": 6.0}
    once = normalize_vector(vector)
    assert once == {"art": 0.25, "music": 0.75}
    twice = normalize_vector(once)
    assert twice.keys() == once.keys()
    for key in once:
        assert twice[key] == pytest.approx(once[key])


def test_normalize_zero_vector_is_unchanged():
    assert normalize_vector({"art": 0.0}) == {"art": 0.0}
    assert normalize_vector({}) == {}


def test_merge_clamps_touched_topics():
    merged = merge_interest_vectors({"art": 0.9, "news": 0.4}, {"art": 1.0, "music": 0.5}, 0.5)
    assert merged == {"art": 1.0, "news": 0.4, "music": 0.25}


def test_sanitize_lowercases_and_drops_bad_values():
    cleaned = sanitize_vector({" Art ": 0.5, "art": 0.25, "news": math.nan, "music": math.inf, "": 1.0, "x": "bad"})
    assert cleaned == {"art": 0.75}


def test_tags_share_weight_equally():
    vector = build_interest_vector_from_tags(["Art", " music ", "art", ""])
    assert vector["art"] == pytest.approx(2 / 3)
    assert vector["music"] == pytest.approx(1 / 3)
    assert build_interest_vector_from_tags([]) == {}
