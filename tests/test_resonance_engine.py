import math

import pytest

from conftest import HOUR, MINUTE, T0
from harmonia.core.constants import RESONANCE_DEFAULT_COLOR
from harmonia.models.resonance import ColorMode, ColorPreferences
from harmonia.services.resonance.engine import ResonanceColorEngine, dominant_category, intensity_to_lerp
from harmonia.services.resonance.weights import decay_weights, normalize_weights
from harmonia.utils.color import lerp_color, same_color


@pytest.mark.parametrize(
    "intensity,expected",
    [(0.05, 0.25), (1.5, 0.75), (0.0, 0.25), (9.0, 0.75), (0.775, 0.5)],
)
def test_intensity_to_lerp(intensity, expected):
    assert intensity_to_lerp(intensity) == pytest.approx(expected)


def test_weight_helpers():
    assert normalize_weights({"art": 1.0, "music": 3.0, "news": -1.0}) == {"art": 0.25, "music": 0.75}
    assert normalize_weights({"art": 0.0}) == {}
    assert decay_weights({"art": 1.0}, T0, T0 + 6 * MINUTE, 6 * MINUTE) == pytest.approx({"art": math.exp(-1)})
    assert decay_weights({"art": 1e-4}, T0, T0 + MINUTE, 6 * MINUTE) == {}
    assert dominant_category({"art": 0.2, "news": 0.8}) == "news"
    assert dominant_category({}) is None


def test_first_engagement_seeds_from_presence(resonance, presence):
    presence.set_color("u", "#ff0000")
    result = resonance.register_category_engagement("u", "music", intensity=1.5, timestamp=T0)

    assert same_color(result.color, lerp_color("#ff0000", "#2563eb", 0.75))
    assert same_color(presence.get_color("u"), result.color)
    assert result.dominant_category == "music"
    assert result.weights == pytest.approx({"music": 1.0})


def test_new_user_seeds_with_default_color(resonance):
    assert same_color(resonance.get_state("u").color, RESONANCE_DEFAULT_COLOR)
    result = resonance.register_category_engagement("u", "art", intensity=0.05, timestamp=T0)
    assert same_color(result.color, lerp_color(RESONANCE_DEFAULT_COLOR, "#7c3aed", 0.25))


def test_repeated_engagement_converges_on_category_color(resonance):
    for step in range(12):
        result = resonance.register_category_engagement("u", "science", intensity=1.5, timestamp=T0 + step)
    assert same_color(result.color, "#06b6d4")


def test_composite_stays_normalized(resonance):
    events = [("art", 0), ("music", MINUTE), ("news", 3 * MINUTE), ("art", HOUR), ("comedy", 7 * HOUR)]
    for category, offset in events:
        result = resonance.register_category_engagement("u", category, timestamp=T0 + offset)
        assert sum(result.weights.values()) == pytest.approx(1.0)
        assert all(value > 0 for value in result.weights.values())

    entry = resonance.get_entry("u")
    assert sum(entry.recent.values()) == pytest.approx(1.0)
    assert sum(entry.baseline.values()) == pytest.approx(1.0)


def test_recent_memory_shifts_dominance(resonance):
    for step in range(3):
        resonance.register_category_engagement("u", "music", timestamp=T0 + step)
    result = resonance.register_category_engagement("u", "news", timestamp=T0 + HOUR)
    assert result.dominant_category == "news"
    assert "music" in resonance.get_entry("u").baseline


def test_vector_engagement_projects_onto_categories(resonance):
    result = resonance.register_interest_engagement("u", {"ai art": 1.0}, timestamp=T0)
    assert result.weights == pytest.approx({"art": 0.5, "science": 0.5})


def test_empty_or_unknown_weights_are_a_no_op(resonance, presence):
    result = resonance.register_category_weights("u", {"bogus": 1.0}, timestamp=T0)
    assert resonance.get_entry("u") is None
    assert same_color(result.color, RESONANCE_DEFAULT_COLOR)

    resonance.register_category_weights("u", {}, timestamp=T0)
    resonance.register_interest_engagement("u", {}, timestamp=T0)
    assert resonance.get_entry("u") is None
    assert presence.get_color("u") is None


def test_locked_color_is_stable(resonance, presence):
    entry = resonance.sync_manual_preferences("u", ColorPreferences(mode=ColorMode.LOCKED, locked_color="#00ff00"))
    assert entry.mode == ColorMode.LOCKED
    assert presence.get_color("u") == "#00FF00"

    for step, category in enumerate(["music", "news", "art", "comedy"]):
        result = resonance.register_category_engagement("u", category, intensity=1.5, timestamp=T0 + step * MINUTE)
        assert same_color(result.color, "#00ff00")
    assert presence.get_color("u") == "#00FF00"
    # composite is still tracked while locked
    assert result.dominant_category == "comedy"


def test_unlocking_resumes_dynamic_color(resonance):
    resonance.sync_manual_preferences("u", ColorPreferences(mode=ColorMode.LOCKED, locked_color="#00ff00"))
    resonance.register_category_engagement("u", "music", timestamp=T0)
    resonance.sync_manual_preferences("u", ColorPreferences(mode=ColorMode.DYNAMIC))

    result = resonance.register_category_engagement("u", "music", intensity=1.5, timestamp=T0 + 1)
    assert not same_color(result.color, "#00ff00")


def test_hydrate_respects_lock(resonance):
    resonance.hydrate_user_color("u", "#123456")
    assert same_color(resonance.get_state("u").color, "#123456")

    resonance.sync_manual_preferences("u", ColorPreferences(mode=ColorMode.LOCKED, locked_color="#abcdef"))
    resonance.hydrate_user_color("u", "#654321")
    assert same_color(resonance.get_state("u").color, "#abcdef")

    resonance.hydrate_user_color("u", "not-a-color")
    assert same_color(resonance.get_state("u").color, "#abcdef")


def test_pulses_expire_and_clear(resonance):
    first = resonance.register_content_pulse("u", "music", duration_ms=1000, timestamp=T0)
    second = resonance.register_content_pulse("u", "art", duration_ms=1000, timestamp=T0 + 2000)
    assert [pulse.id for pulse in resonance.get_entry("u").pulses] == [second.id]
    assert first.id != second.id

    assert resonance.register_content_pulse("u", "bogus", timestamp=T0) is None
    assert resonance.clear_pulse("u", second.id) is True
    assert resonance.clear_pulse("u", second.id) is False
    assert resonance.clear_pulse("ghost", "node-pulse-x") is False


def test_default_pulse_duration(resonance):
    pulse = resonance.register_content_pulse("u", "news", timestamp=T0)
    assert pulse.duration == 2100
    assert pulse.is_active(T0 + 2000)
    assert not pulse.is_active(T0 + 2100)


def test_snapshot_round_trip(resonance, presence):
    resonance.register_category_engagement("u", "music", timestamp=T0)
    data = resonance.snapshot()

    restored = ResonanceColorEngine(presence)
    restored.restore(data)
    assert restored.get_state("u") == resonance.get_state("u")
    assert resonance.remove_user("u") is True
    assert resonance.get_entry("u") is None


def test_restore_coerces_malformed_colors(resonance):
    resonance.restore(
        {
            "u": {
                "recent_timestamp": T0,
                "baseline_timestamp": T0,
                "current_color": "blue",
                "mode": "locked",
                "locked_color": "nope",
            }
        }
    )
    entry = resonance.get_entry("u")
    assert same_color(entry.current_color, RESONANCE_DEFAULT_COLOR)
    assert entry.locked_color is None


def test_engagement_after_restoring_bad_color_applies_fully(resonance, presence):
    resonance.restore({"u": {"recent_timestamp": T0, "baseline_timestamp": T0, "current_color": "blue"}})

    result = resonance.register_category_engagement("u", "music", intensity=1.5, timestamp=T0 + 1)

    entry = resonance.get_entry("u")
    assert entry.recent == {"music": 1.0}
    assert entry.dominant_category == "music"
    assert same_color(entry.current_color, lerp_color(RESONANCE_DEFAULT_COLOR, "#2563eb", 0.75))
    assert same_color(presence.get_color("u"), result.color)
