import math
import uuid
from collections.abc import Mapping
from typing import Any

from loguru import logger

from harmonia.core.config import settings
from harmonia.core.constants import (
    BASELINE_BIAS,
    BASELINE_CONTRIBUTION,
    INTENSITY_MAX,
    INTENSITY_MIN,
    LERP_MAX,
    LERP_MIN,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    RECENT_BIAS,
    RECENT_CONTRIBUTION,
    RESONANCE_DEFAULT_COLOR,
    WEIGHT_PRUNE_THRESHOLD,
)
from harmonia.core.locks import UserLocks
from harmonia.models.resonance import (
    CategoryWeights,
    ColorMode,
    ColorPreferences,
    Pulse,
    ResonanceEntry,
    ResonanceResult,
)
from harmonia.services.collaborators import PresenceRegistry
from harmonia.services.resonance.categories import (
    CATEGORY_IDS,
    blend_category_colors,
    interest_vector_to_category_weights,
    is_known_category,
)
from harmonia.services.resonance.weights import decay_weights, normalize_weights
from harmonia.utils.clock import now_ms
from harmonia.utils.color import coerce_hex_color, lerp_color, normalize_hex_color, same_color
from harmonia.utils.vector import clamp


def intensity_to_lerp(intensity: float) -> float:
    """Map an intensity in [0.05, 1.5] linearly onto a lerp fraction in [0.25, 0.75]."""
    normalized = clamp((intensity - INTENSITY_MIN) / (INTENSITY_MAX - INTENSITY_MIN), 0.0, 1.0)
    return LERP_MIN + normalized * (LERP_MAX - LERP_MIN)


def composite_weights(recent: Mapping[str, float], baseline: Mapping[str, float]) -> CategoryWeights:
    """Blend normalized recent and baseline memories into one normalized map."""
    normalized_recent = normalize_weights(recent)
    normalized_baseline = normalize_weights(baseline)
    composite: CategoryWeights = {}
    for category_id in CATEGORY_IDS:
        value = (
            normalized_recent.get(category_id, 0.0) * RECENT_BIAS
            + normalized_baseline.get(category_id, 0.0) * BASELINE_BIAS
        )
        if value > WEIGHT_PRUNE_THRESHOLD:
            composite[category_id] = value
    return normalize_weights(composite)


def dominant_category(weights: Mapping[str, float]) -> str | None:
    dominant = None
    dominant_value = 0.0
    for category_id, value in weights.items():
        if value > dominant_value:
            dominant = category_id
            dominant_value = value
    return dominant


class ResonanceColorEngine:
    """
    Turns engagement into a per-user display color.

    Two memories per user, recent (minutes) and baseline (hours), are decayed,
    reinforced and blended into a composite category map. The composite picks a
    target color and the current color moves one intensity-scaled step toward
    it, so colors animate instead of jumping. Locked users keep their color but
    the composite is still tracked.
    """

    def __init__(self, presence: PresenceRegistry, locks: UserLocks | None = None):
        self.presence = presence
        self.recent_half_life_ms = settings.RECENT_HALF_LIFE_MINUTES * MS_PER_MINUTE
        self.baseline_half_life_ms = settings.BASELINE_HALF_LIFE_HOURS * MS_PER_HOUR
        self._entries: dict[str, ResonanceEntry] = {}
        self._owns_locks = locks is None
        self._locks = locks or UserLocks()

    def _new_entry(self, user_id: str, timestamp: float) -> ResonanceEntry:
        seed_color = normalize_hex_color(self.presence.get_color(user_id), default=RESONANCE_DEFAULT_COLOR)
        return ResonanceEntry(
            recent_timestamp=timestamp,
            baseline_timestamp=timestamp,
            current_color=seed_color,
        )

    def _get_or_create(self, user_id: str, timestamp: float | None = None) -> ResonanceEntry:
        entry = self._entries.get(user_id)
        if entry is None:
            entry = self._new_entry(user_id, now_ms() if timestamp is None else timestamp)
            self._entries[user_id] = entry
            logger.debug(f"[{user_id}] Created resonance entry seeded with {entry.current_color}")
        return entry

    def get_entry(self, user_id: str) -> ResonanceEntry | None:
        if user_id not in self._entries:
            return None
        with self._locks.hold(user_id):
            entry = self._entries.get(user_id)
            return entry.model_copy(deep=True) if entry else None

    def _presence_state(self, user_id: str) -> ResonanceResult:
        color = normalize_hex_color(self.presence.get_color(user_id), default=RESONANCE_DEFAULT_COLOR)
        return ResonanceResult(color=color)

    def get_state(self, user_id: str) -> ResonanceResult:
        """Last-known color and composite, without mutating anything."""
        if user_id not in self._entries:
            return self._presence_state(user_id)
        with self._locks.hold(user_id):
            entry = self._entries.get(user_id)
            if entry is None:
                return self._presence_state(user_id)
            return ResonanceResult(
                color=entry.visible_color,
                dominant_category=entry.dominant_category,
                weights=composite_weights(entry.recent, entry.baseline),
            )

    def register_interest_engagement(
        self,
        user_id: str,
        vector: Mapping[str, float] | None,
        intensity: float = 1.0,
        timestamp: float | None = None,
    ) -> ResonanceResult:
        """Project a topic vector onto the taxonomy and register it."""
        weights = interest_vector_to_category_weights(vector)
        return self.register_category_weights(user_id, weights, intensity=intensity, timestamp=timestamp)

    def register_category_engagement(
        self, user_id: str, category: str, intensity: float = 1.0, timestamp: float | None = None
    ) -> ResonanceResult:
        return self.register_category_weights(user_id, {category: 1.0}, intensity=intensity, timestamp=timestamp)

    def register_category_weights(
        self,
        user_id: str,
        weights: Mapping[str, float] | None,
        intensity: float = 1.0,
        timestamp: float | None = None,
    ) -> ResonanceResult:
        """
        Fold a category weight map into the user's resonance.

        Args:
            user_id: Engaging user
            weights: category -> weight; unknown categories and non-positive
                weights are ignored
            intensity: How far this event moves the color, clamped to [0.05, 1.5]
            timestamp: Event time (epoch ms), defaults to now

        Returns:
            Visible color, dominant category and composite weights
        """
        known = {key: value for key, value in (weights or {}).items() if is_known_category(key)}
        if weights and len(known) < len(weights):
            unknown = sorted(set(weights) - set(known))
            logger.warning(f"[{user_id}] Ignoring unknown resonance categories: {unknown}")
        incoming = normalize_weights(known)
        if not incoming:
            return self.get_state(user_id)

        timestamp = now_ms() if timestamp is None else timestamp
        intensity = clamp(intensity, INTENSITY_MIN, INTENSITY_MAX) if math.isfinite(intensity) else 1.0

        with self._locks.hold(user_id):
            entry = self._get_or_create(user_id, timestamp)

            recent = decay_weights(entry.recent, entry.recent_timestamp, timestamp, self.recent_half_life_ms)
            baseline = decay_weights(entry.baseline, entry.baseline_timestamp, timestamp, self.baseline_half_life_ms)

            for category_id, weight in incoming.items():
                recent[category_id] = recent.get(category_id, 0.0) + weight * RECENT_CONTRIBUTION
                baseline[category_id] = baseline.get(category_id, 0.0) + weight * BASELINE_CONTRIBUTION

            recent = normalize_weights(recent)
            baseline = normalize_weights(baseline)
            composite = composite_weights(recent, baseline)
            target_color = blend_category_colors(composite)

            next_color = entry.current_color
            if entry.mode != ColorMode.LOCKED and not same_color(entry.current_color, target_color):
                next_color = lerp_color(entry.current_color, target_color, intensity_to_lerp(intensity))

            # Nothing is written until every value above has been computed
            entry.recent = recent
            entry.baseline = baseline
            entry.recent_timestamp = max(entry.recent_timestamp, timestamp)
            entry.baseline_timestamp = max(entry.baseline_timestamp, timestamp)
            entry.dominant_category = dominant_category(composite)
            entry.current_color = next_color

            result = ResonanceResult(
                color=entry.visible_color,
                dominant_category=entry.dominant_category,
                weights=composite,
            )
            locked = entry.mode == ColorMode.LOCKED

        if not locked and not same_color(self.presence.get_color(user_id), result.color):
            self.presence.set_color(user_id, result.color)

        logger.debug(f"[{user_id}] Resonance -> {result.color} (dominant={result.dominant_category})")
        return result

    def register_content_pulse(
        self,
        user_id: str,
        category: str,
        duration_ms: float | None = None,
        timestamp: float | None = None,
    ) -> Pulse | None:
        """
        Append a pulse marker, discarding pulses that have already expired.

        Returns None (and records nothing) for an unknown category.
        """
        if not is_known_category(category):
            logger.warning(f"[{user_id}] Ignoring pulse for unknown category '{category}'")
            return None

        timestamp = now_ms() if timestamp is None else timestamp
        duration = settings.PULSE_DURATION_MS if duration_ms is None else duration_ms
        pulse = Pulse(id=f"node-pulse-{uuid.uuid4().hex[:12]}", category=category, started_at=timestamp, duration=duration)

        with self._locks.hold(user_id):
            entry = self._get_or_create(user_id, timestamp)
            entry.pulses = [existing for existing in entry.pulses if existing.is_active(timestamp)]
            entry.pulses.append(pulse)
        return pulse

    def clear_pulse(self, user_id: str, pulse_id: str) -> bool:
        if user_id not in self._entries:
            return False
        with self._locks.hold(user_id):
            entry = self._entries.get(user_id)
            if entry is None:
                return False
            remaining = [pulse for pulse in entry.pulses if pulse.id != pulse_id]
            cleared = len(remaining) != len(entry.pulses)
            entry.pulses = remaining
        return cleared

    def sync_manual_preferences(self, user_id: str, preferences: ColorPreferences | None = None) -> ResonanceEntry:
        """
        Switch a user between dynamic and locked color.

        Locking with a color pins it immediately and pushes it to presence.
        """
        preferences = preferences or ColorPreferences()
        locked_color = coerce_hex_color(preferences.locked_color) if preferences.locked_color else None
        if preferences.locked_color and locked_color is None:
            logger.warning(f"[{user_id}] Ignoring invalid locked color {preferences.locked_color!r}")

        with self._locks.hold(user_id):
            entry = self._get_or_create(user_id)
            entry.mode = preferences.mode
            entry.locked_color = locked_color
            if entry.mode == ColorMode.LOCKED and locked_color:
                entry.current_color = locked_color
            snapshot = entry.model_copy(deep=True)

        if snapshot.mode == ColorMode.LOCKED and locked_color:
            self.presence.set_color(user_id, locked_color)
        logger.info(f"[{user_id}] Color mode set to {snapshot.mode.value}")
        return snapshot

    def hydrate_user_color(self, user_id: str, color: str) -> None:
        """Adopt an externally stored color unless the user is locked."""
        normalized = coerce_hex_color(color)
        if normalized is None:
            logger.warning(f"[{user_id}] Ignoring invalid hydrate color {color!r}")
            return
        with self._locks.hold(user_id):
            entry = self._get_or_create(user_id)
            entry.current_color = entry.locked_color if entry.mode == ColorMode.LOCKED and entry.locked_color else normalized

    def remove_user(self, user_id: str) -> bool:
        with self._locks.hold(user_id):
            removed = self._entries.pop(user_id, None) is not None
        if removed and self._owns_locks:
            self._locks.discard(user_id)
        return removed

    def snapshot(self) -> dict[str, dict[str, Any]]:
        snapshot = {}
        for user_id in list(self._entries):
            entry = self.get_entry(user_id)
            if entry is not None:
                snapshot[user_id] = entry.model_dump(mode="json")
        return snapshot

    def restore(self, data: Mapping[str, Mapping[str, Any]]) -> None:
        for user_id, raw in data.items():
            entry = ResonanceEntry.model_validate(raw)
            with self._locks.hold(user_id):
                self._entries[user_id] = entry
        logger.info(f"Restored {len(data)} resonance entries")
