import math
from collections.abc import Mapping
from typing import Any

from loguru import logger

from harmonia.core.config import settings
from harmonia.core.constants import MIN_HALF_LIFE_DAYS
from harmonia.core.locks import UserLocks
from harmonia.models.interest import InterestDescriptor, InterestEntry, InterestProfile
from harmonia.utils.clock import now_ms
from harmonia.utils.vector import InterestVector, clamp, normalize_vector, sanitize_vector


class InterestProfileStore:
    """
    Owns every user's decaying interest profile.

    Design principles:
    - Additive reinforcement: value += topic_value * weight, clamped to [0, 1]
    - Lazy decay: applied at read/write time, never by a timer
    - Locked entries ignore decay, ingestion and imports; only an explicit
      set_interest_value changes them
    - Missing users read as empty, never raise
    """

    def __init__(self, default_half_life_days: float | None = None, locks: UserLocks | None = None):
        self.default_half_life_days = default_half_life_days or settings.DEFAULT_HALF_LIFE_DAYS
        self._profiles: dict[str, InterestProfile] = {}
        self._owns_locks = locks is None
        self._locks = locks or UserLocks()

    def _half_life(self, profile: InterestProfile) -> float:
        return profile.half_life_days or self.default_half_life_days

    def _get_or_create(self, user_id: str) -> InterestProfile:
        profile = self._profiles.get(user_id)
        if profile is None:
            profile = InterestProfile()
            self._profiles[user_id] = profile
        return profile

    def has_profile(self, user_id: str) -> bool:
        return user_id in self._profiles

    def get_profile(self, user_id: str) -> InterestProfile | None:
        """Deep copy of the stored profile, without applying decay."""
        if user_id not in self._profiles:
            return None
        with self._locks.hold(user_id):
            profile = self._profiles.get(user_id)
            return profile.model_copy(deep=True) if profile else None

    def ensure_profile(
        self, user_id: str, seed_vector: Mapping[str, float] | None = None, timestamp: float | None = None
    ) -> None:
        """
        Create a profile if the user has none. Never overwrites an existing one.

        Args:
            user_id: Owner of the profile
            seed_vector: Optional starting interests, L1-normalized before use
            timestamp: Creation time (epoch ms), defaults to now
        """
        with self._locks.hold(user_id):
            if user_id in self._profiles:
                return
            timestamp = now_ms() if timestamp is None else timestamp
            normalized = normalize_vector(sanitize_vector(seed_vector))
            entries = {
                topic: InterestEntry(value=clamp(value, 0.0, 1.0), last_updated=timestamp)
                for topic, value in normalized.items()
            }
            self._profiles[user_id] = InterestProfile(entries=entries, last_decay_check=timestamp)
            logger.debug(f"[{user_id}] Created interest profile with {len(entries)} seed topics")

    def get_interest_vector(
        self, user_id: str, apply_decay: bool = True, timestamp: float | None = None
    ) -> InterestVector:
        """
        Snapshot of the user's interests.

        With apply_decay the stored entries are decayed in place first, so this
        read is also a write.
        """
        if user_id not in self._profiles:
            return {}
        with self._locks.hold(user_id):
            profile = self._profiles.get(user_id)
            if profile is None:
                return {}
            if not apply_decay:
                return profile.snapshot()
            timestamp = now_ms() if timestamp is None else timestamp
            return profile.decay_to(timestamp, self.default_half_life_days)

    def get_interest_descriptors(self, user_id: str, timestamp: float | None = None) -> list[InterestDescriptor]:
        """Decayed entries with their lock state, strongest first."""
        if user_id not in self._profiles:
            return []
        with self._locks.hold(user_id):
            profile = self._profiles.get(user_id)
            if profile is None:
                return []
            profile.decay_to(now_ms() if timestamp is None else timestamp, self.default_half_life_days)
            descriptors = [
                InterestDescriptor(topic=topic, value=entry.value, locked=entry.locked, last_updated=entry.last_updated)
                for topic, entry in profile.entries.items()
            ]
        return sorted(descriptors, key=lambda d: d.value, reverse=True)

    def record_interaction(
        self,
        user_id: str,
        vector: Mapping[str, float] | None,
        weight: float | None = None,
        timestamp: float | None = None,
    ) -> None:
        """
        Reinforce the user's interests with an engagement vector.

        Pending decay is applied at the interaction timestamp (not wall-clock
        now) so historical replays land on the same values.

        Args:
            user_id: Engaging user
            vector: Topic vector of the content engaged with
            weight: Signal strength, defaults to settings.INTERACTION_WEIGHT
            timestamp: Interaction time (epoch ms), defaults to now
        """
        cleaned = sanitize_vector(vector)
        if not cleaned:
            return
        weight = settings.INTERACTION_WEIGHT if weight is None else weight
        if not math.isfinite(weight):
            logger.warning(f"[{user_id}] Ignoring interaction with non-finite weight {weight}")
            return
        timestamp = now_ms() if timestamp is None else timestamp

        with self._locks.hold(user_id):
            profile = self._get_or_create(user_id)
            profile.decay_to(timestamp, self.default_half_life_days)

            for topic, value in cleaned.items():
                current = profile.entries.get(topic)
                if current is None:
                    profile.entries[topic] = InterestEntry(value=clamp(value * weight, 0.0, 1.0), last_updated=timestamp)
                    continue
                if current.locked:
                    continue
                current.value = clamp(current.value + value * weight, 0.0, 1.0)
                current.last_updated = max(current.last_updated, timestamp)

        logger.debug(f"[{user_id}] Recorded interaction over {len(cleaned)} topics (weight={weight})")

    def integrate_public_content(
        self, user_id: str, vector: Mapping[str, float] | None, timestamp: float | None = None
    ) -> None:
        """Publishing or viewing public content carries a stronger signal."""
        self.record_interaction(user_id, vector, weight=settings.PUBLIC_CONTENT_WEIGHT, timestamp=timestamp)

    def set_interest_value(self, user_id: str, topic: str, value: float, timestamp: float | None = None) -> bool:
        """
        Directly set one topic's value.

        This is the only mutation a locked entry accepts; the lock stays on.
        No-op (returns False) when the profile or topic does not exist or when
        value is not a finite number.
        """
        if user_id not in self._profiles:
            return False
        topic = topic.strip().lower()
        if not math.isfinite(value):
            logger.warning(f"[{user_id}] Ignoring non-finite value for '{topic}'")
            return False

        with self._locks.hold(user_id):
            profile = self._profiles.get(user_id)
            entry = profile.entries.get(topic) if profile else None
            if entry is None:
                return False
            entry.value = clamp(value, 0.0, 1.0)
            entry.last_updated = now_ms() if timestamp is None else timestamp

        logger.info(f"[{user_id}] Set interest '{topic}' to {entry.value:.3f}")
        return True

    def toggle_interest_lock(self, user_id: str, topic: str, timestamp: float | None = None) -> bool | None:
        """
        Flip the lock on an existing topic.

        The profile is decayed before locking so the frozen value is current,
        and an unlocked entry restarts its decay clock from now.

        Returns:
            The new lock state, or None if the profile or topic does not exist
        """
        if user_id not in self._profiles:
            return None
        topic = topic.strip().lower()
        with self._locks.hold(user_id):
            profile = self._profiles.get(user_id)
            entry = profile.entries.get(topic) if profile else None
            if entry is None:
                return None
            timestamp = now_ms() if timestamp is None else timestamp
            profile.decay_to(timestamp, self.default_half_life_days)
            entry.locked = not entry.locked
            if not entry.locked:
                entry.last_updated = max(entry.last_updated, timestamp)

        logger.info(f"[{user_id}] Interest '{topic}' {'locked' if entry.locked else 'unlocked'}")
        return entry.locked

    def set_half_life_days(self, user_id: str, days: float) -> None:
        if not math.isfinite(days):
            logger.warning(f"[{user_id}] Ignoring non-finite half-life {days}")
            return
        with self._locks.hold(user_id):
            profile = self._get_or_create(user_id)
            profile.half_life_days = max(MIN_HALF_LIFE_DAYS, days)
        logger.info(f"[{user_id}] Interest half-life set to {profile.half_life_days} days")

    def get_half_life_days(self, user_id: str) -> float:
        profile = self._profiles.get(user_id)
        if profile is None:
            return self.default_half_life_days
        return self._half_life(profile)

    def import_interests(
        self, user_id: str, vector: Mapping[str, float] | None, timestamp: float | None = None
    ) -> None:
        """
        Bulk-load interests (e.g. from an export).

        The vector is L1-normalized first and locked topics are left untouched.
        """
        normalized = normalize_vector(sanitize_vector(vector))
        if not normalized:
            return
        timestamp = now_ms() if timestamp is None else timestamp

        with self._locks.hold(user_id):
            profile = self._get_or_create(user_id)
            skipped = 0
            for topic, value in normalized.items():
                entry = profile.entries.get(topic)
                if entry is not None and entry.locked:
                    skipped += 1
                    continue
                profile.entries[topic] = InterestEntry(value=clamp(value, 0.0, 1.0), last_updated=timestamp)

        logger.info(f"[{user_id}] Imported {len(normalized) - skipped} interests ({skipped} locked skipped)")

    def remove_profile(self, user_id: str) -> bool:
        with self._locks.hold(user_id):
            removed = self._profiles.pop(user_id, None) is not None
        if removed and self._owns_locks:
            self._locks.discard(user_id)
            logger.info(f"[{user_id}] Removed interest profile")
        return removed

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Plain-dict copy of every profile, suitable for any persistence backend."""
        snapshot = {}
        for user_id in list(self._profiles):
            profile = self.get_profile(user_id)
            if profile is not None:
                snapshot[user_id] = profile.model_dump()
        return snapshot

    def restore(self, data: Mapping[str, Mapping[str, Any]]) -> None:
        """Replace the user's profiles listed in data."""
        for user_id, raw in data.items():
            profile = InterestProfile.model_validate(raw)
            with self._locks.hold(user_id):
                self._profiles[user_id] = profile
        logger.info(f"Restored {len(data)} interest profiles")
