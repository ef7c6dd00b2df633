from pydantic import BaseModel, Field

from harmonia.core.constants import MS_PER_DAY
from harmonia.utils.clock import half_life_factor
from harmonia.utils.vector import InterestVector


class InterestEntry(BaseModel):
    """A single decaying topic weight."""

    value: float = Field(default=0.0, ge=0.0, le=1.0)
    last_updated: float = Field(description="Epoch milliseconds of the last decay or reinforcement")
    locked: bool = False


class InterestProfile(BaseModel):
    """
    Per-user map of topic -> decaying interest entry.

    Decay is lazy: nothing happens until decay_to() is called, which is what
    every read and write path does first.
    """

    entries: dict[str, InterestEntry] = Field(default_factory=dict)
    half_life_days: float | None = Field(default=None, description="None means the store default applies")
    last_decay_check: float | None = None

    def decay_to(self, timestamp: float, half_life_days: float) -> InterestVector:
        """
        Decay every unlocked entry up to timestamp and return a snapshot.

        Entries whose last update is at or after timestamp are left alone, so
        replaying historical events never inflates a value.

        Args:
            timestamp: Epoch milliseconds to decay to
            half_life_days: Half-life to use when the profile has no override

        Returns:
            Snapshot of {topic: value} after decay
        """
        half_life_ms = (self.half_life_days or half_life_days) * MS_PER_DAY
        for entry in self.entries.values():
            if entry.locked:
                continue
            elapsed = timestamp - entry.last_updated
            if elapsed <= 0:
                continue
            entry.value = entry.value * half_life_factor(elapsed, half_life_ms)
            entry.last_updated = timestamp
        self.last_decay_check = timestamp
        return self.snapshot()

    def snapshot(self) -> InterestVector:
        return {topic: entry.value for topic, entry in self.entries.items()}


class InterestDescriptor(BaseModel):
    topic: str
    value: float
    locked: bool
    last_updated: float
