from enum import Enum

from pydantic import BaseModel, Field, field_validator

from harmonia.core.constants import RESONANCE_DEFAULT_COLOR
from harmonia.utils.color import coerce_hex_color

CategoryWeights = dict[str, float]


class ColorMode(str, Enum):
    DYNAMIC = "dynamic"
    LOCKED = "locked"


class ResonanceCategory(BaseModel):
    """Immutable taxonomy entry."""

    model_config = {"frozen": True}

    id: str
    label: str
    description: str
    color: str
    keywords: tuple[str, ...]


class Pulse(BaseModel):
    id: str
    category: str
    started_at: float
    duration: float

    def is_active(self, timestamp: float) -> bool:
        return self.started_at + self.duration > timestamp


class ResonanceEntry(BaseModel):
    """
    Per-user dual-timescale category memory and display color.

    recent and baseline are stored normalized (empty or summing to 1); decay
    only shrinks them relative to the next incoming event.
    """

    recent: CategoryWeights = Field(default_factory=dict)
    baseline: CategoryWeights = Field(default_factory=dict)
    recent_timestamp: float
    baseline_timestamp: float
    current_color: str
    mode: ColorMode = ColorMode.DYNAMIC
    locked_color: str | None = None
    dominant_category: str | None = None
    pulses: list[Pulse] = Field(default_factory=list)

    @field_validator("current_color", mode="before")
    @classmethod
    def _coerce_current_color(cls, value: object) -> str:
        return coerce_hex_color(value) or coerce_hex_color(RESONANCE_DEFAULT_COLOR)

    @field_validator("locked_color", mode="before")
    @classmethod
    def _coerce_locked_color(cls, value: object) -> str | None:
        return coerce_hex_color(value)

    @property
    def visible_color(self) -> str:
        """The color external consumers should paint."""
        if self.mode == ColorMode.LOCKED and self.locked_color:
            return self.locked_color
        return self.current_color


class ResonanceResult(BaseModel):
    color: str
    dominant_category: str | None = None
    weights: CategoryWeights = Field(default_factory=dict)


class ColorPreferences(BaseModel):
    mode: ColorMode = ColorMode.DYNAMIC
    locked_color: str | None = None
