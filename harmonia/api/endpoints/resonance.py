from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator, model_validator

from harmonia.api.deps import get_engine
from harmonia.models.resonance import ColorMode, ColorPreferences, Pulse, ResonanceCategory, ResonanceResult
from harmonia.services.engine import ResonanceEngine
from harmonia.services.resonance.categories import get_category_legend
from harmonia.utils.color import parse_hex_color

router = APIRouter(tags=["resonance"])


class ResonanceEngagementRequest(BaseModel):
    """Either a topic vector or explicit category weights."""

    vector: dict[str, float] | None = None
    categories: dict[str, float] | None = None
    intensity: float = Field(default=1.0, description="Clamped into [0.05, 1.5]")
    timestamp: float | None = None

    @model_validator(mode="after")
    def _one_source(self):
        if self.vector is None and self.categories is None:
            raise ValueError("Provide either vector or categories")
        return self


class PulseRequest(BaseModel):
    category: str
    duration_ms: float | None = Field(default=None, gt=0)
    timestamp: float | None = None


class PreferencesRequest(BaseModel):
    mode: ColorMode = ColorMode.DYNAMIC
    locked_color: str | None = None

    @field_validator("locked_color")
    @classmethod
    def _valid_color(cls, value: str | None) -> str | None:
        return parse_hex_color(value) if value is not None else None


class ResonanceStateResponse(ResonanceResult):
    mode: ColorMode = ColorMode.DYNAMIC
    pulses: list[Pulse] = Field(default_factory=list)


@router.get("/resonance/categories", response_model=list[ResonanceCategory])
async def list_categories() -> list[ResonanceCategory]:
    return get_category_legend()


@router.get("/users/{user_id}/resonance", response_model=ResonanceStateResponse)
def get_resonance(user_id: str, engine: ResonanceEngine = Depends(get_engine)) -> ResonanceStateResponse:
    state = engine.resonance.get_state(user_id)
    entry = engine.resonance.get_entry(user_id)
    if entry is None:
        return ResonanceStateResponse(**state.model_dump())
    return ResonanceStateResponse(**state.model_dump(), mode=entry.mode, pulses=entry.pulses)


@router.post("/users/{user_id}/resonance/engagements", response_model=ResonanceResult)
def register_engagement(
    user_id: str, payload: ResonanceEngagementRequest, engine: ResonanceEngine = Depends(get_engine)
) -> ResonanceResult:
    if payload.categories is not None:
        return engine.resonance.register_category_weights(
            user_id, payload.categories, intensity=payload.intensity, timestamp=payload.timestamp
        )
    return engine.resonance.register_interest_engagement(
        user_id, payload.vector, intensity=payload.intensity, timestamp=payload.timestamp
    )


@router.post("/users/{user_id}/resonance/pulses", response_model=Pulse)
def register_pulse(user_id: str, payload: PulseRequest, engine: ResonanceEngine = Depends(get_engine)) -> Pulse:
    pulse = engine.resonance.register_content_pulse(
        user_id, payload.category, duration_ms=payload.duration_ms, timestamp=payload.timestamp
    )
    if pulse is None:
        raise HTTPException(status_code=422, detail=f"Unknown category '{payload.category}'")
    return pulse


@router.delete("/users/{user_id}/resonance/pulses/{pulse_id}")
def clear_pulse(user_id: str, pulse_id: str, engine: ResonanceEngine = Depends(get_engine)) -> dict[str, bool]:
    return {"cleared": engine.resonance.clear_pulse(user_id, pulse_id)}


@router.put("/users/{user_id}/resonance/preferences", response_model=ResonanceStateResponse)
def sync_preferences(
    user_id: str, payload: PreferencesRequest, engine: ResonanceEngine = Depends(get_engine)
) -> ResonanceStateResponse:
    entry = engine.resonance.sync_manual_preferences(
        user_id, ColorPreferences(mode=payload.mode, locked_color=payload.locked_color)
    )
    state = engine.resonance.get_state(user_id)
    return ResonanceStateResponse(**state.model_dump(), mode=entry.mode, pulses=entry.pulses)
