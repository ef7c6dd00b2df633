from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from harmonia.api.deps import get_engine
from harmonia.models.interest import InterestDescriptor
from harmonia.services.engine import ResonanceEngine

router = APIRouter(prefix="/users/{user_id}", tags=["interests"])


class InteractionRequest(BaseModel):
    vector: dict[str, float] = Field(description="Topic -> weight of the content engaged with")
    weight: float | None = Field(default=None, ge=0.0, description="Signal strength, defaults to the configured weight")
    public: bool = Field(default=False, description="Treat as public content integration (stronger weight)")
    timestamp: float | None = Field(default=None, description="Epoch milliseconds, defaults to now")


class ImportRequest(BaseModel):
    vector: dict[str, float]


class InterestValueRequest(BaseModel):
    value: float = Field(ge=0.0, le=1.0)


class HalfLifeRequest(BaseModel):
    days: float = Field(gt=0.0)


class InterestVectorResponse(BaseModel):
    user_id: str
    vector: dict[str, float]
    half_life_days: float


def _vector_response(engine: ResonanceEngine, user_id: str, apply_decay: bool = True) -> InterestVectorResponse:
    return InterestVectorResponse(
        user_id=user_id,
        vector=engine.interests.get_interest_vector(user_id, apply_decay=apply_decay),
        half_life_days=engine.interests.get_half_life_days(user_id),
    )


@router.get("/interests", response_model=InterestVectorResponse)
def get_interests(
    user_id: str, apply_decay: bool = True, engine: ResonanceEngine = Depends(get_engine)
) -> InterestVectorResponse:
    return _vector_response(engine, user_id, apply_decay)


@router.put("/interests", response_model=InterestVectorResponse)
def import_interests(
    user_id: str, payload: ImportRequest, engine: ResonanceEngine = Depends(get_engine)
) -> InterestVectorResponse:
    engine.interests.import_interests(user_id, payload.vector)
    return _vector_response(engine, user_id)


@router.get("/interests/descriptors", response_model=list[InterestDescriptor])
def get_descriptors(user_id: str, engine: ResonanceEngine = Depends(get_engine)) -> list[InterestDescriptor]:
    return engine.interests.get_interest_descriptors(user_id)


@router.post("/interests/interactions", response_model=InterestVectorResponse)
def record_interaction(
    user_id: str, payload: InteractionRequest, engine: ResonanceEngine = Depends(get_engine)
) -> InterestVectorResponse:
    if payload.public:
        engine.interests.integrate_public_content(user_id, payload.vector, timestamp=payload.timestamp)
    else:
        engine.interests.record_interaction(user_id, payload.vector, weight=payload.weight, timestamp=payload.timestamp)
    return _vector_response(engine, user_id)


@router.put("/interests/half-life", response_model=InterestVectorResponse)
def set_half_life(
    user_id: str, payload: HalfLifeRequest, engine: ResonanceEngine = Depends(get_engine)
) -> InterestVectorResponse:
    engine.interests.set_half_life_days(user_id, payload.days)
    return _vector_response(engine, user_id)


@router.put("/interests/{topic}")
def set_interest_value(
    user_id: str, topic: str, payload: InterestValueRequest, engine: ResonanceEngine = Depends(get_engine)
) -> dict:
    applied = engine.interests.set_interest_value(user_id, topic, payload.value)
    return {"applied": applied, "vector": engine.interests.get_interest_vector(user_id)}


@router.post("/interests/{topic}/lock")
def toggle_lock(user_id: str, topic: str, engine: ResonanceEngine = Depends(get_engine)) -> dict:
    """Returns locked=null when the topic does not exist."""
    return {"topic": topic.strip().lower(), "locked": engine.interests.toggle_interest_lock(user_id, topic)}


@router.delete("")
def remove_user(user_id: str, engine: ResonanceEngine = Depends(get_engine)) -> dict[str, str]:
    engine.remove_user(user_id)
    return {"status": "removed"}
