from fastapi import APIRouter, Depends, Query

from harmonia.api.deps import get_engine
from harmonia.models.content import FeedEntry, FeedMode, FeedOptions
from harmonia.services.engine import ResonanceEngine

router = APIRouter(tags=["feed"])


@router.get("/users/{user_id}/feed", response_model=list[FeedEntry])
def get_feed(
    user_id: str,
    mode: FeedMode = FeedMode.RESONANT,
    limit: int | None = Query(default=None, ge=0),
    curiosity_ratio: float | None = Query(default=None, description="Clamped into [0.05, 0.5]"),
    engine: ResonanceEngine = Depends(get_engine),
) -> list[FeedEntry]:
    options = FeedOptions(mode=mode, limit=limit, curiosity_ratio=curiosity_ratio)
    return engine.feed.get_feed_for_user(user_id, options)
