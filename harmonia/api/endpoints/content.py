from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from harmonia.api.deps import get_engine
from harmonia.models.content import ContentItem, EngagementType, Visibility
from harmonia.services.engine import ResonanceEngine

router = APIRouter(tags=["content"])


class PublishRequest(BaseModel):
    author_id: str
    interest_vector: dict[str, float] | None = Field(default=None, description="Falls back to a vector built from tags")
    tags: list[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    nsfw: bool = False
    content_id: str | None = None
    timestamp: float | None = None


class EngagementRequest(BaseModel):
    user_id: str
    type: EngagementType
    timestamp: float | None = None


class CommentRequest(BaseModel):
    author_id: str
    interest_vector: dict[str, float] | None = None
    timestamp: float | None = None


class FriendshipRequest(BaseModel):
    user_a: str
    user_b: str


class FlaggedContentRequest(BaseModel):
    allowed: bool


@router.post("/content", response_model=ContentItem)
def publish_content(payload: PublishRequest, engine: ResonanceEngine = Depends(get_engine)) -> ContentItem:
    return engine.engagement.publish_content(
        payload.author_id,
        interest_vector=payload.interest_vector,
        tags=payload.tags,
        visibility=payload.visibility,
        nsfw=payload.nsfw,
        content_id=payload.content_id,
        timestamp=payload.timestamp,
    )


@router.get("/content/{content_id}", response_model=ContentItem)
def get_content(content_id: str, engine: ResonanceEngine = Depends(get_engine)) -> ContentItem:
    item = engine.content.get(content_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return item


@router.post("/content/{content_id}/engagements", response_model=ContentItem)
def record_engagement(
    content_id: str, payload: EngagementRequest, engine: ResonanceEngine = Depends(get_engine)
) -> ContentItem:
    item = engine.engagement.record_engagement(content_id, payload.user_id, payload.type, timestamp=payload.timestamp)
    if item is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return item


@router.post("/content/{content_id}/comments", response_model=ContentItem)
def add_comment(content_id: str, payload: CommentRequest, engine: ResonanceEngine = Depends(get_engine)) -> ContentItem:
    item = engine.engagement.add_comment(
        content_id, payload.author_id, interest_vector=payload.interest_vector, timestamp=payload.timestamp
    )
    if item is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return item


@router.post("/friends")
def add_friendship(payload: FriendshipRequest, engine: ResonanceEngine = Depends(get_engine)) -> dict[str, str]:
    engine.friends.add_friendship(payload.user_a, payload.user_b)
    return {"status": "ok"}


@router.delete("/friends/{user_a}/{user_b}")
def remove_friendship(user_a: str, user_b: str, engine: ResonanceEngine = Depends(get_engine)) -> dict[str, str]:
    engine.friends.remove_friendship(user_a, user_b)
    return {"status": "ok"}


@router.put("/users/{user_id}/preferences/flagged-content")
def set_flagged_content(
    user_id: str, payload: FlaggedContentRequest, engine: ResonanceEngine = Depends(get_engine)
) -> dict:
    engine.preferences.set_allow_flagged(user_id, payload.allowed)
    return {"user_id": user_id, "allowed": payload.allowed}
