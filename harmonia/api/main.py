from fastapi import APIRouter

from .endpoints.content import router as content_router
from .endpoints.feed import router as feed_router
from .endpoints.health import router as health_router
from .endpoints.interests import router as interests_router
from .endpoints.resonance import router as resonance_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "Harmonia resonance engine is running"}


api_router.include_router(health_router)
api_router.include_router(interests_router)
api_router.include_router(content_router)
api_router.include_router(feed_router)
api_router.include_router(resonance_router)
