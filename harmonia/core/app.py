import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from harmonia.api.main import api_router
from harmonia.services.engine import ResonanceEngine

from .config import settings
from .version import __version__


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def create_app(engine: ResonanceEngine | None = None) -> FastAPI:
    """
    Build the HTTP app around one engine instance.

    Tests pass their own engine; the module-level app builds a fresh one.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifespan events (startup/shutdown).
        """
        configure_logging()
        logger.info(f"Harmonia {__version__} started ({settings.APP_ENV})")
        yield
        logger.info("Harmonia shutting down")

    app = FastAPI(
        title="Harmonia",
        description="Interest profiles, resonant feeds and resonance colors",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.APP_ENV != "development" else "/docs",
        redoc_url=None if settings.APP_ENV != "development" else "/redoc",
    )
    app.state.engine = engine or ResonanceEngine()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


app = create_app()
