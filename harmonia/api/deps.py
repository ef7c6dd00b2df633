from fastapi import Request

from harmonia.services.engine import ResonanceEngine


def get_engine(request: Request) -> ResonanceEngine:
    """The engine instance owned by the running app."""
    return request.app.state.engine
