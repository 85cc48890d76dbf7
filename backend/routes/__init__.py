"""FastAPI API endpoints under /api.

Endpoint groups: health, game (state, start, actions, relationships panel).
All game endpoints are bound to the caller's session via the `sid` cookie.
"""

from fastapi import APIRouter

from .game import router as game_router
from .health import router as health_router

router = APIRouter()
router.include_router(health_router)
router.include_router(game_router)
