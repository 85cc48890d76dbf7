"""Game endpoints: start, act, read state, relationships panel, discard.

Each browser is bound to one GameSession through an `sid` cookie, set on
the first response. Every state-returning endpoint answers with the full
GameState (camelCase JSON), including after a failed engine call: the
status is then 502 and the body's `error` carries the user-facing message.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from backend.sessions import SessionRegistry
from gemini_studio.models import GameState
from gemini_studio.reducer import initial_state
from gemini_studio.session import GameOverError, GameSession, SessionBusyError
from gemini_studio.views import score_band, sorted_relationships

from .models import ActionBody, RelationshipPanelBody, StartGameBody

router = APIRouter()

SID_COOKIE = "sid"
SID_MAX_AGE = 60 * 60 * 24 * 30


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _sid(request: Request) -> str:
    return request.cookies.get(SID_COOKIE) or SessionRegistry.new_id()


def _dump(state: GameState) -> dict[str, Any]:
    return state.model_dump(mode="json", by_alias=True)


def _respond(content: Any, sid: str, status_code: int = 200) -> JSONResponse:
    resp = JSONResponse(content, status_code=status_code)
    resp.set_cookie(SID_COOKIE, sid, max_age=SID_MAX_AGE, path="/", samesite="lax")
    return resp


def _existing_session(request: Request) -> tuple[str, GameSession]:
    sid = request.cookies.get(SID_COOKIE)
    session = _registry(request).get(sid) if sid else None
    if session is None:
        raise HTTPException(404, "No game in progress")
    return sid, session


@router.get("/game")
async def get_game(request: Request):
    """Current state of this browser's game (a fresh INIT state if none)."""
    sid = _sid(request)
    session = _registry(request).get(sid)
    state = session.state if session else initial_state()
    return _respond(_dump(state), sid)


@router.post("/game")
async def start_game(request: Request, body: StartGameBody):
    """Initialize a game from a free-text premise."""
    sid = _sid(request)
    session = _registry(request).get_or_create(sid)
    try:
        state = await session.start(body.premise)
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    except ValueError as e:
        raise HTTPException(422, str(e))
    return _respond(_dump(state), sid, 502 if state.error else 200)


@router.post("/game/actions")
async def take_action(request: Request, body: ActionBody):
    """Submit a free-text action or one of the offered choices."""
    sid, session = _existing_session(request)
    try:
        state = await session.act(body.action)
    except (SessionBusyError, GameOverError) as e:
        raise HTTPException(409, str(e))
    except ValueError as e:
        raise HTTPException(422, str(e))
    return _respond(_dump(state), sid, 502 if state.error else 200)


@router.get("/game/relationships")
async def list_relationships(request: Request):
    """Relationships in panel order, most recent interaction first."""
    sid, session = _existing_session(request)
    character = session.state.character
    relationships = sorted_relationships(character.relationships) if character else []
    return _respond(
        [
            {**r.model_dump(mode="json", by_alias=True), "band": score_band(r.relationship_score)}
            for r in relationships
        ],
        sid,
    )


@router.put("/game/relationships-panel")
async def set_relationship_panel(request: Request, body: RelationshipPanelBody):
    """Open or close the relationships panel."""
    sid, session = _existing_session(request)
    return _respond(_dump(session.set_relationship_panel(body.open)), sid)


@router.delete("/game")
async def discard_game(request: Request):
    """End this browser's session and discard its state."""
    sid = request.cookies.get(SID_COOKIE)
    if not sid or not _registry(request).discard(sid):
        raise HTTPException(404, "No game in progress")
    return {"ok": True}
