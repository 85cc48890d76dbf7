"""FastMCP server exposing the game loop as MCP tools.

Tools:
  - start_game(premise): initialize a new game
  - take_action(action): resolve one turn
  - character_sheet(): current character, quest, choices and status
  - relationships(): known NPCs, most recent interaction first

The server drives a single module-level GameSession, replaced via
set_session() in tests. Tool results are the camelCase JSON the HTTP API
returns; rejected input comes back as {"error": "..."}.

Usage:
    uv run python -m backend.mcp_server
"""

from typing import Any

from mcp.server.fastmcp import FastMCP

from gemini_studio.config import get_settings
from gemini_studio.llm import from_settings
from gemini_studio.session import GameSession, SessionError
from gemini_studio.views import gauge_percent, score_band, sorted_relationships

mcp = FastMCP("gemini-studio")

_session: GameSession | None = None


def set_session(session: GameSession) -> None:
    """Replace the active session (used in tests)."""
    global _session
    _session = session


def get_session() -> GameSession:
    """Return the active session, creating one from the environment on first use."""
    global _session
    if _session is None:
        _session = GameSession(from_settings(get_settings()))
    return _session


@mcp.tool()
async def start_game(premise: str) -> dict[str, Any]:
    """Start a new text adventure from a free-text premise."""
    try:
        state = await get_session().start(premise)
    except (SessionError, ValueError) as e:
        return {"error": str(e)}
    return state.model_dump(mode="json", by_alias=True)


@mcp.tool()
async def take_action(action: str) -> dict[str, Any]:
    """Perform an action (free text or one of the offered choices)."""
    try:
        state = await get_session().act(action)
    except (SessionError, ValueError) as e:
        return {"error": str(e)}
    return state.model_dump(mode="json", by_alias=True)


@mcp.tool()
def character_sheet() -> dict[str, Any]:
    """Return the character sheet, active quest, offered choices and game status."""
    state = get_session().state
    character = state.character
    return {
        "status": state.status.value,
        "turnCount": state.turn_count,
        "character": character.model_dump(mode="json", by_alias=True) if character else None,
        "choices": list(state.current_choices),
        "hpPercent": gauge_percent(character.hp) if character else None,
        "spPercent": gauge_percent(character.sp) if character else None,
        "error": state.error,
    }


@mcp.tool()
def relationships() -> dict[str, Any]:
    """List known characters, most recent interaction first."""
    character = get_session().state.character
    if character is None:
        return {"relationships": []}
    return {"relationships": [
        {**r.model_dump(mode="json", by_alias=True), "band": score_band(r.relationship_score)}
        for r in sorted_relationships(character.relationships)
    ]}


if __name__ == "__main__":
    mcp.run()
