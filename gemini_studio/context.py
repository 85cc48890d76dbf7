"""Context builder: the bounded view of the game sent with each turn.

Continuity beyond the trailing window relies entirely on the free-text
long-term summary; older history entries are never replayed.
"""

import json
from typing import Any

from pydantic import BaseModel

from gemini_studio.models import Character, HistoryItem

HISTORY_WINDOW = 5


def recent_history(history: list[HistoryItem], window: int = HISTORY_WINDOW) -> str:
    """Join the last `window` entries as "role: content" lines, oldest first."""
    if window <= 0:
        return ""
    return "\n".join(f"{item.role}: {item.content}" for item in history[-window:])


def _dump_models(models: list[BaseModel]) -> str:
    return json.dumps([m.model_dump(mode="json", by_alias=True) for m in models])


def character_snapshot(character: Character) -> dict[str, str]:
    """Flatten a character into the pre-formatted strings the turn template uses."""
    return {
        "class_title": character.class_title,
        "hp": f"{character.hp.current}/{character.hp.max}",
        "sp": f"{character.sp.current}/{character.sp.max}",
        "stats": _dump_models(character.stats),
        "inventory": json.dumps(character.inventory),
        "active_quest": character.active_quest,
        "relationships": _dump_models(character.relationships),
    }


def build_turn_context(
    action: str,
    character: Character,
    summary: str,
    recent: str,
    turn_count: int,
) -> dict[str, Any]:
    """Assemble template variables for gemini_studio.prompts.TURN_TEMPLATE."""
    return {
        "turn": str(turn_count),
        "char": character_snapshot(character),
        "summary": summary,
        "recent_history": recent,
        "action": action,
    }
