"""Engine calls: the two structured requests sent to the generation service.

All game rules (inventory logic, combat, relationship scoring, narrative
continuity) live in the system instruction below and are carried out by the
model. This module only builds the requests, parses the JSON that comes
back, and validates its shape against the response models.

Every failure, including a bad setting read at call time or an exception
from the client itself, collapses into one of two exceptions:

    InitializationError: initialize_game() failed
    TurnError: process_turn() failed

The original exception is chained as __cause__ for logging.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from gemini_studio.config import Settings, get_settings
from gemini_studio.context import build_turn_context
from gemini_studio.llm import LLM, GenerationRequest
from gemini_studio.models import Character, InitGameResponse, TurnResponse
from gemini_studio.prompts import INIT_TEMPLATE, TURN_TEMPLATE, render_prompt

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
Role: You are an advanced, adaptive Text Adventure Game Engine. You are not a co-writer; you are the Dungeon Master and the Physics Engine. Your goal is to simulate a persistent world based on the user's chosen setting, tracking their inventory, health, narrative choices, and relationships with strict continuity.

Phase 1: Initialization
Based on the user's premise, generate a character sheet with HP, SP (Stamina/Sanity), 3 Contextual Skills (1-10), Starting Inventory, and any initial NPC Relationships.

Phase 2: The Core Game Loop
For every turn, you must perform logical checks:
1. Inventory Logic: strictly check if items exist before allowing use.
2. Dynamic Dialogue: analyze tone.
3. Long-Term Memory: scan previous context.
4. Relationship System:
   - Track every known character.
   - Update 'relationshipScore' (0-100) based on player actions (Kindness=+Score, Insults/Betrayal=-Score).
   - Update 'attitude', 'lastInteractionSummary', 'lastInteractionTime' (current turn), and 'importantFlags'.
   - Add new NPCs to the list when met.
   - Sort the relationship list so that characters involved in the current turn are at the top (most recent 'lastInteractionTime').

Phase 3: Input Handling
Standard Action: Resolve generated options.
Free Text Action: Compare against Stats. High stat = success. Low stat = failure/damage.

CRITICAL OUTPUT RULE:
You must output JSON ONLY. Do not output markdown text outside the JSON block.
""".strip()


# ---------------------------------------------------------------------------
# Response schemas (Gemini OpenAPI subset; HttpLLM converts for openai)
# ---------------------------------------------------------------------------

def _string(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "STRING"}
    if description:
        schema["description"] = description
    return schema


def _integer(description: str) -> dict[str, Any]:
    return {"type": "INTEGER", "description": description}


def _strings(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "ARRAY", "items": {"type": "STRING"}}
    if description:
        schema["description"] = description
    return schema


RELATIONSHIP_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": _string(),
            "fullName": _string(),
            "role": _string(),
            "relationshipScore": _integer("0-100"),
            "attitude": _string(),
            "lastInteractionSummary": _string(),
            "lastInteractionTime": _integer("Turn index"),
            "importantFlags": _strings(),
            "history": _strings("Key events in reverse chronological order"),
        },
        "required": [
            "id", "fullName", "role", "relationshipScore", "attitude",
            "lastInteractionSummary", "lastInteractionTime", "importantFlags", "history",
        ],
    },
}

INIT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "classTitle": _string("A creative title for the character class/role"),
        "hpMax": _integer("Max HP (10-100)"),
        "spMax": _integer("Max SP (10-100)"),
        "stats": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": _string(),
                    "value": _integer("1 to 10"),
                },
                "required": ["name", "value"],
            },
        },
        "startingInventory": _strings(),
        "initialScene": _string("The opening narrative paragraph."),
        "firstQuest": _string("The current main objective."),
        "choices": _strings("3 logical options for the user."),
        "relationships": RELATIONSHIP_SCHEMA,
    },
    "required": [
        "classTitle", "hpMax", "spMax", "stats", "startingInventory",
        "initialScene", "firstQuest", "choices", "relationships",
    ],
}

TURN_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "narrative": _string("The story result of the action."),
        "hpChange": _integer("Negative for damage, positive for healing, 0 for none."),
        "spChange": _integer("Negative for exhaustion/sanity loss, positive for recovery."),
        "inventoryAdd": _strings("Items gained."),
        "inventoryRemove": _strings("Items lost or consumed."),
        "questUpdate": _string("New objective if changed, otherwise null/empty."),
        "choices": _strings("3 new options."),
        "summaryUpdate": _string("Important facts to add to long-term memory."),
        "isGameOver": {"type": "BOOLEAN"},
        "relationships": RELATIONSHIP_SCHEMA,
    },
    "required": [
        "narrative", "hpChange", "spChange", "inventoryAdd", "inventoryRemove",
        "choices", "isGameOver", "relationships",
    ],
}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GameError(Exception):
    """Base class for failed engine calls."""


class InitializationError(GameError):
    """The game could not be initialized."""


class TurnError(GameError):
    """A turn could not be resolved."""


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------

async def initialize_game(
    llm: LLM, premise: str, settings: Settings | None = None
) -> InitGameResponse:
    """Ask the engine for a character sheet, opening scene and first choices."""
    try:
        settings = settings or get_settings()
        request = GenerationRequest(
            model=settings.model,
            system_instruction=SYSTEM_INSTRUCTION,
            contents=render_prompt(INIT_TEMPLATE, {"premise": premise}),
            response_schema=INIT_SCHEMA,
        )
        text = await llm("initialize", request)
        return InitGameResponse.model_validate(json.loads(text))
    except Exception as e:
        raise InitializationError("initialization failed") from e


async def process_turn(
    llm: LLM,
    action: str,
    character: Character,
    summary: str,
    recent_history: str,
    turn_count: int,
    settings: Settings | None = None,
) -> TurnResponse:
    """Send the action and the current state snapshot; return the engine's verdict."""
    try:
        settings = settings or get_settings()
        ctx = build_turn_context(action, character, summary, recent_history, turn_count)
        request = GenerationRequest(
            model=settings.model,
            system_instruction=SYSTEM_INSTRUCTION,
            contents=render_prompt(TURN_TEMPLATE, ctx),
            response_schema=TURN_SCHEMA,
            thinking_budget=settings.thinking_budget,
        )
        text = await llm("turn", request)
        return TurnResponse.model_validate(json.loads(text))
    except Exception as e:
        raise TurnError("turn failed") from e
