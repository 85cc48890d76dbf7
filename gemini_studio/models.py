"""Core domain models.

The game state and everything the generation service sends back are plain
pydantic models. Attribute names are snake_case; the JSON wire format (both
what the model returns and what the API emits) uses camelCase aliases.

State models are frozen: transitions in gemini_studio.reducer always build a
new instance with model_copy(update=...) instead of mutating one.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

STAT_MAX = 10


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _Frozen(_Model):
    model_config = ConfigDict(frozen=True)


class GameStatus(str, Enum):
    INIT = "INIT"
    PLAYING = "PLAYING"
    GAME_OVER = "GAME_OVER"


class Stat(_Frozen):
    """A contextual skill, 1–10. `max` is always STAT_MAX."""

    name: str
    value: int
    max: int = STAT_MAX


class Gauge(_Frozen):
    """HP or SP. 0 <= current <= max is enforced by the reducer."""

    current: int
    max: int


class Relationship(_Frozen):
    """An NPC the player has met, as last reported by the engine."""

    id: str
    full_name: str
    role: str
    relationship_score: int  # 0–100
    attitude: str
    last_interaction_summary: str
    last_interaction_time: int  # turn index
    important_flags: list[str]
    history: list[str]  # newest first


class Character(_Frozen):
    name: str = "Player"
    class_title: str
    hp: Gauge
    sp: Gauge
    stats: list[Stat] = Field(default_factory=list)
    inventory: list[str] = Field(default_factory=list)
    active_quest: str = ""
    relationships: list[Relationship] = Field(default_factory=list)


class HistoryItem(_Frozen):
    """A single entry in the append-only game log."""

    role: Literal["user", "model"]
    content: str
    type: Literal["narrative", "action"]


class GameState(_Frozen):
    """The aggregate root. One instance per session, replaced on every transition."""

    status: GameStatus = GameStatus.INIT
    character: Character | None = None
    history: list[HistoryItem] = Field(default_factory=list)
    summary: str = ""  # long-term memory
    current_choices: list[str] = Field(default_factory=list)
    is_processing: bool = False
    turn_count: int = 0
    error: str | None = None
    is_relationship_panel_open: bool = False


# ---------------------------------------------------------------------------
# Generation service responses
# ---------------------------------------------------------------------------

class StatRoll(_Model):
    """A stat as returned by initialization; any `max` it carries is ignored."""

    name: str
    value: int


class InitGameResponse(_Model):
    class_title: str
    hp_max: int
    sp_max: int
    stats: list[StatRoll]
    starting_inventory: list[str]
    initial_scene: str
    first_quest: str
    choices: list[str]
    relationships: list[Relationship] | None = None


class TurnResponse(_Model):
    narrative: str
    hp_change: int
    sp_change: int
    inventory_add: list[str]
    inventory_remove: list[str]
    quest_update: str | None = None
    choices: list[str]
    summary_update: str | None = None
    is_game_over: bool | None = None
    relationships: list[Relationship]
