"""Pure state transitions for the game loop.

Every function takes the current GameState (plus whatever the transition
needs) and returns a new GameState. Nothing here performs I/O; the session
in gemini_studio.session sequences these around the engine calls:

    initialization:  begin_initialization → apply_initialization
                                          ↘ fail_initialization
    turn:            begin_turn → apply_turn
                               ↘ fail_turn

begin_turn is the optimistic half of a turn: the player's action is in the
history before the engine has answered, and it stays there if the engine
fails. Failures only annotate the state with an error message.
"""

from gemini_studio.models import (
    STAT_MAX,
    Character,
    GameState,
    GameStatus,
    Gauge,
    HistoryItem,
    InitGameResponse,
    Stat,
    TurnResponse,
)

INIT_ERROR_MESSAGE = "Failed to initialize game. Please try again."
TURN_ERROR_MESSAGE = "The engine stumbled. Try that action again."


def initial_state() -> GameState:
    return GameState()


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def adjust_gauge(gauge: Gauge, change: int) -> Gauge:
    """Apply a signed change, keeping current within [0, max]."""
    return gauge.model_copy(update={"current": clamp(gauge.current + change, 0, gauge.max)})


def merge_inventory(inventory: list[str], add: list[str], remove: list[str]) -> list[str]:
    """Drop every item named in `remove` (all copies), then append `add` in order."""
    removed = set(remove)
    return [item for item in inventory if item not in removed] + list(add)


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

def begin_initialization(state: GameState) -> GameState:
    return state.model_copy(update={"is_processing": True, "error": None})


def build_character(data: InitGameResponse) -> Character:
    return Character(
        class_title=data.class_title,
        hp=Gauge(current=data.hp_max, max=data.hp_max),
        sp=Gauge(current=data.sp_max, max=data.sp_max),
        stats=[Stat(name=s.name, value=s.value, max=STAT_MAX) for s in data.stats],
        inventory=list(data.starting_inventory),
        active_quest=data.first_quest,
        relationships=list(data.relationships or []),
    )


def apply_initialization(state: GameState, premise: str, data: InitGameResponse) -> GameState:
    """Start a fresh game from the engine's initialization response.

    The previous state is discarded entirely; only its identity as "the
    session's state" carries over.
    """
    return GameState(
        status=GameStatus.PLAYING,
        character=build_character(data),
        history=[HistoryItem(role="model", content=data.initial_scene, type="narrative")],
        summary=f"Game started. Premise: {premise}. Class: {data.class_title}.",
        current_choices=list(data.choices),
        is_processing=False,
        turn_count=1,
        is_relationship_panel_open=False,
    )


def fail_initialization(state: GameState) -> GameState:
    return state.model_copy(update={"is_processing": False, "error": INIT_ERROR_MESSAGE})


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

def begin_turn(state: GameState, action: str) -> GameState:
    """Optimistically record the player's action and mark the turn in flight."""
    if state.character is None:
        return state
    pending = HistoryItem(role="user", content=action, type="action")
    return state.model_copy(update={
        "history": [*state.history, pending],
        "current_choices": [],
        "is_processing": True,
        "error": None,
    })


def apply_turn(state: GameState, result: TurnResponse) -> GameState:
    """Merge the engine's turn response into the state."""
    character = state.character
    if character is None:
        return state

    quest = result.quest_update if result.quest_update else character.active_quest
    updated = character.model_copy(update={
        "hp": adjust_gauge(character.hp, result.hp_change),
        "sp": adjust_gauge(character.sp, result.sp_change),
        "inventory": merge_inventory(
            character.inventory, result.inventory_add, result.inventory_remove
        ),
        "active_quest": quest,
        # the engine returns the full, updated list
        "relationships": list(result.relationships),
    })

    summary = state.summary
    if result.summary_update:
        summary = f"{summary}\n{result.summary_update}"

    narrative = HistoryItem(role="model", content=result.narrative, type="narrative")
    return state.model_copy(update={
        "status": GameStatus.GAME_OVER if result.is_game_over else GameStatus.PLAYING,
        "character": updated,
        "history": [*state.history, narrative],
        "summary": summary,
        "current_choices": list(result.choices),
        "is_processing": False,
        "turn_count": state.turn_count + 1,
    })


def fail_turn(state: GameState) -> GameState:
    """Keep the pending action in history; only clear the flag and set the error."""
    return state.model_copy(update={"is_processing": False, "error": TURN_ERROR_MESSAGE})


# ---------------------------------------------------------------------------
# UI flags
# ---------------------------------------------------------------------------

def set_relationship_panel(state: GameState, is_open: bool) -> GameState:
    return state.model_copy(update={"is_relationship_panel_open": is_open})
