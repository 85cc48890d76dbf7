"""GameSession: the store that owns one player's GameState.

The session sequences the pure transitions from gemini_studio.reducer around
the engine calls and is the only place state is replaced. `is_processing` is
the admission control: while a call is in flight, start() and act() refuse
new work with SessionBusyError. There is no queue and no retry; a failed call
leaves an error message in the state and the player resubmits.
"""

from __future__ import annotations

import logging

from gemini_studio import reducer
from gemini_studio.config import Settings
from gemini_studio.context import recent_history
from gemini_studio.engine import (
    InitializationError,
    TurnError,
    initialize_game,
    process_turn,
)
from gemini_studio.llm import LLM
from gemini_studio.models import GameState, GameStatus

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when input is rejected at the session boundary."""


class SessionBusyError(SessionError):
    """A call is already in flight for this session."""


class GameOverError(SessionError):
    """The game has ended; no further actions are accepted."""


class GameSession:
    """Owns the current GameState for one player.

    Args:
        llm:      The generation client used for both engine calls.
        settings: Model and reasoning settings; read from the environment
                  per call when omitted.
    """

    def __init__(self, llm: LLM, settings: Settings | None = None) -> None:
        self._llm = llm
        self._settings = settings
        self._state = reducer.initial_state()

    @property
    def state(self) -> GameState:
        return self._state

    def _check_idle(self) -> None:
        if self._state.is_processing:
            raise SessionBusyError("A request is already being processed")

    async def start(self, premise: str) -> GameState:
        """Initialize a new game from a free-text premise."""
        premise = premise.strip()
        if not premise:
            raise ValueError("Premise must not be empty")
        self._check_idle()

        self._state = reducer.begin_initialization(self._state)
        try:
            data = await initialize_game(self._llm, premise, self._settings)
        except InitializationError:
            logger.exception("Game initialization failed")
            self._state = reducer.fail_initialization(self._state)
            return self._state

        self._state = reducer.apply_initialization(self._state, premise, data)
        logger.info("Game started class=%r", data.class_title)
        return self._state

    async def act(self, action: str) -> GameState:
        """Resolve one player action. A no-op until a game has been started."""
        action = action.strip()
        if not action:
            raise ValueError("Action must not be empty")
        before = self._state
        if before.character is None:
            logger.warning("Action submitted before the game started; ignored")
            return before
        self._check_idle()
        if before.status == GameStatus.GAME_OVER:
            raise GameOverError("The game is over")

        # the window is cut before the pending action; the action goes separately
        recent = recent_history(before.history)
        self._state = reducer.begin_turn(before, action)
        try:
            result = await process_turn(
                self._llm,
                action,
                before.character,
                before.summary,
                recent,
                before.turn_count,
                self._settings,
            )
        except TurnError:
            logger.exception("Turn %d failed", before.turn_count)
            self._state = reducer.fail_turn(self._state)
            return self._state

        self._state = reducer.apply_turn(self._state, result)
        logger.info(
            "Turn %d resolved status=%s", before.turn_count, self._state.status.value
        )
        return self._state

    def set_relationship_panel(self, is_open: bool) -> GameState:
        self._state = reducer.set_relationship_panel(self._state, is_open)
        return self._state
