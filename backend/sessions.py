"""In-memory registry of game sessions keyed by browser session id.

Sessions live only as long as the process; nothing is persisted. The
registry holds at most `max_sessions` entries and evicts the least recently
used idle session when a new one would exceed the cap.
"""

import logging
from collections import OrderedDict
from collections.abc import Callable
from uuid import uuid4

from gemini_studio.llm import LLM
from gemini_studio.session import GameSession

logger = logging.getLogger(__name__)

MAX_SESSIONS = 1000


class SessionRegistry:
    def __init__(self, llm_factory: Callable[[], LLM], max_sessions: int = MAX_SESSIONS) -> None:
        self._llm_factory = llm_factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, GameSession] = OrderedDict()

    @staticmethod
    def new_id() -> str:
        return uuid4().hex

    def get(self, sid: str) -> GameSession | None:
        session = self._sessions.get(sid)
        if session is not None:
            self._sessions.move_to_end(sid)
        return session

    def get_or_create(self, sid: str) -> GameSession:
        session = self.get(sid)
        if session is None:
            self._evict()
            session = GameSession(self._llm_factory())
            self._sessions[sid] = session
            logger.info("Session created sid=%s", sid)
        return session

    def _evict(self) -> None:
        # sessions with a call in flight are skipped
        while len(self._sessions) >= self._max_sessions:
            victim = next(
                (sid for sid, s in self._sessions.items() if not s.state.is_processing),
                None,
            )
            if victim is None:
                return
            del self._sessions[victim]
            logger.info("Session evicted sid=%s", victim)

    def discard(self, sid: str) -> bool:
        """Drop a session. Returns False if it did not exist."""
        if self._sessions.pop(sid, None) is None:
            return False
        logger.info("Session discarded sid=%s", sid)
        return True

    def __len__(self) -> int:
        return len(self._sessions)
