"""In-process conversation memory keyed by session id."""

import threading

from .config import config
from .models import ConversationTurn

logger = config.get_logger(__name__)


class ConversationMemory:
    """Ordered per-session message history.

    Each history starts with one system turn holding the fixed instructions.
    When ``max_messages`` is set, the oldest non-system turns are evicted
    once a session holds more than ``max_messages`` of them.
    """

    def __init__(
        self, system_instructions: str, max_messages: int | None = None
    ) -> None:
        """Initialize an empty memory.

        Args:
            system_instructions: Content of the first turn of every session.
            max_messages: Cap on stored non-system turns per session;
                None or 0 keeps everything.
        """
        self.system_instructions = system_instructions
        self.max_messages = max_messages or None
        self._histories: dict[str, list[ConversationTurn]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def session_lock(self, session_id: str) -> threading.Lock:
        """Return the lock serialising turns of one session."""
        with self._registry_lock:
            return self._locks.setdefault(session_id, threading.Lock())

    def _session(self, session_id: str) -> list[ConversationTurn]:
        with self._registry_lock:
            if session_id not in self._histories:
                self._histories[session_id] = [
                    ConversationTurn.system(self.system_instructions)
                ]
                logger.info("Started conversation session %s", session_id)
            return self._histories[session_id]

    def history(self, session_id: str) -> list[ConversationTurn]:
        """Return a copy of the session's turns in arrival order."""
        return list(self._session(session_id))

    def append(self, session_id: str, turn: ConversationTurn) -> None:
        """Append a turn, evicting the oldest exchanges over the cap.

        Eviction never leaves an assistant turn as the first non-system turn,
        so an odd cap keeps one turn fewer rather than half an exchange.
        """
        turns = self._session(session_id)
        turns.append(turn)

        if self.max_messages is None:
            return
        system = [t for t in turns if t.role == "system"]
        dialogue = [t for t in turns if t.role != "system"]
        if len(dialogue) <= self.max_messages:
            return
        del dialogue[: len(dialogue) - self.max_messages]
        while dialogue and dialogue[0].role == "assistant":
            del dialogue[0]
        turns[:] = system + dialogue
        logger.debug("Trimmed session %s history to %d turns", session_id, len(turns))

    def clear(self, session_id: str) -> None:
        """Forget a session; its next access starts a fresh history.

        The session's lock is kept, so a turn waiting on it keeps excluding
        turns that start after the clear.
        """
        with self._registry_lock:
            self._histories.pop(session_id, None)
        logger.info("Conversation history cleared for session %s", session_id)

    def sessions(self) -> list[str]:
        with self._registry_lock:
            return list(self._histories)
