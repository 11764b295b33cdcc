"""Per-session state for the HTTP chat endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from tailored_ai.domain.entities import ConversationTurn
from tailored_ai.services.assistant import MAX_HISTORY_TURNS, AssistantSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1_000


@dataclass
class _SessionState:
    assistant: AssistantSession
    chat_history: list[ConversationTurn] = field(default_factory=list)
    in_flight: set[asyncio.Event] = field(default_factory=set)


class SessionRegistry:
    """Maps session ids to assistant sessions and in-flight cancel events.

    Holds at most *max_sessions* sessions.  When a new session would exceed
    the bound, the least recently used idle session is evicted; sessions with
    requests in flight are never evicted.
    """

    def __init__(
        self,
        assistant_factory: Callable[[], AssistantSession],
        *,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        self._factory = assistant_factory
        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, _SessionState] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def assistant(self, session_id: str) -> AssistantSession:
        return self._state(session_id).assistant

    def chat_history(self, session_id: str) -> tuple[ConversationTurn, ...]:
        return tuple(self._state(session_id).chat_history)

    def record_chat(self, session_id: str, user_message: str, reply: str) -> None:
        history = self._state(session_id).chat_history
        history.append(ConversationTurn(role="user", content=user_message))
        history.append(ConversationTurn(role="assistant", content=reply))
        del history[:-MAX_HISTORY_TURNS]

    def begin(self, session_id: str) -> asyncio.Event:
        """Register a new in-flight request and return its cancel event."""
        event = asyncio.Event()
        self._state(session_id).in_flight.add(event)
        return event

    def finish(self, session_id: str, event: asyncio.Event) -> None:
        state = self._sessions.get(session_id)
        if state is not None:
            state.in_flight.discard(event)

    def cancel(self, session_id: str) -> bool:
        """Set every in-flight cancel event of the session; ``True`` if any."""
        state = self._sessions.get(session_id)
        if state is None or not state.in_flight:
            return False
        for event in state.in_flight:
            event.set()
        return True

    def _state(self, session_id: str) -> _SessionState:
        state = self._sessions.get(session_id)
        if state is not None:
            self._sessions.move_to_end(session_id)
            return state

        self._evict_idle()
        state = _SessionState(assistant=self._factory())
        self._sessions[session_id] = state
        return state

    def _evict_idle(self) -> None:
        # Oldest first; busy sessions are skipped, so the bound is soft under load.
        for session_id in list(self._sessions):
            if len(self._sessions) < self._max_sessions:
                return
            if not self._sessions[session_id].in_flight:
                del self._sessions[session_id]
                logger.debug("Evicted idle chat session %s", session_id)
