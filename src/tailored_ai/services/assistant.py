"""One user's conversation with the command assistant.

Holds the conversation history, the user's scored repositories and the
name of a deletion waiting for confirmation.  A repository is only deleted
when the user answers a confirmation warning with the exact phrase for the
same repository; a ``confirm`` flag coming from the model is not enough.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Sequence

from tailored_ai.domain.actions import ActionResult, ChatAction, DeleteRepo, ResultOutcome
from tailored_ai.domain.entities import ConversationTurn, ScoredRepository
from tailored_ai.services.command_parser import CommandParser, deletion_confirmation_target
from tailored_ai.services.dispatcher import ActionDispatcher

logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 20
CANCELLED_MESSAGE = "Message generation cancelled."


class AssistantSession:
    def __init__(
        self,
        parser: CommandParser,
        dispatcher: ActionDispatcher,
        repositories: Sequence[ScoredRepository] = (),
    ) -> None:
        self._parser = parser
        self._dispatcher = dispatcher
        self._repositories = list(repositories)
        self._history: list[ConversationTurn] = []
        self._pending_deletion: str | None = None
        self._lock = asyncio.Lock()

    @property
    def history(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._history)

    @property
    def repositories(self) -> tuple[ScoredRepository, ...]:
        return tuple(self._repositories)

    @property
    def pending_deletion(self) -> str | None:
        return self._pending_deletion

    def set_repositories(self, repositories: Sequence[ScoredRepository]) -> None:
        self._repositories = list(repositories)

    def reset(self) -> None:
        self._history.clear()
        self._pending_deletion = None

    async def handle(
        self, message: str, cancel_event: asyncio.Event | None = None
    ) -> ActionResult:
        """Parse and execute *message*.  Never raises.

        Messages of one session are handled one at a time, so history and the
        pending deletion never interleave.
        """
        async with self._lock:
            return await self._handle(message, cancel_event)

    async def _handle(self, message: str, cancel_event: asyncio.Event | None) -> ActionResult:
        try:
            action = self._confirmed_deletion(message)
            if action is None:
                parsed = await self._parser.parse(message, self._history, cancel_event)
                action = self._guard_deletion(parsed)
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Assistant request cancelled")
                return ActionResult.failure(CANCELLED_MESSAGE, ResultOutcome.CANCELLED)
            result = await self._dispatcher.dispatch(action, self._repositories)
        except Exception as exc:
            logger.exception("Assistant failed to handle message")
            result = ActionResult.failure(f"Sorry, I encountered an error: {exc}")

        self._track_pending_deletion(result)
        self._record(message, result.message)
        return result

    def _confirmed_deletion(self, message: str) -> DeleteRepo | None:
        if self._pending_deletion is None:
            return None
        target = deletion_confirmation_target(message)
        if target is None or target.casefold() != self._pending_deletion.casefold():
            return None
        return DeleteRepo(name=self._pending_deletion, confirmed=True)

    def _guard_deletion(self, action: ChatAction) -> ChatAction:
        # Only _confirmed_deletion may produce a confirmed delete.
        if isinstance(action, DeleteRepo) and action.confirmed:
            logger.warning("Ignoring unconfirmed deletion request for %s", action.name)
            return replace(action, confirmed=False)
        return action

    def _track_pending_deletion(self, result: ActionResult) -> None:
        if result.outcome is ResultOutcome.NEEDS_CONFIRMATION and isinstance(
            result.action, DeleteRepo
        ):
            self._pending_deletion = result.action.name
        else:
            self._pending_deletion = None

    def _record(self, user_message: str, reply: str) -> None:
        self._history.append(ConversationTurn(role="user", content=user_message))
        self._history.append(ConversationTurn(role="assistant", content=reply))
        del self._history[:-MAX_HISTORY_TURNS]
