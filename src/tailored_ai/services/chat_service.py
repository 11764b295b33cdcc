"""Free-form chat about a repository."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from tailored_ai.domain.entities import ConversationTurn, RepositorySummary
from tailored_ai.domain.exceptions import LlmTimeoutError
from tailored_ai.domain.ports.llm_gateway import LlmGateway

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = (
    "You are an AI assistant helping with GitHub repository management and code "
    "analysis. You provide helpful, concise, and accurate responses."
)
CANCELLED_REPLY = "Message generation cancelled."
ERROR_REPLY = "Sorry, I encountered an error while processing your message. Please try again."
TIMEOUT_REPLY = "The AI model took too long to answer. Please try again."
NOT_CONFIGURED_REPLY = "The AI model is not configured. Set an API key to enable chat."


@dataclass(frozen=True, slots=True)
class ChatReply:
    content: str
    cancelled: bool = False
    failed: bool = False


def build_system_prompt(repository: RepositorySummary | None = None) -> str:
    if repository is None:
        return BASE_SYSTEM_PROMPT
    return (
        f"{BASE_SYSTEM_PROMPT}\n\nCurrent repository context:\n"
        f"- Name: {repository.name}\n"
        f"- Full name: {repository.full_name}\n"
        f"- Description: {repository.description or 'No description'}\n"
        f"- Primary language: {repository.primary_language or 'Unknown'}"
    )


class ChatService:
    def __init__(self, llm_gateway: LlmGateway | None) -> None:
        self._llm = llm_gateway

    async def send_message(
        self,
        content: str,
        repository: RepositorySummary | None = None,
        history: Sequence[ConversationTurn] = (),
        cancel_event: asyncio.Event | None = None,
    ) -> ChatReply:
        """Return the model's reply; failures become canned replies, never exceptions."""
        if self._llm is None:
            return ChatReply(content=NOT_CONFIGURED_REPLY, failed=True)

        try:
            generation = await self._llm.generate(
                content, history, build_system_prompt(repository), cancel_event
            )
        except LlmTimeoutError:
            logger.warning("Chat reply timed out")
            return ChatReply(content=TIMEOUT_REPLY, failed=True)
        except Exception:
            logger.exception("Chat reply failed")
            return ChatReply(content=ERROR_REPLY, failed=True)

        if generation.cancelled:
            logger.info("Chat message generation was cancelled")
            return ChatReply(content=CANCELLED_REPLY, cancelled=True)
        return ChatReply(content=generation.text)
