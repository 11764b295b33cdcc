"""Port: LLM gateway — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

import asyncio
from typing import Protocol, Sequence

from tailored_ai.domain.entities import ConversationTurn, Generation


class LlmGateway(Protocol):
    """Abstract contract for interacting with a large-language model."""

    async def generate(
        self,
        prompt: str,
        history: Sequence[ConversationTurn] = (),
        system_prompt: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Generation:
        """Return the model's reply, or a cancelled generation if *cancel_event* fires."""
        ...
