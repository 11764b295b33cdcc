"""OpenAI adapter — implements the LlmGateway port."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from openai import AsyncOpenAI, AuthenticationError, RateLimitError

from tailored_ai.domain.entities import ConversationTurn, Generation
from tailored_ai.domain.exceptions import LlmError, LlmTimeoutError

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Concrete ``LlmGateway`` backed by an OpenAI-compatible chat-completions API.

    ``base_url`` lets the same adapter talk to any compatible endpoint (for
    example Gemini's OpenAI-compatible API).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: Any | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=2)
        self._model = model
        self._timeout = timeout

    async def generate(
        self,
        prompt: str,
        history: Sequence[ConversationTurn] = (),
        system_prompt: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Generation:
        """Send the conversation and return the reply.

        When *cancel_event* is set before the model answers, the in-flight
        request is abandoned and a cancelled :class:`Generation` is returned.
        """
        if cancel_event is not None and cancel_event.is_set():
            return Generation.cancelled_generation()

        messages = _build_messages(prompt, history, system_prompt)
        if cancel_event is None:
            return Generation(text=await self._complete(messages))

        completion = asyncio.ensure_future(self._complete(messages))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {completion, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            pending = [task for task in (completion, cancelled) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if completion in done:
            return Generation(text=completion.result())

        logger.info("Text generation cancelled by caller")
        return Generation.cancelled_generation()

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,
                    temperature=0.3,
                ),
                timeout=self._timeout,
            )

            content = response.choices[0].message.content
            if not content:
                raise LlmError("LLM returned an empty response.")
            return content

        except asyncio.TimeoutError as exc:
            raise LlmTimeoutError(
                f"The AI service did not respond within {self._timeout:.0f}s."
            ) from exc

        except AuthenticationError as exc:
            raise LlmError(
                "Invalid AI API key. Set a valid key in the AI_API_KEY environment variable."
            ) from exc

        except RateLimitError as exc:
            detail = str(exc)
            logger.error("OpenAI RateLimitError: %s", detail)
            raise LlmError(f"AI rate limit / quota error: {detail}") from exc

        except LlmError:
            raise

        except Exception as exc:
            raise LlmError(f"LLM call failed: {exc}") from exc

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()


def _build_messages(
    prompt: str,
    history: Sequence[ConversationTurn],
    system_prompt: str | None,
) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    for turn in history:
        role = "assistant" if turn.role == "assistant" else "user"
        messages.append({"role": role, "content": turn.content})
    messages.append({"role": "user", "content": prompt})
    return messages
