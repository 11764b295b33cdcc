"""Tests for free-form chat."""

import asyncio

from conftest import FakeLlm, make_summary

from tailored_ai.domain.exceptions import LlmError, LlmTimeoutError
from tailored_ai.services.chat_service import (
    BASE_SYSTEM_PROMPT,
    CANCELLED_REPLY,
    ERROR_REPLY,
    NOT_CONFIGURED_REPLY,
    TIMEOUT_REPLY,
    ChatService,
    build_system_prompt,
)


class TestBuildSystemPrompt:
    def test_without_repository(self):
        assert build_system_prompt() == BASE_SYSTEM_PROMPT

    def test_with_repository_context(self):
        prompt = build_system_prompt(make_summary("foo", description=None))
        assert "- Full name: octocat/foo" in prompt
        assert "- Description: No description" in prompt
        assert "- Primary language: Python" in prompt


class TestSendMessage:
    async def test_returns_model_reply(self):
        llm = FakeLlm("Hello there")
        reply = await ChatService(llm).send_message("hi", make_summary("foo"))

        assert reply.content == "Hello there"
        assert not reply.cancelled and not reply.failed
        assert "octocat/foo" in llm.calls[0]["system_prompt"]

    async def test_cancelled(self):
        event = asyncio.Event()
        event.set()
        reply = await ChatService(FakeLlm("never")).send_message("hi", cancel_event=event)

        assert reply.cancelled
        assert reply.content == CANCELLED_REPLY

    async def test_error_gets_canned_reply(self):
        reply = await ChatService(FakeLlm(LlmError("down"))).send_message("hi")
        assert reply.failed
        assert reply.content == ERROR_REPLY

    async def test_timeout(self):
        reply = await ChatService(FakeLlm(LlmTimeoutError("slow"))).send_message("hi")
        assert reply.content == TIMEOUT_REPLY

    async def test_not_configured(self):
        reply = await ChatService(None).send_message("hi")
        assert reply.content == NOT_CONFIGURED_REPLY
