"""Tests for the chat session registry."""

from tailored_ai.interface.sessions import SessionRegistry
from tailored_ai.services.assistant import AssistantSession
from tailored_ai.services.command_parser import CommandParser
from tailored_ai.services.dispatcher import ActionDispatcher


def _registry(max_sessions):
    return SessionRegistry(
        lambda: AssistantSession(CommandParser(), ActionDispatcher()), max_sessions=max_sessions
    )


class TestSessionRegistry:
    def test_same_id_returns_same_assistant(self):
        registry = _registry(2)
        assert registry.assistant("a") is registry.assistant("a")

    def test_least_recently_used_session_is_evicted(self):
        registry = _registry(2)
        registry.assistant("a")
        registry.assistant("b")
        registry.assistant("a")
        registry.assistant("c")

        assert len(registry) == 2
        assert "a" in registry
        assert "b" not in registry

    def test_busy_sessions_are_kept(self):
        registry = _registry(1)
        event = registry.begin("busy")
        registry.assistant("other")

        assert "busy" in registry
        assert registry.cancel("busy")
        assert event.is_set()

    def test_cancel_unknown_session(self):
        assert not _registry(2).cancel("nobody")
