"""Shared fixtures and fakes for the tailored_ai tests."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest

from tailored_ai.domain.entities import (
    ContentEntry,
    ConversationTurn,
    Generation,
    MutationResult,
    RepositorySummary,
    ScoredRepository,
)
from tailored_ai.domain.exceptions import RepositoryNotFoundError
from tailored_ai.domain.value_objects import RepositoryRef
from tailored_ai.services.scorer import score_complexity_from_summary

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_raw(name: str = "foo", **overrides: Any) -> dict[str, Any]:
    """A GitHub ``/user/repos`` record with sensible defaults."""
    raw: dict[str, Any] = {
        "id": abs(hash(name)) % 100_000,
        "name": name,
        "full_name": f"octocat/{name}",
        "owner": {"login": "octocat"},
        "description": "A sample repository used in tests",
        "language": "Python",
        "topics": ["testing"],
        "size": 500,
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2026-05-01T00:00:00Z",
        "pushed_at": "2026-05-01T00:00:00Z",
        "stargazers_count": 0,
        "forks_count": 0,
        "open_issues_count": 0,
        "private": False,
        "has_issues": True,
        "html_url": f"https://github.com/octocat/{name}",
        "default_branch": "main",
    }
    raw.update(overrides)
    return raw


def make_summary(name: str = "foo", **overrides: Any) -> RepositorySummary:
    fields: dict[str, Any] = {
        "id": 1,
        "name": name,
        "full_name": f"octocat/{name}",
        "owner": "octocat",
        "description": "A sample repository used in tests",
        "primary_language": "Python",
        "topics": frozenset({"testing"}),
        "size_kb": 500,
        "created_at": NOW - timedelta(days=500),
        "updated_at": NOW - timedelta(days=30),
        "has_issues_enabled": True,
        "html_url": f"https://github.com/octocat/{name}",
    }
    fields.update(overrides)
    return RepositorySummary(**fields)


def make_scored(name: str = "foo", has_readme: bool | None = None, **overrides: Any) -> ScoredRepository:
    summary = make_summary(name, **overrides)
    return ScoredRepository(
        summary=summary,
        assessment=score_complexity_from_summary(summary),
        has_readme=has_readme,
    )


# ── Fakes ───────────────────────────────────────────────────────────────────


class FakeLlm:
    """Scripted LlmGateway: returns queued replies or raises queued errors."""

    def __init__(self, *replies: str | BaseException | Generation) -> None:
        self._replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        history: Sequence[ConversationTurn] = (),
        system_prompt: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Generation:
        self.calls.append(
            {
                "prompt": prompt,
                "history": list(history),
                "system_prompt": system_prompt,
                "cancel_event": cancel_event,
            }
        )
        if cancel_event is not None and cancel_event.is_set():
            return Generation.cancelled_generation()
        reply = self._replies.pop(0) if self._replies else ""
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, Generation):
            return reply
        return Generation(text=reply)


class FakeMutator:
    """Records mutation calls; optionally raises a queued error."""

    def __init__(self, login: str = "octocat", error: BaseException | None = None) -> None:
        self.login = login
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    async def get_authenticated_login(self) -> str:
        return self.login

    async def create_repository(self, name: str, **kwargs: Any) -> MutationResult:
        self._record("create_repository", (name,), kwargs)
        return MutationResult(url=f"https://github.com/{self.login}/{name}", payload={"name": name})

    async def create_file(self, owner: str, repo: str, path: str, content: str, message: str,
                          branch: str | None = None) -> MutationResult:
        self._record("create_file", (owner, repo, path, content, message), {"branch": branch})
        return MutationResult(url=f"https://github.com/{owner}/{repo}/blob/main/{path}")

    async def delete_repository(self, owner: str, repo: str) -> MutationResult:
        self._record("delete_repository", (owner, repo), {})
        return MutationResult(payload={"deleted": True})

    def _record(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.calls.append((name, args, kwargs))


class FakeFetcher:
    """In-memory RepoFetcher."""

    def __init__(
        self,
        records: list[dict[str, Any]] | None = None,
        *,
        languages: dict[str, int] | None = None,
        topics: list[str] | None = None,
        readme: str | None = None,
        contents: list[ContentEntry] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.records = records or []
        self.languages = languages or {}
        self.topics = topics or []
        self.readme = readme
        self.contents = contents
        self.error = error
        self.list_calls = 0

    async def list_user_repositories(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def get_authenticated_login(self) -> str:
        return "octocat"

    async def fetch_languages(self, ref: RepositoryRef) -> dict[str, int]:
        return dict(self.languages)

    async def fetch_topics(self, ref: RepositoryRef) -> list[str]:
        return list(self.topics)

    async def fetch_readme(self, ref: RepositoryRef) -> str | None:
        return self.readme

    async def fetch_root_contents(self, ref: RepositoryRef) -> list[ContentEntry]:
        if self.contents is None:
            raise RepositoryNotFoundError("Repository not found or access denied.")
        return list(self.contents)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_mutator() -> FakeMutator:
    return FakeMutator()
