"""HTTP tests for the FastAPI app with faked collaborators."""

import pytest
from conftest import FakeFetcher, FakeLlm, FakeMutator, make_raw
from fastapi.testclient import TestClient

from tailored_ai.domain.entities import ContentEntry
from tailored_ai.domain.exceptions import GitHubAuthError, LlmTimeoutError
from tailored_ai.infrastructure.storage import InMemoryStorage
from tailored_ai.interface.app import create_app
from tailored_ai.interface.dependencies import (
    get_analyze_use_case,
    get_chat_service,
    get_session_registry,
    get_sync_service,
)
from tailored_ai.interface.sessions import SessionRegistry
from tailored_ai.services.analyze_repository import AnalyzeRepositoryUseCase
from tailored_ai.services.assistant import AssistantSession
from tailored_ai.services.chat_service import ChatService
from tailored_ai.services.command_parser import CommandParser
from tailored_ai.services.dispatcher import ActionDispatcher
from tailored_ai.services.repository_cache import RepositoryCache
from tailored_ai.services.repository_sync import RepositorySyncService

REVIEW = "## Score\n9/10\n\n## Resume Bullet\nBuilt a thing\n"


def _records():
    return [
        make_raw("small", size=10),
        make_raw("big", size=20_000, language="Rust", stargazers_count=50, forks_count=10),
    ]


def _client(fetcher=None, llm=None, mutator=None):
    fetcher = fetcher or FakeFetcher(
        _records(),
        languages={"Rust": 1000},
        readme="# big",
        contents=[ContentEntry(name="Cargo.toml", path="Cargo.toml", type="file")],
    )
    mutator = mutator or FakeMutator()
    sync = RepositorySyncService(fetcher, RepositoryCache(InMemoryStorage()))
    sessions = SessionRegistry(
        lambda: AssistantSession(CommandParser(llm), ActionDispatcher(mutator))
    )

    app = create_app()
    app.dependency_overrides[get_sync_service] = lambda: sync
    app.dependency_overrides[get_session_registry] = lambda: sessions
    app.dependency_overrides[get_analyze_use_case] = lambda: AnalyzeRepositoryUseCase(fetcher, llm)
    app.dependency_overrides[get_chat_service] = lambda: ChatService(llm)
    return TestClient(app)


@pytest.fixture
def client():
    with _client() as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestRepositories:
    def test_list(self, client):
        resp = client.get("/repositories")

        assert resp.status_code == 200
        body = resp.json()
        assert [r["name"] for r in body] == ["small", "big"]
        assert body[1]["complexity"]["score"] == 85
        assert body[1]["complexity"]["level"] == "Advanced"

    def test_sort(self, client):
        resp = client.post("/repositories/sort", json={"criteria": "complexity", "order": "desc"})
        assert [r["name"] for r in resp.json()] == ["big", "small"]

    def test_sort_rejects_unknown_criterion(self, client):
        resp = client.post("/repositories/sort", json={"criteria": "popularity"})
        assert resp.status_code == 422
        assert resp.json()["success"] is False

    def test_recommendations(self, client):
        body = client.post("/repositories/recommendations").json()
        assert body["ranked"][0]["name"] == "big"
        # README status of unanalyzed repositories is unknown.
        assert body["improvements"] == []

    def test_analysis_without_readme_adds_improvement(self):
        fetcher = FakeFetcher(_records(), readme=None)
        with _client(fetcher=fetcher) as client:
            analysis = client.post("/repositories/analyze", json={"full_name": "octocat/small"}).json()
            body = client.post("/repositories/recommendations").json()

        assert analysis["has_readme"] is False
        assert [note["name"] for note in body["improvements"]] == ["small"]

    def test_analyzed_readme_breaks_cv_ties(self):
        fetcher = FakeFetcher([make_raw("plain"), make_raw("documented")], readme="# docs")
        with _client(fetcher=fetcher) as client:
            before = client.post("/repositories/sort", json={"criteria": "cv"}).json()
            client.post("/repositories/analyze", json={"full_name": "octocat/documented"})
            after = client.post("/repositories/sort", json={"criteria": "cv"}).json()

        assert [r["name"] for r in before] == ["plain", "documented"]
        assert [r["name"] for r in after] == ["documented", "plain"]

    def test_analyze(self, client):
        resp = client.post("/repositories/analyze", json={"full_name": "octocat/big"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["tech_stack"][0] == "Rust"
        assert 0 <= body["completeness_score"] <= 100

    def test_complexity(self, client):
        body = client.post("/repositories/complexity", json={"full_name": "octocat/big"}).json()
        assert body["source"] == "contents"
        assert body["factors"]["dependencies"] == 2

    def test_unknown_repository_is_404(self, client):
        resp = client.post("/repositories/analyze", json={"full_name": "octocat/missing"})
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    def test_malformed_name_is_422(self, client):
        resp = client.post("/repositories/analyze", json={"full_name": "not a repo"})
        assert resp.status_code == 422

    def test_expired_token_is_401(self):
        with _client(fetcher=FakeFetcher(error=GitHubAuthError("expired"))) as client:
            resp = client.get("/repositories")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "expired"}


class TestReview:
    def test_review_without_llm_returns_defaults(self, client):
        body = client.post("/repositories/review", json={"full_name": "octocat/big"}).json()
        assert body["score"] == 75
        assert body["resume_bullet"] == "Built big using Rust"

    def test_review_with_llm(self):
        with _client(llm=FakeLlm(REVIEW)) as client:
            body = client.post(
                "/repositories/review",
                json={"full_name": "octocat/big", "target_job": "Systems engineer"},
            ).json()
        assert body["score"] == 90
        assert body["resume_bullet"] == "Built a thing"

    def test_review_timeout_is_504(self):
        with _client(llm=FakeLlm(LlmTimeoutError("slow"))) as client:
            resp = client.post("/repositories/review", json={"full_name": "octocat/big"})
        assert resp.status_code == 504


class TestChat:
    def test_chat(self):
        with _client(llm=FakeLlm("Happy to help")) as client:
            body = client.post("/chat/s1", json={"message": "hi", "repository": "octocat/big"}).json()
        assert body == {"content": "Happy to help", "cancelled": False, "failed": False}

    def test_empty_message_is_422(self, client):
        assert client.post("/chat/s1", json={"message": ""}).status_code == 422

    def test_cancel_without_in_flight_request(self, client):
        assert client.post("/chat/s1/cancel").json() == {"cancelled": False}


class TestCommand:
    def test_create_repository(self):
        mutator = FakeMutator()
        with _client(mutator=mutator) as client:
            body = client.post("/chat/s1/command", json={"message": "Create a new repo named Foo"}).json()

        assert body["success"] is True
        assert body["action"] == "create_repo"
        assert mutator.calls[0][1] == ("foo",)

    def test_delete_needs_two_steps(self):
        mutator = FakeMutator()
        llm = FakeLlm(
            '{"type": "delete_repo", "intent": "Delete", "parameters": {"name": "big"}, "confidence": 0.9}'
        )
        with _client(llm=llm, mutator=mutator) as client:
            first = client.post("/chat/s1/command", json={"message": "delete big"}).json()
            assert first["outcome"] == "needs_confirmation"
            assert mutator.calls == []

            second = client.post(
                "/chat/s1/command", json={"message": "Yes, delete big permanently"}
            ).json()

        assert second["success"] is True
        assert mutator.calls == [("delete_repository", ("octocat", "big"), {})]

    def test_sort_uses_session_repositories(self, client):
        body = client.post("/chat/s1/command", json={"message": "sort my repos by complexity"}).json()
        assert body["success"] is True
        assert body["details"]["count"] == 2
