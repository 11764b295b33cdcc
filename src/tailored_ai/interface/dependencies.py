"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx

from tailored_ai.domain.ports.llm_gateway import LlmGateway
from tailored_ai.infrastructure.config import Settings, get_settings
from tailored_ai.infrastructure.github_rest_adapter import GitHubRestAdapter
from tailored_ai.infrastructure.openai_adapter import OpenAIAdapter
from tailored_ai.infrastructure.storage import InMemoryStorage, JsonFileStorage
from tailored_ai.interface.sessions import SessionRegistry
from tailored_ai.services.analyze_repository import AnalyzeRepositoryUseCase
from tailored_ai.services.assistant import AssistantSession
from tailored_ai.services.chat_service import ChatService
from tailored_ai.services.command_parser import CommandParser
from tailored_ai.services.dispatcher import ActionDispatcher
from tailored_ai.services.repository_cache import RepositoryCache
from tailored_ai.services.repository_sync import RepositorySyncService

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_github_adapter: GitHubRestAdapter | None = None
_sync_service: RepositorySyncService | None = None
_sessions: SessionRegistry | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _github_adapter, _sync_service, _sessions  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
    if settings.ai_api_key is not None:
        _openai_adapter = OpenAIAdapter(
            api_key=settings.ai_api_key.get_secret_value(),
            model=settings.ai_model,
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout_seconds,
        )

    token = settings.github_token.get_secret_value() if settings.github_token else None
    _github_adapter = GitHubRestAdapter(
        client=_http_client,
        token=token,
        max_attempts=settings.github_max_retries,
        base_delay=settings.github_retry_base_delay,
    )

    storage = JsonFileStorage(settings.cache_file) if settings.cache_file else InMemoryStorage()
    cache = RepositoryCache(storage, ttl_seconds=settings.cache_ttl_seconds)
    _sync_service = RepositorySyncService(_github_adapter, cache)
    _sessions = SessionRegistry(
        lambda: _new_assistant(settings), max_sessions=settings.max_chat_sessions
    )


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _github_adapter, _sync_service, _sessions  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None
    _github_adapter = None
    _sync_service = None
    _sessions = None


def _new_assistant(settings: Settings) -> AssistantSession:
    github = get_github_adapter()
    return AssistantSession(
        parser=CommandParser(_openai_adapter),
        dispatcher=ActionDispatcher(
            mutator=github if settings.github_token else None,
            analyzer=AnalyzeRepositoryUseCase(
                github, _openai_adapter, readme_token_budget=settings.readme_token_budget
            ),
        ),
    )


def get_llm_gateway() -> LlmGateway | None:
    return _openai_adapter


def get_github_adapter() -> GitHubRestAdapter:
    assert _github_adapter is not None, "startup() was not called"
    return _github_adapter


def get_sync_service() -> RepositorySyncService:
    assert _sync_service is not None, "startup() was not called"
    return _sync_service


def get_session_registry() -> SessionRegistry:
    assert _sessions is not None, "startup() was not called"
    return _sessions


def get_analyze_use_case() -> AnalyzeRepositoryUseCase:
    return AnalyzeRepositoryUseCase(
        fetcher=get_github_adapter(),
        llm_gateway=get_llm_gateway(),
        readme_token_budget=get_settings().readme_token_budget,
    )


def get_chat_service() -> ChatService:
    return ChatService(get_llm_gateway())
