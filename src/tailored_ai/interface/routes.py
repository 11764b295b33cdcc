"""API routes: thin controllers that delegate to the services."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from tailored_ai.domain.entities import RepositorySummary, UserProfile
from tailored_ai.domain.exceptions import RepositoryNotFoundError, TailoredAiError
from tailored_ai.domain.value_objects import RepositoryRef
from tailored_ai.interface.dependencies import (
    get_analyze_use_case,
    get_chat_service,
    get_session_registry,
    get_sync_service,
)
from tailored_ai.interface.schemas import (
    AnalysisResponse,
    AssessmentResponse,
    CancelResponse,
    ChatRequest,
    ChatResponse,
    CommandRequest,
    CommandResponse,
    RecommendationsResponse,
    RepositoryRequest,
    RepositoryResponse,
    ReviewRequest,
    ReviewResponse,
    SortRequest,
)
from tailored_ai.interface.sessions import SessionRegistry
from tailored_ai.services.analyze_repository import AnalyzeRepositoryUseCase
from tailored_ai.services.chat_service import ChatService
from tailored_ai.services.repository_sync import RepositorySyncService
from tailored_ai.services.sorter import recommend, sort_repositories

logger = logging.getLogger(__name__)

router = APIRouter()

_GITHUB_ERRORS = {
    401: {"description": "GitHub token missing, invalid or expired"},
    429: {"description": "GitHub API rate limit exceeded"},
    503: {"description": "GitHub unreachable"},
}


async def _find_repository(sync: RepositorySyncService, full_name: str) -> RepositorySummary:
    ref = RepositoryRef.from_full_name(full_name)
    wanted = ref.full_name.casefold()
    for summary in await sync.load():
        if summary.full_name.casefold() == wanted:
            return summary
    raise RepositoryNotFoundError(f"Repository '{ref.full_name}' is not in your repository list.")


# ── Repositories ────────────────────────────────────────────────────────────


@router.get("/repositories", response_model=list[RepositoryResponse], responses=_GITHUB_ERRORS)
async def list_repositories(
    refresh: bool = False,
    sync: RepositorySyncService = Depends(get_sync_service),
) -> list[RepositoryResponse]:
    """List the authenticated user's repositories with listing-based complexity."""
    return [RepositoryResponse.from_domain(item) for item in await sync.load_scored(refresh)]


@router.post(
    "/repositories/analyze",
    response_model=AnalysisResponse,
    responses={404: {"description": "Repository not found"}, **_GITHUB_ERRORS},
)
async def analyze_repository(
    body: RepositoryRequest,
    sync: RepositorySyncService = Depends(get_sync_service),
    use_case: AnalyzeRepositoryUseCase = Depends(get_analyze_use_case),
) -> AnalysisResponse:
    summary = await _find_repository(sync, body.full_name)
    analysis = await use_case.analyze(summary)
    if analysis.has_readme is not None:
        sync.record_readme(summary.full_name, analysis.has_readme)
    return AnalysisResponse.from_domain(analysis)


@router.post(
    "/repositories/complexity",
    response_model=AssessmentResponse,
    responses={404: {"description": "Repository not found"}, **_GITHUB_ERRORS},
)
async def assess_complexity(
    body: RepositoryRequest,
    sync: RepositorySyncService = Depends(get_sync_service),
    use_case: AnalyzeRepositoryUseCase = Depends(get_analyze_use_case),
) -> AssessmentResponse:
    summary = await _find_repository(sync, body.full_name)
    assessment = await use_case.assess_complexity(summary)
    # A zero documentation factor may mean the listing failed, so only a hit is recorded.
    if assessment.has_documentation:
        sync.record_readme(summary.full_name, True)
    return AssessmentResponse.from_domain(assessment)


@router.post(
    "/repositories/review",
    response_model=ReviewResponse,
    responses={
        404: {"description": "Repository not found"},
        502: {"description": "LLM provider error"},
        504: {"description": "LLM timed out"},
        **_GITHUB_ERRORS,
    },
)
async def review_repository(
    body: ReviewRequest,
    sync: RepositorySyncService = Depends(get_sync_service),
    use_case: AnalyzeRepositoryUseCase = Depends(get_analyze_use_case),
) -> ReviewResponse:
    """AI portfolio review of one repository."""
    summary = await _find_repository(sync, body.full_name)
    profile = UserProfile(
        target_job=body.target_job, tech_stack=body.tech_stack, user_notes=body.user_notes
    )
    return ReviewResponse.from_domain(await use_case.review(summary, profile))


@router.post("/repositories/sort", response_model=list[RepositoryResponse], responses=_GITHUB_ERRORS)
async def sort_user_repositories(
    body: SortRequest,
    sync: RepositorySyncService = Depends(get_sync_service),
) -> list[RepositoryResponse]:
    scored = await sync.load_scored(body.refresh)
    ordered = sort_repositories(scored, body.criteria, body.order)
    return [RepositoryResponse.from_domain(item) for item in ordered]


@router.post(
    "/repositories/recommendations",
    response_model=RecommendationsResponse,
    responses=_GITHUB_ERRORS,
)
async def cv_recommendations(
    refresh: bool = False,
    sync: RepositorySyncService = Depends(get_sync_service),
) -> RecommendationsResponse:
    return RecommendationsResponse.from_domain(recommend(await sync.load_scored(refresh)))


# ── Chat ────────────────────────────────────────────────────────────────────


@router.post("/chat/{session_id}", response_model=ChatResponse)
async def chat(
    session_id: str,
    body: ChatRequest,
    sessions: SessionRegistry = Depends(get_session_registry),
    sync: RepositorySyncService = Depends(get_sync_service),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Free-form chat, optionally about one of the user's repositories."""
    repository = await _find_repository(sync, body.repository) if body.repository else None
    cancel_event = sessions.begin(session_id)
    try:
        reply = await chat_service.send_message(
            body.message, repository, sessions.chat_history(session_id), cancel_event
        )
    finally:
        sessions.finish(session_id, cancel_event)

    if not reply.cancelled and not reply.failed:
        sessions.record_chat(session_id, body.message, reply.content)
    return ChatResponse(content=reply.content, cancelled=reply.cancelled, failed=reply.failed)


@router.post("/chat/{session_id}/command", response_model=CommandResponse)
async def command(
    session_id: str,
    body: CommandRequest,
    sessions: SessionRegistry = Depends(get_session_registry),
    sync: RepositorySyncService = Depends(get_sync_service),
) -> CommandResponse:
    """Run a natural-language repository command through the assistant."""
    assistant = sessions.assistant(session_id)
    if body.refresh or not assistant.repositories:
        try:
            assistant.set_repositories(await sync.load_scored(body.refresh))
        except TailoredAiError as exc:
            logger.warning("Could not load repositories for session %s: %s", session_id, exc)

    cancel_event = sessions.begin(session_id)
    try:
        result = await assistant.handle(body.message, cancel_event)
    finally:
        sessions.finish(session_id, cancel_event)
    return CommandResponse.from_domain(result)


@router.post("/chat/{session_id}/cancel", response_model=CancelResponse)
async def cancel(
    session_id: str,
    sessions: SessionRegistry = Depends(get_session_registry),
) -> CancelResponse:
    """Cancel every in-flight chat or command request of the session."""
    return CancelResponse(cancelled=sessions.cancel(session_id))
