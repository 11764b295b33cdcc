"""Turns a free-text chat message into a typed :data:`ChatAction`.

The LLM is asked for a strict JSON object.  If the model is not configured,
fails, is cancelled or answers with anything that does not validate, the
message is classified by :func:`fallback_parse` instead.  ``parse`` never
raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tailored_ai.domain.actions import (
    ActionType,
    AnalyzeComplexity,
    ChatAction,
    CreateFile,
    CreateRepo,
    CvRecommendations,
    DeleteRepo,
    GeneralResponse,
    SortRepos,
)
from tailored_ai.domain.entities import ConversationTurn, SortCriterion, SortDirection
from tailored_ai.domain.ports.llm_gateway import LlmGateway

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5

# Fixed per-branch confidences for the pattern fallback.  They are not
# calibrated probabilities.
CREATE_REPO_FALLBACK_CONFIDENCE = 0.8
CV_RECOMMENDATIONS_FALLBACK_CONFIDENCE = 0.9
SORT_COMPLEXITY_FALLBACK_CONFIDENCE = 0.8
GENERAL_RESPONSE_FALLBACK_CONFIDENCE = 0.5

DEFAULT_REPOSITORY_NAME = "new-repository"

_NAME_RE = re.compile(r"(?:named?|called?)\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE)
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_CONFIRM_DELETE_RE = re.compile(
    r"^\s*[\"']?yes,?\s+delete\s+(?P<name>.+?)\s+permanently[.!]?[\"']?\s*$", re.IGNORECASE
)

# ── Prompt ──────────────────────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You are an assistant that helps developers manage their GitHub repositories.

Decide which action the user's message asks for and reply with ONE JSON object:

{
  "type": "create_repo" | "create_file" | "delete_repo" | "sort_repos" | \
"analyze_complexity" | "cv_recommendations" | "general_response",
  "intent": "<short description of what the user wants>",
  "parameters": { <parameters for that action> },
  "confidence": <number between 0.0 and 1.0>
}

Action types and their parameters:
- create_repo: { "name", "description"?, "private"?, "gitignore"?, "license"? }
- create_file: { "repo", "filename", "content"?, "message"? }
- delete_repo: { "name", "confirm"?: boolean }; set confirm to true ONLY when \
the user typed "Yes, delete <name> permanently"
- sort_repos: { "criteria": "complexity" | "date" | "cv" | "alphabetical", \
"order"?: "asc" | "desc" }
- analyze_complexity: { "repo"?, "all"?: boolean }
- cv_recommendations: { "targetJob"?, "focus"? }
- general_response: { "topic"? }

Examples:
"Create a new repo named Hello world" -> create_repo, name="Hello world"
"Delete the hello-world-test repository" -> delete_repo, name="hello-world-test"
"Sort repos from simple to complex" -> sort_repos, criteria="complexity", order="asc"
"Sort my repos from simple to complex so I can put them on my CV" -> cv_recommendations
"Create a file readme in my hello-world repo" -> create_file, repo="hello-world", \
filename="README.md"

Reply with valid JSON only, no additional text.
"""

# ── Reply schema ────────────────────────────────────────────────────────────


class _Params(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _CreateRepoParams(_Params):
    name: str | None = None
    description: str | None = None
    private: bool | None = None
    gitignore: str | None = None
    license: str | None = None


class _CreateFileParams(_Params):
    repo: str | None = None
    filename: str | None = None
    content: str | None = None
    message: str | None = None


class _DeleteRepoParams(_Params):
    name: str | None = None
    confirm: bool = False


class _SortReposParams(_Params):
    criteria: SortCriterion = SortCriterion.ALPHABETICAL
    order: SortDirection | None = None


class _AnalyzeParams(_Params):
    repo: str | None = None
    analyze_all: bool = Field(default=False, alias="all")


class _CvParams(_Params):
    target_job: str | None = Field(default=None, alias="targetJob")
    focus: str | None = None


class _GeneralParams(_Params):
    topic: str | None = None


class _ActionEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: ActionType
    intent: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


def _create_repo(env: _ActionEnvelope) -> ChatAction:
    p = _CreateRepoParams.model_validate(env.parameters)
    return CreateRepo(
        name=p.name,
        description=p.description,
        is_private=p.private,
        gitignore_template=p.gitignore,
        license_template=p.license,
        confidence=env.confidence,
        intent=env.intent or "Create repository",
    )


def _create_file(env: _ActionEnvelope) -> ChatAction:
    p = _CreateFileParams.model_validate(env.parameters)
    return CreateFile(
        repo=p.repo,
        path=p.filename,
        content=p.content,
        commit_message=p.message,
        confidence=env.confidence,
        intent=env.intent or "Create file",
    )


def _delete_repo(env: _ActionEnvelope) -> ChatAction:
    p = _DeleteRepoParams.model_validate(env.parameters)
    return DeleteRepo(
        name=p.name,
        confirmed=p.confirm,
        confidence=env.confidence,
        intent=env.intent or "Delete repository",
    )


def _sort_repos(env: _ActionEnvelope) -> ChatAction:
    p = _SortReposParams.model_validate(env.parameters)
    return SortRepos(
        criterion=p.criteria,
        direction=p.order,
        confidence=env.confidence,
        intent=env.intent or "Sort repositories",
    )


def _analyze(env: _ActionEnvelope) -> ChatAction:
    p = _AnalyzeParams.model_validate(env.parameters)
    return AnalyzeComplexity(
        repo=p.repo,
        analyze_all=p.analyze_all,
        confidence=env.confidence,
        intent=env.intent or "Analyze complexity",
    )


def _cv(env: _ActionEnvelope) -> ChatAction:
    p = _CvParams.model_validate(env.parameters)
    return CvRecommendations(
        target_job=p.target_job,
        focus=p.focus,
        confidence=env.confidence,
        intent=env.intent or "CV optimization",
    )


def _general(env: _ActionEnvelope) -> ChatAction:
    p = _GeneralParams.model_validate(env.parameters)
    return GeneralResponse(
        topic=p.topic, confidence=env.confidence, intent=env.intent or "General help"
    )


_BUILDERS: dict[ActionType, Callable[[_ActionEnvelope], ChatAction]] = {
    ActionType.CREATE_REPO: _create_repo,
    ActionType.CREATE_FILE: _create_file,
    ActionType.DELETE_REPO: _delete_repo,
    ActionType.SORT_REPOS: _sort_repos,
    ActionType.ANALYZE_COMPLEXITY: _analyze,
    ActionType.CV_RECOMMENDATIONS: _cv,
    ActionType.GENERAL_RESPONSE: _general,
}


# ── Public API ──────────────────────────────────────────────────────────────


def action_from_reply(raw: str) -> ChatAction:
    """Validate an LLM reply and build the action.

    Raises ``ValueError`` (``ValidationError`` included) when the reply is
    not a JSON object of the expected shape.
    """
    text = _FENCE_RE.sub("", raw.strip()).strip()
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    envelope = _ActionEnvelope.model_validate(data)
    return _BUILDERS[envelope.type](envelope)


def deletion_confirmation_target(message: str) -> str | None:
    """Return ``<name>`` when *message* is ``Yes, delete <name> permanently``."""
    match = _CONFIRM_DELETE_RE.match(message)
    return match["name"].strip("\"' ") if match else None


def fallback_parse(message: str) -> ChatAction:
    """Classify *message* with plain keyword rules (no AI call)."""
    lower = message.lower()

    if "create" in lower and "repo" in lower:
        match = _NAME_RE.search(message)
        name = match.group(1).strip() if match else ""
        return CreateRepo(
            name=name or DEFAULT_REPOSITORY_NAME,
            confidence=CREATE_REPO_FALLBACK_CONFIDENCE,
            intent="Create repository",
        )

    if "sort" in lower and "cv" in lower:
        return CvRecommendations(
            confidence=CV_RECOMMENDATIONS_FALLBACK_CONFIDENCE, intent="CV optimization"
        )

    if "sort" in lower and "complex" in lower:
        return SortRepos(
            criterion=SortCriterion.COMPLEXITY,
            direction=SortDirection.ASC,
            confidence=SORT_COMPLEXITY_FALLBACK_CONFIDENCE,
            intent="Sort by complexity",
        )

    return GeneralResponse(confidence=GENERAL_RESPONSE_FALLBACK_CONFIDENCE, intent="General help")


class CommandParser:
    """Turns chat messages into actions, preferring the LLM when available."""

    def __init__(self, llm_gateway: LlmGateway | None = None) -> None:
        self._llm = llm_gateway

    async def parse(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        cancel_event: asyncio.Event | None = None,
    ) -> ChatAction:
        if self._llm is None:
            return fallback_parse(message)

        try:
            generation = await self._llm.generate(
                message,
                list(history)[-HISTORY_LIMIT:],
                SYSTEM_PROMPT,
                cancel_event,
            )
        except Exception as exc:
            logger.warning("Command parsing via AI failed (%s), using pattern fallback", exc)
            return fallback_parse(message)

        if generation.cancelled:
            return fallback_parse(message)

        try:
            action = action_from_reply(generation.text)
        except (ValueError, ValidationError) as exc:
            logger.warning("AI reply is not a valid action (%s), using pattern fallback", exc)
            return fallback_parse(message)

        logger.info("Parsed command as %s (confidence %.2f)", action.type.value, action.confidence)
        return action
