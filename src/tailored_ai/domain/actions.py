"""Typed intents extracted from a user's chat message.

Each variant is a frozen dataclass tagged with an :class:`ActionType`.  An
action is built once per message, handed to the dispatcher and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from tailored_ai.domain.entities import SortCriterion, SortDirection


class ActionType(str, Enum):
    CREATE_REPO = "create_repo"
    CREATE_FILE = "create_file"
    DELETE_REPO = "delete_repo"
    SORT_REPOS = "sort_repos"
    ANALYZE_COMPLEXITY = "analyze_complexity"
    CV_RECOMMENDATIONS = "cv_recommendations"
    GENERAL_RESPONSE = "general_response"


@dataclass(frozen=True, slots=True)
class CreateRepo:
    type: ClassVar[ActionType] = ActionType.CREATE_REPO

    name: str | None = None
    description: str | None = None
    is_private: bool | None = None
    gitignore_template: str | None = None
    license_template: str | None = None
    confidence: float = 1.0
    intent: str = "Create repository"


@dataclass(frozen=True, slots=True)
class CreateFile:
    type: ClassVar[ActionType] = ActionType.CREATE_FILE

    repo: str | None = None
    path: str | None = None
    content: str | None = None
    commit_message: str | None = None
    confidence: float = 1.0
    intent: str = "Create file"


@dataclass(frozen=True, slots=True)
class DeleteRepo:
    type: ClassVar[ActionType] = ActionType.DELETE_REPO

    name: str | None = None
    confirmed: bool = False
    confidence: float = 1.0
    intent: str = "Delete repository"


@dataclass(frozen=True, slots=True)
class SortRepos:
    type: ClassVar[ActionType] = ActionType.SORT_REPOS

    criterion: SortCriterion = SortCriterion.ALPHABETICAL
    direction: SortDirection | None = None
    confidence: float = 1.0
    intent: str = "Sort repositories"


@dataclass(frozen=True, slots=True)
class AnalyzeComplexity:
    type: ClassVar[ActionType] = ActionType.ANALYZE_COMPLEXITY

    repo: str | None = None
    analyze_all: bool = False
    confidence: float = 1.0
    intent: str = "Analyze complexity"


@dataclass(frozen=True, slots=True)
class CvRecommendations:
    type: ClassVar[ActionType] = ActionType.CV_RECOMMENDATIONS

    target_job: str | None = None
    focus: str | None = None
    confidence: float = 1.0
    intent: str = "CV optimization"


@dataclass(frozen=True, slots=True)
class GeneralResponse:
    type: ClassVar[ActionType] = ActionType.GENERAL_RESPONSE

    topic: str | None = None
    confidence: float = 1.0
    intent: str = "General help"


ChatAction = Union[
    CreateRepo,
    CreateFile,
    DeleteRepo,
    SortRepos,
    AnalyzeComplexity,
    CvRecommendations,
    GeneralResponse,
]


class ResultOutcome(str, Enum):
    """How a dispatched action ended, beyond plain success/failure."""

    COMPLETED = "completed"
    NEEDS_CONFIRMATION = "needs_confirmation"
    NEEDS_CLARIFICATION = "needs_clarification"
    NOT_CONFIGURED = "not_configured"
    NO_DATA = "no_data"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """User-facing outcome of handling one chat message."""

    success: bool
    message: str
    outcome: ResultOutcome = ResultOutcome.COMPLETED
    action: ChatAction | None = None
    data: Any = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(
        cls,
        message: str,
        outcome: ResultOutcome = ResultOutcome.FAILED,
        action: ChatAction | None = None,
    ) -> ActionResult:
        return cls(success=False, message=message, outcome=outcome, action=action)
