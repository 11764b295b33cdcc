"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ComplexityLevel(str, Enum):
    """Discrete complexity bucket shared by both scoring scales."""

    SIMPLE = "Simple"
    INTERMEDIATE = "Intermediate"
    COMPLEX = "Complex"
    ADVANCED = "Advanced"


class AssessmentSource(str, Enum):
    """Which scoring variant produced an assessment."""

    SUMMARY = "summary"
    CONTENTS = "contents"


class SortCriterion(str, Enum):
    COMPLEXITY = "complexity"
    CV = "cv"
    DATE = "date"
    ALPHABETICAL = "alphabetical"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class RepositorySummary:
    """Normalized, read-only view of one GitHub repository."""

    id: int
    name: str
    full_name: str
    owner: str
    description: str | None = None
    primary_language: str | None = None
    topics: frozenset[str] = frozenset()
    size_kb: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    star_count: int = 0
    fork_count: int = 0
    open_issue_count: int = 0
    is_private: bool = False
    has_issues_enabled: bool = False
    has_wiki: bool = False
    is_archived: bool = False
    is_disabled: bool = False
    html_url: str = ""
    default_branch: str = "main"


@dataclass(frozen=True, slots=True)
class ContentEntry:
    """A single entry from the GitHub contents API (file or directory)."""

    name: str
    path: str
    type: str  # "file", "dir", "symlink" or "submodule"
    size: int = 0


@dataclass(frozen=True, slots=True)
class ComplexityFactors:
    """Breakdown used by the contents-based complexity variant."""

    languages: int = 0
    file_count: float = 0.0
    dependencies: int = 0
    architecture: int = 0
    documentation: int = 0

    @property
    def total(self) -> float:
        return (
            self.languages
            + self.file_count
            + self.dependencies
            + self.architecture
            + self.documentation
        )


@dataclass(frozen=True, slots=True)
class ComplexityAssessment:
    """Heuristic estimate of how technically sophisticated a repository is."""

    score: float
    level: ComplexityLevel
    source: AssessmentSource
    reasoning: str = ""
    factors: ComplexityFactors | None = None

    @property
    def has_documentation(self) -> bool:
        return self.factors is not None and self.factors.documentation > 0


@dataclass(frozen=True, slots=True)
class ScoredRepository:
    """A repository summary paired with its complexity assessment."""

    summary: RepositorySummary
    assessment: ComplexityAssessment
    has_readme: bool | None = None

    @property
    def has_documentation(self) -> bool:
        return self.assessment.has_documentation or bool(self.has_readme)

    @property
    def lacks_documentation(self) -> bool:
        """True only when documentation is known to be absent.

        An unchecked README (``has_readme is None``) with no contents-based
        factors is unknown, not missing.
        """
        if self.has_documentation:
            return False
        factors = self.assessment.factors
        return self.has_readme is False or (factors is not None and factors.documentation == 0)


@dataclass(frozen=True, slots=True)
class RepositoryInsights:
    """Per-repository data fetched on top of the summary (may be partial)."""

    languages: dict[str, int] = field(default_factory=dict)
    topics: frozenset[str] = frozenset()
    has_readme: bool = False
    readme_content: str | None = None
    readme_checked: bool = True


@dataclass(frozen=True, slots=True)
class RepositoryAnalysis:
    """Heuristic analysis record for a single repository."""

    complexity_score: float
    tech_stack: list[str]
    project_type: str
    completeness_score: int
    suggestions: list[str]
    generated_at: datetime
    has_readme: bool | None = None


@dataclass(frozen=True, slots=True)
class Recommendation:
    position: int
    name: str
    reason: str
    complexity: str


@dataclass(frozen=True, slots=True)
class ImprovementNote:
    name: str
    suggestion: str


@dataclass(frozen=True, slots=True)
class RecommendationSet:
    """Ranked CV recommendations plus documentation follow-ups."""

    ranked: list[Recommendation] = field(default_factory=list)
    improvements: list[ImprovementNote] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AnalysisSuggestion:
    title: str
    description: str = ""
    priority: str = "medium"  # "high", "medium" or "low"


@dataclass(frozen=True, slots=True)
class ParsedAnalysis:
    """Structured view of a Markdown repository review produced by the LLM."""

    analysis: str
    project_summary: str
    suggestions: list[AnalysisSuggestion]
    score: int
    resume_bullet: str
    recruiters_view: str
    improvement_priorities: list[str]


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Optional career context supplied with review requests."""

    target_job: str | None = None
    tech_stack: str | None = None
    user_notes: str | None = None


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    role: str  # "user" or "assistant"
    content: str


class GenerationOutcome(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class Generation:
    """Result of one text-generation call."""

    text: str
    outcome: GenerationOutcome = GenerationOutcome.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.outcome is GenerationOutcome.CANCELLED

    @classmethod
    def cancelled_generation(cls) -> Generation:
        return cls(text="", outcome=GenerationOutcome.CANCELLED)


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Successful outcome of a GitHub mutation."""

    url: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
