"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from tailored_ai.domain.actions import ActionResult
from tailored_ai.domain.entities import (
    ComplexityAssessment,
    ParsedAnalysis,
    RecommendationSet,
    RepositoryAnalysis,
    ScoredRepository,
    SortCriterion,
    SortDirection,
)

# ── Requests ────────────────────────────────────────────────────────────────


class RepositoryRequest(BaseModel):
    """Body for the single-repository endpoints."""

    full_name: str

    @field_validator("full_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "full_name must not be empty."
            raise ValueError(msg)
        return stripped


class ReviewRequest(RepositoryRequest):
    target_job: str | None = None
    tech_stack: str | None = None
    user_notes: str | None = None


class SortRequest(BaseModel):
    criteria: SortCriterion = SortCriterion.COMPLEXITY
    order: SortDirection | None = None
    refresh: bool = False


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    repository: str | None = None  # full_name of the repository under discussion


class CommandRequest(BaseModel):
    message: str = Field(min_length=1)
    refresh: bool = False


# ── Responses ───────────────────────────────────────────────────────────────


class AssessmentResponse(BaseModel):
    score: float
    level: str
    source: str
    reasoning: str
    factors: dict[str, float] | None = None

    @classmethod
    def from_domain(cls, assessment: ComplexityAssessment) -> AssessmentResponse:
        factors = assessment.factors
        return cls(
            score=assessment.score,
            level=assessment.level.value,
            source=assessment.source.value,
            reasoning=assessment.reasoning,
            factors=(
                {
                    "languages": factors.languages,
                    "file_count": factors.file_count,
                    "dependencies": factors.dependencies,
                    "architecture": factors.architecture,
                    "documentation": factors.documentation,
                }
                if factors is not None
                else None
            ),
        )


class RepositoryResponse(BaseModel):
    id: int
    name: str
    full_name: str
    description: str | None
    language: str | None
    topics: list[str]
    stars: int
    forks: int
    private: bool
    html_url: str
    updated_at: datetime | None
    complexity: AssessmentResponse

    @classmethod
    def from_domain(cls, item: ScoredRepository) -> RepositoryResponse:
        summary = item.summary
        return cls(
            id=summary.id,
            name=summary.name,
            full_name=summary.full_name,
            description=summary.description,
            language=summary.primary_language,
            topics=sorted(summary.topics),
            stars=summary.star_count,
            forks=summary.fork_count,
            private=summary.is_private,
            html_url=summary.html_url,
            updated_at=summary.updated_at,
            complexity=AssessmentResponse.from_domain(item.assessment),
        )


class AnalysisResponse(BaseModel):
    complexity_score: float
    tech_stack: list[str]
    project_type: str
    completeness_score: int
    suggestions: list[str]
    generated_at: datetime
    has_readme: bool | None = None

    @classmethod
    def from_domain(cls, analysis: RepositoryAnalysis) -> AnalysisResponse:
        return cls(
            complexity_score=analysis.complexity_score,
            tech_stack=analysis.tech_stack,
            project_type=analysis.project_type,
            completeness_score=analysis.completeness_score,
            suggestions=analysis.suggestions,
            generated_at=analysis.generated_at,
            has_readme=analysis.has_readme,
        )


class SuggestionResponse(BaseModel):
    title: str
    description: str
    priority: str


class ReviewResponse(BaseModel):
    analysis: str
    project_summary: str
    score: int
    resume_bullet: str
    recruiters_view: str
    suggestions: list[SuggestionResponse]
    improvement_priorities: list[str]

    @classmethod
    def from_domain(cls, parsed: ParsedAnalysis) -> ReviewResponse:
        return cls(
            analysis=parsed.analysis,
            project_summary=parsed.project_summary,
            score=parsed.score,
            resume_bullet=parsed.resume_bullet,
            recruiters_view=parsed.recruiters_view,
            suggestions=[
                SuggestionResponse(title=s.title, description=s.description, priority=s.priority)
                for s in parsed.suggestions
            ],
            improvement_priorities=parsed.improvement_priorities,
        )


class RecommendationResponse(BaseModel):
    position: int
    name: str
    reason: str
    complexity: str


class ImprovementResponse(BaseModel):
    name: str
    suggestion: str


class RecommendationsResponse(BaseModel):
    ranked: list[RecommendationResponse]
    improvements: list[ImprovementResponse]

    @classmethod
    def from_domain(cls, recommendations: RecommendationSet) -> RecommendationsResponse:
        return cls(
            ranked=[
                RecommendationResponse(
                    position=r.position, name=r.name, reason=r.reason, complexity=r.complexity
                )
                for r in recommendations.ranked
            ],
            improvements=[
                ImprovementResponse(name=n.name, suggestion=n.suggestion)
                for n in recommendations.improvements
            ],
        )


class ChatResponse(BaseModel):
    content: str
    cancelled: bool = False
    failed: bool = False


class CommandResponse(BaseModel):
    success: bool
    message: str
    outcome: str
    action: str | None = None
    confidence: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, result: ActionResult) -> CommandResponse:
        action = result.action
        return cls(
            success=result.success,
            message=result.message,
            outcome=result.outcome.value,
            action=action.type.value if action is not None else None,
            confidence=action.confidence if action is not None else None,
            details=result.details,
        )


class CancelResponse(BaseModel):
    cancelled: bool


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    success: bool = False
    message: str
