"""Repository ordering and CV recommendations.

All functions return new lists; input sequences are never reordered in place.
Python's sort is stable, so ties keep their input order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from tailored_ai.domain.entities import (
    ComplexityLevel,
    ImprovementNote,
    Recommendation,
    RecommendationSet,
    ScoredRepository,
    SortCriterion,
    SortDirection,
)

CV_TOP_COUNT = 5
MAX_DOCUMENTATION_IMPROVEMENTS = 3

DOCUMENTATION_IMPROVEMENT = (
    "Add a comprehensive README with project description, setup instructions, "
    "and usage examples"
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def sort_repositories(
    items: Sequence[ScoredRepository],
    criterion: SortCriterion,
    direction: SortDirection | None = None,
) -> list[ScoredRepository]:
    """Return *items* ordered by *criterion*.

    *direction* defaults to ascending and is ignored for ``cv``, which is a
    fixed composite order.
    """
    if criterion is SortCriterion.CV:
        return sort_for_cv(items)

    reverse = direction is SortDirection.DESC
    if criterion is SortCriterion.COMPLEXITY:
        return sorted(items, key=lambda item: item.assessment.score, reverse=reverse)
    if criterion is SortCriterion.DATE:
        return sorted(items, key=_updated_key, reverse=reverse)
    return sorted(items, key=_name_key, reverse=reverse)


def sort_for_cv(items: Sequence[ScoredRepository]) -> list[ScoredRepository]:
    """Most complex first, then documented, then most recently updated."""
    return sorted(
        items,
        key=lambda item: (
            -item.assessment.score,
            0 if item.has_documentation else 1,
            -_updated_key(item).timestamp(),
        ),
    )


def recommend(items: Sequence[ScoredRepository]) -> RecommendationSet:
    """Pick the five repositories to feature on a CV and explain why.

    Documentation follow-ups cover only repositories known to lack a README,
    taken in CV order.
    """
    ordered = sort_for_cv(items)
    ranked = [
        Recommendation(
            position=index + 1,
            name=item.summary.name,
            reason=recommendation_reason(item, index),
            complexity=item.assessment.level.value,
        )
        for index, item in enumerate(ordered[:CV_TOP_COUNT])
    ]
    improvements = [
        ImprovementNote(name=item.summary.name, suggestion=DOCUMENTATION_IMPROVEMENT)
        for item in ordered
        if item.lacks_documentation
    ][:MAX_DOCUMENTATION_IMPROVEMENTS]
    return RecommendationSet(ranked=ranked, improvements=improvements)


def recommendation_reason(item: ScoredRepository, position: int) -> str:
    level = item.assessment.level
    if position == 0:
        return f"Lead project - {level.value} complexity showcases your technical skills"
    if level in (ComplexityLevel.ADVANCED, ComplexityLevel.COMPLEX):
        return f"Demonstrates advanced technical capabilities ({level.value})"
    if item.has_documentation:
        return "Well-documented project shows professionalism"
    return "Recent project demonstrates current activity"


def _updated_key(item: ScoredRepository) -> datetime:
    return item.summary.updated_at or _EPOCH


def _name_key(item: ScoredRepository) -> tuple[str, str]:
    return (item.summary.name.casefold(), item.summary.name)
