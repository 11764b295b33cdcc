"""Heuristic scoring of the complexity and completeness of a repository.

There are two complexity scales and they are deliberately kept apart:

* :func:`score_complexity_from_summary` works from listing metadata alone and
  yields a 0-100 score.
* :func:`score_complexity_from_contents` needs the repository's root listing
  and language breakdown and yields a small raw factor sum.

:func:`select_assessment` decides which one wins when both are available.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Sequence

from tailored_ai.domain.entities import (
    AssessmentSource,
    ComplexityAssessment,
    ComplexityFactors,
    ComplexityLevel,
    ContentEntry,
    RepositorySummary,
)

# ── Summary-based weights ───────────────────────────────────────────────────

COMPLEX_LANGUAGES: frozenset[str] = frozenset({"C++", "Rust", "Go", "Java", "C#"})

_LARGE_REPO_KB = 10_000
_MEDIUM_REPO_KB = 1_000
_SIZE_LARGE_POINTS = 30
_SIZE_MEDIUM_POINTS = 20
_SIZE_SMALL_POINTS = 10
_COMPLEX_LANGUAGE_POINTS = 20
_PER_LANGUAGE_POINTS, _LANGUAGE_CAP = 5, 25
_PER_STAR_POINTS, _STAR_CAP = 2, 20
_PER_FORK_POINTS, _FORK_CAP = 3, 15

# (exclusive upper bound, level) on the 0-100 scale
_SUMMARY_LEVELS: list[tuple[float, ComplexityLevel]] = [
    (40, ComplexityLevel.SIMPLE),
    (60, ComplexityLevel.INTERMEDIATE),
    (80, ComplexityLevel.COMPLEX),
]

# ── Contents-based weights ──────────────────────────────────────────────────

DEPENDENCY_MANIFESTS: tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "Cargo.toml",
    "pom.xml",
)

# (inclusive upper bound, level) on the raw factor sum
_CONTENTS_LEVELS: list[tuple[float, ComplexityLevel]] = [
    (5, ComplexityLevel.SIMPLE),
    (10, ComplexityLevel.INTERMEDIATE),
    (15, ComplexityLevel.COMPLEX),
]

_REASONING: dict[ComplexityLevel, str] = {
    ComplexityLevel.SIMPLE: (
        "Basic project with minimal dependencies and straightforward structure"
    ),
    ComplexityLevel.INTERMEDIATE: (
        "Well-structured project with moderate complexity and dependencies"
    ),
    ComplexityLevel.COMPLEX: (
        "Advanced project with multiple technologies and sophisticated architecture"
    ),
    ComplexityLevel.ADVANCED: (
        "Highly complex project with extensive dependencies and advanced patterns"
    ),
}

# ── Completeness weights ────────────────────────────────────────────────────

_DESCRIPTION_MIN_CHARS = 10
_DAYS_PER_MONTH = 30
_FRESH_MONTHS = 6
_RECENT_MONTHS = 12
STALE_MONTHS = 12


# ── Complexity ──────────────────────────────────────────────────────────────


def score_complexity_from_summary(
    summary: RepositorySummary,
    languages: Mapping[str, int] | None = None,
) -> ComplexityAssessment:
    """0-100 complexity score from listing metadata.

    *languages* is the per-language byte breakdown; when it was not fetched
    the diversity bonus is zero.
    """
    score = 0
    if summary.size_kb > _LARGE_REPO_KB:
        score += _SIZE_LARGE_POINTS
    elif summary.size_kb > _MEDIUM_REPO_KB:
        score += _SIZE_MEDIUM_POINTS
    else:
        score += _SIZE_SMALL_POINTS

    if summary.primary_language in COMPLEX_LANGUAGES:
        score += _COMPLEX_LANGUAGE_POINTS

    score += min(len(languages or {}) * _PER_LANGUAGE_POINTS, _LANGUAGE_CAP)
    score += min(summary.star_count * _PER_STAR_POINTS, _STAR_CAP)
    score += min(summary.fork_count * _PER_FORK_POINTS, _FORK_CAP)

    score = max(0, min(score, 100))
    level = summary_level(score)
    return ComplexityAssessment(
        score=score,
        level=level,
        source=AssessmentSource.SUMMARY,
        reasoning=_REASONING[level],
    )


def summary_level(score: float) -> ComplexityLevel:
    for bound, level in _SUMMARY_LEVELS:
        if score < bound:
            return level
    return ComplexityLevel.ADVANCED


def score_complexity_from_contents(
    languages: Mapping[str, int],
    root_entries: Sequence[ContentEntry],
) -> ComplexityAssessment:
    """Raw factor-sum complexity from the repository's root listing."""
    names = {entry.name for entry in root_entries}
    file_count = len(root_entries)

    if file_count > 10:
        architecture = 3
    elif file_count > 5:
        architecture = 2
    else:
        architecture = 1

    factors = ComplexityFactors(
        languages=len(languages),
        file_count=min(file_count / 5, 5),
        dependencies=sum(2 for manifest in DEPENDENCY_MANIFESTS if manifest in names),
        architecture=architecture,
        documentation=2 if any("readme" in name.lower() for name in names) else 0,
    )
    total = factors.total
    level = contents_level(total)
    return ComplexityAssessment(
        score=total,
        level=level,
        source=AssessmentSource.CONTENTS,
        reasoning=_REASONING[level],
        factors=factors,
    )


def contents_level(total: float) -> ComplexityLevel:
    for bound, level in _CONTENTS_LEVELS:
        if total <= bound:
            return level
    return ComplexityLevel.ADVANCED


def unavailable_assessment() -> ComplexityAssessment:
    """Zero assessment used when repository contents could not be fetched."""
    return ComplexityAssessment(
        score=0,
        level=ComplexityLevel.SIMPLE,
        source=AssessmentSource.CONTENTS,
        reasoning="Unable to analyze repository complexity",
        factors=ComplexityFactors(),
    )


def select_assessment(
    summary_based: ComplexityAssessment,
    contents_based: ComplexityAssessment | None = None,
) -> ComplexityAssessment:
    """Prefer the contents-based assessment whenever contents were fetched."""
    return contents_based if contents_based is not None else summary_based


# ── Completeness ────────────────────────────────────────────────────────────


def months_since_update(summary: RepositorySummary, now: datetime) -> float | None:
    """Months (30-day units) between ``updated_at`` and *now*, or ``None``."""
    if summary.updated_at is None:
        return None
    delta = now - summary.updated_at
    return delta.total_seconds() / 86_400 / _DAYS_PER_MONTH


def has_meaningful_description(summary: RepositorySummary) -> bool:
    return bool(summary.description) and len(summary.description) > _DESCRIPTION_MIN_CHARS


def has_social_proof(summary: RepositorySummary) -> bool:
    return summary.star_count > 0 or summary.fork_count > 0


def is_stale(summary: RepositorySummary, now: datetime) -> bool:
    months = months_since_update(summary, now)
    return months is None or months > STALE_MONTHS


def score_completeness(
    summary: RepositorySummary,
    *,
    has_readme: bool,
    now: datetime,
) -> int:
    """0-100 score for how portfolio-ready a repository's presentation is."""
    score = 0
    if has_meaningful_description(summary):
        score += 20
    if has_readme:
        score += 25
    if summary.topics:
        score += 15

    months = months_since_update(summary, now)
    if months is not None:
        if months < _FRESH_MONTHS:
            score += 20
        elif months < _RECENT_MONTHS:
            score += 10

    if summary.has_issues_enabled:
        score += 10
    if has_social_proof(summary):
        score += 10

    return min(score, 100)
