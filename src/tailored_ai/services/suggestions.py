"""Improvement hints, project type and tech stack for a repository."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from tailored_ai.domain.entities import RepositorySummary
from tailored_ai.services.scorer import has_meaningful_description, has_social_proof, is_stale

MAX_SUGGESTIONS = 5
MAX_TECH_STACK = 10

SUGGEST_DESCRIPTION = "Add a detailed description to explain what your project does"
SUGGEST_README = "Create a comprehensive README with installation and usage instructions"
SUGGEST_TOPICS = "Add relevant topics/tags to help others discover your project"
SUGGEST_REFRESH = "Consider updating the project or archiving if no longer maintained"
SUGGEST_VISIBILITY = (
    "Share your project on social media or relevant communities to gain visibility"
)
SUGGEST_ISSUES = "Enable issues to allow others to report bugs and request features"


def suggest(
    summary: RepositorySummary,
    *,
    has_readme: bool,
    now: datetime,
) -> list[str]:
    """Return up to five improvement suggestions in fixed priority order."""
    checks = (
        (not has_meaningful_description(summary), SUGGEST_DESCRIPTION),
        (not has_readme, SUGGEST_README),
        (not summary.topics, SUGGEST_TOPICS),
        (is_stale(summary, now), SUGGEST_REFRESH),
        (not has_social_proof(summary), SUGGEST_VISIBILITY),
        (not summary.has_issues_enabled, SUGGEST_ISSUES),
    )
    suggestions: list[str] = []
    for failing, text in checks:
        if not failing:
            continue
        suggestions.append(text)
        if len(suggestions) == MAX_SUGGESTIONS:
            break
    return suggestions


def determine_project_type(summary: RepositorySummary) -> str:
    """Classify the repository from its name, description and topics."""
    name = summary.name.lower()
    description = (summary.description or "").lower()
    topics = summary.topics

    if topics & {"web", "website"} or "web" in name or "web" in description:
        return "Web Application"
    if "api" in topics or "api" in name or "api" in description:
        return "API/Backend"
    if topics & {"mobile", "android", "ios"}:
        return "Mobile Application"
    if "library" in topics or "lib" in name or "library" in description:
        return "Library/Package"
    if topics & {"cli", "command-line"} or "cli" in name or "command" in description:
        return "CLI Tool"
    if summary.primary_language == "Python" and (
        topics & {"data-science", "machine-learning"} or "data" in description
    ):
        return "Data Science/ML"
    return "General Project"


def extract_tech_stack(
    summary: RepositorySummary,
    languages: Mapping[str, int] | None = None,
) -> list[str]:
    """Primary language, then other languages by size, then topics (deduplicated)."""
    langs = languages or {}
    stack: list[str] = []
    if summary.primary_language:
        stack.append(summary.primary_language)
    stack.extend(sorted(langs, key=lambda lang: -langs[lang]))
    stack.extend(sorted(summary.topics))
    return list(dict.fromkeys(stack))[:MAX_TECH_STACK]
