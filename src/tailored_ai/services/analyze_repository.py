"""Use case: analyze a single repository.

Three entry points, from cheapest to most expensive:

* :meth:`AnalyzeRepositoryUseCase.assess_complexity` runs the contents-based
  complexity score (languages + root listing).
* :meth:`AnalyzeRepositoryUseCase.analyze` gives the heuristic analysis
  record: complexity, tech stack, project type, completeness and suggestions.
* :meth:`AnalyzeRepositoryUseCase.review` asks the LLM for a Markdown review
  and parses it, with fixed defaults for anything missing.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from tailored_ai.domain.entities import (
    ComplexityAssessment,
    ParsedAnalysis,
    RepositoryAnalysis,
    RepositoryInsights,
    RepositorySummary,
    UserProfile,
)
from tailored_ai.domain.exceptions import TailoredAiError
from tailored_ai.domain.ports.llm_gateway import LlmGateway
from tailored_ai.domain.ports.repo_fetcher import RepoFetcher
from tailored_ai.domain.value_objects import RepositoryRef
from tailored_ai.services import scorer, suggestions
from tailored_ai.services.analysis_parser import parse_analysis
from tailored_ai.services.redaction import redact_fields
from tailored_ai.services.token_budget import fit_to_budget

logger = logging.getLogger(__name__)

DEFAULT_README_TOKEN_BUDGET = 4_000

_REVIEW_SYSTEM_PROMPT = (
    "You are a senior engineer and technical recruiter reviewing GitHub "
    "repositories for a developer's portfolio. Be specific and concise."
)

_REVIEW_PROMPT_TEMPLATE = """\
Review the GitHub repository below and answer in Markdown using exactly these sections:

## What This Project Does
## Recruiter's View
## Resume Bullet
## Score
(write it as N/10)
## Suggestions
(one bullet per suggestion, formatted "- Title: description (high|medium|low)")

Repository: {name}
Description: {description}
Primary language: {language}
Languages: {languages}
Topics: {topics}
Stars: {stars}  Forks: {forks}
{profile}
README:
{readme}
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_resume_bullet(summary: RepositorySummary) -> str:
    return f"Built {summary.name} using {summary.primary_language or 'modern technologies'}"


class AnalyzeRepositoryUseCase:
    """Orchestrates GitHub reads, heuristic scoring and the optional LLM review."""

    def __init__(
        self,
        fetcher: RepoFetcher,
        llm_gateway: LlmGateway | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        readme_token_budget: int = DEFAULT_README_TOKEN_BUDGET,
    ) -> None:
        self._fetcher = fetcher
        self._llm = llm_gateway
        self._clock = clock
        self._readme_budget = readme_token_budget

    async def gather_insights(self, summary: RepositorySummary) -> RepositoryInsights:
        """Fetch languages, topics and README concurrently.

        Each part degrades to empty on failure; the summary's own topics are
        used when the topics call returns nothing.
        """
        ref = RepositoryRef(owner=summary.owner, repo=summary.name)
        languages, topics, readme = await asyncio.gather(
            self._fetcher.fetch_languages(ref),
            self._fetcher.fetch_topics(ref),
            self._fetcher.fetch_readme(ref),
            return_exceptions=True,
        )
        if isinstance(languages, BaseException):
            logger.warning("Languages unavailable for %s: %s", summary.full_name, languages)
            languages = {}
        if isinstance(topics, BaseException):
            logger.warning("Topics unavailable for %s: %s", summary.full_name, topics)
            topics = []
        readme_checked = not isinstance(readme, BaseException)
        if not readme_checked:
            logger.warning("README unavailable for %s: %s", summary.full_name, readme)
            readme = None

        return RepositoryInsights(
            languages=dict(languages),
            topics=frozenset(topics) or summary.topics,
            has_readme=readme is not None,
            readme_content=readme,
            readme_checked=readme_checked,
        )

    async def analyze(self, summary: RepositorySummary) -> RepositoryAnalysis:
        insights = await self.gather_insights(summary)
        enriched = _with_topics(summary, insights.topics)
        now = self._clock()

        assessment = scorer.score_complexity_from_summary(enriched, insights.languages)
        return RepositoryAnalysis(
            complexity_score=assessment.score,
            tech_stack=suggestions.extract_tech_stack(enriched, insights.languages),
            project_type=suggestions.determine_project_type(enriched),
            completeness_score=scorer.score_completeness(
                enriched, has_readme=insights.has_readme, now=now
            ),
            suggestions=suggestions.suggest(enriched, has_readme=insights.has_readme, now=now),
            generated_at=now,
            has_readme=insights.has_readme if insights.readme_checked else None,
        )

    async def assess_complexity(self, summary: RepositorySummary) -> ComplexityAssessment:
        ref = RepositoryRef(owner=summary.owner, repo=summary.name)
        try:
            languages, entries = await asyncio.gather(
                self._fetcher.fetch_languages(ref),
                self._fetcher.fetch_root_contents(ref),
            )
        except TailoredAiError as exc:
            logger.warning("Complexity analysis failed for %s: %s", summary.full_name, exc)
            return scorer.unavailable_assessment()
        return scorer.score_complexity_from_contents(languages, entries)

    async def review(
        self,
        summary: RepositorySummary,
        profile: UserProfile | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ParsedAnalysis:
        """LLM review of *summary*.

        Sections missing from the reply fall back to defaults; gateway
        failures (:class:`LlmError`) propagate to the caller.
        """
        fallback_bullet = default_resume_bullet(summary)
        if self._llm is None:
            logger.info("No AI model configured, returning default review for %s", summary.name)
            return parse_analysis(None, fallback_resume_bullet=fallback_bullet)

        insights = await self.gather_insights(summary)
        prompt = self._build_prompt(summary, insights, profile or UserProfile())

        generation = await self._llm.generate(
            prompt, system_prompt=_REVIEW_SYSTEM_PROMPT, cancel_event=cancel_event
        )
        if generation.cancelled:
            logger.info("Review of %s cancelled", summary.name)
            return parse_analysis(None, fallback_resume_bullet=fallback_bullet)
        return parse_analysis(generation.text, fallback_resume_bullet=fallback_bullet)

    def _build_prompt(
        self,
        summary: RepositorySummary,
        insights: RepositoryInsights,
        profile: UserProfile,
    ) -> str:
        cleaned, hits = redact_fields(
            {
                "readme": insights.readme_content,
                "target_job": profile.target_job,
                "tech_stack": profile.tech_stack,
                "user_notes": profile.user_notes,
            }
        )
        if hits:
            logger.warning("Redacted %d secret(s) before reviewing %s", hits, summary.name)

        readme = fit_to_budget(cleaned["readme"], self._readme_budget) or "(no README)"
        profile_lines = [
            f"{label}: {cleaned[key]}"
            for key, label in (
                ("target_job", "Target job"),
                ("tech_stack", "Candidate tech stack"),
                ("user_notes", "Notes from the candidate"),
            )
            if cleaned[key]
        ]
        languages = sorted(insights.languages, key=lambda lang: -insights.languages[lang])
        return _REVIEW_PROMPT_TEMPLATE.format(
            name=summary.name,
            description=summary.description or "(none)",
            language=summary.primary_language or "unknown",
            languages=", ".join(languages) or "unknown",
            topics=", ".join(sorted(insights.topics)) or "(none)",
            stars=summary.star_count,
            forks=summary.fork_count,
            profile="\n".join(profile_lines) + ("\n" if profile_lines else ""),
            readme=readme,
        )


def _with_topics(summary: RepositorySummary, topics: frozenset[str]) -> RepositorySummary:
    if topics == summary.topics:
        return summary
    return replace(summary, topics=topics)
