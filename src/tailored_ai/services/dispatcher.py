"""Executes a parsed :data:`ChatAction` against GitHub and the scoring services.

Each action type has one handler.  Handlers may raise domain errors; the
public :meth:`ActionDispatcher.dispatch` converts every failure into an
unsuccessful :class:`ActionResult`, so callers never see an exception.
"""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable, Sequence

from tailored_ai.domain.actions import (
    ActionResult,
    AnalyzeComplexity,
    ChatAction,
    CreateFile,
    CreateRepo,
    CvRecommendations,
    DeleteRepo,
    GeneralResponse,
    ResultOutcome,
    SortRepos,
)
from tailored_ai.domain.entities import ScoredRepository, SortCriterion, SortDirection
from tailored_ai.domain.exceptions import (
    GitHubAuthError,
    GitHubRateLimitError,
    GitHubUnavailableError,
    TailoredAiError,
)
from tailored_ai.domain.ports.repo_mutator import RepoMutator
from tailored_ai.services.analyze_repository import AnalyzeRepositoryUseCase
from tailored_ai.services.sorter import recommend, sort_repositories

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY_DESCRIPTION = "Repository created by AI Assistant"
SORT_PREVIEW_COUNT = 10

NOT_CONFIGURED_MESSAGE = (
    "GitHub integration is not set up. Please connect your GitHub account first."
)
NO_REPOSITORIES_MESSAGE = (
    "I don't have access to your repositories yet. "
    "Please refresh or connect your GitHub account."
)
AUTH_FAILED_MESSAGE = (
    "GitHub access token has expired or is invalid. Please reconnect your GitHub account."
)
RATE_LIMITED_MESSAGE = "GitHub API rate limit exceeded. Please wait a few minutes and try again."
UNAVAILABLE_MESSAGE = "Could not reach GitHub. Please try again in a moment."
UNKNOWN_ACTION_MESSAGE = "I'm not sure how to help with that. Can you try rephrasing your request?"

HELP_MESSAGE = """\
**AI Assistant Ready**

I can help you with:

**Repository management**
- "Create a new repo named [name]"
- "Create a README file in my [repo] repository"
- "Delete the [repo] repository"

**Analysis and optimization**
- "Analyze the complexity of [repo]"
- "Sort my repos by complexity"
- "Sort repos for my CV" / "Give me CV recommendations"

What would you like me to help you with?"""

PRO_TIPS = (
    "**Pro tips:**\n"
    "- Lead with your most complex projects\n"
    "- Make sure every featured repository has good documentation\n"
    "- Keep repository names professional and descriptive"
)

_SORT_DESCRIPTIONS = {
    (SortCriterion.COMPLEXITY, SortDirection.ASC): "simple to complex",
    (SortCriterion.COMPLEXITY, SortDirection.DESC): "complex to simple",
    (SortCriterion.DATE, SortDirection.ASC): "oldest to newest",
    (SortCriterion.DATE, SortDirection.DESC): "newest to oldest",
    (SortCriterion.ALPHABETICAL, SortDirection.ASC): "alphabetically",
    (SortCriterion.ALPHABETICAL, SortDirection.DESC): "reverse alphabetically",
}


def confirmation_phrase(name: str) -> str:
    return f"Yes, delete {name} permanently"


def repository_slug(name: str) -> str:
    """Lower-case, whitespace to hyphens: ``"Hello world"`` → ``"hello-world"``."""
    return re.sub(r"\s+", "-", name.strip()).lower()


def default_file_content(repo: str, path: str) -> str:
    if "readme" in path.lower():
        return (
            f"# {repo}\n\nDescription of your project.\n\n"
            "## Installation\n\n```bash\n# Add installation instructions\n```\n\n"
            "## Usage\n\n```bash\n# Add usage examples\n```\n\n"
            "## Contributing\n\nContributions are welcome!\n"
        )
    return f"{path}\nCreated by AI Assistant\n"


class ActionDispatcher:
    """Routes actions to handlers backed by GitHub and the analysis use case."""

    def __init__(
        self,
        mutator: RepoMutator | None = None,
        analyzer: AnalyzeRepositoryUseCase | None = None,
    ) -> None:
        self._mutator = mutator
        self._analyzer = analyzer
        self._handlers: dict[
            type, Callable[[ChatAction, Sequence[ScoredRepository]], Awaitable[ActionResult]]
        ] = {
            CreateRepo: self._create_repo,
            CreateFile: self._create_file,
            DeleteRepo: self._delete_repo,
            SortRepos: self._sort_repos,
            AnalyzeComplexity: self._analyze_complexity,
            CvRecommendations: self._cv_recommendations,
            GeneralResponse: self._general_response,
        }

    async def dispatch(
        self,
        action: ChatAction,
        repositories: Sequence[ScoredRepository] | None = None,
    ) -> ActionResult:
        handler = self._handlers.get(type(action))
        if handler is None:
            logger.warning("No handler for action %s", type(action).__name__)
            return ActionResult.failure(UNKNOWN_ACTION_MESSAGE)
        try:
            return await handler(action, repositories or ())
        except GitHubAuthError:
            return ActionResult.failure(AUTH_FAILED_MESSAGE, action=action)
        except GitHubRateLimitError:
            return ActionResult.failure(RATE_LIMITED_MESSAGE, action=action)
        except GitHubUnavailableError:
            return ActionResult.failure(UNAVAILABLE_MESSAGE, action=action)
        except TailoredAiError as exc:
            logger.warning("%s failed: %s", action.type.value, exc)
            return ActionResult.failure(f"Failed to {action.intent.lower()}: {exc}", action=action)
        except Exception as exc:
            logger.exception("Unexpected error while handling %s", action.type.value)
            return ActionResult.failure(f"Sorry, I encountered an error: {exc}", action=action)

    # ── Mutations ───────────────────────────────────────────────────────────

    async def _create_repo(
        self, action: CreateRepo, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if self._mutator is None:
            return _not_configured(action)
        if not action.name or not action.name.strip():
            return ActionResult.failure(
                "I need a repository name to create it. "
                "What would you like to name your repository?",
                ResultOutcome.NEEDS_CLARIFICATION,
                action,
            )

        name = repository_slug(action.name)
        result = await self._mutator.create_repository(
            name,
            description=action.description or DEFAULT_REPOSITORY_DESCRIPTION,
            private=bool(action.is_private),
            auto_init=True,
            gitignore_template=action.gitignore_template,
            license_template=action.license_template,
        )
        logger.info("Created repository %s", name)
        return ActionResult(
            success=True,
            message=(
                f'Successfully created repository "{name}"!\n\n'
                f"Repository URL: {result.url}\n\n"
                "It may take a few seconds for the repository to appear in your list."
            ),
            action=action,
            data=result.payload,
            details={"name": name, "url": result.url},
        )

    async def _create_file(
        self, action: CreateFile, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if self._mutator is None:
            return _not_configured(action)
        if not action.repo or not action.path:
            return ActionResult.failure(
                "I need both a repository name and a filename. For example: "
                "'Create a README.md file in my hello-world repo'",
                ResultOutcome.NEEDS_CLARIFICATION,
                action,
            )

        owner = await self._mutator.get_authenticated_login()
        result = await self._mutator.create_file(
            owner,
            action.repo,
            action.path,
            action.content or default_file_content(action.repo, action.path),
            action.commit_message or f"Add {action.path}",
        )
        logger.info("Created %s in %s/%s", action.path, owner, action.repo)
        return ActionResult(
            success=True,
            message=(
                f'Successfully created "{action.path}" in repository "{action.repo}"!\n\n'
                f"File URL: {result.url}"
            ),
            action=action,
            data=result.payload,
            details={"repo": action.repo, "path": action.path, "url": result.url},
        )

    async def _delete_repo(
        self, action: DeleteRepo, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if self._mutator is None:
            return _not_configured(action)
        if not action.name:
            return ActionResult.failure(
                "Please specify the repository name to delete.",
                ResultOutcome.NEEDS_CLARIFICATION,
                action,
            )

        if not action.confirmed:
            return ActionResult(
                success=False,
                message=(
                    "**DANGER ZONE**\n\n"
                    f'You are about to **PERMANENTLY DELETE** the repository "{action.name}".\n'
                    "This action CANNOT be undone: all code, history, issues, pull requests "
                    "and releases will be lost.\n\n"
                    f'If you are absolutely sure, type: **"{confirmation_phrase(action.name)}"**'
                ),
                outcome=ResultOutcome.NEEDS_CONFIRMATION,
                action=action,
                details={"name": action.name, "confirmation": confirmation_phrase(action.name)},
            )

        owner = await self._mutator.get_authenticated_login()
        await self._mutator.delete_repository(owner, action.name)
        logger.warning("Deleted repository %s/%s", owner, action.name)
        return ActionResult(
            success=True,
            message=f'Repository "{action.name}" has been permanently deleted.',
            action=action,
            details={"name": action.name},
        )

    # ── Read-only actions ───────────────────────────────────────────────────

    async def _sort_repos(
        self, action: SortRepos, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if not repositories:
            return ActionResult.failure(NO_REPOSITORIES_MESSAGE, ResultOutcome.NO_DATA, action)

        ordered = sort_repositories(repositories, action.criterion, action.direction)
        direction = action.direction or SortDirection.ASC
        description = _SORT_DESCRIPTIONS.get(
            (action.criterion, direction), "optimized for CV/resume"
        )
        lines = [
            f"{index}. **{item.summary.name}** ({item.assessment.level.value})"
            for index, item in enumerate(ordered[:SORT_PREVIEW_COUNT], start=1)
        ]
        message = f"Repositories sorted {description}:\n\n" + "\n".join(lines)
        if len(ordered) > SORT_PREVIEW_COUNT:
            message += f"\n\n...and {len(ordered) - SORT_PREVIEW_COUNT} more repositories"
        return ActionResult(
            success=True,
            message=message,
            action=action,
            data=ordered,
            details={"criteria": action.criterion.value, "count": len(ordered)},
        )

    async def _analyze_complexity(
        self, action: AnalyzeComplexity, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if action.repo and not action.analyze_all:
            return await self._analyze_one(action, repositories)

        if not repositories:
            return ActionResult.failure(NO_REPOSITORIES_MESSAGE, ResultOutcome.NO_DATA, action)
        ordered = sort_repositories(repositories, SortCriterion.COMPLEXITY, SortDirection.DESC)
        lines = [
            f"- **{item.summary.name}**: {item.assessment.level.value} "
            f"(score {item.assessment.score:g})"
            for item in ordered
        ]
        return ActionResult(
            success=True,
            message="Complexity of your repositories:\n\n" + "\n".join(lines),
            action=action,
            data=ordered,
        )

    async def _analyze_one(
        self, action: AnalyzeComplexity, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        wanted = (action.repo or "").casefold()
        match = next(
            (item for item in repositories if item.summary.name.casefold() == wanted), None
        )
        if match is None:
            return ActionResult.failure(
                f'I couldn\'t find a repository named "{action.repo}" in your list.',
                ResultOutcome.NEEDS_CLARIFICATION,
                action,
            )
        if self._analyzer is None:
            assessment = match.assessment
        else:
            assessment = await self._analyzer.assess_complexity(match.summary)

        message = (
            f"**{match.summary.name}** is {assessment.level.value} "
            f"(score {assessment.score:g}).\n\n{assessment.reasoning}"
        )
        return ActionResult(success=True, message=message, action=action, data=assessment)

    async def _cv_recommendations(
        self, action: CvRecommendations, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        if not repositories:
            return ActionResult.failure(
                "I need access to your repositories to provide CV recommendations. "
                "Please refresh or connect your GitHub account.",
                ResultOutcome.NO_DATA,
                action,
            )

        recommendations = recommend(repositories)
        parts = ["**CV Optimization Recommendations**", "## Top repositories for your CV"]
        parts.extend(
            f"{rec.position}. **{rec.name}** ({rec.complexity})\n   {rec.reason}"
            for rec in recommendations.ranked
        )
        if recommendations.improvements:
            parts.append("## Improve these repositories")
            parts.extend(
                f"- **{note.name}**\n   {note.suggestion}" for note in recommendations.improvements
            )
        parts.append(PRO_TIPS)
        return ActionResult(
            success=True,
            message="\n\n".join(parts),
            action=action,
            data=recommendations,
        )

    async def _general_response(
        self, action: GeneralResponse, repositories: Sequence[ScoredRepository]
    ) -> ActionResult:
        return ActionResult(success=True, message=HELP_MESSAGE, action=action)


def _not_configured(action: ChatAction) -> ActionResult:
    return ActionResult.failure(NOT_CONFIGURED_MESSAGE, ResultOutcome.NOT_CONFIGURED, action)
