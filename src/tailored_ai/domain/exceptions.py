"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer and
to a user-facing message in the chat dispatcher.  Inner layers raise these;
the outermost layers translate them.
"""

from __future__ import annotations


class TailoredAiError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryError(TailoredAiError):
    """The supplied repository reference or record cannot be used."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class GitHubAuthError(TailoredAiError):
    """The GitHub token is missing, invalid or expired (401)."""


class RepositoryNotFoundError(TailoredAiError):
    """The repository does not exist or is not accessible (404)."""


class RepositoryAccessDeniedError(TailoredAiError):
    """Access to the repository was denied (403)."""


class GitHubRateLimitError(TailoredAiError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""


class GitHubRequestError(TailoredAiError):
    """GitHub rejected the request (any other 4xx, e.g. 422 name taken)."""


class GitHubUnavailableError(TailoredAiError):
    """Network failure or 5xx from GitHub; the only retryable GitHub error."""


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmError(TailoredAiError):
    """Any error originating from the LLM provider."""


class LlmTimeoutError(LlmError):
    """The LLM did not answer within the configured timeout."""
