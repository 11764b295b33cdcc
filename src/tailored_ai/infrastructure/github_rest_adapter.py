"""GitHub REST API adapter — implements the RepoFetcher and RepoMutator ports."""

from __future__ import annotations

import asyncio
import base64
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from tailored_ai.domain.entities import ContentEntry, MutationResult
from tailored_ai.domain.exceptions import (
    GitHubAuthError,
    GitHubRateLimitError,
    GitHubRequestError,
    GitHubUnavailableError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
    TailoredAiError,
)
from tailored_ai.domain.value_objects import RepositoryRef
from tailored_ai.infrastructure.retry import Sleep, with_retry

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_PER_PAGE = 100


class GitHubRestAdapter:
    """Concrete fetcher/mutator backed by the GitHub v3 REST API.

    Reads are retried with exponential backoff on 5xx and network errors.
    Writes are sent once: a retried create could act twice.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "github-tailored-ai/1.0",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    # ── Reads ───────────────────────────────────────────────────────────

    async def list_user_repositories(self) -> list[dict[str, Any]]:
        """GET /user/repos, following pages until a short page is returned."""
        repos: list[dict[str, Any]] = []
        page = 1
        while True:
            resp = await self._get(
                "/user/repos",
                params={
                    "visibility": "all",
                    "sort": "updated",
                    "direction": "desc",
                    "per_page": str(_PER_PAGE),
                    "page": str(page),
                },
            )
            batch = resp.json()
            if not isinstance(batch, list) or not batch:
                break
            repos.extend(item for item in batch if isinstance(item, dict))
            logger.info("Fetched page %d: %d repositories", page, len(batch))
            if len(batch) < _PER_PAGE:
                break
            page += 1
        return repos

    async def get_authenticated_login(self) -> str:
        """GET /user → login."""
        resp = await self._get("/user")
        return str(resp.json()["login"])

    async def fetch_languages(self, ref: RepositoryRef) -> dict[str, int]:
        """GET /repos/{owner}/{repo}/languages → {lang: bytes}."""
        try:
            resp = await self._get(f"/repos/{ref.owner}/{ref.repo}/languages")
            data = resp.json()
        except TailoredAiError:
            logger.debug("Failed to fetch languages for %s, returning empty", ref.full_name)
            return {}
        if not isinstance(data, dict):
            return {}
        languages: dict[str, int] = {}
        for lang, size in data.items():
            byte_count = _as_int(size)
            if byte_count is None:
                logger.warning("Ignoring non-numeric size %r for %s in %s", size, lang, ref.full_name)
                continue
            languages[str(lang)] = byte_count
        return languages

    async def fetch_topics(self, ref: RepositoryRef) -> list[str]:
        """GET /repos/{owner}/{repo}/topics → [topic]."""
        try:
            resp = await self._get(f"/repos/{ref.owner}/{ref.repo}/topics")
        except TailoredAiError:
            logger.debug("Failed to fetch topics for %s, returning empty", ref.full_name)
            return []
        data = resp.json()
        names = data.get("names") if isinstance(data, dict) else None
        return [str(name) for name in names or []]

    async def fetch_readme(self, ref: RepositoryRef) -> str | None:
        """GET /repos/{owner}/{repo}/readme → decoded text, ``None`` on 404."""
        try:
            resp = await self._get(f"/repos/{ref.owner}/{ref.repo}/readme")
        except RepositoryNotFoundError:
            return None
        data = resp.json()
        if not isinstance(data, dict):
            logger.warning("Unexpected README payload for %s", ref.full_name)
            return ""
        encoded = data.get("content") or ""
        if not isinstance(encoded, str):
            logger.warning("README for %s has no text content", ref.full_name)
            return ""
        try:
            return base64.b64decode(encoded).decode("utf-8", errors="replace")
        except ValueError:
            logger.warning("README for %s is not valid base64", ref.full_name)
            return ""

    async def fetch_root_contents(self, ref: RepositoryRef) -> list[ContentEntry]:
        """GET /repos/{owner}/{repo}/contents/ → [ContentEntry]."""
        resp = await self._get(f"/repos/{ref.owner}/{ref.repo}/contents/")
        data = resp.json()
        items = data if isinstance(data, list) else [data]
        return [
            ContentEntry(
                name=str(item.get("name") or ""),
                path=str(item.get("path") or ""),
                type=str(item.get("type") or "file"),
                size=_as_int(item.get("size")) or 0,
            )
            for item in items
            if isinstance(item, dict)
        ]

    # ── Writes ──────────────────────────────────────────────────────────

    async def create_repository(
        self,
        name: str,
        *,
        description: str,
        private: bool = False,
        auto_init: bool = True,
        gitignore_template: str | None = None,
        license_template: str | None = None,
    ) -> MutationResult:
        """POST /user/repos."""
        body: dict[str, Any] = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": auto_init,
        }
        if gitignore_template:
            body["gitignore_template"] = gitignore_template
        if license_template:
            body["license_template"] = license_template

        logger.info("Creating repository %s", name)
        resp = await self._request("POST", "/user/repos", json=body)
        data = resp.json()
        return MutationResult(url=data.get("html_url"), payload=data)

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> MutationResult:
        """PUT /repos/{owner}/{repo}/contents/{path}."""
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            body["branch"] = branch

        logger.info("Creating file %s in %s/%s", path, owner, repo)
        resp = await self._request("PUT", f"/repos/{owner}/{repo}/contents/{path}", json=body)
        data = resp.json()
        url = (data.get("content") or {}).get("html_url")
        return MutationResult(url=url, payload=data)

    async def delete_repository(self, owner: str, repo: str) -> MutationResult:
        """DELETE /repos/{owner}/{repo}."""
        logger.warning("Deleting repository %s/%s", owner, repo)
        await self._request("DELETE", f"/repos/{owner}/{repo}")
        return MutationResult(payload={"deleted": True, "owner": owner, "name": repo})

    # ── Transport ───────────────────────────────────────────────────────

    async def _get(
        self, endpoint: str, params: dict[str, str] | None = None
    ) -> httpx.Response:
        return await with_retry(
            lambda: self._request("GET", endpoint, params=params),
            max_attempts=self._max_attempts,
            base_delay=self._base_delay,
            sleep=self._sleep,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Perform a single GitHub API request with error translation."""
        url = f"{_GITHUB_API}{endpoint}"
        try:
            resp = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
        except httpx.HTTPError as exc:
            raise GitHubUnavailableError(
                f"Could not reach GitHub ({method} {endpoint}): {exc}"
            ) from exc

        if resp.is_success:
            return resp

        status = resp.status_code
        detail = _error_detail(resp)

        if status == 401:
            raise GitHubAuthError(
                "GitHub access token has expired or is invalid. "
                "Please reconnect your GitHub account."
            )

        if status == 403:
            if resp.headers.get("x-ratelimit-remaining", "") == "0":
                raise GitHubRateLimitError(
                    "GitHub API rate limit exceeded. "
                    f"Resets at {_format_reset(resp.headers.get('x-ratelimit-reset', ''))}."
                )
            raise RepositoryAccessDeniedError(
                f"Access forbidden. Check repository permissions. ({detail})"
            )

        if status == 404:
            raise RepositoryNotFoundError("Repository not found or access denied.")

        if status == 429:
            raise GitHubRateLimitError("GitHub API rate limit exceeded (HTTP 429).")

        if status >= 500:
            raise GitHubUnavailableError(f"GitHub returned HTTP {status} for {endpoint}")

        raise GitHubRequestError(f"GitHub rejected the request (HTTP {status}): {detail}")


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.reason_phrase


def _format_reset(reset_raw: str) -> str:
    try:
        return datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S UTC"
        )
    except (ValueError, OSError):
        return reset_raw or "unknown"


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
