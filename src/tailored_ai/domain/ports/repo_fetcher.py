"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Any, Protocol

from tailored_ai.domain.entities import ContentEntry
from tailored_ai.domain.value_objects import RepositoryRef


class RepoFetcher(Protocol):
    """Abstract contract for reading GitHub repository data."""

    async def list_user_repositories(self) -> list[dict[str, Any]]:
        """Return raw repository records for the authenticated user."""
        ...

    async def get_authenticated_login(self) -> str:
        """Return the login of the token's owner."""
        ...

    async def fetch_languages(self, ref: RepositoryRef) -> dict[str, int]:
        """Return language → byte-count mapping from the GitHub Languages API."""
        ...

    async def fetch_topics(self, ref: RepositoryRef) -> list[str]:
        """Return the repository's topics."""
        ...

    async def fetch_readme(self, ref: RepositoryRef) -> str | None:
        """Return the decoded README, or ``None`` when the repository has none."""
        ...

    async def fetch_root_contents(self, ref: RepositoryRef) -> list[ContentEntry]:
        """Return the entries at the repository root."""
        ...
