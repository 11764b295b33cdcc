"""Port: repository mutator (GitHub write operations used by chat actions)."""

from __future__ import annotations

from typing import Protocol

from tailored_ai.domain.entities import MutationResult


class RepoMutator(Protocol):
    """Abstract contract for creating and deleting GitHub resources.

    Implementations raise :class:`~tailored_ai.domain.exceptions.TailoredAiError`
    subclasses on failure.
    """

    async def get_authenticated_login(self) -> str:
        ...

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
        ...

    async def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> MutationResult:
        ...

    async def delete_repository(self, owner: str, repo: str) -> MutationResult:
        ...
