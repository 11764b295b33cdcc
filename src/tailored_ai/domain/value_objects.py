"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from tailored_ai.domain.exceptions import InvalidRepositoryError

_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)
_FULL_NAME_RE = re.compile(r"^(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+)$")


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Validated ``owner/repo`` reference to a GitHub repository.

    Built either from a URL like ``https://github.com/psf/requests`` or from a
    ``full_name`` like ``psf/requests``.  Rejects anything else.
    """

    owner: str
    repo: str

    @classmethod
    def from_url(cls, url: str) -> RepositoryRef:
        """Parse and validate a repository URL."""
        url = url.strip()
        match = _GITHUB_URL_RE.match(url)
        if not match:
            raise InvalidRepositoryError(
                f"Invalid GitHub URL: '{url}'. "
                "Expected format: https://github.com/<owner>/<repo>"
            )
        return cls(owner=match["owner"], repo=match["repo"])

    @classmethod
    def from_full_name(cls, full_name: str) -> RepositoryRef:
        """Parse and validate an ``owner/repo`` string."""
        full_name = full_name.strip()
        match = _FULL_NAME_RE.match(full_name)
        if not match:
            raise InvalidRepositoryError(
                f"Invalid repository name: '{full_name}'. Expected format: <owner>/<repo>"
            )
        return cls(owner=match["owner"], repo=match["repo"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"
