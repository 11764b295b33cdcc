"""Maps raw GitHub repository records to :class:`RepositorySummary`."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from tailored_ai.domain.entities import RepositorySummary

logger = logging.getLogger(__name__)


def normalize(raw: Mapping[str, Any]) -> RepositorySummary:
    """Map one GitHub repository record onto a :class:`RepositorySummary`.

    Missing optional fields become ``None`` or empty; unknown fields are
    ignored.  The result depends on *raw* only.
    """
    full_name = _text(raw.get("full_name"))
    name = _text(raw.get("name")) or full_name.rsplit("/", maxsplit=1)[-1]
    if not full_name:
        full_name = name

    owner_raw = raw.get("owner")
    if isinstance(owner_raw, Mapping):
        owner = _text(owner_raw.get("login"))
    else:
        owner = _text(owner_raw)
    if not owner and "/" in full_name:
        owner = full_name.split("/", maxsplit=1)[0]

    created_at = _timestamp(raw.get("created_at"), "created_at", full_name)
    updated_at = _timestamp(raw.get("updated_at"), "updated_at", full_name)
    if created_at and updated_at and updated_at < created_at:
        logger.warning(
            "Data quality: %s has updated_at %s before created_at %s",
            full_name,
            updated_at.isoformat(),
            created_at.isoformat(),
        )

    return RepositorySummary(
        id=_count(raw.get("id")),
        name=name,
        full_name=full_name,
        owner=owner,
        description=_optional_text(raw.get("description")),
        primary_language=_optional_text(raw.get("language")),
        topics=_topics(raw.get("topics")),
        size_kb=_count(raw.get("size")),
        created_at=created_at,
        updated_at=updated_at,
        pushed_at=_timestamp(raw.get("pushed_at"), "pushed_at", full_name),
        star_count=_count(raw.get("stargazers_count")),
        fork_count=_count(raw.get("forks_count")),
        open_issue_count=_count(raw.get("open_issues_count")),
        is_private=bool(raw.get("private", False)),
        has_issues_enabled=bool(raw.get("has_issues", False)),
        has_wiki=bool(raw.get("has_wiki", False)),
        is_archived=bool(raw.get("archived", False)),
        is_disabled=bool(raw.get("disabled", False)),
        html_url=_text(raw.get("html_url")),
        default_branch=_text(raw.get("default_branch")) or "main",
    )


def normalize_many(records: Iterable[Any]) -> list[RepositorySummary]:
    """Normalize a list of records, skipping anything that is not a mapping."""
    summaries: list[RepositorySummary] = []
    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Skipping non-object repository record: %r", type(record).__name__)
            continue
        summaries.append(normalize(record))
    return summaries


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


def _count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _topics(value: Any) -> frozenset[str]:
    if isinstance(value, Mapping):
        value = value.get("names")
    if not isinstance(value, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(t.strip() for t in value if isinstance(t, str) and t.strip())


def _timestamp(value: Any, field_name: str, repo: str) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Data quality: %s has unparseable %s %r", repo, field_name, value)
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
