"""Loads the user's repositories from the cache or GitHub."""

from __future__ import annotations

import asyncio
import logging

from tailored_ai.domain.entities import RepositorySummary, ScoredRepository
from tailored_ai.domain.exceptions import TailoredAiError
from tailored_ai.domain.ports.repo_fetcher import RepoFetcher
from tailored_ai.services.normalizer import normalize_many
from tailored_ai.services.repository_cache import RepositoryCache
from tailored_ai.services.scorer import score_complexity_from_summary

logger = logging.getLogger(__name__)


class RepositorySyncService:
    """Serves repositories from the cache, refreshing from GitHub when stale.

    Concurrent callers share a single GitHub fetch.  When the fetch fails and
    an expired cache entry exists, that entry is returned instead.

    README presence learned from per-repository analysis is remembered and
    attached to scored repositories; repositories never analyzed stay unknown.
    """

    def __init__(self, fetcher: RepoFetcher, cache: RepositoryCache) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._lock = asyncio.Lock()
        self._readme_status: dict[str, bool] = {}

    async def load(self, force_refresh: bool = False) -> list[RepositorySummary]:
        if not force_refresh:
            cached = self._cache.get()
            if cached is not None:
                logger.debug("Loaded %d repositories from cache", len(cached))
                return normalize_many(cached)

        async with self._lock:
            # Another caller may have refreshed while we waited.
            if not force_refresh:
                cached = self._cache.get()
                if cached is not None:
                    return normalize_many(cached)
            return await self._refresh()

    async def load_scored(self, force_refresh: bool = False) -> list[ScoredRepository]:
        """Repositories paired with their listing-based complexity."""
        return [
            ScoredRepository(
                summary=summary,
                assessment=score_complexity_from_summary(summary),
                has_readme=self._readme_status.get(summary.full_name.casefold()),
            )
            for summary in await self.load(force_refresh)
        ]

    def record_readme(self, full_name: str, has_readme: bool) -> None:
        self._readme_status[full_name.casefold()] = has_readme

    async def _refresh(self) -> list[RepositorySummary]:
        try:
            records = await self._fetcher.list_user_repositories()
        except TailoredAiError as exc:
            stale = self._cache.peek()
            if stale is None:
                raise
            logger.warning("GitHub fetch failed (%s), using %d cached repositories", exc, len(stale))
            return normalize_many(stale)

        self._cache.set(records)
        logger.info("Fetched %d repositories from GitHub", len(records))
        return normalize_many(records)
