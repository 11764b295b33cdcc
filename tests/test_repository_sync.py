"""Tests for loading repositories through the cache."""

import asyncio

import pytest
from conftest import FakeFetcher, make_raw

from tailored_ai.domain.entities import AssessmentSource
from tailored_ai.domain.exceptions import GitHubAuthError, GitHubUnavailableError
from tailored_ai.infrastructure.storage import InMemoryStorage
from tailored_ai.services.repository_cache import RepositoryCache
from tailored_ai.services.repository_sync import RepositorySyncService


class _Clock:
    def __init__(self):
        self.value = 0.0

    def __call__(self):
        return self.value


def _service(fetcher, clock=None):
    cache = RepositoryCache(InMemoryStorage(), clock=clock or _Clock(), ttl_seconds=60)
    return RepositorySyncService(fetcher, cache), cache


class TestLoad:
    async def test_fetches_then_serves_from_cache(self):
        fetcher = FakeFetcher([make_raw("a"), make_raw("b")])
        service, _ = _service(fetcher)

        first = await service.load()
        second = await service.load()

        assert [s.name for s in first] == ["a", "b"]
        assert second == first
        assert fetcher.list_calls == 1

    async def test_force_refresh_bypasses_cache(self):
        fetcher = FakeFetcher([make_raw("a")])
        service, _ = _service(fetcher)

        await service.load()
        await service.load(force_refresh=True)

        assert fetcher.list_calls == 2

    async def test_expired_cache_is_refreshed(self):
        clock = _Clock()
        fetcher = FakeFetcher([make_raw("a")])
        service, _ = _service(fetcher, clock)

        await service.load()
        clock.value = 61
        await service.load()

        assert fetcher.list_calls == 2

    async def test_concurrent_loads_share_one_fetch(self):
        fetcher = FakeFetcher([make_raw("a")])
        service, _ = _service(fetcher)

        results = await asyncio.gather(*(service.load() for _ in range(5)))

        assert fetcher.list_calls == 1
        assert all(len(r) == 1 for r in results)

    async def test_failure_falls_back_to_stale_cache(self):
        clock = _Clock()
        fetcher = FakeFetcher([make_raw("a")])
        service, _ = _service(fetcher, clock)
        await service.load()

        clock.value = 1_000
        fetcher.error = GitHubUnavailableError("down")
        summaries = await service.load()

        assert [s.name for s in summaries] == ["a"]

    async def test_failure_without_cache_propagates(self):
        service, _ = _service(FakeFetcher(error=GitHubAuthError("expired")))
        with pytest.raises(GitHubAuthError):
            await service.load()

    async def test_subscribers_see_fresh_records(self):
        service, cache = _service(FakeFetcher([make_raw("a")]))
        seen = []
        cache.subscribe(lambda records: seen.append([r["name"] for r in records]))

        await service.load()

        assert seen == [["a"]]


class TestLoadScored:
    async def test_pairs_summaries_with_listing_complexity(self):
        service, _ = _service(FakeFetcher([make_raw("a", size=20_000)]))
        scored = await service.load_scored()

        assert scored[0].summary.name == "a"
        assert scored[0].assessment.source is AssessmentSource.SUMMARY
        assert scored[0].assessment.score == 30

    async def test_readme_status_is_unknown_until_recorded(self):
        service, _ = _service(FakeFetcher([make_raw("a"), make_raw("b")]))
        service.record_readme("OCTOCAT/a", False)

        scored = {item.summary.name: item for item in await service.load_scored()}

        assert scored["a"].has_readme is False
        assert scored["a"].lacks_documentation
        assert scored["b"].has_readme is None
        assert not scored["b"].lacks_documentation
