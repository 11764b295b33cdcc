"""Tests for the repository cache and its storage backends."""

from conftest import make_raw

from tailored_ai.infrastructure.storage import InMemoryStorage, JsonFileStorage
from tailored_ai.services.repository_cache import RepositoryCache


class _Clock:
    def __init__(self, value=1_000.0):
        self.value = value

    def __call__(self):
        return self.value


def _cache(clock=None, storage=None, ttl=3_600):
    return RepositoryCache(storage or InMemoryStorage(), clock=clock or _Clock(), ttl_seconds=ttl)


class TestRepositoryCache:
    def test_empty(self):
        cache = _cache()
        assert cache.get() is None
        assert cache.peek() is None

    def test_fresh_entry_is_returned(self):
        clock = _Clock()
        cache = _cache(clock)
        cache.set([make_raw("a")])

        clock.value += 3_599
        assert [r["name"] for r in cache.get()] == ["a"]

    def test_expired_entry_only_via_peek(self):
        clock = _Clock()
        cache = _cache(clock)
        cache.set([make_raw("a")])

        clock.value += 3_600
        assert cache.get() is None
        assert [r["name"] for r in cache.peek()] == ["a"]

    def test_invalidate(self):
        cache = _cache()
        cache.set([make_raw("a")])
        cache.invalidate()
        assert cache.peek() is None

    def test_corrupt_entry_is_discarded(self):
        storage = InMemoryStorage()
        storage.set("github_repositories", "{not json")
        assert _cache(storage=storage).peek() is None
        assert storage.get("github_repositories") is None

    def test_subscribers_are_notified_until_unsubscribed(self):
        cache = _cache()
        seen = []
        unsubscribe = cache.subscribe(lambda records: seen.append(len(records)))

        cache.set([make_raw("a")])
        unsubscribe()
        cache.set([make_raw("a"), make_raw("b")])

        assert seen == [1]

    def test_failing_listener_does_not_block_others(self):
        cache = _cache()
        seen = []

        def broken(records):
            raise RuntimeError("listener bug")

        cache.subscribe(broken)
        cache.subscribe(lambda records: seen.append(records))
        cache.set([])

        assert seen == [[]]


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "cache" / "repos.json"
        JsonFileStorage(path).set("k", "v")
        assert JsonFileStorage(path).get("k") == "v"

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "repos.json"
        path.write_text("garbage", encoding="utf-8")
        storage = JsonFileStorage(path)

        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"

    def test_delete(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "repos.json")
        storage.set("k", "v")
        storage.delete("k")
        assert storage.get("k") is None
