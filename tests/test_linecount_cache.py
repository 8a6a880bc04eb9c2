# tests/test_linecount_cache.py
from pathlib import Path

import redis

from fileview.services.linecount_cache import CachedPaginationEngine, LineCountCache
from fileview.services.roots import Root
from fileview.services.sandbox import resolve


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex


class DownRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def set(self, key, value, ex=None):
        raise redis.ConnectionError("connection refused")


def _resolved(tmp_path: Path, lines: int):
    (tmp_path / "big.txt").write_text("\n".join(str(i) for i in range(lines)), encoding="utf-8")
    return resolve(Root("t", str(tmp_path)), "/big.txt")


def test_second_request_uses_cached_count(tmp_path: Path):
    fake = FakeRedis()
    cache = LineCountCache(client=fake, ttl_sec=60)
    engine = CachedPaginationEngine(cache, page_size=10, size_threshold=1)
    resolved = _resolved(tmp_path, 35)

    first = engine.paginate(resolved, 2)
    assert first.total_lines == 35
    (key, value), = fake.store.items()
    assert value == "35"
    assert fake.ttls[key] == 60

    # a cached count is trusted as-is, proving the counting pass was skipped
    fake.store[key] = "50"
    assert engine.paginate(resolved, 9).total_pages == 5


def test_modified_file_misses_the_cache(tmp_path: Path):
    fake = FakeRedis()
    engine = CachedPaginationEngine(LineCountCache(client=fake), page_size=10, size_threshold=1)
    engine.paginate(_resolved(tmp_path, 35), 1)
    page = engine.paginate(_resolved(tmp_path, 47), 5)
    assert page.total_lines == 47
    assert page.lines == [str(i) for i in range(40, 47)]
    assert len(fake.store) == 2


def test_cache_outage_falls_back_to_counting(tmp_path: Path):
    engine = CachedPaginationEngine(LineCountCache(client=DownRedis()), page_size=10, size_threshold=1)
    page = engine.paginate(_resolved(tmp_path, 35), 4)
    assert page.total_lines == 35
    assert page.lines == [str(i) for i in range(30, 35)]


def test_key_uses_root_name_and_logical_path(tmp_path: Path):
    fake = FakeRedis()
    engine = CachedPaginationEngine(LineCountCache(client=fake), page_size=10, size_threshold=1)
    engine.paginate(_resolved(tmp_path, 35), 1)
    (key,) = fake.store
    assert key.startswith("fileview:lines:t:/big.txt:")
    assert str(tmp_path) not in key
