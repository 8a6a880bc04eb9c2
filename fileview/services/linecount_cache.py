# fileview/services/linecount_cache.py
from __future__ import annotations

import logging
import os
import threading
from typing import BinaryIO, Optional

import redis

from fileview.services.pagination import PaginationEngine
from fileview.services.sandbox import ResolvedPath

logger = logging.getLogger(__name__)


class LineCountCache:
    """
    Redis-backed store of total line counts. Synchronous client for simplicity.
    Keys are (root name, logical path, mtime, size), so a modified file simply misses
    and host paths never reach the shared cache.
    """

    def __init__(self, url: Optional[str] = None, ttl_sec: Optional[int] = None,
                 prefix: str = "fileview:lines", client=None):
        if client is None:
            if not url:
                raise ValueError("LineCountCache needs a Redis URL or a client")
            client = redis.from_url(url, decode_responses=True)
        self._client = client
        self.ttl_sec = ttl_sec
        self.prefix = prefix

    def key_for(self, resolved: ResolvedPath, st: os.stat_result) -> str:
        return f"{self.prefix}:{resolved.root.name}:{resolved.logical}:{st.st_mtime_ns}:{st.st_size}"

    def get(self, key: str) -> Optional[int]:
        value = self._client.get(key)
        return int(value) if value is not None else None

    def put(self, key: str, total_lines: int) -> None:
        if self.ttl_sec:
            self._client.set(key, str(total_lines), ex=int(self.ttl_sec))
        else:
            self._client.set(key, str(total_lines))


class CachedPaginationEngine(PaginationEngine):
    """
    Two-pass pagination whose first pass is skipped when the line count for
    this exact (path, mtime, size) is already cached. Cache outages degrade to
    plain counting.
    """

    def __init__(self, cache: LineCountCache, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache = cache

    def count_lines(
        self,
        resolved: ResolvedPath,
        stream: BinaryIO,
        st: os.stat_result,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        key = self.cache.key_for(resolved, st)
        try:
            cached = self.cache.get(key)
        except redis.RedisError as exc:
            logger.warning("line count cache unavailable: %s", exc)
            return super().count_lines(resolved, stream, st, cancel)
        if cached is not None:
            return cached

        total = super().count_lines(resolved, stream, st, cancel)
        try:
            self.cache.put(key, total)
        except redis.RedisError as exc:
            logger.warning("line count cache write failed: %s", exc)
        return total
