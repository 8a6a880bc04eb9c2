# fileview/di.py
from dataclasses import dataclass
from typing import Optional

from fileview.config import Settings
from fileview.services.filesystem import FileSystemService
from fileview.services.linecount_cache import CachedPaginationEngine, LineCountCache
from fileview.services.pagination import IndexedPaginationEngine, PaginationEngine
from fileview.services.roots import RootRegistry
from fileview.services.scanner import ScannerOptions
from fileview.services.search import SearchEngine


@dataclass
class Container:
    settings: Settings
    roots: RootRegistry
    line_count_cache: LineCountCache | None
    paginator: PaginationEngine
    searcher: SearchEngine
    fs_service: FileSystemService


def build_paginator(s: Settings, scanner: ScannerOptions,
                    cache: Optional[LineCountCache]) -> PaginationEngine:
    if s.PAGINATION_STRATEGY == "indexed":
        return IndexedPaginationEngine(
            page_size=s.PAGE_SIZE,
            size_threshold=s.LARGE_FILE_THRESHOLD,
            scanner_options=scanner,
            max_files=s.OFFSET_INDEX_MAX_FILES,
        )
    if cache is not None:
        return CachedPaginationEngine(
            cache,
            page_size=s.PAGE_SIZE,
            size_threshold=s.LARGE_FILE_THRESHOLD,
            scanner_options=scanner,
        )
    return PaginationEngine(
        page_size=s.PAGE_SIZE,
        size_threshold=s.LARGE_FILE_THRESHOLD,
        scanner_options=scanner,
    )


def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    roots = RootRegistry.from_spec(s.FILE_ROOTS)

    scanner = ScannerOptions(
        initial_buffer=s.SCANNER_INITIAL_BUFFER,
        max_line_length=s.SCANNER_MAX_LINE_LENGTH,
    )

    # Line count cache is optional; only built if a Redis URL is configured
    cache = (
        LineCountCache(s.LINE_COUNT_CACHE_URL, ttl_sec=s.LINE_COUNT_CACHE_TTL_SEC)
        if s.LINE_COUNT_CACHE_URL
        else None
    )
    paginator = build_paginator(s, scanner, cache)
    searcher = SearchEngine(
        page_size=s.PAGE_SIZE,
        max_results=s.SEARCH_MAX_RESULTS,
        scanner_options=scanner,
    )
    fs = FileSystemService(roots, paginator, searcher, allow_writes=s.ALLOW_WRITES)

    return Container(s, roots, cache, paginator, searcher, fs)
