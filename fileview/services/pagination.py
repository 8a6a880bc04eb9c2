# fileview/services/pagination.py
from __future__ import annotations

import logging
import os
import stat
import threading
from collections import OrderedDict
from dataclasses import dataclass
from itertools import islice
from typing import BinaryIO, List, Optional, Tuple

from fileview.errors import InvalidArgumentError, LineTooLongError
from fileview.services.sandbox import ResolvedPath, open_resolved
from fileview.services.scanner import LineScanner, ScannerOptions, decode_line, split_lines

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_SIZE_THRESHOLD = 10 * 1024 * 1024  # 10 MiB


@dataclass(frozen=True)
class Page:
    lines: List[str]
    page_number: int
    total_pages: int
    total_lines: int
    is_partial: bool


def total_pages_for(total_lines: int, page_size: int) -> int:
    return max(1, -(-total_lines // page_size))


def clamp_page(page: int, total_pages: int) -> int:
    # Over-paging past either end is normal navigation, not an error.
    return min(max(page, 1), total_pages)


def page_of_line(line_number: int, page_size: int) -> int:
    return (line_number - 1) // page_size + 1


class PaginationEngine:
    """
    Bounded-memory page extraction.

    Files below `size_threshold` are read whole and returned as a single page.
    Larger files take two streaming passes over the same handle: one to count
    lines, one to skip to the requested page and collect it. Memory stays
    proportional to one page regardless of the file size.

    No state survives a call; a file that shrinks between the passes may
    yield a short page.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        size_threshold: int = DEFAULT_SIZE_THRESHOLD,
        scanner_options: Optional[ScannerOptions] = None,
    ):
        if page_size < 1:
            raise InvalidArgumentError("page_size must be at least 1")
        if size_threshold < 0:
            raise InvalidArgumentError("size_threshold must not be negative")
        self.page_size = page_size
        self.size_threshold = size_threshold
        self.scanner_options = scanner_options or ScannerOptions()

    # ---------- Public API ----------

    def paginate(
        self,
        resolved: ResolvedPath,
        page: int = 1,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> Page:
        if not isinstance(page, int) or isinstance(page, bool):
            raise InvalidArgumentError(f"Page must be an integer, got {page!r}", resolved.logical)

        with open_resolved(resolved) as stream:
            st = os.fstat(stream.fileno())
            if not stat.S_ISREG(st.st_mode):
                # pipes and devices report no usable size and cannot be re-read
                raise InvalidArgumentError(f"Not a regular file: {resolved.logical}", resolved.logical)
            if st.st_size < self.size_threshold:
                small = self._paginate_small(stream)
                if small is not None:
                    return small
            try:
                result = self._paginate_large(resolved, stream, st, page, cancel)
            except LineTooLongError as exc:
                raise LineTooLongError(exc.limit, exc.line_number, resolved.logical) from None

        logger.debug(
            "paginated %s page=%d/%d lines=%d",
            resolved.logical, result.page_number, result.total_pages, len(result.lines),
        )
        return result

    def count_lines(
        self,
        resolved: ResolvedPath,
        stream: BinaryIO,
        st: os.stat_result,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        stream.seek(0)
        scanner = LineScanner(stream, self.scanner_options, cancel=cancel)
        for _ in scanner:
            pass
        return scanner.line_number

    # ---------- Internals ----------

    def _paginate_small(self, stream: BinaryIO) -> Optional[Page]:
        content = stream.read(self.size_threshold + 1)
        if len(content) >= self.size_threshold:
            # grew past the threshold since fstat
            return None
        lines = split_lines(content)
        return Page(lines=lines, page_number=1, total_pages=1, total_lines=len(lines), is_partial=False)

    def _paginate_large(
        self,
        resolved: ResolvedPath,
        stream: BinaryIO,
        st: os.stat_result,
        page: int,
        cancel: Optional[threading.Event],
    ) -> Page:
        total_lines = self.count_lines(resolved, stream, st, cancel)
        total_pages = total_pages_for(total_lines, self.page_size)
        page = clamp_page(page, total_pages)

        stream.seek(0)
        lines = self._collect(stream, (page - 1) * self.page_size, cancel)
        return Page(
            lines=lines,
            page_number=page,
            total_pages=total_pages,
            total_lines=total_lines,
            is_partial=True,
        )

    def _collect(
        self,
        stream: BinaryIO,
        skip: int,
        cancel: Optional[threading.Event],
        start_offset: int = 0,
    ) -> List[str]:
        scanner = LineScanner(stream, self.scanner_options, cancel=cancel, start_offset=start_offset)
        return [decode_line(raw) for raw in islice(scanner, skip, skip + self.page_size)]


@dataclass(frozen=True)
class PageIndex:
    total_lines: int
    offsets: Tuple[int, ...]  # byte offset of the first line of each page


class IndexedPaginationEngine(PaginationEngine):
    """
    Same contract as PaginationEngine, but the first large-file request builds
    an index of page start offsets. Later requests for the same
    (path, mtime, size) seek straight to the page.

    The index costs one offset per page. At most `max_files` indexes are kept,
    least recently used first out.
    """

    def __init__(self, *args, max_files: int = 32, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_files = max_files
        self._indexes: "OrderedDict[Tuple[str, int, int], PageIndex]" = OrderedDict()
        self._lock = threading.Lock()

    def build_index(self, stream: BinaryIO, cancel: Optional[threading.Event] = None) -> PageIndex:
        stream.seek(0)
        scanner = LineScanner(stream, self.scanner_options, cancel=cancel)
        offsets: List[int] = []
        while True:
            start = scanner.offset
            try:
                next(scanner)
            except StopIteration:
                break
            if (scanner.line_number - 1) % self.page_size == 0:
                offsets.append(start)
        return PageIndex(total_lines=scanner.line_number, offsets=tuple(offsets))

    def count_lines(self, resolved, stream, st, cancel=None) -> int:
        return self._page_index(resolved, stream, st, cancel).total_lines

    def _page_index(
        self,
        resolved: ResolvedPath,
        stream: BinaryIO,
        st: os.stat_result,
        cancel: Optional[threading.Event],
    ) -> PageIndex:
        key = (resolved.path, st.st_mtime_ns, st.st_size)
        with self._lock:
            index = self._indexes.get(key)
            if index is not None:
                self._indexes.move_to_end(key)
                return index

        index = self.build_index(stream, cancel)
        logger.info("built page index for %s (%d pages)", resolved.logical, len(index.offsets))

        with self._lock:
            self._indexes[key] = index
            self._indexes.move_to_end(key)
            while len(self._indexes) > self.max_files:
                self._indexes.popitem(last=False)
        return index

    def _paginate_large(self, resolved, stream, st, page, cancel) -> Page:
        index = self._page_index(resolved, stream, st, cancel)
        total_pages = len(index.offsets)
        page = clamp_page(page, total_pages)

        offset = index.offsets[page - 1]
        stream.seek(offset)
        lines = self._collect(stream, 0, cancel, start_offset=offset)
        return Page(
            lines=lines,
            page_number=page,
            total_pages=total_pages,
            total_lines=index.total_lines,
            is_partial=True,
        )
