# fileview/services/search.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from fileview.errors import InvalidArgumentError, LineTooLongError
from fileview.services.pagination import DEFAULT_PAGE_SIZE, page_of_line
from fileview.services.sandbox import ResolvedPath, open_resolved
from fileview.services.scanner import LineScanner, ScannerOptions, decode_line

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100


@dataclass(frozen=True)
class SearchHit:
    line_number: int
    page: int
    line: str


class SearchEngine:
    """
    Case-insensitive substring search in a single forward pass.
    Scanning stops as soon as `max_results` hits are collected.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_results: int = DEFAULT_MAX_RESULTS,
        scanner_options: Optional[ScannerOptions] = None,
    ):
        if page_size < 1:
            raise InvalidArgumentError("page_size must be at least 1")
        if max_results < 1:
            raise InvalidArgumentError("max_results must be at least 1")
        self.page_size = page_size
        self.max_results = max_results
        self.scanner_options = scanner_options or ScannerOptions()

    def search(
        self,
        resolved: ResolvedPath,
        query: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[SearchHit]:
        if not query:
            raise InvalidArgumentError("Search query must not be empty", resolved.logical)
        needle = query.casefold()

        hits: List[SearchHit] = []
        with open_resolved(resolved) as stream:
            scanner = LineScanner(stream, self.scanner_options, cancel=cancel)
            try:
                for raw in scanner:
                    text = decode_line(raw)
                    if needle not in text.casefold():
                        continue
                    hits.append(
                        SearchHit(
                            line_number=scanner.line_number,
                            page=page_of_line(scanner.line_number, self.page_size),
                            line=text.strip(),
                        )
                    )
                    if len(hits) >= self.max_results:
                        break
            except LineTooLongError as exc:
                raise LineTooLongError(exc.limit, exc.line_number, resolved.logical) from None

        logger.debug("search %s matched %d line(s)", resolved.logical, len(hits))
        return hits
