# fileview/services/filesystem.py
from __future__ import annotations

import logging
import os
import shutil
import stat
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fileview.errors import (
    AccessDeniedError,
    InvalidArgumentError,
    PathIsDirectoryError,
    PathNotDirectoryError,
    translate_os_error,
)
from fileview.services.listing import DirectoryEntry, list_directory
from fileview.services.pagination import Page, PaginationEngine
from fileview.services.roots import Root, RootRegistry
from fileview.services.sandbox import ResolvedPath, resolve, resolve_child, stat_resolved
from fileview.services.search import SearchEngine, SearchHit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileView:
    path: str  # logical
    name: str
    size: int
    page: Page


class FileSystemService:
    """
    Sandbox every file operation inside one of the configured roots.
    Callers pass (root index, logical path); nothing outside a root is reachable.
    """

    def __init__(
        self,
        roots: RootRegistry,
        paginator: Optional[PaginationEngine] = None,
        searcher: Optional[SearchEngine] = None,
        allow_writes: bool = False,
    ):
        self.roots = roots
        self.paginator = paginator or PaginationEngine()
        self.searcher = searcher or SearchEngine(page_size=self.paginator.page_size)
        self.allow_writes = allow_writes

    def _resolve_in_root(self, root_index: int, logical_path: str) -> ResolvedPath:
        root: Root = self.roots.get(root_index)
        return resolve(root, logical_path)

    def _resolve_file(self, root_index: int, logical_path: str) -> Tuple[ResolvedPath, os.stat_result]:
        resolved = self._resolve_in_root(root_index, logical_path)
        st = stat_resolved(resolved)
        if stat.S_ISDIR(st.st_mode):
            raise PathIsDirectoryError(f"Path is a directory: {resolved.logical}", resolved.logical)
        return resolved, st

    # ---------- Read operations ----------

    def list_dir(self, root_index: int, logical_path: str = "/") -> List[DirectoryEntry]:
        resolved = self._resolve_in_root(root_index, logical_path)
        st = stat_resolved(resolved)
        if not stat.S_ISDIR(st.st_mode):
            raise PathNotDirectoryError(f"Not a directory: {resolved.logical}", resolved.logical)
        return list_directory(resolved)

    def view(
        self,
        root_index: int,
        logical_path: str,
        page: int = 1,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> FileView:
        if not logical_path:
            raise InvalidArgumentError("path is required")
        resolved, st = self._resolve_file(root_index, logical_path)
        result = self.paginator.paginate(resolved, page, cancel=cancel)
        return FileView(path=resolved.logical, name=resolved.name, size=st.st_size, page=result)

    def search(
        self,
        root_index: int,
        logical_path: str,
        query: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[SearchHit]:
        if not query:
            raise InvalidArgumentError("Search query must not be empty", logical_path)
        if not logical_path:
            raise InvalidArgumentError("path is required")
        resolved, _ = self._resolve_file(root_index, logical_path)
        return self.searcher.search(resolved, query, cancel=cancel)

    # ---------- Write operations ----------

    def _require_writes(self, logical_path: str):
        if not self.allow_writes:
            raise AccessDeniedError("Write operations are disabled", logical_path)

    def _resolve_dir(self, root_index: int, logical_dir: str) -> ResolvedPath:
        parent = self._resolve_in_root(root_index, logical_dir)
        st = stat_resolved(parent)
        if not stat.S_ISDIR(st.st_mode):
            raise PathNotDirectoryError(f"Not a directory: {parent.logical}", parent.logical)
        return parent

    def write_text(self, root_index: int, logical_dir: str, name: str, content: str) -> str:
        self._require_writes(logical_dir)
        parent = self._resolve_dir(root_index, logical_dir)
        target = resolve_child(parent, name)
        try:
            os.makedirs(os.path.dirname(target.path), exist_ok=True)
            with open(target.path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as exc:
            raise translate_os_error(exc, target.logical) from None
        logger.info("wrote %s (%d chars) in root %s", target.logical, len(content), target.root.name)
        return target.logical

    def make_dir(self, root_index: int, logical_dir: str, name: str) -> str:
        self._require_writes(logical_dir)
        parent = self._resolve_dir(root_index, logical_dir)
        target = resolve_child(parent, name)
        try:
            os.makedirs(target.path, exist_ok=True)
        except OSError as exc:
            raise translate_os_error(exc, target.logical) from None
        logger.info("created directory %s in root %s", target.logical, target.root.name)
        return target.logical

    def delete(self, root_index: int, logical_path: str, recursive: bool = False) -> str:
        self._require_writes(logical_path)
        target = self._resolve_in_root(root_index, logical_path)
        if target.is_root:
            raise AccessDeniedError("Access denied: cannot delete a root directory", target.logical)
        st = stat_resolved(target)
        try:
            if stat.S_ISDIR(st.st_mode):
                if recursive:
                    shutil.rmtree(target.path)
                else:
                    os.rmdir(target.path)
            else:
                os.remove(target.path)
        except OSError as exc:
            raise translate_os_error(exc, target.logical) from None
        logger.info("deleted %s in root %s", target.logical, target.root.name)
        return target.logical
