# fileview/services/sandbox.py
from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from fileview.errors import AccessDeniedError, FileViewerError, translate_os_error
from fileview.services.roots import Root


@dataclass(frozen=True)
class ResolvedPath:
    """
    An absolute path proven to sit at or below its root.
    `logical` is the root-relative form used in every user-facing message.
    """
    root: Root
    logical: str
    path: str

    @property
    def is_root(self) -> bool:
        return self.path == self.root.path

    @property
    def name(self) -> str:
        return os.path.basename(self.path) if not self.is_root else self.root.name


def _escapes(root_abs: str, candidate_abs: str) -> bool:
    try:
        rel = os.path.relpath(candidate_abs, root_abs)
    except ValueError:
        # different drives on Windows
        return True
    first = rel.split(os.sep, 1)[0]
    return first == os.pardir


def _logical_for(root_abs: str, candidate_abs: str) -> str:
    rel = os.path.relpath(candidate_abs, root_abs)
    if rel == os.curdir:
        return "/"
    return "/" + rel.replace(os.sep, "/")


def resolve(root: Root, logical_path: str) -> ResolvedPath:
    """
    Resolve a root-relative path and prove it stays inside the root.
    The check is lexical: `..` segments are collapsed, symlinks are not followed.
    """
    raw = logical_path or "/"
    if "\x00" in raw:
        raise AccessDeniedError("Access denied: invalid path", raw)
    trimmed = raw[1:] if raw.startswith("/") else raw
    joined = os.path.join(root.path, *trimmed.split("/")) if trimmed else root.path

    root_abs = os.path.abspath(root.path)
    candidate_abs = os.path.abspath(joined)
    if _escapes(root_abs, candidate_abs):
        raise AccessDeniedError(f"Access denied: {raw}", raw)
    return ResolvedPath(root=root, logical=_logical_for(root_abs, candidate_abs), path=candidate_abs)


def resolve_child(parent: ResolvedPath, name: str) -> ResolvedPath:
    """
    Compose an untrusted segment (upload filename, new directory name) onto an
    already validated path. The result is validated again from scratch.
    """
    if not name or name in (".", ".."):
        raise AccessDeniedError(f"Access denied: invalid name {name!r}", parent.logical)
    return resolve(parent.root, f"{parent.logical.rstrip('/')}/{name}")


@contextmanager
def open_resolved(resolved: ResolvedPath) -> Iterator[BinaryIO]:
    """
    Open a resolved file for binary reading. OSErrors raised while the handle
    is in use are reported as typed errors naming the logical path.
    """
    try:
        with open(resolved.path, "rb") as stream:
            yield stream
    except FileViewerError:
        raise
    except OSError as exc:
        raise translate_os_error(exc, resolved.logical) from None


def stat_resolved(resolved: ResolvedPath) -> os.stat_result:
    try:
        return os.stat(resolved.path)
    except OSError as exc:
        raise translate_os_error(exc, resolved.logical) from None
