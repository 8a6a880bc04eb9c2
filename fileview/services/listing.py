# fileview/services/listing.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fileview.errors import translate_os_error
from fileview.services.sandbox import ResolvedPath, resolve_child

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    path: str  # root-relative, "/"-prefixed
    is_dir: bool
    size: int
    mod_time: datetime
    extension: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "isDir": self.is_dir,
            "size": self.size,
            "modTime": self.mod_time.isoformat(),
        }
        if self.extension:
            item["extension"] = self.extension
        return item


def list_directory(resolved: ResolvedPath) -> List[DirectoryEntry]:
    """
    Reflect one directory level. Entries that cannot be stat'ed (broken
    symlinks, races with deletion) are skipped. Sorted by name.
    """
    try:
        with os.scandir(resolved.path) as it:
            raw_entries = list(it)
    except OSError as exc:
        raise translate_os_error(exc, resolved.logical) from None

    items: List[DirectoryEntry] = []
    for entry in sorted(raw_entries, key=lambda e: e.name):
        try:
            st = entry.stat()
            is_dir = entry.is_dir()
        except OSError:
            logger.debug("skipping unreadable entry %r in %s", entry.name, resolved.logical)
            continue

        child = resolve_child(resolved, entry.name)
        extension = None
        if not is_dir:
            extension = os.path.splitext(entry.name)[1].lstrip(".") or None

        items.append(
            DirectoryEntry(
                name=entry.name,
                path=child.logical,
                is_dir=is_dir,
                size=st.st_size,
                mod_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                extension=extension,
            )
        )
    return items
