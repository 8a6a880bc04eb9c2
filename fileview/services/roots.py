# fileview/services/roots.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from fileview.errors import InvalidArgumentError, RootConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Root:
    name: str
    path: str  # absolute, lexically normalized


def parse_roots(spec: str) -> List[Tuple[str, str]]:
    """
    Parse "name=path, other=/srv/logs, /plain/path" into (name, path) pairs.
    Entries without a name take the basename of their path.
    """
    pairs: List[Tuple[str, str]] = []
    for raw in spec.split(","):
        item = raw.strip()
        if not item:
            continue
        if "=" in item:
            name, path = item.split("=", 1)
            name, path = name.strip(), path.strip()
        else:
            path = item
            name = os.path.basename(os.path.normpath(item)) or item
        if not path:
            raise RootConfigError(f"Root '{name}' has an empty path")
        pairs.append((name or path, path))
    return pairs


class RootRegistry:
    """
    Ordered, read-only list of sandbox roots. Built once at startup;
    requests select a root by its index.
    """

    def __init__(self, roots: Iterable[Tuple[str, str]]):
        built: List[Root] = []
        for name, path in roots:
            abs_path = os.path.abspath(os.path.expanduser(path))
            if not os.path.isdir(abs_path):
                raise RootConfigError(f"Root '{name}' is not an existing directory: {path}")
            built.append(Root(name=name, path=abs_path))
        if not built:
            raise RootConfigError("At least one root directory must be configured")
        self._roots: Tuple[Root, ...] = tuple(built)
        logger.info("root registry ready: %s", ", ".join(r.name for r in self._roots))

    @classmethod
    def from_spec(cls, spec: str) -> "RootRegistry":
        return cls(parse_roots(spec))

    def __len__(self) -> int:
        return len(self._roots)

    def __iter__(self) -> Iterator[Root]:
        return iter(self._roots)

    def get(self, index: int) -> Root:
        if not isinstance(index, int) or isinstance(index, bool):
            raise InvalidArgumentError(f"Root index must be an integer, got {index!r}")
        if index < 0 or index >= len(self._roots):
            raise InvalidArgumentError(f"Unknown root index: {index}")
        return self._roots[index]

    def describe(self) -> List[dict]:
        # absolute paths stay server-side
        return [{"index": i, "name": r.name} for i, r in enumerate(self._roots)]
