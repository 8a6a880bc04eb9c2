# fileview/logging.py
import logging
import os
from typing import Any, Dict, Iterable, Optional

MAX_LOGGED_VALUE = 200  # longer strings (file bodies) are logged by size only


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_str(s: str, roots: Iterable[str] = ()) -> str:
    if len(s) > MAX_LOGGED_VALUE:
        return f"<{len(s)} chars>"
    for root in roots:
        s = s.replace(root, "<root>")
    return s


def redact_args(args: Dict[str, Any], roots: Iterable[str] = ()) -> Dict[str, Any]:
    roots = tuple(roots)
    safe = dict(args)
    for k, v in list(safe.items()):
        if isinstance(v, str):
            safe[k] = redact_str(v, roots)
    return safe


def log_call(logger: logging.Logger, name: str, args: Dict[str, Any], roots: Iterable[str] = ()):
    logger.info("call %s %s", name, redact_args(args, roots))
