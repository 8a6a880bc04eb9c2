# fileview_server/http_app.py
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import anyio
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from fileview.config import Settings
from fileview.di import Container, build_container
from fileview.errors import (
    AccessDeniedError,
    FileReadError,
    FileViewerError,
    InvalidArgumentError,
    LineTooLongError,
    NotFoundError,
    OperationCancelledError,
    PathIsDirectoryError,
    PathNotDirectoryError,
)
from fileview.logging import configure_logging, log_call
from fileview_server.tools.files import hits_payload, page_payload

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SEC = 0.25

# first match wins, so subclasses go before their bases
ERROR_STATUS = (
    (AccessDeniedError, 403),
    (NotFoundError, 404),
    (PathIsDirectoryError, 400),
    (PathNotDirectoryError, 400),
    (LineTooLongError, 422),
    (InvalidArgumentError, 400),
    (OperationCancelledError, 499),
    (FileReadError, 500),
)


class FileCreateIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    dir: str = Field("/", description="Existing directory relative to the root")
    name: str = Field(..., min_length=1, description="File name to create inside `dir`")
    content: str = Field("", description="UTF-8 text content to write")


class DirCreateIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    dir: str = Field("/", description="Existing directory relative to the root")
    name: str = Field(..., min_length=1, description="Directory name to create inside `dir`")


def status_for(exc: FileViewerError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 500


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


async def run_cancellable(request: Request, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Run a blocking core call in the worker threadpool. If the client goes away
    the shared event is set and the scanner aborts between two line reads.
    """
    cancel = threading.Event()
    result: Any = None
    error: Optional[BaseException] = None

    async def watch_disconnect():
        while not cancel.is_set():
            if await request.is_disconnected():
                logger.info("client disconnected, cancelling %s", request.url.path)
                cancel.set()
                return
            await anyio.sleep(DISCONNECT_POLL_SEC)

    async with anyio.create_task_group() as tg:
        tg.start_soon(watch_disconnect)
        try:
            result = await run_in_threadpool(func, *args, cancel=cancel, **kwargs)
        except Exception as exc:
            error = exc
        finally:
            tg.cancel_scope.cancel()

    if error is not None:
        raise error
    return result


def create_app(container: Optional[Container] = None) -> FastAPI:
    if container is None:
        settings = Settings()
        configure_logging(settings.LOG_LEVEL)
        container = build_container(settings)

    fs = container.fs_service
    root_paths = [r.path for r in container.roots]
    app = FastAPI(title="FileView HTTP Server", version="0.1.0")
    app.state.container = container

    def root_index(value: Optional[str]) -> int:
        # absent, malformed or unknown root selectors fall back to the first root
        idx = _parse_int(value, 0)
        return idx if 0 <= idx < len(container.roots) else 0

    @app.exception_handler(FileViewerError)
    async def file_viewer_error_handler(request: Request, exc: FileViewerError):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": {"code": status, "message": exc.message}}, status_code=status)

    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True, "roots": len(container.roots)}

    @app.get("/api/roots")
    def list_roots() -> List[Dict[str, Any]]:
        return container.roots.describe()

    @app.get("/api/list")
    def list_dir(path: str = Query("/"), root: Optional[str] = Query(None)) -> List[Dict[str, Any]]:
        idx = root_index(root)
        log_call(logger, "list", {"root": idx, "path": path}, root_paths)
        return [entry.to_dict() for entry in fs.list_dir(idx, path or "/")]

    @app.get("/api/view")
    async def view(
        request: Request,
        path: str = Query(""),
        page: Optional[str] = Query(None),
        root: Optional[str] = Query(None),
    ) -> Dict[str, Any]:
        if not path:
            raise InvalidArgumentError("path parameter is required")
        idx = root_index(root)
        page_number = _parse_int(page, 1)
        log_call(logger, "view", {"root": idx, "path": path, "page": page_number}, root_paths)
        result = await run_cancellable(request, fs.view, idx, path, page_number)
        return page_payload(result)

    @app.get("/api/search")
    async def search(
        request: Request,
        path: str = Query(""),
        q: str = Query(""),
        root: Optional[str] = Query(None),
    ) -> Dict[str, Any]:
        if not path:
            raise InvalidArgumentError("path parameter is required")
        idx = root_index(root)
        log_call(logger, "search", {"root": idx, "path": path, "q": q}, root_paths)
        hits = await run_cancellable(request, fs.search, idx, path, q)
        return hits_payload(path, q, hits, fs.searcher.max_results)

    @app.post("/api/files", status_code=201)
    def create_file(body: FileCreateIn) -> Dict[str, Any]:
        log_call(logger, "create_file", body.model_dump(), root_paths)
        return {"ok": True, "path": fs.write_text(body.root, body.dir, body.name, body.content)}

    @app.post("/api/dirs", status_code=201)
    def create_dir(body: DirCreateIn) -> Dict[str, Any]:
        log_call(logger, "create_dir", body.model_dump(), root_paths)
        return {"ok": True, "path": fs.make_dir(body.root, body.dir, body.name)}

    @app.delete("/api/files")
    def delete(
        path: str = Query(...),
        root: Optional[str] = Query(None),
        recursive: bool = Query(False),
    ) -> Dict[str, Any]:
        idx = root_index(root)
        log_call(logger, "delete", {"root": idx, "path": path, "recursive": recursive}, root_paths)
        return {"ok": True, "path": fs.delete(idx, path, recursive=recursive)}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "fileview_server.http_app:create_app",
        factory=True,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=False,
    )
