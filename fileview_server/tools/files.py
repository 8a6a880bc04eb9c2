# fileview_server/tools/files.py
import logging
from typing import Any, Dict, List

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from fileview.logging import log_call
from fileview.services.filesystem import FileSystemService

logger = logging.getLogger(__name__)


class FsListIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    path: str = Field("/", description="Directory path relative to the root")


class FsViewIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    path: str = Field(..., min_length=1, description="File path relative to the root")
    page: int = Field(1, description="1-based page number; out-of-range values are clamped")


class FsSearchIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    path: str = Field(..., min_length=1, description="File path relative to the root")
    query: str = Field(..., min_length=1, description="Case-insensitive substring to find")


class FsWriteIn(BaseModel):
    root: int = Field(0, ge=0, description="Index of the configured root")
    dir: str = Field("/", description="Existing directory relative to the root")
    name: str = Field(..., min_length=1, description="File name to create inside `dir`")
    content: str = Field(..., description="UTF-8 text content to write")


def page_payload(view) -> Dict[str, Any]:
    page = view.page
    return {
        "path": view.path,
        "name": view.name,
        "size": view.size,
        "isPartial": page.is_partial,
        "totalLines": page.total_lines,
        "lines": page.lines,
        "page": page.page_number,
        "totalPages": page.total_pages,
    }


def hits_payload(path: str, query: str, hits, max_results: int) -> Dict[str, Any]:
    return {
        "path": path,
        "query": query,
        "results": [{"lineNumber": h.line_number, "page": h.page, "line": h.line} for h in hits],
        "count": len(hits),
        "truncated": len(hits) >= max_results,
    }


def register_file_tools(mcp: FastMCP, fs_service: FileSystemService):
    """
    Very thin tool adapters:
    - validate/deserialize inputs (Pydantic)
    - call the service (sandboxing + paging)
    - shape the result
    """
    roots = [r.path for r in fs_service.roots]

    @mcp.tool(name="fs_roots", description="List the configured root directories")
    def fs_roots() -> List[Dict[str, Any]]:
        return fs_service.roots.describe()

    @mcp.tool(name="fs_list", description="List a directory under a sandbox root")
    def fs_list(input: FsListIn) -> List[Dict[str, Any]]:
        log_call(logger, "fs_list", input.model_dump(), roots)
        return [e.to_dict() for e in fs_service.list_dir(input.root, input.path)]

    @mcp.tool(name="fs_view", description="Read one page of lines from a text file under a sandbox root")
    def fs_view(input: FsViewIn) -> Dict[str, Any]:
        log_call(logger, "fs_view", input.model_dump(), roots)
        return page_payload(fs_service.view(input.root, input.path, input.page))

    @mcp.tool(name="fs_search", description="Find lines containing a substring (case-insensitive, max 100)")
    def fs_search(input: FsSearchIn) -> Dict[str, Any]:
        log_call(logger, "fs_search", input.model_dump(), roots)
        hits = fs_service.search(input.root, input.path, input.query)
        return hits_payload(input.path, input.query, hits, fs_service.searcher.max_results)

    # Write tool is only exposed when writes are enabled
    if fs_service.allow_writes:
        @mcp.tool(name="fs_write", description="Write a text file under a sandbox root")
        def fs_write(input: FsWriteIn) -> str:
            log_call(logger, "fs_write", input.model_dump(), roots)
            return fs_service.write_text(input.root, input.dir, input.name, input.content)
