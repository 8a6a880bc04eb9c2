# fileview_server/main.py
from fastmcp import FastMCP

from fileview.config import Settings
from fileview.di import build_container
from fileview.logging import configure_logging
from fileview_server.tools.files import register_file_tools


def create_app() -> FastMCP:
    """
    Build DI container, create FastMCP host, and register tools.
    Keep the server (protocol) separate from tool/service logic.
    """
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    container = build_container(settings)

    mcp = FastMCP("FileView", version="0.1.0")

    # Register tools (thin adapters)
    register_file_tools(mcp, container.fs_service)

    return mcp


if __name__ == "__main__":
    app = create_app()
    # stdio transport: client (agent/IDE) launches this process and speaks JSON-RPC on stdin/stdout
    app.run(transport="stdio")
