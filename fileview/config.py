# fileview/config.py
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Sandbox roots: "name=path" entries separated by commas; index 0 is the default
    FILE_ROOTS: str = "files=./files"

    # Pagination
    PAGE_SIZE: int = 1000
    LARGE_FILE_THRESHOLD: int = 10 * 1024 * 1024  # bytes; at or above -> streamed pages
    PAGINATION_STRATEGY: Literal["two_pass", "indexed"] = "two_pass"
    OFFSET_INDEX_MAX_FILES: int = 32  # only used by the "indexed" strategy

    # Line scanner
    SCANNER_INITIAL_BUFFER: int = 64 * 1024
    SCANNER_MAX_LINE_LENGTH: int = 1024 * 1024

    # Search
    SEARCH_MAX_RESULTS: int = 100

    # Optional Redis cache of line counts for the two-pass strategy
    LINE_COUNT_CACHE_URL: str | None = None
    LINE_COUNT_CACHE_TTL_SEC: int = 3600

    # Upload / create / delete endpoints
    ALLOW_WRITES: bool = False

    # HTTP transport
    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = 8080

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
