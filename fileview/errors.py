# fileview/errors.py
from __future__ import annotations


class FileViewerError(Exception):
    """
    Base class for every failure the core reports.
    Messages only ever mention the logical (root-relative) path.
    """

    def __init__(self, message: str, logical_path: str | None = None):
        super().__init__(message)
        self.message = message
        self.logical_path = logical_path

    def __str__(self) -> str:
        return self.message


class AccessDeniedError(FileViewerError, PermissionError):
    pass


class NotFoundError(FileViewerError, FileNotFoundError):
    pass


class PathIsDirectoryError(FileViewerError, IsADirectoryError):
    pass


class PathNotDirectoryError(FileViewerError, NotADirectoryError):
    pass


class FileReadError(FileViewerError, OSError):
    pass


class LineTooLongError(FileViewerError, ValueError):
    def __init__(self, limit: int, line_number: int | None = None, logical_path: str | None = None):
        where = f" at line {line_number}" if line_number else ""
        if logical_path:
            where += f" of {logical_path}"
        super().__init__(f"Line exceeds maximum length of {limit} bytes{where}", logical_path)
        self.limit = limit
        self.line_number = line_number


class InvalidArgumentError(FileViewerError, ValueError):
    pass


class OperationCancelledError(FileViewerError):
    pass


class RootConfigError(FileViewerError, ValueError):
    pass


def translate_os_error(exc: OSError, logical_path: str) -> FileViewerError:
    """
    Map an OSError raised on a resolved path to the typed error for the caller.
    strerror is used instead of str(exc) since the latter embeds the absolute path.
    """
    if isinstance(exc, FileViewerError):
        return exc
    reason = exc.strerror or exc.__class__.__name__
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(f"Path not found: {logical_path}", logical_path)
    if isinstance(exc, IsADirectoryError):
        return PathIsDirectoryError(f"Path is a directory: {logical_path}", logical_path)
    if isinstance(exc, NotADirectoryError):
        return PathNotDirectoryError(f"Not a directory: {logical_path}", logical_path)
    if isinstance(exc, PermissionError):
        return FileReadError(f"Permission denied: {logical_path}", logical_path)
    return FileReadError(f"I/O error on {logical_path}: {reason}", logical_path)
