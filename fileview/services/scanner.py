# fileview/services/scanner.py
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Iterator, List, Optional

from fileview.errors import InvalidArgumentError, LineTooLongError, OperationCancelledError

SEPARATOR = b"\n"
DEFAULT_INITIAL_BUFFER = 64 * 1024
DEFAULT_MAX_LINE_LENGTH = 1024 * 1024


@dataclass(frozen=True)
class ScannerOptions:
    initial_buffer: int = DEFAULT_INITIAL_BUFFER
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH

    def __post_init__(self):
        if self.initial_buffer < 1:
            raise InvalidArgumentError("initial_buffer must be positive")
        if self.max_line_length < 1:
            raise InvalidArgumentError("max_line_length must be positive")


def decode_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def split_lines(content: bytes) -> List[str]:
    """
    Whole-content split used by the small-file path. Must agree with LineScanner:
    a trailing separator leaves an empty last line and b"" is one empty line.
    """
    return [decode_line(part) for part in content.split(SEPARATOR)]


class LineScanner:
    """
    Forward-only line iterator over a binary stream.

    Yields each separator-delimited segment as bytes with the separator stripped,
    including the (possibly empty) segment after the last separator, so the
    number of lines always equals len(content.split(b"\\n")).

    The read size starts at `initial_buffer` and doubles while a single line does
    not fit, up to `max_line_length`. A longer line raises LineTooLongError.
    To start over, seek the stream back to 0 and build a new scanner.
    """

    def __init__(
        self,
        stream: BinaryIO,
        options: Optional[ScannerOptions] = None,
        *,
        cancel: Optional[threading.Event] = None,
        start_offset: int = 0,
    ):
        self._stream = stream
        self._options = options or ScannerOptions()
        self._cancel = cancel
        self.line_number = 0
        # byte offset (relative to the stream) of the next line to be yielded
        self.offset = start_offset
        self._lines = self._scan()

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        return next(self._lines)

    def texts(self) -> Iterator[str]:
        for raw in self:
            yield decode_line(raw)

    def _check_cancel(self):
        if self._cancel is not None and self._cancel.is_set():
            raise OperationCancelledError("Operation cancelled")

    def _too_long(self):
        return LineTooLongError(self._options.max_line_length, line_number=self.line_number + 1)

    def _scan(self) -> Iterator[bytes]:
        limit = self._options.max_line_length
        read_size = min(self._options.initial_buffer, limit)
        buf = bytearray()
        start = 0
        eof = False

        while True:
            nl = buf.find(SEPARATOR, start)
            if nl >= 0:
                if nl - start > limit:
                    raise self._too_long()
                line = bytes(buf[start:nl])
                start = nl + 1
                self._check_cancel()
                self.line_number += 1
                self.offset += len(line) + 1
                yield line
                continue

            pending = len(buf) - start
            if pending > limit:
                raise self._too_long()

            if eof:
                # last segment, empty when the stream ends with a separator
                line = bytes(buf[start:])
                self._check_cancel()
                self.line_number += 1
                self.offset += len(line)
                yield line
                return

            if start:
                del buf[:start]
                start = 0
            if pending >= read_size:
                read_size = min(read_size * 2, limit)

            chunk = self._stream.read(read_size)
            if not chunk:
                eof = True
            else:
                buf += chunk
