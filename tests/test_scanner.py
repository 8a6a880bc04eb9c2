# tests/test_scanner.py
import io
import threading

import pytest

from fileview.errors import LineTooLongError, OperationCancelledError
from fileview.services.scanner import LineScanner, ScannerOptions, split_lines

SMALL = ScannerOptions(initial_buffer=4, max_line_length=64)


def scan(data: bytes, options: ScannerOptions = SMALL):
    return list(LineScanner(io.BytesIO(data), options))


@pytest.mark.parametrize(
    "data",
    [b"", b"\n", b"a\nb\nc", b"a\nb\nc\n", b"\n\n\n", b"x" * 64, b"abc\r\ndef\r\n", ("x" * 30 + "\n").encode() * 9],
)
def test_scanner_agrees_with_split(data: bytes):
    assert scan(data) == data.split(b"\n")
    assert len(split_lines(data)) == len(scan(data))


def test_empty_stream_is_one_empty_line():
    assert scan(b"") == [b""]
    assert split_lines(b"") == [""]


def test_line_longer_than_limit_is_an_error():
    data = b"short\n" + b"y" * 65 + b"\nafter"
    scanner = LineScanner(io.BytesIO(data), SMALL)
    assert next(scanner) == b"short"
    with pytest.raises(LineTooLongError) as exc:
        next(scanner)
    assert exc.value.line_number == 2
    assert exc.value.limit == 64


def test_long_line_arriving_in_one_read_is_also_rejected():
    data = b"z" * 100 + b"\n"
    with pytest.raises(LineTooLongError):
        scan(data, ScannerOptions(initial_buffer=4096, max_line_length=64))


def test_buffer_grows_for_lines_up_to_limit():
    line = b"q" * 60
    assert scan(line + b"\n" + line) == [line, line]


def test_offsets_point_at_line_starts():
    data = b"ab\ncde\n\nf"
    scanner = LineScanner(io.BytesIO(data), SMALL)
    starts = []
    while True:
        start = scanner.offset
        try:
            line = next(scanner)
        except StopIteration:
            break
        starts.append(start)
        assert data[start:start + len(line)] == line
    assert starts == [0, 3, 7, 8]
    assert scanner.offset == len(data)
    assert scanner.line_number == 4


def test_cancellation_is_checked_between_lines():
    cancel = threading.Event()
    scanner = LineScanner(io.BytesIO(b"1\n2\n3\n"), SMALL, cancel=cancel)
    assert next(scanner) == b"1"
    cancel.set()
    with pytest.raises(OperationCancelledError):
        next(scanner)


def test_decoding_replaces_invalid_utf8():
    data = "héllo\n".encode("utf-8") + b"\xff\xfe\n"
    scanner = LineScanner(io.BytesIO(data), SMALL)
    assert list(scanner.texts()) == ["héllo", "\ufffd\ufffd", ""]
