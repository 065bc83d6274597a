"""Tests for the streaming line source."""

from __future__ import annotations

import pytest

from pulsar_publisher.errors import FileOpenError, LineDecodeError
from pulsar_publisher.source import LineSource


def test_lines_are_streamed_without_terminators(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"first\nsecond\r\n\nlast")

    with LineSource(path) as source:
        lines = [line.decode() for line in source]

    assert lines == ["first", "second", "", "last"]


def test_invalid_utf8_line_fails_to_decode(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"ok\n\xff\xfe bad\nfine\n")

    with LineSource(path) as source:
        lines = list(source)

    assert [line.number for line in lines] == [1, 2, 3]
    assert lines[0].decode() == "ok"
    with pytest.raises(LineDecodeError) as excinfo:
        lines[1].decode()
    assert excinfo.value.line_number == 2
    assert lines[2].decode() == "fine"


def test_missing_file_raises_file_open_error(tmp_path) -> None:
    with pytest.raises(FileOpenError):
        LineSource(tmp_path / "missing.txt").open()


def test_source_cannot_be_iterated_twice(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"a\nb\n")

    with LineSource(path) as source:
        list(source)
        with pytest.raises(RuntimeError):
            iter(source)


def test_source_closes_file(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"a\n")

    source = LineSource(path)
    with source:
        pass

    assert source._file is None
