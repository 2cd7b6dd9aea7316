"""Unit tests for urlbits.url_io.line_source."""

import bz2
import gzip
import io
from unittest import mock

import pytest
import requests

from urlbits.exceptions import LineSourceError
from urlbits.url_io.line_source import open_input, read_lines, strip_terminator


class _RawResponse(io.BytesIO):
    """Stand-in for ``requests`` raw response bodies."""


class _BrokenStream:
    def __iter__(self):
        yield "http://example.com/\n"
        raise OSError("device not ready")


def test_strip_terminator():
    assert strip_terminator("a\n") == "a"
    assert strip_terminator("a\r\n") == "a"
    assert strip_terminator("a") == "a"
    assert strip_terminator("a\r\r\n") == "a\r"


def test_read_lines_strips_terminators():
    stream = io.StringIO("http://a.com/\nhttp://b.com/\r\n\nlast")
    assert list(read_lines(stream)) == ["http://a.com/", "http://b.com/", "", "last"]


def test_read_lines_is_lazy():
    lines = read_lines(_BrokenStream())
    assert next(lines) == "http://example.com/"


def test_read_error_is_fatal():
    with pytest.raises(LineSourceError) as exc_info:
        list(read_lines(_BrokenStream()))
    assert "device not ready" in str(exc_info.value)


def test_open_plain_file(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text("http://a.com/\nhttp://b.com/\n", encoding="utf-8")
    stream = open_input(str(path))
    try:
        assert list(read_lines(stream)) == ["http://a.com/", "http://b.com/"]
    finally:
        stream.close()


def test_open_gzip_file(tmp_path):
    path = tmp_path / "urls.txt.gz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write("http://a.com/x\n")
    stream = open_input(str(path))
    try:
        assert list(read_lines(stream)) == ["http://a.com/x"]
    finally:
        stream.close()


def test_open_bz2_file(tmp_path):
    path = tmp_path / "urls.txt.bz2"
    with bz2.open(path, "wt", encoding="utf-8") as f:
        f.write("http://a.com/y\n")
    stream = open_input(str(path))
    try:
        assert list(read_lines(stream)) == ["http://a.com/y"]
    finally:
        stream.close()


def test_undecodable_bytes_are_kept():
    stream = open_input(io.BytesIO(b"http://a.com/\xe9\nhttp://a.com/\xe8\n"))
    lines = list(read_lines(stream))
    assert lines == ["http://a.com/\udce9", "http://a.com/\udce8"]
    assert lines[0].encode("utf-8", "surrogateescape") == b"http://a.com/\xe9"


def test_only_newline_ends_a_line():
    stream = open_input(io.BytesIO(b"http://a.com/\rb\nhttp://c.com/\r\n"))
    assert list(read_lines(stream)) == ["http://a.com/\rb", "http://c.com/"]


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(LineSourceError):
        open_input(str(tmp_path / "missing.txt"))


def test_text_stream_returned_as_is():
    stream = io.StringIO("x\n")
    assert open_input(stream) is stream


def test_stdin_replacement(monkeypatch):
    fake_stdin = io.StringIO("http://a.com/\n")
    monkeypatch.setattr("sys.stdin", fake_stdin)
    assert list(read_lines(open_input("-"))) == ["http://a.com/"]


def test_open_url():
    response = mock.Mock()
    response.raw = _RawResponse(b"http://a.com/\nhttp://b.com/\n")
    with mock.patch("urlbits.url_io.line_source.requests.get", return_value=response) as get:
        stream = open_input("https://lists.example.com/urls.txt")
        assert list(read_lines(stream)) == ["http://a.com/", "http://b.com/"]
    get.assert_called_once_with("https://lists.example.com/urls.txt", stream=True)
    response.raise_for_status.assert_called_once()


def test_open_gzipped_url():
    response = mock.Mock()
    response.raw = _RawResponse(gzip.compress(b"http://a.com/\n"))
    with mock.patch("urlbits.url_io.line_source.requests.get", return_value=response):
        stream = open_input("https://lists.example.com/urls.txt.gz")
        assert list(read_lines(stream)) == ["http://a.com/"]


def test_url_fetch_failure_is_fatal():
    with mock.patch(
        "urlbits.url_io.line_source.requests.get",
        side_effect=requests.ConnectionError("connection refused"),
    ):
        with pytest.raises(LineSourceError):
            open_input("https://lists.example.com/urls.txt")
