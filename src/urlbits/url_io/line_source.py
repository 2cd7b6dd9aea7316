# urlbits/url_io/line_source.py
"""Utilities for turning files, URLs and stdin into a stream of input lines."""

import bz2
import gzip
import io
import logging
import sys
from io import TextIOWrapper
from typing import Any, BinaryIO, Iterable, Iterator, Optional, TextIO, Union

import requests
from tqdm import tqdm

from urlbits.exceptions import LineSourceError

logger = logging.getLogger(__name__)

STDIN_NAMES = (None, "-")


def _is_url(source: Any) -> bool:
    return isinstance(source, str) and (source.startswith("http://") or source.startswith("https://"))


def wrap_compression(file_obj: BinaryIO, file_name: str) -> BinaryIO:
    """
    Wrap a binary stream in a decompressor chosen by file extension.

    Args:
        file_obj: Binary stream to read from
        file_name: Name used to detect compression (.gz, .bz2)

    Returns:
        Binary stream yielding decompressed bytes
    """
    lower = file_name.lower()
    if lower.endswith(".bz2"):
        logger.debug("File extension indicates bz2 compression, wrapping file object accordingly.")
        return bz2.BZ2File(file_obj, "rb")
    if lower.endswith(".gz"):
        logger.debug("File extension indicates gzip compression, wrapping file object accordingly.")
        return gzip.GzipFile(fileobj=file_obj, mode="rb")
    return file_obj


def _fetch(url: str) -> BinaryIO:
    logger.debug("Input is a URL: %s, fetching content.", url)
    try:
        response = requests.get(url, stream=True)
        response.raise_for_status()
    except requests.RequestException as e:
        raise LineSourceError(f"unable to fetch {url}: {e}") from e
    raw = response.raw
    raw.decode_content = True
    return raw


def open_input(source: Union[None, str, TextIO, BinaryIO] = None, encoding: str = "utf-8") -> TextIO:
    """
    Resolve an input source to a text stream.

    Args:
        source: None or "-" for stdin, a local path, an http(s) URL, or an
            already open text or binary stream
        encoding: Text encoding; undecodable bytes are kept as lone surrogates

    Returns:
        Text stream for reading

    Raises:
        LineSourceError: if the source cannot be opened
    """
    if source in STDIN_NAMES:
        try:
            return io.open(
                sys.stdin.fileno(), encoding=encoding,
                errors="surrogateescape", newline="\n", closefd=False
            )
        except (AttributeError, OSError):
            # Replaced stdin (e.g. an in-memory stream) has no usable descriptor
            return sys.stdin

    if hasattr(source, "read"):
        # Already a text stream
        if hasattr(source, "encoding"):
            return source
        name = getattr(source, "name", "")
        name = name if isinstance(name, str) else ""
        return TextIOWrapper(
            wrap_compression(source, name), encoding=encoding,
            errors="surrogateescape", newline="\n"
        )

    if _is_url(source):
        binary = wrap_compression(_fetch(source), source.split("?", 1)[0])
        return TextIOWrapper(
            binary, encoding=encoding,
            errors="surrogateescape", newline="\n"
        )

    logger.debug("Input is a local file path: %s, opening file in binary mode.", source)
    try:
        file_obj = open(source, "rb")
    except OSError as e:
        raise LineSourceError(f"unable to open {source}: {e}") from e
    return TextIOWrapper(
        wrap_compression(file_obj, str(source)), encoding=encoding,
        errors="surrogateescape", newline="\n"
    )


def strip_terminator(line: str) -> str:
    """Drop one trailing line terminator (\\n, \\r\\n or \\r)."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def read_lines(stream: Iterable[str], progress: bool = False) -> Iterator[str]:
    """
    Lazily yield the lines of ``stream`` without their terminators.

    Args:
        stream: Text stream (or any iterable of lines)
        progress: Draw a line counter on stderr

    Raises:
        LineSourceError: on any read failure other than end of input
    """
    lines = tqdm(stream, disable=not progress, unit=" lines", file=sys.stderr, leave=False)
    try:
        for line in lines:
            yield strip_terminator(line)
    except (OSError, EOFError, ValueError, requests.RequestException) as e:
        raise LineSourceError(f"reading error: {e}") from e
    finally:
        lines.close()


def safe_close(stream: Optional[Union[BinaryIO, TextIO]]) -> None:
    """
    Safely close a stream, catching and logging exceptions.

    Args:
        stream: Stream to close
    """
    if stream is None or stream is sys.stdin:
        return
    try:
        stream.close()
    except Exception as e:
        logger.warning(f"Error closing stream: {e}")
