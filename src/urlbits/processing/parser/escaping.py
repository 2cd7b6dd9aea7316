"""Percent-encoding rules for the URI components handled by the parser."""
from enum import Enum
from typing import Tuple

from urlbits.processing.shared.constants import HOST_SAFE, UPPER_HEX


class Encoding(Enum):
    PATH = "path"
    HOST = "host"
    ZONE = "zone"
    USER_PASSWORD = "user_password"
    QUERY_COMPONENT = "query_component"


class EscapeError(ValueError):
    def __init__(self, sequence: str):
        super().__init__(f'invalid URL escape "{sequence}"')


class InvalidHostError(ValueError):
    def __init__(self, char: str):
        super().__init__(f'invalid character "{char}" in host name')


def _is_hex(b: int) -> bool:
    return 0x30 <= b <= 0x39 or 0x41 <= b <= 0x46 or 0x61 <= b <= 0x66


def _unhex(b: int) -> int:
    return int(chr(b), 16)


def should_escape(c: int, mode: Encoding) -> bool:
    """Report whether byte ``c`` must be percent-encoded in the given component."""
    ch = chr(c)
    if ch.isascii() and ch.isalnum():
        return False

    if mode in (Encoding.HOST, Encoding.ZONE) and ch in HOST_SAFE:
        return False

    if ch in "-_.~":
        return False

    if ch in "$&+,/:;=?@":
        if mode is Encoding.PATH:
            return ch == "?"
        if mode is Encoding.USER_PASSWORD:
            return ch in "@/?:"
        if mode is Encoding.QUERY_COMPONENT:
            return True

    return True


def _text(raw: bytes) -> str:
    # Bytes that are not UTF-8 survive as lone surrogates so distinct escapes stay distinct
    return raw.decode("utf-8", errors="surrogateescape")


def _window(raw: bytes, start: int) -> str:
    return raw[start:start + 3].decode("utf-8", errors="replace")


def unescape(s: str, mode: Encoding) -> str:
    """
    Strictly decode percent escapes in ``s``.

    Raises:
        EscapeError: on a truncated or non-hex escape, or an escape not
            permitted in a host.
        InvalidHostError: on a character that may not appear in a host.
    """
    raw = s.encode("utf-8", errors="surrogateescape")
    i = 0
    while i < len(raw):
        b = raw[i]
        if b == 0x25:  # '%'
            if i + 2 >= len(raw) or not _is_hex(raw[i + 1]) or not _is_hex(raw[i + 2]):
                raise EscapeError(_window(raw, i))
            if mode is Encoding.HOST and _unhex(raw[i + 1]) < 8 and raw[i:i + 3] != b"%25":
                raise EscapeError(_window(raw, i))
            if mode is Encoding.ZONE:
                v = _unhex(raw[i + 1]) << 4 | _unhex(raw[i + 2])
                if raw[i:i + 3] != b"%25" and v != 0x20 and should_escape(v, Encoding.HOST):
                    raise EscapeError(_window(raw, i))
            i += 3
            continue
        if mode in (Encoding.HOST, Encoding.ZONE) and b < 0x80 and should_escape(b, mode):
            raise InvalidHostError(chr(b))
        i += 1

    if b"%" not in raw and (mode is not Encoding.QUERY_COMPONENT or b"+" not in raw):
        return s

    out = bytearray()
    i = 0
    while i < len(raw):
        b = raw[i]
        if b == 0x25:
            out.append(_unhex(raw[i + 1]) << 4 | _unhex(raw[i + 2]))
            i += 3
        elif b == 0x2B and mode is Encoding.QUERY_COMPONENT:  # '+'
            out.append(0x20)
            i += 1
        else:
            out.append(b)
            i += 1
    return _text(bytes(out))


def escape(s: str, mode: Encoding) -> str:
    """Percent-encode every byte of ``s`` that ``mode`` does not allow verbatim."""
    raw = s.encode("utf-8", errors="surrogateescape")
    parts = []
    for b in raw:
        if b == 0x20 and mode is Encoding.QUERY_COMPONENT:
            parts.append("+")
        elif should_escape(b, mode):
            parts.append("%" + UPPER_HEX[b >> 4] + UPPER_HEX[b & 15])
        else:
            parts.append(chr(b))
    return "".join(parts)


def split_once(s: str, sep: str) -> Tuple[str, str, bool]:
    """Split ``s`` around the first ``sep``; the flag says whether it was found."""
    before, found, after = s.partition(sep)
    return before, after, bool(found)
