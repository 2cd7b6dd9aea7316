"""Strict request-URI parser.

Accepts an absolute URI (``scheme:...``) or an absolute path (``/...``);
anything else is rejected. The fragment is not split off, a request URI is
not expected to carry one.
"""
from typing import Optional, Tuple

from urlbits.domain.models import ParsedURI, UserCredentials
from urlbits.exceptions import URIParseError
from urlbits.processing.parser.escaping import Encoding, escape, split_once, unescape
from urlbits.processing.shared.constants import DROP_REASONS, SCHEME_EXTRA, USERINFO_SAFE


def _has_control_char(s: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in s)


def _is_ascii_letter(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_ascii_digit(c: str) -> bool:
    return "0" <= c <= "9"


def get_scheme(raw: str) -> Tuple[str, str]:
    """
    Split a leading scheme off ``raw``.

    Returns ``("", raw)`` when there is no valid scheme.

    Raises:
        ValueError: when ``raw`` starts with ``:``
    """
    for i, c in enumerate(raw):
        if _is_ascii_letter(c):
            continue
        if _is_ascii_digit(c) or c in SCHEME_EXTRA:
            if i == 0:
                return "", raw
            continue
        if c == ":":
            if i == 0:
                raise ValueError(DROP_REASONS['MISSING_SCHEME'])
            return raw[:i], raw[i + 1:]
        return "", raw
    return "", raw


def _valid_optional_port(port: str) -> bool:
    if port == "":
        return True
    if port[0] != ":":
        return False
    return all(_is_ascii_digit(c) for c in port[1:])


def parse_host(host: str) -> str:
    if host.startswith("["):
        i = host.rfind("]")
        if i < 0:
            raise ValueError(DROP_REASONS['MISSING_BRACKET'])
        colon_port = host[i + 1:]
        if not _valid_optional_port(colon_port):
            raise ValueError(f'invalid port "{colon_port}" after host')
        zone = host.find("%25", 0, i)
        if zone >= 0:
            host1 = unescape(host[:zone], Encoding.HOST)
            host2 = unescape(host[zone:i], Encoding.ZONE)
            host3 = unescape(host[i:], Encoding.HOST)
            return host1 + host2 + host3
    else:
        i = host.rfind(":")
        if i != -1:
            colon_port = host[i:]
            if not _valid_optional_port(colon_port):
                raise ValueError(f'invalid port "{colon_port}" after host')
    return unescape(host, Encoding.HOST)


def _valid_userinfo(s: str) -> bool:
    return all((c.isascii() and c.isalnum()) or c in USERINFO_SAFE for c in s)


def parse_authority(authority: str) -> Tuple[Optional[UserCredentials], str]:
    i = authority.rfind("@")
    host = parse_host(authority if i < 0 else authority[i + 1:])
    if i < 0:
        return None, host

    userinfo = authority[:i]
    if not _valid_userinfo(userinfo):
        raise ValueError(DROP_REASONS['INVALID_USERINFO'])
    username, password, has_password = split_once(userinfo, ":")
    username = unescape(username, Encoding.USER_PASSWORD)
    if not has_password:
        return UserCredentials(username), host
    return UserCredentials(username, unescape(password, Encoding.USER_PASSWORD)), host


def _split_path(encoded: str) -> Tuple[str, str]:
    path = unescape(encoded, Encoding.PATH)
    raw_path = "" if escape(path, Encoding.PATH) == encoded else encoded
    return path, raw_path


def parse_request_uri(text: str) -> ParsedURI:
    """
    Parse ``text`` as a request URI.

    Raises:
        URIParseError: with the input and the reason it was rejected
    """
    try:
        return _parse(text)
    except ValueError as e:
        raise URIParseError(text, str(e)) from None


def _parse(raw: str) -> ParsedURI:
    if _has_control_char(raw):
        raise ValueError(DROP_REASONS['CONTROL_CHARACTER'])
    if raw == "":
        raise ValueError(DROP_REASONS['EMPTY_URL'])
    if raw == "*":
        return ParsedURI(path="*")

    scheme, rest = get_scheme(raw)
    scheme = scheme.lower()

    force_query = False
    raw_query = ""
    if rest.endswith("?") and rest.count("?") == 1:
        force_query = True
        rest = rest[:-1]
    else:
        rest, raw_query, _ = split_once(rest, "?")

    if not rest.startswith("/"):
        if scheme:
            return ParsedURI(scheme=scheme, opaque=rest, raw_query=raw_query, force_query=force_query)
        raise ValueError(DROP_REASONS['NOT_REQUEST_URI'])

    user = None
    host = ""
    if scheme and rest.startswith("//"):
        authority, slash, path_rest = rest[2:].partition("/")
        rest = slash + path_rest
        user, host = parse_authority(authority)

    path, raw_path = _split_path(rest)
    return ParsedURI(
        scheme=scheme,
        user=user,
        host=host,
        path=path,
        raw_path=raw_path,
        raw_query=raw_query,
        force_query=force_query,
    )
