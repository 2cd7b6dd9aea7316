"""Decoding of raw query strings into query maps."""
from urlbits.domain.models import QueryMap
from urlbits.exceptions import QueryParseError
from urlbits.processing.parser.escaping import Encoding, split_once, unescape
from urlbits.processing.shared.constants import DROP_REASONS


def parse_query(raw_query: str) -> QueryMap:
    """
    Parse an ``&``-separated query string.

    Every well-formed pair is decoded, but the first error makes the whole
    query invalid.

    Raises:
        QueryParseError: on a semicolon separator or a bad percent escape
    """
    query_map = QueryMap()
    first_error = None

    for piece in raw_query.split("&"):
        if not piece:
            continue
        if ";" in piece:
            first_error = first_error or DROP_REASONS['SEMICOLON_IN_QUERY']
            continue
        key, value, _ = split_once(piece, "=")
        try:
            key = unescape(key, Encoding.QUERY_COMPONENT)
            value = unescape(value, Encoding.QUERY_COMPONENT)
        except ValueError as e:
            first_error = first_error or str(e)
            continue
        query_map.add(key, value)

    if first_error is not None:
        raise QueryParseError(raw_query, first_error)
    return query_map
