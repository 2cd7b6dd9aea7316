"""Projection stages: each derives one view from a parsed URI."""
from typing import Dict, Iterable

from urlbits.domain.models import ParsedURI, QueryMap, UserCredentials
from urlbits.exceptions import QueryParseError
from urlbits.processing.parser.query import parse_query
from urlbits.processing.shared.constants import STAGE_QUERY
from urlbits.processing.stages.base import BaseStage

# Paths that say nothing about the resource
DEGENERATE_PATHS = frozenset(("", "/"))


class HostProjection(BaseStage):
    """Emits the host (``host`` or ``host:port``) of every URI, empty included."""

    name = "host"

    def process(self, uri: ParsedURI) -> Iterable[str]:
        return (uri.host,)


class PathProjection(BaseStage):
    name = "path"

    def process(self, uri: ParsedURI) -> Iterable[str]:
        if uri.path in DEGENERATE_PATHS:
            return ()
        return (uri.path,)


class UserProjection(BaseStage):
    name = "user"

    def process(self, uri: ParsedURI) -> Iterable[UserCredentials]:
        if uri.user is None:
            return ()
        return (uri.user,)


class QueryMapProjection(BaseStage):
    """
    Decodes the raw query of every URI.

    Malformed queries are dropped with a diagnostic; URIs without
    parameters produce nothing.
    """

    name = STAGE_QUERY

    def process(self, uri: ParsedURI) -> Iterable[QueryMap]:
        try:
            query_map = parse_query(uri.raw_query)
        except QueryParseError as e:
            self.drop(e.query, f"param parsing error: {e.reason}")
            return ()
        if not query_map:
            return ()
        return (query_map,)


class RecordProjection(BaseStage):
    """Emits the full decomposed URI as a flat dict, empty fields omitted."""

    name = "record"

    def process(self, uri: ParsedURI) -> Iterable[Dict[str, str]]:
        return (uri.to_record(),)
