"""Stage turning raw lines into parsed URIs."""
from typing import Iterable

from urlbits.domain.models import ParsedURI
from urlbits.exceptions import URIParseError
from urlbits.processing.parser.uri import parse_request_uri
from urlbits.processing.shared.constants import STAGE_PARSE
from urlbits.processing.stages.base import BaseStage


class ParserStage(BaseStage):
    """Parses each line as a request URI; unparseable lines are dropped."""

    name = STAGE_PARSE

    def process(self, line: str) -> Iterable[ParsedURI]:
        try:
            return (parse_request_uri(line),)
        except URIParseError as e:
            self.drop(line, e)
            return ()
