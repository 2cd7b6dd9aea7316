"""
Exception hierarchy for the URL extraction pipeline.
"""


class UrlbitsError(Exception):
    """Base exception for all urlbits errors."""


class RecordError(UrlbitsError):
    """
    Base exception for per-record failures.
    The offending record is dropped and processing continues.
    """


class URIParseError(RecordError):
    """A line could not be parsed as a request URI."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f'parse "{text}": {reason}')


class QueryParseError(RecordError):
    """A raw query string could not be decoded into a query map."""

    def __init__(self, query: str, reason: str):
        self.query = query
        self.reason = reason
        super().__init__(reason)


class LineSourceError(UrlbitsError):
    """
    The input stream itself failed (anything other than end of input).
    Fatal: aborts the whole run.
    """


class SinkError(UrlbitsError):
    """A write to a persisted output sink failed."""
