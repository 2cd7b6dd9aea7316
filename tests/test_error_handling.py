"""Tests for the diagnostics side channel and the exception hierarchy."""

import logging

import pytest

from urlbits.exceptions import (
    LineSourceError,
    QueryParseError,
    RecordError,
    SinkError,
    UrlbitsError,
    URIParseError,
)
from urlbits.processing.shared.error_handling import DiagnosticReporter


def test_exception_hierarchy():
    assert issubclass(RecordError, UrlbitsError)
    assert issubclass(URIParseError, RecordError)
    assert issubclass(QueryParseError, RecordError)
    assert issubclass(LineSourceError, UrlbitsError)
    assert issubclass(SinkError, UrlbitsError)
    assert not issubclass(LineSourceError, RecordError)


class TestDiagnosticReporter:
    def test_counts_without_publishing_when_quiet(self, caplog):
        received = []
        reporter = DiagnosticReporter(logging.getLogger("tests.quiet"))
        reporter.subscribe(received.append)

        with caplog.at_level(logging.DEBUG, logger="tests.quiet"):
            reporter.report("parse", "://bad", "missing protocol scheme")

        assert received == []
        assert caplog.records == []
        assert reporter.stats["drop_count"] == 1
        assert reporter.stats["drops_by_stage"] == {"parse": 1}

    def test_verbose_logs_and_publishes(self, caplog):
        received = []
        reporter = DiagnosticReporter(logging.getLogger("tests.verbose"), verbose=True)
        reporter.subscribe(received.append)

        with caplog.at_level(logging.WARNING, logger="tests.verbose"):
            diagnostic = reporter.report("validate", "scheme=mailto", "not valid url")

        assert received == [diagnostic]
        assert "validate error for scheme=mailto: not valid url" in caplog.text

    def test_last_drop_records_exception_type(self):
        reporter = DiagnosticReporter()
        error = URIParseError("://bad", "missing protocol scheme")
        reporter.report("parse", "://bad", error)
        last = reporter.stats["last_drop"]
        assert last["type"] == "URIParseError"
        assert last["reason"] == 'parse "://bad": missing protocol scheme'

    def test_uses_supplied_stats_dict(self):
        stats = {}
        reporter = DiagnosticReporter(stats=stats)
        reporter.report("query", "a;b", "invalid semicolon separator in query")
        reporter.report("query", "a;c", "invalid semicolon separator in query")
        assert stats["drops_by_stage"] == {"query": 2}


@pytest.mark.parametrize("error", [URIParseError("x", "bad"), QueryParseError("x", "bad")])
def test_record_errors_keep_reason(error):
    assert error.reason == "bad"
