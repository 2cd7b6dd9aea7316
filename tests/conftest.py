import logging

import pytest

from urlbits.processing.shared.error_handling import DiagnosticReporter


@pytest.fixture
def diagnostics():
    """Verbose reporter plus the list its subscriber fills."""
    received = []
    reporter = DiagnosticReporter(logging.getLogger("tests.diagnostics"), verbose=True)
    reporter.subscribe(received.append)
    return reporter, received
