# processing/stages/base.py
from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, Optional
import logging

from urlbits.processing.shared.error_handling import DiagnosticReporter


class BaseStage(ABC):
    """Abstract base class for pipeline stages implementing process()."""

    name = "stage"

    def __init__(
        self,
        reporter: Optional[DiagnosticReporter] = None,
        logger: Optional[logging.Logger] = None
    ):
        """Initialize stage with optional diagnostics reporter and logger."""
        self.logger = logger or logging.getLogger(__name__)
        self.reporter = reporter or DiagnosticReporter(self.logger)
        self.stats = {"processed": 0, "emitted": 0, "dropped": 0}

    @abstractmethod
    def process(self, record: Any) -> Iterable[Any]:
        """
        Transform a single record.

        Args:
            record: One item from the upstream stage

        Returns:
            Zero or more items for the downstream stage. Nothing returned
            means the record was dropped or filtered out.
        """
        raise NotImplementedError

    def run(self, records: Iterable[Any]) -> Iterator[Any]:
        """
        Apply process() to every record of an upstream sequence.

        Args:
            records: Upstream sequence, consumed until exhausted

        Returns:
            Iterator over everything the stage emits, in order
        """
        for record in records:
            yield from self.feed(record)

    def feed(self, record: Any) -> Iterator[Any]:
        self.stats["processed"] += 1
        for item in self.process(record):
            self.stats["emitted"] += 1
            yield item

    def drop(self, text: str, reason: Any) -> None:
        """Count a dropped record and report it on the diagnostics channel."""
        self.stats["dropped"] += 1
        self.reporter.report(self.name, text, reason)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FilterStage(BaseStage):
    """Stage that passes records through unchanged when keep() holds."""

    @abstractmethod
    def keep(self, record: Any) -> bool:
        raise NotImplementedError

    def process(self, record: Any) -> Iterable[Any]:
        if self.keep(record):
            return (record,)
        return ()
