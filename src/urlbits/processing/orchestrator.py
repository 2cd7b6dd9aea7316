import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Type

from urlbits.config.options import Mode, Options
from urlbits.processing.pipeline import run_sync, run_threaded
from urlbits.processing.producer.sinks import TeeWriter
from urlbits.processing.shared.error_handling import DiagnosticReporter
from urlbits.processing.stages import (
    BaseStage,
    HostProjection,
    KeysProjection,
    ParserStage,
    PathProjection,
    QueryMapProjection,
    RecordProjection,
    UserProjection,
    ValidatorStage,
    ValuesProjection,
)

# Stages that follow parsing (and validation) for each mode
PROJECTIONS: Dict[Mode, Tuple[Type[BaseStage], ...]] = {
    Mode.DOMAINS: (HostProjection,),
    Mode.KEYS: (QueryMapProjection, KeysProjection),
    Mode.KV: (QueryMapProjection,),
    Mode.PATHS: (PathProjection,),
    Mode.USER: (UserProjection,),
    Mode.VALUES: (QueryMapProjection, ValuesProjection),
    Mode.FULL: (RecordProjection,),
}


@dataclass
class ProcessingStats:
    lines_read: int = 0
    emitted: int = 0
    dropped: int = 0
    write_errors: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    def duration(self) -> float:
        return (self.end_time or time.time()) - self.start_time


def build_stages(
    options: Options,
    reporter: Optional[DiagnosticReporter] = None,
    logger: Optional[logging.Logger] = None
) -> List[BaseStage]:
    """Parser, the validator when requested, then the projections for the mode."""
    stages: List[BaseStage] = [ParserStage(reporter, logger)]
    if options.validate:
        stages.append(ValidatorStage(reporter, logger))
    stages.extend(stage_cls(reporter, logger) for stage_cls in PROJECTIONS[options.mode])
    return stages


class PipelineOrchestrator:
    """
    Builds the stage chain for one run and drives lines through it.

    All configuration comes from the immutable ``Options``; the diagnostics
    reporter is shared by every stage.
    """

    def __init__(
        self,
        options: Options,
        reporter: Optional[DiagnosticReporter] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.options = options
        self.logger = logger or logging.getLogger(__name__)
        self.reporter = reporter or DiagnosticReporter(self.logger, verbose=options.verbose)
        self.stages: List[BaseStage] = []

    def run(self, lines: Iterable[str]) -> Iterator[Any]:
        """Yield the projected value of every accepted line."""
        self.stages = build_stages(self.options, self.reporter, self.logger)
        self.logger.debug(
            "Running %s pipeline: %s",
            "threaded" if self.options.concurrent else "synchronous",
            " -> ".join(stage.name for stage in self.stages)
        )
        if self.options.concurrent:
            return run_threaded(lines, self.stages, self.options.queue_size)
        return run_sync(lines, self.stages)

    def process(self, lines: Iterable[str], writer: TeeWriter) -> ProcessingStats:
        """
        Run the pipeline end to end, writing every value.

        A fatal line source error propagates after the partial stats are logged.
        """
        stats = ProcessingStats()
        try:
            for value in self.run(lines):
                writer.write(value)
                stats.emitted += 1
        finally:
            stats.end_time = time.time()
            if self.stages:
                stats.lines_read = self.stages[0].stats["processed"]
            stats.dropped = sum(stage.stats["dropped"] for stage in self.stages)
            stats.write_errors = writer.write_errors
            self._log_completion(stats)
        return stats

    def _log_completion(self, stats: ProcessingStats) -> None:
        duration = stats.duration()
        self.logger.info(
            "Completed %s run: %d lines read, %d values emitted, %d records dropped, "
            "%d write errors in %.2fs",
            self.options.mode.value,
            stats.lines_read,
            stats.emitted,
            stats.dropped,
            stats.write_errors,
            duration
        )
