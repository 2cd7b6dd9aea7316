"""Runners that chain stages either in-line or as threads joined by queues."""
import logging
import queue
import threading
from typing import Any, Iterable, Iterator, List, Sequence

from urlbits.processing.stages.base import BaseStage

logger = logging.getLogger(__name__)

# Marks the end of a queue: the producer has no more records
_CLOSED = object()


class _Failure:
    """Fatal error travelling downstream in place of the closing marker."""

    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


class SourceWorker(threading.Thread):
    """Feeds an iterable of lines into the first queue, then closes it."""

    def __init__(self, lines: Iterable[str], outbox: queue.Queue):
        super().__init__(name="urlbits-source", daemon=True)
        self.lines = lines
        self.outbox = outbox

    def run(self) -> None:
        try:
            for line in self.lines:
                self.outbox.put(line)
        except Exception as e:
            self.outbox.put(_Failure(e))
            return
        self.outbox.put(_CLOSED)


class StageWorker(threading.Thread):
    """
    Runs one stage between an input and an output queue.

    The worker only blocks on ``inbox.get`` or on ``outbox.put`` when the
    output queue is bounded and full. It stops after forwarding the closing
    marker (or a failure) it received from upstream.
    """

    def __init__(self, stage: BaseStage, inbox: queue.Queue, outbox: queue.Queue):
        super().__init__(name=f"urlbits-{stage.name}", daemon=True)
        self.stage = stage
        self.inbox = inbox
        self.outbox = outbox

    def run(self) -> None:
        while True:
            item = self.inbox.get()
            if item is _CLOSED or isinstance(item, _Failure):
                self.outbox.put(item)
                return
            try:
                for out in self.stage.feed(item):
                    self.outbox.put(out)
            except Exception as e:
                logger.exception("Stage %s failed", self.stage.name)
                self.outbox.put(_Failure(e))
                return


def run_sync(lines: Iterable[str], stages: Sequence[BaseStage]) -> Iterator[Any]:
    """Chain the stages as generators in the calling thread."""
    records: Iterable[Any] = lines
    for stage in stages:
        records = stage.run(records)
    yield from records


def run_threaded(lines: Iterable[str], stages: Sequence[BaseStage], queue_size: int = 0) -> Iterator[Any]:
    """
    Run the source and every stage in its own thread.

    Args:
        lines: Input lines, read by the source thread
        stages: Stages in pipeline order
        queue_size: Capacity of each edge; 0 means unbounded

    Returns:
        Iterator over the last stage's output, in FIFO order

    Raises:
        Whatever the source or a stage raised, re-raised in the caller
    """
    queues: List[queue.Queue] = [queue.Queue(maxsize=queue_size) for _ in range(len(stages) + 1)]
    workers: List[threading.Thread] = [SourceWorker(lines, queues[0])]
    workers.extend(StageWorker(stage, queues[i], queues[i + 1]) for i, stage in enumerate(stages))
    for worker in workers:
        worker.start()

    results = queues[-1]
    while True:
        item = results.get()
        if item is _CLOSED:
            break
        if isinstance(item, _Failure):
            raise item.error
        yield item

    for worker in workers:
        worker.join()
