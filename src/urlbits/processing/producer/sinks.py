import json
import logging
import sys
import threading
from typing import Any, Iterable, List, Optional, TextIO

from confluent_kafka import KafkaException, Producer

from urlbits.config.settings import KAFKA_BROKERS
from urlbits.domain.models import QueryMap, UserCredentials
from urlbits.exceptions import SinkError
from urlbits.processing.shared.constants import RECORD_JSON_INDENT

logger = logging.getLogger(__name__)


def render(value: Any) -> str:
    """
    Text form of a projected value.

    Strings are written as-is, credentials in ``user[:password]`` form,
    query maps as compact JSON and full records as indented JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, UserCredentials):
        return str(value)
    if isinstance(value, QueryMap):
        return json.dumps(value.to_dict(), ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, indent=RECORD_JSON_INDENT)
    raise TypeError(f"Cannot render value of type {type(value).__name__}")


class OutputSink:
    """Abstract output sink interface."""

    def send(self, text: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class StreamSink(OutputSink):
    """Primary output: one value per line on a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def send(self, text: str) -> None:
        stream = self.stream
        try:
            print(text, file=stream)
        except UnicodeEncodeError:
            # Undecodable input bytes travel as lone surrogates; write them back as bytes
            buffer = getattr(stream, "buffer", None)
            if buffer is None:
                raise
            stream.flush()
            buffer.write(f"{text}\n".encode(stream.encoding or "utf-8", "surrogateescape"))
            buffer.flush()

    def flush(self) -> None:
        self.stream.flush()


class FileSink(OutputSink):
    """Persisted copy of the output, truncated when the sink is created."""

    def __init__(self, path: str, encoding: str = "utf-8"):
        self.path = path
        try:
            self._file = open(path, "w", encoding=encoding, errors="surrogateescape")
        except OSError as e:
            raise SinkError(f"unable to create file {path}: {e}") from e
        logger.info(f"Saving results to {path}")

    def send(self, text: str) -> None:
        try:
            self._file.write(f"{text}\n")
        except (OSError, ValueError) as e:
            raise SinkError(str(e)) from e

    def flush(self) -> None:
        try:
            self._file.flush()
        except (OSError, ValueError) as e:
            raise SinkError(str(e)) from e

    def close(self) -> None:
        if self._file.closed:
            return
        try:
            self._file.close()
        except OSError as e:
            raise SinkError(str(e)) from e


class KafkaSink(OutputSink):
    """Publishes each rendered value as one Kafka message."""

    def __init__(self, topic: str, brokers: str = KAFKA_BROKERS, producer: Optional[Producer] = None):
        """
        Args:
            topic: Kafka topic to publish to
            brokers: Comma-separated list of Kafka brokers
            producer: Pre-built producer, mainly for tests
        """
        self.conf = {
            'bootstrap.servers': brokers,
            'security.protocol': 'PLAINTEXT',
        }
        self.topic = topic
        self.producer = producer if producer is not None else Producer(self.conf)
        self.success_count = 0
        self.failure_count = 0
        logger.info(f"Initialized KafkaSink for topic {topic}")

    def delivery_report(self, err, msg):
        """Handle delivery callbacks from Kafka."""
        if err:
            self.failure_count += 1
            logger.error(f"Delivery failed: {err}")
        else:
            self.success_count += 1
            logger.debug(f"Delivered message to {msg.topic()} [partition {msg.partition()}]")

    def send(self, text: str) -> None:
        try:
            self.producer.produce(
                topic=self.topic,
                value=text.encode("utf-8", "surrogateescape"),
                callback=self.delivery_report
            )
            self.producer.poll(0)
        except (BufferError, KafkaException) as e:
            raise SinkError(f"unable to publish to {self.topic}: {e}") from e

    def flush(self) -> None:
        remaining = self.producer.flush()
        logger.info(
            f"Flush completed. Total successful deliveries: {self.success_count}. "
            f"Messages still in queue: {remaining}"
        )
        if remaining > 0:
            logger.warning(f"{remaining} messages were not delivered")


class TeeWriter:
    """
    Writes every value to the primary sink, then mirrors it to persisted sinks.

    Writes are serialized under one lock so that mirrored records never
    interleave. A failed mirror write is logged and counted; the next value
    is processed normally.
    """

    def __init__(
        self,
        primary: OutputSink,
        mirrors: Iterable[OutputSink] = (),
        logger: Optional[logging.Logger] = None
    ):
        self.primary = primary
        self.mirrors: List[OutputSink] = list(mirrors)
        self.logger = logger or logging.getLogger(__name__)
        self.write_errors = 0
        self._lock = threading.Lock()

    def write(self, value: Any) -> None:
        text = render(value)
        with self._lock:
            self.primary.send(text)
            for mirror in self.mirrors:
                try:
                    mirror.send(text)
                except SinkError as e:
                    self.write_errors += 1
                    self.logger.error("error writing %s: %s", text, e)

    def close(self) -> None:
        """
        Close every sink, mirrors included when the primary fails.

        A stream error from the primary (such as a broken pipe) is re-raised
        once all sinks have been closed.
        """
        pending: Optional[OSError] = None
        with self._lock:
            for sink in [self.primary, *self.mirrors]:
                try:
                    sink.close()
                except SinkError as e:
                    self.write_errors += 1
                    self.logger.error("error closing %s: %s", type(sink).__name__, e)
                except OSError as e:
                    if pending is None:
                        pending = e
        if pending is not None:
            raise pending
