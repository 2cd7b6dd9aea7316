"""Unit tests for urlbits.processing.producer.sinks."""

import io
import json
from unittest import mock

import pytest
from confluent_kafka import KafkaException

from urlbits.domain.models import QueryMap, UserCredentials
from urlbits.exceptions import SinkError
from urlbits.processing.producer.sinks import (
    FileSink,
    KafkaSink,
    OutputSink,
    StreamSink,
    TeeWriter,
    render,
)


class _FailingSink(OutputSink):
    def __init__(self):
        self.calls = 0

    def send(self, text):
        self.calls += 1
        raise SinkError("disk full")


class _BrokenPipeSink(OutputSink):
    def send(self, text):
        raise BrokenPipeError(32, "Broken pipe")

    def close(self):
        raise BrokenPipeError(32, "Broken pipe")


class TestRender:
    def test_strings_unchanged(self):
        assert render("example.com") == "example.com"

    def test_credentials(self):
        assert render(UserCredentials("alice", "secret")) == "alice:secret"

    def test_query_map_compact_json(self):
        query_map = QueryMap()
        query_map.add("x", "1")
        query_map.add("x", "2")
        assert render(query_map) == '{"x":["1","2"]}'

    def test_record_indented_json(self):
        text = render({"scheme": "http", "host": "example.com"})
        assert text == '{\n  "scheme": "http",\n  "host": "example.com"\n}'

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            render(42)


class TestFileSink:
    def test_writes_one_line_per_value(self, tmp_path):
        path = tmp_path / "results.txt"
        sink = FileSink(str(path))
        sink.send("a")
        sink.send("b")
        sink.close()
        assert path.read_text() == "a\nb\n"

    def test_truncates_existing_file(self, tmp_path):
        path = tmp_path / "results.txt"
        path.write_text("old\n")
        FileSink(str(path)).close()
        assert path.read_text() == ""

    def test_unwritable_location(self, tmp_path):
        with pytest.raises(SinkError):
            FileSink(str(tmp_path / "missing" / "results.txt"))

    def test_undecodable_bytes_written_back(self, tmp_path):
        path = tmp_path / "results.txt"
        sink = FileSink(str(path))
        sink.send("/caf\udce9")
        sink.close()
        assert path.read_bytes() == b"/caf\xe9\n"

    def test_write_after_close_raises_sink_error(self, tmp_path):
        sink = FileSink(str(tmp_path / "results.txt"))
        sink.close()
        with pytest.raises(SinkError):
            sink.send("late")


class TestTeeWriter:
    def test_primary_and_mirror_receive_same_text(self, tmp_path):
        primary = io.StringIO()
        path = tmp_path / "results.txt"
        writer = TeeWriter(StreamSink(primary), [FileSink(str(path))])
        writer.write("example.com")
        writer.write({"scheme": "http"})
        writer.close()
        assert path.read_text() == primary.getvalue()

    def test_mirror_failure_does_not_stop_processing(self):
        primary = io.StringIO()
        failing = _FailingSink()
        writer = TeeWriter(StreamSink(primary), [failing])
        writer.write("a")
        writer.write("b")
        assert primary.getvalue() == "a\nb\n"
        assert failing.calls == 2
        assert writer.write_errors == 2

    def test_broken_primary_stops_the_write(self):
        with pytest.raises(BrokenPipeError):
            TeeWriter(_BrokenPipeSink()).write("a")

    def test_mirrors_closed_when_primary_close_fails(self, tmp_path):
        mirror = FileSink(str(tmp_path / "results.txt"))
        writer = TeeWriter(_BrokenPipeSink(), [mirror])
        with pytest.raises(BrokenPipeError):
            writer.close()
        assert mirror._file.closed

    def test_stream_sink_writes_undecodable_bytes(self):
        stream = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        sink = StreamSink(stream)
        sink.send("/caf\udce9")
        sink.send("/ok")
        sink.flush()
        assert stream.buffer.getvalue() == b"/caf\xe9\n/ok\n"

    def test_stream_sink_defaults_to_stdout(self, capsys):
        StreamSink().send("hello")
        assert capsys.readouterr().out == "hello\n"


class TestKafkaSink:
    def test_send_produces_message(self):
        producer = mock.Mock()
        sink = KafkaSink("urls", producer=producer)
        sink.send("example.com")
        producer.produce.assert_called_once_with(
            topic="urls", value=b"example.com", callback=sink.delivery_report
        )
        producer.poll.assert_called_once_with(0)

    def test_undecodable_bytes_published_as_is(self):
        producer = mock.Mock()
        KafkaSink("urls", producer=producer).send("/caf\udce9")
        assert producer.produce.call_args[1]["value"] == b"/caf\xe9"

    def test_creates_producer_from_brokers(self):
        with mock.patch("urlbits.processing.producer.sinks.Producer") as producer_cls:
            KafkaSink("urls", brokers="kafka:9092")
        conf = producer_cls.call_args[0][0]
        assert conf["bootstrap.servers"] == "kafka:9092"

    def test_full_queue_is_sink_error(self):
        producer = mock.Mock()
        producer.produce.side_effect = BufferError("queue full")
        with pytest.raises(SinkError):
            KafkaSink("urls", producer=producer).send("x")

    def test_kafka_exception_is_sink_error(self):
        producer = mock.Mock()
        producer.produce.side_effect = KafkaException("broker down")
        with pytest.raises(SinkError):
            KafkaSink("urls", producer=producer).send("x")

    def test_delivery_report_counts(self):
        sink = KafkaSink("urls", producer=mock.Mock())
        sink.delivery_report(None, mock.Mock())
        sink.delivery_report("timeout", None)
        assert sink.success_count == 1
        assert sink.failure_count == 1

    def test_close_flushes(self):
        producer = mock.Mock()
        producer.flush.return_value = 0
        KafkaSink("urls", producer=producer).close()
        producer.flush.assert_called_once()


def test_query_map_render_is_json():
    query_map = QueryMap()
    query_map.add("k", "v")
    assert json.loads(render(query_map)) == {"k": ["v"]}
