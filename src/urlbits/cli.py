#!/usr/bin/env python3
"""Command line entry point: read URLs, print one extracted field per line."""
import argparse
import logging
import os
import sys
from typing import List, Optional

from urlbits.config.options import Mode, Options
from urlbits.config.settings import KAFKA_BROKERS, KAFKA_TOPIC, LOG_DIR, PIPELINE_CONFIG, RESULTS_PATH
from urlbits.exceptions import LineSourceError, SinkError
from urlbits.logging_utils import ApplicationLogger
from urlbits.processing.orchestrator import PipelineOrchestrator
from urlbits.processing.producer.sinks import FileSink, KafkaSink, OutputSink, StreamSink, TeeWriter
from urlbits.processing.shared.error_handling import DiagnosticReporter
from urlbits.url_io.line_source import open_input, read_lines, safe_close

MODE_FLAGS = {
    Mode.DOMAINS: "output domains",
    Mode.KEYS: "output keys",
    Mode.KV: "output keys and values",
    Mode.PATHS: "output paths",
    Mode.USER: "output username and password",
    Mode.VALUES: "output values",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="urlbits",
        description="Extract hosts, paths, query keys/values or credentials from a list of URLs.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('input', nargs='?', default='-',
                        help='Input file, http(s) URL or - for stdin (.gz/.bz2 are decompressed)')

    modes = parser.add_mutually_exclusive_group()
    for mode, help_text in MODE_FLAGS.items():
        modes.add_argument(f'--{mode.value}', dest='mode', action='store_const', const=mode, help=help_text)
    parser.set_defaults(mode=Mode.FULL)

    parser.add_argument('--validate', action='store_true',
                        help='strip out urls without a scheme and host')
    parser.add_argument('--verbose', action='store_true', help='verbose output')
    parser.add_argument('--save', action='store_true', help='save output to file')
    parser.add_argument('-o', '--output', default=RESULTS_PATH,
                        help='File used by --save (default: %(default)s)')
    parser.add_argument('--sync', action='store_true',
                        help='Run all stages in the main thread')
    parser.add_argument('--queue-size', type=int, default=PIPELINE_CONFIG['queue_size'],
                        help='Capacity of each stage queue, 0 for unbounded')
    parser.add_argument('--progress', action='store_true', help='Show a line counter on stderr')
    parser.add_argument('--kafka-topic', default=KAFKA_TOPIC or None,
                        help='Also publish every value to this Kafka topic')
    parser.add_argument('--kafka-brokers', default=KAFKA_BROKERS, help='Kafka bootstrap servers')
    parser.add_argument('--log-dir', default=LOG_DIR or None, help='Directory for a rotating log file')
    return parser


def options_from_args(args: argparse.Namespace) -> Options:
    return Options(
        mode=args.mode,
        validate=args.validate,
        verbose=args.verbose,
        save=args.save,
        save_path=args.output,
        concurrent=not args.sync,
        queue_size=args.queue_size,
        progress=args.progress,
        kafka_topic=args.kafka_topic,
        kafka_brokers=args.kafka_brokers,
    )


def build_writer(options: Options, logger: logging.Logger) -> TeeWriter:
    mirrors: List[OutputSink] = []
    if options.save:
        mirrors.append(FileSink(options.save_path))
    if options.kafka_topic:
        mirrors.append(KafkaSink(options.kafka_topic, options.kafka_brokers))
    return TeeWriter(StreamSink(), mirrors, logger=logger)


def silence_stdout() -> None:
    """Point stdout at the null device so the final flush at exit cannot fail."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        sys.stdout = open(os.devnull, "w")
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.queue_size < 0:
        parser.error("--queue-size must be >= 0")

    options = options_from_args(args)
    logger = ApplicationLogger(log_dir=args.log_dir, verbose=options.verbose).get_logger()

    try:
        writer = build_writer(options, logger)
    except SinkError as e:
        logger.critical(str(e))
        return 1

    reporter = DiagnosticReporter(logger.getChild("diagnostics"), verbose=options.verbose)
    orchestrator = PipelineOrchestrator(options, reporter, logger)

    stream = None
    try:
        try:
            stream = open_input(args.input, encoding=PIPELINE_CONFIG['encoding'])
            orchestrator.process(read_lines(stream, progress=options.progress), writer)
        finally:
            safe_close(stream)
            writer.close()
    except LineSourceError as e:
        logger.critical(str(e))
        return 1
    except BrokenPipeError:
        # The reader went away (e.g. piped into head); stop without a traceback
        silence_stdout()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
