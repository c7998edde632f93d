"""
Command-line interface for parsing NEM12 files.

Usage:
    nem12-parse parse --input <file_path> [options]
    nem12-parse failures [--db-* options]

Exit codes:
    0  success
    1  usage error or missing input
    2  unexpected error
    3  fatal NEM12 structure error
"""

import argparse
import sys
from pathlib import Path

from nem12_pipeline.batch import BatchPipeline
from nem12_pipeline.batch.writers import BatchInsertWriter, CopyCommandWriter, InMemoryReadingWriter
from nem12_pipeline.batch.writers.failure_writer import FailureReadingWriter
from nem12_pipeline.batch.writers.warehouse_writer import MeterReadingWriter
from nem12_pipeline.config import ConfigError, ParserSettings, load_settings
from nem12_pipeline.core.parser import ParseError
from nem12_pipeline.handlers import CompositeFailureHandler, LoggingFailureHandler
from nem12_pipeline.handlers.database_handler import DatabaseFailureHandler
from nem12_pipeline.observability.logger import get_logger, setup_logger
from nem12_pipeline.observability.metrics import MetricsCollector, start_metrics_server
from nem12_pipeline.warehouse.connection import DatabaseConnectionPool
from nem12_pipeline.warehouse.schema_mgmt import SchemaManager

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_ERROR = 2
EXIT_PARSE_ERROR = 3

DEFAULT_OUTPUT_PATHS = {
    "sql": "output.sql",
    "copy": "output_copy.sql",
}


def create_pool(args):
    """Create and open a connection pool from the --db-* arguments."""
    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )
    pool.open()
    return pool


def build_sinks(settings: ParserSettings, args, metrics: MetricsCollector):
    """
    Build the reading sink and failure handler for the output format.

    Returns:
        Tuple of (reading_sink, failure_handler, pool); pool is None unless
        the output format is postgres
    """
    logging_handler = LoggingFailureHandler()

    if settings.output_format == "postgres":
        pool = create_pool(args)
        SchemaManager(pool).ensure_schema()

        reading_sink = MeterReadingWriter(
            pool,
            batch_size=settings.batch_size,
            source_timezone=settings.source_timezone,
            metrics=metrics,
        )
        failure_writer = FailureReadingWriter(
            pool,
            batch_size=settings.batch_size,
            source_timezone=settings.source_timezone,
            metrics=metrics,
        )
        failure_handler = CompositeFailureHandler(DatabaseFailureHandler(failure_writer), logging_handler)
        return reading_sink, failure_handler, pool

    if settings.output_format == "memory":
        return InMemoryReadingWriter(), CompositeFailureHandler(logging_handler), None

    output_path = args.output or DEFAULT_OUTPUT_PATHS[settings.output_format]
    if settings.output_format == "copy":
        reading_sink = CopyCommandWriter(output_path, batch_size=settings.batch_size)
    else:
        reading_sink = BatchInsertWriter(output_path, batch_size=settings.batch_size)
    return reading_sink, CompositeFailureHandler(logging_handler), None


def print_summary(result: dict, settings: ParserSettings, output_path: str | None) -> None:
    print(f"\n{'=' * 60}")
    print("PARSING COMPLETE")
    print(f"{'=' * 60}")
    print(f"Lines processed:    {result['lines_processed']}")
    print(f"NMI blocks:         {result['nmi_blocks']}")
    print(f"Readings accepted:  {result['readings_accepted']}")
    if result["records_rejected"]:
        print(f"Records rejected:   {result['records_rejected']}")
    print(f"Duration:           {result['duration_seconds']:.3f}s")
    if output_path:
        print(f"Output ({settings.output_format}): {output_path}")

    if result["failures"]:
        print("\nFailed readings:")
        for reason, count in sorted(result["failures"].items(), key=lambda x: x[1], reverse=True):
            print(f"  {reason:<30} {count:>8}")
    print(f"{'=' * 60}\n")


def parse_command(args) -> int:
    """
    Execute the parse command.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    try:
        settings = load_settings(
            args.config,
            batch_size=args.batch_size,
            output_format=args.output_format,
            strict_structure=False if args.lenient else None,
            log_level=args.log_level,
        )
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logger(level=settings.log_level, format_type=settings.log_format)

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return EXIT_USAGE

    logger.info(
        f"Starting NEM12 parser: input={input_path}, output_format={settings.output_format}, "
        f"batch_size={settings.batch_size}"
    )

    metrics = MetricsCollector()
    if args.metrics_port is not None:
        start_metrics_server(args.metrics_port)
        logger.info(f"Serving metrics on port {args.metrics_port}")

    reading_sink = failure_handler = pool = None

    try:
        reading_sink, failure_handler, pool = build_sinks(settings, args, metrics)
        pipeline = BatchPipeline(reading_sink, failure_handler, settings=settings, metrics=metrics)
        result = pipeline.process_file(input_path)

        output_path = None
        if settings.output_format in DEFAULT_OUTPUT_PATHS:
            output_path = args.output or DEFAULT_OUTPUT_PATHS[settings.output_format]
        print_summary(result, settings, output_path)
        return EXIT_OK

    except ParseError as e:
        logger.error(f"Parse error: {e}", exc_info=True)
        print(f"Parse error: {e}", file=sys.stderr)
        return EXIT_PARSE_ERROR

    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    finally:
        try:
            if failure_handler is not None:
                failure_handler.close()
            if reading_sink is not None:
                reading_sink.close()
        finally:
            if pool is not None:
                pool.close()


def failures_command(args) -> int:
    """
    Print failed reading counts and the stored reading total.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    pool = None
    try:
        pool = create_pool(args)
        schema = SchemaManager(pool)
        stats = schema.failure_statistics()
        readings_stored = schema.count_readings()
    except Exception as e:
        logger.error(f"Error reading failure statistics: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if pool is not None:
            pool.close()

    print(f"\n{'=' * 60}")
    print("FAILED READINGS")
    print(f"{'=' * 60}\n")
    if not stats:
        print("No failed readings recorded.")
    for reason, count in sorted(stats.items(), key=lambda x: x[1], reverse=True):
        print(f"  {reason.value:<30} {count:>8}")
    print(f"\nTotal: {sum(stats.values())}")
    print(f"Readings stored: {readings_stored}\n")
    return EXIT_OK


def add_db_arguments(parser: argparse.ArgumentParser) -> None:
    """Database connection arguments (fall back to DB_* env vars)."""
    parser.add_argument("--db-host", help="Database host (default: $DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: $DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: $DB_NAME or nem12)")
    parser.add_argument("--db-user", help="Database user (default: $DB_USER or nem12)")
    parser.add_argument("--db-password", help="Database password (default: $DB_PASSWORD)")


class CLIArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with EXIT_USAGE on bad arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CLIArgumentParser(
        prog="nem12-parse",
        description="NEM12 interval meter data parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate INSERT statements
  nem12-parse parse --input data/meter.csv --output readings.sql

  # Generate a COPY script with larger batches
  nem12-parse parse --input data/meter.zip --output-format copy --batch-size 1000

  # Load straight into PostgreSQL, skipping malformed 300 records
  nem12-parse parse --input data/meter.csv --output-format postgres --lenient

  # Expose Prometheus metrics while loading
  nem12-parse parse --input data/meter.csv --output-format postgres --metrics-port 8000

  # Show failure counts from the warehouse
  nem12-parse failures --db-host localhost
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse a NEM12 file")
    parse_parser.add_argument("--input", required=True, help="Path to NEM12 file (CSV or ZIP)")
    parse_parser.add_argument(
        "--output-format",
        choices=["postgres", "sql", "copy", "memory"],
        help="Where accepted readings go (default: sql)",
    )
    parse_parser.add_argument("--output", help="Output file for sql/copy formats")
    parse_parser.add_argument("--batch-size", type=int, help="Rows per batch (default: 50)")
    parse_parser.add_argument("--config", help="Path to settings YAML file")
    parse_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed 300 records instead of aborting the file",
    )
    parse_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parse_parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics over HTTP on this port while parsing",
    )
    add_db_arguments(parse_parser)

    failures_parser = subparsers.add_parser("failures", help="Show failed reading counts")
    add_db_arguments(failures_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "parse":
        return parse_command(args)
    if args.command == "failures":
        return failures_command(args)

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
