"""
Prometheus metrics collection for nem12-pipeline

Counts lines, accepted readings and classified failures per file parse.
"""
import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from nem12_pipeline.core.models import FailureReason

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PARSER METRICS
# =======================

lines_processed_total = Counter(
    name="nem12_lines_processed_total",
    documentation="Total number of NEM12 lines scanned",
    registry=REGISTRY,
)

readings_accepted_total = Counter(
    name="nem12_readings_accepted_total",
    documentation="Total number of interval readings accepted",
    registry=REGISTRY,
)

failures_total = Counter(
    name="nem12_failures_total",
    documentation="Total number of rejected interval values by reason",
    labelnames=["reason"],
    registry=REGISTRY,
)

files_processed_total = Counter(
    name="nem12_files_processed_total",
    documentation="Total number of NEM12 files processed",
    labelnames=["status"],  # status: success, parse_error, error
    registry=REGISTRY,
)

parse_duration_seconds = Histogram(
    name="nem12_parse_duration_seconds",
    documentation="Time spent parsing one NEM12 file in seconds",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# =======================
# WAREHOUSE METRICS
# =======================

warehouse_writes_total = Counter(
    name="nem12_warehouse_writes_total",
    documentation="Total number of rows written to the warehouse",
    labelnames=["table"],  # table: meter_readings, failed_readings
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: int | None = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: the HTTP server is only needed when the endpoint is enabled
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


# =======================
# METRICS COLLECTOR CLASS
# =======================

class MetricsCollector:
    """
    Metrics collector for file parses.

    Provides one call per parse outcome so the pipeline does not touch
    individual metrics.
    """

    def record_file_parsed(
        self,
        lines_processed: int,
        readings_accepted: int,
        failures: dict[FailureReason, int],
        duration_seconds: float = 0.0,
    ) -> None:
        """
        Record a successful file parse.

        Args:
            lines_processed: Lines scanned
            readings_accepted: Readings sent to the reading sink
            failures: Failure counts by reason
            duration_seconds: Time taken to parse the file
        """
        increment_counter(lines_processed_total, lines_processed)
        increment_counter(readings_accepted_total, readings_accepted)
        for reason, count in failures.items():
            if count > 0:
                increment_counter(failures_total, count, reason=reason.value)
        if duration_seconds > 0:
            parse_duration_seconds.observe(duration_seconds)
        increment_counter(files_processed_total, status="success")

    def record_file_failed(self, status: str = "parse_error") -> None:
        increment_counter(files_processed_total, status=status)

    def record_warehouse_write(self, table: str, row_count: int) -> None:
        if row_count > 0:
            increment_counter(warehouse_writes_total, row_count, table=table)
