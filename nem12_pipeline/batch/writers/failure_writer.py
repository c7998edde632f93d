"""
Warehouse writer for failed readings.
"""

import uuid
from collections import Counter

from nem12_pipeline.core.models import FailureReason, FailureRecord
from nem12_pipeline.observability.logger import get_logger
from nem12_pipeline.observability.metrics import MetricsCollector
from nem12_pipeline.utils.timezone import DEFAULT_SOURCE_TIMEZONE, local_to_utc
from nem12_pipeline.warehouse.connection import DatabaseConnectionPool
from nem12_pipeline.warehouse.schema_mgmt import INSERT_FAILED_READING_SQL

from .base import DEFAULT_BATCH_SIZE, BatchWriter

logger = get_logger(__name__)


class FailureReadingWriter(BatchWriter):
    """
    Writes FailureRecord batches into failed_readings.

    Keeps per-reason counts of everything handed to save().
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        batch_size: int = DEFAULT_BATCH_SIZE,
        source_timezone: str = DEFAULT_SOURCE_TIMEZONE,
        metrics: MetricsCollector | None = None,
    ):
        super().__init__(batch_size)
        self.pool = pool
        self.source_timezone = source_timezone
        self.metrics = metrics
        self._statistics: Counter = Counter()

    def save(self, failure: FailureRecord) -> None:
        self._statistics[failure.reason] += 1
        super().save(failure)

    def get_statistics(self) -> dict[FailureReason, int]:
        return dict(self._statistics)

    def _write_batch(self, batch: list[FailureRecord]) -> None:
        rows = [
            (
                uuid.uuid4(),
                failure.line_number,
                failure.nmi,
                failure.interval_index,
                failure.raw_value,
                failure.reason.value,
                local_to_utc(failure.timestamp, self.source_timezone) if failure.timestamp else None,
            )
            for failure in batch
        ]

        with self.pool.get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.executemany(INSERT_FAILED_READING_SQL, rows)
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Error writing batch of {len(rows)} failures, rolled back: {e}", exc_info=True)
                raise

        if self.metrics:
            self.metrics.record_warehouse_write("failed_readings", len(rows))
