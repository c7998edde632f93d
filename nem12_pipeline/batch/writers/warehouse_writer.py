"""
Warehouse writer for accepted meter readings.

Writes batches into meter_readings; duplicates on (nmi, timestamp) are
ignored so re-loading a file is idempotent.
"""

import uuid

from nem12_pipeline.core.models import MeterReading
from nem12_pipeline.core.sinks import ReadingSink
from nem12_pipeline.observability.logger import get_logger
from nem12_pipeline.observability.metrics import MetricsCollector
from nem12_pipeline.utils.timezone import DEFAULT_SOURCE_TIMEZONE, local_to_utc
from nem12_pipeline.warehouse.connection import DatabaseConnectionPool
from nem12_pipeline.warehouse.schema_mgmt import INSERT_METER_READING_SQL

from .base import DEFAULT_BATCH_SIZE, BatchWriter

logger = get_logger(__name__)


class MeterReadingWriter(BatchWriter, ReadingSink):
    """
    Reading sink backed by the PostgreSQL warehouse.

    Timestamps are converted from NEM local time to UTC before insert.
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        batch_size: int = DEFAULT_BATCH_SIZE,
        source_timezone: str = DEFAULT_SOURCE_TIMEZONE,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize meter reading writer.

        Args:
            pool: Open database connection pool
            batch_size: Readings per INSERT batch
            source_timezone: IANA zone of the file's timestamps
            metrics: Optional metrics collector
        """
        super().__init__(batch_size)
        self.pool = pool
        self.source_timezone = source_timezone
        self.metrics = metrics
        self.rows_inserted = 0

    def accept(self, reading: MeterReading) -> None:
        self.save(reading)

    def _write_batch(self, batch: list[MeterReading]) -> None:
        rows = [
            (
                uuid.uuid4(),
                reading.nmi,
                local_to_utc(reading.timestamp, self.source_timezone),
                reading.consumption,
            )
            for reading in batch
        ]

        with self.pool.get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.executemany(INSERT_METER_READING_SQL, rows)
                    inserted = max(cur.rowcount, 0)
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Error writing batch of {len(rows)} readings, rolled back: {e}", exc_info=True)
                raise

        self.rows_inserted += inserted
        if inserted < len(rows):
            logger.debug(f"Skipped {len(rows) - inserted} duplicate readings")
        if self.metrics:
            self.metrics.record_warehouse_write("meter_readings", inserted)
