"""
Reading sinks that write SQL scripts instead of touching a database.

BatchInsertWriter emits multi-row INSERT statements; CopyCommandWriter
emits a PostgreSQL COPY script. Timestamps are written as they appear in
the file (NEM local time).
"""

import csv
from pathlib import Path

from nem12_pipeline.core.models import MeterReading
from nem12_pipeline.core.sinks import ReadingSink
from nem12_pipeline.observability.logger import get_logger

from .base import DEFAULT_BATCH_SIZE, BatchWriter

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class BatchInsertWriter(BatchWriter, ReadingSink):
    """
    Writes one ``INSERT INTO meter_readings ... VALUES`` statement per batch.
    """

    def __init__(self, output_path: str | Path, batch_size: int = DEFAULT_BATCH_SIZE):
        super().__init__(batch_size)
        self.output_path = Path(output_path)
        self._file = self.output_path.open("w", encoding="utf-8")

    def accept(self, reading: MeterReading) -> None:
        self.save(reading)

    def _write_batch(self, batch: list[MeterReading]) -> None:
        values = ",\n".join(
            f"({_quote(r.nmi)}, '{r.timestamp.strftime(TIMESTAMP_FORMAT)}', {r.consumption})"
            for r in batch
        )
        self._file.write(
            "INSERT INTO meter_readings (nmi, timestamp, consumption) VALUES\n"
            f"{values};\n\n"
        )

    def flush(self) -> None:
        super().flush()
        self._file.flush()

    def close(self) -> None:
        if self._file.closed:
            return
        super().close()
        self._file.close()


class CopyCommandWriter(BatchWriter, ReadingSink):
    """
    Writes a ``COPY meter_readings ... FROM STDIN`` script with CSV rows.

    The COPY header is written with the first reading and the ``\\.``
    terminator on close, so a file without readings stays empty.
    """

    COPY_HEADER = "COPY meter_readings (nmi, timestamp, consumption) FROM STDIN WITH (FORMAT CSV);\n"
    COPY_TERMINATOR = "\\.\n"

    def __init__(self, output_path: str | Path, batch_size: int = DEFAULT_BATCH_SIZE):
        super().__init__(batch_size)
        self.output_path = Path(output_path)
        self._file = self.output_path.open("w", encoding="utf-8", newline="")
        self._csv = csv.writer(self._file, lineterminator="\n")
        self._header_written = False

    def accept(self, reading: MeterReading) -> None:
        self.save(reading)

    def _write_batch(self, batch: list[MeterReading]) -> None:
        if not self._header_written:
            self._file.write(self.COPY_HEADER)
            self._header_written = True

        self._csv.writerows(
            (r.nmi, r.timestamp.strftime(TIMESTAMP_FORMAT), str(r.consumption)) for r in batch
        )

    def flush(self) -> None:
        super().flush()
        self._file.flush()

    def close(self) -> None:
        if self._file.closed:
            return
        super().close()
        if self._header_written:
            self._file.write(self.COPY_TERMINATOR)
        self._file.close()
