"""
Unit tests for reading sinks and batch writers.

Database writers are tested against a mocked connection pool here; see
tests/integration for the PostgreSQL-backed tests.
"""

import csv
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from nem12_pipeline.batch.writers import (
    BatchInsertWriter,
    BatchWriter,
    CopyCommandWriter,
    InMemoryReadingWriter,
)
from nem12_pipeline.batch.writers.failure_writer import FailureReadingWriter
from nem12_pipeline.batch.writers.warehouse_writer import MeterReadingWriter
from nem12_pipeline.core.models import FailureReason, FailureRecord, MeterReading


def make_readings(count: int, nmi: str = "NEM1201009") -> list[MeterReading]:
    return [
        MeterReading(
            nmi=nmi,
            timestamp=datetime(2024, 1, 1, 0, 30 * (i % 2), 0).replace(hour=i // 2),
            consumption=Decimal(f"{i}.5"),
        )
        for i in range(count)
    ]


class CollectingWriter(BatchWriter):
    """BatchWriter that records each batch it is asked to write"""

    def __init__(self, batch_size):
        super().__init__(batch_size)
        self.batches = []

    def _write_batch(self, batch):
        self.batches.append(list(batch))


def mock_pool(rowcount: int = 0):
    pool = MagicMock()
    conn = pool.get_connection.return_value.__enter__.return_value
    cursor = conn.cursor.return_value.__enter__.return_value
    cursor.rowcount = rowcount
    return pool, conn, cursor


class TestBatchWriter:
    """Tests for batching behaviour"""

    def test_writes_full_batches(self):
        writer = CollectingWriter(batch_size=3)
        for i in range(7):
            writer.save(i)

        assert writer.batches == [[0, 1, 2], [3, 4, 5]]

        writer.flush()
        assert writer.batches[-1] == [6]
        assert writer.total_written == 7
        assert writer.batches_written == 3

    def test_flush_without_buffer_is_noop(self):
        writer = CollectingWriter(batch_size=3)
        writer.flush()
        assert writer.batches == []

    def test_close_flushes(self):
        with CollectingWriter(batch_size=10) as writer:
            writer.save("a")
        assert writer.batches == [["a"]]

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_batch_size_must_be_positive(self, batch_size):
        with pytest.raises(ValueError, match="Batch size must be positive"):
            CollectingWriter(batch_size)


class TestInMemoryReadingWriter:
    def test_collects_readings(self):
        writer = InMemoryReadingWriter()
        readings = make_readings(3)
        for reading in readings:
            writer.accept(reading)
        writer.close()

        assert writer.readings == readings
        assert writer.flush_count == 1


class TestBatchInsertWriter:
    """Tests for INSERT statement generation"""

    def test_one_statement_per_batch(self, tmp_path):
        output = tmp_path / "out.sql"
        with BatchInsertWriter(output, batch_size=2) as writer:
            for reading in make_readings(3):
                writer.accept(reading)

        sql = output.read_text()
        assert sql.count("INSERT INTO meter_readings (nmi, timestamp, consumption) VALUES") == 2
        assert "('NEM1201009', '2024-01-01 00:00:00', 0.5)" in sql
        assert "('NEM1201009', '2024-01-01 00:30:00', 1.5)" in sql
        assert sql.rstrip().endswith(";")

    def test_quotes_are_escaped(self, tmp_path):
        output = tmp_path / "out.sql"
        with BatchInsertWriter(output) as writer:
            writer.accept(make_readings(1, nmi="O'NMI")[0])

        assert "('O''NMI'," in output.read_text()

    def test_empty_input_writes_nothing(self, tmp_path):
        output = tmp_path / "out.sql"
        BatchInsertWriter(output).close()
        assert output.read_text() == ""

    def test_close_is_idempotent(self, tmp_path):
        writer = BatchInsertWriter(tmp_path / "out.sql")
        writer.close()
        writer.close()


class TestCopyCommandWriter:
    """Tests for COPY script generation"""

    def test_copy_script_layout(self, tmp_path):
        output = tmp_path / "copy.sql"
        with CopyCommandWriter(output, batch_size=2) as writer:
            for reading in make_readings(3):
                writer.accept(reading)

        lines = output.read_text().splitlines()
        assert lines[0] == "COPY meter_readings (nmi, timestamp, consumption) FROM STDIN WITH (FORMAT CSV);"
        assert lines[-1] == "\\."
        rows = list(csv.reader(lines[1:-1]))
        assert rows == [
            ["NEM1201009", "2024-01-01 00:00:00", "0.5"],
            ["NEM1201009", "2024-01-01 00:30:00", "1.5"],
            ["NEM1201009", "2024-01-01 01:00:00", "2.5"],
        ]

    def test_empty_input_writes_nothing(self, tmp_path):
        output = tmp_path / "copy.sql"
        CopyCommandWriter(output).close()
        assert output.read_text() == ""


class TestMeterReadingWriter:
    """Tests for the warehouse writer with a mocked pool"""

    def test_converts_to_utc_and_batches(self):
        pool, conn, cursor = mock_pool(rowcount=2)
        metrics = MagicMock()
        writer = MeterReadingWriter(pool, batch_size=2, metrics=metrics)

        reading = MeterReading(nmi="N1", timestamp=datetime(2024, 1, 1, 11, 0), consumption=Decimal("1.5"))
        writer.accept(reading)
        writer.accept(reading.model_copy(update={"timestamp": datetime(2024, 7, 1, 10, 0)}))

        sql, rows = cursor.executemany.call_args[0]
        assert "ON CONFLICT (nmi, timestamp) DO NOTHING" in sql
        # AEDT (UTC+11) in January, AEST (UTC+10) in July
        assert rows[0][1:] == ("N1", datetime(2024, 1, 1, 0, 0), Decimal("1.5"))
        assert rows[1][2] == datetime(2024, 7, 1, 0, 0)
        conn.commit.assert_called_once()
        metrics.record_warehouse_write.assert_called_once_with("meter_readings", 2)
        assert writer.rows_inserted == 2

    def test_rolls_back_and_raises_on_error(self):
        pool, conn, cursor = mock_pool()
        cursor.executemany.side_effect = RuntimeError("insert failed")
        writer = MeterReadingWriter(pool, batch_size=1)

        with pytest.raises(RuntimeError, match="insert failed"):
            writer.accept(make_readings(1)[0])

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_nothing_written_until_batch_full(self):
        pool, conn, cursor = mock_pool()
        writer = MeterReadingWriter(pool, batch_size=5)
        writer.accept(make_readings(1)[0])

        cursor.executemany.assert_not_called()
        writer.flush()
        cursor.executemany.assert_called_once()


class TestFailureReadingWriter:
    """Tests for the failure table writer with a mocked pool"""

    def test_saves_and_counts(self):
        pool, conn, cursor = mock_pool()
        writer = FailureReadingWriter(pool, batch_size=10)
        writer.save(FailureRecord(line_number=3, nmi="N1", raw_value="20241301", reason=FailureReason.INVALID_DATE_FORMAT))
        writer.save(FailureRecord(
            line_number=4,
            nmi="N1",
            interval_index=0,
            raw_value="",
            reason=FailureReason.EMPTY_VALUE,
            timestamp=datetime(2024, 1, 1, 11, 0),
        ))
        writer.close()

        rows = cursor.executemany.call_args[0][1]
        assert rows[0][1:] == (3, "N1", None, "20241301", "INVALID_DATE_FORMAT", None)
        assert rows[1][6] == datetime(2024, 1, 1, 0, 0)
        assert writer.get_statistics() == {
            FailureReason.INVALID_DATE_FORMAT: 1,
            FailureReason.EMPTY_VALUE: 1,
        }
