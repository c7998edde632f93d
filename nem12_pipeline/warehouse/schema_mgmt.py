"""
Table definitions and schema management for the meter data warehouse.
"""

from nem12_pipeline.core.models import FailureReason

from .connection import DatabaseConnectionPool

CREATE_METER_READINGS_SQL = """
    CREATE TABLE IF NOT EXISTS meter_readings (
        id UUID PRIMARY KEY,
        nmi VARCHAR(10) NOT NULL,
        timestamp TIMESTAMP NOT NULL,
        consumption NUMERIC(19, 4) NOT NULL,
        UNIQUE (nmi, timestamp)
    )
"""

CREATE_FAILED_READINGS_SQL = """
    CREATE TABLE IF NOT EXISTS failed_readings (
        id UUID PRIMARY KEY,
        line_number INTEGER NOT NULL,
        nmi VARCHAR(10),
        interval_index INTEGER,
        raw_value TEXT NOT NULL,
        reason VARCHAR(32) NOT NULL,
        timestamp TIMESTAMP,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
"""

INSERT_METER_READING_SQL = """
    INSERT INTO meter_readings (id, nmi, timestamp, consumption)
    VALUES (%s, %s, %s, %s)
    ON CONFLICT (nmi, timestamp) DO NOTHING
"""

INSERT_FAILED_READING_SQL = """
    INSERT INTO failed_readings (id, line_number, nmi, interval_index, raw_value, reason, timestamp)
    VALUES (%s, %s, %s, %s, %s, %s, %s)
"""


class SchemaManager:
    """
    Creates the warehouse tables and answers summary queries over them.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def ensure_schema(self) -> None:
        """Create meter_readings and failed_readings if they do not exist."""
        self.pool.execute_command(CREATE_METER_READINGS_SQL)
        self.pool.execute_command(CREATE_FAILED_READINGS_SQL)

    def count_readings(self, nmi: str | None = None) -> int:
        if nmi:
            rows = self.pool.execute_query(
                "SELECT COUNT(*) AS count FROM meter_readings WHERE nmi = %s", (nmi,)
            )
        else:
            rows = self.pool.execute_query("SELECT COUNT(*) AS count FROM meter_readings")
        return rows[0]["count"]

    def failure_statistics(self) -> dict[FailureReason, int]:
        """
        Get persisted failure counts grouped by reason.

        Returns:
            Mapping of FailureReason to count; reasons never seen are omitted
        """
        rows = self.pool.execute_query(
            """
            SELECT reason, COUNT(*) AS count
            FROM failed_readings
            GROUP BY reason
            ORDER BY reason
            """
        )
        return {FailureReason(row["reason"]): row["count"] for row in rows}
