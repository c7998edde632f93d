"""
Pytest configuration and fixtures for nem12-pipeline tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from nem12_pipeline.batch.writers import InMemoryReadingWriter
from nem12_pipeline.handlers import FailureStatistics

HEADER_LINE = "100,NEM12,202401011200,MDPUPLOAD,RETAILER"
BLOCK_END_LINE = "500,O,S01009,20240103120000,"
FILE_END_LINE = "900"
INTERVAL_TRAILER = ["A", "", "", "20240102120000", "20240102120000"]


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# NEM12 LINE BUILDERS
# =======================

def make_nmi_line(nmi: str = "NEM1201009", interval_minutes: int | str = 30) -> str:
    return f"200,{nmi},E1E2,1,E1,N1,01009,kWh,{interval_minutes},20240101"


def make_interval_line(values: list[str], interval_date: str = "20240101") -> str:
    return ",".join(["300", interval_date, *values, *INTERVAL_TRAILER])


def make_file_lines(*blocks: list[str], file_end: bool = True) -> list[str]:
    lines = [HEADER_LINE]
    for block in blocks:
        lines.extend(block)
    if file_end:
        lines.append(FILE_END_LINE)
    return lines


@pytest.fixture
def nmi_line() -> Callable[..., str]:
    """Factory for 200 records"""
    return make_nmi_line


@pytest.fixture
def interval_line() -> Callable[..., str]:
    """Factory for 300 records from a list of raw values"""
    return make_interval_line


@pytest.fixture
def valid_block() -> Callable[..., list[str]]:
    """
    Factory for a complete 200/300/500 block

    Returns:
        Function (nmi, interval_minutes, value) -> block lines
    """
    def _block(nmi: str = "NEM1201009", interval_minutes: int = 30, value: str = "0.5") -> list[str]:
        slots = 1440 // interval_minutes
        return [
            make_nmi_line(nmi, interval_minutes),
            make_interval_line([value] * slots),
            BLOCK_END_LINE,
        ]
    return _block


@pytest.fixture
def nem12_file(tmp_path) -> Callable[..., Path]:
    """
    Factory writing NEM12 lines to a temporary file

    Returns:
        Function (lines, name) -> path of the written file
    """
    def _write(lines: list[str], name: str = "input.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


# =======================
# SINK FIXTURES
# =======================

@pytest.fixture
def reading_sink() -> InMemoryReadingWriter:
    return InMemoryReadingWriter()


@pytest.fixture
def failure_sink() -> FailureStatistics:
    return FailureStatistics()


class RecordingFailureSink(FailureStatistics):
    """FailureStatistics that also keeps every reported record"""

    def __init__(self):
        super().__init__()
        self.failures = []

    def report(self, failure):
        super().report(failure)
        self.failures.append(failure)


@pytest.fixture
def recording_sink() -> RecordingFailureSink:
    return RecordingFailureSink()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Skips the requesting tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_nem12",
        password="test_password",
        dbname="test_nem12",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker not available for PostgreSQL container: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator:
    """
    Open a DatabaseConnectionPool against the test container with a clean schema

    Yields:
        Open DatabaseConnectionPool
    """
    from nem12_pipeline.warehouse.connection import DatabaseConnectionPool
    from nem12_pipeline.warehouse.schema_mgmt import SchemaManager

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_nem12",
        user="test_nem12",
        password="test_password",
    )
    pool.open()
    SchemaManager(pool).ensure_schema()
    pool.execute_command("TRUNCATE TABLE meter_readings, failed_readings")

    yield pool

    pool.close()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")
