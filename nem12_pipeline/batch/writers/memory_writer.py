"""
In-memory reading sink for tests and dry runs.
"""

from nem12_pipeline.core.models import MeterReading
from nem12_pipeline.core.sinks import ReadingSink


class InMemoryReadingWriter(ReadingSink):
    """Collects accepted readings in a list."""

    def __init__(self):
        self.readings: list[MeterReading] = []
        self.flush_count = 0

    def accept(self, reading: MeterReading) -> None:
        self.readings.append(reading)

    def flush(self) -> None:
        self.flush_count += 1
