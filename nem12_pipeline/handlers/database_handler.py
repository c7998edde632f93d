"""
Failure handler that persists failures to the warehouse.
"""

from nem12_pipeline.batch.writers.failure_writer import FailureReadingWriter
from nem12_pipeline.core.models import FailureReason, FailureRecord

from .base import FailureHandler


class DatabaseFailureHandler(FailureHandler):
    """
    Forwards failures to a FailureReadingWriter, which batches inserts
    into the failed_readings table.
    """

    def __init__(self, writer: FailureReadingWriter):
        self.writer = writer

    def report(self, failure: FailureRecord) -> None:
        self.writer.save(failure)

    def statistics(self) -> dict[FailureReason, int]:
        return self.writer.get_statistics()

    def close(self) -> None:
        self.writer.close()
