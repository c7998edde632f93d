"""
Base interface for failure handlers.
"""

from abc import abstractmethod

from nem12_pipeline.core.models import FailureReason, FailureRecord
from nem12_pipeline.core.sinks import FailureSink


class FailureHandler(FailureSink):
    """
    A failure sink that owns resources and can be closed.

    Implementations decide what happens to each failure (persist, log,
    count); the parser only calls report().
    """

    @abstractmethod
    def report(self, failure: FailureRecord) -> None:
        pass

    @abstractmethod
    def statistics(self) -> dict[FailureReason, int]:
        pass

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
