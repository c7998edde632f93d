"""
Sink interfaces consumed by the NEM12 parser.

The parser only knows these two capabilities; persistence, logging and
batching live behind them.
"""

from abc import ABC, abstractmethod

from nem12_pipeline.core.models import FailureReason, FailureRecord, MeterReading


class ReadingSink(ABC):
    """Receives accepted meter readings, one call per reading."""

    @abstractmethod
    def accept(self, reading: MeterReading) -> None:
        pass

    @abstractmethod
    def flush(self) -> None:
        """Write out anything buffered."""
        pass

    def close(self) -> None:
        self.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class FailureSink(ABC):
    """
    Receives classified failures.

    Implementations must not let their own errors propagate out of
    report(); decoding always continues with the next slot.
    """

    @abstractmethod
    def report(self, failure: FailureRecord) -> None:
        pass

    @abstractmethod
    def statistics(self) -> dict[FailureReason, int]:
        """Return failure counts grouped by reason."""
        pass
