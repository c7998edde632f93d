"""
Buffered batch writer base class.

Subclasses implement _write_batch(); buffering, flush and close are shared.
"""

from abc import ABC, abstractmethod
from typing import Any

from nem12_pipeline.observability.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 50


class BatchWriter(ABC):
    """
    Buffers entities and writes them in batches of ``batch_size``.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Initialize batch writer.

        Args:
            batch_size: Entities per batch (must be positive)
        """
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        self.batch_size = batch_size
        self._buffer: list[Any] = []
        self.total_written = 0
        self.batches_written = 0

    def save(self, entity: Any) -> None:
        self._buffer.append(entity)
        if len(self._buffer) >= self.batch_size:
            self._flush_buffer()

    def flush(self) -> None:
        """Write any buffered entities."""
        if self._buffer:
            self._flush_buffer()

    def close(self) -> None:
        self.flush()
        logger.info(
            f"{type(self).__name__} closed: {self.total_written} rows in {self.batches_written} batches"
        )

    def _flush_buffer(self) -> None:
        batch, self._buffer = self._buffer, []
        self._write_batch(batch)
        self.total_written += len(batch)
        self.batches_written += 1
        logger.debug(f"{type(self).__name__} wrote batch of {len(batch)}")

    @abstractmethod
    def _write_batch(self, batch: list[Any]) -> None:
        """
        Write one batch.

        Raises:
            Exception: Propagated to the caller; the batch is not retried
        """
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
