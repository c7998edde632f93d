"""
Batch data sink writers.
"""

from .base import DEFAULT_BATCH_SIZE, BatchWriter
from .memory_writer import InMemoryReadingWriter
from .sql_file_writer import BatchInsertWriter, CopyCommandWriter

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "BatchWriter",
    "InMemoryReadingWriter",
    "BatchInsertWriter",
    "CopyCommandWriter",
]
