"""
Core data models for the NEM12 pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .failure_record import FailureReason, FailureRecord
from .meter_reading import MeterReading
from .parser_state import ParserState
from .record_type import RecordType

__all__ = [
    "RecordType",
    "ParserState",
    "MeterReading",
    "FailureRecord",
    "FailureReason",
]
