"""
NEM12 parsing: state machine, interval decoder and timestamp calculation.
"""

from .exceptions import ParseError
from .interval_decoder import DecodeResult, IntervalRecordDecoder
from .state_machine import NEM12StateMachine
from .timestamp import MINUTES_PER_DAY, TimestampCalculator, expected_slot_count

__all__ = [
    "ParseError",
    "DecodeResult",
    "IntervalRecordDecoder",
    "NEM12StateMachine",
    "TimestampCalculator",
    "MINUTES_PER_DAY",
    "expected_slot_count",
]
