"""
FailureRecord model and the FailureReason taxonomy for rejected interval values.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class FailureReason(str, Enum):
    """
    Classification of a rejected value.

    Append-only: new failure causes get a new explicit member.
    """

    EMPTY_VALUE = "EMPTY_VALUE"
    NON_NUMERIC_VALUE = "NON_NUMERIC_VALUE"
    NEGATIVE_VALUE = "NEGATIVE_VALUE"
    # Consumption outside the 15.4 fixed-point format
    INVALID_CONSUMPTION_FORMAT = "INVALID_CONSUMPTION_FORMAT"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INTERVAL_COUNT_MISMATCH = "INTERVAL_COUNT_MISMATCH"
    INVALID_FIELDS = "INVALID_FIELDS"
    UNKNOWN = "UNKNOWN"

    @property
    def is_record_level(self) -> bool:
        """True for failures that reject a whole 300 record rather than one slot."""
        return self in _RECORD_LEVEL_REASONS


_RECORD_LEVEL_REASONS = frozenset({
    FailureReason.INVALID_FIELDS,
    FailureReason.INTERVAL_COUNT_MISMATCH,
    FailureReason.INVALID_DATE_FORMAT,
})


class FailureRecord(BaseModel):
    """
    A value (or record) rejected while decoding interval data.

    Attributes:
        line_number: 1-based line of the offending record
        nmi: NMI of the enclosing block (None before a block is open)
        interval_index: 0-based slot within the 300 record (None for
            record-level failures)
        raw_value: The offending raw text
        reason: Failure classification
        timestamp: Interval end timestamp of the slot (None when no
            timestamp could be computed, e.g. a bad interval date)
    """

    line_number: int = Field(..., ge=1)
    nmi: str | None = None
    interval_index: int | None = Field(None, ge=0)
    raw_value: str
    reason: FailureReason
    timestamp: datetime | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "line_number": 3,
                "nmi": "NEM1201009",
                "interval_index": 4,
                "raw_value": "N/A",
                "reason": "NON_NUMERIC_VALUE",
                "timestamp": "2005-03-01T02:30:00",
            }
        }
