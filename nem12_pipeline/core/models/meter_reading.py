"""
MeterReading model representing one accepted interval measurement.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class MeterReading(BaseModel):
    """
    A single interval reading, immutable once decoded.

    Attributes:
        nmi: National Metering Identifier of the block
        timestamp: Interval end time (NEM local time, minute resolution)
        consumption: Exact consumption value, 15.4 fixed-point
    """

    nmi: str = Field(..., min_length=1)
    timestamp: datetime
    consumption: Decimal

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "nmi": "NEM1201009",
                "timestamp": "2005-03-01T00:30:00",
                "consumption": "0.461",
            }
        }
