"""
Field validators for NEM12 records.

Provides validators for interval dates, header datetimes and consumption values.
"""

from .base_validator import BaseValidator, ValidationError
from .consumption_validator import ConsumptionValidator
from .date_validator import (
    DateTimeValidator,
    DateValidator,
    parse_interval_date,
)

__all__ = [
    "BaseValidator",
    "ValidationError",
    "ConsumptionValidator",
    "DateValidator",
    "DateTimeValidator",
    "parse_interval_date",
]
