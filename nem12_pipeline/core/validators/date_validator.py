"""
Date and datetime validators for NEM12 fields.

NEM12 dates are ``YYYYMMDD`` (interval date, 300 record) and header
datetimes are ``YYYYMMDDHHmm`` (100 record). Both must be all digits of the
exact length and a real calendar value.
"""

from datetime import date, datetime

from nem12_pipeline.core.models import FailureReason

from .base_validator import BaseValidator, ValidationError

DATE_FORMAT = "%Y%m%d"
DATETIME_FORMAT = "%Y%m%d%H%M"


class DateValidator(BaseValidator):
    """Validates an 8 digit ``YYYYMMDD`` date."""

    def validate(self, value: str) -> date:
        if len(value) != 8 or not value.isdigit():
            raise ValidationError(
                reason=FailureReason.INVALID_DATE_FORMAT,
                field_name=self.field_name,
                message=f"Invalid date format: '{value}' (expected: yyyyMMdd)",
            )

        try:
            return datetime.strptime(value, DATE_FORMAT).date()
        except ValueError as e:
            raise ValidationError(
                reason=FailureReason.INVALID_DATE_FORMAT,
                field_name=self.field_name,
                message=f"Invalid calendar date: '{value}' ({e})",
            ) from e


class DateTimeValidator(BaseValidator):
    """Validates a 12 digit ``YYYYMMDDHHmm`` datetime."""

    def validate(self, value: str) -> datetime:
        if len(value) != 12 or not value.isdigit():
            raise ValidationError(
                reason=FailureReason.INVALID_DATE_FORMAT,
                field_name=self.field_name,
                message=f"DateTime must be 12 characters in YYYYMMDDHHmm format, found '{value}'",
            )

        try:
            return datetime.strptime(value, DATETIME_FORMAT)
        except ValueError as e:
            raise ValidationError(
                reason=FailureReason.INVALID_DATE_FORMAT,
                field_name=self.field_name,
                message=f"Invalid calendar datetime: '{value}' ({e})",
            ) from e


def parse_interval_date(value: str) -> date:
    """Parse a 300 record interval date, raising ValidationError on failure."""
    return DateValidator("interval_date").validate(value)
