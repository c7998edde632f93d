"""
ConsumptionValidator - classifies a raw interval value.

Checks run in a fixed order so each rejected value maps to exactly one
FailureReason: blank, non-numeric, negative, then 15.4 format.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from nem12_pipeline.core.models import FailureReason

from .base_validator import BaseValidator, ValidationError

# Plain decimal literal: optional sign, digits with optional fraction, optional exponent.
# Rejects NaN, Infinity, embedded whitespace and digit separators.
DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

DEFAULT_MAX_INTEGER_DIGITS = 15
DEFAULT_MAX_SCALE = 4


class ConsumptionValidator(BaseValidator):
    """
    Validates a consumption value against the NEM12 15.4 format.

    Parameters:
        max_integer_digits: Digits allowed before the decimal point (default 15)
        max_scale: Digits allowed after the decimal point (default 4)
    """

    def __init__(self, field_name: str = "consumption", parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.max_integer_digits = self.parameters.get("max_integer_digits", DEFAULT_MAX_INTEGER_DIGITS)
        self.max_scale = self.parameters.get("max_scale", DEFAULT_MAX_SCALE)

    def validate(self, value: str) -> Decimal:
        """
        Parse and validate a consumption value.

        Args:
            value: Raw interval value text

        Returns:
            The exact Decimal value

        Raises:
            ValidationError: With the reason describing the first failed check
        """
        if not value.strip():
            raise ValidationError(
                reason=FailureReason.EMPTY_VALUE,
                field_name=self.field_name,
                message="Value is empty",
            )

        if not DECIMAL_PATTERN.match(value):
            raise ValidationError(
                reason=FailureReason.NON_NUMERIC_VALUE,
                field_name=self.field_name,
                message=f"'{value}' is not a decimal number",
            )

        try:
            consumption = Decimal(value)
        except InvalidOperation as e:
            raise ValidationError(
                reason=FailureReason.NON_NUMERIC_VALUE,
                field_name=self.field_name,
                message=f"'{value}' is not a decimal number",
            ) from e

        if consumption < 0:
            raise ValidationError(
                reason=FailureReason.NEGATIVE_VALUE,
                field_name=self.field_name,
                message=f"Negative consumption {value}",
            )

        if not self.is_valid_format(consumption):
            raise ValidationError(
                reason=FailureReason.INVALID_CONSUMPTION_FORMAT,
                field_name=self.field_name,
                message=(
                    f"'{value}' exceeds {self.max_integer_digits}.{self.max_scale} format"
                ),
            )

        # Negative zero would keep its sign in SQL output
        if consumption == 0:
            consumption = consumption.copy_abs()

        return consumption

    def is_valid_format(self, consumption: Decimal) -> bool:
        """
        Check the fixed-point bounds.

        Scale is the number of fractional digits as written (``1.10`` has
        scale 2); precision is the number of digits in the unscaled value.
        """
        sign, digits, exponent = consumption.as_tuple()
        scale = -exponent
        precision = len(digits)

        if scale > self.max_scale:
            return False

        return precision - scale <= self.max_integer_digits
