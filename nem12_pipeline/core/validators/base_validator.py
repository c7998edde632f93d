"""
Base validator interface for NEM12 field validation.

All validators inherit from BaseValidator and implement validate(), which
returns the parsed value or raises ValidationError carrying a FailureReason.
"""

from abc import ABC, abstractmethod
from typing import Any

from nem12_pipeline.core.models import FailureReason


class ValidationError(Exception):
    """Raised when a field value fails validation."""

    def __init__(self, reason: FailureReason, field_name: str, message: str):
        self.reason = reason
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{reason.value}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    Abstract base class for field validators.

    Each validator checks one kind of NEM12 field (interval date,
    header datetime, consumption value).
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            field_name: Name of the field to validate (used in error messages)
            parameters: Validator-specific parameters
        """
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: str) -> Any:
        """
        Validate and parse a raw field value.

        Args:
            value: The raw field text

        Returns:
            The parsed value

        Raises:
            ValidationError: If validation fails
        """
        pass

    def is_valid(self, value: str) -> bool:
        try:
            self.validate(value)
        except ValidationError:
            return False
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"
