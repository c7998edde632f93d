"""
Failure handlers: destinations for classified parse failures.
"""

from .base import FailureHandler
from .composite import CompositeFailureHandler
from .logging_handler import LoggingFailureHandler
from .statistics import FailureStatistics

__all__ = [
    "FailureHandler",
    "FailureStatistics",
    "LoggingFailureHandler",
    "CompositeFailureHandler",
]
