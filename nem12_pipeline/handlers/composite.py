"""
Composite failure handler that fans out to several handlers.
"""

from nem12_pipeline.core.models import FailureReason, FailureRecord
from nem12_pipeline.observability.logger import get_logger

from .base import FailureHandler
from .statistics import FailureStatistics

logger = get_logger(__name__)


class CompositeFailureHandler(FailureHandler):
    """
    Delegates every failure to multiple handlers (e.g. database + logging).

    Statistics are counted here before delegation, so a handler that
    raises never loses the count nor blocks the handlers after it.
    """

    def __init__(self, *handlers: FailureHandler):
        """
        Initialize composite handler.

        Args:
            *handlers: Handlers to delegate to, in order
        """
        self.handlers = list(handlers)
        self._statistics = FailureStatistics()
        self.handler_errors = 0

    def report(self, failure: FailureRecord) -> None:
        self._statistics.report(failure)

        for handler in self.handlers:
            try:
                handler.report(failure)
            except Exception as e:
                self.handler_errors += 1
                logger.error(
                    f"Error in handler {type(handler).__name__} for line {failure.line_number}: {e}",
                    exc_info=True,
                )

    def statistics(self) -> dict[FailureReason, int]:
        return self._statistics.statistics()

    def close(self) -> None:
        for handler in self.handlers:
            try:
                handler.close()
            except Exception as e:
                logger.error(f"Error closing handler {type(handler).__name__}: {e}", exc_info=True)
