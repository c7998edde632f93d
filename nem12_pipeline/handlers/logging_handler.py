"""
Failure handler that logs each failure.
"""

from nem12_pipeline.core.models import FailureReason, FailureRecord
from nem12_pipeline.observability.logger import get_logger

from .base import FailureHandler
from .statistics import FailureStatistics

logger = get_logger(__name__)


class LoggingFailureHandler(FailureHandler):
    """
    Logs failures at WARNING level without persisting them.
    """

    def __init__(self):
        self._statistics = FailureStatistics()

    def report(self, failure: FailureRecord) -> None:
        message = f"Parsing failure - Line {failure.line_number} {failure.reason.value} (NMI: {failure.nmi}"
        if failure.interval_index is not None:
            message += f", Interval: {failure.interval_index}"
        if failure.timestamp is not None:
            message += f", Time: {failure.timestamp.isoformat()}"
        message += f", Raw: '{failure.raw_value}')"

        logger.warning(
            message,
            extra={
                "line_number": failure.line_number,
                "nmi": failure.nmi,
                "reason": failure.reason.value,
            },
        )
        self._statistics.report(failure)

    def statistics(self) -> dict[FailureReason, int]:
        return self._statistics.statistics()

    def close(self) -> None:
        if self._statistics.total:
            logger.info(f"Logging handler closed. Total failures: {self._statistics.total}")
