"""
In-memory failure statistics.
"""

from collections import Counter

from nem12_pipeline.core.models import FailureReason, FailureRecord

from .base import FailureHandler


class FailureStatistics(FailureHandler):
    """
    Counts reported failures by reason.

    A pure fold over the reported records, independent of where else the
    failures go. Also usable as a standalone failure sink.
    """

    def __init__(self):
        self._counts: Counter = Counter()

    def report(self, failure: FailureRecord) -> None:
        self._counts[failure.reason] += 1

    def statistics(self) -> dict[FailureReason, int]:
        return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())
