"""
Interval timestamp calculation.
"""

from datetime import date, datetime, time, timedelta

MINUTES_PER_DAY = 24 * 60


class TimestampCalculator:
    """
    Maps (date, interval length, slot index) to an absolute timestamp.

    Intervals are labelled by their end boundary: slot 0 of a 30 minute day
    is 00:30 and slot 47 is 00:00 of the following day.

    Examples:
        calculate(2005-03-01, 30, 0)  -> 2005-03-01 00:30
        calculate(2005-03-01, 30, 46) -> 2005-03-01 23:30
        calculate(2005-03-01, 30, 47) -> 2005-03-02 00:00
    """

    def calculate(self, interval_date: date, interval_minutes: int, index: int) -> datetime:
        total_minutes = interval_minutes * (index + 1)
        day_overflow, minute_of_day = divmod(total_minutes, MINUTES_PER_DAY)
        hours, minutes = divmod(minute_of_day, 60)

        return datetime.combine(
            interval_date + timedelta(days=day_overflow),
            time(hours, minutes),
        )


def expected_slot_count(interval_minutes: int) -> int:
    """
    Number of slots in one day.

    Raises:
        ValueError: If interval_minutes is not a positive divisor of 1440
    """
    if interval_minutes <= 0 or MINUTES_PER_DAY % interval_minutes:
        raise ValueError(
            f"Interval length must be a positive divisor of {MINUTES_PER_DAY}, found {interval_minutes}"
        )
    return MINUTES_PER_DAY // interval_minutes
