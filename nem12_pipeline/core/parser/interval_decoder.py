"""
Decoder for NEM12 interval data (300) records.

Expands one 300 record into timestamped readings. Bad individual values are
reported to the failure sink and skipped; only structural problems
(too few fields, wrong slot count, bad interval date) reject the record.

Record layout:
    300,IntervalDate,Value1,...,ValueN,QualityMethod,ReasonCode,
        ReasonDescription,UpdateDateTime,MSATSLoadDateTime
"""

from datetime import date
from typing import NamedTuple

from nem12_pipeline.core.models import FailureReason, FailureRecord, MeterReading
from nem12_pipeline.core.sinks import FailureSink
from nem12_pipeline.core.validators import (
    ConsumptionValidator,
    ValidationError,
    parse_interval_date,
)
from nem12_pipeline.observability.logger import get_logger

from .timestamp import TimestampCalculator, expected_slot_count

logger = get_logger(__name__)

# Record indicator, interval date and five trailing quality/metadata fields
FIXED_FIELD_COUNT = 7
# Record indicator, interval date, at least one value, quality method
MIN_FIELD_COUNT = 4


class DecodeResult(NamedTuple):
    """Outcome of decoding one 300 record."""

    readings: list[MeterReading]
    # Set when the whole record was rejected
    rejected_reason: FailureReason | None = None
    message: str | None = None


class IntervalRecordDecoder:
    """
    Decodes 300 records into MeterReading values.

    The decoder holds no per-file state; decoding the same line with the
    same arguments always yields the same readings and failures.
    """

    def __init__(
        self,
        failure_sink: FailureSink,
        timestamp_calculator: TimestampCalculator | None = None,
        consumption_validator: ConsumptionValidator | None = None,
    ):
        """
        Initialize decoder.

        Args:
            failure_sink: Receives every rejected value or record
            timestamp_calculator: Slot timestamp calculator
            consumption_validator: Classifier for raw interval values
        """
        self.failure_sink = failure_sink
        self.timestamp_calculator = timestamp_calculator or TimestampCalculator()
        self.consumption_validator = consumption_validator or ConsumptionValidator()

    def decode(self, line: str, nmi: str, interval_minutes: int, line_number: int) -> list[MeterReading]:
        """
        Decode a 300 record into readings.

        Args:
            line: Raw 300 record
            nmi: NMI of the enclosing block
            interval_minutes: Interval length declared by the 200 record
            line_number: 1-based line number of the record

        Returns:
            Accepted readings in slot order
        """
        return self.decode_record(line, nmi, interval_minutes, line_number).readings

    def decode_record(self, line: str, nmi: str, interval_minutes: int, line_number: int) -> DecodeResult:
        """Decode a 300 record, also reporting whether the record was rejected."""
        fields = line.split(",")
        slots = expected_slot_count(interval_minutes)

        if len(fields) < MIN_FIELD_COUNT:
            return self._reject_record(
                FailureReason.INVALID_FIELDS,
                f"Invalid 300 record: insufficient fields ({len(fields)} < {MIN_FIELD_COUNT})",
                line, nmi, line_number,
            )

        if len(fields) != slots + FIXED_FIELD_COUNT:
            return self._reject_record(
                FailureReason.INTERVAL_COUNT_MISMATCH,
                (
                    f"Expected {slots} interval values for {interval_minutes} minute intervals, "
                    f"found {len(fields) - FIXED_FIELD_COUNT}"
                ),
                line, nmi, line_number,
            )

        try:
            interval_date = parse_interval_date(fields[1])
        except ValidationError as e:
            return self._reject_record(e.reason, e.message, fields[1], nmi, line_number)

        readings = []
        for index in range(slots):
            reading = self._decode_slot(
                fields[index + 2], index, interval_date, nmi, interval_minutes, line_number
            )
            if reading is not None:
                readings.append(reading)

        logger.debug(f"Line {line_number}: decoded {len(readings)}/{slots} readings for NMI {nmi}")
        return DecodeResult(readings)

    def _decode_slot(
        self,
        raw_value: str,
        index: int,
        interval_date: date,
        nmi: str,
        interval_minutes: int,
        line_number: int,
    ) -> MeterReading | None:
        # The timestamp depends only on date and index, so rejected slots carry it too
        timestamp = self.timestamp_calculator.calculate(interval_date, interval_minutes, index)

        try:
            consumption = self.consumption_validator.validate(raw_value)
        except ValidationError as e:
            self._report(FailureRecord(
                line_number=line_number,
                nmi=nmi,
                interval_index=index,
                raw_value=raw_value,
                reason=e.reason,
                timestamp=timestamp,
            ))
            return None

        return MeterReading(nmi=nmi, timestamp=timestamp, consumption=consumption)

    def _reject_record(
        self,
        reason: FailureReason,
        message: str,
        raw_value: str,
        nmi: str,
        line_number: int,
    ) -> DecodeResult:
        logger.warning(f"Line {line_number}: rejected 300 record for NMI {nmi}: {message}")
        self._report(FailureRecord(
            line_number=line_number,
            nmi=nmi,
            raw_value=raw_value,
            reason=reason,
        ))
        return DecodeResult(readings=[], rejected_reason=reason, message=message)

    def _report(self, failure: FailureRecord) -> None:
        try:
            self.failure_sink.report(failure)
        except Exception as e:
            logger.error(
                f"Failure sink {type(self.failure_sink).__name__} raised while reporting "
                f"line {failure.line_number}: {e}",
                exc_info=True,
            )
