"""
Unit tests for the 300 record decoder.

Includes property-based testing with hypothesis for decoder idempotence.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from nem12_pipeline.core.models import FailureReason
from nem12_pipeline.core.parser import IntervalRecordDecoder
from nem12_pipeline.handlers import FailureStatistics

NMI = "NEM1201009"


class TestIntervalRecordDecoder:
    """Tests for IntervalRecordDecoder"""

    def test_full_thirty_minute_day(self, recording_sink, interval_line):
        """Test a fully populated 30 minute record yields 48 end-boundary readings"""
        decoder = IntervalRecordDecoder(recording_sink)
        readings = decoder.decode(interval_line(["0.461"] * 48), NMI, 30, 3)

        assert len(readings) == 48
        assert readings[0].timestamp == datetime(2024, 1, 1, 0, 30)
        assert readings[46].timestamp == datetime(2024, 1, 1, 23, 30)
        assert readings[47].timestamp == datetime(2024, 1, 2, 0, 0)
        for earlier, later in zip(readings, readings[1:]):
            assert later.timestamp - earlier.timestamp == timedelta(minutes=30)
        assert all(r.nmi == NMI and r.consumption == Decimal("0.461") for r in readings)
        assert recording_sink.failures == []

    def test_fifteen_minute_day(self, recording_sink, interval_line):
        decoder = IntervalRecordDecoder(recording_sink)
        readings = decoder.decode(interval_line(["1"] * 96), NMI, 15, 3)

        assert len(readings) == 96
        assert readings[-1].timestamp == datetime(2024, 1, 2, 0, 0)

    def test_blank_value_is_skipped_and_reported(self, recording_sink, interval_line):
        """Test a blank value produces one EMPTY_VALUE with slot index and timestamp"""
        values = ["0.5"] * 48
        values[3] = ""
        decoder = IntervalRecordDecoder(recording_sink)

        readings = decoder.decode(interval_line(values), NMI, 30, 7)

        assert len(readings) == 47
        assert datetime(2024, 1, 1, 2, 0) not in [r.timestamp for r in readings]
        assert len(recording_sink.failures) == 1
        failure = recording_sink.failures[0]
        assert failure.reason == FailureReason.EMPTY_VALUE
        assert failure.interval_index == 3
        assert failure.timestamp == datetime(2024, 1, 1, 2, 0)
        assert failure.line_number == 7
        assert failure.nmi == NMI
        assert failure.raw_value == ""

    def test_each_bad_value_classified(self, recording_sink, interval_line):
        """Test non-numeric, negative and format failures in one record"""
        values = ["0.5"] * 48
        values[0] = "A"
        values[1] = "N/A"
        values[2] = "-1"
        values[3] = "123.12345"
        values[4] = "0"
        values[5] = "0.00"
        decoder = IntervalRecordDecoder(recording_sink)

        readings = decoder.decode(interval_line(values), NMI, 30, 3)

        assert len(readings) == 44
        assert [(f.interval_index, f.reason) for f in recording_sink.failures] == [
            (0, FailureReason.NON_NUMERIC_VALUE),
            (1, FailureReason.NON_NUMERIC_VALUE),
            (2, FailureReason.NEGATIVE_VALUE),
            (3, FailureReason.INVALID_CONSUMPTION_FORMAT),
        ]
        assert readings[0].consumption == Decimal(0)
        assert readings[0].timestamp == datetime(2024, 1, 1, 2, 30)

    def test_slot_count_mismatch_rejects_record(self, recording_sink, interval_line):
        """Test 47 values on a 30 minute day rejects the whole record"""
        decoder = IntervalRecordDecoder(recording_sink)
        line = interval_line(["0.5"] * 47)

        result = decoder.decode_record(line, NMI, 30, 3)

        assert result.readings == []
        assert result.rejected_reason == FailureReason.INTERVAL_COUNT_MISMATCH
        assert "Expected 48" in result.message
        failure = recording_sink.failures[0]
        assert failure.reason == FailureReason.INTERVAL_COUNT_MISMATCH
        assert failure.interval_index is None
        assert failure.timestamp is None
        assert failure.raw_value == line

    def test_too_many_values_rejects_record(self, recording_sink, interval_line):
        decoder = IntervalRecordDecoder(recording_sink)
        assert decoder.decode(interval_line(["0.5"] * 49), NMI, 30, 3) == []
        assert recording_sink.statistics() == {FailureReason.INTERVAL_COUNT_MISMATCH: 1}

    def test_insufficient_fields(self, recording_sink):
        decoder = IntervalRecordDecoder(recording_sink)
        result = decoder.decode_record("300,20240101,1", NMI, 30, 3)

        assert result.readings == []
        assert result.rejected_reason == FailureReason.INVALID_FIELDS
        assert recording_sink.statistics() == {FailureReason.INVALID_FIELDS: 1}

    def test_invalid_date_rejects_record(self, recording_sink, interval_line):
        """Test a bad interval date is reported without index or timestamp"""
        decoder = IntervalRecordDecoder(recording_sink)
        result = decoder.decode_record(interval_line(["0.5"] * 48, interval_date="20240230"), NMI, 30, 3)

        assert result.readings == []
        assert result.rejected_reason == FailureReason.INVALID_DATE_FORMAT
        failure = recording_sink.failures[0]
        assert failure.raw_value == "20240230"
        assert failure.interval_index is None
        assert failure.timestamp is None

    def test_count_mismatch_checked_before_date(self, recording_sink, interval_line):
        decoder = IntervalRecordDecoder(recording_sink)
        result = decoder.decode_record(interval_line(["0.5"] * 10, interval_date="bad"), NMI, 30, 3)
        assert result.rejected_reason == FailureReason.INTERVAL_COUNT_MISMATCH

    def test_sink_error_does_not_stop_decoding(self, interval_line):
        """Test a failing sink never aborts the remaining slots"""

        class ExplodingSink(FailureStatistics):
            def report(self, failure):
                raise RuntimeError("sink down")

        values = ["0.5"] * 48
        values[0] = "A"
        decoder = IntervalRecordDecoder(ExplodingSink())

        readings = decoder.decode(interval_line(values), NMI, 30, 3)

        assert len(readings) == 47

    def test_repeated_decode_is_identical(self, interval_line):
        values = ["0.5", "", "x", "-2"] + ["1.25"] * 44
        line = interval_line(values)
        first_sink, second_sink = FailureStatistics(), FailureStatistics()

        first = IntervalRecordDecoder(first_sink).decode(line, NMI, 30, 3)
        second = IntervalRecordDecoder(second_sink).decode(line, NMI, 30, 3)

        assert first == second
        assert first_sink.statistics() == second_sink.statistics()

    @settings(max_examples=50)
    @given(st.lists(st.sampled_from(["0", "0.5", "12.3456", "", "A", "-1", "1.23456", "9" * 16]), min_size=48, max_size=48))
    def test_property_decode_is_idempotent(self, values):
        """Property test: same line, same inputs -> same readings and failures"""
        line = ",".join(["300", "20240101", *values, "A", "", "", "", ""])
        first_sink, second_sink = FailureStatistics(), FailureStatistics()

        first = IntervalRecordDecoder(first_sink).decode(line, NMI, 30, 3)
        second = IntervalRecordDecoder(second_sink).decode(line, NMI, 30, 3)

        assert first == second
        assert first_sink.statistics() == second_sink.statistics()
        assert len(first) + first_sink.total == 48
        assert [r.timestamp for r in first] == sorted(r.timestamp for r in first)
