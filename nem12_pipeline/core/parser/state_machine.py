"""
NEM12 block-structure state machine.

Drives a single forward pass over a file's lines:

    Start --100--> OutsideBlock --200--> InsideBlock --500--> OutsideBlock
                                         InsideBlock --300--> InsideBlock
    any --900--> end of data

Structural violations raise ParseError and invalidate the whole file.
Bad interval values inside an otherwise valid 300 record are reported to
the failure sink by the decoder and never stop the scan.
"""

from collections.abc import Iterable

from nem12_pipeline.core.models import ParserState, RecordType
from nem12_pipeline.core.sinks import FailureSink, ReadingSink
from nem12_pipeline.core.validators import DateTimeValidator, ValidationError
from nem12_pipeline.observability.logger import get_logger

from .exceptions import ParseError
from .interval_decoder import IntervalRecordDecoder
from .timestamp import MINUTES_PER_DAY, expected_slot_count

logger = get_logger(__name__)

HEADER_FIELD_COUNT = 5
NMI_DATA_MIN_FIELDS = 9
PARTICIPANT_MAX_LENGTH = 10
NMI_MAX_LENGTH = 10


class NEM12StateMachine:
    """
    Validates NEM12 block nesting and routes records to their handlers.

    The machine itself holds no scan state: every call receives the
    ParserState of the scan it belongs to.
    """

    def __init__(
        self,
        reading_sink: ReadingSink,
        failure_sink: FailureSink,
        decoder: IntervalRecordDecoder | None = None,
        strict_structure: bool = True,
    ):
        """
        Initialize state machine.

        Args:
            reading_sink: Receives accepted readings
            failure_sink: Receives rejected values and records
            decoder: 300 record decoder (built on failure_sink if omitted)
            strict_structure: Treat a rejected 300 record as fatal
        """
        self.reading_sink = reading_sink
        self.failure_sink = failure_sink
        self.decoder = decoder or IntervalRecordDecoder(failure_sink)
        self.strict_structure = strict_structure
        self.header_validator = DateTimeValidator("DateTime")

        self._handlers = {
            RecordType.HEADER: self._handle_header,
            RecordType.NMI_DATA: self._handle_nmi_data,
            RecordType.INTERVAL_DATA: self._handle_interval_data,
            RecordType.INTERVAL_EVENT: self._handle_interval_event,
            RecordType.B2B_DETAIL: self._handle_block_end,
            RecordType.FILE_END: self._handle_file_end,
        }

    def scan(self, lines: Iterable[str]) -> ParserState:
        """
        Run a complete scan over one file's lines.

        Args:
            lines: Lines of a single NEM12 file, in order

        Returns:
            The final ParserState of the scan

        Raises:
            ParseError: On the first fatal structural error
        """
        state = ParserState()
        for line in lines:
            self.process_line(line, state)
        self.finalize(state)
        return state

    def process_line(self, line: str, state: ParserState) -> None:
        """
        Process one line of the file.

        Each call counts as one line, blank or not; blank lines are skipped.

        Raises:
            ParseError: If the line violates the file structure
        """
        state.increment_line_number()
        line = line.strip()
        if not line:
            return

        try:
            record_type = RecordType.from_line(line)
        except ValueError as e:
            raise ParseError(state.line_number, str(e)) from e

        if state.file_end_seen:
            raise ParseError(
                state.line_number,
                f"Record {record_type.value} found after end of data (900) record",
            )

        if not state.header_seen and record_type is not RecordType.HEADER:
            raise ParseError(
                state.line_number,
                f"First record must be a header (100), found {record_type.value}",
            )

        self._handlers[record_type](line, state)

    def finalize(self, state: ParserState) -> None:
        """
        Check the end-of-scan invariants.

        Raises:
            ParseError: If no header was seen or an NMI block is still open
        """
        if not state.header_seen:
            raise ParseError(state.line_number, "File is empty or missing header (100) record")

        if state.inside_nmi_block:
            raise ParseError(
                state.line_number,
                f"File ended without closing NMI block {state.current_nmi} (missing 500 record)",
            )

        if not state.file_end_seen:
            logger.warning("Missing end of data (900) record")

        logger.info(
            f"Scan complete: {state.line_number} lines, {state.nmi_blocks} NMI blocks, "
            f"{state.readings_accepted} readings"
        )

    def _handle_header(self, line: str, state: ParserState) -> None:
        """
        Validate the 100 record.

        Format: 100,VersionHeader,DateTime,FromParticipant,ToParticipant
        """
        if state.line_number != 1:
            raise ParseError(state.line_number, "Header (100) must be the first line")

        fields = line.split(",")
        if len(fields) != HEADER_FIELD_COUNT:
            raise ParseError(
                state.line_number,
                f"Header must have exactly {HEADER_FIELD_COUNT} fields, found {len(fields)}",
            )

        record_indicator, version, date_time, from_participant, to_participant = fields

        if record_indicator != "100":
            raise ParseError(
                state.line_number,
                f"RecordIndicator must be '100', found '{record_indicator}'",
            )

        if version != "NEM12":
            raise ParseError(state.line_number, f"VersionHeader must be 'NEM12', found '{version}'")

        try:
            self.header_validator.validate(date_time)
        except ValidationError as e:
            raise ParseError(state.line_number, e.message) from e

        self._check_participant("FromParticipant", from_participant, state)
        self._check_participant("ToParticipant", to_participant, state)

        state.header_seen = True
        logger.info(
            f"Valid header: version={version}, dateTime={date_time}, "
            f"from={from_participant}, to={to_participant}"
        )

    def _check_participant(self, name: str, value: str, state: ParserState) -> None:
        if not value.strip() or len(value) > PARTICIPANT_MAX_LENGTH:
            raise ParseError(
                state.line_number,
                f"{name} must be 1-{PARTICIPANT_MAX_LENGTH} characters, "
                f"found '{value}' ({len(value)} chars)",
            )

    def _handle_nmi_data(self, line: str, state: ParserState) -> None:
        """
        Open an NMI block from a 200 record.

        Field 1 is the NMI, field 8 the interval length in minutes.
        """
        fields = line.split(",")
        if len(fields) < NMI_DATA_MIN_FIELDS:
            raise ParseError(
                state.line_number,
                f"Invalid 200 record: insufficient fields ({len(fields)} < {NMI_DATA_MIN_FIELDS})",
            )

        nmi = fields[1].strip()
        if not nmi or len(nmi) > NMI_MAX_LENGTH:
            raise ParseError(
                state.line_number,
                f"Invalid 200 record: NMI must be 1-{NMI_MAX_LENGTH} characters, found '{fields[1]}'",
            )

        try:
            interval_minutes = int(fields[8])
            expected_slot_count(interval_minutes)
        except ValueError as e:
            raise ParseError(
                state.line_number,
                f"Invalid 200 record: interval length '{fields[8]}' is not a positive "
                f"divisor of {MINUTES_PER_DAY}",
            ) from e

        if state.inside_nmi_block:
            logger.warning(
                f"Line {state.line_number}: NMI block {state.current_nmi} not closed by a 500 "
                f"record before new 200 record"
            )

        state.start_nmi_block(nmi, interval_minutes)
        logger.info(f"Started NMI block: {nmi} with interval {interval_minutes} minutes")

    def _handle_interval_data(self, line: str, state: ParserState) -> None:
        self._require_block(RecordType.INTERVAL_DATA, state)

        result = self.decoder.decode_record(
            line, state.current_nmi, state.interval_minutes, state.line_number
        )

        for reading in result.readings:
            self.reading_sink.accept(reading)
        state.readings_accepted += len(result.readings)

        if result.rejected_reason is not None and self.strict_structure:
            raise ParseError(
                state.line_number,
                f"Invalid 300 record ({result.rejected_reason.value}): {result.message}",
            )

    def _handle_interval_event(self, line: str, state: ParserState) -> None:
        # Event records qualify the preceding 300 record; readings are unaffected
        self._require_block(RecordType.INTERVAL_EVENT, state)
        logger.debug(f"Line {state.line_number}: interval event record for NMI {state.current_nmi}")

    def _handle_block_end(self, line: str, state: ParserState) -> None:
        self._require_block(RecordType.B2B_DETAIL, state)
        logger.debug(f"Ending NMI block {state.current_nmi} at line {state.line_number}")
        state.end_nmi_block()

    def _handle_file_end(self, line: str, state: ParserState) -> None:
        state.file_end_seen = True
        logger.info(f"Reached end of data at line {state.line_number}")

    def _require_block(self, record_type: RecordType, state: ParserState) -> None:
        if not state.inside_nmi_block:
            raise ParseError(
                state.line_number,
                f"{record_type.value} record found outside NMI block",
            )
