"""
Batch processing pipeline orchestration.

Coordinates the flow: read lines -> state machine scan -> reading sink /
failure handler -> result summary
"""

from pathlib import Path
from typing import Any

from nem12_pipeline.batch.readers import NEM12FileReader
from nem12_pipeline.config import ParserSettings
from nem12_pipeline.core.parser import IntervalRecordDecoder, NEM12StateMachine, ParseError
from nem12_pipeline.core.sinks import ReadingSink
from nem12_pipeline.handlers import CompositeFailureHandler, FailureHandler
from nem12_pipeline.observability.logger import get_logger, log_operation
from nem12_pipeline.observability.metrics import MetricsCollector

logger = get_logger(__name__)


class BatchPipeline:
    """
    Parses one NEM12 file per call into the configured sinks.

    Flow:
    1. Read lines from a plain or zipped file
    2. Run the state machine over every line
    3. Stream accepted readings to the reading sink
    4. Report rejected values to the failure handler
    5. Flush the reading sink and summarize
    """

    def __init__(
        self,
        reading_sink: ReadingSink,
        failure_handler: FailureHandler,
        settings: ParserSettings | None = None,
        metrics: MetricsCollector | None = None,
        reader: NEM12FileReader | None = None,
    ):
        """
        Initialize batch pipeline.

        Args:
            reading_sink: Destination for accepted readings
            failure_handler: Destination for rejected values
            settings: Parser settings (defaults apply if omitted)
            metrics: Optional metrics collector
            reader: Line source (plain/ZIP reader if omitted)
        """
        self.reading_sink = reading_sink
        self.settings = settings or ParserSettings()
        self.metrics = metrics
        self.reader = reader or NEM12FileReader()

        self.failure_handler = failure_handler

    def process_file(self, file_path: str | Path) -> dict[str, Any]:
        """
        Process a file through the complete pipeline.

        Args:
            file_path: Path to a NEM12 file (plain text or ZIP)

        Returns:
            Dictionary with processing results:
            - lines_processed: Lines read, including blank ones
            - readings_accepted: Readings sent to the reading sink
            - failures: Failure counts keyed by reason name
            - records_rejected: Whole 300 records rejected (lenient mode)
            - nmi_blocks: Number of 200 records
            - duration_seconds: Wall time of the parse

        Raises:
            FileNotFoundError: If the input does not exist
            ParseError: On a fatal structural error
        """
        # A fresh composite per file: its statistics count this file only,
        # whatever the wrapped handler has seen before
        failure_sink = CompositeFailureHandler(self.failure_handler)
        state_machine = NEM12StateMachine(
            reading_sink=self.reading_sink,
            failure_sink=failure_sink,
            decoder=IntervalRecordDecoder(failure_sink),
            strict_structure=self.settings.strict_structure,
        )

        try:
            with log_operation("Parsing NEM12 file", logger=logger, input_path=str(file_path)) as op:
                state = state_machine.scan(self.reader.lines(file_path))
                self.reading_sink.flush()
        except ParseError:
            if self.metrics:
                self.metrics.record_file_failed("parse_error")
            raise
        except Exception:
            if self.metrics:
                self.metrics.record_file_failed("error")
            raise

        failures = failure_sink.statistics()
        if self.metrics:
            self.metrics.record_file_parsed(
                lines_processed=state.line_number,
                readings_accepted=state.readings_accepted,
                failures=failures,
                duration_seconds=op.duration,
            )

        return {
            "lines_processed": state.line_number,
            "readings_accepted": state.readings_accepted,
            "failures": {reason.value: count for reason, count in failures.items()},
            "records_rejected": sum(count for reason, count in failures.items() if reason.is_record_level),
            "nmi_blocks": state.nmi_blocks,
            "duration_seconds": op.duration,
        }
