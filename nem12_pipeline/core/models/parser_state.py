"""
ParserState model: the mutable cursor of one NEM12 file scan.
"""

from pydantic import BaseModel


class ParserState(BaseModel):
    """
    Cursor over a single file scan.

    A state is created per scan and owned by it; never share one between
    two files. ``inside_nmi_block`` is derived from ``current_nmi`` so the
    two can never disagree.

    Attributes:
        current_nmi: NMI of the open block, None outside a block
        interval_minutes: Interval length of the open block (0 outside)
        line_number: 1-based number of the line being processed
        header_seen: Whether the 100 record has been accepted
        file_end_seen: Whether a 900 record has been consumed
        nmi_blocks: Number of 200 records opened so far
        readings_accepted: Readings emitted to the reading sink
    """

    current_nmi: str | None = None
    interval_minutes: int = 0
    line_number: int = 0
    header_seen: bool = False
    file_end_seen: bool = False
    nmi_blocks: int = 0
    readings_accepted: int = 0

    @property
    def inside_nmi_block(self) -> bool:
        return self.current_nmi is not None

    def start_nmi_block(self, nmi: str, interval_minutes: int) -> None:
        self.current_nmi = nmi
        self.interval_minutes = interval_minutes
        self.nmi_blocks += 1

    def end_nmi_block(self) -> None:
        self.current_nmi = None
        self.interval_minutes = 0

    def increment_line_number(self) -> None:
        self.line_number += 1
