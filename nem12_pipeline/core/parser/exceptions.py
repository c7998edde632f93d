"""
Fatal parse errors.
"""


class ParseError(Exception):
    """
    Raised when a NEM12 file is structurally invalid.

    A ParseError invalidates the whole file; recoverable per-value problems
    are reported to the failure sink instead.
    """

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        self.message = message
        super().__init__(f"Line {line_number}: {message}")
