"""
RecordType enumeration for the six NEM12 record indicators.
"""

from enum import IntEnum


class RecordType(IntEnum):
    """
    NEM12 record indicators.

    Every line of a NEM12 file starts with a three digit record indicator
    that selects the field grammar for the rest of the line.
    """

    HEADER = 100
    NMI_DATA = 200
    INTERVAL_DATA = 300
    INTERVAL_EVENT = 400
    B2B_DETAIL = 500
    FILE_END = 900

    @classmethod
    def from_code(cls, code: int) -> "RecordType":
        """
        Look up a record type by its numeric code.

        Raises:
            ValueError: If the code is not a NEM12 record indicator
        """
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown record type: {code}") from None

    @classmethod
    def from_line(cls, line: str) -> "RecordType":
        """
        Derive the record type from the first three characters of a line.

        Raises:
            ValueError: If the line is too short, the indicator is not
                numeric, or the code is unknown
        """
        if len(line) < 3:
            raise ValueError(f"Invalid line format: '{line}'")

        indicator = line[:3]
        if not indicator.isdigit():
            raise ValueError(f"Record indicator must be numeric, found '{indicator}'")

        return cls.from_code(int(indicator))
