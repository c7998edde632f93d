"""
Line source for NEM12 files, plain text or zipped.
"""

import io
import zipfile
from collections.abc import Iterator
from pathlib import Path

from nem12_pipeline.observability.logger import get_logger

logger = get_logger(__name__)


class NEM12FileReader:
    """
    Yields the lines of a NEM12 file without trailing newlines.

    ZIP archives must contain exactly one member, which is read as UTF-8
    text. Anything else is read as a plain text file. A leading UTF-8 byte
    order mark is dropped.
    """

    def __init__(self, encoding: str = "utf-8-sig"):
        self.encoding = encoding

    def lines(self, file_path: str | Path) -> Iterator[str]:
        """
        Iterate over the lines of a file.

        Args:
            file_path: Path to a NEM12 CSV or a ZIP holding one

        Yields:
            Each line with its line terminator removed

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If a ZIP archive holds more or less than one file
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {file_path}")

        if zipfile.is_zipfile(path):
            yield from self._zip_lines(path)
        else:
            logger.debug(f"Reading plain text file: {path}")
            with path.open(encoding=self.encoding, newline="") as f:
                for line in f:
                    yield line.rstrip("\r\n")

    def _zip_lines(self, path: Path) -> Iterator[str]:
        with zipfile.ZipFile(path) as zf:
            members = [info for info in zf.infolist() if not info.is_dir()]
            if len(members) != 1:
                raise ValueError(f"ZIP must contain exactly one file, found {len(members)}")

            logger.debug(f"Reading {members[0].filename} from ZIP archive {path}")
            with zf.open(members[0]) as binary_file:
                text = io.TextIOWrapper(binary_file, encoding=self.encoding, newline="")
                for line in text:
                    yield line.rstrip("\r\n")
