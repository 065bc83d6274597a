"""
Line source for outbound messages
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from .errors import FileOpenError, LineDecodeError

ENCODING = 'utf-8'


@dataclass(frozen=True)
class Line:
    """One raw line of the input file, without its line terminator"""
    number: int
    raw: bytes

    def decode(self) -> str:
        """Decode the line as text, raising LineDecodeError if it is not valid"""
        try:
            return self.raw.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise LineDecodeError(self.number, str(e)) from e


class LineSource:
    """
    Streams lines from a file

    The file is opened once and read lazily; iteration is forward-only and
    cannot be restarted.
    """

    def __init__(self, path: Union[str, Path]):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None
        self._consumed = False

    def open(self) -> "LineSource":
        try:
            self._file = self.path.open('rb')
        except OSError as e:
            raise FileOpenError(e.errno, f"Unable to open {self.path}: {e.strerror}") from e
        self.logger.debug(f"Reading lines from {self.path}")
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "LineSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Line]:
        if self._file is None:
            raise RuntimeError("LineSource is not open")
        if self._consumed:
            raise RuntimeError("LineSource cannot be iterated twice")
        self._consumed = True
        return self._read_lines(self._file)

    @staticmethod
    def _read_lines(file: BinaryIO) -> Iterator[Line]:
        for number, raw in enumerate(file, start=1):
            if raw.endswith(b'\n'):
                raw = raw[:-1]
                if raw.endswith(b'\r'):
                    raw = raw[:-1]
            yield Line(number, raw)
