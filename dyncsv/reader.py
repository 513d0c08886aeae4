"""
Reader: turns a byte stream into a VirtualData or VirtualArray.

The stream is split on the line delimiter byte, each physical line is fed to
a fresh Parser, and every completed row is bound into the container through
its public insert_column / insert_row API.

Options live in an immutable ReaderOption; derive variants with
dataclasses.replace or pass keyword overrides to read_data / read_array:

    data = read_data(b"a,b\\n1,2\\n", trim=True)
"""

from __future__ import annotations

import dataclasses
import io
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple, TypeVar, Union

from .errors import CommandError, InvalidColumn, InvalidRowData, IoError
from .parser import Parser
from .value import Value
from .vcont import VCont
from .virtual_array import VirtualArray
from .virtual_data import VirtualData

logger = logging.getLogger(__name__)

ALPHABET = "abcdefghijklmnopqrstuvwxyz"
_BLOCK_SIZE = 64 * 1024

Source = Union[str, bytes, bytearray, Any]
C = TypeVar("C", bound=VCont)


# ----------------------------
# Options
# ----------------------------

@dataclass(frozen=True)
class ReaderOption:
    trim: bool = False                  # strip whitespace around header and values
    has_header: bool = True             # first row names the columns
    consume_dquote: bool = False        # drop quote characters from field text
    custom_header: Tuple[str, ...] = () # overrides has_header when given
    delimiter: str = ","
    line_delimiter: Optional[str] = None  # None: "\n", with "\r\n" normalized
    ignore_empty_row: bool = False      # skip blank rows instead of failing
    allow_invalid_string: bool = False  # replace invalid utf-8 instead of failing

    def __post_init__(self) -> None:
        object.__setattr__(self, "custom_header", tuple(self.custom_header))
        if len(self.delimiter) != 1:
            raise CommandError(f"Delimiter should be a single character, got {self.delimiter!r}")
        if self.line_delimiter is not None:
            if len(self.line_delimiter) != 1 or not self.line_delimiter.isascii():
                raise CommandError(
                    f"Line delimiter should be a single ascii character, got {self.line_delimiter!r}"
                )
        if '"' in (self.delimiter, self.line_delimiter):
            raise CommandError("Double quote cannot be used as a delimiter")
        if self.delimiter == self.effective_line_delimiter:
            raise CommandError("Delimiter and line delimiter should differ")

    @property
    def effective_line_delimiter(self) -> str:
        return self.line_delimiter or "\n"


DEFAULT_READER_OPTION = ReaderOption()


# ----------------------------
# Helpers
# ----------------------------

def make_arbitrary_column(size: int) -> List[str]:
    """Column names a, b, ..., z, aa, ab, ... for headerless data."""
    names: List[str] = []
    for index in range(1, size + 1):
        name = ""
        while index > 0:
            index, rem = divmod(index - 1, len(ALPHABET))
            name = ALPHABET[rem] + name
        names.append(name)
    return names


def _as_stream(source: Source) -> Any:
    if isinstance(source, str):
        return io.BytesIO(source.encode("utf-8"))
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def _iter_chunks(stream: Any, line_delimiter: str) -> Iterator[Union[bytes, str]]:
    """Yield physical lines, each including its trailing delimiter."""
    if line_delimiter == "\n" and hasattr(stream, "readline"):
        while True:
            line = stream.readline()
            if not line:
                return
            yield line

    buffer = None
    while True:
        block = stream.read(_BLOCK_SIZE)
        if not block:
            break
        delim = line_delimiter if isinstance(block, str) else line_delimiter.encode("ascii")
        buffer = block if buffer is None else buffer + block
        start = 0
        idx = buffer.find(delim, start)
        while idx != -1:
            yield buffer[start: idx + 1]
            start = idx + 1
            idx = buffer.find(delim, start)
        buffer = buffer[start:]
    if buffer:
        yield buffer


# ----------------------------
# Reader
# ----------------------------

class Reader:
    """Reads csv streams into containers. Holds no state between reads."""

    def __init__(self, option: ReaderOption = DEFAULT_READER_OPTION) -> None:
        self.option = option

    def _iter_rows(self, stream: Any) -> Iterator[Tuple[int, List[str]]]:
        """Yield (first physical line number, fields) for each logical row."""
        option = self.option
        parser = Parser(option.line_delimiter)
        chunks = _iter_chunks(stream, option.effective_line_delimiter)
        line_no = 0
        row_start = 1
        while True:
            try:
                chunk = next(chunks, None)
            except OSError as e:
                raise IoError(e, f"Failed to read line {line_no + 1}", line=line_no + 1) from e
            if chunk is None:
                break
            line_no += 1
            row = parser.feed_chunk(
                chunk,
                option.delimiter,
                option.consume_dquote,
                option.allow_invalid_string,
            )
            if row is None:
                continue
            yield row_start, row
            row_start = line_no + 1

        if parser.in_quote:
            raise InvalidRowData(f"Unterminated quote in row starting at line {row_start}")

    def _read_into(self, container: C, stream: Any) -> C:
        option = self.option
        header_done = False

        for line_no, row in self._iter_rows(stream):
            if len(row) == 1 and row[0].strip() == "":
                if option.ignore_empty_row:
                    continue
                raise InvalidRowData(
                    f"Row of line {line_no} is empty, which is not allowed by reader option"
                )

            if option.trim:
                row = [cell.strip() for cell in row]

            if not header_done:
                header_done = True
                if option.custom_header:
                    if len(option.custom_header) != len(row):
                        raise InvalidColumn(
                            f"Custom header has different length. Given {len(option.custom_header)} "
                            f"but needs {len(row)}"
                        )
                    header = list(option.custom_header)
                    logger.debug("Using custom header %r", header)
                elif option.has_header:
                    header = row
                    logger.debug("Using header from line %d: %r", line_no, header)
                else:
                    header = make_arbitrary_column(len(row))
                    logger.debug("Synthesized %d column names", len(header))

                for idx, name in enumerate(header):
                    container.insert_column(idx, name)
                if option.has_header and not option.custom_header:
                    continue

            if len(row) != container.get_column_count():
                raise InvalidRowData(
                    f"Row of line {line_no} has {len(row)} fields, "
                    f"expected {container.get_column_count()}"
                )
            container.insert_row(container.get_row_count(), [Value.text(cell) for cell in row])

        logger.debug(
            "Read %d row(s) into %d column(s)", container.get_row_count(), container.get_column_count()
        )
        return container

    def data_from_stream(self, stream: Source) -> VirtualData:
        return self._read_into(VirtualData(), _as_stream(stream))

    def array_from_stream(self, stream: Source) -> VirtualArray:
        return self._read_into(VirtualArray(), _as_stream(stream))


def read_data(source: Source, option: ReaderOption = DEFAULT_READER_OPTION, **overrides: Any) -> VirtualData:
    if overrides:
        option = dataclasses.replace(option, **overrides)
    return Reader(option).data_from_stream(source)


def read_array(source: Source, option: ReaderOption = DEFAULT_READER_OPTION, **overrides: Any) -> VirtualArray:
    if overrides:
        option = dataclasses.replace(option, **overrides)
    return Reader(option).array_from_stream(source)


__all__ = [
    "ALPHABET",
    "ReaderOption",
    "DEFAULT_READER_OPTION",
    "Reader",
    "make_arbitrary_column",
    "read_data",
    "read_array",
]
