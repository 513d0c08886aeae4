"""
Quote-aware CSV line parser.

The parser is fed one physical line at a time (bytes up to and including the
line delimiter) and assembles logical rows. A quoted field may span several
physical lines, so a chunk that leaves a quote open yields no row; the partial
field is kept as the remnant and continued by the next chunk.

Quote rules:
- a `"` opens or closes a quoted section,
- unless it is directly followed by another `"`: the pair is a literal quote.
With `consume_dquote` the structural quotes are dropped and a literal pair
becomes one `"`; without it the quote characters stay in the field text.
"""

from __future__ import annotations

import enum
from typing import List, Optional, Union

from .errors import InvalidRowData

Chunk = Union[bytes, bytearray, memoryview, str]


class _State(enum.Enum):
    FIELD = "field"                  # outside quotes
    QUOTE_PENDING = "quote_pending"  # saw `"` outside quotes; open or literal pair
    QUOTED = "quoted"                # inside quotes
    QUOTED_QUOTE = "quoted_quote"    # saw `"` inside quotes; close or literal pair


class Parser:
    """Stateful field splitter. One instance per read; call reset() to reuse it."""

    def __init__(self, line_delimiter: Optional[str] = None) -> None:
        self.line_delimiter = line_delimiter
        self._fields: List[str] = []
        self._remnant = ""
        self._state = _State.FIELD

    def reset(self) -> None:
        self._fields = []
        self._remnant = ""
        self._state = _State.FIELD

    @property
    def in_quote(self) -> bool:
        return self._state in (_State.QUOTED, _State.QUOTED_QUOTE)

    @property
    def remnant(self) -> str:
        return self._remnant

    @staticmethod
    def _decode(chunk: Chunk, allow_invalid_string: bool) -> str:
        if isinstance(chunk, str):
            return chunk
        raw = bytes(chunk)
        if allow_invalid_string:
            return raw.decode("utf-8", errors="replace")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidRowData(f"Chunk is not valid utf-8: {e}") from e

    def feed_chunk(
        self,
        chunk: Chunk,
        delimiter: str = ",",
        consume_dquote: bool = False,
        allow_invalid_string: bool = False,
    ) -> Optional[List[str]]:
        """
        Feed one physical line. Returns the fields of the logical row it
        completes, or None while a quoted field is still open.
        """
        text = self._decode(chunk, allow_invalid_string).replace("\r\n", "\n")
        literal = '"' if consume_dquote else '""'
        structural = "" if consume_dquote else '"'

        field: List[str] = [self._remnant] if self._remnant else []
        self._remnant = ""
        ended_on_delimiter = False

        for ch in text:
            ended_on_delimiter = False
            state = self._state

            if state is _State.QUOTE_PENDING:
                if ch == '"':
                    field.append(literal)
                    self._state = _State.FIELD
                    continue
                field.append(structural)
                state = self._state = _State.QUOTED
            elif state is _State.QUOTED_QUOTE:
                if ch == '"':
                    field.append(literal)
                    self._state = _State.QUOTED
                    continue
                field.append(structural)
                state = self._state = _State.FIELD

            if state is _State.QUOTED:
                if ch == '"':
                    self._state = _State.QUOTED_QUOTE
                else:
                    field.append(ch)
                continue

            if ch == delimiter:
                self._fields.append("".join(field))
                field = []
                ended_on_delimiter = True
            elif ch == '"':
                self._state = _State.QUOTE_PENDING
            else:
                field.append(ch)

        # A quote at the very end of the input has nothing left to pair with
        if self._state is _State.QUOTE_PENDING:
            field.append(structural)
            self._state = _State.QUOTED
        elif self._state is _State.QUOTED_QUOTE:
            field.append(structural)
            self._state = _State.FIELD

        last = "".join(field)
        if self._state is _State.QUOTED:
            self._remnant = last
            return None

        if last or ended_on_delimiter:
            line_delimiter = self.line_delimiter or "\n"
            if last.endswith(line_delimiter):
                last = last[: -len(line_delimiter)]
            self._fields.append(last)

        row, self._fields = self._fields, []
        return row


def split_lines(text: str, line_delimiter: str = "\n") -> List[str]:
    """Split text into physical lines, each keeping its trailing delimiter."""
    lines: List[str] = []
    start = 0
    while True:
        idx = text.find(line_delimiter, start)
        if idx == -1:
            break
        lines.append(text[start: idx + len(line_delimiter)])
        start = idx + len(line_delimiter)
    if start < len(text):
        lines.append(text[start:])
    return lines


def parse_text(
    text: str,
    delimiter: str = ",",
    *,
    consume_dquote: bool = True,
    line_delimiter: Optional[str] = None,
) -> List[List[str]]:
    """Parse a whole in-memory text into rows. Blank lines are skipped."""
    parser = Parser(line_delimiter)
    rows: List[List[str]] = []
    for line in split_lines(text, line_delimiter or "\n"):
        row = parser.feed_chunk(line, delimiter, consume_dquote)
        if row is None:
            continue
        if len(row) == 1 and row[0].strip() == "":
            continue
        rows.append(row)
    if parser.in_quote:
        raise InvalidRowData(f"Unterminated quote in {parser.remnant!r}")
    return rows


__all__ = ["Parser", "split_lines", "parse_text"]
