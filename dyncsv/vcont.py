"""
Container interface shared by VirtualData and VirtualArray, and the algorithms
both of them use (swap-walk moves, cell padding, table and CSV rendering).
"""

from __future__ import annotations

import abc
import csv
import enum
import io
import itertools
from typing import Callable, Iterable, List, MutableSequence, Optional, Sequence

from .errors import OutOfRangeError
from .value import Value, display_width


class CellAlignType(enum.Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ----------------------------
# Shared algorithms
# ----------------------------

def swap_walk(sequences: Sequence[MutableSequence], count: int, src_index: int, target_index: int) -> None:
    """
    Move element `src_index` to `target_index` by swapping adjacent pairs, one
    step at a time, in every sequence of `sequences` (kept in lockstep).
    Elements in between shift by exactly one position.
    """
    if src_index >= count or target_index >= count or src_index < 0 or target_index < 0:
        raise OutOfRangeError(f"Cannot move {src_index} to {target_index} with {count} items")

    step = 1 if target_index > src_index else -1
    index = src_index
    while index != target_index:
        nxt = index + step
        for seq in sequences:
            seq[index], seq[nxt] = seq[nxt], seq[index]
        index = nxt


def pad(target: str, max_width: int, align_type: CellAlignType) -> str:
    if align_type is CellAlignType.NONE:
        return target
    gap = max(max_width - display_width(target), 0)
    if align_type is CellAlignType.LEFT:
        return target + " " * gap
    if align_type is CellAlignType.RIGHT:
        return " " * gap + target
    leading = gap // 2
    return " " * leading + target + " " * (gap - leading)


def build_string_table(
    names: Sequence[str],
    widths: Sequence[int],
    rows: Iterable[Sequence[str]],
    align_type: CellAlignType,
) -> List[List[str]]:
    """Header row plus one row per data row, each cell padded to its column width."""
    column_widths = [max(display_width(name), width) for name, width in zip(names, widths)]
    table = [[pad(name, w, align_type) for name, w in zip(names, column_widths)]]
    for row in rows:
        table.append([pad(cell, w, align_type) for cell, w in zip(row, column_widths)])
    return table


def join_table(table: Sequence[Sequence[str]], line_delimiter: str) -> str:
    return line_delimiter.join(" ".join(row) for row in table)


def write_csv(rows: Iterable[Sequence[str]]) -> str:
    """Rows as csv text with minimal quoting. Every line, including the last, ends with a newline."""
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerows(rows)
    return buf.getvalue()


def render_csv(names: Sequence[str], rows: Iterable[Sequence[Value]]) -> str:
    text = write_csv(itertools.chain([list(names)], ([str(v) for v in row] for row in rows)))
    return text[:-1]


def column_max_width(values: Iterable[Value]) -> int:
    return max((v.width for v in values), default=0)


# ----------------------------
# Interface
# ----------------------------

class VCont(abc.ABC):
    """Operations every virtual csv container provides."""

    @abc.abstractmethod
    def move_row(self, src_index: int, target_index: int) -> None: ...

    @abc.abstractmethod
    def move_column(self, src_index: int, target_index: int) -> None: ...

    @abc.abstractmethod
    def rename_column(self, column_index: int, new_name: str) -> None: ...

    @abc.abstractmethod
    def set_column(self, column_index: int, value: Value) -> None: ...

    @abc.abstractmethod
    def edit_row(self, row_index: int, values: Sequence[Optional[Value]]) -> None: ...

    @abc.abstractmethod
    def set_row(self, row_index: int, values: Sequence[Value]) -> None: ...

    @abc.abstractmethod
    def get_cell(self, x: int, y: int) -> Optional[Value]: ...

    @abc.abstractmethod
    def set_cell(self, x: int, y: int, value: Value) -> None: ...

    @abc.abstractmethod
    def insert_row(self, row_index: int, source: Optional[Sequence[Value]] = None) -> None: ...

    @abc.abstractmethod
    def delete_row(self, row_index: int) -> bool: ...

    @abc.abstractmethod
    def insert_column(self, column_index: int, column_name: str) -> None: ...

    @abc.abstractmethod
    def delete_column(self, column_index: int) -> None: ...

    @abc.abstractmethod
    def get_row_count(self) -> int: ...

    @abc.abstractmethod
    def get_column_count(self) -> int: ...

    @abc.abstractmethod
    def drop_data(self) -> None: ...

    @abc.abstractmethod
    def apply_all(self, f: Callable[[Value], Value]) -> None: ...

    @abc.abstractmethod
    def update_width_global(self) -> None: ...

    @abc.abstractmethod
    def get_string_table(self, align_type: CellAlignType = CellAlignType.LEFT) -> List[List[str]]: ...

    def get_formatted_string(
        self,
        line_delimiter: str = "\n",
        align_type: CellAlignType = CellAlignType.LEFT,
    ) -> str:
        """Aligned table: space separated cells, `line_delimiter` between lines."""
        return join_table(self.get_string_table(align_type), line_delimiter)

    def is_valid_cell_coordinate(self, x: int, y: int) -> bool:
        return 0 <= x < self.get_row_count() and 0 <= y < self.get_column_count()


__all__ = [
    "CellAlignType",
    "VCont",
    "swap_walk",
    "pad",
    "build_string_table",
    "join_table",
    "write_csv",
    "render_csv",
    "column_max_width",
]
