"""
VirtualArray: a csv table whose rows are plain lists aligned to column order.

Compared to VirtualData it indexes positionally, allows duplicate column names
and ignores limiters; new cells are empty Text.
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence

from .errors import InsufficientRowData, InvalidColumn, InvalidRowData, OutOfRangeError
from .meta import Meta
from .value import Value
from .vcont import (
    CellAlignType,
    VCont,
    build_string_table,
    column_max_width,
    render_csv,
    swap_walk,
)
from .virtual_data import Column


class VirtualArray(VCont):
    def __init__(self) -> None:
        self.metas: List[Meta] = []
        self.columns: List[Column] = []
        self.rows: List[List[Value]] = []

    def get_row_count(self) -> int:
        return len(self.rows)

    def get_column_count(self) -> int:
        return len(self.columns)

    def _check_column_index(self, column_index: int) -> None:
        if not 0 <= column_index < self.get_column_count():
            raise OutOfRangeError(f"Column index {column_index} is out of range")

    def _check_row_length(self, values: Sequence[object]) -> None:
        if len(values) != self.get_column_count():
            raise InvalidRowData(
                f"Given row length is {len(values)} while columns length is {self.get_column_count()}"
            )

    # -- rows --

    def move_row(self, src_index: int, target_index: int) -> None:
        swap_walk([self.rows], self.get_row_count(), src_index, target_index)

    def insert_row(self, row_index: int, source: Optional[Sequence[Value]] = None) -> None:
        if not 0 <= row_index <= self.get_row_count():
            raise InvalidColumn(f"Cannot add row to out of range position : {row_index}")
        if source is not None:
            self._check_row_length(source)
            row = list(source)
        else:
            row = [Value.text("") for _ in self.columns]
        for meta, value in zip(self.metas, row):
            meta.update_width_from_value(value)
        self.rows.insert(row_index, row)

    def delete_row(self, row_index: int) -> bool:
        """Remove a row. Out of range indices are ignored and return False."""
        if not 0 <= row_index < self.get_row_count():
            return False
        removed = self.rows.pop(row_index)
        for idx, (value, meta) in enumerate(zip(removed, self.metas)):
            if value.width >= meta.max_unicode_width:
                meta.set_width(column_max_width(self.get_column_iterator(idx)))
        return True

    def set_row(self, row_index: int, values: Sequence[Value]) -> None:
        if len(values) != self.get_column_count():
            raise InsufficientRowData(
                f"Given {len(values)} values for {self.get_column_count()} columns"
            )
        if not self.is_valid_cell_coordinate(row_index, 0):
            raise OutOfRangeError(f"Row index {row_index} is out of range")
        for meta, value in zip(self.metas, values):
            meta.update_width_from_value(value)
        self.rows[row_index] = list(values)

    def edit_row(self, row_index: int, values: Sequence[Optional[Value]]) -> None:
        if len(values) != self.get_column_count():
            raise InsufficientRowData(
                f"Given {len(values)} values for {self.get_column_count()} columns"
            )
        if not self.is_valid_cell_coordinate(row_index, 0):
            raise OutOfRangeError(f"Row index {row_index} is out of range")
        row = self.rows[row_index]
        for idx, value in enumerate(values):
            if value is not None:
                self.metas[idx].update_width_from_value(value)
                row[idx] = value

    # -- cells --

    def get_cell(self, x: int, y: int) -> Optional[Value]:
        if not self.is_valid_cell_coordinate(x, y):
            return None
        return self.rows[x][y]

    def set_cell(self, x: int, y: int, value: Value) -> None:
        if not self.is_valid_cell_coordinate(x, y):
            raise OutOfRangeError(f"Cell ({x}, {y}) is outside of {self.get_row_count()}x{self.get_column_count()}")
        self.metas[y].update_width_from_value(value)
        self.rows[x][y] = value

    # -- columns --

    def move_column(self, src_index: int, target_index: int) -> None:
        # Row cells follow their column
        sequences = [self.columns, self.metas] + self.rows
        swap_walk(sequences, self.get_column_count(), src_index, target_index)

    def insert_column(self, column_index: int, column_name: str) -> None:
        if not 0 <= column_index <= self.get_column_count():
            raise InvalidColumn(f"Cannot add column to out of range position : {column_index}")
        self.columns.insert(column_index, Column.empty(column_name))
        self.metas.insert(column_index, Meta())
        for row in self.rows:
            row.insert(column_index, Value.text(""))

    def delete_column(self, column_index: int) -> None:
        self._check_column_index(column_index)
        for row in self.rows:
            del row[column_index]
        del self.metas[column_index]
        del self.columns[column_index]

        if not self.columns:
            self.rows = []

    def rename_column(self, column_index: int, new_name: str) -> None:
        """Change a column's name. Rows are positional and stay as they are."""
        self._check_column_index(column_index)
        self.columns[column_index].rename(new_name)

    def set_column(self, column_index: int, value: Value) -> None:
        self._check_column_index(column_index)
        for row in self.rows:
            row[column_index] = value
        if self.rows:
            self.metas[column_index].set_width(value.width)

    # -- bulk --

    def drop_data(self) -> None:
        self.columns.clear()
        self.rows.clear()
        self.metas.clear()

    def apply_all(self, f: Callable[[Value], Value]) -> None:
        for row in self.rows:
            row[:] = [f(value) for value in row]
        self.update_width_global()

    def update_width_global(self) -> None:
        for idx, meta in enumerate(self.metas):
            meta.set_width(column_max_width(row[idx] for row in self.rows))

    def get_column_iterator(self, column_index: int) -> Iterator[Value]:
        self._check_column_index(column_index)
        return iter([row[column_index] for row in self.rows])

    # -- rendering --

    def get_string_table(self, align_type: CellAlignType = CellAlignType.LEFT) -> List[List[str]]:
        return build_string_table(
            [col.name for col in self.columns],
            [meta.max_unicode_width for meta in self.metas],
            ([str(v) for v in row] for row in self.rows),
            align_type,
        )

    def __str__(self) -> str:
        return render_csv([col.name for col in self.columns], self.rows)

    def __repr__(self) -> str:
        return f"VirtualArray(columns={[c.name for c in self.columns]!r}, rows={self.get_row_count()})"


__all__ = ["VirtualArray"]
