"""
VirtualData: a mutable csv table whose rows are keyed by column name.

- Column names are unique.
- Each column carries a ValueLimiter; every write is checked against it and a
  failed check never leaves a row half written.
- Widths of cell values are tracked per column (Meta) for aligned rendering.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import (
    InsufficientRowData,
    InvalidCellData,
    InvalidColumn,
    InvalidRowData,
    InvalidValueType,
    OutOfRangeError,
)
from .meta import Meta
from .parser import parse_text
from .value import LIMITER_ATTRIBUTE_LEN, Value, ValueLimiter, ValueType
from .vcont import (
    CellAlignType,
    VCont,
    build_string_table,
    column_max_width,
    render_csv,
    swap_walk,
    write_csv,
)

logger = logging.getLogger(__name__)

SCHEMA_HEADER = "column,type,default,variant,pattern"


# ----------------------------
# Column / Row
# ----------------------------

@dataclass
class Column:
    name: str
    column_type: ValueType = ValueType.TEXT
    limiter: ValueLimiter = field(default_factory=ValueLimiter)

    @classmethod
    def empty(cls, name: str) -> "Column":
        return cls(name)

    @classmethod
    def new(cls, name: str, column_type: ValueType, limiter: Optional[ValueLimiter] = None) -> "Column":
        if limiter is None:
            return cls(name, column_type, ValueLimiter(column_type))
        if limiter.get_type() is not column_type:
            raise InvalidColumn(
                f"Column {name!r} is {column_type} but its limiter is {limiter.get_type()}"
            )
        return cls(name, column_type, limiter)

    def get_name(self) -> str:
        return self.name

    def get_column_type(self) -> ValueType:
        return self.column_type

    def rename(self, new_name: str) -> str:
        """Rename and return the previous name."""
        previous, self.name = self.name, new_name
        return previous

    def set_limiter(self, limiter: ValueLimiter) -> None:
        self.column_type = limiter.get_type()
        self.limiter = limiter

    def get_default_value(self) -> Value:
        default = self.limiter.get_default()
        if default is not None:
            return default
        variant = self.limiter.get_variant()
        if variant:
            return variant[0]
        return Value.empty(self.column_type)


@dataclass
class Row:
    """Cells keyed by column name. Column order lives in the container, so most accessors take `columns`."""

    values: Dict[str, Value] = field(default_factory=dict)

    def insert_cell(self, key: str, value: Value) -> None:
        self.values[key] = value

    def get_cell_value(self, key: str) -> Optional[Value]:
        return self.values.get(key)

    def update_cell_value(self, key: str, value: Value) -> None:
        # Missing keys are ignored
        if key in self.values:
            self.values[key] = value

    def rename_column(self, name: str, new_name: str) -> None:
        if name in self.values:
            self.values[new_name] = self.values.pop(name)

    def change_cell_type(self, key: str, target_type: ValueType) -> None:
        value = self.values.get(key)
        if value is None or value.get_type() is target_type:
            return
        try:
            self.values[key] = Value.from_str(str(value), target_type)
        except InvalidValueType as e:
            raise InvalidCellData(
                f"{str(value)!r} is not a valid value to be converted to type {target_type}"
            ) from e

    def remove_cell(self, key: str) -> None:
        self.values.pop(key, None)

    def get_iterator(self, columns: Sequence[Column]) -> Iterator[Value]:
        for col in columns:
            value = self.values.get(col.name)
            if value is not None:
                yield value

    def to_vector(self, columns: Sequence[Column]) -> List[Value]:
        out: List[Value] = []
        for col in columns:
            if col.name not in self.values:
                raise InvalidColumn(f"Column {col.name!r} is not present in row")
            out.append(self.values[col.name])
        return out

    def to_string(self, columns: Sequence[Column]) -> str:
        return write_csv([[str(v) for v in self.to_vector(columns)]])[:-1]


# ----------------------------
# Read only views
# ----------------------------

@dataclass
class ReadOnlyData:
    """Detached copy of a table: columns plus rows as value lists in column order."""

    columns: List[Column]
    rows: List[List[Value]]


@dataclass(frozen=True)
class ReadOnlyDataRef:
    """Shallow view sharing the container's Column objects. Values are immutable, so they are shared too."""

    columns: Tuple[Column, ...]
    rows: Tuple[Tuple[Value, ...], ...]

    def to_owned(self) -> ReadOnlyData:
        return ReadOnlyData(
            columns=[copy.deepcopy(c) for c in self.columns],
            rows=[list(r) for r in self.rows],
        )


# ----------------------------
# VirtualData
# ----------------------------

class VirtualData(VCont):
    def __init__(self) -> None:
        self.metas: List[Meta] = []
        self.columns: List[Column] = []
        self.rows: List[Row] = []

    # -- counts / lookup --

    def get_row_count(self) -> int:
        return len(self.rows)

    def get_column_count(self) -> int:
        return len(self.columns)

    def get_column_index(self, name: str) -> Optional[int]:
        for idx, col in enumerate(self.columns):
            if col.name == name:
                return idx
        return None

    def try_get_column_index(self, src: str) -> Optional[int]:
        """`src` is either a column index (digits) or a column name."""
        if src.isdigit():
            index = int(src)
            return index if index < self.get_column_count() else None
        return self.get_column_index(src)

    def _get_column_if_valid(self, x: int, y: int) -> Column:
        if not self.is_valid_cell_coordinate(x, y):
            raise OutOfRangeError(f"Cell ({x}, {y}) is outside of {self.get_row_count()}x{self.get_column_count()}")
        return self.columns[y]

    def _check_column_index(self, column_index: int) -> Column:
        if not 0 <= column_index < self.get_column_count():
            raise OutOfRangeError(f"Column index {column_index} is out of range")
        return self.columns[column_index]

    def _check_row_qualifies(self, values: Sequence[Optional[Value]]) -> None:
        for col, value in zip(self.columns, values):
            if value is not None and not col.limiter.qualify(value):
                raise InvalidRowData(f"{str(value)!r} doesn't qualify {col.name!r}'s limiter")

    # -- rows --

    def move_row(self, src_index: int, target_index: int) -> None:
        swap_walk([self.rows], self.get_row_count(), src_index, target_index)

    def insert_row(self, row_index: int, source: Optional[Sequence[Value]] = None) -> None:
        if not 0 <= row_index <= self.get_row_count():
            raise InvalidColumn(f"Cannot add row to out of range position : {row_index}")

        new_row = Row()
        if source is not None:
            if len(source) != self.get_column_count():
                raise InvalidRowData(
                    f"Given row length is {len(source)} while columns length is {self.get_column_count()}"
                )
            self._check_row_qualifies(source)
            for col, value in zip(self.columns, source):
                new_row.insert_cell(col.name, value)
        else:
            for col in self.columns:
                new_row.insert_cell(col.name, col.get_default_value())

        for meta, value in zip(self.metas, new_row.to_vector(self.columns)):
            meta.update_width_from_value(value)
        self.rows.insert(row_index, new_row)

    def delete_row(self, row_index: int) -> bool:
        """Remove a row. Out of range indices are ignored and return False."""
        if not 0 <= row_index < self.get_row_count():
            return False
        removed = self.rows.pop(row_index)

        # The removed row may have held a column's widest value
        for idx, (col, meta) in enumerate(zip(self.columns, self.metas)):
            value = removed.get_cell_value(col.name)
            if value is not None and value.width >= meta.max_unicode_width:
                meta.set_width(column_max_width(self.get_column_iterator(idx)))
        return True

    def set_row(self, row_index: int, values: Sequence[Value]) -> None:
        """Overwrite a whole row. Values follow column order; all of them must qualify."""
        if len(values) != self.get_column_count():
            raise InsufficientRowData(
                f"Given {len(values)} values for {self.get_column_count()} columns"
            )
        if not self.is_valid_cell_coordinate(row_index, 0):
            raise OutOfRangeError(f"Row index {row_index} is out of range")
        self._check_row_qualifies(values)

        row = self.rows[row_index]
        for meta, col, value in zip(self.metas, self.columns, values):
            meta.update_width_from_value(value)
            row.update_cell_value(col.name, value)

    def edit_row(self, row_index: int, values: Sequence[Optional[Value]]) -> None:
        """Like set_row, but None entries leave the cell untouched."""
        if len(values) != self.get_column_count():
            raise InsufficientRowData(
                f"Given {len(values)} values for {self.get_column_count()} columns"
            )
        if not self.is_valid_cell_coordinate(row_index, 0):
            raise OutOfRangeError(f"Row index {row_index} is out of range")
        self._check_row_qualifies(values)

        row = self.rows[row_index]
        for meta, col, value in zip(self.metas, self.columns, values):
            if value is not None:
                meta.update_width_from_value(value)
                row.update_cell_value(col.name, value)

    # -- cells --

    def get_cell(self, x: int, y: int) -> Optional[Value]:
        if not self.is_valid_cell_coordinate(x, y):
            return None
        return self.rows[x].get_cell_value(self.columns[y].name)

    def set_cell(self, x: int, y: int, value: Value) -> None:
        column = self._get_column_if_valid(x, y)
        self._check_column_data(y, value)
        self.metas[y].update_width_from_value(value)
        self.rows[x].update_cell_value(column.name, value)

    def set_cell_from_string(self, x: int, y: int, value: str) -> None:
        """Parse `value` as the column's type, then set it."""
        column = self._get_column_if_valid(x, y)
        try:
            new_value = Value.from_str(value, column.column_type)
        except InvalidValueType as e:
            raise InvalidCellData(f"Given value is {value!r} which is not a {column.column_type}") from e
        self.set_cell(x, y, new_value)

    def _check_column_data(self, column_index: int, value: Value) -> None:
        col = self.columns[column_index]
        if not col.limiter.qualify(value):
            raise InvalidCellData(
                f"{str(value)!r} failed to match {col.name!r}'s limiter restriction"
            )

    # -- columns --

    def move_column(self, src_index: int, target_index: int) -> None:
        swap_walk([self.columns, self.metas], self.get_column_count(), src_index, target_index)

    def insert_column(self, column_index: int, column_name: str) -> None:
        self.insert_column_with_type(column_index, column_name)

    def insert_column_with_type(
        self,
        column_index: int,
        column_name: str,
        column_type: ValueType = ValueType.TEXT,
        limiter: Optional[ValueLimiter] = None,
        placeholder: Optional[Value] = None,
    ) -> None:
        """
        Insert a column at `column_index`. Existing rows receive `placeholder`
        when given (it must satisfy the limiter), else the column default.
        """
        if not 0 <= column_index <= self.get_column_count():
            raise InvalidColumn(f"Cannot add column to out of range position : {column_index}")
        if self.get_column_index(column_name) is not None:
            raise InvalidColumn(f"Cannot add existing column = {column_name!r}")

        new_column = Column.new(column_name, column_type, limiter)
        if placeholder is None:
            value = new_column.get_default_value()
        elif not new_column.limiter.qualify(placeholder):
            raise InvalidCellData(
                f"Placeholder {str(placeholder)!r} doesn't qualify {column_name!r}'s limiter"
            )
        else:
            value = placeholder

        for row in self.rows:
            row.insert_cell(column_name, value)
        self.columns.insert(column_index, new_column)
        self.metas.insert(column_index, Meta(value.width if self.rows else 0))

    def delete_column(self, column_index: int) -> None:
        name = self._check_column_index(column_index).name
        for row in self.rows:
            row.remove_cell(name)
        del self.metas[column_index]
        del self.columns[column_index]

        # Rows cannot outlive the last column
        if not self.columns:
            self.rows = []

    def rename_column(self, column_index: int, new_name: str) -> None:
        self._check_column_index(column_index)
        existing = self.get_column_index(new_name)
        if existing is not None and existing != column_index:
            raise InvalidColumn(f"Cannot rename to {new_name!r} which already exists")

        previous = self.columns[column_index].rename(new_name)
        for row in self.rows:
            row.rename_column(previous, new_name)

    def set_column(self, column_index: int, value: Value) -> None:
        """Overwrite every cell of a column with `value`."""
        column = self._check_column_index(column_index)
        self._check_column_data(column_index, value)
        for row in self.rows:
            row.update_cell_value(column.name, value)
        if self.rows:
            self.metas[column_index].set_width(value.width)

    # -- limiters --

    def _plan_limiter(self, column_index: int, limiter: ValueLimiter, strict: bool) -> List[Tuple[Row, Value]]:
        column = self._check_column_index(column_index)
        updates: List[Tuple[Row, Value]] = []
        for index, row in enumerate(self.rows):
            value = row.get_cell_value(column.name)
            if value is None:
                raise InvalidRowData("Failed to get row data while setting limiter")

            candidate = value
            target_type = limiter.is_convertible(value)
            if target_type is not None:
                candidate = Value.from_str(str(value), target_type)

            if limiter.qualify(candidate):
                if candidate != value:
                    updates.append((row, candidate))
                continue

            if strict:
                raise InvalidCellData(
                    f"Cell {index},{column.name} doesn't match limiter's qualification"
                )
            fallback = limiter.get_default()
            if fallback is None:
                fallback = Value.empty(limiter.get_type())
            logger.warning(
                "Cell %d,%s (%r) doesn't qualify new limiter, replaced with %r",
                index, column.name, value, fallback,
            )
            updates.append((row, fallback))
        return updates

    def _apply_limiter(self, column_index: int, limiter: ValueLimiter, updates: List[Tuple[Row, Value]]) -> None:
        column = self.columns[column_index]
        for row, value in updates:
            row.update_cell_value(column.name, value)
        column.set_limiter(limiter.copy())
        self.metas[column_index].set_width(column_max_width(self.get_column_iterator(column_index)))

    def set_limiter(self, column: int, limiter: ValueLimiter, strict: bool = False) -> None:
        """
        Attach `limiter` to a column and re-check its cells.

        Convertible cells are converted to the limiter's type. Cells that still
        don't qualify abort the call with InvalidCellData when `strict` (nothing
        is changed), or are replaced with the limiter's default otherwise.
        """
        updates = self._plan_limiter(column, limiter, strict)
        self._apply_limiter(column, limiter, updates)

    def qualify(self, column: int, limiter: ValueLimiter) -> List[Row]:
        """Rows whose cell in `column` satisfies `limiter`."""
        name = self._check_column_index(column).name
        rows: List[Row] = []
        for row in self.rows:
            value = row.get_cell_value(name)
            if value is None:
                raise InvalidRowData("Failed to get row data while qualifying")
            if limiter.qualify(value):
                rows.append(row)
        return rows

    def qualify_multiple(self, qualifiers: Sequence[Tuple[int, ValueLimiter]]) -> List[Row]:
        """Rows satisfying every (column, limiter) pair."""
        names = [(self._check_column_index(column).name, limiter) for column, limiter in qualifiers]
        rows: List[Row] = []
        for row in self.rows:
            for name, limiter in names:
                value = row.get_cell_value(name)
                if value is None:
                    raise InvalidRowData("Failed to get row data while qualifying")
                if not limiter.qualify(value):
                    break
            else:
                rows.append(row)
        return rows

    # -- schema --

    def export_schema(self) -> str:
        """
        Schema as csv text: header `column,type,default,variant,pattern`, then
        one line per column. Variants are space separated.
        """
        rows = [[col.name] + col.limiter.to_schema_fields() for col in self.columns]
        return f"{SCHEMA_HEADER}\n{write_csv(rows)}"

    def import_schema(self, schema: str, strict: bool = False) -> None:
        """Apply limiters from schema text (see export_schema). All rows are checked before anything changes."""
        rows = parse_text(schema, consume_dquote=True)
        if not rows:
            raise InvalidRowData("Schema is empty")
        header = ",".join(cell.strip() for cell in rows[0])
        if header != SCHEMA_HEADER:
            raise InvalidRowData(f"Schema header should be {SCHEMA_HEADER!r}, got {header!r}")

        planned: Dict[int, Tuple[ValueLimiter, List[Tuple[Row, Value]]]] = {}
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) != LIMITER_ATTRIBUTE_LEN + 1:
                raise InvalidRowData(f"Schema line {line_no} has {len(row)} fields")
            index = self.get_column_index(row[0])
            if index is None:
                raise InvalidColumn(f"Schema line {line_no} names unknown column {row[0]!r}")
            if index in planned:
                raise InvalidRowData(f"Schema line {line_no} repeats column {row[0]!r}")
            limiter = ValueLimiter.from_schema_row(row[1:])
            planned[index] = (limiter, self._plan_limiter(index, limiter, strict))

        for index, (limiter, updates) in planned.items():
            self._apply_limiter(index, limiter, updates)
        logger.debug("Applied schema to %d column(s)", len(planned))

    # -- bulk --

    def drop_data(self) -> None:
        self.columns.clear()
        self.rows.clear()
        self.metas.clear()

    def apply_all(self, f: Callable[[Value], Value]) -> None:
        """Replace every value with f(value). Limiters are not consulted."""
        for row in self.rows:
            for key, value in row.values.items():
                row.values[key] = f(value)
        self.update_width_global()

    def update_width_global(self) -> None:
        for idx, meta in enumerate(self.metas):
            meta.set_width(column_max_width(self.get_column_iterator(idx)))

    # -- iteration / views --

    def get_iterator(self) -> Iterator[Value]:
        """Every value, row by row, in column order."""
        for row in self.rows:
            yield from row.get_iterator(self.columns)

    def get_column_iterator(self, column_index: int) -> Iterator[Value]:
        name = self._check_column_index(column_index).name
        return iter([v for v in (row.get_cell_value(name) for row in self.rows) if v is not None])

    def get_row_iterator(self, row_index: int) -> Iterator[Value]:
        if not 0 <= row_index < self.get_row_count():
            raise OutOfRangeError(f"Row index {row_index} is out of range")
        return self.rows[row_index].get_iterator(self.columns)

    def read_only(self) -> ReadOnlyData:
        return ReadOnlyData(
            columns=copy.deepcopy(self.columns),
            rows=[row.to_vector(self.columns) for row in self.rows],
        )

    def read_only_ref(self) -> ReadOnlyDataRef:
        return ReadOnlyDataRef(
            columns=tuple(self.columns),
            rows=tuple(tuple(row.to_vector(self.columns)) for row in self.rows),
        )

    # -- rendering --

    def _value_rows(self) -> List[List[Value]]:
        empty = Value.text("")
        return [[row.values.get(col.name, empty) for col in self.columns] for row in self.rows]

    def get_string_table(self, align_type: CellAlignType = CellAlignType.LEFT) -> List[List[str]]:
        return build_string_table(
            [col.name for col in self.columns],
            [meta.max_unicode_width for meta in self.metas],
            ([str(v) for v in row] for row in self._value_rows()),
            align_type,
        )

    def __str__(self) -> str:
        return render_csv([col.name for col in self.columns], self._value_rows())

    def __repr__(self) -> str:
        return f"VirtualData(columns={[c.name for c in self.columns]!r}, rows={self.get_row_count()})"


__all__ = [
    "SCHEMA_HEADER",
    "Column",
    "Row",
    "ReadOnlyData",
    "ReadOnlyDataRef",
    "VirtualData",
]
