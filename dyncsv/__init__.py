"""
dyncsv: dynamic csv containers (stdlib-only).

Parse delimited text into a mutable table, edit cells/rows/columns under
optional per-column limiters, and write it back as text.

Contract:
- Values are Number (int) or Text (str). No floats: values round-trip exactly.
- VirtualData keys rows by column name, keeps names unique and enforces
  limiters (type + default + variant set OR regex pattern).
- VirtualArray keeps rows as positional lists, allows duplicate names and has
  no limiters.
- Row/column moves walk by adjacent swaps; deleting rows is tolerant of stale
  indices, everything else raises a DynCSVError subclass.
- str(container) is csv text: header line, then one comma joined line per row.
- Schema text: header `column,type,default,variant,pattern`, one line per column.

API:
- read_data(source, option, **overrides) -> VirtualData
- read_array(source, option, **overrides) -> VirtualArray
- Reader(option).data_from_stream / array_from_stream
- Parser().feed_chunk(bytes, delimiter, consume_dquote, allow_invalid_string)

Python: 3.10+
"""

from .errors import (
    CommandError,
    DynCSVError,
    InsufficientRowData,
    InvalidCellData,
    InvalidColumn,
    InvalidLimiter,
    InvalidRowData,
    InvalidValueType,
    IoError,
    OutOfRangeError,
)
from .meta import Meta
from .parser import Parser, parse_text
from .reader import (
    DEFAULT_READER_OPTION,
    Reader,
    ReaderOption,
    make_arbitrary_column,
    read_array,
    read_data,
)
from .value import LIMITER_ATTRIBUTE_LEN, Value, ValueLimiter, ValueType, display_width
from .vcont import CellAlignType, VCont
from .virtual_array import VirtualArray
from .virtual_data import (
    SCHEMA_HEADER,
    Column,
    ReadOnlyData,
    ReadOnlyDataRef,
    Row,
    VirtualData,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "DynCSVError",
    "InvalidLimiter",
    "InvalidValueType",
    "OutOfRangeError",
    "InsufficientRowData",
    "InvalidRowData",
    "InvalidColumn",
    "InvalidCellData",
    "CommandError",
    "IoError",
    "LIMITER_ATTRIBUTE_LEN",
    "SCHEMA_HEADER",
    "Value",
    "ValueType",
    "ValueLimiter",
    "display_width",
    "Meta",
    "Parser",
    "parse_text",
    "CellAlignType",
    "VCont",
    "Column",
    "Row",
    "ReadOnlyData",
    "ReadOnlyDataRef",
    "VirtualData",
    "VirtualArray",
    "ReaderOption",
    "DEFAULT_READER_OPTION",
    "Reader",
    "make_arbitrary_column",
    "read_data",
    "read_array",
]
