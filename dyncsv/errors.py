"""Exception hierarchy shared by every dyncsv module."""

from __future__ import annotations

from typing import Optional


class DynCSVError(ValueError):
    """Base class for dyncsv failures. `reason` holds the human readable cause."""

    label = "Error"

    def __init__(self, reason: str = "") -> None:
        msg = self.label if not reason else f"{self.label} = {reason}"
        super().__init__(msg)
        self.reason = reason


class InvalidLimiter(DynCSVError):
    label = "Invalid limiter"


class InvalidValueType(DynCSVError):
    label = "Invalid type"


class OutOfRangeError(DynCSVError):
    label = "Index out of range"


class InsufficientRowData(DynCSVError):
    label = "Insufficient row data"


class InvalidRowData(DynCSVError):
    label = "Invalid row data"


class InvalidColumn(DynCSVError):
    label = "Invalid column"


class InvalidCellData(DynCSVError):
    label = "Invalid cell data"


class CommandError(DynCSVError):
    label = "Invalid command call"


class IoError(DynCSVError):
    """Failure of the underlying byte source, with context on where it happened."""

    label = "IO error"

    def __init__(self, error: OSError, meta: str, *, line: Optional[int] = None) -> None:
        super().__init__(f"{error} :: {meta}")
        self.error = error  # original OSError
        self.meta = meta    # what the reader was doing
        self.line = line    # 1-based physical line, if known


__all__ = [
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
]
