"""
Values, value types and value limiters.

A cell holds a `Value`, which is either a Number (signed integer) or Text.
There is deliberately no float variant: a float can silently rewrite the
original source text when a table is saved again, and dyncsv only deals in
values that round-trip exactly.

A `ValueLimiter` constrains what a column accepts:
- type    : Number or Text
- default : value used for new rows and for cells that fail a lenient re-check
- variant : finite set of allowed values        (mutually exclusive
- pattern : regex searched in the value's text   with each other)
Variant and pattern both require a default, and the default must satisfy them.
"""

from __future__ import annotations

import functools
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from .errors import InvalidLimiter, InvalidRowData, InvalidValueType

# Number of attributes in a schema row, excluding the column name
LIMITER_ATTRIBUTE_LEN = 4

_NUMBER_RE = re.compile(r"[+-]?[0-9]+")


# ----------------------------
# Display width
# ----------------------------

def display_width(text: str) -> int:
    """Terminal column width of `text`: wide/fullwidth chars count 2, combining and control chars 0."""
    width = 0
    for ch in text:
        if unicodedata.combining(ch):
            continue
        category = unicodedata.category(ch)
        if category in ("Cc", "Cf", "Me", "Mn"):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


# ----------------------------
# Value type
# ----------------------------

class ValueType(Enum):
    NUMBER = "Number"
    TEXT = "Text"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, src: str) -> "ValueType":
        """Case-insensitive parse of "number" / "text"; anything else is an error."""
        token = src.strip().lower()
        if token == "number":
            return cls.NUMBER
        if token == "text":
            return cls.TEXT
        raise InvalidValueType(f"Value type should be either number or text, got {src!r}")


# ----------------------------
# Value
# ----------------------------

@functools.total_ordering
@dataclass(frozen=True)
class Value:
    value_type: ValueType
    data: Union[int, str]

    def __post_init__(self) -> None:
        if self.value_type is ValueType.NUMBER:
            if isinstance(self.data, bool) or not isinstance(self.data, int):
                raise InvalidValueType(f"Number value needs an integer, got {self.data!r}")
        elif not isinstance(self.data, str):
            raise InvalidValueType(f"Text value needs a string, got {self.data!r}")

    @classmethod
    def number(cls, num: int) -> "Value":
        return cls(ValueType.NUMBER, num)

    @classmethod
    def text(cls, txt: str) -> "Value":
        return cls(ValueType.TEXT, txt)

    @classmethod
    def empty(cls, value_type: ValueType) -> "Value":
        """Default value of a type: Number 0 or empty Text."""
        if value_type is ValueType.NUMBER:
            return cls.number(0)
        return cls.text("")

    @classmethod
    def from_str(cls, src: str, value_type: ValueType) -> "Value":
        """Convert text into a value of the given type. Empty text is Number 0."""
        if value_type is ValueType.TEXT:
            return cls.text(src)
        if src == "":
            return cls.number(0)
        if _NUMBER_RE.fullmatch(src) is None:
            raise InvalidValueType(f"{src!r} is not a valid number")
        return cls.number(int(src))

    def get_type(self) -> ValueType:
        return self.value_type

    @property
    def width(self) -> int:
        return display_width(str(self))

    def _sort_key(self):
        return (0 if self.value_type is ValueType.NUMBER else 1, self.data)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return str(self.data)

    def __repr__(self) -> str:
        return f"{self.value_type.value}({self.data!r})"


# ----------------------------
# Value limiter
# ----------------------------

class ValueLimiter:
    """Per-column constraint. Mutually exclusive parts are only set through set_variant/set_pattern."""

    def __init__(self, value_type: ValueType = ValueType.TEXT, default: Optional[Value] = None) -> None:
        self._value_type = value_type
        self._default: Optional[Value] = None
        self._variant: Optional[List[Value]] = None
        self._pattern: Optional[re.Pattern] = None
        if default is not None:
            self.set_default(default)

    def get_type(self) -> ValueType:
        return self._value_type

    def set_type(self, value_type: ValueType) -> None:
        """Change the type. The default, variants and pattern are dropped when the type changes."""
        if value_type is self._value_type:
            return
        self._value_type = value_type
        self._default = None
        self._variant = None
        self._pattern = None

    def get_default(self) -> Optional[Value]:
        return self._default

    def _check_default_type(self, default: Value) -> None:
        if default.get_type() is not self._value_type:
            raise InvalidLimiter(
                f"Default value {default!r} doesn't match limiter type {self._value_type}"
            )

    def set_default(self, default: Value) -> None:
        self._check_default_type(default)
        if self._variant is not None and default not in self._variant:
            raise InvalidLimiter("Default value should be among one of variants")
        if self._pattern is not None and self._pattern.search(str(default)) is None:
            raise InvalidLimiter("Default value should match pattern")
        self._default = default

    def get_variant(self) -> Optional[List[Value]]:
        return None if self._variant is None else list(self._variant)

    def set_variant(self, default: Value, variants: Sequence[Value]) -> None:
        self._check_default_type(default)
        if default not in variants:
            raise InvalidLimiter("Default value should be among one of variants")
        for var in variants:
            if var.get_type() is not self._value_type:
                raise InvalidLimiter(f"Variant {var!r} doesn't match limiter type {self._value_type}")
        self._pattern = None
        self._variant = list(variants)
        self._default = default

    def get_pattern(self) -> Optional[re.Pattern]:
        return self._pattern

    def set_pattern(self, default: Value, pattern: Union[str, re.Pattern]) -> None:
        self._check_default_type(default)
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise InvalidLimiter(f"Invalid pattern {pattern!r}: {e}") from e
        if pattern.search(str(default)) is None:
            raise InvalidLimiter("Default value should match pattern")
        self._variant = None
        self._pattern = pattern
        self._default = default

    def is_convertible(self, value: Value) -> Optional[ValueType]:
        """Return the limiter's type if `value` can be reinterpreted as it, else None."""
        if self._value_type is ValueType.TEXT:
            return ValueType.TEXT
        if value.get_type() is ValueType.NUMBER:
            return ValueType.NUMBER
        text = str(value)
        if text == "" or _NUMBER_RE.fullmatch(text) is not None:
            return ValueType.NUMBER
        return None

    def qualify(self, value: Value) -> bool:
        if value.get_type() is not self._value_type:
            return False
        if self._variant is not None:
            return value in self._variant
        if self._pattern is not None:
            return self._pattern.search(str(value)) is not None
        return True

    @classmethod
    def from_schema_row(cls, attributes: Sequence[str]) -> "ValueLimiter":
        """
        Build a limiter from schema attributes in the order
        type, default, variant (whitespace separated), pattern.
        """
        if len(attributes) != LIMITER_ATTRIBUTE_LEN:
            raise InvalidRowData(
                f"Schema row needs {LIMITER_ATTRIBUTE_LEN} attributes, got {list(attributes)!r}"
            )
        raw_type, raw_default, raw_variant, raw_pattern = attributes
        vt = ValueType.from_str(raw_type)
        limiter = cls(vt)

        if raw_default == "":
            if raw_variant != "" or raw_pattern != "":
                raise InvalidLimiter("Either pattern or variants needs default value to be valid")
            return limiter

        default = Value.from_str(raw_default, vt)
        if raw_variant != "":
            variants = [Value.from_str(var, vt) for var in raw_variant.split()]
            limiter.set_variant(default, variants)
        elif raw_pattern != "":
            limiter.set_pattern(default, raw_pattern)
        else:
            limiter.set_default(default)
        return limiter

    def to_schema_fields(self) -> List[str]:
        default = "" if self._default is None else str(self._default)
        variant = "" if self._variant is None else " ".join(str(v) for v in self._variant)
        pattern = "" if self._pattern is None else self._pattern.pattern
        return [str(self._value_type), default, variant, pattern]

    def copy(self) -> "ValueLimiter":
        dup = ValueLimiter(self._value_type)
        dup._default = self._default
        dup._variant = None if self._variant is None else list(self._variant)
        dup._pattern = self._pattern
        return dup

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueLimiter):
            return NotImplemented
        return self.to_schema_fields() == other.to_schema_fields()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ValueLimiter({', '.join(repr(f) for f in self.to_schema_fields())})"

    def __str__(self) -> str:
        lines = [f"type : {self._value_type}"]
        if self._default is not None:
            lines.append(f"default value : {self._default!r}")
        if self._variant is not None:
            lines.append(f"variants : {self._variant!r}")
        elif self._pattern is not None:
            lines.append(f"pattern : {self._pattern.pattern!r}")
        return "\n".join(lines)


__all__ = [
    "LIMITER_ATTRIBUTE_LEN",
    "display_width",
    "ValueType",
    "Value",
    "ValueLimiter",
]
