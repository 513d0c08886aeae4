from __future__ import annotations

from dataclasses import dataclass

from .value import Value


@dataclass
class Meta:
    """Display width bookkeeping for one column. Only cell values count; headers are folded in when rendering."""

    max_unicode_width: int = 0

    def set_width(self, width: int) -> None:
        self.max_unicode_width = width

    def update_width(self, width: int) -> None:
        self.max_unicode_width = max(self.max_unicode_width, width)

    def update_width_from_value(self, target: Value) -> None:
        self.update_width(target.width)
