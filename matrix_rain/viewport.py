"""
Viewport - Logical rain area and the orientation transform.

Droplets always fall along the logical row axis. For horizontal rain the
terminal's width and height are swapped on the way in and the (row, col) of
every write is swapped back on the way out.
"""

from dataclasses import dataclass
from typing import Tuple

from .config import Orientation


@dataclass
class Viewport:
    """Current logical dimensions plus orientation."""
    num_cols: int = 0
    num_rows: int = 0
    orientation: Orientation = Orientation.VERTICAL

    def resize(self, raw_cols: int, raw_rows: int):
        """Store the terminal size, swapped when the rain is horizontal."""
        if self.orientation.is_horizontal:
            raw_cols, raw_rows = raw_rows, raw_cols
        self.num_cols = max(0, raw_cols)
        self.num_rows = max(0, raw_rows)

    def contains(self, row: int, col: int) -> bool:
        """Whether a logical position is inside the viewport."""
        return 0 <= row < self.num_rows and 0 <= col < self.num_cols

    def transform(self, row: int, col: int) -> Tuple[int, int]:
        """Map logical (row, col) to physical terminal (row, col). Self-inverse."""
        if self.orientation.is_horizontal:
            return col, row
        return row, col

    @property
    def physical_size(self) -> Tuple[int, int]:
        """Terminal (cols, rows) this viewport was derived from."""
        if self.orientation.is_horizontal:
            return self.num_rows, self.num_cols
        return self.num_cols, self.num_rows
