"""
Droplet - One falling trail of glyphs anchored to a column.

A droplet advances its head one row every `speed` ticks, painting the
previous head in the rain color, the new head in white, and erasing the cell
`trail_height` rows behind. Once the tail has left the viewport the engine
replaces it with a fresh droplet in the same column.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from .config import MAX_SPEED
from .glyphs import GlyphSource


@dataclass
class Droplet:
    """Per-column falling entity."""
    column: int
    head_row: int
    trail_height: int
    speed: int
    glyphs: List[str] = field(repr=False)
    tick_count: int = 0

    @classmethod
    def create(cls, column: int, num_rows: int, glyph_source: GlyphSource,
               head_row: Optional[int] = None, rng=None) -> "Droplet":
        """Build a droplet with fresh random parameters.

        Args:
            column: Logical column the droplet falls in
            num_rows: Current logical viewport height
            glyph_source: Source for the droplet's glyph sequence
            head_row: Starting head row; random in [0, num_rows) if not given
            rng: Random generator (module `random` by default)
        """
        rng = rng or random
        if head_row is None:
            head_row = rng.randrange(num_rows) if num_rows > 0 else 0
        half = num_rows // 2
        trail_height = rng.randrange(half, num_rows) if num_rows > half else half
        return cls(
            column=column,
            head_row=head_row,
            trail_height=trail_height,
            speed=rng.randrange(1, MAX_SPEED),
            glyphs=glyph_source.generate(num_rows),
        )

    def glyph_at(self, row: int) -> str:
        """Glyph for a logical row, empty outside the sequence."""
        if 0 <= row < len(self.glyphs):
            return self.glyphs[row]
        return ""

    @property
    def tail_row(self) -> int:
        return self.head_row - self.trail_height

    def is_expired(self, num_rows: int) -> bool:
        """True once the erased tail has moved past the bottom of the viewport."""
        return self.tail_row > num_rows

    def step(self, buffer, rain_color: str, head_color: str) -> bool:
        """Run one tick. Returns True if the head advanced."""
        self.tick_count += 1
        if self.tick_count % self.speed != 0:
            return False

        row = self.head_row
        buffer.write_at(row - 1, self.column, self.glyph_at(row - 1), rain_color)
        buffer.write_at(row, self.column, self.glyph_at(row), head_color)
        buffer.write_at(self.tail_row, self.column, " ")
        self.head_row += 1
        return True
