"""
Frame Buffer - Batches one tick of terminal writes.

Every write of a tick is accumulated and sent to the terminal in a single
write call, so the terminal repaints once per frame instead of once per
glyph.
"""

import sys
from typing import List, Optional, TextIO

from .ansi import Ansi
from .mask import BLANK, MaskOverlay
from .viewport import Viewport


class FrameBuffer:
    """Accumulates cursor moves, colors and glyphs until flush()."""

    def __init__(self, viewport: Viewport, stream: Optional[TextIO] = None):
        self.viewport = viewport
        self.stream = stream if stream is not None else sys.stdout
        # Replaced wholesale by the engine when a new mask is ready
        self.mask: Optional[MaskOverlay] = None
        self._parts: List[str] = []

    def write(self, text: str):
        """Append raw text (escape sequences or glyphs)."""
        self._parts.append(text)

    def write_at(self, row: int, col: int, glyph: str, color: Optional[str] = None):
        """Write a glyph at a logical position; no-op outside the viewport."""
        if not self.viewport.contains(row, col):
            return
        row, col = self.viewport.transform(row, col)
        mask = self.mask
        if mask is not None and mask.suppresses(row, col):
            glyph, color = BLANK, None
        self._parts.append(f"{Ansi.cursor_pos(row, col)}{color or ''}{glyph or ''}")

    def flush(self):
        """Write the whole buffer to the stream in one call and clear it."""
        if not self._parts:
            return
        data = "".join(self._parts)
        self._parts = []
        self.stream.write(data)
        self.stream.flush()

    def getvalue(self) -> str:
        """Pending, unflushed output."""
        return "".join(self._parts)

    def __len__(self) -> int:
        return len(self._parts)
