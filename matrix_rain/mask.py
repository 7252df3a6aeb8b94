"""
Mask Overlay - Shapes the rain into an image silhouette.

The grid comes from a GlyphArtRenderer. A write whose physical position,
after subtracting the offsets, lands on a blank-sentinel cell is forced to a
single blank. Masks are rebuilt in a background thread on every resize and
handed to the render loop through a single-slot reference.
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .renderer import GlyphArtRenderer
from .utils.error_handling import MaskRenderError

logger = logging.getLogger(__name__)

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

BLANK = " "
INVERTED_BLANK = "#"


def strip_ansi(text: str) -> str:
    """Remove color and cursor escape sequences."""
    return ANSI_PATTERN.sub("", text)


@dataclass(frozen=True)
class MaskOverlay:
    """Precomputed opacity grid aligned to the terminal by an offset."""
    grid: Tuple[str, ...]
    offset_row: int = 0
    offset_col: int = 0
    invert: bool = False

    @classmethod
    def from_text(cls, text: str, offset_row: int = 0, offset_col: int = 0,
                  invert: bool = False) -> "MaskOverlay":
        grid = tuple(strip_ansi(text).split("\n")) if text else ()
        return cls(grid=grid, offset_row=offset_row, offset_col=offset_col, invert=invert)

    @property
    def blank(self) -> str:
        return INVERTED_BLANK if self.invert else BLANK

    @property
    def height(self) -> int:
        return len(self.grid)

    @property
    def width(self) -> int:
        return max((len(line) for line in self.grid), default=0)

    def suppresses(self, row: int, col: int) -> bool:
        """Whether a write at physical (row, col) must be blanked."""
        r = row - self.offset_row
        c = col - self.offset_col
        if not 0 <= r < len(self.grid):
            return False
        line = self.grid[r]
        if not 0 <= c < len(line):
            return False
        return line[c] == self.blank


class MaskLoader:
    """
    Computes masks off the render thread.

    Each request gets a generation number. A finished mask is kept only if it
    is newer than the last one delivered, so a slow early render can never
    replace a later one. The same rule applies to failures, which are held
    until the next poll().
    """

    def __init__(self, renderer: GlyphArtRenderer, source_path: str, font_ratio: int = 2,
                 invert: bool = False, offset_row: int = 0, offset_col: int = 0):
        self.renderer = renderer
        self.source_path = source_path
        self.font_ratio = font_ratio
        self.invert = invert
        self.offset_row = offset_row
        self.offset_col = offset_col

        self._lock = threading.Lock()
        self._requested = 0
        self._completed = 0
        self._ready: Optional[MaskOverlay] = None
        self._error: Optional[MaskRenderError] = None
        self._error_generation = 0
        self._threads: List[threading.Thread] = []

    def compute(self, width: int, height: int) -> MaskOverlay:
        """Render the mask synchronously.

        Raises:
            MaskRenderError: if the renderer fails
        """
        try:
            text = self.renderer.render(self.source_path, width, height, self.font_ratio)
        except Exception as e:
            raise MaskRenderError(f"Failed to render mask from {self.source_path}: {e}") from e
        return MaskOverlay.from_text(
            text,
            offset_row=self.offset_row,
            offset_col=self.offset_col,
            invert=self.invert,
        )

    def request(self, width: int, height: int) -> int:
        """Start computing a mask for a physical terminal size. Returns its generation."""
        with self._lock:
            self._requested += 1
            generation = self._requested
            self._threads = [t for t in self._threads if t.is_alive()]
        thread = threading.Thread(
            target=self._run,
            args=(generation, width, height),
            name=f"mask-render-{generation}",
            daemon=True,
        )
        with self._lock:
            self._threads.append(thread)
        thread.start()
        logger.debug(f"Requested mask generation {generation} at {width}x{height}")
        return generation

    def _run(self, generation: int, width: int, height: int):
        try:
            overlay = self.compute(width, height)
        except MaskRenderError as e:
            with self._lock:
                stale = generation <= self._completed
                if not stale:
                    self._error = e
                    self._error_generation = generation
            if stale:
                logger.debug(f"Ignoring failure of stale mask generation {generation}: {e}")
            else:
                logger.debug(f"Mask generation {generation} failed: {e}")
            return

        if not self.deliver(generation, overlay):
            logger.debug(f"Discarding stale mask generation {generation}")

    def deliver(self, generation: int, overlay: MaskOverlay) -> bool:
        """Offer a finished mask. Returns False if a newer one was already delivered."""
        with self._lock:
            if generation <= self._completed:
                return False
            self._completed = generation
            self._ready = overlay
            if self._error_generation < generation:
                self._error = None
            return True

    def poll(self) -> Optional[MaskOverlay]:
        """Take the newest finished mask without blocking.

        Raises:
            MaskRenderError: if a background render failed
        """
        with self._lock:
            error, self._error = self._error, None
            overlay, self._ready = self._ready, None
        if error is not None:
            raise error
        return overlay

    def wait(self, timeout: Optional[float] = None):
        """Block until in-flight renders finish."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)

    @property
    def latest_generation(self) -> int:
        return self._completed
