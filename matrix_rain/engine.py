"""
Rain Engine - Droplet set, viewport and mask driven once per tick.

The engine never blocks: resize() reconciles the droplet set and hands mask
rendering to a background thread, render_frame() advances every droplet and
flushes a single frame.
"""

import logging
import random
from typing import Iterator, List, Optional, TextIO

from .ansi import Ansi
from .config import DROPLETS_PER_COLUMN, Orientation, RainColor, RainConfig
from .droplet import Droplet
from .framebuffer import FrameBuffer
from .glyphs import GlyphSource
from .mask import MaskLoader
from .viewport import Viewport

logger = logging.getLogger(__name__)


class RainEngine:
    """Owns the viewport, the droplets of every column and the optional mask."""

    def __init__(self, config: RainConfig, glyph_source: GlyphSource,
                 stream: Optional[TextIO] = None, mask_loader: Optional[MaskLoader] = None,
                 rng=None):
        self.config = config
        self.color = config.color
        self.glyph_source = glyph_source
        self.mask_loader = mask_loader
        self.viewport = Viewport(orientation=config.orientation)
        self.frame_buffer = FrameBuffer(self.viewport, stream)
        # One list of DROPLETS_PER_COLUMN droplets per logical column
        self.columns: List[List[Droplet]] = []
        self.frame_count = 0
        self._rng = rng or random
        self._range_overrides_applied = False

    @property
    def droplets(self) -> Iterator[Droplet]:
        for pair in self.columns:
            yield from pair

    @property
    def mask(self):
        return self.frame_buffer.mask

    def _make_droplet(self, column: int, head_row: Optional[int] = None) -> Droplet:
        return Droplet.create(
            column,
            self.viewport.num_rows,
            self.glyph_source,
            head_row=head_row,
            rng=self._rng,
        )

    def _apply_range_overrides(self):
        """Honor glyph ranges that dictate orientation and color, once."""
        if self._range_overrides_applied:
            return
        self._range_overrides_applied = True
        char_range = self.glyph_source.char_range
        if char_range is None or not char_range.forces_horizontal:
            return
        self.color = RainColor.WHITE
        if not self.viewport.orientation.is_horizontal:
            logger.info(f"{char_range.option} forces horizontal rain")
            self.viewport.orientation = Orientation.HORIZONTAL
            self.frame_buffer.write(Ansi.clear_screen())

    def resize(self, raw_cols: int, raw_rows: int):
        """Recompute the viewport for a terminal size and reconcile droplets."""
        self._apply_range_overrides()
        self.viewport.resize(raw_cols, raw_rows)
        num_cols = self.viewport.num_cols

        if num_cols > len(self.columns):
            for col in range(len(self.columns), num_cols):
                self.columns.append([self._make_droplet(col) for _ in range(DROPLETS_PER_COLUMN)])
        else:
            del self.columns[num_cols:]

        logger.debug(
            f"Resized to {raw_cols}x{raw_rows} "
            f"({self.viewport.num_cols} columns x {self.viewport.num_rows} rows logical)"
        )

        if self.mask_loader is not None:
            self.mask_loader.request(raw_cols, raw_rows)

    def _install_ready_mask(self):
        if self.mask_loader is None:
            return
        overlay = self.mask_loader.poll()
        if overlay is not None:
            self.frame_buffer.mask = overlay
            logger.debug(f"Installed {overlay.width}x{overlay.height} mask")

    def render_frame(self):
        """Advance every droplet one tick and flush the frame.

        Raises:
            MaskRenderError: if a background mask render failed
        """
        self._install_ready_mask()
        self.frame_count += 1

        rain_color = self.color.escape
        head_color = RainColor.WHITE.escape
        num_rows = self.viewport.num_rows

        for pair in self.columns:
            for i, droplet in enumerate(pair):
                droplet.step(self.frame_buffer, rain_color, head_color)
                if droplet.is_expired(num_rows):
                    pair[i] = self._make_droplet(droplet.column, head_row=0)

        self.frame_buffer.flush()
