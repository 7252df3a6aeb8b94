"""
Glyph Art Renderer Interface

Defines the abstract interface for turning an image into rows of text, which
the mask overlay consumes. The bundled implementation uses Pillow.

Usage:
    from matrix_rain.renderer import GlyphArtRenderer

    class MyRenderer(GlyphArtRenderer):
        def render(self, path, width, height, font_ratio):
            return "###\\n# #\\n###"
"""

import logging
from abc import ABC, abstractmethod
from typing import Tuple

from PIL import Image

logger = logging.getLogger(__name__)

# Character emitted for ink and for background
INK_CHAR = "#"
BACKGROUND_CHAR = " "


class GlyphArtRenderer(ABC):
    """
    Abstract interface for image-to-text rendering.

    The returned text may contain ANSI color codes; callers strip them.
    Implementations are called from a background thread.
    """

    @abstractmethod
    def render(self, path: str, width: int, height: int, font_ratio: int) -> str:
        """
        Render an image as newline separated rows of text.

        Args:
            path: Image file path
            width: Maximum columns
            height: Maximum rows
            font_ratio: Height of a glyph cell relative to its width

        Returns:
            Text no wider than `width` and no taller than `height`
        """
        pass


def fit_size(image_width: int, image_height: int, width: int, height: int,
             font_ratio: int) -> Tuple[int, int]:
    """Largest (cols, rows) that keeps the image aspect inside width x height."""
    if image_width <= 0 or image_height <= 0 or width <= 0 or height <= 0:
        return 0, 0
    cols = width
    rows = round(image_height / image_width * cols / font_ratio)
    if rows > height:
        rows = height
        cols = min(width, round(image_width / image_height * rows * font_ratio))
    return max(1, cols), max(1, rows)


class PillowRenderer(GlyphArtRenderer):
    """Thresholds a grayscale version of the image into ink/background cells."""

    def __init__(self, threshold: int = 128):
        self.threshold = threshold

    def render(self, path: str, width: int, height: int, font_ratio: int) -> str:
        with Image.open(path) as img:
            rgba = img.convert("RGBA")
        # Transparent pixels count as background
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        gray = Image.alpha_composite(background, rgba).convert("L")

        cols, rows = fit_size(gray.width, gray.height, width, height, font_ratio)
        if cols == 0 or rows == 0:
            return ""
        gray = gray.resize((cols, rows))
        px = gray.load()

        lines = []
        for y in range(rows):
            lines.append("".join(
                INK_CHAR if px[x, y] < self.threshold else BACKGROUND_CHAR
                for x in range(cols)
            ))
        logger.debug(f"Rendered {path} as {cols}x{rows} glyph art")
        return "\n".join(lines)
