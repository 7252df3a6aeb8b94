"""
Glyph Sources - Trail characters for droplets.

A glyph source fills a droplet with exactly `length` display units, either
sampled from a code-point range, repeated from a literal, or read in order
from a text file.
"""

import logging
import os
import random
from typing import List, Optional

from .config import CharRange
from .utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


class GlyphSource:
    """Base class for glyph sources."""

    # Range whose side effects the engine honors (lil-guys orientation)
    char_range: Optional[CharRange] = None

    def generate(self, length: int) -> List[str]:
        raise NotImplementedError


class RangeGlyphSource(GlyphSource):
    """Samples glyphs from a CharRange."""

    def __init__(self, char_range: CharRange, rng=None):
        self.char_range = char_range
        self._rng = rng or random

    def generate(self, length: int) -> List[str]:
        if self.char_range.literal is not None:
            return [self.char_range.literal] * length
        start, end = self.char_range.bounds
        return [chr(self._rng.randrange(start, end)) for _ in range(length)]


class FileCursor:
    """
    Read position into a character sequence, wrapping at the end.

    One cursor is owned by a FileGlyphSource and shared by every droplet it
    fills, so droplets interleave through the same rotating text.
    """

    def __init__(self, chars: str):
        if not chars:
            raise ValueError("FileCursor needs at least one character")
        self._chars = chars
        self.position = 0

    def take(self) -> str:
        if self.position >= len(self._chars):
            self.position = 0
        char = self._chars[self.position]
        self.position += 1
        return char

    def __len__(self) -> int:
        return len(self._chars)


class FileGlyphSource(GlyphSource):
    """Draws glyphs from the stripped contents of a text file."""

    def __init__(self, path: str):
        if not os.path.isfile(path):
            raise ConfigurationError(f"{path} doesn't exist")
        # Undecodable bytes become U+FFFD instead of failing the run
        try:
            with open(path, encoding='utf-8', errors='replace') as f:
                chars = f.read().strip()
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}") from e
        if not chars:
            raise ConfigurationError(f"{path} has no characters to rain")
        self.path = path
        self.cursor = FileCursor(chars)
        logger.debug(f"Loaded {len(self.cursor)} glyphs from {path}")

    def generate(self, length: int) -> List[str]:
        return [self.cursor.take() for _ in range(length)]


def create_glyph_source(char_range: CharRange, file_path: Optional[str] = None,
                        rng=None) -> GlyphSource:
    """Pick the glyph source for a configuration; a file path wins over the range."""
    if file_path:
        return FileGlyphSource(file_path)
    return RangeGlyphSource(char_range, rng=rng)
