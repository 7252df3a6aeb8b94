"""
Rain Configuration - Options consumed by the render engine.

Built from parsed command line arguments; validated before the terminal is
touched so configuration errors never leave the screen in the alternate
buffer.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .ansi import Colors
from .utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

# Head advances one row every `speed` ticks, speed drawn from [1, MAX_SPEED)
MAX_SPEED = 20

# Two independently phased droplets per column keep the rain dense
DROPLETS_PER_COLUMN = 2

# 60 FPS
FRAME_INTERVAL = 0.016

DEFAULT_FONT_RATIO = 2


class Orientation(Enum):
    """Direction the rain falls in."""
    VERTICAL = "v"
    HORIZONTAL = "h"

    @property
    def is_horizontal(self) -> bool:
        return self is Orientation.HORIZONTAL


class RainColor(Enum):
    """Trail colors. The leading edge is always white."""
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"

    @property
    def escape(self) -> str:
        """Bright foreground escape sequence for this color."""
        return Colors.fg({
            RainColor.GREEN: Colors.FG_GREEN,
            RainColor.RED: Colors.FG_RED,
            RainColor.BLUE: Colors.FG_BLUE,
            RainColor.YELLOW: Colors.FG_YELLOW,
            RainColor.MAGENTA: Colors.FG_MAGENTA,
            RainColor.CYAN: Colors.FG_CYAN,
            RainColor.WHITE: Colors.FG_WHITE,
        }[self])


class CharRange(Enum):
    """
    Glyph ranges a droplet can be filled from.

    Each member carries (bounds, literal): bounds is a half-open code-point
    interval sampled uniformly per unit, literal a fixed unit repeated.
    """
    ASCII = ("ascii", (0x21, 0x7E), None)
    BINARY = ("binary", (0x30, 0x32), None)
    BRAILLE = ("braille", (0x2840, 0x28FF), None)
    KATAKANA = ("katakana", (0xFF66, 0xFF9E), None)
    PICTO = ("picto", (0x4E00, 0x9FA6), None)
    # Double-width glyphs
    EMOJI = ("emoji", (0x1F601, 0x1F64A), None)
    LIL_GUYS = ("lil-guys", None, "  ~~o ")

    def __init__(self, option: str, bounds: Optional[Tuple[int, int]], literal: Optional[str]):
        self.option = option
        self.bounds = bounds
        self.literal = literal

    @property
    def forces_horizontal(self) -> bool:
        """Lil guys only make sense walking left to right, in white."""
        return self is CharRange.LIL_GUYS

    @classmethod
    def from_option(cls, option: str) -> "CharRange":
        for member in cls:
            if member.option == option:
                return member
        raise ConfigurationError(f"Unknown char range: {option}")

    @classmethod
    def options(cls):
        return [member.option for member in cls]


@dataclass
class RainConfig:
    """Engine configuration."""
    orientation: Orientation = Orientation.VERTICAL
    color: RainColor = RainColor.GREEN
    char_range: CharRange = CharRange.ASCII
    file_path: Optional[str] = None
    mask_path: Optional[str] = None
    invert_mask: bool = False
    offset_row: int = 0
    offset_col: int = 0
    font_ratio: int = DEFAULT_FONT_RATIO
    print_mask: bool = False

    @classmethod
    def from_args(cls, args) -> "RainConfig":
        """Build a config from an argparse namespace."""
        return cls(
            orientation=Orientation(args.direction),
            color=RainColor(args.color),
            char_range=CharRange.from_option(args.char_range),
            file_path=args.file_path,
            mask_path=args.mask_path,
            invert_mask=args.invert_mask,
            offset_row=args.offset_row,
            offset_col=args.offset_col,
            font_ratio=args.font_ratio,
            print_mask=args.print_mask,
        )

    def validate(self) -> "RainConfig":
        """Check referenced files and flag combinations.

        Raises:
            ConfigurationError: if a file is missing or flags conflict
        """
        if self.file_path is not None and not os.path.isfile(self.file_path):
            raise ConfigurationError(f"{self.file_path} doesn't exist")
        if self.print_mask and not self.mask_path:
            raise ConfigurationError("--print-mask requires --mask-path")
        if self.mask_path is not None and not os.path.isfile(self.mask_path):
            raise ConfigurationError(f"{self.mask_path} doesn't exist")
        if self.font_ratio < 1:
            raise ConfigurationError(f"font ratio must be positive, got {self.font_ratio}")
        logger.debug(f"Configuration validated: {self}")
        return self
