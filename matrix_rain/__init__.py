"""
Matrix Rain - Falling character rain for text terminals

Renders the effect with raw cursor-positioning and color escape sequences,
batching each frame into a single terminal write.

Basic Usage:
    from matrix_rain import main
    main(["--color", "cyan"])

Embedding the engine:
    from matrix_rain import RainConfig, RainEngine, create_glyph_source

    config = RainConfig()
    engine = RainEngine(config, create_glyph_source(config.char_range))
    engine.resize(80, 24)
    engine.render_frame()
"""

__version__ = "1.0.0"

# Configuration
from .config import (
    CharRange,
    Orientation,
    RainColor,
    RainConfig,
    MAX_SPEED,
    DROPLETS_PER_COLUMN,
)

# Core
from .glyphs import GlyphSource, RangeGlyphSource, FileGlyphSource, FileCursor, create_glyph_source
from .droplet import Droplet
from .viewport import Viewport
from .framebuffer import FrameBuffer
from .mask import MaskOverlay, MaskLoader
from .renderer import GlyphArtRenderer, PillowRenderer
from .engine import RainEngine

# Application
from .terminal import TerminalSession
from .app import RainApp, main

# Errors
from .utils.error_handling import (
    RainError,
    ConfigurationError,
    TerminalUnavailableError,
    MaskRenderError,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "CharRange",
    "Orientation",
    "RainColor",
    "RainConfig",
    "MAX_SPEED",
    "DROPLETS_PER_COLUMN",
    # Core
    "GlyphSource",
    "RangeGlyphSource",
    "FileGlyphSource",
    "FileCursor",
    "create_glyph_source",
    "Droplet",
    "Viewport",
    "FrameBuffer",
    "MaskOverlay",
    "MaskLoader",
    "GlyphArtRenderer",
    "PillowRenderer",
    "RainEngine",
    # Application
    "TerminalSession",
    "RainApp",
    "main",
    # Errors
    "RainError",
    "ConfigurationError",
    "TerminalUnavailableError",
    "MaskRenderError",
]
