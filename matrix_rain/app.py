"""
Matrix Rain - The famous falling green characters, in any terminal.

Usage:
    matrix-rain
    matrix-rain --direction h --color cyan
    matrix-rain --char-range katakana
    matrix-rain --file-path README.md
    matrix-rain --mask-path logo.png --offset-row 2

Press any key (or Ctrl+C) to exit.
"""

import argparse
import logging
import signal
import sys
import time
from typing import List, Optional, TextIO

from . import __version__
from .config import FRAME_INTERVAL, CharRange, RainColor, RainConfig
from .engine import RainEngine
from .glyphs import create_glyph_source
from .mask import MaskLoader
from .renderer import GlyphArtRenderer, PillowRenderer
from .terminal import TerminalSession
from .utils.error_handling import RainError, handle_error

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class RainApp:
    """Runs the render loop on a fixed cadence until a key or signal stops it."""

    def __init__(self, config: RainConfig, stdout: Optional[TextIO] = None,
                 stdin: Optional[TextIO] = None, renderer: Optional[GlyphArtRenderer] = None,
                 frame_interval: float = FRAME_INTERVAL):
        self.config = config
        self.session = TerminalSession(stdout=stdout, stdin=stdin)
        self.renderer = renderer or PillowRenderer()
        self.frame_interval = frame_interval
        self.running = False
        self._resize_pending = False
        self._previous_handlers = {}

    def build_mask_loader(self) -> Optional[MaskLoader]:
        if not self.config.mask_path:
            return None
        return MaskLoader(
            self.renderer,
            self.config.mask_path,
            font_ratio=self.config.font_ratio,
            invert=self.config.invert_mask,
            offset_row=self.config.offset_row,
            offset_col=self.config.offset_col,
        )

    def build_engine(self) -> RainEngine:
        glyph_source = create_glyph_source(self.config.char_range, self.config.file_path)
        return RainEngine(
            self.config,
            glyph_source,
            stream=self.session.stdout,
            mask_loader=self.build_mask_loader(),
        )

    def _request_resize(self, *_):
        self._resize_pending = True

    def _request_stop(self, *_):
        self.running = False

    def _install_signal_handlers(self):
        # Windows has no SIGWINCH
        if hasattr(signal, 'SIGWINCH'):
            self._previous_handlers[signal.SIGWINCH] = signal.signal(
                signal.SIGWINCH, self._request_resize)
        self._previous_handlers[signal.SIGTERM] = signal.signal(
            signal.SIGTERM, self._request_stop)

    def _restore_signal_handlers(self):
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers = {}

    def run(self) -> int:
        """Run the rain. Returns the process exit code."""
        self.session.check()
        engine = self.build_engine()

        self.running = True
        try:
            with self.session:
                self._install_signal_handlers()
                engine.resize(*self.session.size())
                self._main_loop(engine)
        except KeyboardInterrupt:
            logger.debug("Interrupted")
        finally:
            self.running = False
            self._restore_signal_handlers()
        return 0

    def _main_loop(self, engine: RainEngine):
        """Tick the engine every frame_interval seconds."""
        while self.running:
            started = time.monotonic()

            if self.session.key_pressed():
                break

            if self._resize_pending:
                self._resize_pending = False
                engine.resize(*self.session.size())

            engine.render_frame()

            elapsed = time.monotonic() - started
            if elapsed < self.frame_interval:
                time.sleep(self.frame_interval - elapsed)


def print_mask(config: RainConfig, stdout: Optional[TextIO] = None,
               renderer: Optional[GlyphArtRenderer] = None) -> int:
    """Render the configured mask once at terminal size and print it."""
    stdout = stdout if stdout is not None else sys.stdout
    session = TerminalSession(stdout=stdout)
    cols, rows = session.size()
    loader = MaskLoader(
        renderer or PillowRenderer(),
        config.mask_path,
        font_ratio=config.font_ratio,
        invert=config.invert_mask,
    )
    overlay = loader.compute(cols, rows)
    for line in overlay.grid:
        stdout.write(line + "\n")
    stdout.flush()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matrix-rain",
        description="The famous Matrix rain effect of falling green characters as a cli command",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    matrix-rain                          # Green ASCII rain
    matrix-rain -d h -c cyan             # Horizontal cyan rain
    matrix-rain -k katakana              # Half-width katakana
    matrix-rain -f notes.txt             # Rain the contents of a file
    matrix-rain -m logo.png --invert-mask

Press any key to exit.
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-d", "--direction", choices=["h", "v"], default="v",
                        help="Change direction of rain. h=horizontal, v=vertical.")
    parser.add_argument("-c", "--color", choices=[c.value for c in RainColor], default="green",
                        help="Rain color. NOTE: droplet start is always white.")
    parser.add_argument("-k", "--char-range", choices=CharRange.options(), default="ascii",
                        help="Use rain characters from char-range.")
    parser.add_argument("-f", "--file-path",
                        help="Read characters from a file instead of random characters from char-range.")
    parser.add_argument("-m", "--mask-path",
                        help="Only rain inside the shape of an image.")
    parser.add_argument("--invert-mask", action="store_true",
                        help="Rain outside the shape of the mask image instead.")
    parser.add_argument("--offset-row", type=int, default=0,
                        help="Move the mask down by this many rows.")
    parser.add_argument("--offset-col", type=int, default=0,
                        help="Move the mask right by this many columns.")
    parser.add_argument("--font-ratio", type=int, default=2,
                        help="Height of a character cell relative to its width, for sizing the mask (default: 2)")
    parser.add_argument("--print-mask", action="store_true",
                        help="Print the mask once and exit.")
    parser.add_argument("--log-file",
                        help="Write log records to this file.")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING",
                        help="Log level (default: WARNING)")
    return parser


def configure_logging(log_file: Optional[str], level: str):
    """Log to a file when given; otherwise stderr, which the rain shares."""
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        filename=log_file,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    try:
        config = RainConfig.from_args(args).validate()
        if config.print_mask:
            return print_mask(config)
        return RainApp(config).run()
    except RainError as e:
        handle_error(e, "matrix-rain")
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
