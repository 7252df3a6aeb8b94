"""
Terminal Session - Alternate buffer, cursor and input mode lifecycle.

Entering a session switches to the alternate screen buffer, hides the
cursor and puts stdin in cbreak mode so a single keypress can end the rain.
Leaving it undoes all of that, whatever exception is in flight.
"""

import logging
import os
import select
import shutil
import sys
from typing import Optional, TextIO, Tuple

# termios/tty are POSIX only
try:
    import termios
    import tty
    TERMIOS_AVAILABLE = True
except ImportError:
    termios = None
    tty = None
    TERMIOS_AVAILABLE = False

from .ansi import Ansi, Colors
from .utils.error_handling import TerminalUnavailableError

logger = logging.getLogger(__name__)


class TerminalSession:
    """Context manager owning the terminal while the rain runs."""

    def __init__(self, stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stdin = stdin if stdin is not None else sys.stdin
        self.active = False
        self._stdin_fd: Optional[int] = None
        self._old_settings = None

    def check(self):
        """Refuse to run when output is not an interactive terminal."""
        isatty = getattr(self.stdout, 'isatty', None)
        if isatty is None or not isatty():
            raise TerminalUnavailableError("Output is not a text terminal")

    def size(self) -> Tuple[int, int]:
        """Terminal (columns, rows)."""
        try:
            size = os.get_terminal_size(self.stdout.fileno())
        except (AttributeError, OSError, ValueError):
            size = shutil.get_terminal_size()
        return size.columns, size.lines

    def _stdin_is_tty(self) -> bool:
        isatty = getattr(self.stdin, 'isatty', None)
        return bool(isatty and isatty())

    def _enter_cbreak(self):
        if not TERMIOS_AVAILABLE or not self._stdin_is_tty():
            return
        self._stdin_fd = self.stdin.fileno()
        self._old_settings = termios.tcgetattr(self._stdin_fd)
        tty.setcbreak(self._stdin_fd)

    def _restore_input(self):
        if self._old_settings is None:
            return
        termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._old_settings)
        self._old_settings = None

    def enter(self):
        """Switch to the alternate buffer with a hidden cursor on black."""
        self._enter_cbreak()
        self.stdout.write("".join([
            Ansi.use_alt_buffer(),
            Ansi.cursor_invisible(),
            Colors.bg(Colors.BG_BLACK),
            Colors.fg(Colors.FG_BLACK),
            Ansi.clear_screen(),
        ]))
        self.stdout.flush()
        self.active = True
        logger.debug("Terminal session started")

    def restore(self):
        """Undo enter(). Safe to call more than once."""
        try:
            self._restore_input()
        finally:
            if self.active:
                self.active = False
                self.stdout.write("".join([
                    Ansi.off(),
                    Ansi.cursor_visible(),
                    Ansi.clear_screen(),
                    Ansi.cursor_home(),
                    Ansi.use_normal_buffer(),
                ]))
                self.stdout.flush()
                logger.debug("Terminal session restored")

    def key_pressed(self) -> bool:
        """Non-blocking check for (and consumption of) pending keyboard input."""
        if self._stdin_fd is None:
            return False
        readable, _, _ = select.select([self._stdin_fd], [], [], 0)
        if not readable:
            return False
        os.read(self._stdin_fd, 1024)
        return True

    def __enter__(self) -> "TerminalSession":
        try:
            self.enter()
        except BaseException:
            self.restore()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False
