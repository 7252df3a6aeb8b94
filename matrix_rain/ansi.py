"""
ANSI Escape Sequences - Terminal control surface for the rain renderer.

All output goes straight to the terminal as CSI sequences; nothing here
touches curses.
"""

CSI = "\x1b["


class Ansi:
    """Escape sequence builders."""

    @staticmethod
    def reset() -> str:
        return f"{CSI}c"

    @staticmethod
    def clear_screen() -> str:
        return f"{CSI}2J"

    @staticmethod
    def cursor_home() -> str:
        return f"{CSI}H"

    @staticmethod
    def cursor_pos(row: int, col: int) -> str:
        """Move the cursor to a 0-based (row, col); the wire format is 1-based."""
        return f"{CSI}{row + 1};{col + 1}H"

    @staticmethod
    def cursor_visible() -> str:
        return f"{CSI}?25h"

    @staticmethod
    def cursor_invisible() -> str:
        return f"{CSI}?25l"

    @staticmethod
    def use_alt_buffer() -> str:
        return f"{CSI}?47h"

    @staticmethod
    def use_normal_buffer() -> str:
        return f"{CSI}?47l"

    @staticmethod
    def underline() -> str:
        return f"{CSI}4m"

    @staticmethod
    def off() -> str:
        return f"{CSI}0m"

    @staticmethod
    def bold() -> str:
        return f"{CSI}1m"

    @staticmethod
    def color(code: int) -> str:
        """Bright variant of a 16-color SGR code."""
        return f"{CSI}{code};1m"


class Colors:
    """SGR color codes and builders."""
    FG_BLACK = 30
    FG_RED = 31
    FG_GREEN = 32
    FG_YELLOW = 33
    FG_BLUE = 34
    FG_MAGENTA = 35
    FG_CYAN = 36
    FG_WHITE = 37
    BG_BLACK = 40
    BG_RED = 41
    BG_GREEN = 42
    BG_YELLOW = 43
    BG_BLUE = 44
    BG_MAGENTA = 45
    BG_CYAN = 46
    BG_WHITE = 47

    @staticmethod
    def fg(code: int) -> str:
        return Ansi.color(code)

    @staticmethod
    def bg(code: int) -> str:
        return Ansi.color(code)

    @staticmethod
    def fg_rgb(r: int, g: int, b: int) -> str:
        return f"{CSI}38;2;{r};{g};{b}m"

    @staticmethod
    def bg_rgb(r: int, g: int, b: int) -> str:
        return f"{CSI}48;2;{r};{g};{b}m"
