"""ESC/POS command catalog.

Every directive the printer session understands maps to a fixed byte
sequence here. The values are the literal protocol bytes sent to the device:

    ESC @        initialize
    ESC E / F    emphasis on / off
    ESC a n      alignment (0 left, 1 center, 2 right)
    ESC ! n      print mode (0x00 normal, 0x10 double height,
                 0x20 double width, 0x30 both)
    ESC d n      feed n lines, n as one raw byte
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from . import constants
from .errors import CommandError

ESC = b"\x1b"
LF = b"\n"


class Alignment(str, Enum):
    """Horizontal justification of subsequent lines."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextSize(str, Enum):
    """Character size selected through the print mode byte."""

    NORMAL = "normal"
    DOUBLE_HEIGHT = "double_height"
    DOUBLE_WIDTH = "double_width"
    DOUBLE_BOTH = "double_both"


_ALIGNMENT_CODES: dict[Alignment, bytes] = {
    Alignment.LEFT: ESC + b"a\x00",
    Alignment.CENTER: ESC + b"a\x01",
    Alignment.RIGHT: ESC + b"a\x02",
}

_TEXT_SIZE_CODES: dict[TextSize, bytes] = {
    TextSize.NORMAL: ESC + b"!\x00",
    TextSize.DOUBLE_HEIGHT: ESC + b"!\x10",
    TextSize.DOUBLE_WIDTH: ESC + b"!\x20",
    TextSize.DOUBLE_BOTH: ESC + b"!\x30",
}


def _coerce(enum_type, value):
    try:
        return enum_type(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise CommandError(
            f"Unknown {enum_type.__name__} {value!r} (expected one of: {choices})"
        ) from None


class Commands:
    """Byte sequences and builders for the supported ESC/POS directives."""

    INIT = ESC + b"@"
    """Reset the printer to its power-on state."""

    BOLD_ON = ESC + b"E"
    """Start emphasized printing."""

    BOLD_OFF = ESC + b"F"
    """Stop emphasized printing."""

    @staticmethod
    def align(alignment: Union[Alignment, str]) -> bytes:
        return _ALIGNMENT_CODES[_coerce(Alignment, alignment)]

    @staticmethod
    def set_text_size(size: Union[TextSize, str]) -> bytes:
        return _TEXT_SIZE_CODES[_coerce(TextSize, size)]

    @staticmethod
    def feed_lines(n: int = constants.DEFAULT_FEED_LINES) -> bytes:
        """Advance the paper by ``n`` lines.

        The count is sent as a single raw byte, so ``n`` must lie within
        0..255. Anything else raises :class:`CommandError` instead of being
        truncated.
        """

        if isinstance(n, bool) or not isinstance(n, int):
            raise CommandError(f"Feed line count must be an integer, got {n!r}")
        if not 0 <= n <= constants.MAX_FEED_LINES:
            raise CommandError(
                f"Feed line count {n} out of range (0..{constants.MAX_FEED_LINES})"
            )
        return ESC + b"d" + bytes((n,))

    @staticmethod
    def line(text: str = "", encoding: str = constants.DEFAULT_ENCODING) -> bytes:
        try:
            return text.encode(encoding) + LF
        except UnicodeEncodeError as exc:
            raise CommandError(f"Cannot encode text as {encoding}: {exc}") from exc
