"""Text colorization for terminal diagnostics.

Messages are written with lightweight \\-X- codes that are turned into ANSI
escapes when the stream is a terminal, or removed otherwise.

Syntax:
    \\-r-  red        \\-g-  green      \\-b-  blue       \\-y-  yellow
    \\-c-  cyan       \\-m-  magenta    \\-s-  strong     \\-d-  dim
    \\-n-  normal (reset all)

Examples:
    "\\-rs-NotFound\\-n- 'lib/util'"
    "\\-d-0: /project/main.js\\-n-"
"""

__all__ = ["apply_ansi", "strip_codes", "should_use_color", "ColorFormatter"]

import logging
import os
import re


CODES = {
    "r": "\033[31m",  # red
    "g": "\033[32m",  # green
    "b": "\033[34m",  # blue
    "y": "\033[33m",  # yellow
    "c": "\033[36m",  # cyan
    "m": "\033[35m",  # magenta
    "s": "\033[1m",   # strong
    "d": "\033[2m",   # dim
    "n": "\033[0m",   # normal
}

COLOR_CODE_PATTERN = re.compile(r"\\-([rgbycmsdn]+)-")

# Code prefix for each logging level name
LEVEL_CODES = {
    "DEBUG": "d",
    "INFO": "c",
    "WARNING": "ys",
    "ERROR": "rs",
    "CRITICAL": "rs",
}


def apply_ansi(text):
    """Replace color codes with ANSI escape sequences.

    A reset is appended when any code was replaced.

    Args:
        text: (str) Text potentially containing \\-X- color codes

    Returns:
        (str) Text with ANSI sequences
    """
    result, count = COLOR_CODE_PATTERN.subn(
        lambda match: "".join(CODES[c] for c in match.group(1)), text
    )
    if count:
        result += CODES["n"]
    return result


def strip_codes(text):
    """Remove all color codes from text."""
    return COLOR_CODE_PATTERN.sub("", text)


def should_use_color(stream):
    """Determine if color output should be used for a stream.

    Honours the NO_COLOR convention and requires a TTY.
    """
    if os.environ.get("NO_COLOR") is not None:
        return False
    try:
        return stream.isatty()
    except AttributeError:
        return False


class ColorFormatter(logging.Formatter):
    """Log formatter that prefixes records with a colored level name.

    Args:
        color: (bool) Emit ANSI sequences, otherwise strip the codes
    """

    def __init__(self, color=False):
        super().__init__("%(message)s")
        self.color = color

    def format(self, record):
        message = super().format(record)
        code = LEVEL_CODES.get(record.levelname, "n")
        text = f"\\-{code}-{record.levelname.lower()}:\\-n- {message}"
        if self.color:
            return apply_ansi(text)
        return strip_codes(text)
