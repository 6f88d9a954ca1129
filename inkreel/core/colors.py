"""
CSS colour strings to QColor.
"""

import re
from typing import Optional

from PyQt5.QtGui import QColor

_RGB_PATTERN = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*(\d*\.?\d+)\s*)?\)$",
    re.IGNORECASE,
)
_HEX_PATTERN = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")

NAMED_COLORS = (
    "red", "blue", "green", "yellow", "black", "white", "gray",
    "grey", "orange", "purple", "pink", "brown", "transparent",
)


def is_css_color(value) -> bool:
    """Check whether ``value`` is a colour string the layers understand."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not text:
        return False
    return bool(
        _HEX_PATTERN.match(text)
        or _RGB_PATTERN.match(text)
        or text.lower() in NAMED_COLORS
    )


def parse_css_color(value: Optional[str], fallback: str = "#000000") -> QColor:
    """
    Convert a CSS colour (hex, rgb(), rgba() with 0-1 alpha, or a name).

    Args:
        value: Colour string, may be None
        fallback: Colour used when ``value`` cannot be parsed

    Returns:
        A valid QColor
    """
    if isinstance(value, str):
        text = value.strip()
        match = _RGB_PATTERN.match(text)
        if match:
            r, g, b = (max(0, min(255, int(match.group(i)))) for i in (1, 2, 3))
            alpha = match.group(4)
            a = 255 if alpha is None else int(round(max(0.0, min(1.0, float(alpha))) * 255))
            return QColor(r, g, b, a)

        if text.lower() == "transparent":
            return QColor(0, 0, 0, 0)

        color = QColor(text)
        if color.isValid():
            return color

    if fallback is not None and fallback != value:
        return parse_css_color(fallback, fallback=None)
    return QColor(0, 0, 0)
