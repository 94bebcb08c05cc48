"""
CSS color parsing and WCAG 2.x contrast ratio.

Only fully specified colors are accepted (hex, rgb()/rgba(), and a small
set of named colors). Anything else, including colors with partial alpha,
parses to None: a contrast ratio is only reported when it was measurable.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple


RGB = Tuple[int, int, int]

_HEX = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$")
_RGB_FUNC = re.compile(
    r"^rgba?\(\s*"
    r"(\d{1,3})\s*[, ]\s*(\d{1,3})\s*[, ]\s*(\d{1,3})"
    r"(?:\s*[,/]\s*([0-9.]+%?))?"
    r"\s*\)$"
)

_NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "orange": (255, 165, 0),
}


def _is_opaque(alpha: Optional[str]) -> bool:
    if alpha is None:
        return True
    try:
        if alpha.endswith("%"):
            return float(alpha[:-1]) >= 100.0
        return float(alpha) >= 1.0
    except ValueError:
        return False


def parse_css_color(value: object) -> Optional[RGB]:
    """Parse an opaque CSS color into an (r, g, b) tuple."""
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if not text:
        return None

    if text in _NAMED_COLORS:
        return _NAMED_COLORS[text]

    match = _HEX.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) == 8:
            if digits[6:] != "ff":
                return None
            digits = digits[:6]
        return (
            int(digits[0:2], 16),
            int(digits[2:4], 16),
            int(digits[4:6], 16),
        )

    match = _RGB_FUNC.match(text)
    if match:
        channels = tuple(int(match.group(i)) for i in (1, 2, 3))
        if any(c > 255 for c in channels):
            return None
        if not _is_opaque(match.group(4)):
            return None
        return channels  # type: ignore[return-value]

    return None


def relative_luminance(rgb: RGB) -> float:
    def linear(channel: int) -> float:
        c = channel / 255.0
        if c <= 0.03928:
            return c / 12.92
        return ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (linear(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(foreground: RGB, background: RGB) -> float:
    """WCAG contrast ratio in [1, 21], rounded to two decimals."""
    lighter, darker = sorted(
        (relative_luminance(foreground), relative_luminance(background)),
        reverse=True,
    )
    return round((lighter + 0.05) / (darker + 0.05), 2)


def contrast_from_css(color: object, background: object) -> Optional[float]:
    foreground = parse_css_color(color)
    back = parse_css_color(background)
    if foreground is None or back is None:
        return None
    return contrast_ratio(foreground, back)
