"""Background colour parsing.

Accepted forms: ``white``, ``black``, ``#rgb``, ``#rrggbb``, ``rgb(r,g,b)``
and bare ``r,g,b``. Decimal channels are clamped to [0, 255].
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from contrastsight.errors import ConfigurationError

_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$")
_RGB_FUNC_RE = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$")
_CHANNEL_RE = re.compile(r"^\d{1,3}$")

_NAMED_COLORS = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
}


@dataclass(frozen=True)
class BackgroundSpec:
    """A solid background colour: display label + RGB triple."""

    label: str
    rgb: tuple[int, int, int]


WHITE = BackgroundSpec("white", _NAMED_COLORS["white"])
BLACK = BackgroundSpec("black", _NAMED_COLORS["black"])


def _clamp(value: int) -> int:
    return max(0, min(255, value))


def parse_color(text: str) -> BackgroundSpec:
    """Parse a user supplied colour string into a BackgroundSpec.

    Raises ConfigurationError for anything it does not recognise.
    """
    s = str(text).strip().lower()

    if s in _NAMED_COLORS:
        return BackgroundSpec(s, _NAMED_COLORS[s])

    if _HEX_RE.match(s):
        hex_part = s[1:]
        if len(hex_part) == 3:
            hex_part = "".join(c * 2 for c in hex_part)
        rgb = (int(hex_part[0:2], 16), int(hex_part[2:4], 16), int(hex_part[4:6], 16))
        return BackgroundSpec(s, rgb)

    m = _RGB_FUNC_RE.match(s)
    if m:
        r, g, b = (_clamp(int(v)) for v in m.groups())
        return BackgroundSpec(f"rgb({r},{g},{b})", (r, g, b))

    parts = [p.strip() for p in s.split(",")]
    if len(parts) == 3 and all(_CHANNEL_RE.match(p) for p in parts):
        r, g, b = (_clamp(int(p)) for p in parts)
        return BackgroundSpec(f"{r},{g},{b}", (r, g, b))

    raise ConfigurationError(f"Invalid color: {text}")
