from __future__ import annotations

import re
from typing import Tuple

from .util import clamp01

BGR = Tuple[int, int, int]

NAMED_COLORS: dict[str, str] = {
    "white": "#ffffff",
    "black": "#000000",
    "red": "#ff0000",
    "green": "#008000",
    "blue": "#0000ff",
    "yellow": "#ffff00",
    "orange": "#ffa500",
    "pink": "#ffc0cb",
    "gold": "#ffd700",
    "brown": "#8b4513",
    "gray": "#808080",
    "grey": "#808080",
    "navy": "#000080",
    "purple": "#800080",
    "cyan": "#00ffff",
    "magenta": "#ff00ff",
}

_RGB_FUNC = re.compile(r"^rgba?\(\s*([^)]*)\)$")


def hex_to_bgr(text: str) -> BGR:
    h = text.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    if len(h) != 6 or any(ch not in "0123456789abcdefABCDEF" for ch in h):
        raise ValueError(f"Invalid hex color: {text!r}")
    r = int(h[0:2], 16)
    g = int(h[2:4], 16)
    b = int(h[4:6], 16)
    return b, g, r


def parse_color(text: str) -> tuple[BGR, float]:
    """Parse `#rgb`, `#rrggbb`, `rgb(...)`, `rgba(...)` or a named color into (bgr, alpha)."""
    t = text.strip().lower()
    if t in NAMED_COLORS:
        return hex_to_bgr(NAMED_COLORS[t]), 1.0
    if t.startswith("#"):
        return hex_to_bgr(t), 1.0
    m = _RGB_FUNC.match(t)
    if m:
        parts = [p.strip() for p in m.group(1).split(",")]
        if len(parts) not in (3, 4):
            raise ValueError(f"Invalid color: {text!r}")
        try:
            r, g, b = (max(0, min(255, int(float(p)))) for p in parts[:3])
            a = clamp01(float(parts[3])) if len(parts) == 4 else 1.0
        except ValueError as exc:
            raise ValueError(f"Invalid color: {text!r}") from exc
        return (b, g, r), a
    raise ValueError(f"Invalid color: {text!r}")


def blend_bgr(a: BGR, b: BGR, t: float) -> BGR:
    w = clamp01(t)
    return (
        int(round((1.0 - w) * a[0] + w * b[0])),
        int(round((1.0 - w) * a[1] + w * b[1])),
        int(round((1.0 - w) * a[2] + w * b[2])),
    )


def lighten(c: BGR, amount: float) -> BGR:
    return blend_bgr(c, (255, 255, 255), amount)


def darken(c: BGR, amount: float) -> BGR:
    return blend_bgr(c, (0, 0, 0), amount)


# Palette shared across scenes (BGR).
WHITE: BGR = (255, 255, 255)
WOOD: BGR = hex_to_bgr("#78350f")
GOLD: BGR = hex_to_bgr("#fbbf24")
