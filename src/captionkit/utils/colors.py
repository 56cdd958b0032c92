"""Conversions from ``#RRGGBB`` style colors to renderer color syntaxes.

ASS colors are ``&HAABBGGRR`` where alpha 00 is opaque and FF is fully
transparent. ffmpeg filter colors are ``0xRRGGBB@opacity`` where opacity
0.0 is fully transparent.
"""

from __future__ import annotations

import re

ASS_TRANSPARENT = "&HFF000000"
FFMPEG_TRANSPARENT = "0x000000@0.0"

_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})$")


def parse_hex(color: str) -> tuple[int, int, int]:
    match = _HEX_RE.match(color.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {color!r}")
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def opacity_to_ass_alpha(opacity: float) -> int:
    opacity = min(max(opacity, 0.0), 1.0)
    return int(round((1.0 - opacity) * 255))


def to_ass_color(color: str, *, opacity: float = 1.0) -> str:
    r, g, b = parse_hex(color)
    alpha = opacity_to_ass_alpha(opacity)
    return f"&H{alpha:02X}{b:02X}{g:02X}{r:02X}"


def to_ffmpeg_color(color: str, *, opacity: float = 1.0) -> str:
    r, g, b = parse_hex(color)
    opacity = min(max(opacity, 0.0), 1.0)
    return f"0x{r:02X}{g:02X}{b:02X}@{opacity:.2f}"
