"""Terminal color models resolved to renderer-ready values.

Named (16 base colors), indexed (256-color palette) and 24-bit true color
all resolve to one of ``NamedColor``, ``RGBColor`` or ``DefaultColor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


@dataclass(frozen=True)
class NamedColor:
    index: int
    bright: bool = False

    @property
    def name(self) -> str:
        base = _NAMES[self.index % 8]
        if self.bright:
            return "br" + base[0].upper() + base[1:]
        return base

    def to_json(self) -> str:
        return self.name


@dataclass(frozen=True)
class RGBColor:
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str | None:
        """``#rrggbb``, or None when a channel is outside 0-255."""
        if all(0 <= v <= 255 for v in (self.r, self.g, self.b)):
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return None

    def to_json(self) -> str:
        return self.hex or f"rgb({self.r},{self.g},{self.b})"


@dataclass(frozen=True)
class DefaultColor:
    """The renderer's own foreground or background color."""

    role: str  # "fg" or "bg"

    def to_json(self) -> str:
        return "_defFg" if self.role == "fg" else "_defBg"


Color = Union[NamedColor, RGBColor, DefaultColor]

DEFAULT_FG = DefaultColor("fg")
DEFAULT_BG = DefaultColor("bg")


def resolve_named(index: int, bright: bool = False) -> NamedColor:
    """Map a base hue index (0-7) and brightness to one of 16 named colors."""
    return NamedColor(index % 8, bright)


def resolve_indexed(n: int) -> Color:
    """Convert a 256-color index to a named color or an RGB value."""
    if n < 16:
        return resolve_named(n % 8, n >= 8)
    if n < 232:
        n -= 16
        r = (n // 36) * 51
        g = ((n % 36) // 6) * 51
        b = (n % 6) * 51
        return RGBColor(r, g, b)
    v = (n - 232) * 10 + 8
    return RGBColor(v, v, v)


def resolve_truecolor(r: int, g: int, b: int) -> RGBColor:
    # No clamping: out-of-range channels are rendered as given.
    return RGBColor(r, g, b)
