"""Serialize styled runs to HTML ``<span>`` markup."""

from __future__ import annotations

import html
from typing import Sequence

from ansi_colors import Color, DefaultColor, NamedColor, RGBColor
from ansi_parser import Run

# Theme variables with literal fallbacks for the 8 base hues.
_NAMED_CSS = (
    "var(--color-black, black)",
    "var(--color-red, #d04255)",
    "var(--color-green, #08979c)",
    "var(--color-yellow, #d4b106)",
    "var(--color-blue, #1890ff)",
    "var(--color-purple, #6900a1)",
    "var(--color-cyan, #08979c)",
    "var(--color-white, white)",
)

_BRIGHT_CSS = (
    "gray",
    "#ff7875",
    "#5cdbd3",
    "#ffec3d",
    "#69c0ff",
    "#b37feb",
    "#5cdbd3",
    "white",
)

_DEFAULT_CSS = {
    "fg": "var(--text-normal)",
    "bg": "var(--background-primary)",
}


def color_css(color: Color) -> str:
    if isinstance(color, NamedColor):
        table = _BRIGHT_CSS if color.bright else _NAMED_CSS
        return table[color.index % 8]
    if isinstance(color, RGBColor):
        return f"rgb({color.r},{color.g},{color.b})"
    if isinstance(color, DefaultColor):
        return _DEFAULT_CSS[color.role]
    raise TypeError(f"Unsupported color: {color!r}")


def style_css(run: Run) -> str:
    """Inline CSS declarations for *run*, or an empty string."""
    style = run.style
    decls: list[str] = []
    if style.bold:
        decls.append("font-weight: bold")
    if style.italic:
        decls.append("font-style: italic")
    decorations = []
    if style.underline:
        decorations.append("underline")
    if style.strikethrough:
        decorations.append("line-through")
    if decorations:
        decls.append("text-decoration: " + " ".join(decorations))
    if style.dim:
        decls.append("opacity: 0.6")
    fg, bg = run.fg, run.bg
    if fg is not None:
        decls.append("color: " + color_css(fg))
    if bg is not None:
        decls.append("background-color: " + color_css(bg))
    return "; ".join(decls)


def run_to_html(run: Run) -> str:
    text = html.escape(run.text, quote=True)
    css = style_css(run)
    if not css:
        return text
    return f'<span style="{html.escape(css, quote=True)}">{text}</span>'


def runs_to_html(runs: Sequence[Run], wrap: bool = False) -> str:
    """Join runs into markup, optionally inside a terminal code block."""
    body = "".join(run_to_html(run) for run in runs)
    if wrap:
        return f'<pre><code class="language-terminal is-loaded">{body}</code></pre>'
    return body
