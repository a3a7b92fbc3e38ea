"""ANSI SGR escape sequence parser.

Converts terminal text (with escape codes) into styled runs:
  [Run("hello", Style(fg=NamedColor(2), bold=True)), ...]

``parse_lines`` gives the same runs as compact dicts grouped by line:
  [[{"t": "hello", "fg": "green", "b": true}, ...], ...]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ansi_colors import (
    DEFAULT_BG,
    DEFAULT_FG,
    Color,
    resolve_indexed,
    resolve_named,
    resolve_truecolor,
)
from ansi_escapes import normalize_escapes
from ansi_tokenizer import ControlSequence, Text, Token, tokenize

logger = logging.getLogger(__name__)

_STYLE_FIELDS = ("fg", "bg", "bold", "dim", "italic", "underline", "inverse", "strikethrough")


@dataclass(frozen=True)
class Style:
    fg: Color | None = None
    bg: Color | None = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    inverse: bool = False
    strikethrough: bool = False


DEFAULT_STYLE = Style()


@dataclass(frozen=True)
class Run:
    text: str
    style: Style = DEFAULT_STYLE

    @property
    def fg(self) -> Color | None:
        """Displayed foreground, after the inverse-video swap."""
        if self.style.inverse:
            return self.style.bg or DEFAULT_BG
        return self.style.fg

    @property
    def bg(self) -> Color | None:
        """Displayed background, after the inverse-video swap."""
        if self.style.inverse:
            return self.style.fg or DEFAULT_FG
        return self.style.bg

    def to_dict(self) -> dict[str, Any]:
        """Build a compact run dict, omitting falsy fields."""
        run: dict[str, Any] = {"t": self.text}
        fg, bg = self.fg, self.bg
        if fg is not None:
            run["fg"] = fg.to_json()
        if bg is not None:
            run["bg"] = bg.to_json()
        style = self.style
        if style.bold:
            run["b"] = True
        if style.dim:
            run["d"] = True
        if style.italic:
            run["i"] = True
        if style.underline:
            run["u"] = True
        if style.strikethrough:
            run["s"] = True
        return run


class SGRState:
    """Running display state, mutated in place by SGR codes."""

    __slots__ = _STYLE_FIELDS

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.fg: Color | None = None
        self.bg: Color | None = None
        self.bold = False
        self.dim = False
        self.italic = False
        self.underline = False
        self.inverse = False
        self.strikethrough = False

    def snapshot(self) -> Style:
        return Style(**{name: getattr(self, name) for name in _STYLE_FIELDS})


# code -> (attribute, value) for the plain on/off codes
_FLAG_CODES: dict[int, tuple[tuple[str, bool], ...]] = {
    1: (("bold", True),),
    2: (("dim", True),),
    3: (("italic", True),),
    4: (("underline", True),),
    7: (("inverse", True),),
    9: (("strikethrough", True),),
    22: (("bold", False), ("dim", False)),
    23: (("italic", False),),
    24: (("underline", False),),
    27: (("inverse", False),),
    29: (("strikethrough", False),),
}


def _sub(params: Sequence[int | None], i: int) -> int:
    """Sub-parameter at *i*; missing or non-numeric reads as 0."""
    if i < len(params) and params[i] is not None:
        return params[i]  # type: ignore[return-value]
    return 0


def _read_extended_color(params: Sequence[int | None], i: int) -> tuple[Color | None, int]:
    """Read a 38/48 extended color starting at ``params[i]``.

    Returns the color (None when the mode is absent or unknown) and the
    index of the last parameter consumed.
    """
    mode = params[i + 1] if i + 1 < len(params) else None
    if mode == 5:
        return resolve_indexed(_sub(params, i + 2)), i + 2
    if mode == 2:
        # 38;2;<cs>;r;g;b carries a colorspace id (usually 0) before r.
        # Only taken when a fourth value follows, but a real r=0 in that
        # position is indistinguishable.
        offset = 1 if _sub(params, i + 2) == 0 and i + 5 < len(params) else 0
        r = _sub(params, i + 2 + offset)
        g = _sub(params, i + 3 + offset)
        b = _sub(params, i + 4 + offset)
        return resolve_truecolor(r, g, b), i + 4 + offset
    return None, i


def apply_sgr(state: SGRState, params: Sequence[int | None]) -> None:
    """Apply SGR parameter codes to the current state.

    Unknown codes and non-numeric positions are ignored. An empty
    parameter list means reset.
    """
    if not params:
        params = (0,)
    i = 0
    while i < len(params):
        p = params[i]
        if p is None:
            pass
        elif p == 0:
            state.reset()
        elif p in _FLAG_CODES:
            for attr, value in _FLAG_CODES[p]:
                setattr(state, attr, value)
        elif 30 <= p <= 37:
            state.fg = resolve_named(p - 30)
        elif p == 39:
            state.fg = None
        elif 40 <= p <= 47:
            state.bg = resolve_named(p - 40)
        elif p == 49:
            state.bg = None
        elif 90 <= p <= 97:
            state.fg = resolve_named(p - 90, bright=True)
        elif 100 <= p <= 107:
            state.bg = resolve_named(p - 100, bright=True)
        elif p in (38, 48):
            color, i = _read_extended_color(params, i)
            if color is not None:
                if p == 38:
                    state.fg = color
                else:
                    state.bg = color
        i += 1


def render_tokens(tokens: Sequence[Token] | None, raw: str = "") -> list[Run]:
    """Fold *tokens* into styled runs, one run per non-empty text token.

    If *tokens* is not a list or tuple the tokenizer is taken to have
    failed, and *raw* comes back as a single unstyled run.
    """
    if not isinstance(tokens, (list, tuple)):
        logger.warning("tokenizer returned %s; rendering input unstyled", type(tokens).__name__)
        return [Run(raw)] if raw else []

    state = SGRState()
    runs: list[Run] = []
    for token in tokens:
        if isinstance(token, Text):
            if token.value:
                runs.append(Run(token.value, state.snapshot()))
        elif isinstance(token, ControlSequence):
            if token.command == "m" and not token.private:
                apply_sgr(state, token.params)
        # everything else (OSC, cursor movement, ...) is not rendered
    logger.debug("rendered %d tokens into %d runs", len(tokens), len(runs))
    return runs


def parse_text(
    raw: str,
    *,
    shorthand: bool = False,
    tokenizer: Callable[[str], Sequence[Token] | None] = tokenize,
) -> list[Run]:
    """Parse terminal text into runs.

    With *shorthand*, backslash escapes such as ``\\e[31m`` are rewritten
    to control characters first.
    """
    if shorthand:
        raw = normalize_escapes(raw)
    return render_tokens(tokenizer(raw), raw)


def _append(line: list[Run], run: Run) -> None:
    if line and line[-1].style == run.style:
        line[-1] = Run(line[-1].text + run.text, run.style)
    else:
        line.append(run)


def _end_line(line: list[Run]) -> None:
    # \r\n may be split across two runs
    if line and line[-1].text.endswith("\r"):
        last = line.pop()
        if len(last.text) > 1:
            line.append(Run(last.text[:-1], last.style))


def merge_runs(runs: Sequence[Run]) -> list[Run]:
    """Join adjacent runs that share a style."""
    merged: list[Run] = []
    for run in runs:
        _append(merged, run)
    return merged


def split_lines(runs: Sequence[Run]) -> list[list[Run]]:
    """Group runs by line, splitting any run that spans a newline.

    Adjacent runs with equal styles are merged, so text separated only by
    ignored escapes or redundant SGR codes comes back as one run.
    """
    lines: list[list[Run]] = [[]]
    for run in runs:
        for n, part in enumerate(run.text.split("\n")):
            if n:
                _end_line(lines[-1])
                lines.append([])
            if part:
                _append(lines[-1], Run(part, run.style))
    return lines


def parse_lines(raw: str, shorthand: bool = False) -> list[list[dict[str, Any]]]:
    """Parse multi-line terminal output into structured runs.

    Returns a list of lines, each line a list of run dicts.
    """
    return [[run.to_dict() for run in line] for line in split_lines(parse_text(raw, shorthand=shorthand))]
