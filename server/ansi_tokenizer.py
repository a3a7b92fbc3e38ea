"""Split raw terminal text into text and escape-sequence tokens.

Only the shape of each escape is recognized here; what a sequence means
is left to the consumer. Anything that is not an escape is ``Text``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

# Order matters: string-type sequences (OSC, DCS, ...) must win over the
# two-byte ESC form that shares their introducer. They need a terminator
# on the same line; otherwise only the introducer is consumed.
_TOKEN_RE = re.compile(
    r"(?P<csi>(?:\x1b\[|\x9b)(?P<params>[0-?]*)(?P<inter>[ -/]*)(?P<final>[@-~]))"
    r"|(?P<osc>\x1b\][^\x07\x1b\n]*(?:\x07|\x1b\\))"
    r"|(?P<str>\x1b[P^_X][^\x1b\n]*\x1b\\)"
    r"|(?P<charset>\x1b[()*+][ -~])"
    r"|(?P<esc>\x1b[ -~]?)"
)

_PRIVATE_MARKERS = "<=>?"


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class ControlSequence:
    command: str
    params: tuple[int | None, ...] = ()
    private: str = ""
    raw: str = ""


@dataclass(frozen=True)
class Other:
    kind: str  # "osc", "str", "charset" or "esc"
    raw: str


Token = Union[Text, ControlSequence, Other]


def _parse_params(param_str: str) -> tuple[str, tuple[int | None, ...]]:
    private = ""
    while param_str and param_str[0] in _PRIVATE_MARKERS:
        private += param_str[0]
        param_str = param_str[1:]
    if not param_str:
        return private, ()
    params: list[int | None] = []
    for s in re.split(r"[;:]", param_str):
        try:
            params.append(int(s))
        except ValueError:
            params.append(None)
    return private, tuple(params)


def tokenize(text: str) -> list[Token]:
    """Tokenize *text* into ``Text``, ``ControlSequence`` and ``Other`` tokens.

    Adjacent text is kept in a single ``Text`` token. The function is total:
    an unterminated or unknown escape becomes an ``Other`` token.
    """
    tokens: list[Token] = []
    pos = 0
    for m in _TOKEN_RE.finditer(text):
        if m.start() > pos:
            tokens.append(Text(text[pos:m.start()]))
        pos = m.end()
        raw = m.group(0)
        if m.group("csi"):
            private, params = _parse_params(m.group("params"))
            tokens.append(ControlSequence(
                command=m.group("inter") + m.group("final"),
                params=params,
                private=private,
                raw=raw,
            ))
        else:
            tokens.append(Other(kind=m.lastgroup or "esc", raw=raw))
    if pos < len(text):
        tokens.append(Text(text[pos:]))
    return tokens
