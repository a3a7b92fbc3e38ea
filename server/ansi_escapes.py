"""Rewrite C-style backslash shorthands into the characters they name."""

from __future__ import annotations

import re

_SHORTHAND_RE = re.compile(r"\\(?:(?P<simple>[ent])|x(?P<hex>[0-9A-Fa-f]{2})|u(?P<uni>[0-9A-Fa-f]{4}))")

_SIMPLE = {"e": "\x1b", "n": "\n", "t": "\t"}


def _replace(m: re.Match[str]) -> str:
    if m.group("simple"):
        return _SIMPLE[m.group("simple")]
    return chr(int(m.group("hex") or m.group("uni"), 16))


def normalize_escapes(text: str) -> str:
    r"""Replace ``\e``, ``\n``, ``\t``, ``\xHH`` and ``\uHHHH`` in one pass.

    Substitution is left to right and non-overlapping, so the output of one
    replacement is never rescanned. Malformed shorthands such as ``\xZZ`` are
    left untouched.
    """
    if "\\" not in text:
        return text
    return _SHORTHAND_RE.sub(_replace, text)
