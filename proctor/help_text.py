"""Remove hidden flags from a generated usage listing."""

from __future__ import annotations

import typing as typ


def _declares(line: str, flag: str) -> bool:
    stripped = line.strip()
    if not stripped.startswith(flag):
        return False
    rest = stripped[len(flag) :]
    return not rest or not (rest[0].isalnum() or rest[0] in "_-")


def filter_help_text(text: str, hidden_options: typ.Sequence[str]) -> str:
    """Return ``text`` without the lines that declare any of ``hidden_options``.

    Only a flag's own listing line is dropped, i.e. a line that starts with the
    flag once indentation is ignored. Prose that mentions the flag elsewhere is
    left alone, as is every other line, byte for byte.
    """
    if not hidden_options:
        return text
    kept = [
        line
        for line in text.splitlines(keepends=True)
        if not any(_declares(line, flag) for flag in hidden_options if flag)
    ]
    return "".join(kept)
