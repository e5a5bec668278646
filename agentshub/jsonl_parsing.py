"""Small helpers for picking JSON string bodies out of raw JSONL text."""

from __future__ import annotations

import re

_STRING_BODY = re.compile(r'(?:[^"\\]|\\.)*"', re.DOTALL)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
    "/": "/",
}


def find_json_string_end(s: str, start: int) -> int:
    """Return the index of the unescaped quote closing the string at ``start``.

    ``start`` is one position past the opening quote. Returns -1 when the
    string is unterminated.
    """
    match = _STRING_BODY.match(s, start)
    if match is None:
        return -1
    return match.end() - 1


def unescape_json(raw: str) -> str:
    """Interpret backslash escapes in a JSON string body.

    Known escapes are \\n \\t \\r \\" \\\\ \\/; any other escaped character
    passes through verbatim, and a lone trailing backslash is kept.
    """
    out = []
    chars = iter(raw)
    for c in chars:
        if c != "\\":
            out.append(c)
            continue
        following = next(chars, None)
        if following is None:
            out.append(c)
            break
        out.append(_ESCAPES.get(following, following))
    return "".join(out)