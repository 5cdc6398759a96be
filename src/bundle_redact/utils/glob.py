"""Separator-aware glob matching used to scope rules to file paths.

Supported syntax mirrors the usual shell conventions with an explicit path
separator:

* ``*`` matches any run of characters except the separator
* ``**`` matches any run of characters, separators included
* ``?`` matches one character that is not the separator
* ``[abc]``, ``[a-z]`` and ``[!abc]`` match character classes
* ``{a,b}`` matches either alternative (alternatives may nest)
* ``\\`` escapes the following character
"""
from __future__ import annotations

from functools import lru_cache
from typing import List

import regex

from ..exceptions import CompileError

DEFAULT_SEPARATOR = "/"


@lru_cache(maxsize=256)
def compile_glob(pattern: str, separator: str = DEFAULT_SEPARATOR) -> regex.Pattern[str]:
    try:
        source = _translate(pattern, separator)
    except ValueError as exc:
        raise CompileError(f"invalid file glob {pattern!r}: {exc}") from exc
    return regex.compile(source, regex.DOTALL)


def match_path(pattern: str, path: str, separator: str = DEFAULT_SEPARATOR) -> bool:
    return compile_glob(pattern, separator).fullmatch(path) is not None


def _translate(pattern: str, separator: str) -> str:
    sep = regex.escape(separator)
    out: List[str] = []
    depth = 0
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "\\":
            if index + 1 >= length:
                raise ValueError("dangling escape")
            out.append(regex.escape(pattern[index + 1]))
            index += 2
            continue
        if char == "*":
            if pattern.startswith("**", index):
                out.append(".*")
                index += 2
                continue
            out.append(f"[^{sep}]*")
        elif char == "?":
            out.append(f"[^{sep}]")
        elif char == "[":
            start = index + 1
            negate = start < length and pattern[start] in "!^"
            if negate:
                start += 1
            end = pattern.find("]", start)
            if end <= start:
                raise ValueError("unterminated character class")
            body = "".join("\\" + c if c in "\\[]^" else c for c in pattern[start:end])
            out.append(f"[^{body}{sep}]" if negate else f"[{body}]")
            index = end + 1
            continue
        elif char == "{":
            depth += 1
            out.append("(?:")
        elif char == "," and depth:
            out.append("|")
        elif char == "}" and depth:
            depth -= 1
            out.append(")")
        else:
            out.append(regex.escape(char))
        index += 1
    if depth:
        raise ValueError("unterminated alternation")
    return "".join(out)


__all__ = ["DEFAULT_SEPARATOR", "compile_glob", "match_path"]
