"""Text helpers shared by the line-based redactors."""
from __future__ import annotations

from typing import List, Tuple

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def to_text(data: str | bytes) -> str:
    if isinstance(data, bytes):
        return data.decode(_ENCODING, errors=_ERRORS)
    return data


def to_bytes(text: str) -> bytes:
    return text.encode(_ENCODING, errors=_ERRORS)


def find_spans(text: str, needle: str) -> List[Tuple[int, int]]:
    """Non-overlapping spans of ``needle`` in ``text``, left to right."""
    spans: List[Tuple[int, int]] = []
    if not needle:
        return spans
    start = text.find(needle)
    while start >= 0:
        spans.append((start, start + len(needle)))
        start = text.find(needle, start + len(needle))
    return spans


def split_line(line: bytes) -> Tuple[bytes, bytes]:
    """Split ``line`` into its body and its terminator (``\\r\\n``, ``\\n`` or empty)."""
    if line.endswith(b"\r\n"):
        return line[:-2], b"\r\n"
    if line.endswith(b"\n"):
        return line[:-1], b"\n"
    return line, b""


__all__ = ["find_spans", "to_text", "to_bytes", "split_line"]
