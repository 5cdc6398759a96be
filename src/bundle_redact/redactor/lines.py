"""Incremental line reading over binary streams."""
from __future__ import annotations

from typing import BinaryIO, Iterator, List

from ..exceptions import ReadError

DEFAULT_CHUNK_SIZE = 64 * 1024


class LineReader:
    """Single-use iterator over the logical lines of a binary stream.

    Lines keep their terminator. A line longer than ``chunk_size`` or split
    across reads is reassembled before it is yielded. Errors raised by the
    stream surface as :class:`ReadError`.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._stream = stream
        self._chunk_size = chunk_size
        self._lines = self._read()

    def __iter__(self) -> "LineReader":
        return self

    def __next__(self) -> bytes:
        return next(self._lines)

    def _read(self) -> Iterator[bytes]:
        pending: List[bytes] = []
        while True:
            try:
                chunk = self._stream.read(self._chunk_size)
            except OSError as exc:
                raise ReadError(f"failed to read input: {exc}") from exc
            if not chunk:
                break
            start = 0
            while True:
                newline = chunk.find(b"\n", start)
                if newline < 0:
                    break
                pending.append(chunk[start : newline + 1])
                yield b"".join(pending)
                pending = []
                start = newline + 1
            if start < len(chunk):
                pending.append(chunk[start:])
        if pending:
            yield b"".join(pending)


__all__ = ["DEFAULT_CHUNK_SIZE", "LineReader"]
