"""Regex redaction applied to one line at a time."""
from __future__ import annotations

from typing import Iterable, Iterator

from ..ledger import RedactionLedger
from ..models import MASK_TEXT
from ..rules.compiler import CompiledPattern, compile_pattern
from ..utils.text import split_line, to_bytes, to_text
from .base import Redactor


class SingleLineRedactor(Redactor):
    kind = "regex"

    def __init__(
        self,
        pattern: CompiledPattern,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
    ) -> None:
        super().__init__(name, file_path, ledger)
        self.pattern = pattern

    @classmethod
    def from_source(
        cls,
        source: str,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
        *,
        mask_text: str = MASK_TEXT,
    ) -> "SingleLineRedactor":
        return cls(compile_pattern(source, mask_text), name, file_path, ledger)

    def redact(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        for number, line in enumerate(lines, start=1):
            body, eol = split_line(line)
            outcome = self.pattern.redact(to_text(body))
            if outcome is None:
                yield line
                continue
            clean, removed = outcome
            self._record(removed, number)
            yield to_bytes(clean) + eol


__all__ = ["SingleLineRedactor"]
