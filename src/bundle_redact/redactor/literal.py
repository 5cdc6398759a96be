"""Exact substring redaction."""
from __future__ import annotations

from typing import Iterable, Iterator, List

from ..exceptions import CompileError
from ..ledger import RedactionLedger
from ..models import MASK_TEXT
from ..rules.compiler import covered
from ..utils.text import find_spans, split_line, to_bytes, to_text
from .base import Redactor


class LiteralRedactor(Redactor):
    kind = "literal"

    def __init__(
        self,
        value: str,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
        *,
        mask_text: str = MASK_TEXT,
    ) -> None:
        if not value:
            raise CompileError("literal redaction value must not be empty")
        super().__init__(name, file_path, ledger)
        self.value = value
        self.mask_text = mask_text

    def redact(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        for number, line in enumerate(lines, start=1):
            body, eol = split_line(line)
            text = to_text(body)
            if self.value not in text:
                yield line
                continue
            clean, occurrences = self._replace(text)
            if not occurrences:
                yield line
                continue
            self._record(occurrences * len(self.value), number)
            yield to_bytes(clean) + eol

    def _replace(self, text: str) -> tuple[str, int]:
        masks = find_spans(text, self.mask_text)
        parts: List[str] = []
        occurrences = 0
        cursor = 0
        start = text.find(self.value)
        while start >= 0:
            end = start + len(self.value)
            if covered(start, end, masks):
                # already redacted text stays as it is
                start = text.find(self.value, end)
                continue
            parts.append(text[cursor:start])
            parts.append(self.mask_text)
            occurrences += 1
            cursor = end
            start = text.find(self.value, end)
        parts.append(text[cursor:])
        return "".join(parts), occurrences


__all__ = ["LiteralRedactor"]
