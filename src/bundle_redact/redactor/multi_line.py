"""Two-line redaction: a selector on one line gates redaction of the next."""
from __future__ import annotations

from typing import Iterable, Iterator

from ..ledger import RedactionLedger
from ..models import MASK_TEXT
from ..rules.compiler import CompiledPattern, compile_pair
from ..utils.text import split_line, to_bytes, to_text
from .base import Redactor


class MultiLineRedactor(Redactor):
    """Redact line N+1 only when the original text of line N matches ``selector``.

    The selector line itself is passed through untouched. Only the previous
    line's selector verdict is kept between iterations.
    """

    kind = "multiLine"

    def __init__(
        self,
        selector: CompiledPattern,
        pattern: CompiledPattern,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
    ) -> None:
        super().__init__(name, file_path, ledger)
        self.selector = selector
        self.pattern = pattern

    @classmethod
    def from_source(
        cls,
        selector: str,
        redactor: str,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
        *,
        mask_text: str = MASK_TEXT,
    ) -> "MultiLineRedactor":
        compiled_selector, compiled_redactor = compile_pair(selector, redactor, mask_text)
        return cls(compiled_selector, compiled_redactor, name, file_path, ledger)

    def redact(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        armed = False
        for number, line in enumerate(lines, start=1):
            body, eol = split_line(line)
            text = to_text(body)
            output = line
            if armed:
                outcome = self.pattern.redact(text)
                if outcome is not None:
                    clean, removed = outcome
                    output = to_bytes(clean) + eol
                    self._record(removed, number)
            armed = self.selector.search(text)
            yield output


__all__ = ["MultiLineRedactor"]
