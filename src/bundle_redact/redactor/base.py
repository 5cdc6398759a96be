"""Redactor base class shared by every redaction variant."""
from __future__ import annotations

from typing import ClassVar, Iterable, Iterator

from ..ledger import RedactionLedger, get_default_ledger
from ..models import Redaction


class Redactor:
    """Protocol-like base class for redactors.

    A redactor wraps an upstream iterator of lines and yields redacted lines.
    It reports each redaction to its ledger and never waits for the ledger to
    apply it.
    """

    kind: ClassVar[str] = "redactor"

    def __init__(self, name: str, file_path: str, ledger: RedactionLedger | None = None) -> None:
        self.name = name
        self.file_path = file_path
        self.ledger = ledger or get_default_ledger()

    def redact(self, lines: Iterable[bytes]) -> Iterator[bytes]:  # pragma: no cover - protocol
        raise NotImplementedError

    def _record(self, characters_removed: int, line: int) -> None:
        self.ledger.append(
            Redaction(
                redactor_name=self.name,
                characters_removed=characters_removed,
                line=line,
                file=self.file_path,
            )
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.name}>"


__all__ = ["Redactor"]
