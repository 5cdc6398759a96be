"""Shared domain models used across the redaction engine."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List

MASK_TEXT = "***HIDDEN***"


@dataclass(frozen=True, slots=True)
class Redaction:
    redactor_name: str
    characters_removed: int
    line: int
    file: str


@dataclass(slots=True)
class RedactionList:
    """Redactions indexed both by the file affected and by the redactor name."""

    by_redactor: Dict[str, List[Redaction]] = field(default_factory=dict)
    by_file: Dict[str, List[Redaction]] = field(default_factory=dict)

    def total(self) -> int:
        return sum(len(entries) for entries in self.by_redactor.values())

    def to_dict(self) -> Dict[str, Dict[str, List[Dict[str, object]]]]:
        return {
            "byRedactor": {
                name: [asdict(entry) for entry in entries]
                for name, entries in self.by_redactor.items()
            },
            "byFile": {
                path: [asdict(entry) for entry in entries]
                for path, entries in self.by_file.items()
            },
        }


__all__ = ["MASK_TEXT", "Redaction", "RedactionList"]
