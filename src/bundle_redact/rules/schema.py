"""Custom redaction rule schemas."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class MultiLinePair(BaseModel):
    selector: str
    redactor: str


class RuleSpec(BaseModel):
    """One custom redaction rule as supplied by collector configuration."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    file: Optional[str] = None
    files: List[str] = Field(default_factory=list)
    regex: List[str] = Field(default_factory=list)
    values: List[str] = Field(default_factory=list)
    multi_line: List[MultiLinePair] = Field(default_factory=list, alias="multiLine")
    yaml: List[str] = Field(default_factory=list)

    def globs(self) -> List[str]:
        scoped = [self.file] if self.file else []
        scoped.extend(self.files)
        return scoped

    def is_scoped(self) -> bool:
        return bool(self.file or self.files)


class RedactorMetadata(BaseModel):
    name: str = Field(default="default")


class RedactorSpec(BaseModel):
    redactors: List[RuleSpec] = Field(default_factory=list)


class RedactorDocument(BaseModel):
    api_version: str = Field(default="v1", alias="apiVersion")
    kind: str = Field(default="Redactor")
    metadata: RedactorMetadata = Field(default_factory=RedactorMetadata)
    spec: RedactorSpec = Field(default_factory=RedactorSpec)


def rules_from_data(raw: Any) -> List[RuleSpec]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return [RuleSpec.model_validate(item) for item in raw]
    if isinstance(raw, dict) and "spec" in raw:
        return RedactorDocument.model_validate(raw).spec.redactors
    return RedactorSpec.model_validate(raw).redactors


def rules_from_path(path: Path) -> List[RuleSpec]:
    with path.open("r", encoding="utf-8") as handle:
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(handle)
        else:
            raw = json.load(handle)
    return rules_from_data(raw)


__all__ = [
    "MultiLinePair",
    "RedactorDocument",
    "RedactorSpec",
    "RuleSpec",
    "rules_from_data",
    "rules_from_path",
]
