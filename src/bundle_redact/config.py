"""Configuration loading utilities."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .paths import project_config_path, runtime_config_dir
from .redactor.lines import DEFAULT_CHUNK_SIZE

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")
    format: Literal["json", "console"] = Field(default="json", description="Log record rendering")

    def normalized_level(self) -> str:
        return self.level.upper()

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        if value.upper() not in _LEVELS:
            raise ValueError(f"Unknown log level '{value}'")
        return value


class RedactionConfig(BaseModel):
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1, description="Bytes read per stream read")
    strict_rules: bool = Field(
        default=True,
        description="Fail a file when a custom rule cannot be built instead of skipping the rule",
    )
    include_builtins: bool = Field(default=True, description="Apply the built-in redactors")
    workers: int = Field(default=4, ge=1, le=64, description="Files redacted concurrently by the CLI")
    rules_files: List[Path] = Field(default_factory=list, description="Custom rule documents")


class AppConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    redaction: RedactionConfig = Field(default_factory=RedactionConfig)


DEFAULT_CONFIG = AppConfig()


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
    yield project_config_path()
    yield runtime_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None) -> AppConfig:
    for candidate in config_search_paths(path):
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            try:
                return AppConfig.model_validate(data)
            except ValidationError as exc:
                raise ValueError(f"Invalid configuration in {candidate}: {exc}") from exc
    return DEFAULT_CONFIG.model_copy(deep=True)


def dump_default_config(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(DEFAULT_CONFIG.model_dump(mode="json"), handle, sort_keys=False)
