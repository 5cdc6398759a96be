"""Redaction package exports."""
from .base import Redactor
from .engines import RedactionEngine, RedactionResult, get_default_engine, redact
from .lines import LineReader
from .literal import LiteralRedactor
from .multi_line import MultiLineRedactor
from .single_line import SingleLineRedactor
from .yaml_path import YamlRedactor

__all__ = [
    "LineReader",
    "LiteralRedactor",
    "MultiLineRedactor",
    "RedactionEngine",
    "RedactionResult",
    "Redactor",
    "SingleLineRedactor",
    "YamlRedactor",
    "get_default_engine",
    "redact",
]
