"""Central exception hierarchy"""
from __future__ import annotations


class RedactError(Exception):
    """Base exception for all redaction failures"""


class CompileError(RedactError):
    """Raised when a pattern, glob or rule cannot be built"""


class ReadError(RedactError):
    """Raised when the source stream fails before end of input"""


class StructuralParseError(RedactError):
    """Raised when structured content cannot be parsed for path redaction"""

    def __init__(self, message: str, *, file_path: str = "", redactor_name: str = "") -> None:
        super().__init__(message)
        self.file_path = file_path
        self.redactor_name = redactor_name


__all__ = [
    "RedactError",
    "CompileError",
    "ReadError",
    "StructuralParseError",
]
