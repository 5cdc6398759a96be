"""Streaming redaction of collected diagnostic text.

Example:
    from bundle_redact import redact, get_redaction_list

    clean = redact(b"Server=db.internal;", "config/app.ini")
    # clean == b"Server=***HIDDEN***;"
    get_redaction_list().by_file["config/app.ini"]
"""
from .exceptions import CompileError, ReadError, RedactError, StructuralParseError
from .ledger import RedactionLedger, get_default_ledger, get_redaction_list, reset_redaction_list
from .models import MASK_TEXT, Redaction, RedactionList
from .redactor import RedactionEngine, RedactionResult, redact
from .rules import RuleSpec, rules_from_path
from .version import __version__

__all__ = [
    "MASK_TEXT",
    "CompileError",
    "ReadError",
    "RedactError",
    "Redaction",
    "RedactionEngine",
    "RedactionLedger",
    "RedactionList",
    "RedactionResult",
    "RuleSpec",
    "StructuralParseError",
    "__version__",
    "get_default_ledger",
    "get_redaction_list",
    "redact",
    "reset_redaction_list",
    "rules_from_path",
]
