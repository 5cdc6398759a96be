"""Redaction engine that composes built-in and custom redactors into one pass."""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Sequence, Tuple

import structlog

from ..exceptions import CompileError, ReadError, StructuralParseError
from ..ledger import RedactionLedger, get_default_ledger
from ..models import MASK_TEXT
from ..rules.builtin import BUILTIN_RULES, BuiltinRule
from ..rules.compiler import CompiledPattern, compile_pair, compile_pattern
from ..rules.schema import RuleSpec
from ..utils.glob import DEFAULT_SEPARATOR, match_path
from .base import Redactor
from .lines import DEFAULT_CHUNK_SIZE, LineReader
from .literal import LiteralRedactor
from .multi_line import MultiLineRedactor
from .single_line import SingleLineRedactor
from .yaml_path import YamlRedactor

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class RedactionResult:
    content: bytes
    errors: List[StructuralParseError] = field(default_factory=list)


def redactor_name(rule_index: int, within_rule: int, rule_name: str | None, kind: str) -> str:
    """Stable name for the ``within_rule``-th entry of a custom rule."""
    if rule_name:
        return f"{rule_name}-{within_rule}"
    return f"unnamed-{rule_index}.{within_rule}-{kind}"


def rule_matches_path(rule: RuleSpec, path: str, separator: str = DEFAULT_SEPARATOR) -> bool:
    if not rule.is_scoped():
        return True
    return any(match_path(pattern, path, separator) for pattern in rule.globs())


class RedactionEngine:
    """Resolve the redactors for a path and stream content through them.

    Built-in rules are compiled once, when the engine is created. Custom rules
    are compiled per call (compiled patterns are cached). With ``strict`` set a
    custom rule that fails to build fails the call; otherwise the broken entry
    is logged and skipped.
    """

    def __init__(
        self,
        ledger: RedactionLedger | None = None,
        *,
        include_builtins: bool = True,
        strict: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        builtin_rules: Sequence[BuiltinRule] = BUILTIN_RULES,
    ) -> None:
        self.ledger = ledger or get_default_ledger()
        self.strict = strict
        self.chunk_size = chunk_size
        self._builtins: List[Tuple[BuiltinRule, CompiledPattern | None, CompiledPattern]] = []
        if include_builtins:
            for rule in builtin_rules:
                if rule.selector is not None:
                    selector, pattern = compile_pair(rule.selector, rule.pattern, MASK_TEXT)
                    self._builtins.append((rule, selector, pattern))
                else:
                    self._builtins.append((rule, None, compile_pattern(rule.pattern, MASK_TEXT)))

    @property
    def builtin_names(self) -> List[str]:
        return [rule.name for rule, _selector, _pattern in self._builtins]

    def builtin_redactors(self, path: str) -> List[Redactor]:
        redactors: List[Redactor] = []
        for rule, selector, pattern in self._builtins:
            if selector is not None:
                redactors.append(MultiLineRedactor(selector, pattern, rule.name, path, self.ledger))
            else:
                redactors.append(SingleLineRedactor(pattern, rule.name, path, self.ledger))
        return redactors

    def custom_redactors(self, path: str, rules: Sequence[RuleSpec | None]) -> List[Redactor]:
        redactors: List[Redactor] = []
        for rule_index, rule in enumerate(rules):
            if rule is None:
                continue
            try:
                matches = rule_matches_path(rule, path)
            except CompileError as exc:
                self._reject(rule_index, rule, "file", exc)
                continue
            if not matches:
                continue
            within_rule = 0
            for kind, entry in _entries(rule):
                name = redactor_name(rule_index, within_rule, rule.name, kind)
                within_rule += 1
                try:
                    redactors.append(self._build(kind, entry, name, path))
                except CompileError as exc:
                    self._reject(rule_index, rule, name, exc)
        return redactors

    def build_redactors(self, path: str, rules: Sequence[RuleSpec | None] = ()) -> List[Redactor]:
        return self.builtin_redactors(path) + self.custom_redactors(path, rules)

    def redact_stream(
        self,
        stream: BinaryIO,
        path: str,
        rules: Sequence[RuleSpec | None] = (),
        *,
        redactors: Sequence[Redactor] | None = None,
    ) -> Iterator[bytes]:
        chain = list(redactors) if redactors is not None else self.build_redactors(path, rules)
        lines: Iterator[bytes] = LineReader(stream, self.chunk_size)
        for redactor in chain:
            lines = redactor.redact(lines)
        return lines

    def redact_with_report(
        self, content: bytes, path: str, rules: Sequence[RuleSpec | None] = ()
    ) -> RedactionResult:
        redactors = self.build_redactors(path, rules)
        return self._drain(io.BytesIO(content), path, redactors)

    def redact_file(self, stream: BinaryIO, path: str, rules: Sequence[RuleSpec | None] = ()) -> RedactionResult:
        redactors = self.build_redactors(path, rules)
        return self._drain(stream, path, redactors)

    def redact(self, content: bytes, path: str, rules: Sequence[RuleSpec | None] = ()) -> bytes:
        return self.redact_with_report(content, path, rules).content

    def _drain(self, stream: BinaryIO, path: str, redactors: Sequence[Redactor]) -> RedactionResult:
        output = io.BytesIO()
        try:
            for line in self.redact_stream(stream, path, redactors=redactors):
                output.write(line)
        except ReadError:
            logger.error("redact.read_failed", file=path)
            raise
        except OSError as exc:
            logger.error("redact.read_failed", file=path, error=str(exc))
            raise ReadError(f"failed to redact {path}: {exc}") from exc
        errors = [error for redactor in redactors if isinstance(redactor, YamlRedactor) for error in redactor.errors]
        logger.debug("redact.file.done", file=path, redactors=len(redactors), errors=len(errors))
        return RedactionResult(content=output.getvalue(), errors=errors)

    def _build(self, kind: str, entry: object, name: str, path: str) -> Redactor:
        if kind == SingleLineRedactor.kind:
            return SingleLineRedactor.from_source(str(entry), name, path, self.ledger)
        if kind == LiteralRedactor.kind:
            return LiteralRedactor(str(entry), name, path, self.ledger)
        if kind == MultiLineRedactor.kind:
            selector, redactor = entry  # type: ignore[misc]
            return MultiLineRedactor.from_source(selector, redactor, name, path, self.ledger)
        if kind == YamlRedactor.kind:
            return YamlRedactor(str(entry), name, path, self.ledger)
        raise CompileError(f"unknown redactor kind: {kind}")

    def _reject(self, rule_index: int, rule: RuleSpec, entry: str, exc: CompileError) -> None:
        label = rule.name or f"rule {rule_index}"
        if self.strict:
            raise CompileError(f"build custom redactors: {label} ({entry}): {exc}") from exc
        logger.warning("redact.rule.skipped", rule=label, entry=entry, error=str(exc))


def _entries(rule: RuleSpec) -> Iterator[Tuple[str, object]]:
    for pattern in rule.regex:
        yield SingleLineRedactor.kind, pattern
    for value in rule.values:
        yield LiteralRedactor.kind, value
    for pair in rule.multi_line:
        yield MultiLineRedactor.kind, (pair.selector, pair.redactor)
    for path in rule.yaml:
        yield YamlRedactor.kind, path


_DEFAULT_ENGINE: RedactionEngine | None = None


def get_default_engine() -> RedactionEngine:
    """Return the engine bound to the process-wide ledger."""
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = RedactionEngine()
    return _DEFAULT_ENGINE


def redact(
    content: bytes,
    path: str,
    custom_rules: Sequence[RuleSpec | None] | None = None,
    *,
    ledger: RedactionLedger | None = None,
) -> bytes:
    engine = get_default_engine() if ledger is None else RedactionEngine(ledger)
    return engine.redact(content, path, custom_rules or ())


__all__ = [
    "RedactionEngine",
    "RedactionResult",
    "get_default_engine",
    "redact",
    "redactor_name",
    "rule_matches_path",
]
