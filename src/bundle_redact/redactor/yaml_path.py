"""Structured redaction of YAML documents by key path."""
from __future__ import annotations

import io
from typing import Any, Iterable, Iterator, List, Sequence, Tuple

import structlog
import yaml

from ..exceptions import CompileError, StructuralParseError
from ..ledger import RedactionLedger
from ..models import MASK_TEXT
from ..utils.glob import compile_glob, match_path
from .base import Redactor
from .lines import LineReader

logger = structlog.get_logger(__name__)

_WILDCARD = "*"
_GLOB_CHARS = frozenset("*?[{")


def parse_yaml_path(path: str) -> Tuple[str, ...]:
    """Split ``a.b[0].c`` style paths into components.

    ``*`` selects every key or list item, integers select list positions and
    map-key components may carry glob wildcards.
    """
    if not path.strip():
        raise CompileError("yaml path must not be empty")
    components: List[str] = []
    for segment in path.split("."):
        head, _, rest = segment.partition("[")
        if head:
            components.append(head)
        elif not rest:
            raise CompileError(f"empty component in yaml path {path!r}")
        while rest:
            index, closing, rest = rest.partition("]")
            if not closing or not index:
                raise CompileError(f"malformed index in yaml path {path!r}")
            components.append(index)
            if rest:
                if not rest.startswith("["):
                    raise CompileError(f"unexpected text after index in yaml path {path!r}")
                rest = rest[1:]
    return tuple(components)


class YamlRedactor(Redactor):
    """Mask every value reached by a key path.

    The whole stream is buffered and every ``---`` separated document in it
    is walked. When anything was masked the stream is re-serialized, so
    formatting and comments are not preserved for redacted documents.
    Streams that do not parse pass through unchanged and the failure is kept
    in :attr:`errors`.
    """

    kind = "yaml"

    def __init__(
        self,
        path: str,
        name: str,
        file_path: str,
        ledger: RedactionLedger | None = None,
        *,
        mask_text: str = MASK_TEXT,
    ) -> None:
        super().__init__(name, file_path, ledger)
        self.path = path
        self.components = parse_yaml_path(path)
        for component in self.components:
            if component != _WILDCARD and _GLOB_CHARS.intersection(component):
                compile_glob(component, separator=".")
        self.mask_text = mask_text
        self.errors: List[StructuralParseError] = []

    def redact(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        document = b"".join(lines)
        try:
            parsed = list(yaml.safe_load_all(document))
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            self.errors.append(
                StructuralParseError(
                    f"{self.file_path} is not valid YAML: {type(exc).__name__}",
                    file_path=self.file_path,
                    redactor_name=self.name,
                )
            )
            logger.warning(
                "redact.yaml.parse_failed",
                file=self.file_path,
                redactor=self.name,
                error=type(exc).__name__,
                line=mark.line + 1 if mark is not None else None,
            )
            yield from _split(document)
            return

        walk = _MaskWalk(self.mask_text)
        redacted = [walk.visit(node, self.components) for node in parsed]
        if not walk.masked:
            yield from _split(document)
            return
        output = yaml.safe_dump_all(
            redacted,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        ).encode("utf-8")
        self._record(walk.removed, 0)
        yield from _split(output)


class _MaskWalk:
    def __init__(self, mask_text: str) -> None:
        self.mask_text = mask_text
        self.masked = 0
        self.removed = 0

    def visit(self, node: Any, components: Sequence[str]) -> Any:
        if not components:
            return self._mask(node)
        head, rest = components[0], components[1:]
        if isinstance(node, list):
            if head == _WILDCARD:
                return [self.visit(child, rest) for child in node]
            try:
                position = int(head)
            except ValueError:
                return node
            if 0 <= position < len(node):
                node[position] = self.visit(node[position], rest)
            return node
        if isinstance(node, dict):
            for key in list(node):
                if _key_matches(head, key):
                    node[key] = self.visit(node[key], rest)
            return node
        return node

    def _mask(self, node: Any) -> Any:
        if node == self.mask_text:
            return node
        self.masked += 1
        self.removed += len(_textual(node))
        return self.mask_text


def _key_matches(component: str, key: Any) -> bool:
    if component == _WILDCARD:
        return True
    text = str(key)
    if component == text:
        return True
    if _GLOB_CHARS.intersection(component):
        return match_path(component, text, separator=".")
    return False


def _textual(node: Any) -> str:
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, (dict, list)):
        return yaml.safe_dump(node, default_flow_style=True).strip()
    return str(node)


def _split(data: bytes) -> Iterator[bytes]:
    return iter(LineReader(io.BytesIO(data)))


__all__ = ["YamlRedactor", "parse_yaml_path"]
