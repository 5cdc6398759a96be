"""Compile rule patterns into executable replacement templates.

Patterns use named capture groups to describe what happens to matched text:

* ``(?P<mask>...)`` is replaced by the mask placeholder
* ``(?P<drop>...)`` is removed
* unnamed groups and groups with any other name are kept verbatim

Text inside a match but outside every ``mask`` and ``drop`` capture is copied
through unchanged. A ``mask`` nested inside another ``mask`` or ``drop`` follows
the outer group. A pattern without capture groups masks the whole match.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, Optional, Tuple

import regex

from ..exceptions import CompileError
from ..models import MASK_TEXT
from ..utils.text import find_spans

_NAMED_GROUP = regex.compile(r"\(\?P?<([A-Za-z_][A-Za-z0-9_]*)>")
_NAMED_BACKREF = regex.compile(r"\(\?P=([A-Za-z_][A-Za-z0-9_]*)\)")
_ALIAS_PREFIX = "__grp"


class GroupRole(str, Enum):
    KEEP = "keep"
    MASK = "mask"
    DROP = "drop"


@dataclass(frozen=True, slots=True)
class GroupTemplate:
    index: int
    role: GroupRole
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled regex plus the per-group replacement plan."""

    source: str
    pattern: regex.Pattern[str]
    template: Tuple[GroupTemplate, ...]
    mask_text: str = MASK_TEXT

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None

    def expand(self, match: regex.Match[str]) -> str:
        text = match.string
        parts: List[str] = []
        cursor = match.start()
        for start, end, role in self._outer_captures(match):
            parts.append(text[cursor:start])
            if role is GroupRole.MASK:
                parts.append(self.mask_text)
            cursor = end
        parts.append(text[cursor : match.end()])
        return "".join(parts)

    def _outer_captures(self, match: regex.Match[str]) -> List[Tuple[int, int, GroupRole]]:
        """Non-empty mask and drop spans of ``match`` that no earlier such span encloses."""
        spans = sorted(
            (match.start(group.index), -match.end(group.index), group.role)
            for group in self.template
            if group.role is not GroupRole.KEEP and match.end(group.index) > match.start(group.index)
        )
        outer: List[Tuple[int, int, GroupRole]] = []
        for start, negative_end, role in spans:
            end = -negative_end
            if outer and start < outer[-1][1]:
                continue
            outer.append((start, end, role))
        return outer

    def placeholder_spans(self, text: str) -> List[Tuple[int, int]]:
        return find_spans(text, self.mask_text)

    def already_masked(self, match: regex.Match[str], spans: List[Tuple[int, int]]) -> bool:
        """True when every non-empty mask or drop capture lies inside existing placeholders."""
        captured = [
            match.span(group.index)
            for group in self.template
            if group.role is not GroupRole.KEEP and match.end(group.index) > match.start(group.index)
        ]
        if not captured or not spans:
            return False
        return all(covered(start, end, spans) for start, end in captured)

    def removed(self, match: regex.Match[str]) -> int:
        """Number of characters covered by mask and drop captures of ``match``."""
        return sum(end - start for start, end, _role in self._outer_captures(match))

    def redact(self, text: str) -> Optional[Tuple[str, int]]:
        """Replace every match in ``text``.

        Matches whose masked text is already a placeholder are left alone so
        redacting twice is a no-op.

        Returns ``None`` when nothing was replaced, otherwise the new text and the
        number of characters masked or dropped.
        """
        spans = self.placeholder_spans(text)
        removed = 0
        changed = 0

        def _replace(match: regex.Match[str]) -> str:
            nonlocal removed, changed
            original = match.group()
            if self.already_masked(match, spans):
                return original
            replacement = self.expand(match)
            if replacement == original:
                return original
            removed += self.removed(match)
            changed += 1
            return replacement

        result = self.pattern.sub(_replace, text)
        if not changed:
            return None
        return result, removed


@lru_cache(maxsize=512)
def compile_pattern(pattern: str, mask_text: str = MASK_TEXT) -> CompiledPattern:
    rewritten, template = _plan_groups(pattern)
    try:
        compiled = regex.compile(rewritten)
    except regex.error as exc:
        raise CompileError(f"invalid pattern {pattern!r}: {exc}") from exc
    if compiled.groups != len(template):
        raise CompileError(f"unsupported group construct in pattern {pattern!r}")
    if not template:
        template = [GroupTemplate(index=0, role=GroupRole.MASK)]
    return CompiledPattern(
        source=pattern,
        pattern=compiled,
        template=tuple(template),
        mask_text=mask_text,
    )


def compile_pair(
    selector: str, redactor: str, mask_text: str = MASK_TEXT
) -> Tuple[CompiledPattern, CompiledPattern]:
    return compile_pattern(selector, mask_text), compile_pattern(redactor, mask_text)


def covered(start: int, end: int, spans: List[Tuple[int, int]]) -> bool:
    """True when ``[start, end)`` is covered by the sorted, disjoint ``spans``."""
    position = start
    for span_start, span_end in spans:
        if span_end <= position:
            continue
        if span_start > position:
            return False
        position = span_end
        if position >= end:
            return True
    return position >= end


def _role_for(name: str) -> GroupRole:
    if name == "mask":
        return GroupRole.MASK
    if name == "drop":
        return GroupRole.DROP
    return GroupRole.KEEP


def _plan_groups(pattern: str) -> Tuple[str, List[GroupTemplate]]:
    """Walk ``pattern`` once, numbering capture groups in opening order.

    Named groups are renamed to unique aliases so a name such as ``mask`` may
    appear several times and each occurrence keeps its own group number.
    """
    out: List[str] = []
    template: List[GroupTemplate] = []
    aliases: dict[str, str] = {}
    in_class = False
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "\\":
            out.append(pattern[index : index + 2])
            index += 2
            continue
        if in_class:
            if char == "]":
                in_class = False
            out.append(char)
            index += 1
            continue
        if char == "[":
            in_class = True
            out.append(char)
            index += 1
            for literal in ("^", "]"):
                if pattern.startswith(literal, index):
                    out.append(literal)
                    index += 1
            continue
        if char == "(" and pattern.startswith("(?", index):
            named = _NAMED_GROUP.match(pattern, index)
            if named:
                number = len(template) + 1
                name = named.group(1)
                alias = f"{_ALIAS_PREFIX}{number}"
                aliases.setdefault(name, alias)
                template.append(GroupTemplate(index=number, role=_role_for(name), name=name))
                out.append(f"(?P<{alias}>")
                index = named.end()
                continue
            backref = _NAMED_BACKREF.match(pattern, index)
            if backref:
                name = backref.group(1)
                out.append(f"(?P={aliases.get(name, name)})")
                index = backref.end()
                continue
        elif char == "(":
            template.append(GroupTemplate(index=len(template) + 1, role=GroupRole.KEEP))
        out.append(char)
        index += 1
    return "".join(out), template


__all__ = [
    "CompiledPattern",
    "GroupRole",
    "GroupTemplate",
    "compile_pair",
    "compile_pattern",
    "covered",
]
