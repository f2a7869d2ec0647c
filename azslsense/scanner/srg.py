"""ShaderResourceGroup and ShaderResourceGroupSemantic scanner."""

from __future__ import annotations
import re
from dataclasses import dataclass, field

from azslsense.builtins.keywords import NON_TYPE_WORDS, QUALIFIERS
from azslsense.builtins.semantics import SRG_SEMANTIC_PREFIX
from azslsense.scanner.text import (
    IDENT, TYPE, block_body_lines, find_block, mask_lines, split_lines,
    strip_templates,
)

_QUALS = rf"(?:(?:{'|'.join(QUALIFIERS)})\s+)*"

_SRG_RE = re.compile(
    rf"^\s*(?P<partial>partial\s+)?ShaderResourceGroup\s+(?P<name>{IDENT})"
    rf"\s*(?::\s*(?P<semantic>{IDENT}))?"
)
_SEMANTIC_RE = re.compile(
    rf"^\s*ShaderResourceGroupSemantic\s+(?P<name>{SRG_SEMANTIC_PREFIX}[A-Za-z0-9_]*)\b"
)
_ANY_SEMANTIC_RE = re.compile(r"^\s*ShaderResourceGroupSemantic\b")
_FIELD_RE = re.compile(
    rf"(?:^|(?<=[;{{}}]))\s*{_QUALS}(?P<type>{TYPE})\s+(?P<name>{IDENT})"
    r"\s*(?P<array>(?:\[[^\]]*\]\s*)*)(?P<term>;|=|:|\{|$)"
)
_METHOD_RE = re.compile(rf"^\s*{_QUALS}(?P<ret>{TYPE})\s+(?P<name>{IDENT})\s*\(")

_EXCLUDED_NAMES = frozenset(["ShaderResourceGroup", "partial", "static", "const"])


@dataclass
class SrgMember:
    name: str
    type_name: str
    line: int
    column: int
    is_method: bool = False


@dataclass
class SrgDef:
    name: str
    line: int
    column: int
    semantic: str | None = None
    partial: bool = False
    end_line: int = -1
    members: dict[str, SrgMember] = field(default_factory=dict)


@dataclass
class SrgSemanticDef:
    name: str
    line: int
    column: int
    has_fallback: bool = False


def _is_member_name(name: str, type_name: str) -> bool:
    return (name not in _EXCLUDED_NAMES and type_name not in _EXCLUDED_NAMES
            and type_name not in NON_TYPE_WORDS)


def _scan_members(srg: SrgDef, masked: list[str], open_line: int, close_line: int):
    for i, col, text, depth in block_body_lines(masked, open_line, close_line):
        if depth != 1 or not text.strip():
            continue
        if "(" in text:
            m = _METHOD_RE.match(text)
            if m and _is_member_name(m.group("name"), m.group("ret")):
                srg.members.setdefault(m.group("name"), SrgMember(
                    m.group("name"), m.group("ret"), i, col + m.start("name"), is_method=True))
            continue
        for m in _FIELD_RE.finditer(text):
            name, type_name = m.group("name"), re.sub(r"\s+", "", m.group("type"))
            if not _is_member_name(name, strip_templates(type_name)):
                continue
            if m.group("term") == "" and not _brace_follows(masked, i):
                continue
            if m.group("array").strip():
                type_name += "[]"
            srg.members.setdefault(name, SrgMember(name, type_name, i, col + m.start("name")))


def _brace_follows(masked: list[str], line: int) -> bool:
    for j in range(line + 1, min(len(masked), line + 3)):
        if masked[j].strip():
            return masked[j].lstrip().startswith("{")
    return False


def scan_srgs(text: str) -> tuple[list[SrgDef], list[SrgSemanticDef]]:
    """Scan ``text`` for SRG declarations and SRG semantic declarations."""
    lines = split_lines(text)
    masked = mask_lines(lines)
    srgs: list[SrgDef] = []
    semantics: list[SrgSemanticDef] = []

    for i, line in enumerate(masked):
        m = _SEMANTIC_RE.match(line)
        if m:
            sem = SrgSemanticDef(m.group("name"), i, m.start("name"))
            block = find_block(masked, i)
            if block is not None:
                body = "\n".join(masked[block[0]:block[1] + 1])
                sem.has_fallback = "ShaderVariantFallback" in body
            semantics.append(sem)
            continue
        if _ANY_SEMANTIC_RE.match(line):
            # semantic names outside the reserved prefix are not recorded
            continue

        m = _SRG_RE.match(line)
        if not m:
            continue
        srg = SrgDef(
            name=m.group("name"),
            line=i,
            column=m.start("name"),
            semantic=m.group("semantic"),
            partial=bool(m.group("partial")),
        )
        block = find_block(masked, i)
        if block is not None:
            srg.end_line = block[1]
            _scan_members(srg, masked, *block)
        srgs.append(srg)

    return srgs, semantics
