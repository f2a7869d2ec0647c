"""Struct, class and typedef scanner."""

from __future__ import annotations
import re
from dataclasses import dataclass, field

from azslsense.builtins.keywords import NON_TYPE_WORDS, QUALIFIERS
from azslsense.scanner.text import (
    IDENT, TYPE, block_body_lines, find_block, mask_lines, split_lines,
)

_QUALS = rf"(?:(?:{'|'.join(QUALIFIERS)})\s+)*"

_HEAD_RE = re.compile(
    rf"^\s*(?P<typedef>typedef\s+)?(?P<kind>struct|class)\b\s*(?P<name>{IDENT})?"
    r"\s*(?::\s*(?:public\s+|private\s+|protected\s+)?(?P<bases>[^{;]*?))?\s*(?P<rest>[{;].*)?$"
)
_TYPEDEF_TAGGED_RE = re.compile(
    rf"^\s*typedef\s+(?:struct|class)\s+(?P<target>{IDENT})\s+(?P<alias>{IDENT})\s*;"
)
_TYPEDEF_RE = re.compile(
    rf"^\s*typedef\s+(?:const\s+)?(?P<target>{TYPE})\s+(?P<alias>{IDENT})\s*(?:\[[^\]]*\]\s*)?;"
)
_CLOSE_ALIAS_RE = re.compile(rf"\}}\s*(?P<alias>{IDENT})\s*[,;]")
_FIELD_RE = re.compile(
    rf"(?:^|(?<=[;{{}}]))\s*{_QUALS}(?P<type>{TYPE})\s+"
    rf"(?P<names>{IDENT}(?:\s*\[[^\]]*\])*(?:\s*,\s*{IDENT}(?:\s*\[[^\]]*\])*)*)"
    r"\s*(?P<term>;|:|=|\{|$)"
)
_METHOD_RE = re.compile(
    rf"^\s*{_QUALS}(?P<ret>{TYPE})\s+(?P<name>{IDENT})\s*\("
)
_NAME_IN_LIST = re.compile(IDENT)
_NESTED_RE = re.compile(r"\b(?:enum|struct|class)\b")


@dataclass
class MemberDecl:
    name: str
    type_name: str
    line: int
    column: int
    signature: str = ""


@dataclass
class StructDef:
    name: str
    kind: str  # "struct" or "class"
    line: int
    column: int
    end_line: int = -1
    bases: list[str] = field(default_factory=list)
    fields: dict[str, MemberDecl] = field(default_factory=dict)
    methods: dict[str, MemberDecl] = field(default_factory=dict)
    aliases: list[str] = field(default_factory=list)

    @property
    def member_names(self) -> set[str]:
        return set(self.fields) | set(self.methods)


@dataclass
class TypeAliasDef:
    name: str
    target: str
    line: int
    column: int


def _parse_bases(text: str | None) -> list[str]:
    if not text:
        return []
    bases = []
    for part in text.split(","):
        words = _NAME_IN_LIST.findall(part)
        if words:
            bases.append(words[-1])
    return bases


def _declared_names(names: str) -> list[tuple[str, int, bool]]:
    """``a[4], b`` -> [("a", 0, True), ("b", 6, False)]."""
    result = []
    depth = 0
    i = 0
    while i < len(names):
        ch = names[i]
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif depth == 0 and (ch.isalpha() or ch == "_"):
            m = _NAME_IN_LIST.match(names, i)
            is_array = names[m.end():].lstrip().startswith("[")
            result.append((m.group(), i, is_array))
            i = m.end()
            continue
        i += 1
    return result


def _scan_members(struct: StructDef, lines: list[str], masked: list[str],
                  open_line: int, close_line: int):
    for i, col, text, depth in block_body_lines(masked, open_line, close_line):
        if depth != 1 or not text.strip():
            continue
        if _NESTED_RE.search(text):
            continue
        if "(" in text:
            m = _METHOD_RE.match(text)
            if m and m.group("name") not in NON_TYPE_WORDS and m.group("ret") not in NON_TYPE_WORDS:
                struct.methods.setdefault(m.group("name"), MemberDecl(
                    m.group("name"), m.group("ret"), i, col + m.start("name"),
                    lines[i].strip().rstrip("{").rstrip()))
            continue
        for m in _FIELD_RE.finditer(text):
            type_name = m.group("type")
            if type_name in NON_TYPE_WORDS:
                continue
            if m.group("term") == "" and not _brace_follows(masked, i):
                continue
            for name, offset, is_array in _declared_names(m.group("names")):
                struct.fields.setdefault(name, MemberDecl(
                    name, type_name + ("[]" if is_array else ""), i,
                    col + m.start("names") + offset))


def _brace_follows(masked: list[str], line: int) -> bool:
    for j in range(line + 1, min(len(masked), line + 3)):
        if masked[j].strip():
            return masked[j].lstrip().startswith("{")
    return False


def scan_structs(text: str) -> tuple[list[StructDef], list[TypeAliasDef]]:
    """Scan ``text`` for struct/class definitions and type aliases.

    Handles the brace on the header line or the next line, one-line bodies,
    ``typedef struct [Name] { ... } Alias;`` and plain ``typedef`` aliases.
    """
    lines = split_lines(text)
    masked = mask_lines(lines)
    structs: list[StructDef] = []
    aliases: list[TypeAliasDef] = []

    i = 0
    while i < len(masked):
        line = masked[i]
        if line.lstrip().startswith("#"):
            i += 1
            continue

        m = _TYPEDEF_TAGGED_RE.match(line)
        if m:
            aliases.append(TypeAliasDef(m.group("alias"), m.group("target"), i, m.start("alias")))
            i += 1
            continue

        m = _HEAD_RE.match(line)
        if m:
            block = find_block(masked, i)
            if block is None:
                i += 1
                continue
            open_line, close_line = block
            closing = _CLOSE_ALIAS_RE.search(masked[close_line]) if m.group("typedef") else None
            alias = closing.group("alias") if closing else None
            if m.group("name"):
                name, line_no, column = m.group("name"), i, m.start("name")
            elif closing:
                # anonymous typedef: the alias is the only name
                name, line_no, column = alias, close_line, closing.start("alias")
            else:
                i = close_line + 1
                continue
            struct = StructDef(
                name=name,
                kind=m.group("kind"),
                line=line_no,
                column=column,
                end_line=close_line,
                bases=_parse_bases(m.group("bases")),
            )
            if alias and alias != name:
                struct.aliases.append(alias)
            _scan_members(struct, lines, masked, open_line, close_line)
            structs.append(struct)
            # nested definitions are picked up on later lines
            i += 1
            continue

        m = _TYPEDEF_RE.match(line)
        if m and m.group("target") not in ("struct", "class"):
            aliases.append(TypeAliasDef(m.group("alias"), m.group("target"), i, m.start("alias")))
        i += 1

    return structs, aliases
