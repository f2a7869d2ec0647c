"""Enumeration scanner."""

from __future__ import annotations
import re
from dataclasses import dataclass, field

from azslsense.scanner.text import IDENT, block_body_lines, find_block, mask_lines, split_lines

_ENUM_RE = re.compile(
    rf"^\s*(?:typedef\s+)?enum\s+(?P<scoped>class\s+|struct\s+)?(?P<name>{IDENT})?\s*(?::\s*{IDENT})?"
)
_VALUE_RE = re.compile(rf"(?:^|(?<=[,{{]))\s*(?P<name>{IDENT})\s*(?==|,|$)")


@dataclass
class EnumDef:
    name: str | None
    line: int
    column: int
    scoped: bool = False
    values: dict[str, tuple[int, int]] = field(default_factory=dict)  # name -> (line, col)


def scan_enums(text: str) -> list[EnumDef]:
    masked = mask_lines(split_lines(text))
    found = []
    for i, line in enumerate(masked):
        m = _ENUM_RE.match(line)
        if not m:
            continue
        enum = EnumDef(m.group("name"), i, m.start("name") if m.group("name") else 0,
                       scoped=bool(m.group("scoped")))
        block = find_block(masked, i)
        if block is not None:
            for ln, col, body, depth in block_body_lines(masked, *block):
                if depth != 1:
                    continue
                for v in _VALUE_RE.finditer(body):
                    # drop initializer expressions such as ``A = 1 << 2``
                    head = body[:v.start()]
                    if head.count("=") > head.count(","):
                        continue
                    enum.values.setdefault(v.group("name"), (ln, col + v.start("name")))
        found.append(enum)
    return found
