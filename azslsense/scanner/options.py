"""Shader option scanner."""

from __future__ import annotations
import re
from dataclasses import dataclass

from azslsense.scanner.text import IDENT, mask_lines, split_lines

_OPTION_RE = re.compile(
    r"^\s*(?:\[\[[^\]]*\]\]\s*)*option\s+(?P<static>static\s+)?"
    rf"(?P<type>{IDENT})\s+(?P<name>{IDENT})\s*(?:=\s*(?P<default>[^;]+?))?\s*;"
)


@dataclass(frozen=True)
class OptionDef:
    name: str
    type_name: str
    is_static: bool
    default: str | None
    line: int
    column: int


def scan_options(text: str) -> list[OptionDef]:
    """Every ``option`` declaration, with comments removed first."""
    found = []
    for i, line in enumerate(mask_lines(split_lines(text))):
        m = _OPTION_RE.match(line)
        if m is None:
            continue
        found.append(OptionDef(
            name=m.group("name"),
            type_name=m.group("type"),
            is_static=bool(m.group("static")),
            default=m.group("default").strip() if m.group("default") else None,
            line=i,
            column=m.start("name"),
        ))
    return found
