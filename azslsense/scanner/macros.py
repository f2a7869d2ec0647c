"""Preprocessor macro scanner.

Picks up every ``#define`` together with the documentation a reader would
associate with it: the comment block directly above the definition plus any
trailing ``//`` comment. Definitions wrapped in an ``#ifndef NAME`` guard take
their documentation from the comment above the guard instead.
"""

from __future__ import annotations
import re
from dataclasses import dataclass

from azslsense.scanner.text import split_lines

_DEFINE_RE = re.compile(
    r"^\s*#\s*define\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<params>\([^)]*\))?"
    r"(?:\s+(?P<value>.*?))?(?:\s*//\s*(?P<comment>.*))?\s*$"
)
_GUARD_RE = re.compile(
    r"^\s*#\s*(?:ifndef\s+(?P<a>[A-Za-z_]\w*)|if\s+!\s*defined\s*\(?\s*(?P<b>[A-Za-z_]\w*)\s*\)?)\s*$"
)
_BLANK_RE = re.compile(r"^\s*$")
_LINE_COMMENT_RE = re.compile(r"^\s*//")
_BLOCK_END_RE = re.compile(r"\*/\s*$")
_BLOCK_START_RE = re.compile(r"^\s*/\*")
_BLOCK_LINE_PREFIX = re.compile(r"^\s*\*\s?")

# how far below an #ifndef the matching #define may appear
GUARD_WINDOW = 16


@dataclass
class MacroDef:
    name: str
    value: str
    line: int
    column: int = 0
    doc: str = ""
    params: str | None = None
    guarded: bool = False

    @property
    def signature(self) -> str:
        head = f"#define {self.name}{self.params or ''}"
        return f"{head} {self.value}" if self.value else head


def collect_preceding_comment(lines: list[str], index: int) -> str:
    """Documentation comment ending at or above ``index``.

    Blank lines are skipped, then contiguous ``//`` lines are taken, then a
    ``/* ... */`` block directly above them. Leading ``*`` decorations of
    block comment lines are removed.
    """
    doc: list[str] = []
    j = index
    while j >= 0 and _BLANK_RE.match(lines[j]):
        j -= 1
    while j >= 0 and _LINE_COMMENT_RE.match(lines[j]):
        doc.insert(0, _LINE_COMMENT_RE.sub("", lines[j], count=1).strip())
        j -= 1
    if j >= 0 and _BLOCK_END_RE.search(lines[j]):
        k = j
        block: list[str] = []
        while k >= 0:
            block.insert(0, lines[k])
            if _BLOCK_START_RE.match(lines[k]):
                break
            k -= 1
        joined = "\n".join(block)
        joined = _BLOCK_START_RE.sub("", joined, count=1)
        joined = _BLOCK_END_RE.sub("", joined)
        cleaned = [_BLOCK_LINE_PREFIX.sub("", s, count=1).strip() for s in joined.split("\n")]
        doc = cleaned + doc
    return "\n".join(doc).strip("\n")


def _join_doc(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def scan_macros(text: str) -> list[MacroDef]:
    """Every macro definition in ``text``, one entry per canonical definition.

    When a name has both guarded and unguarded definitions in the file the
    unguarded ones win.
    """
    lines = split_lines(text)

    guard_docs: dict[int, str] = {}
    for i, line in enumerate(lines):
        g = _GUARD_RE.match(line)
        if not g:
            continue
        name = g.group("a") or g.group("b")
        for k in range(i + 1, min(len(lines), i + GUARD_WINDOW)):
            d = _DEFINE_RE.match(lines[k])
            if d and d.group("name") == name:
                guard_docs[k] = collect_preceding_comment(lines, i - 1)
                break

    found: list[MacroDef] = []
    for i, line in enumerate(lines):
        m = _DEFINE_RE.match(line)
        if m is None:
            continue
        inline = (m.group("comment") or "").strip()
        own_doc = _join_doc(collect_preceding_comment(lines, i - 1), inline)
        guarded = i in guard_docs
        doc = own_doc
        if guarded:
            guard_doc = _join_doc(guard_docs[i], inline)
            if len(guard_doc) > len(own_doc):
                doc = guard_doc
        found.append(MacroDef(
            name=m.group("name"),
            value=(m.group("value") or "").strip(),
            line=i,
            column=m.start("name"),
            doc=doc,
            params=m.group("params"),
            guarded=guarded,
        ))

    unguarded = {d.name for d in found if not d.guarded}
    return [d for d in found if not d.guarded or d.name not in unguarded]
