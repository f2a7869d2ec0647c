"""Local variable and function-scope inference for a single document.

Variables are recorded together with the brace depth of their declaration.
A lookup at some position considers only declarations that appear at or
above the query line and are not nested deeper than the query point, and
prefers the most deeply nested, then the latest of those.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field

from azslsense.builtins.keywords import NON_TYPE_WORDS, QUALIFIERS
from azslsense.scanner.text import IDENT, TYPE, depth_at, line_depths, mask_lines

_QUALS = rf"(?:(?:{'|'.join(QUALIFIERS)})\s+)*"

_DECL_RE = re.compile(
    rf"(?:^|(?<=[;{{}}(,]))\s*{_QUALS}(?P<type>{TYPE})\s+(?P<name>{IDENT})"
    r"\s*(?P<array>(?:\[[^\]]*\]\s*)*)(?=[;=,)\[:{]|$)"
)
_FUNC_SIG_RE = re.compile(
    r"^\s*(?:\[\[[^\]]*\]\]\s*)*(?:\[[^\]]*\]\s*)*(?:(?:static|inline|precise|export)\s+)*"
    rf"(?P<ret>{TYPE})\s+(?P<name>{IDENT}(?:\s*::\s*{IDENT})?)\s*\("
)
_PARAM_QUALS = re.compile(
    r"\b(?:in|out|inout|uniform|const|precise|nointerpolation|noperspective|linear|centroid|sample)\s+"
)

# longest parameter list we follow across lines
MAX_SIGNATURE_LINES = 20


@dataclass(frozen=True)
class VarDecl:
    name: str
    type_name: str
    line: int
    column: int
    depth: int


@dataclass
class FunctionScope:
    name: str  # may be ``Owner::Method``
    return_type: str
    start_line: int
    end_line: int
    params: list[tuple[str, str]] = field(default_factory=list)  # (type, name)

    @property
    def owner(self) -> str | None:
        if "::" in self.name:
            return self.name.split("::", 1)[0].strip()
        return None

    @property
    def first_param_type(self) -> str | None:
        return self.params[0][0] if self.params else None

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


def _split_params(text: str) -> list[str]:
    parts, depth, current = [], 0, []
    for ch in text:
        if ch in "(<[":
            depth += 1
        elif ch in ")>]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if "".join(current).strip():
        parts.append("".join(current))
    return parts


def parse_params(text: str) -> list[tuple[str, str]]:
    """``in float3 a : POSITION, Foo b = 1`` -> [("float3", "a"), ("Foo", "b")]."""
    params = []
    for part in _split_params(text):
        part = part.split("=", 1)[0]
        part = part.split(":", 1)[0] if "::" not in part else part
        part = re.sub(r"\[[^\]]*\]", "", part)
        part = _PARAM_QUALS.sub("", part).strip()
        words = part.rsplit(None, 1)
        if len(words) == 2:
            params.append((re.sub(r"\s+", "", words[0]), words[1]))
    return params


class DocumentScopes:
    """Declaration and function-scope tables for one document."""

    def __init__(self, lines: list[str], masked: list[str] | None = None):
        self.lines = lines
        self.masked = masked if masked is not None else mask_lines(lines)
        self.depths = line_depths(self.masked)
        self.declarations: dict[str, list[VarDecl]] = {}
        self.functions: list[FunctionScope] = []
        self._scan_declarations()
        self._scan_functions()

    def depth_at(self, line: int, column: int | None = None) -> int:
        if line >= len(self.masked):
            return 0
        if column is None:
            return self.depths[line]
        return depth_at(self.masked, self.depths, line, column)

    def _scan_declarations(self) -> None:
        for i, text in enumerate(self.masked):
            if text.lstrip().startswith("#"):
                continue
            for m in _DECL_RE.finditer(text):
                type_name = re.sub(r"\s+", "", m.group("type"))
                name = m.group("name")
                if type_name in NON_TYPE_WORDS or name in NON_TYPE_WORDS:
                    continue
                if m.group("array").strip():
                    type_name += "[]"
                decl = VarDecl(name, type_name, i, m.start("name"),
                               self.depth_at(i, m.start("name")))
                self.declarations.setdefault(name, []).append(decl)

    def _scan_functions(self) -> None:
        i = 0
        n = len(self.masked)
        while i < n:
            m = _FUNC_SIG_RE.match(self.masked[i])
            if not m or m.group("ret") in NON_TYPE_WORDS:
                i += 1
                continue
            # gather the parameter list, possibly over several lines
            text = self.masked[i][m.end():]
            depth, j, params = 1, i, []
            while True:
                for k, ch in enumerate(text):
                    if ch == "(":
                        depth += 1
                    elif ch == ")":
                        depth -= 1
                        if depth == 0:
                            params.append(text[:k])
                            text = text[k + 1:]
                            break
                if depth == 0:
                    break
                params.append(text)
                j += 1
                if j >= n or j - i > MAX_SIGNATURE_LINES:
                    break
                text = self.masked[j]
            if depth != 0:
                i += 1
                continue

            body = self._find_body(j, text)
            if body is None:
                i = j + 1
                continue
            open_line, close_line = body
            self.functions.append(FunctionScope(
                name=re.sub(r"\s+", "", m.group("name")),
                return_type=re.sub(r"\s+", "", m.group("ret")),
                start_line=i,
                end_line=close_line,
                params=parse_params(" ".join(params)),
            ))
            i = close_line + 1 if close_line > i else i + 1

    def _find_body(self, line: int, rest: str) -> tuple[int, int] | None:
        """Body extent of a function whose parameter list ended on ``line``."""
        j, text = line, rest
        while True:
            brace = text.find("{")
            semi = text.find(";")
            if semi >= 0 and (brace < 0 or semi < brace):
                return None
            if brace >= 0:
                break
            j += 1
            if j >= len(self.masked) or j - line > 4:
                return None
            text = self.masked[j]
        open_line = j
        depth = 0
        start = self.masked[j].find("{") if j != line else len(self.masked[j]) - len(text) + brace
        for k in range(open_line, len(self.masked)):
            segment = self.masked[k][start:] if k == open_line else self.masked[k]
            for ch in segment:
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        return open_line, k
        return open_line, len(self.masked) - 1

    # ------------------------------------------------------------------

    def enclosing_function(self, line: int) -> FunctionScope | None:
        for fn in reversed(self.functions):
            if fn.contains(line):
                return fn
        return None

    def declaration_of(self, name: str, line: int, column: int | None = None) -> VarDecl | None:
        query_depth = self.depth_at(line, column)
        candidates = [
            d for d in self.declarations.get(name, ())
            if d.line <= line and d.depth <= query_depth
            and not (d.line == line and column is not None and d.column > column)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda d: (d.depth, d.line))

    def variable_type(self, name: str, line: int, column: int | None = None) -> str | None:
        """Declared type of ``name`` as seen from ``line``/``column``.

        ``IN`` and ``OUT`` fall back to the enclosing function's first
        parameter type and return type when not declared explicitly.
        """
        decl = self.declaration_of(name, line, column)
        if decl is not None:
            return decl.type_name
        if name in ("IN", "OUT"):
            fn = self.enclosing_function(line)
            if fn is not None:
                return fn.first_param_type if name == "IN" else fn.return_type
        return None

    def member_owner_at(self, line: int) -> str | None:
        """Class whose members are in scope at ``line`` via a ``Type::Method`` body."""
        fn = self.enclosing_function(line)
        return fn.owner if fn is not None else None
