"""Top-level function and out-of-class method implementation scanner."""

from __future__ import annotations
import re
from dataclasses import dataclass

from azslsense.builtins.keywords import NON_TYPE_WORDS
from azslsense.scanner.text import IDENT, TYPE, mask_lines, split_lines

_PREFIX = r"^\s*(?:\[\[[^\]]*\]\]\s*)*(?:\[[^\]]*\]\s*)*(?:(?:static|inline|precise|export)\s+)*"

_FUNC_RE = re.compile(rf"{_PREFIX}(?P<ret>{TYPE})\s+(?P<name>{IDENT})\s*\((?P<params>[^)]*)\)?")
_IMPL_RE = re.compile(
    rf"{_PREFIX}(?P<ret>{TYPE})\s+(?P<owner>{IDENT})\s*::\s*(?P<name>{IDENT})\s*\("
)
_STRUCT_START_RE = re.compile(r"^\s*(?:typedef\s+)?(?:struct|class)\b")

_CONTROL_WORDS = frozenset(["if", "for", "while", "switch", "return", "sizeof", "do"])


@dataclass
class FunctionDef:
    name: str
    return_type: str
    params: str
    line: int
    column: int
    signature: str


@dataclass
class MethodImpl:
    owner: str
    name: str
    return_type: str
    line: int
    column: int
    signature: str


def _signature(raw: str) -> str:
    return raw.strip().rstrip("{").rstrip()


def scan_functions(text: str) -> tuple[list[FunctionDef], list[MethodImpl]]:
    """Function declarations outside struct/class bodies, plus ``Type::Method`` bodies.

    A separate depth counter tracks struct/class regions so member functions
    declared inline are never reported as free functions.
    """
    lines = split_lines(text)
    masked = mask_lines(lines)
    functions: list[FunctionDef] = []
    impls: list[MethodImpl] = []

    struct_depth = 0
    pending_struct = False
    for i, line in enumerate(masked):
        if line.lstrip().startswith("#"):
            continue
        if struct_depth == 0 and _STRUCT_START_RE.match(line):
            pending_struct = True

        if struct_depth == 0 and not pending_struct:
            m = _IMPL_RE.match(line)
            if m and m.group("ret") not in NON_TYPE_WORDS:
                impls.append(MethodImpl(
                    owner=m.group("owner"),
                    name=m.group("name"),
                    return_type=m.group("ret"),
                    line=i,
                    column=m.start("name"),
                    signature=_signature(lines[i]),
                ))
            else:
                m = _FUNC_RE.match(line)
                if (m and m.group("ret") not in NON_TYPE_WORDS
                        and m.group("name") not in _CONTROL_WORDS
                        and m.group("name") not in NON_TYPE_WORDS):
                    functions.append(FunctionDef(
                        name=m.group("name"),
                        return_type=m.group("ret"),
                        params=(m.group("params") or "").strip(),
                        line=i,
                        column=m.start("name"),
                        signature=_signature(lines[i]),
                    ))

        for ch in line:
            if ch == "{":
                if pending_struct or struct_depth:
                    struct_depth += 1
                    pending_struct = False
            elif ch == "}" and struct_depth:
                struct_depth -= 1
        if pending_struct and ";" in line and "{" not in line:
            # forward declaration or ``struct Foo foo;``
            pending_struct = False

    return functions, impls
