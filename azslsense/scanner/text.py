"""Line-oriented helpers shared by the declaration scanners.

Every scanner walks a file one line at a time. ``LineMasker`` carries block
comment state across lines and replaces comment text and string contents
with spaces, keeping columns intact, so braces and identifiers inside
comments or literals never count.
"""

from __future__ import annotations
import re
from typing import Iterable

IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
IDENT_RE = re.compile(IDENT)

# A type name: identifier, optional ``::`` qualification and at most two
# levels of template arguments.
TYPE = (
    rf"{IDENT}(?:::{IDENT})*"
    r"(?:\s*<[^<>;]*(?:<[^<>;]*>[^<>;]*)*>)?"
)

_LINE_SPLIT = re.compile(r"\r?\n")
_TEMPLATE_ARGS = re.compile(r"<[^<>]*(?:<[^<>]*>[^<>]*)*>")


def split_lines(text: str) -> list[str]:
    return _LINE_SPLIT.split(text)


class LineMasker:
    """Blanks comments and string contents while preserving column offsets."""

    def __init__(self):
        self.in_block_comment = False

    def mask(self, line: str) -> str:
        out: list[str] = []
        i, n = 0, len(line)
        while i < n:
            if self.in_block_comment:
                end = line.find("*/", i)
                if end < 0:
                    out.append(" " * (n - i))
                    break
                out.append(" " * (end + 2 - i))
                i = end + 2
                self.in_block_comment = False
                continue
            ch = line[i]
            if line.startswith("//", i):
                out.append(" " * (n - i))
                break
            if line.startswith("/*", i):
                self.in_block_comment = True
                out.append("  ")
                i += 2
                continue
            if ch in "\"'":
                end = i + 1
                while end < n and line[end] != ch:
                    end += 2 if line[end] == "\\" else 1
                end = min(end, n)
                out.append(ch + " " * (end - i - 1))
                if end < n:
                    out.append(ch)
                i = end + 1
                continue
            out.append(ch)
            i += 1
        return "".join(out)


def mask_lines(lines: Iterable[str]) -> list[str]:
    masker = LineMasker()
    return [masker.mask(line) for line in lines]


def brace_delta(masked: str) -> int:
    return masked.count("{") - masked.count("}")


def line_depths(masked_lines: list[str]) -> list[int]:
    """Brace depth at the start of every line (never below zero)."""
    depths = []
    depth = 0
    for masked in masked_lines:
        depths.append(depth)
        depth = max(0, depth + brace_delta(masked))
    return depths


def depth_at(masked_lines: list[str], depths: list[int], line: int, column: int) -> int:
    """Brace depth just before ``column`` on ``line``."""
    if line >= len(masked_lines):
        return 0
    prefix = masked_lines[line][:column]
    return max(0, depths[line] + brace_delta(prefix))


def strip_templates(text: str) -> str:
    return _TEMPLATE_ARGS.sub("", text)


def next_code_line(masked_lines: list[str], start: int, limit: int = 4) -> int | None:
    """Index of the first non-blank masked line at or after ``start``."""
    for i in range(start, min(len(masked_lines), start + limit)):
        if masked_lines[i].strip():
            return i
    return None


def find_block(masked_lines: list[str], header_line: int) -> tuple[int, int] | None:
    """Locate the brace block belonging to a declaration header.

    The opening brace may sit on the header line or on the next code line.
    Returns ``(open_line, close_line)``; an unterminated block runs to the end
    of the file. Returns None when a ``;`` ends the declaration first.
    """
    open_line = None
    header = masked_lines[header_line]
    if "{" in header:
        open_line = header_line
    elif ";" in header:
        return None
    else:
        nxt = next_code_line(masked_lines, header_line + 1)
        if nxt is not None and masked_lines[nxt].lstrip().startswith("{"):
            open_line = nxt
    if open_line is None:
        return None

    depth = 0
    start_col = masked_lines[open_line].find("{")
    for i in range(open_line, len(masked_lines)):
        text = masked_lines[i][start_col:] if i == open_line else masked_lines[i]
        for ch in text:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return open_line, i
    return open_line, len(masked_lines) - 1


def block_body_lines(masked_lines: list[str], open_line: int, close_line: int):
    """Yield ``(line_index, column, text, relative_depth)`` for a block body.

    ``column`` is where ``text`` starts on the line and ``relative_depth`` is
    1 for text directly inside the block. Text before
    the opening brace and after the closing brace is cut away, so one-line
    blocks such as ``{ float a; float b; };`` yield their body too.
    """
    depth = 0
    for i in range(open_line, close_line + 1):
        text = masked_lines[i]
        start = 0
        if i == open_line:
            start = text.find("{") + 1
            depth = 1
        end = len(text)
        if i == close_line:
            # the matching brace is the last one that brings depth back to 0
            d = depth
            for j in range(start, len(text)):
                if text[j] == "{":
                    d += 1
                elif text[j] == "}":
                    d -= 1
                    if d == 0:
                        end = j
                        break
        yield i, start, text[start:end], depth
        depth += brace_delta(text[start:end])
