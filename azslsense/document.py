"""Host-facing document and result types.

The analysis core never talks to an editor directly. A host hands it
``TextDocument`` objects and receives the plain value types defined here
(locations, diagnostics, completion items, hovers, links and edits).
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

AZSL_LANGUAGE_ID = "azsl"

_LINE_SPLIT = re.compile(r"\r?\n")
_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True, order=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> Range:
        return cls(Position(line, start), Position(line, end))

    def contains(self, pos: Position) -> bool:
        return self.start <= pos <= self.end


@dataclass(frozen=True)
class Location:
    uri: str
    line: int
    column: int = 0

    @property
    def position(self) -> Position:
        return Position(self.line, self.column)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


@dataclass(frozen=True)
class Diagnostic:
    range: Range
    message: str
    severity: Severity = Severity.ERROR
    code: str = ""
    source: str = "azsl"


class CompletionItemKind(str, Enum):
    TEXT = "text"
    METHOD = "method"
    FUNCTION = "function"
    FIELD = "field"
    VARIABLE = "variable"
    PROPERTY = "property"
    STRUCT = "struct"
    MODULE = "module"
    KEYWORD = "keyword"
    CONSTANT = "constant"
    TYPE = "type"
    FILE = "file"
    ENUM_MEMBER = "enum_member"


@dataclass(frozen=True)
class CompletionItem:
    label: str
    kind: CompletionItemKind
    sort_text: str = ""
    detail: Optional[str] = None


@dataclass(frozen=True)
class Hover:
    contents: str  # markdown
    range: Optional[Range] = None


@dataclass(frozen=True)
class DocumentLink:
    range: Range
    target: str


@dataclass(frozen=True)
class TextEdit:
    range: Range
    new_text: str


@dataclass(frozen=True)
class CodeAction:
    title: str
    edits: list[TextEdit] = field(default_factory=list)
    diagnostic: Optional[Diagnostic] = None


class TextDocument:
    """An open buffer as seen by the analysis core."""

    def __init__(self, uri: str, text: str, language_id: str = AZSL_LANGUAGE_ID,
                 version: int = 0):
        self.uri = uri
        self.language_id = language_id
        self.version = version
        self._text = text
        self._lines: list[str] | None = None
        self._line_offsets: list[int] | None = None

    @property
    def text(self) -> str:
        return self._text

    def update(self, text: str, version: int | None = None) -> None:
        self._text = text
        self._lines = None
        self._line_offsets = None
        self.version = self.version + 1 if version is None else version

    @property
    def is_azsl(self) -> bool:
        return self.language_id == AZSL_LANGUAGE_ID

    @property
    def lines(self) -> list[str]:
        if self._lines is None:
            self._lines = _LINE_SPLIT.split(self._text)
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, line: int) -> str:
        if 0 <= line < len(self.lines):
            return self.lines[line]
        return ""

    def _offsets(self) -> list[int]:
        if self._line_offsets is None:
            offsets = [0]
            for m in _LINE_SPLIT.finditer(self._text):
                offsets.append(m.end())
            self._line_offsets = offsets
        return self._line_offsets

    def position_at(self, offset: int) -> Position:
        offsets = self._offsets()
        offset = max(0, min(offset, len(self._text)))
        line = 0
        for i, start in enumerate(offsets):
            if start > offset:
                break
            line = i
        character = min(offset - offsets[line], len(self.lines[line]))
        return Position(line, character)

    def offset_at(self, position: Position) -> int:
        offsets = self._offsets()
        if position.line >= len(offsets):
            return len(self._text)
        line_len = len(self.lines[position.line])
        return offsets[position.line] + max(0, min(position.character, line_len))

    def word_range_at(self, position: Position) -> Range | None:
        """Range of the identifier touching ``position``, if any."""
        text = self.line_at(position.line)
        for m in _WORD_RE.finditer(text):
            if m.start() <= position.character <= m.end():
                return Range.on_line(position.line, m.start(), m.end())
        return None

    def get_text(self, rng: Range) -> str:
        return self._text[self.offset_at(rng.start):self.offset_at(rng.end)]
