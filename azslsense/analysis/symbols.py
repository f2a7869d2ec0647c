"""Records stored in the symbol index."""

from __future__ import annotations
from dataclasses import dataclass, field

from azslsense.document import Location


@dataclass
class MacroEntry:
    name: str
    value: str
    location: Location
    doc: str = ""
    params: str | None = None
    from_document: bool = False

    @property
    def signature(self) -> str:
        head = f"#define {self.name}{self.params or ''}"
        return f"{head} {self.value}" if self.value else head


@dataclass
class StructEntry:
    name: str
    kind: str
    location: Location
    bases: list[str] = field(default_factory=list)
    from_document: bool = False


@dataclass
class SrgEntry:
    name: str
    location: Location
    semantic: str | None = None
    partial: bool = False


@dataclass
class SemanticEntry:
    name: str
    location: Location | None = None  # None for built-in seeds
    has_fallback: bool = False


@dataclass
class FunctionEntry:
    name: str
    return_type: str
    params: str
    signature: str
    location: Location


@dataclass
class OptionEntry:
    name: str
    type_name: str
    is_static: bool
    default: str | None
    location: Location


@dataclass
class MethodEntry:
    owner: str
    name: str
    signature: str
    location: Location
    has_body: bool = False


@dataclass(frozen=True)
class IndexStats:
    files: int
    macros: int
    structs: int
    srgs: int
    functions: int
    options: int
    semantics: int
    symbols: int
