"""Point queries: definition, hover, completion and include links.

A query first classifies the text in front of the cursor (include path,
attribute, member access or bare identifier) and then asks a chain of
independent resolvers in a fixed order. The first one that answers wins.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from azslsense.analysis.context import DocumentContext
from azslsense.analysis.expr_types import operand_before
from azslsense.analysis.index import INCLUDE_RE, SymbolIndex
from azslsense.builtins.docs import BUILTIN_DOCS, SEMANTIC_DOCS, builtin_uri
from azslsense.builtins.functions import INTRINSIC_NAMES
from azslsense.builtins.keywords import KEYWORDS, KNOWN_ATTRIBUTES
from azslsense.builtins.semantics import SRG_SEMANTIC_PREFIX
from azslsense.builtins.types import (
    TEXTURE_METHODS, TextureType, VectorType, resolve_type,
)
from azslsense.document import (
    CompletionItem, CompletionItemKind, DocumentLink, Hover, Location,
    Position, Range, TextDocument,
)
from azslsense.logging import get_logger

log = get_logger(__name__)

_ACCESSOR_BEFORE = re.compile(r"(\.|::)\s*$")
_PARTIAL_MEMBER = re.compile(r"(\.|::)\s*([A-Za-z_]\w*)?$")
_OPEN_ATTRIBUTE = re.compile(r"^\s*\[\[?[^\]]*$")


class QueryKind(str, Enum):
    INCLUDE = "include"
    ATTRIBUTE = "attribute"
    MEMBER = "member"
    IDENTIFIER = "identifier"


@dataclass(frozen=True)
class CursorContext:
    kind: QueryKind
    word: str
    range: Range | None
    operand: str | None = None
    accessor: str | None = None
    accessor_column: int = 0
    include_path: str | None = None


def _code_block(text: str, language: str = "hlsl") -> str:
    return f"```{language}\n{text}\n```"


class Resolver:
    """Answers point queries for one document against the index."""

    def __init__(self, index: SymbolIndex, document: TextDocument):
        self.index = index
        self.document = document
        self.ctx = DocumentContext(index, document)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, position: Position) -> CursorContext | None:
        line = self.document.line_at(position.line)
        m = INCLUDE_RE.search(line)
        if m and m.start(1) <= position.character <= m.end(1):
            rng = Range.on_line(position.line, m.start(1), m.end(1))
            return CursorContext(QueryKind.INCLUDE, m.group(1), rng, include_path=m.group(1))

        rng = self.document.word_range_at(position)
        if rng is None:
            return None
        word = self.document.get_text(rng)
        before = line[:rng.start.character]
        accessor = _ACCESSOR_BEFORE.search(before)
        if accessor:
            masked = self.ctx.masked[position.line] if position.line < len(self.ctx.masked) else line
            operand = operand_before(masked, accessor.start(1))
            if operand is not None:
                return CursorContext(QueryKind.MEMBER, word, rng, operand=operand[0],
                                     accessor=accessor.group(1),
                                     accessor_column=accessor.start(1))
        if _OPEN_ATTRIBUTE.search(before):
            return CursorContext(QueryKind.ATTRIBUTE, word, rng)
        return CursorContext(QueryKind.IDENTIFIER, word, rng)

    def _owner(self, query: CursorContext) -> str | None:
        if query.operand is None or query.range is None:
            return None
        return self.ctx.owner_type_of(query.operand, query.accessor or ".",
                                      query.range.start.line, query.accessor_column)

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def definition(self, position: Position) -> Location | None:
        query = self.classify(position)
        if query is None:
            return None
        if query.kind is QueryKind.INCLUDE:
            return self._define_include(query)
        if query.kind is QueryKind.MEMBER:
            found = self._define_member(query)
            if found is not None:
                return found
        for resolve in (self._define_macro, self._define_struct, self._define_srg,
                        self._define_function, self._define_semantic, self._define_option,
                        self._define_builtin, self._define_local):
            found = resolve(query.word, position)
            if found is not None:
                return found
        return None

    def _define_include(self, query: CursorContext) -> Location | None:
        target = self.index.resolve_include(query.include_path or "")
        return Location(target, 0, 0) if target else None

    def _define_member(self, query: CursorContext) -> Location | None:
        owner = self._owner(query)
        if owner is None:
            return None
        found = self.ctx.member_location(owner, query.word)
        if found is None and isinstance(resolve_type(owner), TextureType) \
                and query.word in BUILTIN_DOCS:
            found = Location(builtin_uri(query.word), 0, 0)
        return found

    def _define_macro(self, word: str, position: Position) -> Location | None:
        entry = self.index.lookup_macro(word)
        if entry is not None:
            return Location(entry.location.uri, entry.location.line, 0)
        local = self.ctx.macros.get(word)
        return Location(self.document.uri, local.line, 0) if local else None

    def _define_struct(self, word: str, position: Position) -> Location | None:
        entry = self.index.lookup_struct(word)
        if entry is not None:
            return entry.location
        local = self.ctx.structs.get(word)
        return Location(self.document.uri, local.line, local.column) if local else None

    def _define_srg(self, word: str, position: Position) -> Location | None:
        entry = self.index.lookup_srg(word)
        if entry is not None:
            return entry.location
        local = self.ctx.srgs.get(word)
        return Location(self.document.uri, local.line, local.column) if local else None

    def _define_function(self, word: str, position: Position) -> Location | None:
        entry = self.index.lookup_function(word)
        if entry is not None:
            return entry.location
        local = self.ctx.functions.get(word)
        return Location(self.document.uri, local.line, local.column) if local else None

    def _define_semantic(self, word: str, position: Position) -> Location | None:
        if not word.startswith(SRG_SEMANTIC_PREFIX):
            return None
        entry = self.index.lookup_semantic(word)
        if entry is not None and entry.location is not None:
            return Location(entry.location.uri, entry.location.line, 0)
        local = self.ctx.semantics.get(word)
        return Location(self.document.uri, local.line, 0) if local else None

    def _define_option(self, word: str, position: Position) -> Location | None:
        entry = self.index.lookup_option(word)
        if entry is not None:
            return entry.location
        local = self.ctx.options.get(word)
        return Location(self.document.uri, local.line, local.column) if local else None

    def _define_builtin(self, word: str, position: Position) -> Location | None:
        # built-in types, sampler properties and values open a documentation page
        if word[:1].isupper() and word in BUILTIN_DOCS:
            return Location(builtin_uri(word), 0, 0)
        return None

    def _define_local(self, word: str, position: Position) -> Location | None:
        decl = self.ctx.scopes.declaration_of(word, position.line, position.character)
        if decl is not None:
            return Location(self.document.uri, decl.line, decl.column)
        return None

    # ------------------------------------------------------------------
    # Hover
    # ------------------------------------------------------------------

    def hover(self, position: Position) -> Hover | None:
        query = self.classify(position)
        if query is None or query.kind is QueryKind.INCLUDE:
            return None
        if query.kind is QueryKind.MEMBER:
            contents = self._hover_member(query)
            if contents is not None:
                return Hover(contents, query.range)
        for describe in (self._hover_macro, self._hover_builtin, self._hover_function,
                         self._hover_struct, self._hover_srg, self._hover_option):
            contents = describe(query.word)
            if contents is not None:
                return Hover(contents, query.range)
        contents = self._hover_local(query.word, position)
        return Hover(contents, query.range) if contents is not None else None

    def _method_source_line(self, location: Location) -> str | None:
        if location.uri == self.document.uri:
            lines = self.document.lines
        else:
            try:
                lines = Path(location.uri).read_text(encoding="utf-8", errors="replace").splitlines()
            except OSError as exc:
                log.debug("method_source_unreadable", path=location.uri, error=str(exc))
                return None
        if location.line >= len(lines):
            return None
        text = lines[location.line].strip()
        if text.endswith("{"):
            text = text[:-1].strip()
        return text

    def _hover_member(self, query: CursorContext) -> str | None:
        owner = self._owner(query)
        if owner is None:
            return None
        word = query.word
        t = resolve_type(owner)
        if isinstance(t, TextureType):
            doc = BUILTIN_DOCS.get(word)
            if doc is None or word not in TEXTURE_METHODS:
                return None
            return f"{doc}\n\n**Method of** `{owner}`"

        atom = self.index.atom_type(owner)
        if atom is not None and word in self.index.atom_members.get(atom, ()):
            method = self.index.method(atom, word)
            if method is None:
                return f"{_code_block(f'{atom}.{word}')}\n**Property of** `{atom}`"
            source = self._method_source_line(method.location)
            if source is None:
                return f"{_code_block(f'{atom}.{word}(...)')}\n**Method of** `{atom}`"
            return (f"{_code_block(source)}\n**Member of** `{atom}`\n\n"
                    f"Defined in: `{Path(method.location.uri).name}`")

        if self.ctx.has_member(owner, word) is not True:
            return None
        type_name = self.ctx.member_type(owner, word)
        sep = query.accessor or "."
        head = f"{type_name} {owner}{sep}{word}" if type_name else f"{owner}{sep}{word}"
        return f"{_code_block(head)}\n**Member of** `{owner}`"

    def _hover_macro(self, word: str) -> str | None:
        entry = self.index.lookup_macro(word)
        if entry is not None:
            signature, doc = entry.signature, entry.doc
        else:
            local = self.ctx.macros.get(word)
            if local is None:
                return None
            signature, doc = local.signature, local.doc
        text = _code_block(signature, "c")
        return f"{text}\n{doc}" if doc else text

    def _hover_builtin(self, word: str) -> str | None:
        return BUILTIN_DOCS.get(word) or SEMANTIC_DOCS.get(word)

    def _hover_function(self, word: str) -> str | None:
        entry = self.index.lookup_function(word) or self.ctx.functions.get(word)
        return _code_block(entry.signature) if entry is not None else None

    def _hover_struct(self, word: str) -> str | None:
        entry = self.index.lookup_struct(word)
        if entry is not None:
            return (f"{_code_block(f'{entry.kind} {entry.name}')}\n"
                    f"Defined in: `{Path(entry.location.uri).name}`")
        local = self.ctx.structs.get(word)
        return _code_block(f"{local.kind} {local.name}") if local else None

    def _hover_srg(self, word: str) -> str | None:
        entry = self.index.lookup_srg(word) or self.ctx.srgs.get(word)
        if entry is None:
            return None
        head = f"ShaderResourceGroup {entry.name}"
        if entry.semantic:
            head += f" : {entry.semantic}"
        return _code_block(head)

    def _hover_option(self, word: str) -> str | None:
        entry = self.index.lookup_option(word) or self.ctx.options.get(word)
        if entry is None:
            return None
        head = f"option {'static ' if entry.is_static else ''}{entry.type_name} {entry.name}"
        if entry.default is not None:
            head += f" = {entry.default}"
        return _code_block(head)

    def _hover_local(self, word: str, position: Position) -> str | None:
        type_name = self.ctx.scopes.variable_type(word, position.line, position.character)
        return _code_block(f"{type_name} {word}") if type_name else None

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def completions(self, position: Position) -> list[CompletionItem]:
        line = self.document.line_at(position.line)
        before = line[:position.character]
        m = _PARTIAL_MEMBER.search(before)
        if m:
            masked = self.ctx.masked[position.line] if position.line < len(self.ctx.masked) else line
            operand = operand_before(masked, m.start(1))
            if operand is not None:
                owner = self.ctx.owner_type_of(operand[0], m.group(1), position.line, m.start(1))
                if owner is not None:
                    items = self._member_completions(owner, m.group(2) or "")
                    if items:
                        return items

        rng = self.document.word_range_at(position)
        current = self.document.get_text(rng) if rng is not None else ""
        if _OPEN_ATTRIBUTE.search(before[:rng.start.character] if rng else before):
            return [CompletionItem(a, CompletionItemKind.KEYWORD, f"0_{a}")
                    for a in KNOWN_ATTRIBUTES if a.startswith(current)]
        return self._general_completions(current)

    def _member_completions(self, owner: str, typed: str) -> list[CompletionItem]:
        def wanted(name: str) -> bool:
            return not typed or name.lower().startswith(typed.lower())

        t = resolve_type(owner)
        if isinstance(t, TextureType):
            return [CompletionItem(name, CompletionItemKind.METHOD, f"00_{name}", owner)
                    for name in TEXTURE_METHODS if wanted(name)]
        if isinstance(t, VectorType):
            components = "xyzw"[:t.size]
            return [CompletionItem(c, CompletionItemKind.FIELD, f"00_{c}", t.component)
                    for c in components if wanted(c)]

        atom = self.index.atom_type(owner)
        if atom is not None:
            members = self.index.atom_members.get(atom, set())
        else:
            members = self.ctx.member_names(owner) or set()
            atom = owner
        items = []
        for name in sorted(members):
            if not wanted(name):
                continue
            kind = (CompletionItemKind.METHOD if self.index.method(atom, name) is not None
                    else CompletionItemKind.PROPERTY)
            items.append(CompletionItem(name, kind, f"00_{name}", atom))
        return items

    def _general_completions(self, current: str) -> list[CompletionItem]:
        seen: dict[str, CompletionItemKind] = {}

        def add(names, kind: CompletionItemKind) -> None:
            for name in names:
                seen.setdefault(name, kind)

        add(self.ctx.scopes.declarations, CompletionItemKind.VARIABLE)
        add(self.ctx.macros, CompletionItemKind.CONSTANT)
        add(self.index.macros, CompletionItemKind.CONSTANT)
        add(self.ctx.structs, CompletionItemKind.STRUCT)
        add(self.index.structs, CompletionItemKind.STRUCT)
        add(self.ctx.srgs, CompletionItemKind.MODULE)
        add(self.index.srgs, CompletionItemKind.MODULE)
        add(self.ctx.functions, CompletionItemKind.FUNCTION)
        add(self.index.functions, CompletionItemKind.FUNCTION)
        add(INTRINSIC_NAMES, CompletionItemKind.FUNCTION)
        add(self.index.options, CompletionItemKind.VARIABLE)
        add(KEYWORDS, CompletionItemKind.KEYWORD)
        add(self.index.symbols, CompletionItemKind.TEXT)

        items = []
        for label in sorted(seen):
            rank = "0" if current and label.startswith(current) else "1"
            items.append(CompletionItem(label, seen[label], f"{rank}_{label}"))
        return items

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def document_links(self) -> list[DocumentLink]:
        links = []
        for line, start, end, path in self.ctx.includes:
            target = self.index.resolve_include(path)
            if target is not None:
                links.append(DocumentLink(Range.on_line(line, start, end), target))
        return links


def resolve_definition(index: SymbolIndex, document: TextDocument,
                       position: Position) -> Location | None:
    if not document.is_azsl:
        return None
    return Resolver(index, document).definition(position)


def provide_hover(index: SymbolIndex, document: TextDocument, position: Position) -> Hover | None:
    if not document.is_azsl:
        return None
    return Resolver(index, document).hover(position)


def provide_completions(index: SymbolIndex, document: TextDocument,
                        position: Position) -> list[CompletionItem]:
    if not document.is_azsl:
        return []
    return Resolver(index, document).completions(position)


def provide_document_links(index: SymbolIndex, document: TextDocument) -> list[DocumentLink]:
    if not document.is_azsl:
        return []
    return Resolver(index, document).document_links()
