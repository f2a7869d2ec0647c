"""The workspace-wide symbol index.

One ``SymbolIndex`` holds everything the scanners found in the corpus:
macros with documentation, struct/class member sets, SRG members, SRG
semantics, functions, shader options, Atom engine types and a flat set of
cross-reference symbols. Open documents add their own macros and structs on
top without ever replacing corpus entries.

Member tables are keyed by ``(owner, member)`` tuples. The index is rebuilt
from scratch by ``rebuild``, so repeated rebuilds over an unchanged corpus
produce identical tables.
"""

from __future__ import annotations
import re
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from azslsense.analysis.symbols import (
    FunctionEntry, IndexStats, MacroEntry, MethodEntry, OptionEntry,
    SemanticEntry, SrgEntry, StructEntry,
)
from azslsense.analysis.walker import DEFAULT_EXTENSIONS, DEFAULT_MAX_FILES, walk_corpus
from azslsense.builtins.atom import ATOM_MEMBER_SEEDS, ATOM_TYPE_ALIASES, atom_type_for
from azslsense.builtins.semantics import BUILTIN_SRG_SEMANTICS, FALLBACK_SEMANTICS
from azslsense.builtins.types import strip_template
from azslsense.document import Location
from azslsense.logging import get_logger
from azslsense.scanner.functions import scan_functions
from azslsense.scanner.macros import MacroDef, scan_macros
from azslsense.scanner.options import scan_options
from azslsense.scanner.srg import scan_srgs
from azslsense.scanner.structs import StructDef, scan_structs
from azslsense.scanner.symbols import extract_symbols

log = get_logger(__name__)

INCLUDE_RE = re.compile(r'#\s*include\s*[<"]([^>"]+)[>"]')

# Include paths starting with this prefix are resolved against the corpus root
ROOT_INCLUDE_PREFIX = "Atom/"


class SymbolIndex:
    """Corpus-wide symbol tables."""

    def __init__(self):
        self.root: Path | None = None
        self.clear()

    def clear(self) -> None:
        self.macros: dict[str, MacroEntry] = {}
        self.structs: dict[str, StructEntry] = {}
        self.struct_members: dict[str, set[str]] = {}
        self.struct_member_locations: dict[tuple[str, str], Location] = {}
        self.struct_member_types: dict[tuple[str, str], str] = {}
        self.type_aliases: dict[str, str] = {}
        self.srgs: dict[str, SrgEntry] = {}
        self.srg_members: dict[str, set[str]] = {}
        self.srg_member_locations: dict[tuple[str, str], Location] = {}
        self.srg_member_types: dict[tuple[str, str], str] = {}
        self.srg_semantics: dict[str, SemanticEntry] = {
            name: SemanticEntry(name, None, name in FALLBACK_SEMANTICS)
            for name in BUILTIN_SRG_SEMANTICS
        }
        self.functions: dict[str, FunctionEntry] = {}
        self.options: dict[str, OptionEntry] = {}
        self.atom_members: dict[str, set[str]] = {
            atom: set(members) for atom, members in ATOM_MEMBER_SEEDS.items()
        }
        self.atom_methods: dict[tuple[str, str], MethodEntry] = {}
        self.symbols: set[str] = set()

        self.path_index: dict[str, str] = {}
        self.basename_index: dict[str, list[str]] = defaultdict(list)
        # per-file facts used by the shader-variant fallback check
        self.file_includes: dict[str, list[str]] = {}
        self.file_options: dict[str, list[str]] = {}
        self.file_srg_semantics: dict[str, list[str]] = {}
        self.document_macros: dict[str, set[str]] = {}
        self.file_count = 0

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def rebuild(
        self,
        root: str | Path | None,
        *,
        max_files: int = DEFAULT_MAX_FILES,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> IndexStats:
        """Clear every table and re-ingest the corpus under ``root``."""
        self.clear()
        self.root = Path(root) if root else None
        if self.root is None:
            log.info("index_skipped", reason="no corpus root configured")
            return self.stats()
        if not self.root.is_dir():
            log.warning("corpus_root_missing", root=str(self.root))
            return self.stats()

        for path in walk_corpus(self.root, max_files=max_files, extensions=extensions):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                log.debug("file_unreadable", path=str(path), error=str(exc))
                continue
            self.ingest_file(path, text)

        stats = self.stats()
        log.info("index_rebuilt", root=str(self.root), **vars(stats))
        return stats

    def _register_path(self, path: Path) -> None:
        uri = str(path)
        rel = path.name
        if self.root is not None:
            try:
                rel = path.relative_to(self.root).as_posix()
            except ValueError:
                pass
        self.path_index[rel] = uri
        if uri not in self.basename_index[path.name]:
            self.basename_index[path.name].append(uri)

    def ingest_file(self, path: str | Path, text: str) -> None:
        """Run every scanner over one corpus file and merge the results."""
        path = Path(path)
        uri = str(path)
        self._register_path(path)
        self.file_count += 1

        for macro in scan_macros(text):
            self._merge_macro(macro, uri, from_document=False)

        structs, aliases = scan_structs(text)
        for struct in structs:
            self._merge_struct(struct, uri, from_document=False)
        for alias in aliases:
            self.type_aliases.setdefault(alias.name, alias.target)

        srgs, semantics = scan_srgs(text)
        for srg in srgs:
            entry = self.srgs.get(srg.name)
            if entry is None:
                self.srgs[srg.name] = SrgEntry(srg.name, Location(uri, srg.line, srg.column),
                                               srg.semantic, srg.partial)
            elif entry.semantic is None and srg.semantic:
                entry.semantic = srg.semantic
            members = self.srg_members.setdefault(srg.name, set())
            members.update(srg.members)
            for member in srg.members.values():
                key = (srg.name, member.name)
                self.srg_member_locations.setdefault(key, Location(uri, member.line, member.column))
                self.srg_member_types.setdefault(key, member.type_name)
        for sem in semantics:
            existing = self.srg_semantics.get(sem.name)
            if existing is None or existing.location is None:
                self.srg_semantics[sem.name] = SemanticEntry(
                    sem.name, Location(uri, sem.line, sem.column),
                    sem.has_fallback or sem.name in FALLBACK_SEMANTICS)
            elif sem.has_fallback:
                existing.has_fallback = True

        functions, impls = scan_functions(text)
        for fn in functions:
            self.functions.setdefault(fn.name, FunctionEntry(
                fn.name, fn.return_type, fn.params, fn.signature,
                Location(uri, fn.line, fn.column)))
        for impl in impls:
            self._merge_method(impl.owner, impl.name, impl.signature,
                               Location(uri, impl.line, impl.column), has_body=True)

        options = scan_options(text)
        for opt in options:
            self.options.setdefault(opt.name, OptionEntry(
                opt.name, opt.type_name, opt.is_static, opt.default,
                Location(uri, opt.line, opt.column)))

        self.file_includes[uri] = INCLUDE_RE.findall(text)
        self.file_options[uri] = [o.name for o in options if not o.is_static]
        self.file_srg_semantics[uri] = [s.semantic for s in srgs if s.semantic]
        self.symbols |= extract_symbols(text)

    def ingest_document(self, text: str, uri: str) -> None:
        """Merge the macros and structs of an open document.

        Corpus entries are never replaced. Entries this document contributed
        earlier are refreshed, and macros it no longer defines are dropped.
        """
        names = set()
        for macro in scan_macros(text):
            names.add(macro.name)
            self._merge_macro(macro, uri, from_document=True)
        self._drop_document_macros(uri, names)
        self.document_macros[uri] = names

        structs, aliases = scan_structs(text)
        for struct in structs:
            self._merge_struct(struct, uri, from_document=True)
        for alias in aliases:
            self.type_aliases.setdefault(alias.name, alias.target)

    def forget_document(self, uri: str) -> None:
        """Drop the macros an open document contributed."""
        self._drop_document_macros(uri, set())
        self.document_macros.pop(uri, None)

    def _drop_document_macros(self, uri: str, keep: set[str]) -> None:
        for stale in self.document_macros.get(uri, set()) - keep:
            entry = self.macros.get(stale)
            if entry is not None and entry.from_document and entry.location.uri == uri:
                del self.macros[stale]

    def _merge_macro(self, macro: MacroDef, uri: str, from_document: bool) -> None:
        existing = self.macros.get(macro.name)
        if existing is not None:
            if from_document:
                if not existing.from_document:
                    return
                if existing.location.uri != uri and len(macro.doc) <= len(existing.doc):
                    return
            elif len(macro.doc) <= len(existing.doc):
                return
        self.macros[macro.name] = MacroEntry(
            name=macro.name,
            value=macro.value,
            location=Location(uri, macro.line, macro.column),
            doc=macro.doc,
            params=macro.params,
            from_document=from_document,
        )

    def _merge_struct(self, struct: StructDef, uri: str, from_document: bool) -> None:
        location = Location(uri, struct.line, struct.column)
        for name in [struct.name, *struct.aliases]:
            existing = self.structs.get(name)
            replace = existing is None or (
                from_document and existing.from_document and existing.location.uri == uri)
            if replace:
                self.structs[name] = StructEntry(name, struct.kind, location,
                                                 list(struct.bases), from_document)
            else:
                for base in struct.bases:
                    if base not in existing.bases:
                        existing.bases.append(base)
        for alias in struct.aliases:
            self.type_aliases.setdefault(alias, struct.name)

        self.struct_members.setdefault(struct.name, set()).update(struct.member_names)
        for decl in struct.fields.values():
            key = (struct.name, decl.name)
            self.struct_member_locations.setdefault(key, Location(uri, decl.line, decl.column))
            self.struct_member_types.setdefault(key, decl.type_name)
        for decl in struct.methods.values():
            key = (struct.name, decl.name)
            self.struct_member_locations.setdefault(key, Location(uri, decl.line, decl.column))
            self.struct_member_types.setdefault(key, decl.type_name)
            self._merge_method(struct.name, decl.name, decl.signature,
                               Location(uri, decl.line, decl.column), has_body=False)

        atom = atom_type_for(struct.name)
        if atom is not None:
            self.atom_members[atom].update(struct.member_names)
            for decl in struct.fields.values():
                self.struct_member_types.setdefault((atom, decl.name), decl.type_name)
                self.struct_member_locations.setdefault(
                    (atom, decl.name), Location(uri, decl.line, decl.column))

    def _merge_method(self, owner: str, name: str, signature: str,
                      location: Location, has_body: bool) -> None:
        owners = [owner]
        atom = atom_type_for(owner)
        if atom is not None and atom != owner:
            owners.append(atom)
        for key_owner in owners:
            key = (key_owner, name)
            existing = self.atom_methods.get(key)
            # an out-of-class body beats a bare declaration
            if existing is None or (has_body and not existing.has_body):
                self.atom_methods[key] = MethodEntry(key_owner, name, signature, location, has_body)
        if atom is not None:
            self.atom_members[atom].add(name)
        if owner in self.struct_members:
            self.struct_members[owner].add(name)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve_alias(self, name: str) -> str:
        """Follow typedef aliases to the underlying type name."""
        seen = set()
        name = strip_template(name)
        while name in self.type_aliases and name not in seen:
            seen.add(name)
            name = strip_template(self.type_aliases[name])
        return name

    def lookup_macro(self, name: str) -> MacroEntry | None:
        return self.macros.get(name)

    def lookup_struct(self, name: str) -> StructEntry | None:
        entry = self.structs.get(name)
        if entry is None:
            entry = self.structs.get(self.resolve_alias(name))
        return entry

    def lookup_srg(self, name: str) -> SrgEntry | None:
        return self.srgs.get(name)

    def lookup_function(self, name: str) -> FunctionEntry | None:
        return self.functions.get(name)

    def lookup_option(self, name: str) -> OptionEntry | None:
        return self.options.get(name)

    def lookup_semantic(self, name: str) -> SemanticEntry | None:
        return self.srg_semantics.get(name)

    def is_fallback_semantic(self, name: str | None) -> bool:
        if not name:
            return False
        entry = self.srg_semantics.get(name)
        return name in FALLBACK_SEMANTICS or (entry is not None and entry.has_fallback)

    def atom_type(self, name: str) -> str | None:
        name = self.resolve_alias(name)
        if name in ATOM_TYPE_ALIASES:
            return name
        return atom_type_for(name)

    def struct_member_names(self, name: str, _seen: set[str] | None = None) -> set[str] | None:
        """Members of a struct and its base classes, or None for unknown types."""
        name = self.resolve_alias(name)
        if name not in self.structs:
            return None
        seen = _seen if _seen is not None else set()
        seen.add(name)
        members = set(self.struct_members.get(name, ()))
        for base in self.structs[name].bases:
            if base in seen:
                continue
            inherited = self.struct_member_names(base, seen)
            if inherited:
                members |= inherited
        return members

    def srg_member_names(self, name: str) -> set[str] | None:
        if name not in self.srgs:
            return None
        return self.srg_members.get(name, set())

    def _struct_chain(self, name: str) -> list[str]:
        chain, todo = [], [self.resolve_alias(name)]
        while todo:
            current = todo.pop(0)
            if current in chain:
                continue
            chain.append(current)
            entry = self.structs.get(current)
            if entry is not None:
                todo.extend(self.resolve_alias(b) for b in entry.bases)
        return chain

    def member_location(self, owner: str, member: str) -> Location | None:
        """Where ``owner.member`` / ``owner::member`` is declared."""
        loc = self.srg_member_locations.get((owner, member))
        if loc is not None:
            return loc
        method = self.method(owner, member)
        if method is not None:
            return method.location
        atom = self.atom_type(owner)
        for name in self._struct_chain(owner):
            loc = self.struct_member_locations.get((name, member))
            if loc is not None:
                return loc
        if atom is not None:
            loc = self.struct_member_locations.get((atom, member))
            if loc is not None:
                return loc
        return None

    def member_type(self, owner: str, member: str) -> str | None:
        found = self.srg_member_types.get((owner, member))
        if found is not None:
            return found
        for name in self._struct_chain(owner):
            found = self.struct_member_types.get((name, member))
            if found is not None:
                return found
        atom = self.atom_type(owner)
        if atom is not None:
            return self.struct_member_types.get((atom, member))
        return None

    def method(self, owner: str, member: str) -> MethodEntry | None:
        entry = self.atom_methods.get((owner, member))
        if entry is None:
            atom = self.atom_type(owner)
            if atom is not None:
                entry = self.atom_methods.get((atom, member))
        return entry

    def resolve_include(self, include_path: str) -> str | None:
        """Map the text of an ``#include`` directive to an indexed file.

        Tried in order: corpus-root relative for engine paths, exact relative
        path, relative path suffix, then a basename that is unique in the
        corpus. Ambiguous basenames resolve to nothing.
        """
        normalized = include_path.replace("\\", "/").strip()
        if self.root is not None and normalized.startswith(ROOT_INCLUDE_PREFIX):
            for candidate in (self.root / normalized,
                              self.root / normalized[len(ROOT_INCLUDE_PREFIX):]):
                if candidate.is_file():
                    return str(candidate)

        exact = self.path_index.get(normalized)
        if exact is not None:
            return exact

        suffix = "/" + normalized
        for rel in sorted(self.path_index):
            if rel.endswith(suffix):
                return self.path_index[rel]

        base = normalized.rsplit("/", 1)[-1]
        candidates = self.basename_index.get(base, [])
        if len(candidates) == 1:
            return candidates[0]
        return None

    def stats(self) -> IndexStats:
        return IndexStats(
            files=self.file_count,
            macros=len(self.macros),
            structs=len(self.structs),
            srgs=len(self.srgs),
            functions=len(self.functions),
            options=len(self.options),
            semantics=len(self.srg_semantics),
            symbols=len(self.symbols),
        )
