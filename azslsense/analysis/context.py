"""Per-document analysis state shared by validation and point queries.

``DocumentContext`` runs the scanners over one document, builds its scope
tables and answers type and member questions by combining local results
with the workspace index. Corpus entries win over local ones when both
know a name.
"""

from __future__ import annotations
import re

from azslsense.analysis.expr_types import (
    TypeEnvironment, base_type_name, infer_expression_type,
)
from azslsense.analysis.index import INCLUDE_RE, SymbolIndex
from azslsense.analysis.scope import DocumentScopes
from azslsense.builtins.functions import INTRINSIC_NAMES
from azslsense.builtins.types import (
    BufferType, ScalarType, TextureType, VectorType, is_valid_swizzle,
    resolve_type, strip_template, type_members,
)
from azslsense.document import Location, TextDocument
from azslsense.scanner.enums import EnumDef, scan_enums
from azslsense.scanner.functions import FunctionDef, scan_functions
from azslsense.scanner.macros import MacroDef, scan_macros
from azslsense.scanner.options import OptionDef, scan_options
from azslsense.scanner.srg import SrgDef, scan_srgs
from azslsense.scanner.structs import StructDef, scan_structs
from azslsense.scanner.text import mask_lines

_SPACES = re.compile(r"\s+")


class _Environment(TypeEnvironment):
    """Binds a ``DocumentContext`` to a query position."""

    def __init__(self, ctx: DocumentContext, line: int, column: int | None):
        self.ctx = ctx
        self.line = line
        self.column = column

    def variable_type(self, name: str) -> str | None:
        return self.ctx.variable_type(name, self.line, self.column)

    def member_type(self, owner_type: str, member: str) -> str | None:
        return self.ctx.member_type(owner_type, member)

    def function_type(self, name: str) -> str | None:
        return self.ctx.function_return_type(name)


class DocumentContext:
    """Local declarations of one document plus access to the index."""

    def __init__(self, index: SymbolIndex, document: TextDocument):
        self.index = index
        self.document = document
        self.uri = document.uri
        self.lines = document.lines
        self.masked = mask_lines(self.lines)
        self.scopes = DocumentScopes(self.lines, self.masked)

        text = document.text
        self.macros: dict[str, MacroDef] = {}
        for macro in scan_macros(text):
            existing = self.macros.get(macro.name)
            if existing is None or len(macro.doc) > len(existing.doc):
                self.macros[macro.name] = macro

        structs, aliases = scan_structs(text)
        self.structs: dict[str, StructDef] = {}
        self.type_aliases: dict[str, str] = {}
        for struct in structs:
            self.structs.setdefault(struct.name, struct)
            for alias in struct.aliases:
                self.structs.setdefault(alias, struct)
        for alias in aliases:
            self.type_aliases.setdefault(alias.name, alias.target)

        srgs, semantics = scan_srgs(text)
        self.srgs: dict[str, SrgDef] = {}
        self.srg_list = srgs
        for srg in srgs:
            existing = self.srgs.get(srg.name)
            if existing is None:
                self.srgs[srg.name] = srg
            else:
                for name, member in srg.members.items():
                    existing.members.setdefault(name, member)
        self.semantics = {s.name: s for s in semantics}

        functions, self.method_impls = scan_functions(text)
        self.functions: dict[str, FunctionDef] = {}
        for fn in functions:
            self.functions.setdefault(fn.name, fn)

        self.options: dict[str, OptionDef] = {o.name: o for o in scan_options(text)}
        self.enums: list[EnumDef] = scan_enums(text)
        self.enum_types = {e.name: e for e in self.enums if e.name}
        self.includes: list[tuple[int, int, int, str]] = []
        for i, line in enumerate(self.lines):
            m = INCLUDE_RE.search(line)
            if m:
                self.includes.append((i, m.start(1), m.end(1), m.group(1)))

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def resolve_alias(self, name: str) -> str:
        seen = set()
        name = strip_template(name)
        while name not in seen:
            seen.add(name)
            if name in self.type_aliases:
                name = strip_template(self.type_aliases[name])
            elif name in self.index.type_aliases:
                name = strip_template(self.index.type_aliases[name])
            else:
                break
        return name

    def is_static_owner(self, name: str) -> bool:
        """Whether ``name`` can appear on the left of ``::``."""
        return (name in self.srgs or name in self.index.srgs
                or name in self.structs or self.index.lookup_struct(name) is not None
                or name in self.enum_types or self.index.atom_type(name) is not None)

    def declared_names(self) -> set[str]:
        """Every name this document or the index declares."""
        names: set[str] = set(self.scopes.declarations)
        for fn in self.scopes.functions:
            names.add(fn.name.split("::")[-1])
            names.update(p[1] for p in fn.params)
        names.update(self.macros)
        names.update(self.structs)
        names.update(self.type_aliases)
        names.update(self.srgs)
        names.update(self.semantics)
        names.update(self.functions)
        names.update(self.options)
        for enum in self.enums:
            if enum.name:
                names.add(enum.name)
            names.update(enum.values)
        for macro in self.macros.values():
            if macro.params:
                names.update(p.strip() for p in macro.params.strip("()").split(",") if p.strip())
        index = self.index
        names.update(index.macros)
        names.update(index.structs)
        names.update(index.type_aliases)
        names.update(index.srgs)
        names.update(index.srg_semantics)
        names.update(index.functions)
        names.update(index.options)
        names.update(index.symbols)
        return names

    def class_members_at(self, line: int) -> set[str]:
        """Members usable unqualified at ``line`` (inside a class body or ``T::M``)."""
        owners: list[str] = []
        for struct in self.structs.values():
            if struct.line <= line <= struct.end_line:
                owners.append(struct.name)
        impl_owner = self.scopes.member_owner_at(line)
        if impl_owner:
            owners.append(impl_owner)
        members: set[str] = set()
        for owner in owners:
            found = self.member_names(owner)
            if found:
                members |= found
        return members

    # ------------------------------------------------------------------
    # Types and members
    # ------------------------------------------------------------------

    def variable_type(self, name: str, line: int, column: int | None = None) -> str | None:
        found = self.scopes.variable_type(name, line, column)
        if found is not None:
            return found
        option = self.options.get(name) or self.index.lookup_option(name)
        if option is not None:
            return option.type_name
        if self.is_static_owner(name):
            # ``ViewSrg.m_x`` style access treats the owner as its own type
            return name
        return None

    def function_return_type(self, name: str) -> str | None:
        entry = self.index.lookup_function(name)
        if entry is not None:
            return entry.return_type
        local = self.functions.get(name)
        return local.return_type if local is not None else None

    def expression_type(self, text: str, line: int, column: int | None = None) -> str | None:
        return infer_expression_type(text, _Environment(self, line, column))

    def member_names(self, owner: str) -> set[str] | None:
        """Named members of ``owner``, or None when ``owner`` is unknown.

        Vector swizzles are not listed; see ``has_member``.
        """
        name = self.resolve_alias(owner)
        builtin = type_members(name)
        if builtin is not None:
            return set(builtin)
        if name in self.enum_types:
            return set(self.enum_types[name].values)

        atom = self.index.atom_type(name)
        srg_local = self.srgs.get(name)
        srg_index = self.index.srg_member_names(name)
        struct_index = self.index.struct_member_names(name)
        struct_local = self._local_struct_members(name)
        if atom is None and srg_local is None and srg_index is None \
                and struct_index is None and struct_local is None:
            return None

        members: set[str] = set()
        if atom is not None:
            members |= self.index.atom_members.get(atom, set())
        if srg_local is not None:
            members |= set(srg_local.members)
        if srg_index is not None:
            members |= srg_index
        if struct_index is not None:
            members |= struct_index
        if struct_local is not None:
            members |= struct_local
        return members

    def _local_struct_members(self, name: str, seen: set[str] | None = None) -> set[str] | None:
        struct = self.structs.get(name)
        if struct is None:
            return None
        seen = seen if seen is not None else set()
        seen.add(name)
        members = set(struct.member_names)
        for impl in self.method_impls:
            if impl.owner == struct.name:
                members.add(impl.name)
        for base in struct.bases:
            base = self.resolve_alias(base)
            if base in seen:
                continue
            inherited = self._local_struct_members(base, seen)
            if inherited is None:
                inherited = self.index.struct_member_names(base)
            if inherited:
                members |= inherited
        return members

    def has_member(self, owner_type: str, member: str) -> bool | None:
        """True/False when membership can be decided, None otherwise."""
        name = self.resolve_alias(owner_type)
        if name.endswith("[]"):
            return None
        t = resolve_type(name)
        if isinstance(t, VectorType):
            return is_valid_swizzle(name, member)
        if isinstance(t, ScalarType):
            return None
        if t is not None and not isinstance(t, (TextureType, BufferType)):
            return None
        members = self.member_names(name)
        if members is None:
            return None
        return member in members

    def member_type(self, owner: str, member: str) -> str | None:
        name = self.resolve_alias(owner)
        found = self.index.member_type(name, member)
        if found is None:
            srg = self.srgs.get(name)
            if srg is not None and member in srg.members:
                found = srg.members[member].type_name
        if found is None:
            found = self._local_member_type(name, member, set())
        if found is None:
            return None
        return _SPACES.sub("", found)

    def _local_member_type(self, name: str, member: str, seen: set[str]) -> str | None:
        struct = self.structs.get(name)
        if struct is None or name in seen:
            return None
        seen.add(name)
        decl = struct.fields.get(member) or struct.methods.get(member)
        if decl is not None:
            return decl.type_name
        for base in struct.bases:
            found = self._local_member_type(self.resolve_alias(base), member, seen)
            if found is None:
                found = self.index.member_type(self.resolve_alias(base), member)
            if found is not None:
                return found
        return None

    def member_location(self, owner: str, member: str) -> Location | None:
        name = self.resolve_alias(owner)
        found = self.index.member_location(name, member)
        if found is not None:
            return found
        srg = self.srgs.get(name)
        if srg is not None and member in srg.members:
            decl = srg.members[member]
            return Location(self.uri, decl.line, decl.column)
        struct = self.structs.get(name)
        if struct is not None:
            decl = struct.fields.get(member) or struct.methods.get(member)
            if decl is not None:
                return Location(self.uri, decl.line, decl.column)
        enum = self.enum_types.get(name)
        if enum is not None and member in enum.values:
            line, column = enum.values[member]
            return Location(self.uri, line, column)
        return None

    def owner_type_of(self, operand: str, accessor: str, line: int, column: int) -> str | None:
        """Type on the left of ``accessor`` (``.`` or ``::``)."""
        if accessor == "::":
            owner = _SPACES.sub("", operand)
            return owner if self.is_static_owner(owner) else None
        found = self.expression_type(operand, line, column)
        return base_type_name(found) if found and not found.endswith("[]") else found

    def is_known_function(self, name: str) -> bool:
        return (name in INTRINSIC_NAMES or name in self.functions
                or self.index.lookup_function(name) is not None)
