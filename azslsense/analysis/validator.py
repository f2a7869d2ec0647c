"""Document validation.

All checks are heuristic and line oriented. When a check cannot tell for
sure (unknown owner type, unparsable expression) it stays silent rather
than reporting a possibly wrong error.
"""

from __future__ import annotations
import re
from enum import Enum

from azslsense.analysis.context import DocumentContext
from azslsense.analysis.expr_types import operand_before
from azslsense.analysis.index import SymbolIndex
from azslsense.builtins.atom import ATOM_TYPE_NAMES
from azslsense.builtins.functions import INTRINSIC_NAMES
from azslsense.builtins.keywords import DECLARATION_KEYWORDS, KEYWORDS, KNOWN_ATTRIBUTES
from azslsense.builtins.semantics import SEMANTIC_NAMES
from azslsense.builtins.types import (
    BUFFER_TYPES, SAMPLER_TYPES, SCALAR_NAMES, TEXTURE_TYPES, resolve_type,
)
from azslsense.document import Diagnostic, Range, Severity, TextDocument
from azslsense.logging import get_logger

log = get_logger(__name__)


class DiagnosticCode(str, Enum):
    UNDECLARED_IDENTIFIER = "undeclared-identifier"
    UNKNOWN_MEMBER = "unknown-member"
    INCOMPLETE_MEMBER_ACCESS = "incomplete-member-access"
    SYNTAX_ERROR = "syntax-error"
    MISSING_VARIANT_FALLBACK = "missing-variant-fallback"
    UNKNOWN_SRG_SEMANTIC = "unknown-srg-semantic"


BUILTIN_NAMES = frozenset(
    KEYWORDS | INTRINSIC_NAMES | SEMANTIC_NAMES | ATOM_TYPE_NAMES
    | set(KNOWN_ATTRIBUTES) | set(SCALAR_NAMES) | set(TEXTURE_TYPES)
    | set(SAMPLER_TYPES) | set(BUFFER_TYPES) | {"matrix", "vector", "NULL"}
)

VARIANT_FALLBACK_MESSAGE = (
    "shader options require a ShaderVariantFallback: declare a ShaderResourceGroup "
    "with a fallback-capable semantic such as SRG_PerDraw"
)

# how many include hops the fallback check follows
MAX_INCLUDE_FILES = 256

_IDENT_RE = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]*\b")
_ACCESSOR_BEFORE = re.compile(r"(\.|::)\s*$")
_USAGE_AFTER = re.compile(r"^\s*(?:[;,()\[\]]|[-+*/%<>!&|=^])")
_SEMANTIC_POSITION = re.compile(r"(?<!:):\s*$")
_DECL_KEYWORD_BEFORE = re.compile(
    rf"\b(?:{'|'.join(sorted(DECLARATION_KEYWORDS))})\s+$"
)
_TYPE_WORD_BEFORE = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)(?:\s*<[^<>]*>)?\s+$")
_OPEN_TEMPLATE = re.compile(r"<[^<>]*$")

_DOT_SEMICOLON = re.compile(r"\b([A-Za-z_]\w*)(\.)\s*;")
_DOUBLE_DOT = re.compile(r"\b([A-Za-z_]\w*)(\.\.)")
_SCOPE_SEMICOLON = re.compile(r"\b([A-Za-z_]\w*)(::)\s*;")

_TRAILING_ACCESS = re.compile(r"\b[A-Za-z_]\w*\s*(\.|::)$")
_DECLARATION_START = re.compile(
    r"^(?:float|int|uint|bool|half|double|void|matrix|Texture|Sampler|struct|class|"
    r"namespace|ShaderResourceGroup|cbuffer|tbuffer|#|//|/\*)"
)
_PASCAL_DECLARATION = re.compile(r"^[A-Z]\w*\s+[A-Za-z_]")


def _diag(line: int, start: int, end: int, message: str, code: DiagnosticCode) -> Diagnostic:
    return Diagnostic(Range.on_line(line, start, end), message, Severity.ERROR, code.value)


class DocumentValidator:
    """Runs every check over one document."""

    def __init__(self, index: SymbolIndex, document: TextDocument):
        self.index = index
        self.document = document
        self.ctx = DocumentContext(index, document)

    def validate(self) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        declared = self.ctx.declared_names() | BUILTIN_NAMES
        in_directive = False
        for i, masked in enumerate(self.ctx.masked):
            stripped = masked.strip()
            continued = in_directive
            in_directive = (stripped.startswith("#") or continued) and stripped.endswith("\\")
            if not stripped or stripped.startswith("#") or continued:
                continue
            diagnostics.extend(self._check_syntax(i, masked))
            diagnostics.extend(self._check_identifiers(i, masked, declared))
        diagnostics.extend(self._check_incomplete_access())
        diagnostics.extend(self._check_srg_semantics())
        diagnostics.extend(self._check_variant_fallback())
        log.debug("document_validated", uri=self.document.uri, diagnostics=len(diagnostics))
        return diagnostics

    # ------------------------------------------------------------------
    # Identifiers and members
    # ------------------------------------------------------------------

    def _check_identifiers(self, line: int, masked: str, declared: set[str]) -> list[Diagnostic]:
        found: list[Diagnostic] = []
        class_members: set[str] | None = None
        for m in _IDENT_RE.finditer(masked):
            ident, pos = m.group(), m.start()
            before, after = masked[:pos], masked[m.end():]

            accessor = _ACCESSOR_BEFORE.search(before)
            if accessor:
                if before.rstrip().endswith(".."):
                    continue
                diag = self._check_member(line, masked, ident, pos, accessor)
                if diag is not None:
                    found.append(diag)
                continue

            if ident in declared or resolve_type(ident) is not None:
                continue
            if not (ident[0].islower() or ident[0] == "_"):
                continue
            if _SEMANTIC_POSITION.search(before) or _DECL_KEYWORD_BEFORE.search(before):
                continue
            word = _TYPE_WORD_BEFORE.search(before)
            if word and (word.group(1)[0].isupper() or resolve_type(word.group(1)) is not None
                         or word.group(1) in declared and word.group(1) not in KEYWORDS):
                # ``Type name`` declares ``name``
                continue
            if _OPEN_TEMPLATE.search(before):
                continue
            if "?" in before or ":" in after[:5]:
                continue
            if before.rstrip().endswith("[") and before.lstrip().startswith("["):
                continue
            if not _USAGE_AFTER.match(after):
                continue
            if class_members is None:
                class_members = self.ctx.class_members_at(line)
            if ident in class_members:
                continue
            found.append(_diag(line, pos, m.end(), f"use of undeclared identifier '{ident}'",
                               DiagnosticCode.UNDECLARED_IDENTIFIER))
        return found

    def _check_member(self, line: int, masked: str, member: str, pos: int,
                      accessor: re.Match) -> Diagnostic | None:
        acc_start = accessor.start(1)
        operand = operand_before(masked, acc_start)
        if operand is None:
            return None
        owner = self.ctx.owner_type_of(operand[0], accessor.group(1), line, acc_start)
        if owner is None:
            return None
        if self.ctx.has_member(owner, member) is False:
            return _diag(line, pos, pos + len(member), f"no member named '{member}' in '{owner}'",
                         DiagnosticCode.UNKNOWN_MEMBER)
        return None

    # ------------------------------------------------------------------
    # Syntax and incomplete access
    # ------------------------------------------------------------------

    def _check_syntax(self, line: int, masked: str) -> list[Diagnostic]:
        found = []
        for pattern, message in (
            (_DOT_SEMICOLON, "expected member name after '.'"),
            (_DOUBLE_DOT, "unexpected '..' in member access"),
            (_SCOPE_SEMICOLON, "expected member name after '::'"),
        ):
            for m in pattern.finditer(masked):
                found.append(_diag(line, m.start(2), m.end(2), f"syntax error: {message}",
                                   DiagnosticCode.SYNTAX_ERROR))
        return found

    def _check_incomplete_access(self) -> list[Diagnostic]:
        found = []
        lines = self.ctx.lines
        for i, masked in enumerate(self.ctx.masked):
            text = masked.rstrip()
            m = _TRAILING_ACCESS.search(text)
            if m is None:
                continue
            if i + 1 < len(lines):
                following = lines[i + 1].strip()
                if not (_DECLARATION_START.match(following) or _PASCAL_DECLARATION.match(following)):
                    continue
            start = m.start(1)
            found.append(_diag(i, start, start + len(m.group(1)), "incomplete member access",
                               DiagnosticCode.INCOMPLETE_MEMBER_ACCESS))
        return found

    # ------------------------------------------------------------------
    # SRG semantics and the variant fallback
    # ------------------------------------------------------------------

    def _semantic_known(self, name: str) -> bool:
        return name in self.ctx.semantics or self.index.lookup_semantic(name) is not None

    def _check_srg_semantics(self) -> list[Diagnostic]:
        found = []
        for srg in self.ctx.srg_list:
            if not srg.semantic or self._semantic_known(srg.semantic):
                continue
            line = self.ctx.lines[srg.line]
            start = line.find(srg.semantic, srg.column + len(srg.name))
            if start < 0:
                start = srg.column
            found.append(_diag(srg.line, start, start + len(srg.semantic),
                               f"ShaderResourceGroupSemantic '{srg.semantic}' not found",
                               DiagnosticCode.UNKNOWN_SRG_SEMANTIC))
        return found

    def reachable_files(self) -> list[str]:
        """Indexed files reachable through this document's includes."""
        order: list[str] = []
        seen: set[str] = set()
        todo = [inc[3] for inc in self.ctx.includes]
        while todo and len(order) < MAX_INCLUDE_FILES:
            target = self.index.resolve_include(todo.pop(0))
            if target is None or target in seen:
                continue
            seen.add(target)
            order.append(target)
            todo.extend(self.index.file_includes.get(target, ()))
        return order

    def _is_fallback(self, semantic: str | None) -> bool:
        if not semantic:
            return False
        local = self.ctx.semantics.get(semantic)
        return self.index.is_fallback_semantic(semantic) or (local is not None and local.has_fallback)

    def _check_variant_fallback(self) -> list[Diagnostic]:
        """Options without a fallback-capable SRG raise one document-level error.

        Both sides are looked up in this document and the files it reaches
        through includes, not across the whole indexed corpus: an option
        declared in an unrelated corpus file never triggers the error, and a
        fallback SRG elsewhere in the corpus never clears it.
        """
        has_option = any(not o.is_static for o in self.ctx.options.values())
        reachable = self.reachable_files()
        if not has_option:
            has_option = any(self.index.file_options.get(uri) for uri in reachable)
        if not has_option:
            return []
        if any(self._is_fallback(srg.semantic) for srg in self.ctx.srg_list):
            return []
        for uri in reachable:
            if any(self._is_fallback(s) for s in self.index.file_srg_semantics.get(uri, ())):
                return []
        first = self.ctx.lines[0] if self.ctx.lines else ""
        return [_diag(0, 0, len(first), VARIANT_FALLBACK_MESSAGE,
                      DiagnosticCode.MISSING_VARIANT_FALLBACK)]


def validate_document(index: SymbolIndex, document: TextDocument) -> list[Diagnostic]:
    if not document.is_azsl:
        return []
    return DocumentValidator(index, document).validate()
