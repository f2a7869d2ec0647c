"""Code actions for diagnostics that have an obvious textual repair."""

from __future__ import annotations
import re
from typing import Iterable

from azslsense.analysis.index import INCLUDE_RE, SymbolIndex
from azslsense.analysis.validator import DiagnosticCode
from azslsense.document import CodeAction, Diagnostic, Position, Range, TextDocument, TextEdit

FALLBACK_SRG_TEMPLATE = "ShaderResourceGroup VariantFallbackSrg : SRG_PerDraw\n{\n};\n"

_SEMANTIC_NOT_FOUND = re.compile(r"ShaderResourceGroupSemantic '(\w+)' not found")


def _fallback_insert_line(document: TextDocument) -> int:
    last = -1
    for i, line in enumerate(document.lines):
        if INCLUDE_RE.search(line):
            last = i
    return last + 1


def _fallback_action(document: TextDocument, diagnostic: Diagnostic) -> CodeAction:
    line = _fallback_insert_line(document)
    text = FALLBACK_SRG_TEMPLATE
    if line > 0:
        text = "\n" + text
    pos = Position(line, 0)
    return CodeAction(
        title="Add ShaderVariantFallback SRG (SRG_PerDraw)",
        edits=[TextEdit(Range(pos, pos), text)],
        diagnostic=diagnostic,
    )


def _semantic_actions(index: SymbolIndex | None, diagnostic: Diagnostic,
                      local_semantics: Iterable[str]) -> list[CodeAction]:
    m = _SEMANTIC_NOT_FOUND.search(diagnostic.message)
    if m is None:
        return []
    used = m.group(1)
    known = set(local_semantics)
    if index is not None:
        known.update(index.srg_semantics)
    return [
        CodeAction(
            title=f"Change to '{name}'",
            edits=[TextEdit(diagnostic.range, name)],
            diagnostic=diagnostic,
        )
        for name in sorted(known)
        if name != used and name.startswith(used)
    ]


def provide_code_actions(
    document: TextDocument,
    diagnostics: Iterable[Diagnostic],
    index: SymbolIndex | None = None,
) -> list[CodeAction]:
    """Quick fixes for the given diagnostics of ``document``."""
    if not document.is_azsl:
        return []
    actions: list[CodeAction] = []
    local_semantics: list[str] | None = None
    for diagnostic in diagnostics:
        if diagnostic.code == DiagnosticCode.MISSING_VARIANT_FALLBACK.value \
                or "ShaderVariantFallback" in diagnostic.message:
            actions.append(_fallback_action(document, diagnostic))
        elif diagnostic.code == DiagnosticCode.UNKNOWN_SRG_SEMANTIC.value \
                or _SEMANTIC_NOT_FOUND.search(diagnostic.message):
            if local_semantics is None:
                local_semantics = re.findall(r"\bShaderResourceGroupSemantic\s+(\w+)",
                                             document.text)
            actions.extend(_semantic_actions(index, diagnostic, local_semantics))
    return actions
