"""Tests for quick-fix code actions."""

import pytest

from azslsense.analysis.index import SymbolIndex
from azslsense.analysis.quickfix import FALLBACK_SRG_TEMPLATE, provide_code_actions
from azslsense.analysis.validator import DiagnosticCode, validate_document
from azslsense.document import Diagnostic, Position, Range, TextDocument


@pytest.fixture
def index():
    return SymbolIndex()


def _actions(index, src, language_id="azsl"):
    doc = TextDocument("file:///fix.azsl", src, language_id)
    return provide_code_actions(doc, validate_document(index, doc), index)


class TestVariantFallbackFix:
    def test_inserted_at_top(self, index):
        (action,) = _actions(index, "option bool o_x = true;\n")
        assert action.title == "Add ShaderVariantFallback SRG (SRG_PerDraw)"
        (edit,) = action.edits
        assert edit.range == Range(Position(0, 0), Position(0, 0))
        assert edit.new_text == FALLBACK_SRG_TEMPLATE
        assert action.diagnostic.code == DiagnosticCode.MISSING_VARIANT_FALLBACK.value

    def test_inserted_after_last_include(self, index):
        src = '#include "A.azsli"\n#include <B.azsli>\noption bool o_x = true;\n'
        (action,) = _actions(index, src)
        (edit,) = action.edits
        assert edit.range.start == Position(2, 0)
        assert edit.new_text == "\n" + FALLBACK_SRG_TEMPLATE

    def test_fixed_document_validates(self, index):
        src = "option bool o_x = true;\n"
        fixed = FALLBACK_SRG_TEMPLATE + src
        doc = TextDocument("file:///fix.azsl", fixed)
        assert validate_document(index, doc) == []


class TestSemanticFix:
    def test_prefix_suggestions(self, index):
        actions = _actions(index, "ShaderResourceGroup S : SRG_PerPas\n{\n};\n")
        assert [a.title for a in actions] == [
            "Change to 'SRG_PerPass'", "Change to 'SRG_PerPass_WithFallback'",
        ]
        edit = actions[0].edits[0]
        assert edit.range == Range(Position(0, 24), Position(0, 34))
        assert edit.new_text == "SRG_PerPass"

    def test_local_semantic_suggested(self, index):
        src = (
            "ShaderResourceGroupSemantic SRG_MineLong\n{\n    FrequencyId = 1;\n};\n"
            "ShaderResourceGroup S : SRG_Mine\n{\n};\n"
        )
        assert [a.title for a in _actions(index, src)] == ["Change to 'SRG_MineLong'"]

    def test_matched_by_message(self, index):
        doc = TextDocument("file:///fix.azsl", "ShaderResourceGroup S : SRG_PerVie\n")
        diag = Diagnostic(Range.on_line(0, 24, 34), "ShaderResourceGroupSemantic 'SRG_PerVie' not found")
        (action,) = provide_code_actions(doc, [diag], index)
        assert action.edits[0].new_text == "SRG_PerView"

    def test_no_candidates(self, index):
        assert _actions(index, "ShaderResourceGroup S : SRG_Nothing\n{\n};\n") == []


def test_unrelated_diagnostics(index):
    assert _actions(index, "float a = b;\n") == []


def test_non_azsl(index):
    doc = TextDocument("file:///fix.hlsl", "option bool o_x = true;\n", "hlsl")
    diag = Diagnostic(Range.on_line(0, 0, 5), "needs ShaderVariantFallback")
    assert provide_code_actions(doc, [diag], index) == []
