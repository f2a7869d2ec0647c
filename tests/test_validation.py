"""Tests for document validation."""

import pytest

from azslsense.analysis.index import SymbolIndex
from azslsense.analysis.validator import (
    VARIANT_FALLBACK_MESSAGE, DiagnosticCode, DocumentValidator, validate_document,
)
from azslsense.document import Position, Severity, TextDocument


def _validate(index, src, language_id="azsl"):
    return validate_document(index, TextDocument("file:///test.azsl", src, language_id))


def _messages(diagnostics):
    return [d.message for d in diagnostics]


@pytest.fixture
def empty_index():
    return SymbolIndex()


class TestSrgMemberAccess:
    def test_known_member_is_clean(self, corpus_index):
        src = "float4 p = mul(ViewSrg::m_viewProjectionMatrix, float4(0,0,0,1));\n"
        assert _validate(corpus_index, src) == []

    def test_unknown_member(self, corpus_index):
        src = "float4 p = mul(ViewSrg::m_viewProjectionMatrixX, float4(0,0,0,1));\n"
        (diag,) = _validate(corpus_index, src)
        assert diag.message == "no member named 'm_viewProjectionMatrixX' in 'ViewSrg'"
        assert diag.code == DiagnosticCode.UNKNOWN_MEMBER.value
        assert diag.severity is Severity.ERROR
        assert diag.range.start == Position(0, 24)


class TestVariantFallback:
    def test_option_without_fallback(self, empty_index):
        src = "option bool o_useFeature = true;\n"
        (diag,) = _validate(empty_index, src)
        assert diag.message == VARIANT_FALLBACK_MESSAGE
        assert "ShaderVariantFallback" in diag.message
        assert diag.range.start == Position(0, 0)
        assert diag.range.end == Position(0, len("option bool o_useFeature = true;"))

    def test_fallback_srg_clears_it(self, empty_index):
        src = "option bool o_useFeature = true;\nShaderResourceGroup X : SRG_PerDraw {}\n"
        assert _validate(empty_index, src) == []

    def test_static_option_needs_no_fallback(self, empty_index):
        assert _validate(empty_index, "option static bool o_x = true;\n") == []

    def test_local_fallback_semantic(self, empty_index):
        src = (
            "ShaderResourceGroupSemantic SRG_Mine\n{\n    FrequencyId = 1;\n"
            "    ShaderVariantFallback = 64;\n};\n"
            "ShaderResourceGroup S : SRG_Mine\n{\n};\n"
            "option bool o_x = true;\n"
        )
        assert _validate(empty_index, src) == []

    def test_option_reached_through_include(self, corpus_index):
        diagnostics = _validate(corpus_index, "#include <Common/Lights.azsli>\n")
        assert _messages(diagnostics) == [VARIANT_FALLBACK_MESSAGE]

    def test_unrelated_corpus_option_ignored(self, corpus_index):
        assert _validate(corpus_index, "float a = 1;\n") == []

    def test_fallback_srg_from_corpus_semantic(self, corpus_index):
        src = "#include <Common/Lights.azsli>\nShaderResourceGroup Mat : SRG_PerMaterialFallback\n{\n};\n"
        assert _validate(corpus_index, src) == []

    def test_reachable_files(self, corpus_index):
        doc = TextDocument("file:///test.azsl", "#include <Common/Lights.azsli>\n")
        reachable = DocumentValidator(corpus_index, doc).reachable_files()
        assert [p.rsplit("/", 1)[-1] for p in reachable] == ["Lights.azsli", "ViewSrg.azsli"]


class TestIncompleteAccess:
    def test_followed_by_declaration(self, empty_index):
        diagnostics = _validate(empty_index, "foo.\nfloat x;\n")
        (diag,) = [d for d in diagnostics if d.code == DiagnosticCode.INCOMPLETE_MEMBER_ACCESS.value]
        assert diag.message == "incomplete member access"
        assert diag.range.start == Position(0, 3)
        assert diag.range.end == Position(0, 4)

    def test_followed_by_continuation(self, empty_index):
        diagnostics = _validate(empty_index, "foo.\nbar();\n")
        assert "incomplete member access" not in _messages(diagnostics)

    def test_scope_operator(self, empty_index):
        diagnostics = _validate(empty_index, "ViewSrg::\nstruct A {};\n")
        assert "incomplete member access" in _messages(diagnostics)

    def test_last_line(self, empty_index):
        assert "incomplete member access" in _messages(_validate(empty_index, "foo."))


class TestSyntaxErrors:
    def test_dot_before_semicolon(self, empty_index):
        (diag,) = _validate(empty_index, "float x = foo.;\n")
        assert diag.message == "syntax error: expected member name after '.'"
        assert diag.range.start == Position(0, 13)

    def test_double_dot(self, empty_index):
        src = "float a = 1;\nfloat y = a..b;\n"
        assert "syntax error: unexpected '..' in member access" in _messages(
            _validate(empty_index, src))

    def test_scope_before_semicolon(self, empty_index):
        messages = _messages(_validate(empty_index, "Foo::;\n"))
        assert "syntax error: expected member name after '::'" in messages


class TestIdentifiers:
    def test_undeclared(self, empty_index):
        (diag,) = _validate(empty_index, "float a = b + 1;\n")
        assert diag.message == "use of undeclared identifier 'b'"
        assert (diag.range.start, diag.range.end) == (Position(0, 10), Position(0, 11))

    def test_declared_local(self, empty_index):
        assert _validate(empty_index, "float a = 1;\nfloat c = a * 2;\n") == []

    def test_corpus_names(self, corpus_index):
        src = "float s = Attenuate(1.0, 2.0) * SHADOW_CASCADES;\n"
        assert _validate(corpus_index, src) == []

    def test_function_parameters(self, empty_index):
        src = "float f(float k)\n{\n    return k * 2;\n}\n"
        assert _validate(empty_index, src) == []

    def test_comments_and_directives_ignored(self, empty_index):
        src = "// nope = 1;\n#if defined(nope)\n#endif\n"
        assert _validate(empty_index, src) == []

    def test_class_members_in_method_body(self, empty_index):
        src = (
            "class Foo\n{\n    float m_value;\n    float Get();\n};\n"
            "float Foo::Get()\n{\n    return m_value + 1;\n}\n"
        )
        assert _validate(empty_index, src) == []


class TestMembers:
    def test_struct_member(self, corpus_index):
        src = "Light l;\nfloat3 c = l.m_colour;\n"
        assert _messages(_validate(corpus_index, src)) == ["no member named 'm_colour' in 'Light'"]

    def test_inherited_member(self, corpus_index):
        assert _validate(corpus_index, "SpotLight s;\nfloat r = s.m_radius;\n") == []

    def test_local_struct(self, empty_index):
        src = "struct P\n{\n    float a;\n};\nP p;\nfloat x = p.b;\n"
        assert _messages(_validate(empty_index, src)) == ["no member named 'b' in 'P'"]

    def test_swizzle(self, empty_index):
        src = "float3 v = 0;\nfloat2 w = v.xy;\nfloat q = v.q;\n"
        assert _messages(_validate(empty_index, src)) == ["no member named 'q' in 'float3'"]

    def test_mul_result_follows_second_argument(self, empty_index):
        src = (
            "float4x4 M;\nfloat3 n;\n"
            "float2 p = mul(M, float4(n, 1)).xy;\n"
            "float q = mul(M, n).w;\n"
        )
        assert _messages(_validate(empty_index, src)) == ["no member named 'w' in 'float3'"]

    def test_unknown_owner_is_silent(self, empty_index):
        assert _validate(empty_index, "Mystery m;\nfloat x = m.anything;\n") == []

    def test_atom_type(self, corpus_index):
        src = "Surface surface;\nfloat3 a = surface.albedo;\nfloat3 b = surface.albedoo;\n"
        assert _messages(_validate(corpus_index, src)) == ["no member named 'albedoo' in 'Surface'"]


class TestSrgSemantics:
    def test_unknown_semantic(self, empty_index):
        src = "ShaderResourceGroup MySrg : SRG_PerDrawz\n{\n    float m_x;\n};\n"
        (diag,) = _validate(empty_index, src)
        assert diag.message == "ShaderResourceGroupSemantic 'SRG_PerDrawz' not found"
        assert diag.range.start == Position(0, 28)

    def test_corpus_semantic(self, corpus_index):
        src = "ShaderResourceGroup MySrg : SRG_PerCustomPass\n{\n};\n"
        assert _validate(corpus_index, src) == []


def test_non_azsl_documents_are_skipped(empty_index):
    assert _validate(empty_index, "foo.;\n", language_id="hlsl") == []
