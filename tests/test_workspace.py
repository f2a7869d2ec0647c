"""Tests for the workspace facade."""

from pathlib import Path

import pytest

from azslsense.builtins.docs import builtin_uri
from azslsense.config import AzslSettings
from azslsense.document import Position
from azslsense.workspace import AzslWorkspace

CORPUS = Path(__file__).parent / "fixtures" / "corpus"
URI = "file:///shader.azsl"


@pytest.fixture
def workspace():
    ws = AzslWorkspace(AzslSettings(gem_path=str(CORPUS)))
    ws.startup()
    return ws


class TestLifecycle:
    def test_startup_indexes_corpus(self, workspace):
        assert workspace.root_path == CORPUS
        assert workspace.stats().files == 4

    def test_no_root(self):
        ws = AzslWorkspace(AzslSettings())
        assert ws.startup().files == 0

    def test_settings_change_reindexes_on_new_root(self, workspace, tmp_path):
        (tmp_path / "One.azsli").write_text("#define ONE 1\n")
        assert not workspace.apply_settings(AzslSettings(gem_path=str(CORPUS), max_files=10))
        assert workspace.stats().files == 4
        assert workspace.apply_settings(AzslSettings(gem_path=str(tmp_path)))
        assert workspace.stats().files == 1
        assert workspace.index.lookup_macro("ONE") is not None

    def test_reindex_keeps_open_documents(self, workspace):
        workspace.open_document(URI, "#define LOCAL_ONLY 1\n")
        workspace.reindex()
        assert workspace.index.lookup_macro("LOCAL_ONLY") is not None

    def test_extensions_setting(self, tmp_path):
        (tmp_path / "a.azsli").write_text("")
        (tmp_path / "b.inc").write_text("")
        ws = AzslWorkspace(AzslSettings(gem_path=str(tmp_path), extensions=["inc"]))
        assert ws.startup().files == 1


class TestDocuments:
    def test_open_change_close(self, workspace):
        doc = workspace.open_document(URI, "float a = b;\n")
        assert [d.message for d in workspace.validate(URI)] == ["use of undeclared identifier 'b'"]
        workspace.change_document(URI, "float b = 1;\nfloat a = b;\n")
        assert doc.version == 1
        assert workspace.validate(URI) == []
        workspace.close_document(URI)
        assert list(workspace.open_documents()) == []
        assert workspace.validate(URI) == []

    def test_close_drops_document_macros(self, workspace):
        workspace.open_document(URI, "#define LOCAL_ONLY 1\n")
        workspace.open_document("file:///other.azsl", "int a = LOCAL_ONLY;\n")
        workspace.close_document(URI)
        assert workspace.index.lookup_macro("LOCAL_ONLY") is None
        assert workspace.provide_hover("file:///other.azsl", Position(0, 10)) is None

    def test_change_unknown_document_opens_it(self, workspace):
        doc = workspace.change_document(URI, "float a;\n", version=7)
        assert doc.version == 7
        assert workspace.documents[URI] is doc

    def test_non_azsl_not_indexed(self, workspace):
        workspace.open_document("file:///x.hlsl", "#define HLSL_ONLY 1\n", language_id="hlsl")
        assert workspace.index.lookup_macro("HLSL_ONLY") is None

    def test_document_macros_visible(self, workspace):
        workspace.open_document(URI, "// local\n#define LOCAL 2\nint x = LOCAL;\n")
        hover = workspace.provide_hover(URI, Position(2, 9))
        assert "local" in hover.contents


class TestQueries:
    def test_point_queries(self, workspace):
        workspace.open_document(URI, "float s = SHADOW_CASCADES;\nfloat3 v;\nv.\n")
        assert workspace.provide_definition(URI, Position(0, 12)).line == 6
        assert "Number of cascades" in workspace.provide_hover(URI, Position(0, 12)).contents
        labels = [i.label for i in workspace.provide_completions(URI, Position(2, 2))]
        assert labels == ["x", "y", "z"]

    def test_links_and_include(self, workspace):
        workspace.open_document(URI, "#include <Common/Lights.azsli>\n")
        (link,) = workspace.provide_document_links(URI)
        assert link.target == str(CORPUS / "Common" / "Lights.azsli")
        assert workspace.resolve_include("Common/Lights.azsli") == link.target

    def test_code_actions_from_validation(self, workspace):
        workspace.open_document(URI, "option bool o_x = true;\n")
        (action,) = workspace.provide_code_actions(URI)
        assert "ShaderVariantFallback" in action.title

    def test_unknown_uri(self, workspace):
        assert workspace.provide_hover("file:///nope.azsl", Position(0, 0)) is None
        assert workspace.provide_definition("file:///nope.azsl", Position(0, 0)) is None
        assert workspace.provide_completions("file:///nope.azsl", Position(0, 0)) == []
        assert workspace.provide_code_actions("file:///nope.azsl") == []

    def test_builtin_document(self, workspace):
        by_uri = workspace.render_builtin_document(builtin_uri("Texture2D"))
        assert by_uri == workspace.render_builtin_document("Texture2D")
        assert "Texture2D" in by_uri
        assert workspace.render_builtin_document("Nope").startswith("// Built-in type: Nope")
