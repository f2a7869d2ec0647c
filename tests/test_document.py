"""Tests for the host-facing document model and built-in documentation pages."""

from azslsense.builtins.docs import (
    builtin_markdown, builtin_name_from_uri, builtin_uri, render_builtin_document,
)
from azslsense.document import Position, Range, TextDocument


class TestTextDocument:
    def test_lines_and_crlf(self):
        doc = TextDocument("file:///a.azsl", "a\r\nbc\nd")
        assert doc.lines == ["a", "bc", "d"]
        assert doc.line_count == 3
        assert doc.line_at(5) == ""

    def test_offsets(self):
        doc = TextDocument("file:///a.azsl", "ab\ncde\n")
        assert doc.offset_at(Position(1, 2)) == 5
        assert doc.position_at(5) == Position(1, 2)
        # columns are clamped to the line
        assert doc.offset_at(Position(0, 99)) == 2

    def test_word_range(self):
        doc = TextDocument("file:///a.azsl", "float value;")
        rng = doc.word_range_at(Position(0, 8))
        assert rng == Range.on_line(0, 6, 11)
        assert doc.get_text(rng) == "value"
        assert doc.word_range_at(Position(0, 12)) is None

    def test_update(self):
        doc = TextDocument("file:///a.azsl", "a")
        doc.update("b\nc")
        assert doc.version == 1
        assert doc.lines == ["b", "c"]

    def test_language(self):
        assert TextDocument("u", "").is_azsl
        assert not TextDocument("u", "", "hlsl").is_azsl


class TestBuiltinDocs:
    def test_uri_round_trip(self):
        uri = builtin_uri("Texture2D")
        assert uri == "azsl-builtin://documentation/Texture2D.azsli"
        assert builtin_name_from_uri(uri) == "Texture2D"
        assert builtin_name_from_uri("file:///Texture2D.azsli") is None

    def test_render_sampler_property(self):
        text = render_builtin_document("MinFilter")
        assert text.startswith("/*\n * Built-in HLSL/AZSL Type: MinFilter")
        assert "MinFilter = Linear;" in text
        assert "**" not in text

    def test_render_unknown(self):
        assert render_builtin_document("Nope") == "// Built-in type: Nope\n// No documentation available."

    def test_markdown_lookup(self):
        assert "Clip-space position" in builtin_markdown("SV_Position")
        assert builtin_markdown("Nope") is None
