"""Tests for the corpus walker."""

from azslsense.analysis.walker import should_index_file, walk_corpus


def _touch(path, text=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestShouldIndexFile:
    def test_default_extensions(self):
        assert should_index_file("Common/Lights.azsli")
        assert should_index_file("PassSrg.srgi")
        assert should_index_file("Shader.azsl")
        assert not should_index_file("README.md")

    def test_case_insensitive(self):
        assert should_index_file("Upper.AZSLI")

    def test_custom_extensions(self):
        assert should_index_file("a.inc", extensions=[".inc"])
        assert not should_index_file("a.azsli", extensions=[".inc"])


class TestWalkCorpus:
    def test_extension_filter(self, tmp_path):
        _touch(tmp_path / "a.azsli")
        _touch(tmp_path / "b.txt")
        _touch(tmp_path / "c.SRGI")
        names = [p.name for p in walk_corpus(tmp_path)]
        assert names == ["a.azsli", "c.SRGI"]

    def test_sorted_depth_first(self, tmp_path):
        _touch(tmp_path / "c.azsli")
        _touch(tmp_path / "b.azsli")
        _touch(tmp_path / "a" / "z.azsli")
        rel = [p.relative_to(tmp_path).as_posix() for p in walk_corpus(tmp_path)]
        assert rel == ["a/z.azsli", "b.azsli", "c.azsli"]

    def test_max_files_truncates(self, tmp_path):
        for name in ("a", "b", "c", "d"):
            _touch(tmp_path / f"{name}.azsli")
        names = [p.name for p in walk_corpus(tmp_path, max_files=2)]
        assert names == ["a.azsli", "b.azsli"]

    def test_deterministic(self, corpus_root):
        assert walk_corpus(corpus_root) == walk_corpus(corpus_root)

    def test_fixture_order(self, corpus_root):
        rel = [p.relative_to(corpus_root).as_posix() for p in walk_corpus(corpus_root)]
        assert rel == [
            "Atom/Features/PBR/StandardSurface.azsli",
            "Atom/Features/SrgSemantics.azsli",
            "Atom/RPI/ViewSrg.azsli",
            "Common/Lights.azsli",
        ]

    def test_missing_root(self, tmp_path):
        assert walk_corpus(tmp_path / "nope") == []
