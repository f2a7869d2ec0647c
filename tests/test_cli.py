"""Tests for the azslsense command line."""

import json
from pathlib import Path

import pytest

from azslsense.cli import main

CORPUS = Path(__file__).parent / "fixtures" / "corpus"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEM_PATH", "HEADERS_PATH", "MAX_FILES", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"AZSL_{name}", raising=False)


@pytest.fixture
def shader(tmp_path):
    def write(text):
        path = tmp_path / "test.azsl"
        path.write_text(text)
        return path
    return write


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestIndexCommand:
    def test_prints_stats(self, capsys):
        main(["index", str(CORPUS)])
        out = capsys.readouterr().out
        assert "files: 4" in out
        assert "macros: 2" in out
        assert "srgs: 1" in out

    def test_root_option(self, capsys):
        main(["--root", str(CORPUS), "index"])
        assert "files: 4" in capsys.readouterr().out

    def test_no_root(self, capsys):
        assert _exit_code(["index"]) == 1
        assert "no corpus root" in capsys.readouterr().err


class TestValidateCommand:
    def test_text_output(self, shader, capsys):
        path = shader("float a = b;\n")
        assert _exit_code(["validate", str(path)]) == 1
        out = capsys.readouterr().out
        assert out.strip() == f"{path}:1:11: error: use of undeclared identifier 'b'"

    def test_json_output(self, shader, capsys):
        path = shader("float a = b;\n")
        assert _exit_code(["validate", str(path), "--json"]) == 1
        (entry,) = json.loads(capsys.readouterr().out)
        assert entry == {
            "line": 0, "start": 10, "end": 11, "severity": "error",
            "code": "undeclared-identifier",
            "message": "use of undeclared identifier 'b'",
        }

    def test_clean_file(self, shader, capsys):
        main(["validate", str(shader("float a = 1;\n"))])
        assert capsys.readouterr().out == ""

    def test_uses_corpus(self, shader, capsys):
        path = shader("float4 p = mul(ViewSrg::m_viewProjectionMatrix, float4(0,0,0,1));\n")
        main(["--root", str(CORPUS), "validate", str(path)])
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert _exit_code(["validate", str(tmp_path / "missing.azsl")]) == 1
        assert "file not found" in capsys.readouterr().err


class TestPointCommands:
    def test_hover(self, shader, capsys):
        path = shader("#define MAX_LIGHTS 8 // maximum supported lights\nuint c = MAX_LIGHTS;\n")
        main(["hover", str(path), "1", "10"])
        assert "maximum supported lights" in capsys.readouterr().out

    def test_hover_nothing(self, shader, capsys):
        assert _exit_code(["hover", str(shader("mystery;\n")), "0", "1"]) == 1
        assert "No hover information." in capsys.readouterr().err

    def test_definition(self, shader, capsys):
        path = shader("float s = SHADOW_CASCADES;\n")
        main(["--root", str(CORPUS), "definition", str(path), "0", "12"])
        lights = CORPUS / "Common" / "Lights.azsli"
        assert capsys.readouterr().out.strip() == f"{lights}:7:1"

    def test_definition_nothing(self, shader, capsys):
        assert _exit_code(["definition", str(shader("mystery;\n")), "0", "1"]) == 1

    def test_complete(self, shader, capsys):
        main(["complete", str(shader("float3 v;\nv.")), "1", "2"])
        assert capsys.readouterr().out.splitlines() == ["x\tfield", "y\tfield", "z\tfield"]


class TestMisc:
    def test_builtin(self, capsys):
        main(["builtin", "Texture2D"])
        out = capsys.readouterr().out
        assert "Built-in HLSL/AZSL Type: Texture2D" in out
        assert "// Example usage:" in out

    def test_no_command(self, capsys):
        assert _exit_code([]) == 0
        assert "usage:" in capsys.readouterr().out

    def test_version(self, capsys):
        assert _exit_code(["--version"]) == 0
        assert "azslsense 0.1.0" in capsys.readouterr().out

    def test_bad_config(self, tmp_path, capsys):
        assert _exit_code(["--config", str(tmp_path / "missing.yaml"), "index"]) == 2
        assert "Config file not found" in capsys.readouterr().err
