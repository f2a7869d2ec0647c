"""Tests for settings loading."""

from pathlib import Path

import pytest

from azslsense.analysis.walker import DEFAULT_EXTENSIONS, DEFAULT_MAX_FILES
from azslsense.config import AzslSettings, ConfigError, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEM_PATH", "HEADERS_PATH", "MAX_FILES", "EXTENSIONS", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"AZSL_{name}", raising=False)


def _yaml(tmp_path, text):
    path = tmp_path / "azsl.yaml"
    path.write_text(text)
    return path


class TestDefaults:
    def test_values(self):
        settings = load_settings()
        assert settings.max_files == DEFAULT_MAX_FILES
        assert settings.extensions == list(DEFAULT_EXTENSIONS)
        assert settings.log_level == "WARNING"
        assert settings.log_format == "console"
        assert settings.root_path is None

    def test_direct_construction(self):
        assert AzslSettings().gem_path == ""


class TestRootPath:
    def test_gem_path_preferred(self):
        settings = load_settings(gem_path="/gems/atom", headers_path="/legacy")
        assert settings.root_path == Path("/gems/atom")

    def test_blank_gem_path_falls_back(self):
        settings = load_settings(gem_path="   ", headers_path="/legacy")
        assert settings.root_path == Path("/legacy")

    def test_home_expanded(self):
        assert load_settings(gem_path="~/gems").root_path == Path.home() / "gems"


class TestSources:
    def test_yaml_file(self, tmp_path):
        path = _yaml(tmp_path, "gem_path: /gems\nmax_files: 10\nextensions: [azsli, .SRGI]\n")
        settings = load_settings(path)
        assert settings.root_path == Path("/gems")
        assert settings.max_files == 10
        assert settings.extensions == [".azsli", ".srgi"]

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AZSL_MAX_FILES", "20")
        settings = load_settings(_yaml(tmp_path, "max_files: 10\n"))
        assert settings.max_files == 20

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("AZSL_MAX_FILES", "20")
        assert load_settings(max_files=5).max_files == 5

    def test_env_log_level_case(self, monkeypatch):
        monkeypatch.setenv("AZSL_LOG_LEVEL", "debug")
        assert load_settings().log_level == "DEBUG"

    def test_empty_yaml(self, tmp_path):
        assert load_settings(_yaml(tmp_path, "")).max_files == DEFAULT_MAX_FILES


class TestErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found") as exc:
            load_settings(tmp_path / "nope.yaml")
        assert exc.value.path == str(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Failed to parse config"):
            load_settings(_yaml(tmp_path, "max_files: [\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="top level must be a mapping"):
            load_settings(_yaml(tmp_path, "- a\n- b\n"))

    def test_invalid_value(self, tmp_path):
        with pytest.raises(ConfigError) as exc:
            load_settings(_yaml(tmp_path, "max_files: 0\n"))
        assert exc.value.field == "max_files"

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError) as exc:
            load_settings(log_level="LOUD")
        assert exc.value.field == "log_level"
