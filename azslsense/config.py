"""Settings for the analysis core.

Sources, lowest to highest precedence: built-in defaults, an optional YAML
file, ``AZSL_*`` environment variables, explicit keyword overrides.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from azslsense.analysis.walker import DEFAULT_EXTENSIONS, DEFAULT_MAX_FILES

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class ConfigError(Exception):
    """Raised when settings cannot be loaded."""

    def __init__(self, message: str, path: str | None = None, field: str | None = None):
        super().__init__(message)
        self.path = path
        self.field = field

    @classmethod
    def parse_error(cls, path: str, reason: str) -> ConfigError:
        return cls(f"Failed to parse config at {path}: {reason}", path=path)

    @classmethod
    def file_not_found(cls, path: str) -> ConfigError:
        return cls(f"Config file not found: {path}", path=path)

    @classmethod
    def invalid_value(cls, field: str, reason: str) -> ConfigError:
        return cls(f"Invalid value for '{field}': {reason}", field=field)


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source backed by an already loaded YAML mapping."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


class AzslSettings(BaseSettings):
    """Env vars: AZSL_GEM_PATH, AZSL_HEADERS_PATH, AZSL_MAX_FILES, AZSL_LOG_LEVEL."""

    model_config = SettingsConfigDict(env_prefix="AZSL_", case_sensitive=False)

    gem_path: str = Field(default="", description="Corpus root; preferred over headers_path")
    headers_path: str = Field(default="", description="Legacy corpus root setting")
    max_files: int = Field(default=DEFAULT_MAX_FILES, ge=1)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    log_level: LogLevel = "WARNING"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("extensions")
    @classmethod
    def _dotted(cls, v: list[str]) -> list[str]:
        return [e if e.startswith(".") else f".{e}" for e in (s.strip().lower() for s in v) if e]

    @property
    def root_path(self) -> Path | None:
        """Configured corpus root; a non-blank gem path wins."""
        for candidate in (self.gem_path, self.headers_path):
            if candidate and candidate.strip():
                return Path(candidate.strip()).expanduser()
        return None


def _settings_class(yaml_config: dict[str, Any]) -> type[AzslSettings]:
    """AzslSettings reading the given YAML mapping below the environment."""

    class _FileSettings(AzslSettings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # first wins: overrides > env > yaml
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return _FileSettings


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError.file_not_found(str(path))
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    except OSError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> AzslSettings:
    """Load settings: defaults < YAML file < environment < overrides.

    Raises:
        ConfigError: On a missing or malformed file, or an invalid value.
    """
    yaml_config = _load_yaml(Path(config_file)) if config_file else {}
    settings_cls = _settings_class(yaml_config)
    try:
        return settings_cls(**overrides)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err["msg"]) from e
