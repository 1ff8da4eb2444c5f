"""Layered runtime settings for the blueprint index.

Values are resolved from several layers, lowest priority first:

1. field defaults declared on :class:`Settings`
2. ``<config_dir>/default.yaml``
3. ``<config_dir>/<environment>.yaml``
4. ``BLUEPRINT_INDEX_SETTINGS__<SECTION>__<KEY>`` environment variables
5. keyword arguments (including CLI ``--override`` values)

Policies nested under ``policies`` are handed to :func:`load_policies`, which
applies its own ``BLUEPRINT_INDEX_POLICY__`` overrides on top.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache, reduce
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import Policies, load_policies

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_ENV_PREFIX = "BLUEPRINT_INDEX_SETTINGS__"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _merge_layers(lower: Dict[str, Any], upper: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(lower)
    for key, value in upper.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _merge_layers(current, value)
        else:
            merged[key] = value
    return merged


def _read_layer(path: Path) -> Dict[str, Any]:
    """Return the mapping stored in *path*, or an empty layer when it is absent."""

    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file '{path}' must contain a mapping at the top level")
    return loaded


def _environment_layer(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect ``BLUEPRINT_INDEX_SETTINGS__`` variables into a nested layer.

    Values are JSON-decoded when possible so ``false`` and ``3`` arrive typed;
    anything else (paths, level names) is kept verbatim.
    """

    layer: Dict[str, Any] = {}
    for key in sorted(environ):
        if not key.startswith(SETTINGS_ENV_PREFIX):
            continue
        parts = [part.lower() for part in key[len(SETTINGS_ENV_PREFIX) :].split("__") if part]
        if not parts:
            continue
        raw = environ[key]
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        for part in reversed(parts):
            value = {part: value}
        layer = _merge_layers(layer, value)
    return layer


class PathsConfig(BaseModel):
    """Directories the CLI writes exports and log files into.

    Relative entries are anchored at the project root.
    """

    output_dir: Path = Field(default=Path("output"), validate_default=True)
    logs_dir: Path = Field(default=Path("logs"), validate_default=True)

    @field_validator("output_dir", "logs_dir")
    @classmethod
    def _anchor(cls, value: Path) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else PROJECT_ROOT / path

    def directories(self) -> List[Path]:
        return [self.output_dir, self.logs_dir]

    def ensure_exists(self) -> None:
        for directory in self.directories():
            directory.mkdir(parents=True, exist_ok=True)


class Settings(BaseSettings):
    """Runtime configuration shared by the hierarchy loader and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="BLUEPRINT_INDEX_",
        validate_assignment=True,
        extra="allow",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Selects the <environment>.yaml layer",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    create_dirs: bool = Field(
        default=True,
        description="Create the directories in `paths` while validating.",
    )
    log_level: str = Field(default="INFO")
    policies: Policies

    @model_validator(mode="before")
    @classmethod
    def _resolve_layers(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        explicit = {key: value for key, value in values.items() if value is not None}
        config_dir = Path(explicit.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = explicit.get("environment") or os.getenv("BLUEPRINT_INDEX_ENV", "development")

        combined = reduce(
            _merge_layers,
            [
                _read_layer(config_dir / "default.yaml"),
                _read_layer(config_dir / f"{environment}.yaml"),
                _environment_layer(os.environ),
                explicit,
            ],
            {},
        )

        policies = combined.get("policies")
        if not isinstance(policies, Policies):
            combined["policies"] = load_policies(policies or {})
        return combined

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def _create_directories(self) -> "Settings":
        if self.create_dirs:
            self.paths.ensure_exists()
        return self

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path:
        return self.paths.logs_dir / "blueprint_index.log"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "PathsConfig"]
