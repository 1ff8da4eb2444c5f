"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from blueprint_index.config.policies import HierarchyPolicy, Policies, load_policies
from blueprint_index.config.settings import PROJECT_ROOT, Settings


def test_default_policies() -> None:
    policies = Policies()

    assert policies.hierarchy.class_export_types == ["BlueprintGeneratedClass"]
    assert policies.hierarchy.asset_extensions == [".uasset"]
    assert policies.hierarchy.first_class_export_only is True
    assert policies.hierarchy.case_insensitive_properties is True


def test_hierarchy_policy_normalizes_values() -> None:
    policy = HierarchyPolicy(
        class_export_types=[" BlueprintGeneratedClass ", ""],
        asset_extensions=["UASSET", ".umap", " "],
    )

    assert policy.class_export_types == ["BlueprintGeneratedClass"]
    assert policy.asset_extensions == [".uasset", ".umap"]
    assert policy.accepts_package("Game/Maps/Level01.umap")
    assert not policy.accepts_package("Game/Textures/T_Icon.ubulk")
    assert policy.is_class_export("BlueprintGeneratedClass")
    assert not policy.is_class_export(None)


def test_hierarchy_policy_requires_export_types() -> None:
    with pytest.raises(ValidationError):
        HierarchyPolicy(class_export_types=[])


def test_empty_extension_list_accepts_every_package() -> None:
    assert HierarchyPolicy(asset_extensions=[]).accepts_package("anything.bin")


def test_load_policies_from_mapping() -> None:
    policies = load_policies(
        {"policy_version": "test-version", "hierarchy": {"first_class_export_only": False}}
    )

    assert policies.policy_version == "test-version"
    assert policies.hierarchy.first_class_export_only is False


def test_load_policies_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "policies.yaml"
    path.write_text(
        yaml.safe_dump({"hierarchy": {"asset_extensions": ["uasset", "umap"]}}),
        encoding="utf-8",
    )

    policies = load_policies(path)
    assert policies.hierarchy.asset_extensions == [".uasset", ".umap"]


def test_load_policies_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "policies.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_policies(path)


def test_load_policies_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_policies(tmp_path / "missing.yaml")


def test_policy_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "BLUEPRINT_INDEX_POLICY__HIERARCHY__CLASS_EXPORT_TYPES",
        '["WidgetBlueprintGeneratedClass"]',
    )
    monkeypatch.setenv("BLUEPRINT_INDEX_POLICY__HIERARCHY__WARN_ON_DUPLICATE_SUPER", "false")

    policies = load_policies({})
    assert policies.hierarchy.class_export_types == ["WidgetBlueprintGeneratedClass"]
    assert policies.hierarchy.warn_on_duplicate_super is False


def test_policy_env_override_rejects_non_mapping_segment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLUEPRINT_INDEX_POLICY__POLICY_VERSION__NESTED", "x")

    with pytest.raises(ValueError):
        load_policies({"policy_version": "v1"})


def test_settings_merge_yaml_layers(tmp_path: Path) -> None:
    (tmp_path / "default.yaml").write_text(
        yaml.safe_dump(
            {
                "log_level": "INFO",
                "policies": {"hierarchy": {"first_class_export_only": False}},
            }
        ),
        encoding="utf-8",
    )
    (tmp_path / "production.yaml").write_text(
        yaml.safe_dump({"log_level": "WARNING"}),
        encoding="utf-8",
    )

    settings = Settings(config_dir=tmp_path, environment="production", create_dirs=False)

    assert settings.environment == "production"
    assert settings.log_level == "WARNING"
    assert settings.policies.hierarchy.first_class_export_only is False


def test_settings_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLUEPRINT_INDEX_SETTINGS__PATHS__LOGS_DIR", str(tmp_path / "logs"))

    settings = Settings(config_dir=tmp_path, create_dirs=False)

    assert settings.paths.logs_dir == tmp_path / "logs"
    assert settings.log_file == tmp_path / "logs" / "blueprint_index.log"
    assert not (tmp_path / "logs").exists()


def test_settings_create_dirs(tmp_path: Path) -> None:
    settings = Settings(
        config_dir=tmp_path,
        paths={"output_dir": tmp_path / "out", "logs_dir": tmp_path / "logs"},
    )

    assert settings.create_dirs is True
    assert (tmp_path / "out").is_dir()
    assert (tmp_path / "logs").is_dir()


def test_settings_accept_policies_instance(tmp_path: Path) -> None:
    policies = Policies(policy_version="explicit")

    settings = Settings(config_dir=tmp_path, create_dirs=False, policies=policies)
    assert settings.policy_version == "explicit"


def test_settings_normalise_log_level(tmp_path: Path) -> None:
    assert Settings(config_dir=tmp_path, create_dirs=False, log_level="debug").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        Settings(config_dir=tmp_path, create_dirs=False, log_level="chatty")


def test_settings_env_values_are_json_decoded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLUEPRINT_INDEX_SETTINGS__CREATE_DIRS", "false")
    monkeypatch.setenv("BLUEPRINT_INDEX_SETTINGS__PATHS__OUTPUT_DIR", str(tmp_path / "exports"))

    settings = Settings(config_dir=tmp_path)

    assert settings.create_dirs is False
    assert settings.paths.output_dir == tmp_path / "exports"
    assert not (tmp_path / "exports").exists()


def test_relative_paths_are_anchored_at_project_root(tmp_path: Path) -> None:
    settings = Settings(config_dir=tmp_path, create_dirs=False, paths={"output_dir": "exports"})

    assert settings.paths.output_dir == PROJECT_ROOT / "exports"
    assert settings.paths.logs_dir == PROJECT_ROOT / "logs"


def test_settings_reject_non_mapping_yaml(tmp_path: Path) -> None:
    (tmp_path / "default.yaml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        Settings(config_dir=tmp_path, create_dirs=False)
