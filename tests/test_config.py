"""Tests for omen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from omen.config import (
    DEFAULT_EXCLUDE_PATHS,
    ConfigError,
    OmenConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, OmenConfig)
    assert config.root == tmp_path.resolve()
    assert config.output_path == ".omen-code-index"
    assert config.output_format == "markdown"
    assert config.include_classes is True
    assert config.include_interfaces is True
    assert config.include_imports is False
    assert config.exclude_paths == list(DEFAULT_EXCLUDE_PATHS)
    assert config.max_file_size == 1024 * 1024
    assert config.output_dir == tmp_path.resolve() / ".omen-code-index"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".omen.yml"
    config_file.write_text(
        """
output:
  path: "docs/context"
  format: both
index:
  classes: false
  interfaces: "no"
  imports: true
scan:
  exclude_paths:
    - "vendor/"
    - "*.gen.ts"
  max_file_size: 2048
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.output_path == "docs/context"
    assert config.output_format == "both"
    assert config.include_classes is False
    assert config.include_interfaces is False
    assert config.include_imports is True
    assert config.exclude_paths == ["vendor/", "*.gen.ts"]
    assert config.max_file_size == 2048


def test_output_dir_dot_means_repository_root(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("output:\n  path: .\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.output_dir == tmp_path.resolve()


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.output_format == "markdown"


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("output: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_rejects_unknown_format(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("output:\n  format: html\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="html"):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_file_size(tmp_path: Path) -> None:
    (tmp_path / ".omen.yml").write_text("scan:\n  max_file_size: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_with_overrides_applies_only_given_values(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    updated = config.with_overrides(output_format="JSON", include_imports=True)

    assert updated.output_format == "json"
    assert updated.include_imports is True
    assert updated.output_path == config.output_path
    assert config.output_format == "markdown"
    assert config.with_overrides() is config


def test_with_overrides_validates_format(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    with pytest.raises(ConfigError):
        config.with_overrides(output_format="xml")
