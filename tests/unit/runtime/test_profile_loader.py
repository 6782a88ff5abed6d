# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for profile ordering and YAML fragment loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from configweave.errors import ConfigFragmentError
from configweave.runtime import (
    YamlFragmentSource,
    active_profiles,
    fragment_names,
    load_fragments,
)


class TestProfileOrdering:
    def test_active_profiles_from_environment(self) -> None:
        environ = {"SPRING_PROFILES_ACTIVE": "armory, local,,"}
        assert active_profiles(environ) == ["armory", "local"]

    def test_active_profiles_unset(self) -> None:
        assert active_profiles({}) == []

    def test_active_profiles_custom_variable(self) -> None:
        assert active_profiles({"APP_PROFILES": "dev"}, env_var="APP_PROFILES") == ["dev"]

    def test_profiles_applied_in_reverse_declared_order(self) -> None:
        assert fragment_names(["spinnaker", "gate"], ["armory", "local"]) == [
            "spinnaker",
            "gate",
            "spinnaker-local",
            "spinnaker-armory",
            "gate-local",
            "gate-armory",
        ]

    def test_no_profiles(self) -> None:
        assert fragment_names(["app"], []) == ["app"]


class TestYamlFragmentSource:
    """Reading fragments from a config directory."""

    def test_loads_yml(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("server:\n  port: 8080\n")
        assert YamlFragmentSource(tmp_path).load("app") == {"server": {"port": 8080}}

    def test_loads_yaml_extension(self, tmp_path: Path) -> None:
        (tmp_path / "app.yaml").write_text("a: b\n")
        assert YamlFragmentSource(tmp_path).load("app") == {"a": "b"}

    def test_missing_fragment_is_empty(self, tmp_path: Path) -> None:
        assert YamlFragmentSource(tmp_path).load("absent") == {}

    def test_empty_document_is_empty(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("")
        assert YamlFragmentSource(tmp_path).load("app") == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("a: [unclosed\n")
        with pytest.raises(ConfigFragmentError) as exc_info:
            YamlFragmentSource(tmp_path).load("app")
        assert "app.yml" in str(exc_info.value)

    def test_non_mapping_document_raises(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("- a\n- b\n")
        with pytest.raises(ConfigFragmentError):
            YamlFragmentSource(tmp_path).load("app")

    def test_oversize_fragment_raises(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("a: " + "x" * 64 + "\n")
        with patch("configweave.runtime.profile_loader.MAX_CONFIG_FILE_SIZE", 16):
            with pytest.raises(ConfigFragmentError) as exc_info:
                YamlFragmentSource(tmp_path).load("app")
        assert "size limit" in str(exc_info.value)

    def test_load_fragments_in_precedence_order(self, tmp_path: Path) -> None:
        (tmp_path / "app.yml").write_text("level: base\n")
        (tmp_path / "app-local.yml").write_text("level: local\n")
        (tmp_path / "app-armory.yml").write_text("level: armory\n")

        fragments = load_fragments(["app"], YamlFragmentSource(tmp_path), ["armory", "local"])

        assert fragments == [{"level": "base"}, {"level": "local"}, {"level": "armory"}]
