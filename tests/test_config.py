"""Unit tests for EngineConfig (nstack.config).

Tests cover:
- Defaults and derived paths
- save/load round trip
- from_env overrides and validation
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from nstack.config import EngineConfig
from nstack.project.models import LayoutStyle, PackageManager, RouterStyle


class TestEngineConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = EngineConfig()
        assert config.manifest_name == "package.json"
        assert config.env_file == ".env"
        assert config.state_dir == ".nstack"
        assert config.ledger_name == "generated.json"
        assert config.default_layout is LayoutStyle.SRC_DIR
        assert config.default_router is RouterStyle.APP
        assert config.default_package_manager is PackageManager.NPM

    @pytest.mark.unit
    def test_empty_file_name_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(env_file="")


class TestEngineConfigPaths:
    @pytest.mark.unit
    def test_derived_paths(self, tmp_path: Path):
        config = EngineConfig()
        assert config.manifest_path(tmp_path) == tmp_path / "package.json"
        assert config.env_path(tmp_path) == tmp_path / ".env"
        assert config.state_path(tmp_path) == tmp_path / ".nstack"
        assert config.ledger_path(tmp_path) == tmp_path / ".nstack" / "generated.json"
        assert config.project_config_path(tmp_path) == tmp_path / ".nstack" / "config"

    @pytest.mark.unit
    def test_custom_env_file(self, tmp_path: Path):
        config = EngineConfig(env_file=".env.local")
        assert config.env_path(tmp_path) == tmp_path / ".env.local"


class TestEngineConfigPersistence:
    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        config = EngineConfig(env_file=".env.local", default_layout=LayoutStyle.APP_DIR)
        target = config.save(tmp_path / "nested" / "nstack.json")
        assert target.exists()
        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["env_file"] == ".env.local"
        assert data["default_layout"] == "app_dir"

        loaded = EngineConfig.load(target)
        assert loaded == config


class TestEngineConfigFromEnv:
    @pytest.mark.unit
    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = EngineConfig.from_env()
        assert config == EngineConfig()

    @pytest.mark.unit
    def test_from_env_overrides(self):
        env = {
            "NSTACK_MANIFEST": "manifest.json",
            "NSTACK_ENV_FILE": ".env.development",
            "NSTACK_STATE_DIR": ".state",
            "NSTACK_DEFAULT_LAYOUT": "app_dir",
            "NSTACK_DEFAULT_PM": "pnpm",
        }
        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env()
        assert config.manifest_name == "manifest.json"
        assert config.env_file == ".env.development"
        assert config.state_dir == ".state"
        assert config.default_layout is LayoutStyle.APP_DIR
        assert config.default_package_manager is PackageManager.PNPM

    @pytest.mark.unit
    def test_from_env_invalid_layout(self):
        with patch.dict(os.environ, {"NSTACK_DEFAULT_LAYOUT": "flat"}, clear=True):
            with pytest.raises(ValueError):
                EngineConfig.from_env()
