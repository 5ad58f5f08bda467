"""
Unit tests for Config class.

Tests configuration loading, defaults, environment variable overrides,
and configuration precedence.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import yaml

from device_snapshot.config import Config


class TestConfigDefaults:
    """Test Config class initialization with default values."""

    def test_default_values(self):
        config = Config()
        assert config.app_name == "device-snapshot"
        assert config.storage_path == "/"
        assert config.display_strategy == "auto"
        assert config.probe_timeout == 5.0
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_invalid_display_strategy(self):
        with pytest.raises(ValueError, match="display_strategy"):
            Config(display_strategy="wayland")


class TestConfigFromDict:
    """Test Config creation from dictionary."""

    def test_from_dict_flat_structure(self):
        config = Config.from_dict({"app_name": "myapp", "log_level": "DEBUG"})

        assert config.app_name == "myapp"
        assert config.log_level == "DEBUG"

    def test_from_dict_nested_structure(self):
        config = Config.from_dict(
            {
                "probes": {"timeout": 2, "storage_path": "/data", "display_strategy": "modern"},
                "logging": {"level": "DEBUG", "file": "/tmp/devsnap.log"},
            }
        )

        assert config.probe_timeout == 2
        assert config.storage_path == "/data"
        assert config.display_strategy == "modern"
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/devsnap.log"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"upload_url": "https://example.com", "app_name": "x"})

        assert config.app_name == "x"
        assert not hasattr(config, "upload_url")

    def test_round_trip_through_to_dict(self):
        original = Config(app_name="myapp", probe_timeout=1.5, log_file="/tmp/x.log")

        assert Config.from_dict(original.to_dict()) == original


class TestConfigFiles:
    """Test loading and saving YAML files."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("probes:\n  app_name: from-file\n")

        assert Config.from_file(path).app_name == "from-file"

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_file(tmp_path / "missing.yaml")

    def test_from_file_empty(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert Config.from_file(path) == Config()

    def test_save(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        Config(storage_path="/srv").save(path)

        data = yaml.safe_load(path.read_text())
        assert data["probes"]["storage_path"] == "/srv"
        assert data["logging"]["level"] == "INFO"

    def test_load_explicit_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: WARNING\n")

        with patch.dict("os.environ", {}, clear=True):
            config = Config.load(path)

        assert config.log_level == "WARNING"

    def test_load_searches_default_paths(self, tmp_path):
        path = tmp_path / "devsnap-config.yaml"
        path.write_text("probes:\n  storage_path: /home\n")

        with patch("device_snapshot.config.DEFAULT_CONFIG_PATHS", [tmp_path / "nope.yaml", path]):
            with patch.dict("os.environ", {}, clear=True):
                config = Config.load()

        assert config.storage_path == "/home"

    def test_load_without_files_uses_defaults(self, tmp_path):
        with patch("device_snapshot.config.DEFAULT_CONFIG_PATHS", [tmp_path / "nope.yaml"]):
            with patch.dict("os.environ", {}, clear=True):
                assert Config.load() == Config()


class TestConfigEnvOverrides:
    """Test DEVSNAP_* environment variable overrides."""

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("probes:\n  app_name: from-file\n  timeout: 3\n")

        env = {"DEVSNAP_APP_NAME": "from-env", "DEVSNAP_PROBE_TIMEOUT": "0.5"}
        with patch.dict("os.environ", env, clear=True):
            config = Config.load(path)

        assert config.app_name == "from-env"
        assert config.probe_timeout == 0.5

    def test_env_display_strategy_validated(self, tmp_path):
        with patch("device_snapshot.config.DEFAULT_CONFIG_PATHS", [tmp_path / "nope.yaml"]):
            with patch.dict("os.environ", {"DEVSNAP_DISPLAY_STRATEGY": "bogus"}, clear=True):
                with pytest.raises(ValueError):
                    Config.load()

    def test_env_log_settings(self, tmp_path):
        env = {"DEVSNAP_LOG_LEVEL": "DEBUG", "DEVSNAP_LOG_FILE": "/tmp/devsnap.log"}
        with patch("device_snapshot.config.DEFAULT_CONFIG_PATHS", [tmp_path / "nope.yaml"]):
            with patch.dict("os.environ", env, clear=True):
                config = Config.load()

        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/devsnap.log"
