"""
Configuration management for Device Snapshot.

Supports configuration via YAML files, environment variables, and programmatic access.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATHS = [
    Path("/etc/device-snapshot/config.yaml"),
    Path.home() / ".config" / "device-snapshot" / "config.yaml",
    Path("devsnap-config.yaml"),
]

DISPLAY_STRATEGIES = ("auto", "modern", "legacy")


@dataclass
class Config:
    """
    Configuration container for Device Snapshot.

    Priority (highest to lowest):
    1. Programmatic values passed to __init__
    2. Environment variables (prefixed with DEVSNAP_)
    3. Config file values
    4. Default values
    """

    # Probe settings
    app_name: str = "device-snapshot"
    storage_path: str = "/"
    display_strategy: str = "auto"
    probe_timeout: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self) -> None:
        if self.display_strategy not in DISPLAY_STRATEGIES:
            raise ValueError(
                f"display_strategy must be one of {', '.join(DISPLAY_STRATEGIES)}, "
                f"got {self.display_strategy!r}"
            )

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """
        Create config from a dictionary.

        Nested sections are flattened: `probes: {timeout: 3}` sets
        `probe_timeout` when `probe_timeout` is a known field, else
        `timeout`. Unknown keys are ignored.
        """
        known_fields = {f.name for f in fields(cls)}
        aliases = {"probes": "probe", "logging": "log"}

        flat: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                prefix = aliases.get(key, key)
                for subkey, subvalue in value.items():
                    prefixed = f"{prefix}_{subkey}"
                    flat[prefixed if prefixed in known_fields else subkey] = subvalue
            else:
                flat[key] = value

        filtered = {k: v for k, v in flat.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Fully resolved Config instance.
        """
        base_config: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                    break

        config = cls.from_dict(base_config) if base_config else cls()
        config._apply_env_overrides()
        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "DEVSNAP_APP_NAME": "app_name",
            "DEVSNAP_STORAGE_PATH": "storage_path",
            "DEVSNAP_DISPLAY_STRATEGY": "display_strategy",
            "DEVSNAP_PROBE_TIMEOUT": "probe_timeout",
            "DEVSNAP_LOG_LEVEL": "log_level",
            "DEVSNAP_LOG_FILE": "log_file",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                current = getattr(self, attr)
                if isinstance(current, (int, float)):
                    setattr(self, attr, float(value))
                else:
                    setattr(self, attr, value)

        # Re-validate after overrides
        self.__post_init__()

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "probes": {
                "app_name": self.app_name,
                "storage_path": self.storage_path,
                "display_strategy": self.display_strategy,
                "timeout": self.probe_timeout,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
