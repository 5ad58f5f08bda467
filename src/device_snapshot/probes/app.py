"""
Application metadata probe.

Reports the installed version of the calling application's distribution.
"""

from __future__ import annotations

import re
from importlib import metadata
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from device_snapshot.probes.base import BaseProbe, ProbeError

if TYPE_CHECKING:
    from device_snapshot.config import Config


class AppProbe(BaseProbe):
    """Collects the calling application's version name and build code."""

    name = "app"
    description = "Application version name and numeric version code"
    fields = ("appVersion", "appVersionCode")
    fallback = MappingProxyType({"appVersion": "Unknown", "appVersionCode": 0})

    def __init__(self, app_name: str = "device-snapshot", timeout: float = 5):
        super().__init__(timeout=timeout)
        self.app_name = app_name

    @classmethod
    def from_config(cls, config: Config) -> AppProbe:
        return cls(app_name=config.app_name, timeout=config.probe_timeout)

    def probe(self) -> dict[str, Any]:
        # PackageNotFoundError propagates and selects the fallback
        version = metadata.version(self.app_name)
        if not version:
            raise ProbeError(f"No version recorded for {self.app_name}")

        return {
            "appVersion": version,
            "appVersionCode": self.version_code(version),
        }

    @staticmethod
    def version_code(version: str) -> int:
        """
        Derive a monotonic integer build code from a version string.

        major * 1_000_000 + minor * 1_000 + patch, each component clamped
        to 999. "1.4.2" -> 1004002, "2.0rc1" -> 2000000.
        """
        match = re.match(r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?", version.strip())
        if not match:
            return 0
        major, minor, patch = (int(part or 0) for part in match.groups())
        return major * 1_000_000 + min(minor, 999) * 1_000 + min(patch, 999)
