"""
OS and hardware identity probe.

Reports OS release, kernel ABI level, build string, and DMI identity.
"""

from __future__ import annotations

import platform
import re
from types import MappingProxyType
from typing import Any

import distro

from device_snapshot.probes.base import BaseProbe, ProbeError

DMI_DIR = "/sys/class/dmi/id"


class IdentityProbe(BaseProbe):
    """Collects OS identity and hardware identifiers."""

    name = "identity"
    description = "OS release, API level, build and hardware identity"
    fields = (
        "osVersion",
        "osName",
        "platform",
        "apiLevel",
        "buildNumber",
        "manufacturer",
        "brand",
        "product",
        "device",
        "hardware",
    )
    fallback = MappingProxyType({
        "osVersion": "Unknown",
        "osName": "Unknown",
        "platform": "unknown",
        "apiLevel": 0,
        "buildNumber": "Unknown",
        "manufacturer": "Unknown",
        "brand": "Unknown",
        "product": "Unknown",
        "device": "Unknown",
        "hardware": "Unknown",
    })

    def probe(self) -> dict[str, Any]:
        uname = platform.uname()
        if not uname.system:
            raise ProbeError("OS family could not be determined")

        return {
            "osVersion": distro.version() or uname.release,
            "osName": uname.system,
            "platform": uname.system.lower(),
            "apiLevel": self.api_level(uname.release),
            "buildNumber": uname.version,
            "manufacturer": self._dmi("sys_vendor"),
            "brand": self._dmi("board_vendor"),
            "product": self._dmi("product_name"),
            "device": self._dmi("board_name"),
            "hardware": uname.machine or "unknown",
        }

    @staticmethod
    def api_level(release: str) -> int:
        """
        Encode a kernel release as an ABI version code.

        Uses the KERNEL_VERSION layout: (major << 16) + (minor << 8) + patch,
        with minor and patch clamped to 255. "6.5.11-300.fc39" -> 394507.
        """
        match = re.match(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?", release or "")
        if not match:
            return 0
        major, minor, patch = (int(part or 0) for part in match.groups())
        return (major << 16) + (min(minor, 255) << 8) + min(patch, 255)

    def _dmi(self, key: str) -> str:
        # Missing DMI entries read as "unknown", same as an unset build property
        return self.read_file(f"{DMI_DIR}/{key}").strip() or "unknown"
