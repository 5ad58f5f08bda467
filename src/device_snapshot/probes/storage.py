"""
Storage probe.

Reports capacity of the primary storage volume from filesystem block counts.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from device_snapshot.probes.base import BaseProbe, ProbeError

if TYPE_CHECKING:
    from device_snapshot.config import Config


class StorageProbe(BaseProbe):
    """Collects primary volume capacity in bytes."""

    name = "storage"
    description = "Total, available, and used space on the primary volume"
    fields = ("totalStorage", "availableStorage", "usedStorage")
    fallback = MappingProxyType({"totalStorage": 0, "availableStorage": 0, "usedStorage": 0})

    def __init__(self, path: str = "/", timeout: float = 5):
        super().__init__(timeout=timeout)
        self.path = path

    @classmethod
    def from_config(cls, config: Config) -> StorageProbe:
        return cls(path=config.storage_path, timeout=config.probe_timeout)

    def probe(self) -> dict[str, Any]:
        stat = os.statvfs(self.path)
        block_size = stat.f_frsize or stat.f_bsize
        total_blocks = stat.f_blocks
        available_blocks = stat.f_bavail
        if block_size <= 0 or total_blocks <= 0:
            raise ProbeError(f"No block statistics for {self.path}")

        # Space reserved for root counts as used
        return {
            "totalStorage": total_blocks * block_size,
            "availableStorage": available_blocks * block_size,
            "usedStorage": (total_blocks - available_blocks) * block_size,
        }
