"""
Memory probe.

Reports total and available physical memory.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

import psutil

from device_snapshot.probes.base import BaseProbe, ProbeError


class MemoryProbe(BaseProbe):
    """Collects physical memory totals in bytes."""

    name = "memory"
    description = "Total, available, and used physical memory"
    fields = ("totalMemory", "availableMemory", "usedMemory")
    fallback = MappingProxyType({"totalMemory": 0, "availableMemory": 0, "usedMemory": 0})

    def probe(self) -> dict[str, Any]:
        mem = psutil.virtual_memory()
        total = int(mem.total)
        available = int(mem.available)
        if total <= 0 or not 0 <= available <= total:
            raise ProbeError(f"Implausible memory status: total={total} available={available}")

        # psutil's own `used` excludes buffers/cache; keep used = total - available
        return {
            "totalMemory": total,
            "availableMemory": available,
            "usedMemory": total - available,
        }
