"""
Host probes for Device Snapshot.

Each probe queries one independent subsystem and yields a fixed subset
of snapshot fields. Probes run in registry order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from device_snapshot.probes.app import AppProbe
from device_snapshot.probes.base import BaseProbe, ProbeError, ProbeOutcome
from device_snapshot.probes.display import DisplayProbe
from device_snapshot.probes.identity import IdentityProbe
from device_snapshot.probes.memory import MemoryProbe
from device_snapshot.probes.network import NetworkProbe
from device_snapshot.probes.storage import StorageProbe

if TYPE_CHECKING:
    from device_snapshot.config import Config

# Registry of probe groups in run order
PROBES: dict[str, type[BaseProbe]] = {
    "identity": IdentityProbe,
    "app": AppProbe,
    "display": DisplayProbe,
    "memory": MemoryProbe,
    "storage": StorageProbe,
    "network": NetworkProbe,
}


def build_probes(config: Config) -> list[BaseProbe]:
    """Instantiate every registered probe group, in run order, from configuration."""
    return [cls.from_config(config) for cls in PROBES.values()]


__all__ = [
    "BaseProbe",
    "ProbeError",
    "ProbeOutcome",
    "IdentityProbe",
    "AppProbe",
    "DisplayProbe",
    "MemoryProbe",
    "StorageProbe",
    "NetworkProbe",
    "build_probes",
    "PROBES",
]
