"""
Network reachability probe.

Finds the active interface (the one carrying the default route, else the
first interface that is up and addressed) and classifies its type.
"""

from __future__ import annotations

import socket
from types import MappingProxyType
from typing import Any

import psutil

from device_snapshot.probes.base import BaseProbe

PROC_NET_ROUTE = "/proc/net/route"
SYS_CLASS_NET = "/sys/class/net"
RTF_UP = 0x0001
IFF_LOOPBACK = 0x8

DEVTYPE_NAMES = {
    "wlan": "WIFI",
    "wwan": "MOBILE",
    "bluetooth": "BLUETOOTH",
}

# Checked in order; first matching prefix wins
PREFIX_NAMES = (
    (("wlan", "wlp", "wl", "ath"), "WIFI"),
    (("eth", "enp", "ens", "eno", "enx", "en", "em"), "ETHERNET"),
    (("wwan", "rmnet", "ppp", "ccmni"), "MOBILE"),
    (("tun", "tap", "wg", "vpn", "ipsec"), "VPN"),
    (("bnep",), "BLUETOOTH"),
)


class NetworkProbe(BaseProbe):
    """Collects connectivity state of the active network interface."""

    name = "network"
    description = "Whether an active interface is connected, and its type"
    fields = ("isConnected", "networkType")
    fallback = MappingProxyType({"isConnected": False, "networkType": "Unknown"})

    def probe(self) -> dict[str, Any]:
        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()

        iface = self.active_interface(stats, addrs)
        if iface is None:
            self.logger.debug("No active network interface")
            return {"isConnected": False, "networkType": "Unknown"}

        return {
            "isConnected": bool(stats[iface].isup),
            "networkType": self.interface_type(iface),
        }

    def active_interface(self, stats: dict[str, Any], addrs: dict[str, Any]) -> str | None:
        """Return the name of the active interface, or None if there is none."""
        route_iface = self._default_route_interface()
        if route_iface and route_iface in stats:
            return route_iface

        for name, stat in stats.items():
            if not stat.isup or self.is_loopback(name):
                continue
            families = {addr.family for addr in addrs.get(name, [])}
            if families & {socket.AF_INET, socket.AF_INET6}:
                return name
        return None

    def is_loopback(self, iface: str) -> bool:
        """Check the interface flags for IFF_LOOPBACK; by name if sysfs is unavailable."""
        flags = self.read_file(f"{SYS_CLASS_NET}/{iface}/flags").strip()
        try:
            return bool(int(flags, 16) & IFF_LOOPBACK)
        except ValueError:
            return iface in ("lo", "lo0")

    def _default_route_interface(self) -> str | None:
        best: tuple[int, str] | None = None
        # Iface Destination Gateway Flags RefCnt Use Metric Mask ...
        for line in self.read_file_lines(PROC_NET_ROUTE)[1:]:
            cols = line.split()
            if len(cols) < 7 or cols[1] != "00000000":
                continue
            try:
                flags = int(cols[3], 16)
                metric = int(cols[6])
            except ValueError:
                continue
            if not flags & RTF_UP:
                continue
            if best is None or metric < best[0]:
                best = (metric, cols[0])
        return best[1] if best else None

    def interface_type(self, iface: str) -> str:
        """Classify an interface as WIFI, ETHERNET, MOBILE, VPN, BLUETOOTH or Unknown."""
        uevent = self.parse_key_value_file(f"{SYS_CLASS_NET}/{iface}/uevent")
        devtype = uevent.get("DEVTYPE", "")
        if devtype in DEVTYPE_NAMES:
            return DEVTYPE_NAMES[devtype]

        lowered = iface.lower()
        for prefixes, type_name in PREFIX_NAMES:
            if lowered.startswith(prefixes):
                return type_name
        return "Unknown"
