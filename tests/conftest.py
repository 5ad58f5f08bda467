"""
Pytest fixtures and configuration for Device Snapshot tests.

Provides sample command outputs, a reference snapshot, and helpers for
building probes with canned or failing results.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from device_snapshot.probes import (
    AppProbe,
    DisplayProbe,
    IdentityProbe,
    MemoryProbe,
    NetworkProbe,
    StorageProbe,
)

GIB = 1024 * 1024 * 1024

PROBE_CLASSES = [IdentityProbe, AppProbe, DisplayProbe, MemoryProbe, StorageProbe, NetworkProbe]

REFERENCE_FIELDS: dict[str, Any] = {
    "osVersion": "39",
    "osName": "Linux",
    "platform": "linux",
    "apiLevel": 394507,
    "buildNumber": "#1 SMP PREEMPT_DYNAMIC Wed Nov 22 19:08:19 UTC 2023",
    "manufacturer": "Dell Inc.",
    "brand": "Dell Inc.",
    "product": "XPS 13 9380",
    "device": "0KTW76",
    "hardware": "x86_64",
    "appVersion": "1.4.2",
    "appVersionCode": 1004002,
    "screenWidth": 1920,
    "screenHeight": 1080,
    "screenDensity": 1.0,
    "screenDensityDpi": 160,
    "totalMemory": 16 * GIB,
    "availableMemory": 6 * GIB,
    "usedMemory": 10 * GIB,
    "totalStorage": 500 * GIB,
    "availableStorage": 200 * GIB,
    "usedStorage": 300 * GIB,
    "isConnected": True,
    "networkType": "WIFI",
}


def static_probe(cls, **overrides):
    """Instance of a probe class whose probe() returns reference values."""
    probe = cls()
    data = {name: REFERENCE_FIELDS[name] for name in cls.fields}
    data.update(overrides)
    probe.probe = MagicMock(return_value=data)
    return probe


def failing_probe(cls, error: Exception | None = None):
    """Instance of a probe class whose probe() raises."""
    probe = cls()
    probe.probe = MagicMock(side_effect=error or RuntimeError("simulated failure"))
    return probe


@pytest.fixture
def reference_fields():
    """Field values every healthy probe set reports."""
    return dict(REFERENCE_FIELDS)


@pytest.fixture
def healthy_probes():
    """One healthy probe per group, in run order."""
    return [static_probe(cls) for cls in PROBE_CLASSES]


# Command output fixtures
@pytest.fixture
def sample_xrandr_version_output():
    """Sample output from xrandr --version."""
    return "xrandr program version       1.5.2\nServer reports RandR version 1.6\n"


@pytest.fixture
def sample_xrandr_query_output():
    """Sample output from xrandr --query with a primary laptop panel."""
    return """Screen 0: minimum 320 x 200, current 4480 x 1440, maximum 16384 x 16384
eDP-1 connected primary 1920x1080+0+360 (normal left inverted right x axis y axis) 294mm x 165mm
   1920x1080     60.02*+  59.93
   1680x1050     59.88
HDMI-1 disconnected (normal left inverted right x axis y axis)
DP-1 connected 2560x1440+1920+0 (normal left inverted right x axis y axis) 597mm x 336mm
   2560x1440     59.95*+
"""


@pytest.fixture
def sample_xdpyinfo_output():
    """Sample output from xdpyinfo (screen section)."""
    return """name of display:    :0
version number:    11.0
vendor string:    The X.Org Foundation
number of screens:    1

screen #0:
  dimensions:    1366x768 pixels (361x203 millimeters)
  resolution:    96x96 dots per inch
  depths (7):    24, 1, 4, 8, 15, 16, 32
"""


@pytest.fixture
def sample_proc_net_route():
    """Sample /proc/net/route with a Wi-Fi default route and a docker bridge."""
    return [
        "Iface\tDestination\tGateway \tFlags\tRefCnt\tUse\tMetric\tMask\t\tMTU\tWindow\tIRTT",
        "wlp2s0\t00000000\t0101A8C0\t0003\t0\t0\t600\t00000000\t0\t0\t0",
        "enp0s31f6\t00000000\t0101A8C0\t0003\t0\t0\t100\t00000000\t0\t0\t0",
        "docker0\t000011AC\t00000000\t0001\t0\t0\t0\t0000FFFF\t0\t0\t0",
    ]


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "cli: marks CLI tests")
