"""
Display geometry probe.

Two metric sources feed the same DisplayMetrics shape: RandR via
`xrandr` on servers that report RandR 1.3 or newer, and `xdpyinfo`
on anything older. The source is picked per call.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable

from device_snapshot.probes.base import COMMAND_TIMED_OUT, BaseProbe, ProbeError

if TYPE_CHECKING:
    from device_snapshot.config import Config

CommandRunner = Callable[[list[str]], tuple[str, str, int]]

BASELINE_DPI = 160
DENSITY_BUCKETS = (120, 160, 213, 240, 320, 480, 640)
MODERN_RANDR_VERSION = (1, 3)
MM_PER_INCH = 25.4

_XRANDR_OUTPUT_RE = re.compile(
    r"^(?P<name>\S+) connected (?P<primary>primary )?"
    r"(?P<width>\d+)x(?P<height>\d+)\+\d+\+\d+"
    r"(?:.*?(?P<width_mm>\d+)mm x (?P<height_mm>\d+)mm)?",
    re.MULTILINE,
)
_RANDR_VERSION_RE = re.compile(r"RandR version (\d+)\.(\d+)")
_XDPYINFO_DIMENSIONS_RE = re.compile(r"dimensions:\s+(\d+)x(\d+) pixels")
_XDPYINFO_RESOLUTION_RE = re.compile(r"resolution:\s+(\d+)x(\d+) dots per inch")


@dataclass(frozen=True)
class DisplayMetrics:
    """Pixel geometry and density of the primary display."""

    width: int
    height: int
    density: float
    density_dpi: int

    @classmethod
    def from_dpi(cls, width: int, height: int, dpi: float) -> DisplayMetrics:
        """Build metrics, snapping raw dpi to the nearest density bucket."""
        if width <= 0 or height <= 0:
            raise ProbeError(f"Display reports invalid size {width}x{height}")
        bucket = min(DENSITY_BUCKETS, key=lambda b: abs(b - dpi))
        return cls(width=width, height=height, density=bucket / BASELINE_DPI, density_dpi=bucket)


class DisplayMetricsProvider(ABC):
    """A source of display metrics."""

    name: str = "base"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    @abstractmethod
    def metrics(self) -> DisplayMetrics:
        """Return metrics for the primary display or raise ProbeError."""
        pass

    def _query(self, cmd: list[str]) -> str:
        stdout, stderr, rc = self.runner(cmd)
        if rc != 0:
            raise ProbeError(f"{cmd[0]} failed: {stderr.strip() or f'exit code {rc}'}")
        return stdout


class ModernDisplayMetrics(DisplayMetricsProvider):
    """Primary output geometry and physical size from RandR."""

    name = "modern"

    def metrics(self) -> DisplayMetrics:
        stdout = self._query(["xrandr", "--query"])
        outputs = list(_XRANDR_OUTPUT_RE.finditer(stdout))
        if not outputs:
            raise ProbeError("xrandr reports no active output")

        primary = next((m for m in outputs if m.group("primary")), outputs[0])
        width = int(primary.group("width"))
        height = int(primary.group("height"))
        width_mm = int(primary.group("width_mm") or 0)

        # Outputs without EDID (VMs, projectors) report 0mm
        dpi = width / (width_mm / MM_PER_INCH) if width_mm else BASELINE_DPI
        return DisplayMetrics.from_dpi(width, height, dpi)


class LegacyDisplayMetrics(DisplayMetricsProvider):
    """Default screen geometry and resolution from xdpyinfo."""

    name = "legacy"

    def metrics(self) -> DisplayMetrics:
        stdout = self._query(["xdpyinfo"])
        dimensions = _XDPYINFO_DIMENSIONS_RE.search(stdout)
        if not dimensions:
            raise ProbeError("xdpyinfo reports no screen dimensions")

        resolution = _XDPYINFO_RESOLUTION_RE.search(stdout)
        dpi = int(resolution.group(1)) if resolution else BASELINE_DPI
        return DisplayMetrics.from_dpi(int(dimensions.group(1)), int(dimensions.group(2)), dpi)


def randr_version(runner: CommandRunner) -> tuple[int, int] | None:
    """
    Return the RandR version the X server reports, or None if unavailable.

    Raises:
        ProbeError: If the version query timed out; the group's budget is spent.
    """
    stdout, stderr, rc = runner(["xrandr", "--version"])
    if rc == -1 and stderr == COMMAND_TIMED_OUT:
        raise ProbeError("xrandr --version timed out")
    if rc != 0:
        return None
    match = _RANDR_VERSION_RE.search(stdout)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def select_display_provider(runner: CommandRunner, strategy: str = "auto") -> DisplayMetricsProvider:
    """
    Pick the display metrics source.

    Args:
        runner: Callable running a command and returning (stdout, stderr, rc).
        strategy: "modern", "legacy", or "auto" to detect from the server.
    """
    if strategy == "modern":
        return ModernDisplayMetrics(runner)
    if strategy == "legacy":
        return LegacyDisplayMetrics(runner)

    version = randr_version(runner)
    if version is not None and version >= MODERN_RANDR_VERSION:
        return ModernDisplayMetrics(runner)
    return LegacyDisplayMetrics(runner)


class DisplayProbe(BaseProbe):
    """Collects primary display geometry."""

    name = "display"
    description = "Screen size in pixels and density"
    fields = ("screenWidth", "screenHeight", "screenDensity", "screenDensityDpi")
    fallback = MappingProxyType({
        "screenWidth": 0,
        "screenHeight": 0,
        "screenDensity": 1.0,
        "screenDensityDpi": 160,
    })

    def __init__(self, strategy: str = "auto", timeout: float = 5):
        super().__init__(timeout=timeout)
        self.strategy = strategy

    @classmethod
    def from_config(cls, config: Config) -> DisplayProbe:
        return cls(strategy=config.display_strategy, timeout=config.probe_timeout)

    def probe(self) -> dict[str, Any]:
        provider = select_display_provider(self.run_command, self.strategy)
        self.logger.debug(f"Using {provider.name} display metrics")
        metrics = provider.metrics()

        return {
            "screenWidth": metrics.width,
            "screenHeight": metrics.height,
            "screenDensity": metrics.density,
            "screenDensityDpi": metrics.density_dpi,
        }
