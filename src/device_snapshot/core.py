"""
Core orchestration module for Device Snapshot.

Runs every probe group in order and aggregates their fields, or their
fallback values, into a single snapshot.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any, Union

from device_snapshot.config import Config
from device_snapshot.probes import BaseProbe, build_probes
from device_snapshot.schema import ErrorResult, SnapshotResult

logger = logging.getLogger(__name__)

CollectResult = Union[SnapshotResult, ErrorResult]


class DeviceSnapshotCollector:
    """
    Aggregates independent probe groups into one device snapshot.

    A failing probe never fails the snapshot: its fallback values are
    reported instead. Only a failure of the aggregation itself produces
    an ErrorResult.
    """

    def __init__(self, config: Config | None = None, probes: Sequence[BaseProbe] | None = None):
        self.config = config or Config()
        self.probes = list(probes) if probes is not None else build_probes(self.config)
        self._check_disjoint()

    def _check_disjoint(self) -> None:
        seen: dict[str, str] = {}
        for probe in self.probes:
            for name in probe.fields:
                if name in seen:
                    raise ValueError(
                        f"Field '{name}' produced by both '{seen[name]}' and '{probe.name}'"
                    )
                seen[name] = probe.name

    def collect(self) -> CollectResult:
        """
        Take one snapshot of the host.

        Returns:
            SnapshotResult with every field populated, or ErrorResult if
            building the result itself failed.
        """
        try:
            fields = self._new_mapping()
            logger.debug(f"Running {len(self.probes)} probes")

            for probe in self.probes:
                fields.update(self._run_probe(probe))

            return self._wrap(fields)
        except Exception as e:
            logger.error(f"Error getting device info: {e}", exc_info=True)
            return ErrorResult(error=f"Failed to get device info: {str(e) or type(e).__name__}")

    def _new_mapping(self) -> dict[str, Any]:
        return {}

    def _wrap(self, fields: dict[str, Any]) -> SnapshotResult:
        return SnapshotResult(fields)

    def _run_probe(self, probe: BaseProbe) -> dict[str, Any]:
        start = time.perf_counter()
        outcome = probe.run()
        duration = (time.perf_counter() - start) * 1000

        if outcome.ok:
            logger.debug(f"Probe '{probe.name}' completed in {duration:.2f}ms")
            return outcome.fields

        logger.warning(f"Probe '{probe.name}' failed, using fallback values: {outcome.error}")
        return probe.fallback_fields()


def collect_snapshot(config: Config | None = None) -> dict[str, Any]:
    """
    Convenience function to take a snapshot.

    Returns:
        The snapshot fields as a plain dict, or {"error": message}.
    """
    return DeviceSnapshotCollector(config).collect().to_dict()


__all__ = ["DeviceSnapshotCollector", "CollectResult", "collect_snapshot"]
