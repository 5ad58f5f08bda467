"""
Host bridge for Device Snapshot.

Exposes the collector under a callable name for embedding runtimes:
a callback entry point that always receives a dict, and an awaitable
one that raises when the snapshot could not be built.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from device_snapshot.config import Config
from device_snapshot.core import DeviceSnapshotCollector
from device_snapshot.schema import ErrorResult

logger = logging.getLogger(__name__)


class DeviceInfoError(Exception):
    """Raised by the awaitable bridge call when collection failed outright."""


class DeviceInfoModule:
    """
    Bridge-facing service wrapping one DeviceSnapshotCollector.

    Constructed once at process start; holds no per-call state.
    """

    name = "DeviceInfoModule"

    def __init__(self, collector: DeviceSnapshotCollector | None = None, config: Config | None = None):
        self.collector = collector or DeviceSnapshotCollector(config)

    def get_device_info(self, callback: Callable[[dict[str, Any]], Any]) -> None:
        """Collect a snapshot and pass it, or {"error": message}, to callback."""
        callback(self.collector.collect().to_dict())

    async def get_device_info_async(self) -> dict[str, Any]:
        """
        Collect a snapshot without blocking the event loop.

        Raises:
            DeviceInfoError: If the collector returned an error result.
        """
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.collector.collect)
        if isinstance(result, ErrorResult):
            raise DeviceInfoError(result.error)
        return result.to_dict()

    def methods(self) -> dict[str, Callable[..., Any]]:
        """Map exported method names to callables for registration with a host."""
        return {
            "getDeviceInfo": self.get_device_info,
            "getDeviceInfoAsync": self.get_device_info_async,
        }
