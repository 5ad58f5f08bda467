"""
Base probe class that all probe groups inherit from.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from device_snapshot.schema import SnapshotError, Value, check_value

if TYPE_CHECKING:
    from device_snapshot.config import Config

logger = logging.getLogger(__name__)

COMMAND_TIMED_OUT = "Command timed out"


class ProbeError(Exception):
    """Raised by a probe when its subsystem is unavailable or returns nonsense."""


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of running one probe group: its fields, or a failure cause."""

    probe_name: str
    fields: dict[str, Value] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, probe_name: str, fields: dict[str, Value]) -> ProbeOutcome:
        return cls(probe_name=probe_name, fields=dict(fields))

    @classmethod
    def failed(cls, probe_name: str, error: str) -> ProbeOutcome:
        return cls(probe_name=probe_name, error=error or "unknown error")


class BaseProbe(ABC):
    """
    Abstract base class for all probe groups.

    Subclasses declare the ordered field names they produce and the
    fallback values reported when they fail, and implement `probe`
    to query the host.
    """

    name: str = "base"
    description: str = "Base probe"
    fields: tuple[str, ...] = ()
    fallback: Mapping[str, Value] = MappingProxyType({})

    def __init__(self, timeout: float = 5):
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.name}")
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: Config) -> BaseProbe:
        """Build the probe from configuration. Subclasses add their own settings."""
        return cls(timeout=config.probe_timeout)

    @abstractmethod
    def probe(self) -> dict[str, Value]:
        """
        Query the host and return this group's fields.

        Raises:
            ProbeError: If the subsystem is unsupported or reports nonsense.
            Any exception raised by the underlying OS call is also allowed
            to propagate; `run` contains it.
        """
        pass

    def run(self) -> ProbeOutcome:
        """
        Run the probe and contain any failure in a ProbeOutcome.

        The whole probe shares one time budget of `timeout` seconds. It runs
        in a daemon worker thread so that a call stuck in the kernel (a hung
        NFS mount under statvfs, say) cannot hold up the caller or interpreter
        exit. Output with missing, extra, or mistyped fields counts as a
        failure.
        """
        if not self.timeout or self.timeout <= 0:
            return self._run_checked(None)

        deadline = time.monotonic() + self.timeout
        outcome: list[ProbeOutcome] = []
        worker = threading.Thread(
            target=lambda: outcome.append(self._run_checked(deadline)),
            name=f"probe-{self.name}",
            daemon=True,
        )
        worker.start()
        worker.join(self.timeout)

        if worker.is_alive():
            self.logger.warning(f"Probe '{self.name}' timed out after {self.timeout}s")
            return ProbeOutcome.failed(self.name, f"timed out after {self.timeout}s")
        if not outcome:
            return ProbeOutcome.failed(self.name, "probe exited without a result")
        return outcome[0]

    def _run_checked(self, deadline: float | None) -> ProbeOutcome:
        self._local.deadline = deadline
        try:
            data = self.probe()
            if data is None:
                raise ProbeError("probe returned no data")
            self._check_fields(data)
        except Exception as e:
            cause = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            return ProbeOutcome.failed(self.name, cause)
        finally:
            self._local.deadline = None

        return ProbeOutcome.success(self.name, {name: data[name] for name in self.fields})

    def remaining_time(self) -> float | None:
        """Seconds left in the current run's budget, or None outside a timed run."""
        deadline = getattr(self._local, "deadline", None)
        if deadline is None:
            return None
        return max(deadline - time.monotonic(), 0.0)

    def fallback_fields(self) -> dict[str, Value]:
        """Return a fresh copy of the fallback values."""
        return {name: self.fallback[name] for name in self.fields}

    def _check_fields(self, data: dict[str, Any]) -> None:
        missing = [name for name in self.fields if name not in data]
        if missing:
            raise ProbeError(f"missing fields: {', '.join(missing)}")
        extra = [name for name in data if name not in self.fields]
        if extra:
            raise ProbeError(f"unexpected fields: {', '.join(extra)}")
        for name in self.fields:
            try:
                check_value(name, data[name])
            except SnapshotError as e:
                raise ProbeError(str(e)) from e

    def run_command(
        self,
        cmd: list[str],
        timeout: float | None = None,
    ) -> tuple[str, str, int]:
        """
        Run a command and return output.

        Args:
            cmd: Command and arguments as list.
            timeout: Timeout in seconds. Defaults to the probe timeout, and
                inside `run` never exceeds what is left of its budget.

        Returns:
            Tuple of (stdout, stderr, returncode). A timeout returns
            ("", "Command timed out", -1).
        """
        timeout = self.timeout if timeout is None else timeout
        remaining = self.remaining_time()
        if remaining is not None:
            if remaining <= 0:
                self.logger.warning(f"No time left to run: {' '.join(cmd)}")
                return "", COMMAND_TIMED_OUT, -1
            timeout = min(timeout, remaining) if timeout else remaining
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
            return result.stdout, result.stderr, result.returncode
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out: {' '.join(cmd)}")
            return "", COMMAND_TIMED_OUT, -1
        except FileNotFoundError:
            self.logger.debug(f"Command not found: {cmd[0]}")
            return "", f"Command not found: {cmd[0]}", -1

    def read_file(self, path: str, default: str = "") -> str:
        """
        Read a file and return its contents.

        Args:
            path: Path to the file.
            default: Default value if file cannot be read.

        Returns:
            File contents or default value.
        """
        try:
            with open(path) as f:
                return f.read()
        except OSError as e:
            self.logger.debug(f"Could not read {path}: {e}")
            return default

    def read_file_lines(self, path: str) -> list[str]:
        """Read a file and return lines as list."""
        content = self.read_file(path)
        if content:
            return content.strip().split("\n")
        return []

    def parse_key_value_file(self, path: str, separator: str = "=") -> dict[str, str]:
        """
        Parse a key=value style file such as a sysfs uevent.

        Blank lines and comments are skipped; surrounding quotes are stripped.
        """
        result = {}
        for line in self.read_file_lines(path):
            line = line.strip()
            if not line or line.startswith("#") or separator not in line:
                continue
            key, _, value = line.partition(separator)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            result[key.strip()] = value
        return result
