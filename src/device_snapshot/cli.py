"""
Command-line interface for Device Snapshot.

Provides commands for taking a device snapshot and inspecting probes.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from device_snapshot import __version__
from device_snapshot.config import Config
from device_snapshot.core import DeviceSnapshotCollector
from device_snapshot.schema import ErrorResult, SnapshotResult

console = Console()

# Display sections for pretty output: title -> [(label, field)]
SECTIONS: dict[str, list[tuple[str, str]]] = {
    "Operating System": [
        ("OS Name", "osName"),
        ("OS Version", "osVersion"),
        ("Platform", "platform"),
        ("API Level", "apiLevel"),
        ("Build Number", "buildNumber"),
    ],
    "Device Details": [
        ("Manufacturer", "manufacturer"),
        ("Brand", "brand"),
        ("Product", "product"),
        ("Device", "device"),
        ("Hardware", "hardware"),
    ],
    "Application": [
        ("Version", "appVersion"),
        ("Version Code", "appVersionCode"),
    ],
    "Display": [
        ("Width", "screenWidth"),
        ("Height", "screenHeight"),
        ("Density", "screenDensity"),
        ("DPI", "screenDensityDpi"),
    ],
    "Memory": [
        ("Total", "totalMemory"),
        ("Available", "availableMemory"),
        ("Used", "usedMemory"),
    ],
    "Storage": [
        ("Total", "totalStorage"),
        ("Available", "availableStorage"),
        ("Used", "usedStorage"),
    ],
    "Network": [
        ("Type", "networkType"),
        ("Connected", "isConnected"),
    ],
}

BYTE_FIELDS = {
    "totalMemory",
    "availableMemory",
    "usedMemory",
    "totalStorage",
    "availableStorage",
    "usedStorage",
}


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging with rich handler."""
    handlers: list[logging.Handler] = [RichHandler(console=Console(stderr=True), rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def format_bytes(size: int) -> str:
    """Convert bytes to human readable string."""
    if size == 0:
        return "0 B"
    size_float = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size_float) < 1024.0:
            return f"{size_float:.2f} {unit}"
        size_float /= 1024.0
    return f"{size_float:.2f} PB"


def format_value(field: str, value: Any) -> str:
    """Render a snapshot value for display."""
    if field in BYTE_FIELDS:
        return format_bytes(value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if field in ("screenWidth", "screenHeight"):
        return f"{value}px"
    return str(value)


@click.group()
@click.version_option(version=__version__, prog_name="device-snapshot")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """
    Device Snapshot - Host device information in one call.

    Collect OS, hardware, display, memory, storage, and network details.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = Config.load(config) if config else Config.load()

    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level, ctx.obj["config"].log_file)
    ctx.obj["verbose"] = verbose


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Write JSON output to file instead of stdout",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "pretty"]),
    default="pretty",
    help="Output format",
)
@click.pass_context
def collect(ctx: click.Context, output: Path | None, format: str) -> None:
    """
    Take a device snapshot.

    Every probe group runs once; groups that fail report fallback values.
    """
    config: Config = ctx.obj["config"]
    collector = DeviceSnapshotCollector(config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Collecting device information...", total=None)
        result = collector.collect()
        progress.update(task, completed=True)

    if isinstance(result, ErrorResult):
        console.print(f"[red]✗ {result.error}[/]")
        sys.exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.to_json())
        console.print(f"[dim]Snapshot saved to: {output}[/]")
    elif format == "json":
        console.print_json(result.to_json())
    else:
        _display_snapshot(result)


def _display_snapshot(snapshot: SnapshotResult) -> None:
    """Display the snapshot as one table per section."""
    console.print()
    console.print(Panel.fit("[bold blue]Device Information[/]", border_style="blue"))

    for title, rows in SECTIONS.items():
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for label, field in rows:
            table.add_row(label, format_value(field, snapshot[field]))
        console.print(table)


@main.command("probes")
def list_probes() -> None:
    """List probe groups in the order they run."""
    table = Table(title="Probe Groups", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Fields", style="dim")

    from device_snapshot.probes import PROBES

    for name, cls in PROBES.items():
        table.add_row(name, cls.description, ", ".join(cls.fields))

    console.print()
    console.print(table)


@main.command("version", short_help="Display version information")
def version() -> None:
    """Display version information for Device Snapshot."""
    table = Table(show_header=False, box=None)
    table.add_column("Component", style="dim", width=20)
    table.add_column("Version", style="cyan")

    table.add_row("Device Snapshot", __version__)
    table.add_row("Python", sys.version.split()[0])

    console.print()
    console.print(table)
    console.print()


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path) -> None:
    """
    Generate a sample configuration file.

    Creates a YAML configuration file with all available options.
    """
    sample_config = """# Device Snapshot Configuration

probes:
  # Distribution whose installed version is reported as appVersion
  app_name: device-snapshot

  # Mount point of the primary storage volume
  storage_path: /

  # Display metrics source: auto, modern (xrandr), legacy (xdpyinfo)
  display_strategy: auto

  # Wall-clock budget in seconds for each probe group, commands included
  timeout: 5

logging:
  # Log level: DEBUG, INFO, WARNING, ERROR
  level: INFO

  # Log file path (null = stderr only)
  file: null
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(sample_config)
    console.print(f"[green]✓ Configuration file created: {output_path}[/]")


if __name__ == "__main__":
    main()
