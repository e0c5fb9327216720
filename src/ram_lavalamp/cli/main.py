"""CLI entry point — loads settings and sheets, then hands over to the window."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from ram_lavalamp.core import events
from ram_lavalamp.core.config import ConfigManager, LampSettings
from ram_lavalamp.core.events import EventBus
from ram_lavalamp.core.exceptions import ConfigError, FatalAssetError
from ram_lavalamp.engine.sheets import SheetSet, load_sheet_set

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _configure_logging(verbosity: int) -> None:
    """Route log records to stderr at a level chosen by ``-v`` repetitions."""
    level = _LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)-7s %(name)s: %(message)s")


def _build_settings(
    config_dir: str | None,
    assets: str | None,
    scale: int | None,
    fps: int | None,
) -> LampSettings:
    """Merge ``config.toml`` with command-line overrides."""
    config = ConfigManager(config_dir=Path(config_dir) if config_dir else None)
    config.load()
    if assets is not None:
        config.set("assets_dir", assets)
    if scale is not None:
        config.set("initial_scale", scale)
    if fps is not None:
        config.set("fps", fps)
    return config.lamp_settings()


def _load_sheets(settings: LampSettings, bus: EventBus) -> SheetSet:
    """Load every tier's sheet or fail the command."""
    try:
        return load_sheet_set(
            settings.assets_dir,
            settings.tiers,
            settings.frame_width,
            settings.frame_height,
            fallback_tier=settings.fallback_tier,
            expected_frames=settings.expected_frames,
            event_bus=bus,
        )
    except FatalAssetError as exc:
        raise click.ClickException(str(exc)) from exc


@click.command(name="ram-lavalamp")
@click.version_option(package_name="ram-lavalamp")
@click.option(
    "-a",
    "--assets",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Directory containing the tier sprite sheets.",
)
@click.option(
    "-c",
    "--config-dir",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Directory holding config.toml (default: ~/.config/ram-lavalampe).",
)
@click.option("-s", "--scale", type=int, default=None, help="Initial scale factor (must be an allowed factor).")
@click.option("--fps", type=click.IntRange(min=1, max=240), default=None, help="Target ticks per second.")
@click.option("--check", is_flag=True, default=False, help="Validate the sprite sheets and exit.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(
    assets: str | None,
    config_dir: str | None,
    scale: int | None,
    fps: int | None,
    check: bool,
    verbose: int,
) -> None:
    """RAM Lava Lamp — a lava lamp whose colour and pace follow memory usage.

    Keys: + / = scale up, - scale down, Esc / q quit.  Drag to move.
    """
    _configure_logging(verbose)

    try:
        settings = _build_settings(config_dir, assets, scale, fps)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    bus = EventBus()
    bus.subscribe(
        events.LOAD_ERROR,
        lambda **kw: click.echo(f"Warning: {kw['tier'].value} sheet unusable, showing {kw['fallback'].value}", err=True),
    )
    sheets = _load_sheets(settings, bus)

    if check:
        _report(settings, sheets)
        return

    from ram_lavalamp.gui.app import run

    exit_code = run(settings, sheets, event_bus=bus)
    if exit_code != 0:
        raise click.exceptions.Exit(exit_code)


def _report(settings: LampSettings, sheets: SheetSet) -> None:
    """Print one line per tier describing the sheet it will play."""
    click.echo(f"Assets: {settings.assets_dir}")
    for entry in settings.tiers:
        sheet = sheets.sheet_for(entry.tier)
        line: dict[str, Any] = {
            "tier": entry.tier.value,
            "from": f"{entry.threshold:g}%",
            "interval": f"{entry.interval.total_seconds() * 1000:g}ms",
            "frames": sheet.frame_count,
        }
        text = "  ".join(f"{key}={value}" for key, value in line.items())
        if sheets.is_substituted(entry.tier):
            text += f"  fallback={sheets.substitutions[entry.tier].value}"
        click.echo(text)
