"""ConfigManager — lamp settings backed by a TOML file."""

from __future__ import annotations

import logging
import math
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from ram_lavalamp.core.datatypes import Tier, TierSettings
from ram_lavalamp.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "ram-lavalampe"
_INSTALLED_ASSETS_DIR = Path.home() / ".local" / "share" / "ram-lavalampe" / "assets"

# ── Defaults ──────────────────────────────────────────────────────────────

DEFAULT_FRAME_SIZE = 128
DEFAULT_EXPECTED_FRAMES = 90
DEFAULT_SCALE_FACTORS: tuple[int, ...] = (1, 2, 4, 8)
DEFAULT_FPS = 60
DEFAULT_SAMPLE_INTERVAL = 0.5

DEFAULT_TIERS: dict[Tier, tuple[float, int, str]] = {
    Tier.LOW: (0.0, 200, "lavalampe_green.png"),
    Tier.MEDIUM: (30.0, 150, "lavalampe_yellow.png"),
    Tier.HIGH: (50.0, 100, "lavalampe_orange.png"),
    Tier.CRITICAL: (80.0, 60, "lavalampe_red.png"),
}


@dataclass(frozen=True)
class LampSettings:
    """Validated settings the engine and window are built from."""

    assets_dir: Path
    frame_width: int
    frame_height: int
    expected_frames: int
    scale_factors: tuple[int, ...]
    initial_scale: int
    fps: int
    sample_interval: float
    fallback_tier: Tier
    tiers: tuple[TierSettings, ...]

    def tier_settings(self, tier: Tier) -> TierSettings:
        """Return the settings entry for *tier*."""
        for entry in self.tiers:
            if entry.tier is tier:
                return entry
        msg = f"No settings for tier '{tier.value}'"
        raise ConfigError(msg)


def default_assets_dir() -> Path:
    """Return the installed asset directory if present, else ``./assets``."""
    if _INSTALLED_ASSETS_DIR.is_dir():
        return _INSTALLED_ASSETS_DIR
    return Path.cwd() / "assets"


class ConfigManager:
    """TOML-backed configuration manager.

    Settings are read from ``config.toml`` inside ``config_dir`` and may
    be overridden in memory (the CLI does this for its options) before
    ``lamp_settings()`` turns them into a validated ``LampSettings``.

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/ram-lavalampe/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialise the config manager.

        Args:
            config_dir: Custom configuration directory.  Uses the
                        platform default if ``None``.
        """
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._values: dict[str, Any] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load ``config.toml`` from ``config_dir``.

        A missing file is silently skipped.

        Raises:
            ConfigError: If the file exists but is not valid TOML.
        """
        config_file = self._config_dir / "config.toml"
        if not config_file.is_file():
            return
        try:
            with config_file.open("rb") as fh:
                self._values = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Config file '{config_file}' is not valid TOML"
            raise ConfigError(msg) from exc
        logger.info("Loaded config from %s", config_file)

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a config value.

        Args:
            key: The configuration key.
            default: Fallback value when the key is not found.

        Returns:
            The configuration value, or *default*.
        """
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (in-memory only).

        Args:
            key: The configuration key.
            value: The value to store.
        """
        self._values[key] = value

    def lamp_settings(self) -> LampSettings:
        """Build validated settings from the loaded values and defaults.

        Returns:
            A frozen ``LampSettings``.

        Raises:
            ConfigError: If any value is out of range or inconsistent.
        """
        raw_assets = self.get("assets_dir")
        if raw_assets is not None and not isinstance(raw_assets, str):
            msg = f"assets_dir must be a path string, got {raw_assets!r}"
            raise ConfigError(msg)
        assets_dir = Path(raw_assets).expanduser() if raw_assets else default_assets_dir()

        frame_width = _positive_int("frame_width", self.get("frame_width", DEFAULT_FRAME_SIZE))
        frame_height = _positive_int("frame_height", self.get("frame_height", DEFAULT_FRAME_SIZE))
        expected_frames = _positive_int("expected_frames", self.get("expected_frames", DEFAULT_EXPECTED_FRAMES))
        fps = _positive_int("fps", self.get("fps", DEFAULT_FPS))

        raw_factors = self.get("scale_factors", DEFAULT_SCALE_FACTORS)
        if not isinstance(raw_factors, (list, tuple)):
            msg = f"scale_factors must be a list of integers, got {raw_factors!r}"
            raise ConfigError(msg)
        factors = tuple(_positive_int("scale_factors", f) for f in raw_factors)
        if not factors or any(a >= b for a, b in zip(factors, factors[1:])):
            msg = f"scale_factors must be a non-empty, strictly ascending list, got {list(factors)}"
            raise ConfigError(msg)

        initial_scale = self.get("initial_scale", factors[0])
        if initial_scale not in factors:
            msg = f"initial_scale must be one of {list(factors)}, got {initial_scale}"
            raise ConfigError(msg)

        sample_interval = self.get("sample_interval", DEFAULT_SAMPLE_INTERVAL)
        if not isinstance(sample_interval, (int, float)) or sample_interval < 0:
            msg = f"sample_interval must be >= 0 seconds, got {sample_interval!r}"
            raise ConfigError(msg)

        return LampSettings(
            assets_dir=assets_dir,
            frame_width=frame_width,
            frame_height=frame_height,
            expected_frames=expected_frames,
            scale_factors=factors,
            initial_scale=initial_scale,
            fps=fps,
            sample_interval=float(sample_interval),
            fallback_tier=_parse_tier(self.get("fallback_tier", Tier.LOW.value)),
            tiers=self._tier_settings(),
        )

    def _tier_settings(self) -> tuple[TierSettings, ...]:
        """Merge ``[tiers.<name>]`` tables over the built-in tier defaults."""
        overrides = self.get("tiers", {}) or {}
        if not isinstance(overrides, dict):
            msg = f"tiers must be a table of per-tier tables, got {overrides!r}"
            raise ConfigError(msg)
        unknown = set(overrides) - {tier.value for tier in Tier}
        if unknown:
            msg = f"Unknown tier(s) in config: {sorted(unknown)}"
            raise ConfigError(msg)

        entries: list[TierSettings] = []
        for tier in Tier.ordered():
            threshold, interval_ms, sheet = DEFAULT_TIERS[tier]
            table = overrides.get(tier.value, {})
            if not isinstance(table, dict):
                msg = f"tiers.{tier.value} must be a table, got {table!r}"
                raise ConfigError(msg)
            threshold = table.get("threshold", threshold)
            interval_ms = table.get("interval_ms", interval_ms)
            sheet = table.get("sheet", sheet)

            if not isinstance(interval_ms, (int, float)) or interval_ms <= 0:
                msg = f"Tier '{tier.value}' interval_ms must be > 0, got {interval_ms!r}"
                raise ConfigError(msg)
            if not isinstance(threshold, (int, float)) or math.isnan(threshold):
                msg = f"Tier '{tier.value}' threshold must be a number, got {threshold!r}"
                raise ConfigError(msg)

            try:
                interval = timedelta(milliseconds=interval_ms)
            except OverflowError as exc:
                msg = f"Tier '{tier.value}' interval_ms is too large, got {interval_ms!r}"
                raise ConfigError(msg) from exc
            if not isinstance(sheet, str) or not sheet:
                msg = f"Tier '{tier.value}' sheet must be a file name, got {sheet!r}"
                raise ConfigError(msg)

            entries.append(TierSettings(tier=tier, threshold=float(threshold), interval=interval, sheet=sheet))

        thresholds = [entry.threshold for entry in entries]
        if thresholds[0] != 0 or any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            msg = f"Tier thresholds must start at 0 and be strictly ascending, got {thresholds}"
            raise ConfigError(msg)

        return tuple(entries)


def _positive_int(name: str, value: Any) -> int:
    """Return *value* if it is a positive integer, else raise ``ConfigError``."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ConfigError(msg)
    return value


def _parse_tier(value: Any) -> Tier:
    """Convert a tier name such as ``"low"`` into a ``Tier``."""
    try:
        return Tier(str(value).lower())
    except ValueError as exc:
        msg = f"Unknown tier '{value}'. Choose from: {[t.value for t in Tier]}"
        raise ConfigError(msg) from exc
