"""Integration tests for the ConfigManager."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from ram_lavalamp.core.config import DEFAULT_TIERS, ConfigManager
from ram_lavalamp.core.datatypes import Tier
from ram_lavalamp.core.exceptions import ConfigError


class TestConfigManagerDefaults:
    """Tests for in-memory configuration."""

    def test_get_returns_default_when_empty(self) -> None:
        """An empty config returns the provided default."""
        cfg = ConfigManager(config_dir=Path("/nonexistent"))
        assert cfg.get("fps", default=30) == 30

    def test_set_and_get(self) -> None:
        """Values set via ``set`` are retrievable."""
        cfg = ConfigManager(config_dir=Path("/nonexistent"))
        cfg.set("initial_scale", 2)

        assert cfg.get("initial_scale") == 2

    def test_default_settings(self, tmp_path: Path) -> None:
        """Without a file, settings mirror the built-in lamp defaults."""
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.set("assets_dir", str(tmp_path))
        settings = cfg.lamp_settings()

        assert settings.assets_dir == tmp_path
        assert (settings.frame_width, settings.frame_height) == (128, 128)
        assert settings.expected_frames == 90
        assert settings.scale_factors == (1, 2, 4, 8)
        assert settings.initial_scale == 1
        assert settings.fallback_tier is Tier.LOW
        assert [t.tier for t in settings.tiers] == list(Tier.ordered())
        assert [t.threshold for t in settings.tiers] == [0.0, 30.0, 50.0, 80.0]
        assert settings.tier_settings(Tier.CRITICAL).interval == timedelta(milliseconds=60)
        assert settings.tier_settings(Tier.LOW).sheet == DEFAULT_TIERS[Tier.LOW][2]


class TestConfigManagerToml:
    """Tests for TOML-based configuration loading."""

    def test_load_config_file(self, tmp_path: Path) -> None:
        """config.toml values override the defaults."""
        (tmp_path / "config.toml").write_text(
            'assets_dir = "/opt/lamp"\n'
            "scale_factors = [1, 3]\n"
            "initial_scale = 3\n"
            'fallback_tier = "HIGH"\n'
            "[tiers.critical]\n"
            "threshold = 90\n"
            "interval_ms = 40\n"
            'sheet = "purple.png"\n'
        )
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.load()
        settings = cfg.lamp_settings()

        assert settings.assets_dir == Path("/opt/lamp")
        assert settings.scale_factors == (1, 3)
        assert settings.initial_scale == 3
        assert settings.fallback_tier is Tier.HIGH
        critical = settings.tier_settings(Tier.CRITICAL)
        assert critical.threshold == 90.0
        assert critical.interval == timedelta(milliseconds=40)
        assert critical.sheet == "purple.png"
        assert settings.tier_settings(Tier.HIGH).interval == timedelta(milliseconds=100)

    def test_load_missing_dir_is_silent(self, tmp_path: Path) -> None:
        """Loading from a non-existent directory does not raise."""
        cfg = ConfigManager(config_dir=tmp_path / "does_not_exist")
        cfg.load()

        assert cfg.get("anything") is None

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        """A syntactically broken file raises ``ConfigError``."""
        (tmp_path / "config.toml").write_text("fps = = 3\n")
        cfg = ConfigManager(config_dir=tmp_path)

        with pytest.raises(ConfigError, match="not valid TOML"):
            cfg.load()


class TestConfigValidation:
    """Tests for rejected settings."""

    @pytest.mark.parametrize(
        ("key", "value", "match"),
        [
            ("frame_width", 0, "frame_width"),
            ("fps", "fast", "fps"),
            ("scale_factors", [2, 1], "ascending"),
            ("scale_factors", [], "ascending"),
            ("initial_scale", 3, "initial_scale"),
            ("sample_interval", -1, "sample_interval"),
            ("fallback_tier", "purple", "Unknown tier"),
            ("scale_factors", 2, "list of integers"),
            ("assets_dir", 5, "assets_dir"),
            ("tiers", 5, "per-tier tables"),
            ("tiers", {"low": 5}, "tiers.low"),
            ("tiers", {"low": {"interval_ms": 1e20}}, "too large"),
            ("tiers", {"medium": {"sheet": 3}}, "sheet"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, key: str, value: object, match: str) -> None:
        """Out-of-range values raise ``ConfigError`` naming the problem."""
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.set(key, value)

        with pytest.raises(ConfigError, match=match):
            cfg.lamp_settings()

    def test_thresholds_must_ascend(self, tmp_path: Path) -> None:
        """Tier thresholds out of order are rejected."""
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.set("tiers", {"high": {"threshold": 20}})

        with pytest.raises(ConfigError, match="strictly ascending"):
            cfg.lamp_settings()

    def test_interval_must_be_positive(self, tmp_path: Path) -> None:
        """A zero interval is rejected."""
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.set("tiers", {"low": {"interval_ms": 0}})

        with pytest.raises(ConfigError, match="interval_ms"):
            cfg.lamp_settings()

    def test_unknown_tier_table(self, tmp_path: Path) -> None:
        """Tables for tiers that do not exist are rejected."""
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.set("tiers", {"extreme": {"threshold": 95}})

        with pytest.raises(ConfigError, match="extreme"):
            cfg.lamp_settings()

    @pytest.mark.parametrize(
        "toml",
        [
            "scale_factors = 2\n",
            "[tiers]\nlow = 5\n",
            "assets_dir = 5\n",
            "[tiers.low]\ninterval_ms = 1e20\n",
        ],
    )
    def test_wrongly_typed_file_values(self, tmp_path: Path, toml: str) -> None:
        """Values of the wrong type in ``config.toml`` raise ``ConfigError``."""
        (tmp_path / "config.toml").write_text(toml)
        cfg = ConfigManager(config_dir=tmp_path)
        cfg.load()

        with pytest.raises(ConfigError):
            cfg.lamp_settings()
