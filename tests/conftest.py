"""Shared fixtures: headless Qt and on-disk sprite sheet assets."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

FRAME_SIZE = 8

SHEET_NAMES = {
    "low": "lavalampe_green.png",
    "medium": "lavalampe_yellow.png",
    "high": "lavalampe_orange.png",
    "critical": "lavalampe_red.png",
}


def write_strip(path: Path, frames: int, *, frame_size: int = FRAME_SIZE, height: int | None = None) -> Path:
    """Write an RGBA strip of *frames* solid-coloured square frames."""
    img = Image.new("RGBA", (frames * frame_size, height or frame_size))
    for i in range(frames):
        img.paste((i * 20, 100, 200, 255), (i * frame_size, 0, (i + 1) * frame_size, img.height))
    img.save(str(path))
    return path


@pytest.fixture()
def asset_dir(tmp_path: Path) -> Path:
    """Create an asset directory with a 4-frame sheet for every tier."""
    assets = tmp_path / "assets"
    assets.mkdir()
    for name in SHEET_NAMES.values():
        write_strip(assets / name, 4)
    return assets


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    """Create a config directory matching the small test sheets."""
    cfg = tmp_path / "cfg"
    cfg.mkdir()
    (cfg / "config.toml").write_text(f"frame_width = {FRAME_SIZE}\nframe_height = {FRAME_SIZE}\nexpected_frames = 4\n")
    return cfg
