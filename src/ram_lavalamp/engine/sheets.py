"""Sprite sheet decoding, validation and the per-tier sheet set."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image

from ram_lavalamp.core import events
from ram_lavalamp.core.datatypes import SpriteSheet, Tier, TierSettings
from ram_lavalamp.core.events import EventBus
from ram_lavalamp.core.exceptions import (
    DimensionMismatchError,
    EmptySheetError,
    FatalAssetError,
    SheetLoadError,
    UnreadableSheetError,
)

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────────────────


def build_sprite_sheet(
    pixels: np.ndarray,
    frame_width: int,
    frame_height: int,
    *,
    source: Path | None = None,
) -> SpriteSheet:
    """Validate decoded RGBA pixels and wrap them as a ``SpriteSheet``.

    Args:
        pixels: Array of shape ``(height, width, 4)``.
        frame_width: Width of a single frame.
        frame_height: Height of a single frame (and of the whole strip).
        source: Optional file the pixels were decoded from.

    Returns:
        A read-only ``SpriteSheet``.

    Raises:
        DimensionMismatchError: If the height differs from *frame_height*
            or the width is not an exact multiple of *frame_width*.
        EmptySheetError: If the strip holds no frames.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        msg = f"Sprite sheet must be RGBA with shape (h, w, 4), got {pixels.shape}"
        raise DimensionMismatchError(msg)

    height, width = int(pixels.shape[0]), int(pixels.shape[1])
    if height != frame_height:
        msg = f"Sprite sheet height {height} does not match frame height {frame_height}"
        raise DimensionMismatchError(msg)
    if width % frame_width != 0:
        msg = f"Sprite sheet width {width} is not a multiple of frame width {frame_width}"
        raise DimensionMismatchError(msg)
    if width // frame_width == 0:
        msg = f"Sprite sheet width {width} holds no frames of width {frame_width}"
        raise EmptySheetError(msg)

    frozen = np.array(pixels, dtype=np.uint8)
    frozen.flags.writeable = False
    return SpriteSheet(frame_width=frame_width, frame_height=frame_height, pixels=frozen, source=source)


# ── Decoding ──────────────────────────────────────────────────────────────


def decode_sprite_sheet(path: Path) -> np.ndarray:
    """Decode an image file into an RGBA ``uint8`` array.

    Images without an alpha channel come back fully opaque.

    Args:
        path: Image file to open.

    Returns:
        Array of shape ``(height, width, 4)``.

    Raises:
        UnreadableSheetError: If the file is missing, cannot be decoded, or
            exceeds Pillow's decompression-bomb limit.
    """
    if not path.is_file():
        msg = f"Sprite sheet not found at '{path}'"
        raise UnreadableSheetError(msg)
    try:
        with Image.open(path) as img:
            rgba = img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        msg = f"Sprite sheet '{path}' could not be decoded"
        raise UnreadableSheetError(msg) from exc
    return np.asarray(rgba, dtype=np.uint8)


def load_sprite_sheet(path: Path, frame_width: int, frame_height: int) -> SpriteSheet:
    """Decode and validate one sheet file.

    Raises:
        SheetLoadError: Any of its subclasses, if the file is unusable.
    """
    return build_sprite_sheet(decode_sprite_sheet(path), frame_width, frame_height, source=path)


# ── Sheet set ─────────────────────────────────────────────────────────────


@dataclass
class SheetSet:
    """The sheets the engine plays from, one per tier.

    Attributes:
        sheets: Tier to sheet; a failed tier maps to its substitute's sheet.
        substitutions: Failed tier to the tier whose sheet replaced it.
        errors: Failed tier to the load error it produced.
    """

    sheets: dict[Tier, SpriteSheet]
    substitutions: dict[Tier, Tier] = field(default_factory=dict)
    errors: dict[Tier, SheetLoadError] = field(default_factory=dict)

    def sheet_for(self, tier: Tier) -> SpriteSheet:
        """Return the sheet to play for *tier*."""
        return self.sheets[tier]

    def is_substituted(self, tier: Tier) -> bool:
        """Return whether *tier* plays a fallback sheet."""
        return tier in self.substitutions


def load_sheet_set(
    assets_dir: Path,
    tiers: tuple[TierSettings, ...],
    frame_width: int,
    frame_height: int,
    *,
    fallback_tier: Tier = Tier.LOW,
    expected_frames: int | None = None,
    event_bus: EventBus | None = None,
) -> SheetSet:
    """Load every tier's sheet once, substituting the fallback for failures.

    Args:
        assets_dir: Directory holding the sheet files.
        tiers: Tier settings naming each tier's sheet file.
        frame_width: Width of a single frame.
        frame_height: Height of a single frame.
        fallback_tier: Tier whose sheet replaces any sheet that fails.
        expected_frames: Frame count the assets normally have; a mismatch
            is only logged.
        event_bus: Receives one ``load_error`` event per failed tier.

    Returns:
        A ``SheetSet`` covering every tier.

    Raises:
        FatalAssetError: If the fallback tier's own sheet fails to load.
    """
    loaded: dict[Tier, SpriteSheet] = {}
    errors: dict[Tier, SheetLoadError] = {}

    for entry in tiers:
        path = assets_dir / entry.sheet
        try:
            sheet = load_sprite_sheet(path, frame_width, frame_height)
        except SheetLoadError as exc:
            errors[entry.tier] = exc
            continue
        if expected_frames is not None and sheet.frame_count != expected_frames:
            logger.warning(
                "Sprite sheet '%s' has %d frames, expected %d; playing all %d",
                path,
                sheet.frame_count,
                expected_frames,
                sheet.frame_count,
            )
        logger.info("Loaded %s sheet '%s' (%d frames)", entry.tier.value, path, sheet.frame_count)
        loaded[entry.tier] = sheet

    if fallback_tier not in loaded:
        cause = errors.get(fallback_tier)
        reason = cause if cause is not None else "no sheet configured for it"
        msg = f"Fallback {fallback_tier.value} sprite sheet is unavailable: {reason}"
        logger.error(msg)
        raise FatalAssetError(msg) from cause

    substitutions: dict[Tier, Tier] = {}
    for tier, exc in errors.items():
        logger.warning("Could not load %s sheet (%s); using %s sheet instead", tier.value, exc, fallback_tier.value)
        loaded[tier] = loaded[fallback_tier]
        substitutions[tier] = fallback_tier
        if event_bus is not None:
            event_bus.emit(events.LOAD_ERROR, tier=tier, error=exc, fallback=fallback_tier)

    return SheetSet(sheets=loaded, substitutions=substitutions, errors=errors)
