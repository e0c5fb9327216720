"""Shared value objects used across the engine, GUI and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import numpy as np


class Tier(enum.Enum):
    """Visual tier selected from the sampled memory usage, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def ordered(cls) -> tuple[Tier, ...]:
        """Return all tiers in ascending threshold order."""
        return tuple(cls)


class Intent(enum.Enum):
    """User request queued on the engine and applied at the next tick."""

    SCALE_UP = "scale_up"
    SCALE_DOWN = "scale_down"
    QUIT = "quit"


@dataclass(frozen=True)
class TierSettings:
    """Threshold, pacing and asset name of one tier."""

    tier: Tier
    threshold: float
    interval: timedelta
    sheet: str


@dataclass(frozen=True)
class SpriteSheet:
    """A decoded horizontal strip of equally sized RGBA frames.

    ``pixels`` has shape ``(height, width, 4)`` and is marked read-only so
    one sheet can be shared by every consumer for the process lifetime.
    """

    frame_width: int
    frame_height: int
    pixels: np.ndarray
    source: Path | None = None

    @property
    def width(self) -> int:
        """Return the total strip width in pixels."""
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        """Return the strip height in pixels."""
        return int(self.pixels.shape[0])

    @property
    def frame_count(self) -> int:
        """Return the number of frames in the strip."""
        return self.width // self.frame_width


@dataclass
class AnimationState:
    """Frame cursor of the active tier.

    Attributes:
        tier: The tier whose sheet is currently playing.
        frame_index: Index into the active tier's sheet.
        accumulated: Time collected towards the next frame advance.
    """

    tier: Tier = Tier.LOW
    frame_index: int = 0
    accumulated: timedelta = field(default_factory=timedelta)


@dataclass
class ScaleState:
    """Position in the ordered tuple of allowed scale factors."""

    factors: tuple[int, ...] = (1, 2, 4, 8)
    index: int = 0

    @property
    def factor(self) -> int:
        """Return the active scale factor."""
        return self.factors[self.index]
