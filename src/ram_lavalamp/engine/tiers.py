"""Tier classification — memory percentage to visual tier."""

from __future__ import annotations

import math
from collections.abc import Sequence

from ram_lavalamp.core.datatypes import Tier, TierSettings

DEFAULT_THRESHOLDS: tuple[tuple[float, Tier], ...] = (
    (0.0, Tier.LOW),
    (30.0, Tier.MEDIUM),
    (50.0, Tier.HIGH),
    (80.0, Tier.CRITICAL),
)


def thresholds_from(settings: Sequence[TierSettings]) -> tuple[tuple[float, Tier], ...]:
    """Return ``(lower_bound, tier)`` pairs sorted by ascending bound."""
    pairs = [(entry.threshold, entry.tier) for entry in settings]
    return tuple(sorted(pairs, key=lambda pair: pair[0]))


def classify(
    percentage: float,
    thresholds: Sequence[tuple[float, Tier]] = DEFAULT_THRESHOLDS,
) -> Tier:
    """Map a utilisation percentage onto a tier.

    Each tier covers the half-open interval from its own lower bound
    (inclusive) up to the next tier's bound (exclusive); the last tier
    extends to 100.  Input is clamped to ``[0, 100]`` first and NaN is
    read as 0, so this never fails.

    Args:
        percentage: Sampled utilisation.
        thresholds: Ascending ``(lower_bound, tier)`` pairs.

    Returns:
        The matching tier.
    """
    value = 0.0 if math.isnan(percentage) else min(100.0, max(0.0, percentage))

    selected = thresholds[0][1]
    for bound, tier in thresholds:
        if value < bound:
            break
        selected = tier
    return selected
