"""AnimationClock — frame cursor driven by tier-specific frame intervals."""

from __future__ import annotations

import logging
from datetime import timedelta

from ram_lavalamp.core.datatypes import AnimationState, Tier

logger = logging.getLogger(__name__)

_ZERO = timedelta(0)


class AnimationClock:
    """Owns the ``AnimationState`` and advances it once per tick.

    Durations are ``timedelta`` values; their integer microsecond
    resolution keeps whole-interval counting exact.

    Args:
        state: Initial state.  Defaults to tier ``LOW``, frame 0.
    """

    def __init__(self, state: AnimationState | None = None) -> None:
        """Initialise the clock.

        Args:
            state: Optional starting state.
        """
        self._state = state or AnimationState()

    @property
    def state(self) -> AnimationState:
        """Return the live animation state."""
        return self._state

    @property
    def frame_index(self) -> int:
        """Return the current frame index."""
        return self._state.frame_index

    @property
    def tier(self) -> Tier:
        """Return the active tier."""
        return self._state.tier

    @property
    def accumulated(self) -> timedelta:
        """Return the time collected towards the next frame."""
        return self._state.accumulated

    def advance(self, dt: timedelta, tier: Tier, frame_count: int, interval: timedelta) -> int:
        """Advance the cursor by *dt* under *tier*'s pacing.

        A tier switch restarts the loop at frame 0 with nothing accumulated,
        and *dt* is not applied.  Otherwise every whole *interval* contained
        in the accumulated time moves the cursor one frame, wrapping after
        the last frame; a long stall therefore skips ahead rather than
        slowing the animation down.

        Args:
            dt: Real time elapsed since the previous tick.  Negative values
                count as zero.
            tier: Tier classified for this tick.
            frame_count: Number of frames in *tier*'s sheet.
            interval: How long *tier* shows each frame.

        Returns:
            The number of frames advanced.

        Raises:
            ValueError: If *frame_count* < 1 or *interval* is not positive.
        """
        if frame_count < 1:
            msg = f"frame_count must be >= 1, got {frame_count}"
            raise ValueError(msg)
        if interval <= _ZERO:
            msg = f"interval must be positive, got {interval}"
            raise ValueError(msg)

        state = self._state
        if tier is not state.tier:
            logger.debug("Clock reset for tier switch %s -> %s", state.tier.value, tier.value)
            state.tier = tier
            state.frame_index = 0
            state.accumulated = _ZERO
            return 0

        # A sheet of another length may have been substituted since the last tick.
        state.frame_index %= frame_count

        state.accumulated += max(dt, _ZERO)
        steps, state.accumulated = divmod(state.accumulated, interval)
        state.frame_index = (state.frame_index + steps) % frame_count
        return steps
