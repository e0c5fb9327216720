"""ScaleController — stepping through the allowed integer scale factors."""

from __future__ import annotations

import logging

from ram_lavalamp.core.datatypes import ScaleState

logger = logging.getLogger(__name__)


class ScaleController:
    """Owns the ``ScaleState``; only explicit steps change it.

    Args:
        factors: Strictly ascending positive scale factors.
        initial: Starting factor; must be one of *factors*.  Defaults to
            the smallest.

    Raises:
        ValueError: If *factors* is empty, not strictly ascending, contains
            a non-positive value, or does not contain *initial*.
    """

    def __init__(self, factors: tuple[int, ...] = (1, 2, 4, 8), initial: int | None = None) -> None:
        if not factors:
            msg = "At least one scale factor is required"
            raise ValueError(msg)
        if any(f < 1 for f in factors) or any(a >= b for a, b in zip(factors, factors[1:])):
            msg = f"Scale factors must be positive and strictly ascending, got {list(factors)}"
            raise ValueError(msg)
        start = factors[0] if initial is None else initial
        if start not in factors:
            msg = f"Initial scale must be one of {list(factors)}, got {start}"
            raise ValueError(msg)
        self._state = ScaleState(factors=tuple(factors), index=factors.index(start))

    @property
    def state(self) -> ScaleState:
        """Return the live scale state."""
        return self._state

    @property
    def factors(self) -> tuple[int, ...]:
        """Return the allowed factors."""
        return self._state.factors

    def current_factor(self) -> int:
        """Return the active scale factor."""
        return self._state.factor

    def scale_up(self) -> bool:
        """Step to the next larger factor; a no-op at the largest.

        Returns:
            Whether the factor changed.
        """
        if self._state.index >= len(self._state.factors) - 1:
            return False
        self._state.index += 1
        logger.debug("Scale up to x%d", self._state.factor)
        return True

    def scale_down(self) -> bool:
        """Step to the next smaller factor; a no-op at the smallest.

        Returns:
            Whether the factor changed.
        """
        if self._state.index <= 0:
            return False
        self._state.index -= 1
        logger.debug("Scale down to x%d", self._state.factor)
        return True

    def output_size(self, frame_width: int, frame_height: int) -> tuple[int, int]:
        """Return ``(width, height)`` of a frame at the active factor."""
        factor = self._state.factor
        return frame_width * factor, frame_height * factor
