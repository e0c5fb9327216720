"""Pure frame compositing — no GUI imports allowed."""

from __future__ import annotations

import numpy as np

from ram_lavalamp.core.datatypes import SpriteSheet
from ram_lavalamp.core.exceptions import CompositeError


def render(sheet: SpriteSheet, frame_index: int, factor: int) -> np.ndarray:
    """Copy one frame out of *sheet*, upscaled by an integer *factor*.

    Destination pixel ``(dx, dy)`` takes source pixel
    ``(dx // factor, dy // factor)`` of the frame, i.e. nearest-neighbour
    pixel doubling with no interpolation.

    Args:
        sheet: The sheet to read from.
        frame_index: Frame within the strip, ``0 <= frame_index < frame_count``.
        factor: Positive integer scale factor.

    Returns:
        A new RGBA ``uint8`` array of shape
        ``(frame_height * factor, frame_width * factor, 4)``.

    Raises:
        CompositeError: If *frame_index* or *factor* is out of range.  Nothing
            is allocated in that case.
    """
    if not 0 <= frame_index < sheet.frame_count:
        msg = f"Frame index {frame_index} out of range for {sheet.frame_count} frames"
        raise CompositeError(msg)
    if factor < 1:
        msg = f"Scale factor must be >= 1, got {factor}"
        raise CompositeError(msg)

    x0 = frame_index * sheet.frame_width
    frame = sheet.pixels[:, x0 : x0 + sheet.frame_width]
    if factor == 1:
        return frame.copy()
    return np.repeat(np.repeat(frame, factor, axis=0), factor, axis=1)
