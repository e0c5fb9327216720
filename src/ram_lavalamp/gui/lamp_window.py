"""LampWindow — frameless widget that pumps engine ticks and shows the buffer."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

import numpy as np
from PySide6.QtCore import QPoint, Qt, QTimer, Slot
from PySide6.QtGui import QImage, QKeyEvent, QMouseEvent, QPainter, QPaintEvent
from PySide6.QtWidgets import QWidget

from ram_lavalamp.core.datatypes import Intent

if TYPE_CHECKING:
    from ram_lavalamp.engine.engine import AnimationEngine

logger = logging.getLogger(__name__)

WINDOW_TITLE = "RAM Lava Lampe"

# Raw key → intent; the engine applies them at its next tick.
KEY_INTENTS: dict[int, Intent] = {
    Qt.Key.Key_Plus.value: Intent.SCALE_UP,
    Qt.Key.Key_Equal.value: Intent.SCALE_UP,
    Qt.Key.Key_Minus.value: Intent.SCALE_DOWN,
    Qt.Key.Key_Escape.value: Intent.QUIT,
    Qt.Key.Key_Q.value: Intent.QUIT,
}


class LampWindow(QWidget):
    """Presentation collaborator for the ``AnimationEngine``.

    A ``QTimer`` drives ``engine.tick()`` with the measured time since the
    previous tick.  Key presses are only translated into intents and queued
    on the engine.  The window follows the buffer size, so a scale change
    resizes it on the frame that first uses the new factor.

    Args:
        engine: The engine to drive.  Its ``presenter`` is set to this window.
        fps: Target ticks per second.
        clock: Monotonic time source in seconds, replaceable in tests.
        parent: Optional parent widget.
    """

    def __init__(
        self,
        engine: AnimationEngine,
        fps: int = 60,
        clock: Callable[[], float] = time.perf_counter,
        parent: QWidget | None = None,
    ) -> None:
        """Initialise the window and its tick timer."""
        super().__init__(parent)
        self.setWindowTitle(WINDOW_TITLE)
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)

        self._engine = engine
        self._engine.presenter = self.present
        self._clock = clock
        self._last_tick: float | None = None
        self._buffer: np.ndarray | None = None
        self._drag_offset: QPoint | None = None

        width, height = engine.output_size()
        self.setFixedSize(width, height)

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, round(1000 / fps)))
        self._timer.timeout.connect(self._on_tick)

    # ── Lifecycle ──────────────────────────────────────────────

    def start(self) -> None:
        """Start ticking."""
        self._last_tick = self._clock()
        self._timer.start()

    def stop(self) -> None:
        """Stop ticking."""
        self._timer.stop()

    @property
    def is_running(self) -> bool:
        """Return whether the tick timer is active."""
        return self._timer.isActive()

    # ── Engine collaboration ───────────────────────────────────

    def present(self, buffer: np.ndarray) -> None:
        """Receive a composited buffer and schedule a repaint.

        Args:
            buffer: RGBA array of shape ``(height, width, 4)``.
        """
        self._buffer = buffer
        height, width = buffer.shape[:2]
        if (width, height) != (self.width(), self.height()):
            self.setFixedSize(width, height)
        self.update()

    @Slot()
    def _on_tick(self) -> None:
        """Advance the engine by the real time elapsed since the last tick."""
        now = self._clock()
        elapsed = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now

        self._engine.tick(timedelta(seconds=elapsed))
        if self._engine.quit_requested:
            logger.info("Quit requested")
            self.stop()
            self.close()

    # ── Qt events ──────────────────────────────────────────────

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802
        """Draw the latest buffer at the window origin."""
        if self._buffer is None:
            return
        height, width = self._buffer.shape[:2]
        data = self._buffer.tobytes()
        image = QImage(data, width, height, width * 4, QImage.Format.Format_RGBA8888)
        painter = QPainter(self)
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
        painter.drawImage(0, 0, image)
        painter.end()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        """Translate a key press into an engine intent."""
        key = event.key()
        intent = KEY_INTENTS.get(getattr(key, "value", key))
        if intent is None:
            super().keyPressEvent(event)
            return
        self._engine.request(intent)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Begin dragging the frameless window with the left button."""
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Move the window while dragging."""
        if self._drag_offset is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self._drag_offset)
            event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """End dragging."""
        self._drag_offset = None
        super().mouseReleaseEvent(event)
