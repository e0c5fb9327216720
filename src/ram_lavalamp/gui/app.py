"""QApplication bootstrap for the lava lamp window."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from PySide6.QtWidgets import QApplication

from ram_lavalamp.engine.engine import AnimationEngine
from ram_lavalamp.engine.sampler import PsutilMemorySampler
from ram_lavalamp.gui.lamp_window import WINDOW_TITLE, LampWindow

if TYPE_CHECKING:
    from ram_lavalamp.core.config import LampSettings
    from ram_lavalamp.core.events import EventBus
    from ram_lavalamp.engine.sheets import SheetSet


def run(settings: LampSettings, sheets: SheetSet, event_bus: EventBus | None = None) -> int:
    """Show the lamp and run the Qt event loop until the user quits.

    Args:
        settings: Validated lamp settings.
        sheets: Sheets loaded at startup.
        event_bus: Shared event bus handed to the engine.

    Returns:
        The Qt event loop's exit code (0 on a normal quit).
    """
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(WINDOW_TITLE)

    sampler = PsutilMemorySampler(min_interval=settings.sample_interval)
    engine = AnimationEngine.from_settings(settings, sheets, sampler, event_bus=event_bus)

    window = LampWindow(engine, fps=settings.fps)
    window.show()
    window.start()

    return app.exec()
