"""EventBus — lamp notifications: sheet fallbacks, tier and scale changes, quit."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., None]

# ── Event names ───────────────────────────────────────────────────────────

LOAD_ERROR = "load_error"  # tier, error, fallback
TIER_CHANGED = "tier_changed"  # old, new, percentage
SCALE_CHANGED = "scale_changed"  # factor
SAMPLE_FAILED = "sample_failed"  # reason, tier
QUIT = "quit"

LAMP_EVENTS = frozenset({LOAD_ERROR, TIER_CHANGED, SCALE_CHANGED, SAMPLE_FAILED, QUIT})


class EventBus:
    """Fans lamp notifications out to the CLI and the window.

    The sheet loader and the engine emit; they never know who listens.
    Handlers run synchronously on the emitting thread, in subscription
    order, with the event's fields as keyword arguments.
    """

    def __init__(self) -> None:
        """Create a bus with no listeners."""
        self._listeners: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event: str, handler: EventHandler) -> None:
        """Listen for *event*.

        Args:
            event: One of ``LAMP_EVENTS``, e.g. ``"tier_changed"``.
            handler: Called with the event's fields as keyword arguments.

        Raises:
            ValueError: If *event* is not a lamp event name.
        """
        if event not in LAMP_EVENTS:
            msg = f"Unknown lamp event {event!r}. Choose from: {sorted(LAMP_EVENTS)}"
            raise ValueError(msg)
        self._listeners[event].append(handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        """Stop *handler* listening for *event*; unknown pairs only warn."""
        try:
            self._listeners[event].remove(handler)
        except ValueError:
            logger.warning("Handler %r was not subscribed to event %r", handler, event)

    def emit(self, event: str, **fields: Any) -> None:
        """Deliver *event* to every listener.

        A listener that raises is logged and skipped, so a broken
        subscriber can never stall an animation tick.

        Args:
            event: The event name.
            **fields: Event payload passed to each listener.
        """
        listeners = self._listeners.get(event, [])
        logger.debug("Event %s -> %d listener(s)", event, len(listeners))
        for handler in list(listeners):
            try:
                handler(**fields)
            except Exception:
                logger.exception("Listener %r failed on event %r", handler, event)
