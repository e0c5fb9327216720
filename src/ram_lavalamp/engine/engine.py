"""AnimationEngine — sample, classify, advance and composite once per tick."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from datetime import timedelta

import numpy as np

from ram_lavalamp.core import events
from ram_lavalamp.core.config import DEFAULT_TIERS, LampSettings
from ram_lavalamp.core.datatypes import Intent, SpriteSheet, Tier, TierSettings
from ram_lavalamp.core.events import EventBus
from ram_lavalamp.core.exceptions import MetricUnavailableError
from ram_lavalamp.engine.clock import AnimationClock
from ram_lavalamp.engine.compositor import render
from ram_lavalamp.engine.sampler import MetricSampler
from ram_lavalamp.engine.scale import ScaleController
from ram_lavalamp.engine.sheets import SheetSet
from ram_lavalamp.engine.tiers import DEFAULT_THRESHOLDS, classify, thresholds_from

logger = logging.getLogger(__name__)

Presenter = Callable[[np.ndarray], None]

DEFAULT_INTERVALS: dict[Tier, timedelta] = {
    tier: timedelta(milliseconds=interval_ms) for tier, (_threshold, interval_ms, _sheet) in DEFAULT_TIERS.items()
}


class AnimationEngine:
    """Orchestrates one tick of the lava lamp.

    The engine owns every piece of mutable state: the clock's
    ``AnimationState``, the scale controller's ``ScaleState``, the sheet
    set and the intent queue.  All of it is touched only from ``tick()``
    on the thread that drives the animation.

    Args:
        sheets: Loaded sheets, one per tier.
        sampler: Source of the memory percentage.
        tiers: Per-tier thresholds and intervals.  Defaults to the built-in
            30/50/80 thresholds and 200/150/100/60 ms intervals.
        scale: Scale controller.  Defaults to ``x1, x2, x4, x8``.
        event_bus: Receives tier, scale, sampling and quit events.
        presenter: Optional callback handed each composited buffer.
    """

    def __init__(
        self,
        sheets: SheetSet,
        sampler: MetricSampler,
        *,
        tiers: tuple[TierSettings, ...] | None = None,
        scale: ScaleController | None = None,
        event_bus: EventBus | None = None,
        presenter: Presenter | None = None,
    ) -> None:
        self._sheets = sheets
        self._sampler = sampler
        self._scale = scale or ScaleController()
        self.event_bus = event_bus or EventBus()
        self.presenter = presenter

        if tiers:
            self._thresholds = thresholds_from(tiers)
            self._intervals = {entry.tier: entry.interval for entry in tiers}
        else:
            self._thresholds = DEFAULT_THRESHOLDS
            self._intervals = dict(DEFAULT_INTERVALS)

        self._clock = AnimationClock()
        self._intents: deque[Intent] = deque()
        self._last_percentage: float | None = None
        self._sampling_failed = False
        self.quit_requested = False

    @classmethod
    def from_settings(
        cls,
        settings: LampSettings,
        sheets: SheetSet,
        sampler: MetricSampler,
        *,
        event_bus: EventBus | None = None,
        presenter: Presenter | None = None,
    ) -> AnimationEngine:
        """Build an engine from validated ``LampSettings``."""
        return cls(
            sheets,
            sampler,
            tiers=settings.tiers,
            scale=ScaleController(settings.scale_factors, settings.initial_scale),
            event_bus=event_bus,
            presenter=presenter,
        )

    # ── Read-only views ───────────────────────────────────────────────────

    @property
    def clock(self) -> AnimationClock:
        """Return the animation clock."""
        return self._clock

    @property
    def scale(self) -> ScaleController:
        """Return the scale controller."""
        return self._scale

    @property
    def sheets(self) -> SheetSet:
        """Return the sheet set."""
        return self._sheets

    @property
    def tier(self) -> Tier:
        """Return the active tier."""
        return self._clock.tier

    @property
    def last_percentage(self) -> float | None:
        """Return the most recent successful reading, if any."""
        return self._last_percentage

    def interval_for(self, tier: Tier) -> timedelta:
        """Return how long *tier* shows each frame."""
        return self._intervals[tier]

    def current_sheet(self) -> SpriteSheet:
        """Return the sheet of the active tier."""
        return self._sheets.sheet_for(self._clock.tier)

    def output_size(self) -> tuple[int, int]:
        """Return ``(width, height)`` of the next composited buffer."""
        sheet = self.current_sheet()
        return self._scale.output_size(sheet.frame_width, sheet.frame_height)

    # ── Input ─────────────────────────────────────────────────────────────

    def request(self, intent: Intent) -> None:
        """Queue a user intent; it is applied at the start of the next tick."""
        self._intents.append(intent)

    def _apply_intents(self) -> None:
        """Drain the intent queue."""
        while self._intents:
            intent = self._intents.popleft()
            match intent:
                case Intent.SCALE_UP:
                    changed = self._scale.scale_up()
                case Intent.SCALE_DOWN:
                    changed = self._scale.scale_down()
                case Intent.QUIT:
                    if not self.quit_requested:
                        self.quit_requested = True
                        self.event_bus.emit(events.QUIT)
                    continue
                case _:
                    logger.warning("Ignoring unknown intent %r", intent)
                    continue
            if changed:
                self.event_bus.emit(events.SCALE_CHANGED, factor=self._scale.current_factor())

    # ── Tick ──────────────────────────────────────────────────────────────

    def _sample_tier(self) -> Tier:
        """Classify the current reading, holding the tier when none is available."""
        try:
            percentage = self._sampler.sample()
        except MetricUnavailableError as exc:
            percentage = None
            reason = str(exc)
        else:
            reason = "sampler returned no value"

        if percentage is None:
            if not self._sampling_failed:
                logger.warning("Memory usage unavailable (%s); holding %s tier", reason, self._clock.tier.value)
                self.event_bus.emit(events.SAMPLE_FAILED, reason=reason, tier=self._clock.tier)
            else:
                logger.debug("Memory usage still unavailable (%s)", reason)
            self._sampling_failed = True
            return self._clock.tier

        if self._sampling_failed:
            logger.info("Memory usage available again")
        self._sampling_failed = False
        self._last_percentage = percentage
        return classify(percentage, self._thresholds)

    def tick(self, dt: timedelta) -> np.ndarray:
        """Run one update-and-render cycle.

        Args:
            dt: Real time elapsed since the previous tick.

        Returns:
            The composited RGBA buffer, also handed to ``presenter``.
        """
        self._apply_intents()

        previous = self._clock.tier
        tier = self._sample_tier()
        sheet = self._sheets.sheet_for(tier)
        self._clock.advance(dt, tier, sheet.frame_count, self._intervals[tier])

        if tier is not previous:
            logger.info(
                "Memory at %.1f%%: switching %s -> %s%s",
                self._last_percentage or 0.0,
                previous.value,
                tier.value,
                " (fallback sheet)" if self._sheets.is_substituted(tier) else "",
            )
            self.event_bus.emit(
                events.TIER_CHANGED,
                old=previous,
                new=tier,
                percentage=self._last_percentage,
            )

        buffer = render(sheet, self._clock.frame_index, self._scale.current_factor())
        if self.presenter is not None:
            self.presenter(buffer)
        return buffer
