"""Tests for the animation clock."""

from __future__ import annotations

from datetime import timedelta

import pytest

from ram_lavalamp.core.datatypes import AnimationState, Tier
from ram_lavalamp.engine.clock import AnimationClock

_MS = timedelta(milliseconds=1)
_INTERVAL = 100 * _MS


class TestAdvanceSameTier:
    """Tests for advancing while the tier stays the same."""

    def test_partial_interval_does_not_advance(self) -> None:
        """Less than one interval only accumulates time."""
        clock = AnimationClock()
        steps = clock.advance(40 * _MS, Tier.LOW, 4, _INTERVAL)

        assert steps == 0
        assert clock.frame_index == 0
        assert clock.accumulated == 40 * _MS

    def test_250ms_over_100ms_interval(self) -> None:
        """Four frames at 100 ms: 250 ms lands on frame 2 with 50 ms left over."""
        clock = AnimationClock()
        clock.advance(250 * _MS, Tier.LOW, 4, _INTERVAL)

        assert clock.frame_index == 2
        assert clock.accumulated == 50 * _MS

    def test_ten_intervals_advance_ten_frames(self) -> None:
        """A stall of ten intervals applies all ten advances."""
        clock = AnimationClock()
        steps = clock.advance(10 * _INTERVAL, Tier.LOW, 90, _INTERVAL)

        assert steps == 10
        assert clock.frame_index == 10
        assert clock.accumulated == timedelta(0)

    def test_ten_intervals_wrap_modulo_frame_count(self) -> None:
        """Advances wrap around the end of the strip."""
        clock = AnimationClock()
        clock.advance(10 * _INTERVAL, Tier.LOW, 4, _INTERVAL)

        assert clock.frame_index == 10 % 4

    def test_accumulates_across_calls(self) -> None:
        """Leftover time carries into the next tick."""
        clock = AnimationClock()
        clock.advance(60 * _MS, Tier.LOW, 4, _INTERVAL)
        clock.advance(60 * _MS, Tier.LOW, 4, _INTERVAL)

        assert clock.frame_index == 1
        assert clock.accumulated == 20 * _MS

    def test_sixty_hz_ticks_keep_pace(self) -> None:
        """Sixty 1/60 s ticks at a 200 ms interval advance five frames."""
        clock = AnimationClock()
        tick = timedelta(seconds=1 / 60)
        for _ in range(60):
            clock.advance(tick, Tier.LOW, 90, 200 * _MS)

        assert clock.frame_index == 5

    def test_negative_dt_is_ignored(self) -> None:
        """A clock going backwards never rewinds the animation."""
        clock = AnimationClock(AnimationState(tier=Tier.LOW, frame_index=2, accumulated=30 * _MS))
        clock.advance(-500 * _MS, Tier.LOW, 4, _INTERVAL)

        assert clock.frame_index == 2
        assert clock.accumulated == 30 * _MS

    @pytest.mark.parametrize("dt_ms", [0, 1, 99, 100, 101, 399, 400, 12345])
    def test_index_always_in_range(self, dt_ms: int) -> None:
        """The frame index stays within ``[0, frame_count)``."""
        clock = AnimationClock()
        for _ in range(7):
            clock.advance(dt_ms * _MS, Tier.LOW, 3, _INTERVAL)
            assert 0 <= clock.frame_index < 3


class TestTierSwitch:
    """Tests for switching tiers."""

    def test_switch_resets_frame_and_time(self) -> None:
        """A tier switch restarts at frame 0 with no accumulated time."""
        clock = AnimationClock(AnimationState(tier=Tier.LOW, frame_index=3, accumulated=70 * _MS))
        steps = clock.advance(500 * _MS, Tier.HIGH, 8, _INTERVAL)

        assert steps == 0
        assert clock.tier is Tier.HIGH
        assert clock.frame_index == 0
        assert clock.accumulated == timedelta(0)

    def test_switch_back_also_resets(self) -> None:
        """Returning to a previous tier does not restore its old position."""
        clock = AnimationClock()
        clock.advance(300 * _MS, Tier.LOW, 4, _INTERVAL)
        clock.advance(10 * _MS, Tier.MEDIUM, 4, _INTERVAL)
        clock.advance(10 * _MS, Tier.LOW, 4, _INTERVAL)

        assert clock.tier is Tier.LOW
        assert clock.frame_index == 0

    def test_state_is_shared_with_caller(self) -> None:
        """A supplied ``AnimationState`` is the one the clock mutates."""
        state = AnimationState(tier=Tier.MEDIUM)
        clock = AnimationClock(state)
        clock.advance(250 * _MS, Tier.MEDIUM, 4, _INTERVAL)

        assert clock.state is state
        assert state.frame_index == 2
        assert state.accumulated == 50 * _MS


class TestAdvanceValidation:
    """Tests for invalid arguments."""

    def test_zero_frame_count_rejected(self) -> None:
        """A sheet without frames is a programming error."""
        with pytest.raises(ValueError, match="frame_count"):
            AnimationClock().advance(_INTERVAL, Tier.LOW, 0, _INTERVAL)

    def test_zero_interval_rejected(self) -> None:
        """A zero interval would loop forever and is rejected."""
        with pytest.raises(ValueError, match="interval"):
            AnimationClock().advance(_INTERVAL, Tier.LOW, 4, timedelta(0))
