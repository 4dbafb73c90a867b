"""Delay and sound timers.

The timers count down at a fixed rate (60 Hz on real hardware) regardless of
how many instructions run in between. :func:`tick` is the pure decrement;
:class:`TimerClock` decides on the host side how many ticks are due.
"""

import time
from typing import Callable

import jax.numpy as jnp

from chix8.constants import TIMER_HZ
from chix8.state import EmulatorState


def _decrement(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer)


def tick(state: EmulatorState) -> EmulatorState:
    """Decrement both timers by one, saturating at zero."""
    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
    )


def sound_active(state: EmulatorState) -> bool:
    """True while the sound timer is running."""
    return bool(state.sound_timer > 0)


class TimerClock:
    """Fixed-rate tick schedule driven by a monotonic clock."""

    def __init__(
        self,
        hz: float = TIMER_HZ,
        clock: Callable[[], float] = time.perf_counter,
        max_catchup: int = 8,
    ):
        if hz <= 0:
            raise ValueError(f"Timer rate must be positive, got {hz}")
        self.period = 1.0 / hz
        self.clock = clock
        self.max_catchup = max_catchup
        self.next_tick = clock() + self.period

    def due(self) -> int:
        """Number of ticks elapsed since the previous call.

        After a long stall at most ``max_catchup`` ticks are reported and the
        schedule restarts from now.
        """
        now = self.clock()
        if now < self.next_tick:
            return 0
        ticks = int((now - self.next_tick) // self.period) + 1
        if ticks > self.max_catchup:
            self.next_tick = now + self.period
            return self.max_catchup
        self.next_tick += ticks * self.period
        return ticks
