"""Execution driver: runs the machine one cycle at a time for a host.

The driver owns the :class:`~chix8.state.EmulatorState`. Each cycle it
applies queued key updates, runs one fetch-decode-execute step, applies the
timer ticks that fell due on the wall clock, and hands the framebuffer to the
host when it changed. A machine fault moves the driver to ``HALTED``.
"""

import time
from collections import deque
from enum import Enum
from typing import Callable, Optional

import jax.numpy as jnp
import numpy as np

from chix8.config import EmulatorConfig
from chix8.constants import NUM_KEYS
from chix8.emulator import step, tick_timers
from chix8.faults import MachineFault, fault_exception
from chix8.keypad import set_keypad
from chix8.logging import RunLogger
from chix8.state import EmulatorState
from chix8.timers import TimerClock, sound_active

MAX_LAG_SECONDS = 0.1


class DriverState(Enum):
    RUNNING = "running"
    HALTED = "halted"


class ExecutionDriver:
    """Cooperative single-threaded run loop around an emulator state.

    Args:
        state: Machine state to run, usually from ``create_state`` + ``load_rom``
        config: Run configuration
        present: Called with a read-only (64, 32) framebuffer snapshot whenever
            the display changed
        clock: Monotonic clock used for CPU pacing and timer ticks
        sleep: Sleep function used by :meth:`run` for pacing
        logger: Logger for fault diagnostics
    """

    def __init__(
        self,
        state: EmulatorState,
        config: Optional[EmulatorConfig] = None,
        present: Optional[Callable[[np.ndarray], None]] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[RunLogger] = None,
    ):
        self.config = config or EmulatorConfig()
        self.state = state
        self.present = present
        self.clock = clock
        self.sleep = sleep
        self.logger = logger or RunLogger(log_level=self.config.log_level)
        self.timer_clock = TimerClock(self.config.timer_hz, clock, self.config.max_timer_catchup)

        self.status = DriverState.RUNNING
        self.fault: Optional[MachineFault] = None
        self.cycles = 0
        self.presents = 0
        self._pending_keys = deque()
        self._stop_requested = False

    @property
    def running(self) -> bool:
        return self.status is DriverState.RUNNING and not self._stop_requested

    @property
    def sound_active(self) -> bool:
        return sound_active(self.state)

    def submit_key(self, index: int, pressed: bool):
        """Queue a key update; it is applied at the start of the next cycle."""
        if not 0 <= index < NUM_KEYS:
            raise ValueError(f"Key index must be in 0x0..0xF, got {index!r}")
        self._pending_keys.append((index, bool(pressed)))

    def request_stop(self):
        """Ask :meth:`run` to return after the current cycle."""
        self._stop_requested = True

    def framebuffer(self) -> np.ndarray:
        """Read-only snapshot of the display, indexed ``[x, y]``."""
        snapshot = np.array(self.state.display, dtype=np.bool_)
        snapshot.flags.writeable = False
        return snapshot

    def _apply_pending_keys(self):
        if not self._pending_keys:
            return
        keypad = np.array(self.state.keypad, dtype=np.bool_)
        while self._pending_keys:
            index, pressed = self._pending_keys.popleft()
            keypad[index] = pressed
        self.state = set_keypad(self.state, keypad)

    def _present_if_dirty(self) -> bool:
        if not bool(self.state.display_dirty):
            return False
        if self.present is not None:
            self.present(self.framebuffer())
        self.state = self.state.replace(display_dirty=jnp.zeros((), dtype=jnp.bool_))
        self.presents += 1
        return True

    def _halt(self, fault: MachineFault):
        self.status = DriverState.HALTED
        self.fault = fault
        self.logger.log_fault(fault)

    def cycle(self) -> bool:
        """Run one cycle. Returns True when the framebuffer was presented."""
        if self.status is DriverState.HALTED:
            return False

        self._apply_pending_keys()
        self.state = step(self.state)
        self.cycles += 1

        for _ in range(self.timer_clock.due()):
            self.state = tick_timers(self.state)

        fault = fault_exception(self.state)
        if fault is not None:
            self._halt(fault)
            return False

        return self._present_if_dirty()

    def run(self, poll: Optional[Callable[[], None]] = None) -> DriverState:
        """Cycle at ``config.instructions_per_second`` until stopped or halted.

        ``poll`` is called before every cycle so the host can pump its events,
        submit keys and request a stop.
        """
        period = 1.0 / self.config.instructions_per_second
        next_cycle = self.clock()

        while self.running:
            if poll is not None:
                poll()
                if not self.running:
                    break

            self.cycle()

            next_cycle += period
            delay = next_cycle - self.clock()
            if delay > 0:
                self.sleep(delay)
            elif delay < -MAX_LAG_SECONDS:
                # Too far behind; drop the backlog instead of bursting.
                next_cycle = self.clock()

        return self.status
