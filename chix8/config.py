"""Run configuration for the execution driver and the host frontend."""

import dataclasses
from typing import Any, Dict

from chix8.constants import TIMER_HZ
from chix8.rendering import COLOR_SCHEMES


@dataclasses.dataclass
class EmulatorConfig:
    """Settings for one emulator run.

    Attributes:
        instructions_per_second: Target CPU rate of the execution driver
        timer_hz: Rate at which the delay and sound timers count down
        scale: Device pixels per framebuffer cell in the host window
        color_scheme: Name of a scheme in ``chix8.rendering.COLOR_SCHEMES``
        seed: Seed of the JAX PRNG key used by CXNN
        log_level: Minimum console log level
        max_timer_catchup: Most timer ticks applied after a stall
    """
    instructions_per_second: int = 700
    timer_hz: float = TIMER_HZ
    scale: int = 10
    color_scheme: str = "white"
    seed: int = 0
    log_level: str = "INFO"
    max_timer_catchup: int = 8

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.instructions_per_second <= 0:
            raise ValueError(
                f"instructions_per_second must be positive, got {self.instructions_per_second}"
            )
        if self.timer_hz <= 0:
            raise ValueError(f"timer_hz must be positive, got {self.timer_hz}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.max_timer_catchup <= 0:
            raise ValueError(f"max_timer_catchup must be positive, got {self.max_timer_catchup}")
        if self.color_scheme not in COLOR_SCHEMES:
            raise ValueError(
                f"Unknown color scheme '{self.color_scheme}'. Available: {list(COLOR_SCHEMES)}"
            )

    @property
    def cycles_per_tick(self) -> int:
        """Cycles per timer tick, for runs on a virtual clock."""
        return max(1, round(self.instructions_per_second / self.timer_hz))

    def asdict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
