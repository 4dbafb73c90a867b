"""CHIP-8 virtual machine built on JAX."""

from chix8.state import EmulatorState, StackState, create_state
from chix8.emulator import execute, fetch, step, tick_timers, run_cycles, load_rom, load_rom_bytes
from chix8.decode import DecodedInstruction, Op, decode, disassemble, x_index, y_index
from chix8.faults import (
    Fault, Chix8Error, RomLoadError, MachineFault, DecodeFault, StackOverflow,
    StackUnderflow, AddressOutOfRange, check_fault,
)
from chix8.constants import *
from chix8.driver import DriverState, ExecutionDriver
from chix8.config import EmulatorConfig
from chix8.rendering import chip8_display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_cycles",
    "load_rom",
    "load_rom_bytes",
    "DecodedInstruction",
    "Op",
    "decode",
    "disassemble",
    "x_index",
    "y_index",
    "Fault",
    "Chix8Error",
    "RomLoadError",
    "MachineFault",
    "DecodeFault",
    "StackOverflow",
    "StackUnderflow",
    "AddressOutOfRange",
    "check_fault",
    "DriverState",
    "ExecutionDriver",
    "EmulatorConfig",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "chip8_display_to_rgb",
    "create_color_scheme",
]
