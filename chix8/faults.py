"""Machine faults and the exceptions they surface as.

Instruction handlers run under ``jax.jit`` and cannot raise on traced values,
so a faulting instruction only records a :class:`Fault` code in the state.
:func:`check_fault` turns that record into an exception on the host side.
"""

from enum import IntEnum

import jax.numpy as jnp

from chix8.decode import disassemble
from chix8.state import EmulatorState


class Fault(IntEnum):
    NONE = 0
    DECODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    ADDRESS_OUT_OF_RANGE = 4


class Chix8Error(Exception):
    """Base class for all emulator errors."""


class RomLoadError(Chix8Error):
    """ROM file missing, unreadable, or too large for program memory."""


class MachineFault(Chix8Error):
    """Fatal fault raised by an instruction; halts the machine."""

    description = "machine fault"

    def __init__(self, pc: int, word: int):
        self.pc = pc
        self.word = word
        super().__init__(
            f"{self.description} at pc=0x{pc:03X} (word 0x{word:04X}: {disassemble(word)})"
        )


class DecodeFault(MachineFault):
    description = "undefined instruction"


class StackOverflow(MachineFault):
    description = "call stack overflow"


class StackUnderflow(MachineFault):
    description = "return with empty call stack"


class AddressOutOfRange(MachineFault):
    description = "memory access out of range"


FAULT_EXCEPTIONS = {
    Fault.DECODE: DecodeFault,
    Fault.STACK_OVERFLOW: StackOverflow,
    Fault.STACK_UNDERFLOW: StackUnderflow,
    Fault.ADDRESS_OUT_OF_RANGE: AddressOutOfRange,
}


def record_fault(state: EmulatorState, fault: Fault, address, word) -> EmulatorState:
    """Record a fault, rewinding ``pc`` to the offending instruction."""
    address = jnp.asarray(address).astype(jnp.uint16)
    return state.replace(
        fault=jnp.asarray(int(fault), dtype=jnp.uint8),
        fault_pc=address,
        fault_word=jnp.asarray(word).astype(jnp.uint16),
        pc=address,
    )


def fault_exception(state: EmulatorState):
    """Return the exception for the recorded fault, or None."""
    code = Fault(int(state.fault))
    if code == Fault.NONE:
        return None
    return FAULT_EXCEPTIONS[code](int(state.fault_pc), int(state.fault_word))


def check_fault(state: EmulatorState) -> EmulatorState:
    """Raise the recorded fault, if any; otherwise return the state."""
    exception = fault_exception(state)
    if exception is not None:
        raise exception
    return state
