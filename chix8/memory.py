"""Register file and memory image accessors.

All addresses are checked against the memory image rather than wrapped:
callers test :func:`address_in_range` and record an
``ADDRESS_OUT_OF_RANGE`` fault when it fails.
"""

import jax.numpy as jnp

from chix8.constants import MEMORY_SIZE
from chix8.state import EmulatorState


def address_in_range(address, length=1):
    """True when ``address .. address + length - 1`` lies inside memory."""
    start = jnp.asarray(address).astype(jnp.int32)
    return (start >= 0) & (start + length <= MEMORY_SIZE)


def read_register(state: EmulatorState, index):
    return state.V[index]


def write_register(state: EmulatorState, index, value) -> EmulatorState:
    """Write ``value mod 256`` into register ``index``."""
    value = jnp.asarray(value).astype(jnp.int32) & 0xFF
    return state.replace(V=state.V.at[index].set(value.astype(jnp.uint8)))


def read_memory(state: EmulatorState, address):
    return state.memory[address]


def write_memory(state: EmulatorState, address, value) -> EmulatorState:
    value = jnp.asarray(value).astype(jnp.int32) & 0xFF
    return state.replace(memory=state.memory.at[address].set(value.astype(jnp.uint8)))
