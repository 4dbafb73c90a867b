"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import Op, decode
from chix8.constants import PROGRAM_START, MAX_ROM_SIZE, TIMER_HZ
from chix8.faults import Fault, RomLoadError, record_fault
from chix8.memory import address_in_range
from chix8.timers import tick
from chix8.logging import scan_with_progress
from chix8.instructions.system import execute_clear_screen, execute_return, execute_invalid
from chix8.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chix8.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chix8.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chix8.instructions.display import execute_display
from chix8.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

HANDLERS = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REG: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key_pressed,
    Op.SKNP: execute_skip_if_key_not_pressed,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_KEY: execute_wait_for_key,
    Op.LD_DT: execute_set_delay_timer,
    Op.LD_ST: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_FONT: execute_font_character,
    Op.LD_BCD: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
    Op.INVALID: execute_invalid,
}


def _build_dispatch_table(handlers) -> list:
    """Order handlers by ``Op`` value, failing on any missing variant."""
    missing = [op.name for op in Op if op not in handlers]
    if missing:
        raise RuntimeError(f"No handler for instruction(s): {', '.join(missing)}")
    return [handlers[Op(value)] for value in range(len(Op))]


DISPATCH_TABLE = _build_dispatch_table(HANDLERS)


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects ``pc`` to already point past the instruction, as left by :func:`fetch`.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.op, DISPATCH_TABLE, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance ``pc`` past it.

    A ``pc`` whose two bytes do not both lie in memory records an
    ``ADDRESS_OUT_OF_RANGE`` fault instead. Bytes past the end of memory read
    as zero, so the recorded word holds only the bytes that exist.
    """
    address = jnp.astype(state.pc, jnp.int32)
    instruction = _pack_u16(
        state.memory.at[address].get(mode="fill", fill_value=0),
        state.memory.at[address + 1].get(mode="fill", fill_value=0),
    )
    state = jax.lax.cond(
        address_in_range(address, 2),
        lambda s: s.replace(pc=s.pc + 2),
        lambda s: record_fault(s, Fault.ADDRESS_OUT_OF_RANGE, s.pc, instruction),
        state
    )
    return state, instruction


def _halted(state: EmulatorState) -> jnp.ndarray:
    return state.fault != 0


def _step(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return jax.lax.cond(
        _halted(state),
        lambda s, _: s,
        execute,
        state, instruction
    )


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle. A faulted state is returned unchanged."""
    return jax.lax.cond(_halted(state), lambda s: s, _step, state)


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Timer tick that, like :func:`step`, leaves a faulted state untouched."""
    return jax.lax.cond(_halted(state), lambda s: s, tick, state)


@partial(jax.jit, static_argnums=(1, 2, 3))
def run_cycles(state: EmulatorState, n: int, cycles_per_tick: int = 700 // TIMER_HZ,
               progress: bool = False) -> EmulatorState:
    """Run ``n`` cycles headlessly, ticking timers every ``cycles_per_tick`` cycles.

    Timer ticks follow a virtual clock derived from the cycle count, so the
    result is deterministic.
    """
    def run_cycle(state, i):
        state = step(state)
        state = jax.lax.cond((i + 1) % cycles_per_tick == 0, tick_timers, lambda s: s, state)
        return state, None

    if progress:
        run_cycle = scan_with_progress(n)(run_cycle)

    state, _ = jax.lax.scan(run_cycle, state, jnp.arange(n))
    return state


def load_rom_bytes(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Copy a ROM image into memory starting at 0x200."""
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomLoadError(
            f"ROM is {len(rom_data)} bytes; at most {MAX_ROM_SIZE} bytes fit in program memory"
        )
    if not rom_data:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read ROM '{filename}': {e.strerror or e}") from e
    return load_rom_bytes(state, rom_data)
