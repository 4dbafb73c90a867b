"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.faults import Fault
from chix8.memory import address_in_range, write_register
from chix8.constants import FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS
from chix8.instructions.common import make_guarded_instruction


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register. VF is not affected."""
    return state.replace(I=state.I + jnp.astype(state.V[instruction.x], jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a key press and store its index in VX.

    The first execution snapshots the keypad and rewinds ``pc`` so the
    instruction runs again next cycle. Only a key that goes down after the
    snapshot ends the wait; releasing a held key drops it from the snapshot
    so pressing it again counts. The lowest newly pressed index wins.
    """
    baseline = jnp.where(state.waiting_for_key, state.key_snapshot, state.keypad)
    newly_pressed = state.keypad & ~baseline

    def key_pressed_action(state):
        state = write_register(state, instruction.x, jnp.argmax(newly_pressed))
        return state.replace(
            waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
            key_snapshot=jnp.zeros_like(state.key_snapshot)
        )

    def wait_action(state):
        return state.replace(
            pc=state.pc - 2,
            waiting_for_key=jnp.ones((), dtype=jnp.bool_),
            key_snapshot=baseline & state.keypad
        )

    return jax.lax.cond(jnp.any(newly_pressed), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


@make_guarded_instruction(
    lambda state, inst: address_in_range(state.I, 3),
    Fault.ADDRESS_OUT_OF_RANGE,
)
def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory)


@make_guarded_instruction(
    lambda state, inst: address_in_range(state.I, inst.x + 1),
    Fault.ADDRESS_OUT_OF_RANGE,
)
def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    # Indices past the end of memory are masked out above and dropped by the scatter.
    return state.replace(memory=state.memory.at[base_indices].set(new_memory_values))


@make_guarded_instruction(
    lambda state, inst: address_in_range(state.I, inst.x + 1),
    Fault.ADDRESS_OUT_OF_RANGE,
)
def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[base_indices]
    return state.replace(V=jnp.where(register_mask, memory_values, state.V))
