"""CHIP-8 system instructions (0x0xxx) and the undefined-word handler."""

import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.faults import Fault
from chix8.stack import can_pop, pop
from chix8.instructions.common import instruction_fault, make_guarded_instruction


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        display_dirty=jnp.ones((), dtype=jnp.bool_)
    )


@make_guarded_instruction(lambda state, inst: can_pop(state.stack), Fault.STACK_UNDERFLOW)
def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Word matching no instruction pattern."""
    return instruction_fault(state, instruction, Fault.DECODE)
