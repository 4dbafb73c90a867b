"""Helpers shared by instruction handlers."""

import jax

from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.faults import Fault, record_fault


def instruction_fault(state: EmulatorState, instruction: DecodedInstruction, fault: Fault) -> EmulatorState:
    """Record ``fault`` against the instruction just fetched."""
    return record_fault(state, fault, state.pc - 2, instruction.raw)


def make_guarded_instruction(condition_fn, fault: Fault):
    """Factory for instructions that fault unless ``condition_fn`` holds."""
    def decorator(handler):
        def guarded_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
            return jax.lax.cond(
                condition_fn(state, instruction),
                handler,
                lambda s, inst: instruction_fault(s, inst, fault),
                state, instruction
            )
        guarded_instruction.__name__ = handler.__name__
        guarded_instruction.__doc__ = handler.__doc__
        return guarded_instruction
    return decorator
