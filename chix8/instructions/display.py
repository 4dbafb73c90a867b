"""CHIP-8 display operations."""

import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.faults import Fault
from chix8.memory import address_in_range
from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, FLAG_REGISTER
from chix8.instructions.common import make_guarded_instruction

# Row and column offsets of the largest sprite, shaped to broadcast to (row, col).
sprite_rows = jnp.arange(MAX_SPRITE_HEIGHT)[:, None]
sprite_cols = jnp.arange(SPRITE_WIDTH)[None, :]


def sprite_layer(state: EmulatorState, x, y, n) -> jnp.ndarray:
    """Screen-sized mask of the cells a sprite toggles.

    Row ``r`` bit ``c`` of the sprite lands on ``((x + c) % 64, (y + r) % 32)``.
    A sprite is at most 8x15, so no two of its bits share a cell.
    """
    sprite_bytes = state.memory[state.I + sprite_rows]
    bits = (sprite_bytes >> (7 - sprite_cols)) & 1
    bits = jnp.astype(bits, jnp.bool_) & (sprite_rows < n)

    target_x = (jnp.asarray(x).astype(jnp.int32) + sprite_cols) % SCREEN_WIDTH
    target_y = (jnp.asarray(y).astype(jnp.int32) + sprite_rows) % SCREEN_HEIGHT
    return jnp.zeros_like(state.display).at[target_x, target_y].set(bits)


def draw_sprite(state: EmulatorState, x, y, n) -> EmulatorState:
    """XOR an ``n``-row sprite read from memory at I onto the display at (x, y).

    VF is set to 1 when any sprite bit lands on a cell that was already on,
    otherwise 0.
    """
    layer = sprite_layer(state, x, y, n)
    collision = jnp.any(state.display & layer)
    return state.replace(
        display=state.display ^ layer,
        display_dirty=state.display_dirty | jnp.any(layer),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )


@make_guarded_instruction(
    lambda state, inst: (inst.n == 0) | address_in_range(state.I, inst.n),
    Fault.ADDRESS_OUT_OF_RANGE,
)
def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    return draw_sprite(state, state.V[instruction.x], state.V[instruction.y], instruction.n)
