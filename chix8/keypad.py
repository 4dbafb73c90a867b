"""CHIP-8 hexadecimal keypad.

The keypad is a 16-entry boolean vector owned by the machine state. Only the
host writes to it; instructions read it.
"""

import jax.numpy as jnp

from chix8.constants import NUM_KEYS
from chix8.state import EmulatorState

# Physical layout of the original keypad:
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
KEYPAD_LAYOUT = (
    (0x1, 0x2, 0x3, 0xC),
    (0x4, 0x5, 0x6, 0xD),
    (0x7, 0x8, 0x9, 0xE),
    (0xA, 0x0, 0xB, 0xF),
)

# The same layout placed on the left-hand block of a QWERTY keyboard.
QWERTY_LAYOUT = (
    ("1", "2", "3", "4"),
    ("q", "w", "e", "r"),
    ("a", "s", "d", "f"),
    ("z", "x", "c", "v"),
)

KEY_LAYOUT = {
    name: key
    for names, keys in zip(QWERTY_LAYOUT, KEYPAD_LAYOUT)
    for name, key in zip(names, keys)
}


def _check_index(index: int) -> int:
    if not 0 <= index < NUM_KEYS:
        raise ValueError(f"Key index must be in 0x0..0xF, got {index!r}")
    return index


def is_pressed(state: EmulatorState, index: int) -> bool:
    return bool(state.keypad[_check_index(index)])


def set_pressed(state: EmulatorState, index: int, pressed: bool) -> EmulatorState:
    """Return a state with key ``index`` pressed or released."""
    return state.replace(keypad=state.keypad.at[_check_index(index)].set(bool(pressed)))


def set_keypad(state: EmulatorState, keys) -> EmulatorState:
    """Replace the whole keypad with a 16-entry boolean vector."""
    keys = jnp.asarray(keys, dtype=jnp.bool_)
    if keys.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keys.shape}")
    return state.replace(keypad=keys)


def pressed_keys(state: EmulatorState) -> list[int]:
    """Indices of all keys currently held down."""
    return [index for index in range(NUM_KEYS) if state.keypad[index]]
