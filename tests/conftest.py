"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chix8 import create_state, load_rom_bytes, step


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program_bytes(words):
    """Encode instruction words big-endian."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def load_program(state, words):
    """Helper to load instruction words at 0x200."""
    return load_rom_bytes(state, program_bytes(words))


def run_steps(state, n):
    """Run ``n`` fetch-decode-execute cycles."""
    for _ in range(n):
        state = step(state)
    return state
