"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chix8.constants import STACK_SIZE
from chix8.state import StackState


def can_push(stack: StackState) -> jnp.ndarray:
    return stack.pointer < STACK_SIZE


def can_pop(stack: StackState) -> jnp.ndarray:
    return stack.pointer > 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. Callers must check :func:`can_push` first."""
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address).astype(jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack. Callers must check :func:`can_pop` first."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
