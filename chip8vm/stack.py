"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack.

    Returns the new stack and whether there was room for the address.
    """
    ok = stack.pointer < STACK_SIZE
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16), mode="drop")
    return stack.replace(data=new_data, pointer=jnp.astype(stack.pointer + 1, jnp.uint8)), ok


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack.

    Returns the new stack, the popped address and whether the stack held one.
    """
    ok = stack.pointer > 0
    new_pointer = jnp.astype(jnp.where(ok, stack.pointer - 1, 0), jnp.uint8)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, ok
