"""Host-side keypad writes.

The interpreter only reads ``state.keypad``; hosts translate their own input
events into these calls between steps.
"""

from typing import Iterable

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.constants import NUM_KEYS


def _check_key(key: int) -> int:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be in 0x0-0xF, got {key}")
    return key


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark one key as held."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark one key as released."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(False))


def set_keys(state: EmulatorState, keys: Iterable[int]) -> EmulatorState:
    """Replace the whole key state: exactly ``keys`` are held afterwards."""
    keypad = jnp.zeros(NUM_KEYS, dtype=jnp.bool_)
    for key in keys:
        keypad = keypad.at[_check_key(key)].set(True)
    return state.replace(keypad=keypad)


def clear_keys(state: EmulatorState) -> EmulatorState:
    """Release every key."""
    return state.replace(keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
