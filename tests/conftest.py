"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def quiet_state():
    """Fresh state with both timers starting at zero."""
    return create_state(timer_start=0)


@pytest.fixture
def wrap_state():
    """Fresh state drawing with wraparound."""
    return create_state(draw_mode="wrap")


@pytest.fixture
def clip_state():
    """Fresh state drawing with clipping."""
    return create_state(draw_mode="clip")


@pytest.fixture
def halting_state():
    """Fresh state that faults on unknown opcodes."""
    return create_state(halt_on_unknown=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def with_program(state, *opcodes):
    """Helper to load 16-bit opcodes at 0x200."""
    program = []
    for opcode in opcodes:
        program += [opcode >> 8, opcode & 0xFF]
    return load_program(state, bytes(program))


def with_registers(state, **registers):
    """Helper to set registers by name, e.g. ``with_registers(state, VA=0xFF, I=0x300)``."""
    for name, value in registers.items():
        if name == "I":
            state = state.replace(I=jnp.astype(value, jnp.uint16))
        else:
            state = state.replace(V=state.V.at[int(name[1:], 16)].set(value))
    return state
