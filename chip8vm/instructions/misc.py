"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, with_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    ADDRESS_MAX, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, FONT_GLYPH_SIZE, FAULT_MEMORY, FLAG_REGISTER
)
from chip8vm.instructions.system import advance, unknown_instruction


def _check_block(state: EmulatorState, last_offset) -> EmulatorState:
    """Fault unless I + last_offset is addressable."""
    base = jnp.astype(state.I, jnp.int32)
    return with_fault(state, base + last_offset <= ADDRESS_MAX, FAULT_MEMORY, jnp.maximum(base, ADDRESS_MAX + 1))


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return advance(state.replace(V=state.V.at[instruction.x].set(state.delay_timer)))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return advance(state.replace(delay_timer=state.V[instruction.x]))


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return advance(state.replace(sound_timer=state.V[instruction.x]))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register.

    I is not wrapped; a later memory access through it faults instead.
    """
    new_i = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    overflow_flag = jnp.astype(new_i > ADDRESS_MAX, jnp.uint8)
    return advance(state.replace(
        I=jnp.astype(new_i, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(overflow_flag)
    ))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press (blocking).

    Keys are scanned from 0 to F and the last pressed one wins. Without a key
    the state is returned untouched, so the same instruction runs again.
    """
    def key_pressed_action(state):
        pressed_key = NUM_KEYS - 1 - jnp.argmax(state.keypad[::-1])
        return advance(state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8))))

    def wait_action(state):
        return state

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to VX * 5, the glyph offset of digit VX."""
    font_address = jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return advance(state.replace(I=jnp.astype(font_address, jnp.uint16)))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    state = _check_block(state, 2)
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return advance(state.replace(memory=new_memory))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    state = _check_block(state, instruction.x)
    offsets = jnp.arange(MEMORY_SIZE) - jnp.astype(state.I, jnp.int32)
    in_block = (offsets >= 0) & (offsets <= instruction.x)
    new_memory = jnp.where(in_block, state.V[jnp.clip(offsets, 0, NUM_REGISTERS - 1)], state.memory)
    return advance(state.replace(memory=new_memory, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16)))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    state = _check_block(state, instruction.x)
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.clip(jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS), 0, ADDRESS_MAX)
    new_V = jnp.where(register_mask, state.memory[base_indices], state.V)
    return advance(state.replace(V=new_V, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16)))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions using arithmetic switch."""
    is_0x07 = instruction.nn == 0x07
    is_0x0A = instruction.nn == 0x0A
    is_0x15 = instruction.nn == 0x15
    is_0x18 = instruction.nn == 0x18
    is_0x1E = instruction.nn == 0x1E
    is_0x29 = instruction.nn == 0x29
    is_0x33 = instruction.nn == 0x33
    is_0x55 = instruction.nn == 0x55
    is_0x65 = instruction.nn == 0x65

    switch_index = (
        is_0x07 * 0 +
        is_0x0A * 1 +
        is_0x15 * 2 +
        is_0x18 * 3 +
        is_0x1E * 4 +
        is_0x29 * 5 +
        is_0x33 * 6 +
        is_0x55 * 7 +
        is_0x65 * 8 +
        (~(is_0x07 | is_0x0A | is_0x15 | is_0x18 | is_0x1E | is_0x29 | is_0x33 | is_0x55 | is_0x65)) * 9
    )

    return jax.lax.switch(
        switch_index,
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
            unknown_instruction,
        ],
        state, instruction
    )
