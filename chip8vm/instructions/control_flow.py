"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, with_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import push
from chip8vm.constants import FAULT_STACK_OVERFLOW, FAULT_KEYPAD, NUM_KEYS
from chip8vm.instructions.system import advance, unknown_instruction


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    stack, ok = push(state.stack, state.pc)
    state = with_fault(state, ok, FAULT_STACK_OVERFLOW, state.pc)
    return execute_jump(state.replace(stack=stack), instruction)


def make_skip_instruction(condition_fn, valid_fn=None):
    """Factory for skip instructions.

    ``valid_fn`` rejects encodings of the family that have no meaning.
    """
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        taken = jax.lax.cond(
            condition,
            lambda s: advance(s, 4),
            lambda s: advance(s, 2),
            state
        )
        if valid_fn is None:
            return taken
        return jax.lax.cond(
            valid_fn(instruction),
            lambda s: taken,
            lambda s: unknown_instruction(s, instruction),
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y],
    lambda inst: inst.n == 0
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y],
    lambda inst: inst.n == 0
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0.

    The target is not masked to 12 bits; the next fetch faults if it is out of range.
    """
    jump_address = jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jump_address)


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    key_index = state.V[instruction.x]
    in_range = key_index < NUM_KEYS
    key_pressed = state.keypad[jnp.minimum(key_index, NUM_KEYS - 1)]
    is_not_instruction = (instruction.nn == 0xA1)
    condition = key_pressed ^ is_not_instruction

    skipped = jax.lax.cond(
        condition,
        lambda state: advance(state, 4),
        lambda state: advance(state, 2),
        state
    )
    skipped = with_fault(skipped, in_range, FAULT_KEYPAD, state.pc)

    return jax.lax.cond(
        (instruction.nn == 0x9E) | (instruction.nn == 0xA1),
        lambda s: skipped,
        lambda s: unknown_instruction(s, instruction),
        state
    )
