"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, with_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import pop
from chip8vm.constants import FAULT_STACK_UNDERFLOW, FAULT_UNKNOWN_OPCODE


def advance(state: EmulatorState, amount=2) -> EmulatorState:
    """Move PC past the current instruction (4 when skipping the next one)."""
    return state.replace(pc=jnp.astype(state.pc + amount, jnp.uint16))


def unknown_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Opcode without semantics: flag and skip it, or fault when halting is configured."""
    if state.halt_on_unknown:
        return with_fault(state, False, FAULT_UNKNOWN_OPCODE, state.pc)
    return advance(state.replace(unknown_opcode=jnp.ones((), dtype=jnp.bool_)))


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return advance(state.replace(
        display=jnp.zeros_like(state.display),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    ))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine.

    The stack holds the address of the CALL itself, so execution resumes two
    bytes after it.
    """
    stack, address, ok = pop(state.stack)
    state = with_fault(state, ok, FAULT_STACK_UNDERFLOW, state.pc)
    return advance(state.replace(stack=stack, pc=address))


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            unknown_instruction,
            state, instruction
        ),
        state, instruction
    )
