"""Main CHIP-8 emulator execution engine."""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chip8vm.state import EmulatorState, with_fault
from chip8vm.decode import decode
from chip8vm.constants import PROGRAM_START, MAX_ROM_SIZE, ADDRESS_MAX, FAULT_NONE, FAULT_MEMORY
from chip8vm.errors import RomTooLargeError
from chip8vm.timers import tick_timers
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    The instruction updates PC itself. No fetch, timer tick or fault rollback
    happens here; see :func:`step` for a full cycle.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.family,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.ndarray:
    """Pack two bytes into a 16-bit value (held in int32)."""
    return (high.astype(jnp.int32) << 8) | low.astype(jnp.int32)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Fetch the opcode at PC.

    PC is left unchanged. Reading past the end of memory records a memory fault.
    """
    pc = jnp.astype(state.pc, jnp.int32)
    state = with_fault(state, pc + 1 <= ADDRESS_MAX, FAULT_MEMORY, jnp.where(pc > ADDRESS_MAX, pc, pc + 1))
    high = state.memory[jnp.minimum(pc, ADDRESS_MAX)]
    low = state.memory[jnp.minimum(pc + 1, ADDRESS_MAX)]
    instruction = _pack_u16(high, low)
    return state.replace(opcode=jnp.astype(instruction, jnp.uint16)), instruction


def _cycle(state: EmulatorState) -> EmulatorState:
    state = state.replace(unknown_opcode=jnp.zeros((), dtype=jnp.bool_))
    fetched, instruction = fetch(state)
    executed = tick_timers(execute(fetched, instruction), instruction)

    # A faulting cycle leaves nothing behind but the fault record
    faulted = executed.fault != FAULT_NONE
    halted = state.replace(
        opcode=executed.opcode,
        fault=executed.fault,
        fault_address=executed.fault_address,
    )
    return jax.tree.map(lambda a, b: jnp.where(faulted, a, b), halted, executed)


@jax.jit
def step(state: EmulatorState, keypad=None) -> EmulatorState:
    """Run one instruction cycle.

    Args:
        state: Current emulator state
        keypad: Optional 16-element key array replacing the current key state

    Returns:
        The next state. A state that already carries a fault is returned as is.
    """
    if keypad is not None:
        state = state.replace(keypad=jnp.asarray(keypad, dtype=jnp.bool_))
    return jax.lax.cond(state.fault != FAULT_NONE, lambda s: s, _cycle, state)


def load_program(state: EmulatorState, program) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200.

    Args:
        state: Emulator state to load into
        program: bytes-like object or sequence of byte values

    Returns:
        New state with the program installed

    Raises:
        RomTooLargeError: The program does not fit between 0x200 and 0xFFF.
            Nothing is copied.
    """
    if isinstance(program, (bytes, bytearray, memoryview)):
        rom_data = np.frombuffer(program, dtype=np.uint8)
    else:
        rom_data = np.asarray(program, dtype=np.uint8).reshape(-1)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom_data), MAX_ROM_SIZE)
    rom_array = jnp.asarray(rom_data, dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
