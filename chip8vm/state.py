"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, TIMER_START, DRAW_MODES, FAULT_NONE
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is indexed ``[x, y]``. ``fault`` and ``fault_address`` record the
    first fault met by :func:`chip8vm.emulator.step`; a faulted state no longer
    advances. ``draw_mode`` and ``halt_on_unknown`` are static configuration.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    draw_flag: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    unknown_opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.astype(FAULT_NONE, jnp.uint8))
    fault_address: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    draw_mode: str = field(pytree_node=False, default="alias")
    halt_on_unknown: bool = field(pytree_node=False, default=False)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    *,
    timer_start: int = TIMER_START,
    draw_mode: str = "alias",
    halt_on_unknown: bool = False,
) -> EmulatorState:
    """Create power-on emulator state with font data loaded.

    Args:
        rng: JAX random key consumed by CXNN
        timer_start: Initial value of both delay and sound timers
        draw_mode: DXYN placement of off-screen pixels ("alias", "wrap" or "clip")
        halt_on_unknown: Treat unknown opcodes as faults instead of skipping them

    Returns:
        Fresh EmulatorState with PC at the program start
    """
    if draw_mode not in DRAW_MODES:
        raise ValueError(f"Unknown draw mode '{draw_mode}'. Available: {list(DRAW_MODES)}")
    if not 0 <= timer_start <= 0xFF:
        raise ValueError(f"Timer start value must fit in a byte, got {timer_start}")

    state = EmulatorState(rng, draw_mode=draw_mode, halt_on_unknown=halt_on_unknown)
    return state.replace(
        memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA),
        delay_timer=jnp.astype(timer_start, jnp.uint8),
        sound_timer=jnp.astype(timer_start, jnp.uint8),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    )


def with_fault(state: EmulatorState, ok, code: int, address) -> EmulatorState:
    """Record fault ``code`` at ``address`` unless ``ok`` holds.

    Only the first fault of a cycle is kept.
    """
    record = jnp.logical_not(ok) & (state.fault == FAULT_NONE)
    return state.replace(
        fault=jnp.where(record, jnp.astype(code, jnp.uint8), state.fault),
        fault_address=jnp.where(record, jnp.astype(address, jnp.uint16), state.fault_address),
    )
