"""CHIP-8 delay and sound timers."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState


def _count_down(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.astype(jnp.where(timer > 0, timer - 1, timer), jnp.uint8)


def tick_timers(state: EmulatorState, instruction) -> EmulatorState:
    """Decrement both timers once for the cycle that just executed ``instruction``.

    A timer written by the instruction itself (FX15, FX18) keeps the written
    value for this cycle. A FX0A still waiting for a key does not count as an
    executed cycle.
    """
    family = instruction & 0xF0FF
    waiting = (family == 0xF00A) & jnp.logical_not(jnp.any(state.keypad))
    delay_written = waiting | (family == 0xF015)
    sound_written = waiting | (family == 0xF018)
    return state.replace(
        delay_timer=jnp.where(delay_written, state.delay_timer, _count_down(state.delay_timer)),
        sound_timer=jnp.where(sound_written, state.sound_timer, _count_down(state.sound_timer)),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the host should be sounding the tone."""
    return state.sound_timer > 0


def sound_stopped(before: EmulatorState, after: EmulatorState) -> jnp.ndarray:
    """Whether the tone stopped between two states (sound timer reached zero)."""
    return (before.sound_timer > 0) & (after.sound_timer == 0)
