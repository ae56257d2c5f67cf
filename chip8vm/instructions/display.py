"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState, with_fault
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, ADDRESS_MAX, FAULT_MEMORY, FLAG_REGISTER
from chip8vm.instructions.system import advance

# Sprite cell grid: 16 rows (largest N) by 8 columns
rows, cols = jnp.meshgrid(jnp.arange(16), jnp.arange(8), indexing='ij')


def _place_alias(px, py):
    """Legacy placement: linear index into the row-major buffer, dropped past its end."""
    index = py * SCREEN_WIDTH + px
    return index % SCREEN_WIDTH, index // SCREEN_WIDTH, index < SCREEN_WIDTH * SCREEN_HEIGHT


def _place_wrap(px, py):
    return px % SCREEN_WIDTH, py % SCREEN_HEIGHT, jnp.ones_like(px, dtype=jnp.bool_)


def _place_clip(px, py):
    return px, py, (px < SCREEN_WIDTH) & (py < SCREEN_HEIGHT)


PLACEMENTS = {
    "alias": _place_alias,
    "wrap": _place_wrap,
    "clip": _place_clip,
}


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprite bits are XORed into the display; VF is set when a lit pixel is hit.
    Off-screen pixels are placed according to ``state.draw_mode``.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32)
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32)
    base = jnp.astype(state.I, jnp.int32)

    in_bounds = (instruction.n == 0) | (base + instruction.n - 1 <= ADDRESS_MAX)
    state = with_fault(state, in_bounds, FAULT_MEMORY, jnp.maximum(base, ADDRESS_MAX + 1))

    sprite_bytes = jnp.astype(state.memory[jnp.clip(base + rows, 0, ADDRESS_MAX)], jnp.int32)
    bits = ((sprite_bytes >> (7 - cols)) & 1).astype(jnp.bool_) & (rows < instruction.n)

    target_x, target_y, on_screen = PLACEMENTS[state.draw_mode](sprite_x + cols, sprite_y + rows)
    visible = bits & on_screen

    # Sprite cells map to distinct pixels, dropped cells point past the buffer
    target_x = jnp.where(visible, target_x, SCREEN_WIDTH)
    sprite = jnp.zeros(state.display.shape, dtype=jnp.bool_).at[target_x, target_y].set(visible, mode="drop")

    collision = jnp.any(state.display & sprite)
    return advance(state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    ))
