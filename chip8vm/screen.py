"""Frame read-out for hosts."""

import jax.numpy as jnp
import numpy as np

from chip8vm.state import EmulatorState


def frame(state: EmulatorState) -> np.ndarray:
    """Return the display as a (32, 64) uint8 array in row-major order."""
    return np.asarray(state.display, dtype=np.uint8).T


def clear_draw_flag(state: EmulatorState) -> EmulatorState:
    """Acknowledge the current frame."""
    return state.replace(draw_flag=jnp.zeros((), dtype=jnp.bool_))


def consume_frame(state: EmulatorState) -> tuple[EmulatorState, np.ndarray]:
    """Read the frame and clear the redraw flag in one go."""
    return clear_draw_flag(state), frame(state)


def frame_to_text(pixels: np.ndarray, on: str = "#", off: str = ".") -> str:
    """Render a (32, 64) frame as lines of text."""
    return "\n".join("".join(on if pixel else off for pixel in row) for row in pixels)
