"""Headless host for the CHIP-8 interpreter.

The core never reads the clock; the runner decides how many cycles make up a
frame and how many frames to run.
"""

from functools import partial
from typing import Any, Dict, Optional

import jax
import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass
from tqdm import tqdm

from chip8vm.state import EmulatorState, create_state
from chip8vm.emulator import step, load_rom
from chip8vm.errors import FaultError, raise_for_fault
from chip8vm.logging import RunLogger
from chip8vm.screen import consume_frame, frame_to_text
from chip8vm.timers import sound_active


@dataclass(frozen=True)
class CycleTrace:
    """Per-cycle record produced by :func:`run_cycles`."""
    pc: jnp.ndarray
    opcode: jnp.ndarray
    unknown_opcode: jnp.ndarray


def run_cycle(state: EmulatorState, _):
    pc = state.pc
    state = step(state)
    return state, CycleTrace(pc=pc, opcode=state.opcode, unknown_opcode=state.unknown_opcode)


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> tuple[EmulatorState, CycleTrace]:
    """Run ``n`` cycles with ``jax.lax.scan``.

    Returns the final state and a CycleTrace with one entry per cycle.
    """
    return jax.lax.scan(run_cycle, state, jnp.arange(n))


class Runner:
    """Owns one emulator state and drives it frame by frame.

    Unknown opcodes are logged, faults are logged and raised, and redraws are
    consumed into ``last_frame``.
    """

    def __init__(
        self,
        rom_path: str,
        *,
        rng: Optional[jax.random.PRNGKey] = None,
        cycles_per_frame: int = 10,
        log_level: str = "INFO",
        show_progress: bool = False,
        **state_config,
    ):
        """Initialize the runner and load the ROM.

        Args:
            rom_path: Path to the CHIP-8 ROM file to load
            rng: JAX random key for the emulator (defaults to PRNGKey(0))
            cycles_per_frame: Instruction cycles executed per frame
            log_level: Console log level
            show_progress: Show a tqdm progress bar over frames
            **state_config: Forwarded to :func:`chip8vm.state.create_state`
        """
        if cycles_per_frame < 1:
            raise ValueError(f"cycles_per_frame must be positive, got {cycles_per_frame}")

        self.rom_path = rom_path
        self.rng = jax.random.PRNGKey(0) if rng is None else rng
        self.cycles_per_frame = cycles_per_frame
        self.show_progress = show_progress
        self.state_config = state_config
        self.logger = RunLogger(log_level=log_level)

        self.state: EmulatorState = None
        self.last_frame: Optional[np.ndarray] = None
        self.frames_drawn = 0
        self.cycles = 0
        self.reset()

    def reset(self):
        """Power-cycle the emulator and reload the ROM."""
        self.state = load_rom(create_state(self.rng, **self.state_config), self.rom_path)
        self.last_frame = None
        self.frames_drawn = 0
        self.cycles = 0
        self.logger.debug(f"Loaded {self.rom_path}")

    @property
    def config(self) -> Dict[str, Any]:
        return {
            "rom_path": self.rom_path,
            "cycles_per_frame": self.cycles_per_frame,
            **self.state_config,
        }

    def _report(self, trace: CycleTrace):
        unknown = np.asarray(trace.unknown_opcode)
        for pc, opcode in zip(np.asarray(trace.pc)[unknown], np.asarray(trace.opcode)[unknown]):
            self.logger.log_unknown_opcode(int(pc), int(opcode))

    def _check(self):
        try:
            raise_for_fault(self.state)
        except FaultError as e:
            self.logger.log_fault(e, self.state)
            raise

    def _consume(self):
        if bool(self.state.draw_flag):
            self.state, self.last_frame = consume_frame(self.state)
            self.frames_drawn += 1

    def step(self, keypad=None) -> EmulatorState:
        """Run a single cycle with an optional new key state."""
        pc = int(self.state.pc)
        self.state = step(self.state, keypad)
        self.cycles += 1
        if bool(self.state.unknown_opcode):
            self.logger.log_unknown_opcode(pc, int(self.state.opcode))
        self._check()
        self._consume()
        return self.state

    def run_frame(self, keypad=None) -> EmulatorState:
        """Run ``cycles_per_frame`` cycles."""
        if keypad is not None:
            self.state = self.state.replace(keypad=jnp.asarray(keypad, dtype=jnp.bool_))
        self.state, trace = run_cycles(self.state, self.cycles_per_frame)
        self.cycles += self.cycles_per_frame
        self._report(trace)
        self._check()
        self._consume()
        return self.state

    def run(self, frames: int, keypad=None) -> Dict[str, Any]:
        """Run ``frames`` frames and return a summary."""
        self.logger.log_run_start({**self.config, "frames": frames})
        for frame_index in tqdm(range(frames), desc="Frames", disable=not self.show_progress):
            self.run_frame(keypad)
            self.logger.log_frame(frame_index, frames, self.state)

        summary = {
            "cycles": self.cycles,
            "frames_drawn": self.frames_drawn,
            "pc": f"0x{int(self.state.pc):03X}",
            "sound_active": bool(sound_active(self.state)),
        }
        self.logger.log_run_end(summary)
        return summary

    def frame_text(self) -> str:
        """Text dump of the last consumed frame."""
        if self.last_frame is None:
            return ""
        return frame_to_text(self.last_frame)
