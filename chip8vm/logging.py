"""Console logging for chip8vm hosts.

Messages go to stdout with the time since the logger was created, a level tag
and the logger name. ``RunLogger`` adds the emulator-specific reports: run
banners, skipped opcodes, faults and register dumps.
"""

import sys
import time
from typing import Any, Dict

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
RESET = "\033[0m"


def format_opcode(opcode: int) -> str:
    return f"0x{opcode:04X}"


def format_address(address: int) -> str:
    return f"0x{address:03X}"


def format_registers(state) -> str:
    """One-line dump of PC, I, timers and V0-VF."""
    registers = " ".join(f"{int(v):02X}" for v in state.V)
    return (
        f"PC={format_address(int(state.pc))} I={format_address(int(state.I))} "
        f"DT={int(state.delay_timer):3d} ST={int(state.sound_timer):3d} | V: {registers}"
    )


class ConsoleLogger:
    """Levelled stdout logger.

    Colors are only used when stdout is a terminal.
    """

    def __init__(self, name: str = "chip8vm", log_level: str = "INFO", show_timestamps: bool = True):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.name = name
        self.threshold = LEVELS.index(level)
        self.show_timestamps = show_timestamps
        self.use_colors = sys.stdout.isatty()
        self.start_time = time.time()

    def enabled(self, level: str) -> bool:
        return LEVELS.index(level) >= self.threshold

    def log(self, level: str, message: str):
        if not self.enabled(level):
            return
        tag = f"[{level:>7s}]"
        if self.use_colors:
            tag = f"{COLORS[level]}{tag}{RESET}"
        elapsed = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{elapsed}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class RunLogger(ConsoleLogger):
    """Reports for a headless emulator run.

    Skipped opcodes are counted so the summary can mention them.
    """

    def __init__(self, name: str = "Runner", **kwargs):
        super().__init__(name, **kwargs)
        self.unknown_opcodes = 0

    def _section(self, title: str, entries: Dict[str, Any]):
        self.info("-" * 60)
        self.info(title)
        for key, value in entries.items():
            self.info(f"  {key}: {value}")

    def log_run_start(self, config: Dict[str, Any]):
        self._section("Run configuration:", config)

    def log_unknown_opcode(self, pc: int, opcode: int):
        self.unknown_opcodes += 1
        self.warning(f"Unknown opcode {format_opcode(opcode)} at {format_address(pc)}, skipped")

    def log_fault(self, error, state):
        """Report a fault with the register file of the halted state."""
        self.error(f"Halted: {error}")
        self.error(format_registers(state))

    def log_frame(self, frame: int, total_frames: int, state, log_interval: int = 60):
        """Dump registers every ``log_interval`` frames and on the last one."""
        if frame % log_interval == 0 or frame == total_frames - 1:
            self.debug(f"Frame {frame + 1:5d}/{total_frames} {format_registers(state)}")

    def log_run_end(self, summary: Dict[str, Any]):
        self._section(f"Run finished after {time.time() - self.start_time:.1f}s:", summary)
        if self.unknown_opcodes:
            self.warning(f"  unknown opcodes skipped: {self.unknown_opcodes}")
        self.info("-" * 60)
