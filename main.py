"""
Headless CHIP-8 runner: executes a ROM and prints the last frame
"""

import argparse
import sys

from chip8vm import Chip8Error, RomTooLargeError, DRAW_MODES
from chip8vm.runner import Runner


def parse_keys(value: str) -> list[bool]:
    """Parse a string of hex key digits ("5", "4f") into a keypad array."""
    keypad = [False] * 16
    for digit in value:
        if digit not in "0123456789abcdefABCDEF":
            raise argparse.ArgumentTypeError(f"'{digit}' is not a hex key digit (0-9, a-f)")
        keypad[int(digit, 16)] = True
    return keypad


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Run a CHIP-8 ROM without a window and dump the screen"
    )
    parser.add_argument("rom", type=str, help="Path to the ROM file")
    parser.add_argument(
        "--frames",
        type=int,
        default=60,
        help="Number of frames to run (default: 60)",
    )
    parser.add_argument(
        "--cycles_per_frame",
        type=int,
        default=10,
        help="Instruction cycles per frame (default: 10)",
    )
    parser.add_argument(
        "--draw_mode",
        type=str,
        choices=DRAW_MODES,
        default="alias",
        help="Placement of off-screen sprite pixels (default: alias)",
    )
    parser.add_argument(
        "--timer_start",
        type=int,
        default=255,
        help="Power-on value of the delay and sound timers (default: 255)",
    )
    parser.add_argument(
        "--halt_on_unknown",
        action="store_true",
        help="Stop on unknown opcodes instead of skipping them",
    )
    parser.add_argument(
        "--keys",
        type=parse_keys,
        default=None,
        help="Hex digits of keys held for the whole run (e.g. 5 or 4f)",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar",
    )
    args = parser.parse_args()

    try:
        runner = Runner(
            args.rom,
            cycles_per_frame=args.cycles_per_frame,
            log_level=args.log_level,
            show_progress=args.progress,
            draw_mode=args.draw_mode,
            timer_start=args.timer_start,
            halt_on_unknown=args.halt_on_unknown,
        )
        runner.run(args.frames, keypad=args.keys)
    except RomTooLargeError as e:
        print(f"ROM rejected: {e}", file=sys.stderr)
        sys.exit(2)
    except Chip8Error as e:
        print(f"Emulation stopped: {e}", file=sys.stderr)
        sys.exit(1)

    print(runner.frame_text())
