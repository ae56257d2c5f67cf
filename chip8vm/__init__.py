"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, create_state
from chip8vm.emulator import execute, fetch, step, load_program, load_rom
from chip8vm.decode import DecodedInstruction, decode
from chip8vm.constants import *
from chip8vm.errors import (
    Chip8Error, RomTooLargeError, FaultError, MemoryFaultError, StackOverflowError,
    StackUnderflowError, KeypadFaultError, UnknownOpcodeError, raise_for_fault
)
from chip8vm.timers import sound_active, sound_stopped
from chip8vm.keypad import press_key, release_key, set_keys, clear_keys
from chip8vm.screen import frame, consume_frame, clear_draw_flag, frame_to_text

__all__ = [
    "EmulatorState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "PROGRAM_START",
    "FONT_START",
    "MAX_ROM_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Chip8Error",
    "RomTooLargeError",
    "FaultError",
    "MemoryFaultError",
    "StackOverflowError",
    "StackUnderflowError",
    "KeypadFaultError",
    "UnknownOpcodeError",
    "raise_for_fault",
    "sound_active",
    "sound_stopped",
    "press_key",
    "release_key",
    "set_keys",
    "clear_keys",
    "frame",
    "consume_frame",
    "clear_draw_flag",
    "frame_to_text",
]
