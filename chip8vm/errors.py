"""CHIP-8 error hierarchy.

Chip8Error (base)
├── RomTooLargeError - program does not fit between 0x200 and 0xFFF
└── FaultError - a cycle faulted; the state halted at the faulting instruction
    ├── MemoryFaultError - fetch or data access outside 0x000-0xFFF
    ├── StackOverflowError - CALL with all 16 stack slots in use
    ├── StackUnderflowError - RET with an empty stack
    ├── KeypadFaultError - EX9E/EXA1 with VX above 0xF
    └── UnknownOpcodeError - unknown opcode while halting on unknown opcodes

Jitted code cannot raise, so faults travel inside EmulatorState
(``fault`` and ``fault_address``); :func:`raise_for_fault` turns them into
exceptions on the host side.
"""

from chip8vm.constants import (
    FAULT_NONE, FAULT_MEMORY, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW,
    FAULT_KEYPAD, FAULT_UNKNOWN_OPCODE
)


class Chip8Error(Exception):
    """Base exception for all chip8vm errors."""


class RomTooLargeError(Chip8Error):
    """Program rejected by the loader; memory was left untouched."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit at 0x200")


class FaultError(Chip8Error):
    """A step faulted.

    Attributes:
        code: Fault code from ``chip8vm.constants``
        address: Offending memory address, or the PC for non-memory faults
        opcode: Opcode that was executing
        pc: Program counter of the faulting instruction
    """

    description = "fault"

    def __init__(self, code: int, address: int, opcode: int, pc: int):
        self.code = code
        self.address = address
        self.opcode = opcode
        self.pc = pc
        super().__init__(
            f"{self.description} at PC=0x{pc:03X} (opcode 0x{opcode:04X}, address 0x{address:03X})"
        )


class MemoryFaultError(FaultError):
    description = "memory access out of bounds"


class StackOverflowError(FaultError):
    description = "stack overflow"


class StackUnderflowError(FaultError):
    description = "return with empty stack"


class KeypadFaultError(FaultError):
    description = "key index out of range"


class UnknownOpcodeError(FaultError):
    description = "unknown opcode"


FAULT_ERRORS = {
    FAULT_MEMORY: MemoryFaultError,
    FAULT_STACK_OVERFLOW: StackOverflowError,
    FAULT_STACK_UNDERFLOW: StackUnderflowError,
    FAULT_KEYPAD: KeypadFaultError,
    FAULT_UNKNOWN_OPCODE: UnknownOpcodeError,
}


def raise_for_fault(state) -> None:
    """Raise the FaultError matching ``state.fault``, if any."""
    code = int(state.fault)
    if code == FAULT_NONE:
        return
    error = FAULT_ERRORS.get(code, FaultError)
    raise error(code, int(state.fault_address), int(state.opcode), int(state.pc))
