"""Opcode field extraction.

An opcode ``0xFXYN`` splits into a family nibble F, register nibbles X and Y,
and the immediates N, NN and NNN. Families 0x0, 0x8, 0xE and 0xF select their
operation again from N or NN.
"""

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Opcode fields, each held as an int32 scalar."""
    raw: jnp.ndarray     # Whole 16-bit opcode
    family: jnp.ndarray  # High nibble, indexes the dispatch table
    x: jnp.ndarray       # Second nibble (VX register)
    y: jnp.ndarray       # Third nibble (VY register)
    n: jnp.ndarray       # Low nibble (sprite height, ALU operation)
    nn: jnp.ndarray      # Low byte (immediate, Ex/Fx sub-operation)
    nnn: jnp.ndarray     # Low 12 bits (address)


def decode(instruction) -> DecodedInstruction:
    """Split a 16-bit opcode into its fields."""
    instruction = jnp.astype(instruction, jnp.int32) & 0xFFFF
    return DecodedInstruction(
        raw=instruction,
        family=instruction >> 12,
        x=(instruction >> 8) & 0xF,
        y=(instruction >> 4) & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & 0xFFF,
    )
