"""CHIP-8 ALU operations (8xxx).

Every operation receives VX, VY and VF as int32 and returns ``(result, vf)``.
Results are reduced to a byte by the dispatcher.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.instructions.system import advance, unknown_instruction


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    carry = jnp.astype(result > 255, jnp.int32)
    return result & 0xFF, carry


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    not_borrow = jnp.astype(vx > vy, jnp.int32)
    return (vx - vy) & 0xFF, not_borrow


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right: VX >>= 1."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    not_borrow = jnp.astype(vy > vx, jnp.int32)
    return (vy - vx) & 0xFF, not_borrow


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left: VX <<= 1."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher.

    8XY4 computes from the operands as they were and writes VF last. The
    flag-setting operations 5, 6, 7 and E write VF first and then compute VX
    from the updated registers, so a VF operand sees the new flag.
    """
    valid_ops = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)
    # Map valid operations 0-7 and 14 onto 0-8
    op_index = jnp.where(instruction.n == 14, 8, instruction.n)
    operations = [alu_set, alu_or, alu_and, alu_xor, alu_add,
                  alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left]

    def _operate(V):
        vx = jnp.astype(V[instruction.x], jnp.int32)
        vy = jnp.astype(V[instruction.y], jnp.int32)
        vf = jnp.astype(V[FLAG_REGISTER], jnp.int32)
        result, flag = jax.lax.switch(op_index, operations, vx, vy, vf)
        return jnp.astype(result, jnp.uint8), jnp.astype(flag, jnp.uint8)

    def _apply(state):
        sum_result, flag = _operate(state.V)
        flagged = state.V.at[FLAG_REGISTER].set(flag)
        result, _ = _operate(flagged)

        add_V = state.V.at[instruction.x].set(sum_result).at[FLAG_REGISTER].set(flag)
        new_V = jnp.where(instruction.n == 4, add_V, flagged.at[instruction.x].set(result))
        return advance(state.replace(V=new_V))

    return jax.lax.cond(
        valid_ops[instruction.n],
        _apply,
        lambda state: unknown_instruction(state, instruction),
        state
    )
