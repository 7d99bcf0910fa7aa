"""CHIP-8 ALU operations (8xxx).

Each ``alu_*`` function maps ``(vx, vy)`` to ``(result, flag)``. Flags are
computed on the unmasked intermediate, then the result is truncated to
8 bits.
"""

import jax.numpy as jnp
from octavm.constants import BYTE_MASK, FLAG_REGISTER
from octavm.state import EmulatorState
from octavm.decode import DecodedInstruction


def _widen(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.int32)


def _no_flag() -> jnp.ndarray:
    return jnp.zeros((), dtype=jnp.int32)


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return _widen(vy), _no_flag()


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return _widen(vx) | _widen(vy), _no_flag()


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return _widen(vx) & _widen(vy), _no_flag()


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return _widen(vx) ^ _widen(vy), _no_flag()


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = _widen(vx) + _widen(vy)
    carry = _widen(result > BYTE_MASK)
    return result & BYTE_MASK, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 only when VX > VY."""
    vx, vy = _widen(vx), _widen(vy)
    # Strictly greater: equal operands clear VF.
    not_borrow = _widen(vx > vy)
    return (vx - vy) & BYTE_MASK, not_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1."""
    vx = _widen(vx)
    return vx >> 1, vx & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 only when VY > VX."""
    vx, vy = _widen(vx), _widen(vy)
    not_borrow = _widen(vy > vx)
    return (vy - vx) & BYTE_MASK, not_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1."""
    vx = _widen(vx)
    return (vx << 1) & BYTE_MASK, (vx & 0x80) >> 7


def make_alu_instruction(alu_fn, sets_flag: bool = True):
    """Factory for 8XYN instructions; VF is written after VX."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        new_V = state.V.at[instruction.x].set(jnp.astype(result & BYTE_MASK, jnp.uint8))
        if sets_flag:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    alu_instruction.__doc__ = alu_fn.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set, sets_flag=False)
execute_alu_or = make_alu_instruction(alu_or, sets_flag=False)
execute_alu_and = make_alu_instruction(alu_and, sets_flag=False)
execute_alu_xor = make_alu_instruction(alu_xor, sets_flag=False)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
