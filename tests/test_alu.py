"""Tests for ALU operations (8xxx)."""

import pytest
from octavm import execute
from octavm.instructions.alu import alu_add, alu_sub_xy, alu_sub_yx, alu_shift_left, alu_shift_right
from conftest import set_registers


class TestBasicALU:
    """Test copy and bitwise operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99, VF=0x07)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99
        assert state.V[15] == 0x07  # Untouched

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_bitwise_ops_leave_flag_alone(self, fresh_state):
        state = set_registers(fresh_state, V1=0x0C, V2=0x0A, VF=0x05)

        for instruction in (0x8121, 0x8122, 0x8123):
            state = execute(state, instruction)
            assert state.V[15] == 0x05, f"{instruction:04X} changed VF"


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1  # Carry set

    def test_alu_add_exact_limit(self, fresh_state):
        state = set_registers(fresh_state, V1=0xFE, V2=0x01)

        state = execute(state, 0x8124)

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    def test_carry_uses_unmasked_sum(self):
        """The carry test runs before truncation: 254 + 512 carries, 766 mod 256 = 254."""
        result, carry = alu_add(254, 512)
        assert result == 254
        assert carry == 1

    def test_alu_sub_xy_not_borrow(self, fresh_state):
        """8XY5 - 5 - 3 = 2, VF = 1."""
        state = set_registers(fresh_state, V1=5, V2=3)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 2
        assert state.V[15] == 1

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - 4 - 7 wraps to 253, VF = 0."""
        state = set_registers(fresh_state, V3=4, V4=7)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 253
        assert state.V[15] == 0

    def test_alu_sub_xy_equal_operands_clear_flag(self, fresh_state):
        """Not-borrow is strictly greater-than: equal operands give VF = 0."""
        state = set_registers(fresh_state, V1=0x42, V2=0x42)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 0

    def test_alu_sub_yx_not_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0  # 16 - 48 = -32 -> 224
        assert state.V[15] == 0

    def test_alu_sub_yx_equal_operands_clear_flag(self):
        result, flag = alu_sub_yx(9, 9)
        assert result == 0
        assert flag == 0

    @pytest.mark.parametrize("vx, vy, expected, flag", [
        (5, 3, 2, 1),
        (4, 7, 253, 0),
        (0, 0, 0, 0),
        (255, 0, 255, 1),
        (0, 255, 1, 0),
    ])
    def test_alu_sub_xy_table(self, vx, vy, expected, flag):
        result, not_borrow = alu_sub_xy(vx, vy)
        assert result == expected
        assert not_borrow == flag


class TestALUShifts:
    """Test shift operations; the shifted-out bit comes from VX before shifting."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)  # V2 ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = set_registers(fresh_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - 0x81 << 1 = 2, top bit captured."""
        state = set_registers(fresh_state, V3=0x81, V4=0xFF)

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - 0x01 << 1 = 2, no carry."""
        state = set_registers(fresh_state, V3=0x01)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x02
        assert state.V[15] == 0

    def test_shift_functions(self):
        result, flag = alu_shift_left(0x80, 0)
        assert result == 0 and flag == 1

        result, flag = alu_shift_right(0x01, 0)
        assert result == 0 and flag == 1


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)  # V5 ^= V5
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_as_source(self, fresh_state):
        """VF is overwritten by the flag after being read as an operand."""
        state = set_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52
        assert state.V[15] == 0

    def test_vf_as_destination_holds_flag(self, fresh_state):
        """With X = F the flag wins over the arithmetic result."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x01)

        state = execute(state, 0x8F14)  # VF += V1 -> 0 with carry

        assert state.V[15] == 1
