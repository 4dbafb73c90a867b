"""Tests for ALU operations (8xxx)."""

import pytest
from chix8 import execute, step, Fault
from conftest import load_program


def with_registers(state, **registers):
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = with_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = with_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = with_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = with_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    @pytest.mark.parametrize("instruction", [0x8120, 0x8121, 0x8122, 0x8123])
    def test_logical_operations_leave_vf_alone(self, fresh_state, instruction):
        state = with_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x42)

        state = execute(state, instruction)

        assert state.V[15] == 0x42


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = with_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    @pytest.mark.parametrize("x,y", [(0, 1), (3, 7), (0xA, 0xB), (0xE, 0x2)])
    def test_alu_add_wraps_with_carry(self, fresh_state, x, y):
        """8XY4 - 250 + 10 wraps to 4 and sets the carry."""
        state = with_registers(fresh_state, **{f"V{x:X}": 250, f"V{y:X}": 10})

        state = execute(state, 0x8004 | (x << 8) | (y << 4))

        assert state.V[x] == 4
        assert state.V[15] == 1

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = with_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1

    @pytest.mark.parametrize("x,y", [(0, 1), (4, 9), (0xC, 0xD)])
    def test_alu_sub_xy_with_borrow(self, fresh_state, x, y):
        """8XY5 - 10 - 250 wraps to 16 and clears VF."""
        state = with_registers(fresh_state, **{f"V{x:X}": 10, f"V{y:X}": 250})

        state = execute(state, 0x8005 | (x << 8) | (y << 4))

        assert state.V[x] == 16
        assert state.V[15] == 0

    def test_alu_sub_xy_equal_values_clear_flag(self, fresh_state):
        """8XY5 - VF is set only when VX is strictly greater."""
        state = with_registers(fresh_state, V1=0x33, V2=0x33, VF=1)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 0

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = with_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - VY < VX wraps and clears VF."""
        state = with_registers(fresh_state, V1=0x30, V2=0x10, VF=1)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0  # 16 - 48 = -32 -> 224
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations."""

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - 0b11 >> 1 = 0b1, bit shifted out is 1."""
        state = with_registers(fresh_state, V3=0b00000011, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0b00000001
        assert state.V[15] == 1
        assert state.V[4] == 0xFF  # VY is not used

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = with_registers(fresh_state, V1=0x04)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x02
        assert state.V[15] == 0

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - 0b10000001 << 1 = 0b00000010, MSB shifted out is 1."""
        state = with_registers(fresh_state, V3=0b10000001, V4=0xFF)

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0b00000010
        assert state.V[15] == 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - MSB 0 clears VF."""
        state = with_registers(fresh_state, V3=0x41, VF=1)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    @pytest.mark.parametrize("op", [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF])
    def test_alu_undefined_operations_fault(self, fresh_state, op):
        """Undefined 8XYN sub-opcodes halt with a decode fault."""
        state = load_program(fresh_state, [0x8120 | op])
        state = with_registers(state, V1=0x42, V2=0x99)

        state = step(state)

        assert int(state.fault) == Fault.DECODE
        assert int(state.fault_pc) == 0x200
        assert int(state.fault_word) == 0x8120 | op
        assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
        assert state.V[15] == 0, f"Undefined op {op:X} changed VF"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = with_registers(fresh_state, V5=0xAA)

        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        state = with_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_as_source_register(self, fresh_state):
        """VF read as VY uses its value before the flag is written."""
        state = with_registers(fresh_state, V1=0x10, VF=0x42)

        state = execute(state, 0x81F4)  # V1 += VF

        assert state.V[1] == 0x52
        assert state.V[15] == 0

    def test_vf_as_destination_holds_flag(self, fresh_state):
        """When X is F, the flag overwrites the arithmetic result."""
        state = with_registers(fresh_state, VF=200, VE=100)

        state = execute(state, 0x8FE4)  # VF += VE, carry out

        assert state.V[15] == 1

    def test_vf_as_destination_flag_from_pre_values(self, fresh_state):
        """Flags are computed from the operands before anything is written."""
        state = with_registers(fresh_state, VF=0x81)

        state = execute(state, 0x8FFE)  # VF <<= 1, MSB was 1

        assert state.V[15] == 1

    @pytest.mark.parametrize("instruction, expected", [
        (0x8F10, 0x3C),  # VF = V1
        (0x8F11, 0x3D),  # VF |= V1
        (0x8F12, 0x00),  # VF &= V1
        (0x8F13, 0x3D),  # VF ^= V1
    ])
    def test_logical_operations_into_vf_keep_result(self, fresh_state, instruction, expected):
        """Logical ops have no flag, so with X = F the result stays in VF."""
        state = with_registers(fresh_state, V1=0x3C, VF=0x01)

        state = execute(state, instruction)

        assert state.V[15] == expected
        assert state.V[1] == 0x3C

    @pytest.mark.parametrize("instruction, expected", [
        (0x8F15, 0),  # VF -= V1, 0x01 > 0x3C is false
        (0x8F16, 1),  # VF >>= 1, bit 0 of 0x01
        (0x8F17, 1),  # VF = V1 - VF, 0x3C > 0x01
    ])
    def test_arithmetic_operations_into_vf_hold_flag(self, fresh_state, instruction, expected):
        """Arithmetic ops with X = F leave the flag, not the result, in VF."""
        state = with_registers(fresh_state, V1=0x3C, VF=0x01)

        state = execute(state, instruction)

        assert state.V[15] == expected
