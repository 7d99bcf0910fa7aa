"""Opcode matching and handler dispatch.

Instruction words are matched against ``OPCODE_TABLE`` in order. Exact
full-word entries come first because the masked ``0NNN`` family would
otherwise swallow ``00E0`` and ``00EE``. The first hit names the
``Operation``; ``HANDLERS`` maps each operation to its compiled semantics.
"""

import enum
from functools import lru_cache

import jax

from octavm.errors import UnknownInstructionError
from octavm.instructions.system import no_op, execute_clear_screen, execute_return
from octavm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from octavm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from octavm.instructions.memory import (
    execute_set, execute_add, execute_set_index, execute_add_to_index, execute_random,
)
from octavm.instructions.display import execute_display
from octavm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_font_character, execute_bcd_conversion,
    execute_store_registers, execute_load_registers,
)


class Operation(enum.Enum):
    CLEAR_SCREEN = "00E0"
    RETURN = "00EE"
    SYSTEM_CALL = "0NNN"
    JUMP = "1NNN"
    CALL = "2NNN"
    SKIP_EQ_IMMEDIATE = "3XNN"
    SKIP_NE_IMMEDIATE = "4XNN"
    SKIP_EQ_REGISTER = "5XY0"
    LOAD_IMMEDIATE = "6XNN"
    ADD_IMMEDIATE = "7XNN"
    COPY = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD = "8XY4"
    SUBTRACT = "8XY5"
    SHIFT_RIGHT = "8XY6"
    SUBTRACT_REVERSE = "8XY7"
    SHIFT_LEFT = "8XYE"
    SKIP_NE_REGISTER = "9XY0"
    LOAD_INDEX = "ANNN"
    JUMP_OFFSET = "BNNN"
    RANDOM = "CXNN"
    DRAW = "DXYN"
    SKIP_KEY_PRESSED = "EX9E"
    SKIP_KEY_NOT_PRESSED = "EXA1"
    READ_DELAY_TIMER = "FX07"
    WAIT_KEY = "FX0A"
    SET_DELAY_TIMER = "FX15"
    SET_SOUND_TIMER = "FX18"
    ADD_INDEX = "FX1E"
    FONT_ADDRESS = "FX29"
    STORE_BCD = "FX33"
    STORE_REGISTERS = "FX55"
    LOAD_REGISTERS = "FX65"


# (mask, pattern, operation), checked top to bottom.
OPCODE_TABLE = (
    (0xFFFF, 0x00E0, Operation.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Operation.RETURN),
    (0xF000, 0x0000, Operation.SYSTEM_CALL),
    (0xF000, 0x1000, Operation.JUMP),
    (0xF000, 0x2000, Operation.CALL),
    (0xF000, 0x3000, Operation.SKIP_EQ_IMMEDIATE),
    (0xF000, 0x4000, Operation.SKIP_NE_IMMEDIATE),
    (0xF00F, 0x5000, Operation.SKIP_EQ_REGISTER),
    (0xF000, 0x6000, Operation.LOAD_IMMEDIATE),
    (0xF000, 0x7000, Operation.ADD_IMMEDIATE),
    (0xF00F, 0x8000, Operation.COPY),
    (0xF00F, 0x8001, Operation.OR),
    (0xF00F, 0x8002, Operation.AND),
    (0xF00F, 0x8003, Operation.XOR),
    (0xF00F, 0x8004, Operation.ADD),
    (0xF00F, 0x8005, Operation.SUBTRACT),
    (0xF00F, 0x8006, Operation.SHIFT_RIGHT),
    (0xF00F, 0x8007, Operation.SUBTRACT_REVERSE),
    (0xF00F, 0x800E, Operation.SHIFT_LEFT),
    (0xF00F, 0x9000, Operation.SKIP_NE_REGISTER),
    (0xF000, 0xA000, Operation.LOAD_INDEX),
    (0xF000, 0xB000, Operation.JUMP_OFFSET),
    (0xF000, 0xC000, Operation.RANDOM),
    (0xF000, 0xD000, Operation.DRAW),
    (0xF0FF, 0xE09E, Operation.SKIP_KEY_PRESSED),
    (0xF0FF, 0xE0A1, Operation.SKIP_KEY_NOT_PRESSED),
    (0xF0FF, 0xF007, Operation.READ_DELAY_TIMER),
    (0xF0FF, 0xF00A, Operation.WAIT_KEY),
    (0xF0FF, 0xF015, Operation.SET_DELAY_TIMER),
    (0xF0FF, 0xF018, Operation.SET_SOUND_TIMER),
    (0xF0FF, 0xF01E, Operation.ADD_INDEX),
    (0xF0FF, 0xF029, Operation.FONT_ADDRESS),
    (0xF0FF, 0xF033, Operation.STORE_BCD),
    (0xF0FF, 0xF055, Operation.STORE_REGISTERS),
    (0xF0FF, 0xF065, Operation.LOAD_REGISTERS),
)


@lru_cache(maxsize=None)
def match_operation(instruction: int) -> Operation:
    """Return the first table operation matching a 16-bit word."""
    for mask, pattern, operation in OPCODE_TABLE:
        if instruction & mask == pattern:
            return operation
    raise UnknownInstructionError(instruction)


HANDLERS = {
    operation: jax.jit(handler)
    for operation, handler in {
        Operation.CLEAR_SCREEN: execute_clear_screen,
        Operation.RETURN: execute_return,
        Operation.SYSTEM_CALL: no_op,
        Operation.JUMP: execute_jump,
        Operation.CALL: execute_call,
        Operation.SKIP_EQ_IMMEDIATE: execute_skip_if_equal_immediate,
        Operation.SKIP_NE_IMMEDIATE: execute_skip_if_not_equal_immediate,
        Operation.SKIP_EQ_REGISTER: execute_skip_if_equal_register,
        Operation.LOAD_IMMEDIATE: execute_set,
        Operation.ADD_IMMEDIATE: execute_add,
        Operation.COPY: execute_alu_set,
        Operation.OR: execute_alu_or,
        Operation.AND: execute_alu_and,
        Operation.XOR: execute_alu_xor,
        Operation.ADD: execute_alu_add,
        Operation.SUBTRACT: execute_alu_sub_xy,
        Operation.SHIFT_RIGHT: execute_alu_shift_right,
        Operation.SUBTRACT_REVERSE: execute_alu_sub_yx,
        Operation.SHIFT_LEFT: execute_alu_shift_left,
        Operation.SKIP_NE_REGISTER: execute_skip_if_not_equal_register,
        Operation.LOAD_INDEX: execute_set_index,
        Operation.JUMP_OFFSET: execute_jump_with_offset,
        Operation.RANDOM: execute_random,
        Operation.DRAW: execute_display,
        Operation.SKIP_KEY_PRESSED: execute_skip_if_key_pressed,
        Operation.SKIP_KEY_NOT_PRESSED: execute_skip_if_key_not_pressed,
        Operation.READ_DELAY_TIMER: execute_get_delay_timer,
        Operation.WAIT_KEY: execute_wait_for_key,
        Operation.SET_DELAY_TIMER: execute_set_delay_timer,
        Operation.SET_SOUND_TIMER: execute_set_sound_timer,
        Operation.ADD_INDEX: execute_add_to_index,
        Operation.FONT_ADDRESS: execute_font_character,
        Operation.STORE_BCD: execute_bcd_conversion,
        Operation.STORE_REGISTERS: execute_store_registers,
        Operation.LOAD_REGISTERS: execute_load_registers,
    }.items()
}
