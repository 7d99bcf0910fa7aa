"""CHIP-8 virtual machine package."""

from octavm.state import EmulatorState, StackState, create_state
from octavm.emulator import execute, fetch, load_rom, read_rom, default_rom, tick_timers
from octavm.decode import DecodedInstruction, decode
from octavm.dispatch import Operation, OPCODE_TABLE, match_operation
from octavm.machine import Machine, MachineConfig, MachineStatus, stop_after, trace
from octavm.io import InputOutput, HeadlessInputOutput
from octavm.errors import (
    MachineError, UnknownInstructionError, StackOverflowError, StackUnderflowError,
    MemoryAccessError, RomTooLargeError, MachineHaltedError,
)
from octavm.constants import PROGRAM_START, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "load_rom",
    "read_rom",
    "default_rom",
    "tick_timers",
    "DecodedInstruction",
    "decode",
    "Operation",
    "OPCODE_TABLE",
    "match_operation",
    "Machine",
    "MachineConfig",
    "MachineStatus",
    "stop_after",
    "trace",
    "InputOutput",
    "HeadlessInputOutput",
    "MachineError",
    "UnknownInstructionError",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryAccessError",
    "RomTooLargeError",
    "MachineHaltedError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
