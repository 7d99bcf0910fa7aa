"""Main CHIP-8 execution engine."""

from importlib import resources

import jax
import jax.numpy as jnp
import numpy as np

from octavm.state import EmulatorState
from octavm.decode import DecodedInstruction, decode
from octavm.dispatch import Operation, HANDLERS, match_operation
from octavm.constants import PROGRAM_START, MAX_ROM_SIZE, ADDRESS_LIMIT, STACK_SIZE
from octavm.errors import (
    MemoryAccessError, RomTooLargeError, StackOverflowError, StackUnderflowError,
)

DEFAULT_ROM = "default.ch8"


def _check_range(start: int, length: int, action: str) -> None:
    end = start + length - 1
    if length > 0 and end > ADDRESS_LIMIT:
        raise MemoryAccessError(end, action)


def check_access(state: EmulatorState, operation: Operation, instruction: DecodedInstruction) -> None:
    """Raise if ``operation`` would leave the stack or memory bounds.

    Compiled handlers clamp out-of-range indices silently, so every bound is
    checked here on concrete values first.
    """
    if operation is Operation.CALL:
        if int(state.stack.pointer) >= STACK_SIZE:
            raise StackOverflowError(instruction.nnn)
    elif operation is Operation.RETURN:
        if int(state.stack.pointer) <= 0:
            raise StackUnderflowError()
    elif operation is Operation.DRAW:
        _check_range(int(state.I), instruction.n, "read")
    elif operation is Operation.STORE_BCD:
        _check_range(int(state.I), 3, "write")
    elif operation is Operation.STORE_REGISTERS:
        _check_range(int(state.I), instruction.x + 1, "write")
    elif operation is Operation.LOAD_REGISTERS:
        _check_range(int(state.I), instruction.x + 1, "read")


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    operation = match_operation(decoded_instruction.raw)
    check_access(state, operation, decoded_instruction)
    return HANDLERS[operation](state, decoded_instruction)


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory and advance the program counter."""
    pc = int(state.pc)
    _check_range(pc, 2, "fetch")
    high, low = np.asarray(state.memory[pc:pc + 2])
    return state.replace(pc=state.pc + 2), (int(high) << 8) | int(low)


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement the delay and sound timers toward zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom_data), MAX_ROM_SIZE)
    memory = state.memory
    if rom_data:
        rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
        memory = memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=memory, pc=jnp.astype(PROGRAM_START, jnp.uint16))


def read_rom(filename: str) -> bytes:
    """Read a raw ROM image from disk."""
    with open(filename, 'rb') as f:
        return f.read()


def default_rom() -> bytes:
    """Bytes of the ROM bundled with the package."""
    return resources.files("octavm").joinpath("roms").joinpath(DEFAULT_ROM).read_bytes()
