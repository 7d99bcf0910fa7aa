"""CHIP-8 timer, keypad and memory block instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from octavm.state import EmulatorState
from octavm.decode import DecodedInstruction
from octavm.constants import FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS, MEMORY_SIZE


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Without a pressed key the program counter is rewound so the instruction
    runs again on the next cycle. Otherwise VX receives the lowest pressed key.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x], jnp.int32) & 0xF
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = jnp.astype(state.V[instruction.x], jnp.int32)

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ]).astype(jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory)


def _block_indices(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Addresses I..I+X for V0..VX; unused slots point past memory and are dropped."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    return jnp.where(register_mask, addresses, MEMORY_SIZE)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    indices = _block_indices(state, instruction)
    return state.replace(memory=state.memory.at[indices].set(state.V, mode="drop"))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    indices = _block_indices(state, instruction)
    memory_values = state.memory.at[indices].get(mode="fill", fill_value=0)
    new_V = jnp.where(indices < MEMORY_SIZE, memory_values, state.V)
    return state.replace(V=new_V)
