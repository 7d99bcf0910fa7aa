"""CHIP-8 register load and index instructions."""

import jax
import jax.numpy as jnp
from octavm.constants import BYTE_MASK, WORD_MASK
from octavm.state import EmulatorState
from octavm.decode import DecodedInstruction


def _as_byte(value) -> jnp.ndarray:
    return jnp.astype(jnp.astype(value, jnp.int32) & BYTE_MASK, jnp.uint8)


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(_as_byte(instruction.nn)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, no carry flag."""
    total = jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn
    return state.replace(V=state.V.at[instruction.x].set(_as_byte(total)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, VF untouched."""
    new_i = (jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)) & WORD_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    return state.replace(V=state.V.at[instruction.x].set(_as_byte(random_value & instruction.nn)), rng=key)
