"""CHIP-8 framebuffer operations."""

import jax.numpy as jnp
from octavm.state import EmulatorState
from octavm.decode import DecodedInstruction
from octavm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, FLAG_REGISTER, MEMORY_SIZE

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, address, origin_x, origin_y, height) -> jnp.ndarray:
    """Boolean (64, 32) mask of the pixels a sprite sets, wrapped per pixel."""
    col_offset = (xx - jnp.astype(origin_x, jnp.int32)) % SCREEN_WIDTH
    row_offset = (yy - jnp.astype(origin_y, jnp.int32)) % SCREEN_HEIGHT
    in_sprite = (col_offset < SPRITE_WIDTH) & (row_offset < height)

    # Rows outside the sprite read a clamped address and are masked out below.
    row_address = jnp.clip(jnp.astype(address, jnp.int32) + row_offset, 0, MEMORY_SIZE - 1)
    sprite_bytes = jnp.astype(memory[row_address], jnp.int32)
    bits = (sprite_bytes >> (SPRITE_WIDTH - 1 - jnp.minimum(col_offset, SPRITE_WIDTH - 1))) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR an N-row sprite from memory[I] at (VX, VY); VF = 1 if a lit pixel was erased."""
    sprite = sprite_mask(state.memory, state.I, state.V[instruction.x], state.V[instruction.y], instruction.n)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
