"""Semantics of the CHIP-8 instruction families.

Every function here has the signature ``(state, instruction) -> state`` and
is pure, so the dispatcher can compile it with ``jax.jit``.
"""
