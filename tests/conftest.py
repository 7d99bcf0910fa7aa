"""Test configuration and fixtures for octavm tests."""

import pytest
import jax.numpy as jnp
from octavm import create_state, HeadlessInputOutput, Machine, MachineConfig
from octavm.logging import MachineLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def headless_io():
    return HeadlessInputOutput()


@pytest.fixture
def quiet_logger():
    """Logger that only reports errors, so test output stays readable."""
    return MachineLogger(log_level="ERROR", use_colors=False)


class FakeClock:
    """Deterministic clock; time only moves when the loop sleeps."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = 0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps += 1
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_machine(headless_io, quiet_logger, fake_clock):
    """Factory building a machine around a list of 16-bit instructions."""
    def _make(instructions=(), config=None, on_cycle=None, rom=None):
        if rom is None:
            rom = program(*instructions)
        return Machine(
            rom,
            headless_io,
            config=config if config is not None else MachineConfig(),
            on_cycle=on_cycle,
            logger=quiet_logger,
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )
    return _make


def program(*instructions: int) -> bytes:
    """Encode 16-bit instructions big-endian."""
    return b"".join(instruction.to_bytes(2, "big") for instruction in instructions)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Set registers by name, e.g. ``set_registers(state, V1=0x10, V2=0x20)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
