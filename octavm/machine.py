"""Dual-rate scheduling loop driving one CHIP-8 machine.

A ``Machine`` owns one ``EmulatorState`` for the lifetime of a run. Its
``run`` loop polls a monotonic clock and fires two independent activities:
an instruction tick (fetch, decode, execute) at ``instruction_frequency``
and a timer tick (decrement timers, publish the framebuffer) at
``timer_frequency``. Both may fire in the same iteration. When neither is
due the loop sleeps for ``idle_sleep`` instead of blocking on a boundary.

Each tick is due one period after its previous deadline, not after the
moment it was polled, so polling overshoot does not lower the rate. A tick
that falls more than ``MAX_LAG_PERIODS`` behind restarts from the current
time instead of bursting to catch up.
"""

import dataclasses
import enum
import threading
import time
from typing import Callable, Optional

import jax
import jax.numpy as jnp
import numpy as np

from octavm.constants import INSTRUCTION_FREQUENCY, TIMER_FREQUENCY, NUM_KEYS
from octavm.decode import DecodedInstruction, decode
from octavm.emulator import execute, fetch, load_rom, tick_timers
from octavm.errors import MachineError, MachineHaltedError
from octavm.io import InputOutput
from octavm.logging import MachineLogger
from octavm.state import EmulatorState, create_state

# A tick lagging more than this many periods behind is resynced to the clock.
MAX_LAG_PERIODS = 4


@dataclasses.dataclass(frozen=True)
class MachineConfig:
    """Scheduling configuration.

    Attributes:
        instruction_frequency: Instructions executed per second
        timer_frequency: Timer decrements and frame publications per second
        idle_sleep: Seconds slept when no tick is due
        seed: Seed of the random source used by CXNN
    """
    instruction_frequency: float = INSTRUCTION_FREQUENCY
    timer_frequency: float = TIMER_FREQUENCY
    idle_sleep: float = 0.0005
    seed: int = 0

    def __post_init__(self):
        if self.instruction_frequency <= 0 or self.timer_frequency <= 0:
            raise ValueError("Frequencies must be positive")
        if self.idle_sleep < 0:
            raise ValueError("idle_sleep must not be negative")

    @property
    def instruction_period(self) -> float:
        return 1.0 / self.instruction_frequency

    @property
    def timer_period(self) -> float:
        return 1.0 / self.timer_frequency


class MachineStatus(enum.Enum):
    BOOTING = "booting"
    RUNNING = "running"
    HALTED = "halted"


CycleObserver = Callable[["Machine", DecodedInstruction], None]


def _next_deadline(last: float, period: float, now: float) -> float:
    last += period
    if now - last >= MAX_LAG_PERIODS * period:
        return now
    return last


class Machine:
    """One CHIP-8 machine: its state, its adapter and its scheduling loop."""

    def __init__(
        self,
        rom: bytes,
        io: InputOutput,
        config: MachineConfig = MachineConfig(),
        on_cycle: Optional[CycleObserver] = None,
        logger: Optional[MachineLogger] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Create a machine; nothing runs until ``boot`` or ``run``.

        Args:
            rom: Raw program bytes, copied to 0x200 at boot
            io: Display/input adapter queried for keys and handed frames
            config: Scheduling configuration
            on_cycle: Observer called after every dispatched instruction
            logger: Lifecycle logger (a default one is created if omitted)
            clock: Monotonic clock in seconds
            sleep: Cooperative wait used when no tick is due
        """
        self.rom = bytes(rom)
        self.io = io
        self.config = config
        self.on_cycle = on_cycle
        self.logger = logger if logger is not None else MachineLogger()
        self.clock = clock
        self.sleep = sleep

        self.state: Optional[EmulatorState] = None
        self.status = MachineStatus.BOOTING
        self.running = False
        self.previous_instruction: Optional[DecodedInstruction] = None
        self.error: Optional[BaseException] = None
        self.cycles = 0
        self.timer_ticks = 0
        self._keys = frozenset()
        self._started_at = None

    def boot(self) -> EmulatorState:
        """Load font and ROM and enter the running state."""
        if self.status is MachineStatus.HALTED:
            raise MachineHaltedError("Cannot boot a halted machine")
        state = create_state(jax.random.PRNGKey(self.config.seed))
        self.state = load_rom(state, self.rom)
        self.status = MachineStatus.RUNNING
        self.running = True
        self._started_at = self.clock()
        self.logger.log_boot(len(self.rom), self.config.instruction_frequency, self.config.timer_frequency)
        return self.state

    def _ensure_running(self):
        if self.status is MachineStatus.HALTED:
            raise MachineHaltedError("Machine is halted")
        if self.status is MachineStatus.BOOTING:
            self.boot()

    def _refresh_keypad(self):
        keys = frozenset(k for k in self.io.pressed_keys() if 0 <= k < NUM_KEYS)
        if keys != self._keys:
            self._keys = keys
            keypad = jnp.array([k in keys for k in range(NUM_KEYS)], dtype=jnp.bool_)
            self.state = self.state.replace(keypad=keypad)

    def cycle(self) -> DecodedInstruction:
        """Run one fetch-decode-execute cycle; fatal errors halt the machine."""
        self._ensure_running()
        try:
            self._refresh_keypad()
            state, instruction = fetch(self.state)
            self.state = execute(state, instruction)
        except MachineError as e:
            self.halt(e)
            raise

        self.previous_instruction = decode(instruction)
        self.cycles += 1
        if self.on_cycle is not None:
            self.on_cycle(self, self.previous_instruction)
        return self.previous_instruction

    def tick_timers(self):
        """Decrement nonzero timers, then publish the framebuffer."""
        self._ensure_running()
        self.state = tick_timers(self.state)
        self.timer_ticks += 1
        self.io.draw(self.snapshot())

    def snapshot(self) -> np.ndarray:
        """Copy of the framebuffer, shape (64, 32), indexed [x, y]."""
        return np.array(self.state.display, dtype=np.bool_)

    def run(self):
        """Run until ``stop`` is called or a fatal error occurs."""
        self._ensure_running()
        instruction_period = self.config.instruction_period
        timer_period = self.config.timer_period
        last_instruction = last_timer = self.clock()

        try:
            while self.running:
                now = self.clock()
                fired = False
                if now - last_instruction >= instruction_period:
                    last_instruction = _next_deadline(last_instruction, instruction_period, now)
                    self.cycle()
                    fired = True
                if self.running and now - last_timer >= timer_period:
                    last_timer = _next_deadline(last_timer, timer_period, now)
                    self.tick_timers()
                    fired = True
                if not fired:
                    self.sleep(self.config.idle_sleep)
        except BaseException as e:
            self.halt(e)
            raise

        if self.status is not MachineStatus.HALTED:
            self.halt()

    def stop(self):
        """Ask the loop to finish; observed at the top of the next iteration."""
        self.running = False

    def halt(self, error: Optional[BaseException] = None):
        """Enter the terminal state, recording ``error`` if there was one."""
        if self.status is MachineStatus.HALTED:
            return
        self.running = False
        self.status = MachineStatus.HALTED
        self.error = error
        elapsed = self.clock() - self._started_at if self._started_at is not None else 0.0
        if error is not None:
            self.logger.log_crash(error, self.state)
            self.logger.log_halt("crashed", self.cycles, elapsed)
        else:
            self.logger.log_halt("stopped", self.cycles, elapsed)

    def run_in_thread(self) -> threading.Thread:
        """Start ``run`` on a daemon thread; errors stay available as ``self.error``."""
        def target():
            try:
                self.run()
            except BaseException:
                # Already logged and recorded by halt().
                pass

        thread = threading.Thread(target=target, name="octavm-machine", daemon=True)
        thread.start()
        return thread


def stop_after(count: int) -> CycleObserver:
    """Observer that stops the machine after ``count`` instructions."""
    def observer(machine: Machine, instruction: DecodedInstruction):
        if machine.cycles >= count:
            machine.stop()
    return observer


def trace(logger: MachineLogger) -> CycleObserver:
    """Observer logging every executed instruction at DEBUG level."""
    def observer(machine: Machine, instruction: DecodedInstruction):
        logger.debug(f"{machine.cycles:>8d}  {instruction.raw:04X}  PC={int(machine.state.pc):03X}")
    return observer
