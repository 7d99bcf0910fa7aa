"""Console logging for octavm machines.

``ConsoleLogger`` writes leveled, optionally colored lines with timestamps
relative to its creation. ``MachineLogger`` adds the boot, halt and crash
reports a machine emits, the latter with a register dump.
"""

import sys
import threading
import time
from typing import Optional, TextIO

from octavm.constants import NUM_REGISTERS

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


class ConsoleLogger:
    """Leveled console logger; colors are only used on a terminal."""

    def __init__(
        self,
        name: str = "octavm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level {log_level!r}")
        self.stream = stream if stream is not None else sys.stdout
        isatty = getattr(self.stream, "isatty", None)
        self.use_colors = use_colors and isatty is not None and isatty()
        self.show_timestamps = show_timestamps
        self.created = time.time()
        # The machine thread and the window loop both log.
        self._lock = threading.Lock()

    def enabled(self, level: str) -> bool:
        return LEVELS.index(level) >= LEVELS.index(self.log_level)

    def format(self, level: str, message: str) -> str:
        prefix = f"[{time.time() - self.created:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{ANSI_COLORS[level]}{tag}{ANSI_RESET}"
        return f"{prefix}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        level = level.upper()
        if not self.enabled(level):
            return
        line = self.format(level, message)
        with self._lock:
            print(line, file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class MachineLogger(ConsoleLogger):
    """Logger for machine lifecycle events."""

    def __init__(self, name: str = "Machine", **kwargs):
        super().__init__(name, **kwargs)

    def log_boot(self, rom_size: int, instruction_frequency: float, timer_frequency: float):
        self.info(
            f"Booted {rom_size} byte ROM "
            f"(cpu {instruction_frequency:g} Hz, timers {timer_frequency:g} Hz)"
        )

    def log_halt(self, reason: str, cycles: int, elapsed: float):
        rate = cycles / elapsed if elapsed > 0 else 0.0
        self.info(f"Halted ({reason}) after {cycles:,} instructions, {elapsed:.2f}s, {rate:.0f} ips")

    def log_crash(self, error: Exception, state=None):
        """Log a fatal error followed by the registers at the time of failure."""
        self.error(f"{type(error).__name__}: {error}")
        if state is None:
            return
        self.error(
            f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}  "
            f"SP: {int(state.stack.pointer)}  DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}"
        )
        for i in range(0, NUM_REGISTERS, 8):
            self.error("  ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 8)))
