"""
Run a ROM without a window and print the final frame.

Usage:
    python examples/headless_run.py [rom.ch8] [instructions]
"""

import sys
import time

from octavm import Machine, HeadlessInputOutput, default_rom, read_rom, stop_after


def frame_to_text(frame) -> str:
    """Render a (64, 32) boolean frame as text, one character per pixel."""
    return "\n".join(
        "".join("█" if frame[x, y] else "·" for x in range(frame.shape[0]))
        for y in range(frame.shape[1])
    )


if __name__ == "__main__":
    rom = read_rom(sys.argv[1]) if len(sys.argv) > 1 else default_rom()
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 1000

    io = HeadlessInputOutput()
    machine = Machine(rom, io, on_cycle=stop_after(count))

    start = time.time()
    machine.run()
    print(f"Ran {machine.cycles} instructions in {time.time() - start:.2f}s")

    print(frame_to_text(machine.snapshot()))
