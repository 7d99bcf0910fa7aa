"""Run a ROM in a window: ``python -m octavm [ROM]``."""

import argparse
import sys

from octavm.emulator import default_rom, read_rom
from octavm.logging import ConsoleLogger
from octavm.machine import Machine


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="octavm", description="CHIP-8 virtual machine")
    parser.add_argument("rom", nargs="?", help="ROM file to run (default: bundled demo)")
    args = parser.parse_args(argv)

    logger = ConsoleLogger("octavm")
    if args.rom:
        rom = read_rom(args.rom)
        logger.info(f"Loaded: {args.rom}")
    else:
        rom = default_rom()
        logger.info("Loaded: bundled default ROM")

    # pygame is only needed for the window.
    from octavm.window import PygameInputOutput

    window = PygameInputOutput()
    machine = Machine(rom, window)
    window.run(machine)
    return 1 if machine.error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
