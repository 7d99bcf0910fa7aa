"""pygame display/input adapter.

pygame wants its event loop on the main thread, so the window runs there
while the machine runs on a worker thread (``Machine.run_in_thread``). The
two sides share only the key set and the latest frame.
"""

from typing import AbstractSet, Optional

import numpy as np
import pygame

from octavm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, TIMER_FREQUENCY
from octavm.io import FrameBuffer, KeyState
from octavm.logging import ConsoleLogger
from octavm.rendering import chip8_display_to_rgb, create_color_scheme

# Hex keypad on the hex digit keys
KEY_MAP = {
    pygame.K_0: 0x0, pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3,
    pygame.K_4: 0x4, pygame.K_5: 0x5, pygame.K_6: 0x6, pygame.K_7: 0x7,
    pygame.K_8: 0x8, pygame.K_9: 0x9, pygame.K_a: 0xA, pygame.K_b: 0xB,
    pygame.K_c: 0xC, pygame.K_d: 0xD, pygame.K_e: 0xE, pygame.K_f: 0xF,
}


class PygameInputOutput:
    """Window that paints published frames and tracks the hex keypad."""

    def __init__(self, scale: int = 10, color_scheme: str = "classic", title: str = "CHIP-8",
                 logger: Optional[ConsoleLogger] = None):
        self.scale = scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        self.title = title
        self.logger = logger if logger is not None else ConsoleLogger("Window")
        self.keys = KeyState()
        self.frames = FrameBuffer()

    def pressed_keys(self) -> AbstractSet[int]:
        return self.keys.snapshot()

    def draw(self, frame: np.ndarray) -> None:
        self.frames.publish(frame)

    def handle_event(self, event) -> bool:
        """Apply one pygame event; returns False when the window should close."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key in KEY_MAP:
                self.keys.press(KEY_MAP[event.key])
        elif event.type == pygame.KEYUP and event.key in KEY_MAP:
            self.keys.release(KEY_MAP[event.key])
        return True

    def run(self, machine) -> None:
        """Show the window until it is closed or the machine halts."""
        pygame.init()
        screen = pygame.display.set_mode((SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        pygame.display.set_caption(self.title)
        clock = pygame.time.Clock()
        thread = machine.run_in_thread()
        self.logger.info("Window open: hex keys 0-9 and A-F, ESC to quit")

        try:
            while thread.is_alive():
                if not all(self.handle_event(event) for event in pygame.event.get()):
                    machine.stop()
                    break

                rgb = chip8_display_to_rgb(self.frames.latest(), self.scale, self.on_color, self.off_color)
                # surfarray expects (width, height, 3)
                pygame.surfarray.blit_array(screen, rgb.swapaxes(0, 1))
                pygame.display.flip()
                clock.tick(TIMER_FREQUENCY)
        finally:
            machine.stop()
            thread.join()
            pygame.quit()
