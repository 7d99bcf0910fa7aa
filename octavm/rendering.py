"""Framebuffer rendering utilities."""

import numpy as np
from typing import Tuple

from octavm.constants import SCREEN_WIDTH, SCREEN_HEIGHT

Color = Tuple[int, int, int]

COLOR_SCHEMES = {
    "octavm": ((179, 102, 184), (45, 25, 61)),
    "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
    "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
    "white": ((255, 255, 255), (0, 0, 0)),  # White on black
    "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
}


def chip8_display_to_rgb(
    display: np.ndarray,
    scale: int = 8,
    on_color: Color = (0, 255, 0),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert a boolean framebuffer to an RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32), indexed [x, y]
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = np.asarray(display, dtype=np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape ({SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {pixels.shape}")
    if scale < 1:
        raise ValueError(f"Scale must be at least 1, got {scale}")

    # (64 width, 32 height) -> image rows first: (32 height, 64 width)
    pixels = pixels.T

    rgb_frame = np.empty((*pixels.shape, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(scheme: str = "octavm") -> Tuple[Color, Color]:
    """Get a predefined (on_color, off_color) pair by name."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )
    return COLOR_SCHEMES[scheme]
