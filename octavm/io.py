"""Display/input adapter interface.

The machine queries an adapter for the set of pressed keys before every
instruction and hands it a framebuffer copy once per timer tick. Adapters
never touch machine state.
"""

import threading
from typing import AbstractSet, Iterable, Optional, Protocol

import numpy as np

from octavm.constants import NUM_KEYS, SCREEN_WIDTH, SCREEN_HEIGHT


class InputOutput(Protocol):
    def pressed_keys(self) -> AbstractSet[int]:
        """Key codes (0-15) currently held down."""
        ...

    def draw(self, frame: np.ndarray) -> None:
        """Receive a (64, 32) boolean framebuffer snapshot indexed [x, y]."""
        ...


class KeyState:
    """Pressed-key set written by one thread and read by another.

    Writers swap in a new ``frozenset``; readers get whichever set was
    current, never a half-updated one.
    """

    def __init__(self, keys: Iterable[int] = ()):
        self.set(keys)

    def press(self, key: int):
        if 0 <= key < NUM_KEYS:
            self._keys = self._keys | {key}

    def release(self, key: int):
        self._keys = self._keys - {key}

    def set(self, keys: Iterable[int]):
        self._keys = frozenset(k for k in keys if 0 <= k < NUM_KEYS)

    def clear(self):
        self._keys = frozenset()

    def snapshot(self) -> frozenset:
        return self._keys


class FrameBuffer:
    """Latest published frame, handed over under a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frame = np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.bool_)
        self.frames_received = 0

    def publish(self, frame: np.ndarray):
        frame = np.array(frame, dtype=np.bool_, copy=True)
        if frame.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
            raise ValueError(f"Expected frame shape ({SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {frame.shape}")
        with self._lock:
            self._frame = frame
            self.frames_received += 1

    def latest(self) -> np.ndarray:
        with self._lock:
            return self._frame


class HeadlessInputOutput:
    """Adapter without a window, for tests and scripted runs."""

    def __init__(self, keys: Optional[Iterable[int]] = None):
        self.keys = KeyState(keys or ())
        self.frames = FrameBuffer()

    def pressed_keys(self) -> AbstractSet[int]:
        return self.keys.snapshot()

    def draw(self, frame: np.ndarray) -> None:
        self.frames.publish(frame)

    @property
    def frame(self) -> np.ndarray:
        return self.frames.latest()
