"""Film buffer receiving rendered radiance."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class Canvas:
    """RGB float buffer of ``width`` by ``height`` pixels."""

    def __init__(self, width: int, height: int) -> None:
        if not (width > 0 and height > 0):
            raise ValueError("canvas dimensions must be positive")
        self.width = width
        self.height = height
        self.buffer = np.zeros((height, width, 3))

    def clear(self) -> None:
        self.buffer.fill(0.0)

    def set_pixel(self, x: int, y: int, color: Sequence[float]) -> None:
        self.buffer[y, x] = np.broadcast_to(np.asarray(color, dtype=float), (3,))

    def append_pixel(self, x: int, y: int, color: Sequence[float]) -> None:
        """Add ``color`` to the value already stored at the pixel."""
        self.buffer[y, x] += np.broadcast_to(np.asarray(color, dtype=float), (3,))

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        return self.buffer[y, x].copy()