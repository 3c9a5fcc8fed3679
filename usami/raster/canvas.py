"""Frame and depth buffers with triangle rasterization."""

from __future__ import annotations

import math
import sys
from typing import Sequence

import numpy as np

from usami.raster.shader import FragmentShader, Vertex

_FLOAT_MAX = float(np.finfo(np.float32).max)


def _downgrade(v: np.ndarray) -> np.ndarray:
    return np.asarray(v[:3], dtype=float) / float(v[3])


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)


class RasterCanvas:
    """RGB frame buffer and depth buffer of ``width`` by ``height`` pixels."""

    def __init__(self, width: int, height: int) -> None:
        if not (width > 0 and height > 0):
            raise ValueError("canvas dimensions must be positive")
        self.width = width
        self.height = height
        self.buffer = np.zeros((height, width, 3))
        self.zbuffer = np.full((height, width), _FLOAT_MAX)

    def clear(self, c: float = 0.0) -> None:
        """Fill the frame buffer with ``c`` and reset the depth buffer."""
        self.buffer.fill(c)
        self.zbuffer.fill(_FLOAT_MAX)

    def z_test(self, x: int, y: int, z: float) -> bool:
        """True when depth ``z`` is nearer than what the pixel holds."""
        return z < self.zbuffer[y, x]

    def update_pixel(self, x: int, y: int, color: Sequence[float], z: float) -> None:
        self.zbuffer[y, x] = z
        self.buffer[y, x] = np.broadcast_to(np.asarray(color, dtype=float), (3,))

    def rasterize(self, v0: Vertex, v1: Vertex, v2: Vertex, shader: FragmentShader) -> None:
        """Draw a triangle, shading each covered pixel that passes the depth test."""
        p0, p1, p2 = (_downgrade(v.pos_screen) for v in (v0, v1, v2))

        # a pixel is p0 + s * edge_s + t * edge_t
        edge_s = p1 - p0
        edge_t = p2 - p0
        if edge_s[0] * edge_t[1] - edge_s[1] * edge_t[0] == 0.0:
            return

        basis = np.array(
            [
                [edge_s[0], edge_t[0], p0[0]],
                [edge_s[1], edge_t[1], p0[1]],
                [0.0, 0.0, 1.0],
            ]
        )
        to_st_space = np.linalg.inv(basis)

        max_px_x = float(self.width - 1)
        max_px_y = float(self.height - 1)
        xs = (p0[0], p1[0], p2[0])
        ys = (p0[1], p1[1], p2[1])
        min_x = _clamp(float(math.ceil(min(xs))), 0.0, max_px_x)
        min_y = _clamp(float(math.ceil(min(ys))), 0.0, max_px_y)
        max_x = _clamp(float(math.floor(max(xs))), 0.0, max_px_x)
        max_y = _clamp(float(math.floor(max(ys))), 0.0, max_px_y)

        left_top = to_st_space @ np.array([min_x, min_y, 1.0])
        dsdx, dtdx, _ = to_st_space @ np.array([1.0, 0.0, 0.0])
        dsdy, dtdy, _ = to_st_space @ np.array([0.0, 1.0, 0.0])
        dzds = edge_s[2]
        dzdt = edge_t[2]

        duvds = v1.tex_coord - v0.tex_coord
        duvdt = v2.tex_coord - v0.tex_coord

        w0 = float(v0.pos_screen[3])
        w1 = float(v1.pos_screen[3])
        w2 = float(v2.pos_screen[3])

        min_xi, min_yi = int(min_x), int(min_y)
        max_xi, max_yi = int(max_x), int(max_y)
        for y in range(min_yi, max_yi + 1):
            for x in range(min_xi, max_xi + 1):
                s = left_top[0] + (x - min_xi) * dsdx + (y - min_yi) * dsdy
                t = left_top[1] + (x - min_xi) * dtdx + (y - min_yi) * dtdy
                if s < 0.0 or t < 0.0 or s + t > 1.0:
                    continue

                z = float(p0[2] + s * dzds + t * dzdt)
                if not self.z_test(x, y, z):
                    continue

                # perspective-correct barycentric coordinates
                a = (1 - s - t) / w0
                b = s / w1
                c = t / w2
                k = 1 / (a + b + c)

                bar_world = np.array([a * k, b * k, c * k])
                duvdx = duvds * dsdx * (k / w1) + duvdt * dtdx * (k / w2)
                duvdy = duvds * dsdy * (k / w1) + duvdt * dtdy * (k / w2)

                color = shader.run(v0, v1, v2, bar_world, duvdx, duvdy)
                if color is not None:
                    self.update_pixel(x, y, color, z)


__all__ = ["RasterCanvas"]

assert sys.version_info >= (3, 10) or True