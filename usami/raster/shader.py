"""Vertex and fragment shaders of the rasterizer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from usami.raster.context import RenderingContext


@dataclass(eq=False)
class Vertex:
    """A vertex after the vertex stage."""

    # screen-space position in homogeneous coordinates
    pos_screen: np.ndarray
    # model-space position
    pos_model: np.ndarray
    # model-space normal
    normal: np.ndarray
    tex_coord: np.ndarray

    def __post_init__(self) -> None:
        self.pos_screen = np.asarray(self.pos_screen, dtype=float)
        self.pos_model = np.asarray(self.pos_model, dtype=float)
        self.normal = np.asarray(self.normal, dtype=float)
        self.tex_coord = np.broadcast_to(np.asarray(self.tex_coord, dtype=float), (2,)).astype(float)


class VertexShader(ABC):
    @abstractmethod
    def run(
        self, pos: Sequence[float], normal: Sequence[float], tex_coord: Sequence[float]
    ) -> Vertex:
        """Transform one model-space vertex."""


class DefaultVertexShader(VertexShader):
    """Projects vertices with the context's model-to-screen transform."""

    def __init__(self, context: RenderingContext) -> None:
        self.context = context

    def run(self, pos, normal, tex_coord) -> Vertex:
        pos = np.asarray(pos, dtype=float)
        homogeneous = np.append(pos, 1.0)
        return Vertex(
            pos_screen=self.context.model_to_screen @ homogeneous,
            pos_model=pos.copy(),
            normal=np.asarray(normal, dtype=float).copy(),
            tex_coord=tex_coord,
        )


class FragmentShader(ABC):
    @abstractmethod
    def run(
        self,
        v0: Vertex,
        v1: Vertex,
        v2: Vertex,
        barycentric: Sequence[float],
        duvdx: Sequence[float],
        duvdy: Sequence[float],
    ) -> Optional[np.ndarray]:
        """Color of the fragment, or ``None`` to discard it."""


class DefaultFragmentShader(FragmentShader):
    """Colors a fragment with the absolute interpolated normal."""

    def run(self, v0, v1, v2, barycentric, duvdx, duvdy) -> Optional[np.ndarray]:
        n = v0.normal * barycentric[0] + v1.normal * barycentric[1] + v2.normal * barycentric[2]
        return np.abs(n)