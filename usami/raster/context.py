"""State shared by the stages of a rasterization pass."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from usami.raster.shader import FragmentShader, VertexShader


class RenderingContext:
    """Target canvas, active shaders and the model transform stack of a render pass.

    Matrices are 4x4 arrays applied to column vectors.
    """

    def __init__(self, canvas: object, world_to_screen: Sequence[Sequence[float]]) -> None:
        self.canvas = canvas
        self.world_to_screen = np.asarray(world_to_screen, dtype=float)
        if self.world_to_screen.shape != (4, 4):
            raise ValueError("world_to_screen must be a 4x4 matrix")
        self.model_to_world = np.identity(4)
        self.model_to_screen = np.identity(4)
        self.vertex_shader: Optional["VertexShader"] = None
        self.fragment_shader: Optional["FragmentShader"] = None
        self._stack: List[np.ndarray] = []

    def set_vertex_shader(self, shader: "VertexShader") -> None:
        self.vertex_shader = shader

    def set_fragment_shader(self, shader: "FragmentShader") -> None:
        self.fragment_shader = shader

    def push_model_transform(self, transform: Sequence[Sequence[float]]) -> None:
        """Apply ``transform`` before the current model-to-world transform."""
        transform = np.asarray(transform, dtype=float)
        if transform.shape != (4, 4):
            raise ValueError("transform must be a 4x4 matrix")
        self._stack.append(self.model_to_world)
        self.model_to_world = self.model_to_world @ transform
        self.model_to_screen = self.world_to_screen @ self.model_to_world

    def pop_model_transform(self) -> None:
        """Restore the transform active before the last push, or identity if none."""
        if self._stack:
            self.model_to_world = self._stack.pop()
        else:
            self.model_to_world = np.identity(4)
        self.model_to_screen = self.world_to_screen @ self.model_to_world