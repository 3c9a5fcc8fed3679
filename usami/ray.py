"""Rays and the records produced when they hit geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from usami.geometry import normalize


def _zeros3() -> np.ndarray:
    return np.zeros(3)


@dataclass(eq=False)
class Ray:
    """A ray with origin ``o`` and direction ``d``."""

    o: np.ndarray
    d: np.ndarray

    def __post_init__(self) -> None:
        self.o = np.asarray(self.o, dtype=float)
        self.d = np.asarray(self.d, dtype=float)

    @classmethod
    def from_to(cls, src: Sequence[float], dest: Sequence[float]) -> "Ray":
        """Ray starting at ``src`` pointing towards ``dest``."""
        src = np.asarray(src, dtype=float)
        return cls(src, normalize(np.asarray(dest, dtype=float) - src))

    def at(self, t: float) -> np.ndarray:
        """Point reached after travelling ``t`` along the ray."""
        return self.o + t * self.d


@dataclass(eq=False)
class OcclusionInfo:
    """Distance to a hit and the primitive that was hit."""

    t: float = math.inf
    primitive: Optional[Any] = None


@dataclass(eq=False)
class IntersectionInfo:
    """Geometric and shading information at a ray hit."""

    t: float = math.inf
    point: np.ndarray = field(default_factory=_zeros3)
    ng: np.ndarray = field(default_factory=_zeros3)
    uv: np.ndarray = field(default_factory=lambda: np.zeros(2))
    iface: int = 0
    ns: np.ndarray = field(default_factory=_zeros3)
    primitive: Optional[Any] = None
    material: Optional[Any] = None
    area_light: Optional[Any] = None