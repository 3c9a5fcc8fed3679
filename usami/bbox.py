"""Axis-aligned bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from usami.ray import Ray


@dataclass(eq=False)
class BoundingBox:
    """Box spanning ``p_min`` to ``p_max``."""

    p_min: np.ndarray
    p_max: np.ndarray

    def __post_init__(self) -> None:
        self.p_min = np.asarray(self.p_min, dtype=float)
        self.p_max = np.asarray(self.p_max, dtype=float)

    @classmethod
    def from_point(cls, p: Sequence[float]) -> "BoundingBox":
        """Degenerate box containing a single point."""
        p = np.asarray(p, dtype=float)
        return cls(p.copy(), p.copy())

    def extents(self) -> np.ndarray:
        return self.p_max - self.p_min

    def area(self) -> float:
        """Surface area of the box."""
        e = self.extents()
        return float(2 * (e[0] * e[1] + e[0] * e[2] + e[1] * e[2]))

    def centroid(self) -> np.ndarray:
        return (self.p_min + self.p_max) * 0.5

    def occlude(self, ray: Ray, t_min: float, t_max: float) -> Optional[float]:
        """Distance to the nearest face hit within (t_min, t_max), or ``None``."""
        with np.errstate(divide="ignore", invalid="ignore"):
            dtdd = 1.0 / ray.d
            t_planes_min = (self.p_min - ray.o) * dtdd
            t_planes_max = (self.p_max - ray.o) * dtdd

        t_hit = t_max
        for axis in range(3):
            if ray.d[axis] == 0:
                continue
            others = [a for a in range(3) if a != axis]
            for t in (t_planes_min[axis], t_planes_max[axis]):
                if t_min < t < t_hit:
                    p = ray.o + t * ray.d
                    if all(self.p_min[a] <= p[a] <= self.p_max[a] for a in others):
                        t_hit = float(t)

        if t_hit == t_max:
            return None
        return t_hit


def union_bbox(a: BoundingBox, b: BoundingBox) -> BoundingBox:
    """Smallest box enclosing both boxes."""
    return BoundingBox(np.minimum(a.p_min, b.p_min), np.maximum(a.p_max, b.p_max))