"""Analytic shapes that rays can be intersected with."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from usami.bbox import BoundingBox
from usami.geometry import normalize, sample_uniform_disk, sample_uniform_sphere, vec3
from usami.ray import Ray

FLOAT_EPSILON = float(np.finfo(np.float32).eps)


@dataclass(eq=False)
class ShapeHit:
    """Where and how a ray hit a shape."""

    t: float
    point: np.ndarray
    normal: np.ndarray
    uv: np.ndarray


@dataclass(eq=False)
class SurfaceSample:
    """A point sampled on a shape's surface, with its normal and area density."""

    point: np.ndarray
    normal: np.ndarray
    pdf: float


class _Shape(ABC):
    @abstractmethod
    def area(self) -> float:
        """Surface area."""

    @abstractmethod
    def bounding(self) -> BoundingBox:
        """Axis-aligned bounding box."""

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[ShapeHit]:
        """Hit of ``ray`` within [t_min, t_max], or ``None``."""

    @abstractmethod
    def occlude(self, ray: Ray, t_min: float, t_max: float) -> Optional[float]:
        """Distance to the hit within [t_min, t_max], or ``None``."""

    @abstractmethod
    def sample_point(self, u: Sequence[float]) -> SurfaceSample:
        """Sample a point on the surface from a unit square sample."""


def _up() -> np.ndarray:
    return vec3(0.0, 0.0, 1.0)


class Disk(_Shape):
    """A disk lying parallel to the xy plane."""

    def __init__(self, center: Sequence[float], radius: float) -> None:
        if not radius > 0:
            raise ValueError("disk radius must be positive")
        self.center = np.asarray(center, dtype=float)
        self.radius = float(radius)

    def area(self) -> float:
        return 2.0 * math.pi * self.radius

    def bounding(self) -> BoundingBox:
        offset = vec3(self.radius, self.radius, 0.0)
        return BoundingBox(self.center - offset, self.center + offset)

    def occlude(self, ray, t_min, t_max) -> Optional[float]:
        if ray.d[2] == 0:
            return None
        t = float((self.center[2] - ray.o[2]) / ray.d[2])
        if t < t_min or t > t_max:
            return None
        delta = ray.at(t) - self.center
        if float(np.dot(delta, delta)) > self.radius * self.radius:
            return None
        return t

    def intersect(self, ray, t_min, t_max) -> Optional[ShapeHit]:
        t = self.occlude(ray, t_min, t_max)
        if t is None:
            return None
        p = ray.at(t)
        delta = p - self.center
        dist_sq = float(np.dot(delta, delta))

        phi = math.atan2(delta[1], delta[0])
        if phi < 0:
            phi += 2 * math.pi
        u = phi / (2 * math.pi)
        v = (self.radius - math.sqrt(dist_sq)) / self.radius
        return ShapeHit(t, p, _up(), np.array([u, v]))

    def sample_point(self, u) -> SurfaceSample:
        p = sample_uniform_disk(u) * self.radius + self.center
        return SurfaceSample(p, _up(), 1.0 / self.area())


class Empty(_Shape):
    """A shape occupying no space."""

    def area(self) -> float:
        return 0.0

    def bounding(self) -> BoundingBox:
        return BoundingBox.from_point(np.zeros(3))

    def intersect(self, ray, t_min, t_max) -> Optional[ShapeHit]:
        return None

    def occlude(self, ray, t_min, t_max) -> Optional[float]:
        return None

    def sample_point(self, u) -> SurfaceSample:
        return SurfaceSample(np.zeros(3), np.zeros(3), 0.0)


class Rect(_Shape):
    """An axis-aligned rectangle parallel to the xy plane."""

    def __init__(self, center: Sequence[float], len_x: float, len_y: float) -> None:
        if not (len_x > 0 and len_y > 0):
            raise ValueError("rectangle side lengths must be positive")
        self.p_minxy = np.asarray(center, dtype=float) - 0.5 * vec3(len_x, len_y, 0.0)
        self.len_x = float(len_x)
        self.len_y = float(len_y)

    def area(self) -> float:
        return self.len_x * self.len_y

    def bounding(self) -> BoundingBox:
        return BoundingBox(self.p_minxy, self.p_minxy + vec3(self.len_x, self.len_y, 0.0))

    def occlude(self, ray, t_min, t_max) -> Optional[float]:
        if ray.d[2] == 0:
            return None
        t = float((self.p_minxy[2] - ray.o[2]) / ray.d[2])
        if t < t_min or t > t_max:
            return None
        p = ray.at(t)
        dx, dy = p[0] - self.p_minxy[0], p[1] - self.p_minxy[1]
        if dx < 0 or dx > self.len_x or dy < 0 or dy > self.len_y:
            return None
        return t

    def intersect(self, ray, t_min, t_max) -> Optional[ShapeHit]:
        t = self.occlude(ray, t_min, t_max)
        if t is None:
            return None
        p = ray.at(t)
        dx, dy = p[0] - self.p_minxy[0], p[1] - self.p_minxy[1]
        return ShapeHit(t, p, _up(), np.array([dx / self.len_x, dy / self.len_y]))

    def sample_point(self, u) -> SurfaceSample:
        p = self.p_minxy + vec3(u[0] * self.len_x, u[1] * self.len_y, 0.0)
        return SurfaceSample(p, _up(), 1.0 / self.area())


class Sphere(_Shape):
    """A sphere given by its center and radius."""

    def __init__(self, center: Sequence[float], radius: float) -> None:
        self.center = np.asarray(center, dtype=float)
        self.radius = float(radius)

    def area(self) -> float:
        return 4.0 * math.pi * self.radius

    def bounding(self) -> BoundingBox:
        return BoundingBox(self.center - self.radius, self.center + self.radius)

    def occlude(self, ray, t_min, t_max) -> Optional[float]:
        d = ray.o - self.center
        a = float(np.dot(ray.d, ray.d))
        b = 2 * float(np.dot(ray.d, d))
        c = float(np.dot(d, d)) - self.radius * self.radius

        delta_sq = b * b - 4 * a * c
        if delta_sq < 0:
            return None
        delta = math.sqrt(delta_sq)
        t0 = (-b - delta) / (2 * a)
        t1 = (-b + delta) / (2 * a)
        t = t0 if t0 >= 0 else t1
        if t < 0 or t < t_min or t > t_max:
            return None
        return t

    def intersect(self, ray, t_min, t_max) -> Optional[ShapeHit]:
        t = self.occlude(ray, t_min, t_max)
        if t is None:
            return None
        p = ray.at(t)
        normal = normalize(p - self.center)
        u = 1 - math.atan2(normal[1], normal[0]) / (2 * math.pi)
        v = 1 - math.acos(min(1.0, max(-1.0, float(normal[2])))) / math.pi
        if u < 0:
            u += 1
        return ShapeHit(t, p, normal, np.array([u, v]))

    def sample_point(self, u) -> SurfaceSample:
        n = sample_uniform_sphere(u)
        return SurfaceSample(n * self.radius + self.center, n, 1.0 / self.area())


class Triangle(_Shape):
    """A triangle stored as a vertex and two edges."""

    def __init__(self, v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]) -> None:
        self.v0 = np.asarray(v0, dtype=float)
        self.e1 = np.asarray(v1, dtype=float) - self.v0
        self.e2 = np.asarray(v2, dtype=float) - self.v0

    def area(self) -> float:
        return float(np.linalg.norm(np.cross(self.e1, self.e2))) * 0.5

    def bounding(self) -> BoundingBox:
        v1 = self.v0 + self.e1
        v2 = self.v0 + self.e2
        return BoundingBox(
            np.minimum(self.v0, np.minimum(v1, v2)), np.maximum(self.v0, np.maximum(v1, v2))
        )

    def _solve(self, ray, t_min, t_max) -> Optional[Tuple[float, float, float]]:
        h = np.cross(ray.d, self.e2)
        a = float(np.dot(self.e1, h))
        if -FLOAT_EPSILON < a < FLOAT_EPSILON:
            return None
        f = 1.0 / a
        s = ray.o - self.v0
        u = f * float(np.dot(s, h))
        if u < 0 or u > 1:
            return None
        q = np.cross(s, self.e1)
        v = f * float(np.dot(ray.d, q))
        if v < 0 or u + v > 1:
            return None
        t = f * float(np.dot(self.e2, q))
        if t < t_min or t > t_max:
            return None
        return t, u, v

    def occlude(self, ray, t_min, t_max) -> Optional[float]:
        solved = self._solve(ray, t_min, t_max)
        return None if solved is None else solved[0]

    def intersect(self, ray, t_min, t_max) -> Optional[ShapeHit]:
        solved = self._solve(ray, t_min, t_max)
        if solved is None:
            return None
        t, u, v = solved
        return ShapeHit(t, ray.at(t), np.cross(self.e1, self.e2), np.array([u, v]))

    def sample_point(self, u) -> SurfaceSample:
        t = math.sqrt(u[0])
        n_sized = np.cross(self.e1, self.e2)
        len_inv = 1.0 / float(np.linalg.norm(n_sized))
        p = self.v0 + t * self.e1 + (1 - t) * self.e2
        return SurfaceSample(p, n_sized * len_inv, 0.5 * len_inv)