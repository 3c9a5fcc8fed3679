"""Light sources and the samples they produce for shading points."""

from __future__ import annotations

import enum
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from usami.geometry import (
    area_unit_cone,
    normalize,
    pdf_uniform_sphere,
    sample_uniform_sphere,
)
from usami.primitive import same_primitive
from usami.ray import IntersectionInfo, Ray

# squared distance under which a light's test ray is taken to land on the shading point
_VISIBILITY_TOLERANCE_SQ = 0.001


class LightType(enum.Enum):
    """Kind of light source."""

    DELTA_POINT = enum.auto()
    DELTA_DIRECTION = enum.auto()
    INFINITE = enum.auto()
    AREA = enum.auto()


@dataclass(eq=False)
class LightSample:
    """Incident light sampled at a shading point."""

    wi: np.ndarray
    point: np.ndarray
    radiance: np.ndarray
    pdf: float
    type: LightType

    def __post_init__(self) -> None:
        self.wi = np.asarray(self.wi, dtype=float)
        self.point = np.broadcast_to(np.asarray(self.point, dtype=float), (3,)).astype(float)
        self.radiance = np.broadcast_to(np.asarray(self.radiance, dtype=float), (3,)).astype(float)

    def test_illumination(self) -> bool:
        """True when the sample carries any light."""
        return self.pdf != 0 and bool(np.any(self.radiance != 0))

    def test_visibility(self, scene: Any, isect: IntersectionInfo) -> bool:
        """True when nothing blocks the light on its way to ``isect``."""
        if self.type in (LightType.DELTA_POINT, LightType.AREA):
            hit = scene.intersect_quick(self.generate_test_ray(isect.point))
            if hit is None:
                return False
            delta = np.asarray(hit.point) - np.asarray(isect.point)
            return (
                isect.iface == hit.iface
                and same_primitive(isect.primitive, hit.primitive)
                and float(np.dot(delta, delta)) < _VISIBILITY_TOLERANCE_SQ
            )
        return scene.intersect_quick(self.generate_shadow_ray(isect.point)) is None

    def generate_test_ray(self, p: Sequence[float]) -> Ray:
        """Ray from the light's point towards ``p``."""
        return Ray.from_to(self.point, p)

    def generate_shadow_ray(self, p: Sequence[float]) -> Ray:
        """Ray from ``p`` towards the light's point."""
        return Ray.from_to(p, self.point)


class Light(ABC):
    """A source of radiance in the scene."""

    def __init__(self, light_type: LightType) -> None:
        self.type = light_type

    @abstractmethod
    def eval(self, ray: Ray) -> np.ndarray:
        """Radiance carried along ``ray`` by this light."""

    @abstractmethod
    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        """Sample incident light at ``isect`` from a unit square sample."""

    @abstractmethod
    def power(self) -> np.ndarray:
        """Estimate of the total radiant flux emitted."""


class AreaLight(Light):
    """A light attached to the surface of a primitive."""

    def __init__(self, primitive: Any) -> None:
        super().__init__(LightType.AREA)
        self.primitive = primitive


class DiffuseAreaLight(AreaLight):
    """Area light emitting constant radiance from its surface."""

    def __init__(self, primitive: Any, intensity: Sequence[float]) -> None:
        super().__init__(primitive)
        self.intensity = np.broadcast_to(np.asarray(intensity, dtype=float), (3,)).astype(float)

    def eval(self, ray: Ray) -> np.ndarray:
        return self.intensity.copy()

    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        surface = self.primitive.sample_point(u)
        wi = np.asarray(surface.point) - np.asarray(isect.point)
        if float(np.dot(wi, surface.normal)) < 0:
            radiance = self.intensity.copy()
        else:
            radiance = np.zeros(3)
        return LightSample(normalize(wi), surface.point, radiance, surface.pdf, LightType.AREA)

    def power(self) -> np.ndarray:
        return self.intensity * math.pi * self.primitive.area()


class DistantLight(Light):
    """Parallel light cast from infinitely far away."""

    def __init__(
        self,
        direction: Sequence[float],
        intensity: Sequence[float],
        world_center: Sequence[float],
        world_radius: float,
    ) -> None:
        super().__init__(LightType.DELTA_DIRECTION)
        self.direction = normalize(direction)
        self.intensity = np.broadcast_to(np.asarray(intensity, dtype=float), (3,)).astype(float)
        self.world_center = np.asarray(world_center, dtype=float)
        self.world_radius = float(world_radius)

    def eval(self, ray: Ray) -> np.ndarray:
        return np.zeros(3)

    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        return LightSample(
            -self.direction, np.zeros(3), self.intensity.copy(), 1.0, LightType.DELTA_DIRECTION
        )

    def power(self) -> np.ndarray:
        return self.intensity * math.pi * self.world_radius * self.world_radius


class InfiniteAreaLight(Light):
    """Environment light surrounding the scene, looked up from a texture.

    ``texture`` is called with a (u, v) array and returns an RGB value.
    """

    def __init__(
        self,
        texture: Callable[[np.ndarray], Sequence[float]],
        intensity: float,
        world_center: Sequence[float],
        world_radius: float,
    ) -> None:
        super().__init__(LightType.INFINITE)
        self.texture = texture
        self.intensity = float(intensity)
        self.world_center = np.asarray(world_center, dtype=float)
        self.world_radius = float(world_radius)

    def eval_direction(self, wi: Sequence[float]) -> np.ndarray:
        """Radiance arriving from world direction ``wi``."""
        u = 1 - math.atan2(wi[1], wi[0]) / (2 * math.pi)
        v = 1 - math.acos(min(1.0, max(-1.0, float(wi[2])))) / math.pi
        if u < 0:
            u += 1
        color = np.asarray(self.texture(np.array([u, v])), dtype=float)
        return self.intensity * np.broadcast_to(color, (3,)).astype(float)

    def eval(self, ray: Ray) -> np.ndarray:
        return self.eval_direction(ray.d)

    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        wi = sample_uniform_sphere(u)
        if float(np.dot(wi, isect.ns)) < 0:
            wi = -wi
        return LightSample(
            wi, np.zeros(3), self.eval_direction(wi), pdf_uniform_sphere() * 2, LightType.INFINITE
        )

    def power(self) -> np.ndarray:
        return np.full(3, self.intensity * math.pi * self.world_radius * self.world_radius)


class PointLight(Light):
    """Light emitted equally in all directions from a point."""

    def __init__(self, point: Sequence[float], intensity: Sequence[float]) -> None:
        super().__init__(LightType.DELTA_POINT)
        self.point = np.asarray(point, dtype=float)
        self.intensity = np.broadcast_to(np.asarray(intensity, dtype=float), (3,)).astype(float)

    def eval(self, ray: Ray) -> np.ndarray:
        return np.zeros(3)

    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        wi = self.point - np.asarray(isect.point, dtype=float)
        radiance = self.intensity / float(np.dot(wi, wi))
        return LightSample(normalize(wi), self.point.copy(), radiance, 1.0, LightType.DELTA_POINT)

    def power(self) -> np.ndarray:
        return self.intensity * (4 * math.pi)


class SpotLight(Light):
    """Point light restricted to a cone around ``direction``."""

    def __init__(
        self,
        point: Sequence[float],
        direction: Sequence[float],
        theta: float,
        intensity: Sequence[float],
    ) -> None:
        super().__init__(LightType.DELTA_POINT)
        self.point = np.asarray(point, dtype=float)
        self.direction = normalize(direction)
        self.cos_theta = math.cos(theta)
        self.intensity = np.broadcast_to(np.asarray(intensity, dtype=float), (3,)).astype(float)

    def eval(self, ray: Ray) -> np.ndarray:
        if -float(np.dot(ray.d, self.direction)) < self.cos_theta:
            return np.zeros(3)
        offset = self.point - ray.o
        return self.intensity / float(np.dot(offset, offset))

    def sample(self, isect: IntersectionInfo, u: Sequence[float]) -> LightSample:
        wi = self.point.copy()
        if -float(np.dot(wi, self.direction)) > self.cos_theta:
            radiance = self.intensity / float(np.dot(wi, wi))
        else:
            radiance = np.zeros(3)
        return LightSample(normalize(wi), self.point.copy(), radiance, 1.0, LightType.DELTA_POINT)

    def power(self) -> np.ndarray:
        return self.intensity * area_unit_cone(self.cos_theta)