"""Primitives: shapes bound to materials and lights, and simple collections of them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from usami.bbox import BoundingBox
from usami.ray import IntersectionInfo, OcclusionInfo, Ray
from usami.shapes import SurfaceSample

DEFAULT_NAME = "<no-name>"


class IntersectableEntity(ABC):
    """Anything a ray can be tested against."""

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[IntersectionInfo]:
        """Full intersection record of the nearest hit, or ``None``."""

    def occlude(self, ray: Ray, t_min: float, t_max: float) -> Optional[OcclusionInfo]:
        """Distance and primitive of the nearest hit, or ``None``."""
        isect = self.intersect(ray, t_min, t_max)
        if isect is None:
            return None
        return OcclusionInfo(isect.t, isect.primitive)


class Primitive(IntersectableEntity):
    """An atomic geometric object of the scene."""

    def __init__(self, name: str = DEFAULT_NAME) -> None:
        self.name = name

    @abstractmethod
    def area(self) -> float:
        """Surface area."""

    @abstractmethod
    def bounding(self) -> BoundingBox:
        """Axis-aligned bounding box."""

    @abstractmethod
    def sample_point(self, u: Sequence[float]) -> SurfaceSample:
        """Sample a point on the surface from a unit square sample."""

    def equals(self, other: Optional["Primitive"]) -> bool:
        return self is other


def same_primitive(lhs: Optional[Primitive], rhs: Optional[Primitive]) -> bool:
    """True when both refer to the same primitive."""
    if lhs is None:
        raise ValueError("left-hand primitive must not be None")
    return lhs is rhs or lhs.equals(rhs)


class GeometricPrimitive(Primitive):
    """A shape with an optional material and area light."""

    def __init__(self, shape: Any, reverse_orientation: bool = False, name: str = DEFAULT_NAME) -> None:
        super().__init__(name)
        self.shape = shape
        self.reverse_orientation = reverse_orientation
        self.material: Optional[Any] = None
        self.area_light: Optional[Any] = None

    def area(self) -> float:
        return self.shape.area()

    def bounding(self) -> BoundingBox:
        return self.shape.bounding()

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[IntersectionInfo]:
        hit = self.shape.intersect(ray, t_min, t_max)
        if hit is None:
            return None
        ng = np.asarray(hit.normal, dtype=float).copy()
        uv = np.asarray(hit.uv, dtype=float).copy()
        if self.reverse_orientation:
            ng = -ng
            uv = 1.0 - uv
        return IntersectionInfo(
            t=hit.t,
            point=np.asarray(hit.point, dtype=float).copy(),
            ng=ng,
            uv=uv,
            iface=0,
            ns=ng.copy(),
            primitive=self,
            material=self.material,
            area_light=self.area_light,
        )

    def occlude(self, ray: Ray, t_min: float, t_max: float) -> Optional[OcclusionInfo]:
        t = self.shape.occlude(ray, t_min, t_max)
        if t is None:
            return None
        return OcclusionInfo(t, self)

    def sample_point(self, u: Sequence[float]) -> SurfaceSample:
        sample = self.shape.sample_point(u)
        if self.reverse_orientation:
            return SurfaceSample(sample.point, -sample.normal, sample.pdf)
        return sample

    def bind_material(self, material: Any) -> None:
        self.material = material

    def bind_area_light(self, light_factory: Callable[..., Any], *args: Any) -> Any:
        """Create an area light on this primitive via ``light_factory(self, *args)``."""
        self.area_light = light_factory(self, *args)
        return self.area_light


class NaiveComposite(IntersectableEntity):
    """Tests every primitive in turn and keeps the nearest hit."""

    def __init__(self) -> None:
        self.objects: List[Primitive] = []

    def add_primitive(self, primitive: Primitive) -> None:
        self.objects.append(primitive)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[IntersectionInfo]:
        nearest: Optional[IntersectionInfo] = None
        t = t_max
        for child in self.objects:
            isect = child.intersect(ray, t_min, t)
            if isect is not None:
                nearest = isect
                t = isect.t
        return nearest