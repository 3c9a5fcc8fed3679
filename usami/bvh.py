"""Bounding volume hierarchy over a collection of primitives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import numpy as np

from usami.bbox import BoundingBox, union_bbox
from usami.primitive import IntersectableEntity, Primitive
from usami.ray import IntersectionInfo, Ray

LEAF_SIZE = 8


@dataclass(eq=False)
class PrimitiveInfo:
    """Bounding data of one primitive, used while building the hierarchy."""

    bbox: BoundingBox
    centroid: np.ndarray
    index: int


class BasicPrimitiveCollection:
    """A reorderable list of primitives addressed by offset ranges."""

    def __init__(self, prims: Optional[Iterable[Primitive]] = None) -> None:
        self.prims: List[Primitive] = list(prims) if prims is not None else []

    def intersect(
        self, offset: int, count: int, ray: Ray, t_min: float, t_max: float
    ) -> Optional[IntersectionInfo]:
        """Nearest hit among ``count`` primitives starting at ``offset``."""
        nearest: Optional[IntersectionInfo] = None
        t_hit = t_max
        for prim in self.prims[offset:offset + count]:
            isect = prim.intersect(ray, t_min, t_hit)
            if isect is not None:
                nearest = isect
                t_hit = isect.t
        return nearest

    def prepare(self) -> List[PrimitiveInfo]:
        infos = []
        for index, prim in enumerate(self.prims):
            bbox = prim.bounding()
            infos.append(PrimitiveInfo(bbox, bbox.centroid(), index))
        return infos

    def update(self, infos: List[PrimitiveInfo]) -> None:
        """Reorder primitives to follow ``infos``."""
        if len(infos) != len(self.prims):
            raise ValueError("primitive info count does not match the collection")
        self.prims = [self.prims[info.index] for info in infos]


@dataclass(eq=False)
class _BuildNode:
    bbox: BoundingBox
    axis: int
    begin: int = -1
    end: int = -1
    left: Optional["_BuildNode"] = None
    right: Optional["_BuildNode"] = None


@dataclass(eq=False)
class _LinearNode:
    bbox: BoundingBox
    axis: int
    prim_num: int
    # first primitive for a leaf, index of the right child otherwise;
    # the left child always follows its parent directly
    offset: int = 0


class BvhComposite(IntersectableEntity):
    """Hierarchy of bounding boxes splitting primitives in equal halves."""

    def __init__(self, prims: Union[BasicPrimitiveCollection, Iterable[Primitive]]) -> None:
        if not isinstance(prims, BasicPrimitiveCollection):
            prims = BasicPrimitiveCollection(prims)
        self.prims = prims
        infos = prims.prepare()
        root = self._build(infos, 0, len(infos))
        prims.update(infos)
        self._nodes: List[_LinearNode] = []
        self._register(root)

    def bounding(self) -> BoundingBox:
        bbox = self._nodes[0].bbox
        return BoundingBox(bbox.p_min.copy(), bbox.p_max.copy())

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[IntersectionInfo]:
        return self._intersect_node(0, ray, t_min, t_max)

    def _build(self, infos: List[PrimitiveInfo], begin: int, end: int) -> _BuildNode:
        if end <= begin:
            raise ValueError("cannot build a hierarchy over no primitives")

        bbox = infos[begin].bbox
        for info in infos[begin + 1:end]:
            bbox = union_bbox(bbox, info.bbox)

        extents = bbox.extents()
        axis = 0
        for i in (1, 2):
            if extents[i] > extents[axis]:
                axis = i

        if end - begin <= LEAF_SIZE:
            return _BuildNode(bbox, axis, begin, end)

        mid = begin + (end - begin) // 2
        infos[begin:end] = sorted(infos[begin:end], key=lambda info: info.centroid[axis])
        return _BuildNode(
            bbox,
            axis,
            left=self._build(infos, begin, mid),
            right=self._build(infos, mid, end),
        )

    def _register(self, node: _BuildNode) -> int:
        index = len(self._nodes)
        prim_num = 0 if node.left is not None else node.end - node.begin
        linear = _LinearNode(node.bbox, node.axis, prim_num)
        self._nodes.append(linear)
        if node.left is not None:
            self._register(node.left)
            linear.offset = self._register(node.right)
        else:
            linear.offset = node.begin
        return index

    def _intersect_node(
        self, inode: int, ray: Ray, t_min: float, t_max: float
    ) -> Optional[IntersectionInfo]:
        node = self._nodes[inode]
        if node.bbox.occlude(ray, t_min, t_max) is None:
            return None
        if node.prim_num != 0:
            return self.prims.intersect(node.offset, node.prim_num, ray, t_min, t_max)

        hit_left = self._intersect_node(inode + 1, ray, t_min, t_max)
        hit_right = self._intersect_node(node.offset, ray, t_min, t_max)
        if hit_right is not None and (hit_left is None or hit_right.t < hit_left.t):
            return hit_right
        return hit_left