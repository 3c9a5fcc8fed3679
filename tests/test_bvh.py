import numpy as np
import pytest

from usami.bbox import union_bbox
from usami.bvh import BasicPrimitiveCollection, BvhComposite
from usami.primitive import GeometricPrimitive, NaiveComposite
from usami.ray import Ray
from usami.shapes import Rect, Sphere


def make_spheres(count, seed=7):
    rng = np.random.default_rng(seed)
    return [
        GeometricPrimitive(Sphere(rng.uniform(-10, 10, 3), rng.uniform(0.3, 1.5)))
        for _ in range(count)
    ]


def test_prepare_indices_and_centroids():
    prims = make_spheres(5)
    infos = BasicPrimitiveCollection(prims).prepare()
    assert [info.index for info in infos] == list(range(5))
    for info, prim in zip(infos, prims):
        assert np.allclose(info.centroid, prim.shape.center)


def test_update_reorders():
    prims = make_spheres(4)
    coll = BasicPrimitiveCollection(prims)
    infos = coll.prepare()
    coll.update(list(reversed(infos)))
    assert coll.prims == list(reversed(prims))


def test_update_length_mismatch():
    coll = BasicPrimitiveCollection(make_spheres(3))
    with pytest.raises(ValueError):
        coll.update(coll.prepare()[:2])


def test_collection_intersect_range():
    near = GeometricPrimitive(Rect([0, 0, 2], 2, 2))
    far = GeometricPrimitive(Rect([0, 0, 1], 2, 2))
    coll = BasicPrimitiveCollection([far, near])
    ray = Ray([0, 0, 5], [0, 0, -1])
    assert coll.intersect(0, 2, ray, 1e-3, 1e8).primitive is near
    assert coll.intersect(0, 1, ray, 1e-3, 1e8).primitive is far
    assert coll.intersect(2, 1, ray, 1e-3, 1e8) is None


def test_empty_raises():
    with pytest.raises(ValueError):
        BvhComposite([])


def test_bounding_encloses_everything():
    prims = make_spheres(30)
    bvh = BvhComposite(prims)
    total = prims[0].bounding()
    for prim in prims[1:]:
        total = union_bbox(total, prim.bounding())
    box = bvh.bounding()
    assert np.allclose(box.p_min, total.p_min)
    assert np.allclose(box.p_max, total.p_max)


def test_all_primitives_kept():
    prims = make_spheres(25)
    bvh = BvhComposite(prims)
    assert sorted(map(id, bvh.prims.prims)) == sorted(map(id, prims))


@pytest.mark.parametrize("count", [1, 8, 9, 40])
def test_matches_naive_composite(count):
    prims = make_spheres(count, seed=count)
    bvh = BvhComposite(prims)
    naive = NaiveComposite()
    for prim in prims:
        naive.add_primitive(prim)

    rng = np.random.default_rng(123)
    hits = 0
    for _ in range(200):
        origin = rng.uniform(-30, 30, 3)
        target = rng.uniform(-10, 10, 3)
        ray = Ray.from_to(origin, target)
        a = bvh.intersect(ray, 1e-3, 1e8)
        b = naive.intersect(ray, 1e-3, 1e8)
        assert (a is None) == (b is None)
        if a is not None:
            hits += 1
            assert a.t == pytest.approx(b.t)
            assert a.primitive is b.primitive
    assert hits > 0


def test_miss_outside_bounds():
    bvh = BvhComposite(make_spheres(20))
    ray = Ray([100, 100, 100], [1, 0, 0])
    assert bvh.intersect(ray, 1e-3, 1e8) is None
    assert bvh.occlude(ray, 1e-3, 1e8) is None