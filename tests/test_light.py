import math

import numpy as np
import pytest

from usami.geometry import area_unit_cone, pdf_uniform_sphere
from usami.light import (
    AreaLight,
    DiffuseAreaLight,
    DistantLight,
    InfiniteAreaLight,
    LightSample,
    LightType,
    PointLight,
    SpotLight,
)
from usami.primitive import GeometricPrimitive, NaiveComposite
from usami.ray import IntersectionInfo, Ray
from usami.shapes import Rect


class _SceneStub:
    def __init__(self, prims):
        self.world = NaiveComposite()
        for prim in prims:
            self.world.add_primitive(prim)

    def intersect_quick(self, ray):
        return self.world.intersect(ray, 1e-3, 1e8)


def _isect_at(point, ns=(0.0, 0.0, 1.0)):
    return IntersectionInfo(t=1.0, point=np.array(point, dtype=float), ns=np.array(ns, dtype=float))


def _ground_hit():
    ground = GeometricPrimitive(Rect((0, 0, 0), 10, 10))
    isect = ground.intersect(Ray((0, 0, 1), (0, 0, -1)), 1e-3, 1e8)
    return ground, isect


def test_light_sample_illumination():
    base = dict(wi=(0, 0, 1), point=(0, 0, 1), type=LightType.AREA)
    assert LightSample(radiance=(1, 1, 1), pdf=1.0, **base).test_illumination()
    assert not LightSample(radiance=(1, 1, 1), pdf=0.0, **base).test_illumination()
    assert not LightSample(radiance=(0, 0, 0), pdf=1.0, **base).test_illumination()


def test_generate_rays_point_between_light_and_surface():
    sample = LightSample((0, 0, 1), (0, 0, 4), (1, 1, 1), 1.0, LightType.DELTA_POINT)
    test_ray = sample.generate_test_ray((0, 0, 0))
    shadow_ray = sample.generate_shadow_ray((0, 0, 0))
    assert np.allclose(test_ray.o, sample.point)
    assert np.allclose(test_ray.d, -shadow_ray.d)
    assert np.isclose(np.linalg.norm(shadow_ray.d), 1.0)
    assert np.allclose(shadow_ray.o, [0, 0, 0])


def test_visibility_area_unblocked_and_blocked():
    ground, isect = _ground_hit()
    sample = LightSample((0, 0, 1), (0, 0, 3), (1, 1, 1), 1.0, LightType.AREA)
    assert sample.test_visibility(_SceneStub([ground]), isect)

    occluder = GeometricPrimitive(Rect((0, 0, 1), 2, 2))
    assert not sample.test_visibility(_SceneStub([ground, occluder]), isect)


def test_visibility_area_with_nothing_hit_is_false():
    ground, isect = _ground_hit()
    sample = LightSample((0, 0, 1), (0, 0, 3), (1, 1, 1), 1.0, LightType.AREA)
    assert not sample.test_visibility(_SceneStub([]), isect)


def test_visibility_infinite_uses_shadow_ray():
    ground, isect = _ground_hit()
    sample = LightSample((0, 0, 1), (0, 0, 5), (1, 1, 1), 1.0, LightType.INFINITE)
    assert sample.test_visibility(_SceneStub([ground]), isect)
    occluder = GeometricPrimitive(Rect((0, 0, 2), 2, 2))
    assert not sample.test_visibility(_SceneStub([ground, occluder]), isect)


def test_point_light_sample():
    intensity = np.array([4.0, 8.0, 12.0])
    light = PointLight((0, 0, 2), intensity)
    sample = light.sample(_isect_at((0, 0, 0)), (0.5, 0.5))
    assert sample.type is LightType.DELTA_POINT
    assert sample.pdf == 1.0
    assert np.allclose(sample.wi, [0, 0, 1])
    assert np.allclose(sample.point, [0, 0, 2])
    # radiance falls off with the squared distance
    assert np.allclose(sample.radiance * 4.0, intensity)


def test_point_light_eval_and_power():
    light = PointLight((1, 2, 3), (1, 1, 1))
    assert np.allclose(light.eval(Ray((0, 0, 0), (0, 0, 1))), 0.0)
    assert np.allclose(light.power(), 4 * math.pi)
    brighter = PointLight((1, 2, 3), (2, 2, 2))
    assert np.allclose(brighter.power(), 2 * light.power())


def test_distant_light():
    light = DistantLight((0, 0, -2), (1, 2, 3), (0, 0, 0), 1.0)
    assert light.type is LightType.DELTA_DIRECTION
    sample = light.sample(_isect_at((5, 5, 5)), (0.1, 0.9))
    assert np.allclose(sample.wi, [0, 0, 1])
    assert np.allclose(sample.radiance, [1, 2, 3])
    assert sample.pdf == 1.0
    assert np.allclose(light.eval(Ray((0, 0, 0), (0, 0, 1))), 0.0)
    wider = DistantLight((0, 0, -2), (1, 2, 3), (0, 0, 0), 2.0)
    assert np.allclose(wider.power(), 4 * light.power())


def test_diffuse_area_light_facing():
    panel = GeometricPrimitive(Rect((0, 0, 3), 1, 1), reverse_orientation=True)
    light = panel.bind_area_light(DiffuseAreaLight, (2, 2, 2))
    assert isinstance(light, AreaLight)
    assert light.primitive is panel
    assert light.type is LightType.AREA

    sample = light.sample(_isect_at((0, 0, 0)), (0.5, 0.5))
    assert np.allclose(sample.radiance, [2, 2, 2])
    assert sample.wi[2] > 0
    assert np.isclose(np.linalg.norm(sample.wi), 1.0)
    assert np.isclose(sample.pdf, 1.0 / panel.area())
    assert np.allclose(light.eval(Ray((0, 0, 0), (0, 0, 1))), [2, 2, 2])


def test_diffuse_area_light_facing_away_gives_no_radiance():
    panel = GeometricPrimitive(Rect((0, 0, 3), 1, 1))
    light = DiffuseAreaLight(panel, (2, 2, 2))
    sample = light.sample(_isect_at((0, 0, 0)), (0.5, 0.5))
    assert np.allclose(sample.radiance, 0.0)
    assert not sample.test_illumination()


def test_diffuse_area_light_power_scales_with_area():
    small = DiffuseAreaLight(GeometricPrimitive(Rect((0, 0, 0), 1, 1)), (1, 1, 1))
    large = DiffuseAreaLight(GeometricPrimitive(Rect((0, 0, 0), 2, 1)), (1, 1, 1))
    assert np.allclose(large.power(), 2 * small.power())
    assert np.allclose(small.power(), math.pi)


def test_infinite_light_eval_constant_texture():
    light = InfiniteAreaLight(lambda uv: (0.5, 0.25, 1.0), 2.0, (0, 0, 0), 10.0)
    value = light.eval(Ray((0, 0, 0), (0, 1, 0)))
    assert np.allclose(value, [1.0, 0.5, 2.0])


def test_infinite_light_uv_in_range():
    seen = []

    def texture(uv):
        seen.append(uv.copy())
        return (1.0, 1.0, 1.0)

    light = InfiniteAreaLight(texture, 1.0, (0, 0, 0), 1.0)
    for d in [(1, 0, 0), (0, -1, 0), (0, 0, 1), (-1, 0, 0)]:
        light.eval_direction(np.array(d, dtype=float))
    assert all(0.0 <= uv[1] <= 1.0 for uv in seen)
    assert np.isclose(seen[2][1], 1.0)


def test_infinite_light_sample_hemisphere():
    light = InfiniteAreaLight(lambda uv: (1.0, 1.0, 1.0), 1.0, (0, 0, 0), 1.0)
    isect = _isect_at((0, 0, 0), ns=(0, 0, 1))
    for u in [(0.1, 0.2), (0.9, 0.3), (0.5, 0.7)]:
        sample = light.sample(isect, u)
        assert sample.wi[2] >= 0
        assert sample.type is LightType.INFINITE
        assert np.isclose(sample.pdf, 2 * pdf_uniform_sphere())


def test_spot_light_eval_inside_and_outside_cone():
    intensity = np.array([4.0, 4.0, 4.0])
    light = SpotLight((0, 0, 2), (0, 0, -1), 0.5, intensity)
    inside = light.eval(Ray((0, 0, 0), (0, 0, 1)))
    assert np.allclose(inside * 4.0, intensity)
    outside = light.eval(Ray((0, 0, 0), (0, 0, -1)))
    assert np.allclose(outside, 0.0)


def test_spot_light_sample_and_power():
    light = SpotLight((0, 0, -2), (0, 0, 1), 0.5, (1, 1, 1))
    sample = light.sample(_isect_at((0, 0, 0)), (0.5, 0.5))
    assert sample.pdf == 1.0
    assert np.allclose(sample.point, [0, 0, -2])
    assert np.allclose(sample.radiance * 4.0, [1, 1, 1])
    assert np.allclose(light.power(), area_unit_cone(math.cos(0.5)))


def test_lights_with_zero_direction_raise():
    with pytest.raises(ValueError):
        DistantLight((0, 0, 0), (1, 1, 1), (0, 0, 0), 1.0)
    with pytest.raises(ValueError):
        SpotLight((0, 0, 1), (0, 0, 0), 0.5, (1, 1, 1))