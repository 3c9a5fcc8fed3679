# usami

Building blocks of a physically based renderer, written in Python on top of
numpy. The package has two independent parts:

- **ray tracing pieces**: rays and hit records, axis-aligned bounding boxes,
  analytic shapes, primitives that bind a shape to a material object and an
  area light, a linear-search composite and a bounding volume hierarchy, and
  point, spot, distant, diffuse area and infinite (environment) light sources;
- **a software rasterizer**: a rendering context with a model transform
  stack, vertex and fragment shaders, and a canvas with a z-buffer and
  perspective-correct barycentric interpolation.

Vectors are numpy arrays of floats throughout.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `usami.geometry` | `vec3`, `normalize`, local shading frame (`create_bsdf_coord_transform`), angle helpers, `reflect_ray`, `refract_ray`, `schlick`, disk/sphere/hemisphere sampling |
| `usami.ray` | `Ray` (`from_to`, `at`), `IntersectionInfo`, `OcclusionInfo` |
| `usami.bbox` | `BoundingBox` (`extents`, `area`, `centroid`, `occlude`), `union_bbox` |
| `usami.shapes` | `Disk`, `Empty`, `Rect`, `Sphere`, `Triangle`; `ShapeHit`, `SurfaceSample` |
| `usami.primitive` | `Primitive`, `GeometricPrimitive`, `NaiveComposite`, `same_primitive` |
| `usami.bvh` | `BvhComposite` over a `BasicPrimitiveCollection` |
| `usami.light` | `LightType`, `LightSample`, `DiffuseAreaLight`, `PointLight`, `SpotLight`, `DistantLight`, `InfiniteAreaLight` |
| `usami.canvas` | `Canvas`, an RGB accumulation buffer |
| `usami.raster.context` | `RenderingContext` |
| `usami.raster.shader` | `Vertex`, `DefaultVertexShader`, `DefaultFragmentShader` |
| `usami.raster.canvas` | `RasterCanvas` |

## Intersecting rays with geometry

```python
from usami.geometry import vec3
from usami.ray import Ray
from usami.shapes import Rect, Sphere
from usami.primitive import GeometricPrimitive, NaiveComposite
from usami.bvh import BvhComposite
from usami.light import DiffuseAreaLight

ground = GeometricPrimitive(Rect(vec3(0, 0, 0), 10, 10), name="ground")
ball = GeometricPrimitive(Sphere(vec3(0, 0, 1), 1), name="ball")
lamp = GeometricPrimitive(Rect(vec3(0, 0, 3), 1, 1), reverse_orientation=True)
lamp.bind_area_light(DiffuseAreaLight, vec3(1, 1, 1))

world = NaiveComposite()
for prim in (ground, ball, lamp):
    world.add_primitive(prim)

ray = Ray.from_to(vec3(-8, 0, 1), vec3(0, 0, 1))
hit = world.intersect(ray, 1e-3, 1e8)
if hit is not None:
    print(hit.primitive.name, hit.t, hit.point, hit.ns)

bvh = BvhComposite([ground, ball, lamp])
print(bvh.bounding().p_min, bvh.bounding().p_max)
```

`intersect` returns an `IntersectionInfo` for the nearest hit within
`[t_min, t_max]`, or `None`. `occlude` returns only the distance and the
primitive. `GeometricPrimitive` flips the normal and the uv coordinates when
`reverse_orientation` is set, and copies its `material` and `area_light` into
the hit record; `bind_material` accepts any object.

## Lights

Every light has `eval(ray)`, `sample(isect, u)` and `power()`. `sample`
returns a `LightSample` holding the incident direction, the sampled point,
the radiance, the pdf and the `LightType`.

```python
from usami.geometry import vec3
from usami.light import PointLight
from usami.ray import IntersectionInfo

light = PointLight(vec3(0, 0, 4), vec3(10, 10, 10))
sample = light.sample(IntersectionInfo(point=vec3(0, 0, 0)), (0.5, 0.5))
print(sample.wi, sample.radiance, sample.test_illumination())
```

`LightSample.test_visibility(scene, isect)` takes any object with an
`intersect_quick(ray)` method that returns an `IntersectionInfo` or `None`.
`InfiniteAreaLight` takes a callable that maps a `(u, v)` array to an RGB
value.

## Rasterizing triangles

```python
import numpy as np
from usami.raster.canvas import RasterCanvas
from usami.raster.context import RenderingContext
from usami.raster.shader import DefaultFragmentShader, DefaultVertexShader

canvas = RasterCanvas(64, 64)
canvas.clear(0.0)

context = RenderingContext(canvas, np.identity(4))  # world to screen
vertex_shader = DefaultVertexShader(context)

v0 = vertex_shader.run([10, 10, 0.5], [0, 0, 1], [0, 0])
v1 = vertex_shader.run([50, 10, 0.5], [0, 0, 1], [1, 0])
v2 = vertex_shader.run([10, 50, 0.5], [0, 0, 1], [0, 1])
canvas.rasterize(v0, v1, v2, DefaultFragmentShader())

print(canvas.buffer[20, 20], canvas.zbuffer[20, 20])
```

`push_model_transform` and `pop_model_transform` manage the context's
model-to-world stack; `model_to_screen` is kept in step and is what
`DefaultVertexShader` projects with. A fragment shader returns a color, or
`None` to discard the fragment.

## What the package does not do

- It has no BSDFs or materials of its own, no scene container and no
  integrator: nothing here computes radiance along a camera ray or renders a
  whole image. The pieces above are meant to be put together by the caller.
- It has no camera model and does not build world-to-screen matrices; the
  rasterizer takes the matrix it is given.
- It loads no model files and writes no image files. `Canvas` and
  `RasterCanvas` keep their pixels in numpy arrays (`buffer`), which the
  caller can save with whatever library it likes.
- There is no command-line program.