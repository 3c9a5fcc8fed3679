"""Vector helpers, shading-space geometry and sampling routines."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

BSDF_NORMAL = np.array([0.0, 0.0, 1.0])


def vec3(x: float, y: float, z: float) -> np.ndarray:
    """Build a 3-component float vector."""
    return np.array([x, y, z], dtype=float)


def normalize(v: Sequence[float]) -> np.ndarray:
    """Return ``v`` scaled to unit length."""
    arr = np.asarray(v, dtype=float)
    length = float(np.linalg.norm(arr))
    if length == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return arr / length


def create_bsdf_coord_transform(n: Sequence[float]) -> np.ndarray:
    """Return a 3x3 matrix taking world vectors into the local frame whose z axis is ``n``."""
    n = np.asarray(n, dtype=float)
    if n[0] != 0 or n[1] != 0:
        nz = normalize(n)
        nx = normalize([n[1], -n[0], 0.0])
        ny = np.cross(n, nx)
    else:
        nz = normalize(n)
        nx = vec3(1.0 if n[2] > 0 else -1.0, 0.0, 0.0)
        ny = vec3(0.0, 1.0, 0.0)
    return np.vstack([nx, ny, nz])


def same_hemisphere(wo: Sequence[float], wi: Sequence[float]) -> bool:
    """True when both directions lie on the same side of the local z plane."""
    return wo[2] * wi[2] > 0


def cos_theta(w: Sequence[float]) -> float:
    return float(w[2])


def cos2_theta(w: Sequence[float]) -> float:
    return float(w[2] * w[2])


def abs_cos_theta(w: Sequence[float]) -> float:
    return abs(float(w[2]))


def sin2_theta(w: Sequence[float]) -> float:
    return max(0.0, 1.0 - cos2_theta(w))


def sin_theta(w: Sequence[float]) -> float:
    return math.sqrt(sin2_theta(w))


def tan_theta(w: Sequence[float]) -> float:
    return sin_theta(w) / cos_theta(w)


def tan2_theta(w: Sequence[float]) -> float:
    return sin2_theta(w) / cos2_theta(w)


def reflect_ray(wo: Sequence[float], n: Sequence[float]) -> np.ndarray:
    """Mirror ``wo`` about the normal ``n`` (both assumed in the same hemisphere)."""
    wo = np.asarray(wo, dtype=float)
    n = np.asarray(n, dtype=float)
    h = float(np.dot(wo, n))
    return -wo + 2 * h * n


def reflect_ray_quick(wo: Sequence[float]) -> np.ndarray:
    """Mirror ``wo`` about the local z axis."""
    return vec3(-wo[0], -wo[1], wo[2])


def refract_ray(wo: Sequence[float], n: Sequence[float], eta: float) -> Optional[np.ndarray]:
    """Refract ``wo`` through a surface with relative index ``eta`` = etaI / etaT.

    Returns ``None`` on total internal reflection.
    """
    wo = np.asarray(wo, dtype=float)
    n = np.asarray(n, dtype=float)
    cos_i = float(np.dot(n, wo))
    sin2_i = max(0.0, 1.0 - cos_i * cos_i)
    sin2_t = eta * eta * sin2_i
    if sin2_t > 1:
        return None
    cos_t = math.sqrt(1.0 - sin2_t)
    return -eta * wo + (eta * cos_i - cos_t) * n


def schlick(cos_theta: float, eta: float) -> float:
    """Schlick's approximation of Fresnel reflectance, ``eta`` = etaI / etaT."""
    r0 = (eta - 1) / (eta + 1)
    r0 = r0 * r0
    root = 1 - cos_theta
    return r0 + (1 - r0) * root * root * root


def sample_uniform_disk(u: Sequence[float]) -> np.ndarray:
    """Map a unit square sample to a point on the unit disk in the z = 0 plane."""
    r = math.sqrt(u[0])
    phi = 2 * math.pi * u[1]
    return vec3(r * math.cos(phi), r * math.sin(phi), 0.0)


def sample_uniform_sphere(u: Sequence[float]) -> np.ndarray:
    """Map a unit square sample to a uniformly distributed unit direction."""
    z = 1 - 2 * u[0]
    r = math.sqrt(max(0.0, 1 - z * z))
    phi = 2 * math.pi * u[1]
    return vec3(r * math.cos(phi), r * math.sin(phi), z)


def pdf_uniform_sphere() -> float:
    return 1.0 / (4 * math.pi)


def sample_cosine_weighted_hemisphere(u: Sequence[float]) -> np.ndarray:
    """Map a unit square sample to a cosine-distributed direction with z >= 0."""
    d = sample_uniform_disk(u)
    z = math.sqrt(max(0.0, 1 - d[0] * d[0] - d[1] * d[1]))
    return vec3(d[0], d[1], z)


def pdf_cosine_weighted_hemisphere(cos_theta: float) -> float:
    return cos_theta / math.pi


def area_unit_cone(cos_theta: float) -> float:
    """Solid angle of a cone with the given half-angle cosine."""
    return 2 * math.pi * (1 - cos_theta)