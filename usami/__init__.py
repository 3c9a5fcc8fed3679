"""Renderer building blocks: rays, shapes, primitives, a BVH, lights and a rasterizer."""

__version__ = "0.1.0"