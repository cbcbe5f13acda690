"""Full-frame renders: one sphere, a sphere with a ring, a sphere with a moon."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from .raster import RenderSettings, RenderTarget, rasterize_translucent_triangle, rasterize_triangle
from .shaders import Fragment, Shader, TranslucentShader, moon, ring
from .vecmath import Vec3, as_f32

logger = logging.getLogger(__name__)

MOON_DISTANCE = np.float32(2.5)
MOON_HEIGHT = np.float32(0.3)
MOON_SPIN_FACTOR = np.float32(0.3)

Vertices = Union[np.ndarray, Sequence[Vec3]]


def _as_vec3(vertices: Vertices) -> Vec3:
    if isinstance(vertices, np.ndarray):
        arr = vertices.astype(np.float32, copy=False).reshape(-1, 3)
    else:
        arr = np.array([(v.x, v.y, v.z) for v in vertices], dtype=np.float32).reshape(-1, 3)
    return Vec3.from_array(arr)


def _unpack(vertices: Vec3) -> List[Vec3]:
    return [Vec3(x, y, z) for x, y, z in zip(vertices.x, vertices.y, vertices.z)]


def _check_sphere(vertices: Vec3, segments: int, label: str) -> None:
    needed = (segments + 1) * (segments + 1)
    count = int(np.size(vertices.x))
    if segments < 1 or count < needed:
        raise ValueError(f"{label} mesh with {segments} segments needs {needed} vertices, got {count}")


def _draw_sphere(target: RenderTarget, vertices: List[Vec3], segments: int, shader: Shader, time: float) -> int:
    stride = segments + 1
    written = 0
    for lat in range(segments):
        for lon in range(segments):
            idx = lat * stride + lon
            v1 = vertices[idx]
            v2 = vertices[idx + 1]
            v3 = vertices[idx + stride]
            v4 = vertices[idx + stride + 1]
            written += rasterize_triangle(target, v1, v2, v3, shader, time)
            written += rasterize_triangle(target, v2, v4, v3, shader, time)
    return written


def _ring_plane_shader(tilt: float) -> TranslucentShader:
    # shade in the ring's own plane so the band radius survives the tilt
    def shade(fragment: Fragment):
        flat = Fragment(fragment.position.rotate_x(-tilt), fragment.normal, fragment.intensity, fragment.time)
        return ring(flat)

    return shade


def _draw_ring(target: RenderTarget, vertices: List[Vec3], time: float, shader: TranslucentShader = ring) -> int:
    written = 0
    for i in range(len(vertices) // 2 - 1):
        v1 = vertices[i * 2]
        v2 = vertices[i * 2 + 1]
        v3 = vertices[i * 2 + 2]
        v4 = vertices[i * 2 + 3]
        written += rasterize_translucent_triangle(target, v1, v2, v3, time, shader)
        written += rasterize_translucent_triangle(target, v2, v4, v3, time, shader)
    return written


# -------------------------------------------------------------
# Scene renders
# -------------------------------------------------------------


def render_sphere(
    vertices: Vertices,
    segments: int,
    shader: Shader,
    time: float,
    rotation: float,
    settings: Optional[RenderSettings] = None,
) -> np.ndarray:
    settings = settings or RenderSettings()
    mesh = _as_vec3(vertices)
    _check_sphere(mesh, segments, "sphere")

    target = RenderTarget(settings)
    written = _draw_sphere(target, _unpack(mesh.rotate_y(rotation)), segments, shader, time)
    logger.debug("sphere %s: %d pixel writes", getattr(shader, "__name__", shader), written)
    return target.to_rgb()


def render_planet_with_rings(
    planet_vertices: Vertices,
    ring_vertices: Vertices,
    segments: int,
    planet_shader: Shader,
    time: float,
    rotation: float,
    settings: Optional[RenderSettings] = None,
    ring_tilt: float = 0.0,
) -> np.ndarray:
    """Planet first, then the ring strip blended over the resolved planet.

    ``ring_tilt`` tips the spun ring plane about the x axis towards the
    viewer; at 0 the ring is seen exactly edge-on and projects to nothing.
    """
    settings = settings or RenderSettings()
    planet = _as_vec3(planet_vertices)
    _check_sphere(planet, segments, "planet")
    ring_mesh = _as_vec3(ring_vertices)
    ring_count = int(np.size(ring_mesh.x))
    if ring_count < 4 or ring_count % 2:
        raise ValueError(f"ring strip needs an even number of at least 4 vertices, got {ring_count}")

    target = RenderTarget(settings)
    planet_writes = _draw_sphere(target, _unpack(planet.rotate_y(rotation)), segments, planet_shader, time)
    strip = _unpack(ring_mesh.rotate_y(rotation).rotate_x(ring_tilt))
    ring_writes = _draw_ring(target, strip, time, _ring_plane_shader(ring_tilt))
    logger.debug("planet with rings: %d planet writes, %d ring blends", planet_writes, ring_writes)
    return target.to_rgb()


def render_planet_with_moon(
    planet_vertices: Vertices,
    moon_vertices: Vertices,
    planet_segments: int,
    moon_segments: int,
    planet_shader: Shader,
    time: float,
    rotation: float,
    moon_orbit_angle: float,
    settings: Optional[RenderSettings] = None,
    moon_shader: Shader = moon,
) -> np.ndarray:
    settings = settings or RenderSettings()
    planet = _as_vec3(planet_vertices)
    _check_sphere(planet, planet_segments, "planet")
    satellite = _as_vec3(moon_vertices)
    _check_sphere(satellite, moon_segments, "moon")

    orbit = as_f32(moon_orbit_angle)
    offset = Vec3(MOON_DISTANCE * np.cos(orbit), MOON_HEIGHT, MOON_DISTANCE * np.sin(orbit))

    target = RenderTarget(settings)
    planet_writes = _draw_sphere(target, _unpack(planet.rotate_y(rotation)), planet_segments, planet_shader, time)
    moon_spin = as_f32(rotation) * MOON_SPIN_FACTOR
    moon_writes = _draw_sphere(
        target, _unpack((satellite + offset).rotate_y(moon_spin)), moon_segments, moon_shader, time
    )
    logger.debug("planet with moon: %d planet writes, %d moon writes", planet_writes, moon_writes)
    return target.to_rgb()
