from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

import numpy as np

from .color import Color
from .shaders import Fragment, Shader, TranslucentShader, ring
from .vecmath import Vec3, as_f32

AMBIENT = np.float32(0.2)
DIFFUSE = np.float32(0.8)
ALPHA_CUTOFF = np.float32(0.01)
# squared sine of the smallest screen-space corner angle still rasterized
DEGENERATE_EPSILON = np.float32(1e-6)


# -------------------------------------------------------------
# Render configuration and buffers
# -------------------------------------------------------------


@dataclass
class RenderSettings:
    width: int = 800
    height: int = 800
    light_direction: Vec3 = field(default_factory=lambda: Vec3(0.5, 0.5, 1.0))

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"image size must be positive, got {self.width}x{self.height}")
        if not float(self.light_direction.length()) > 0.0:
            raise ValueError("light direction must be a non-zero vector")
        self.light_direction = self.light_direction.normalize()

    @property
    def scale(self) -> np.float32:
        return np.float32(min(self.width, self.height) / 4.0)

    @property
    def center(self) -> tuple[np.float32, np.float32]:
        return np.float32(self.width / 2.0), np.float32(self.height / 2.0)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class RenderTarget:
    """Colour buffer (packed 0xRRGGBB) paired with a depth buffer of the same size."""

    def __init__(self, settings: RenderSettings):
        self.settings = settings
        self.color = np.zeros(settings.pixel_count, dtype=np.uint32)
        self.depth = np.full(settings.pixel_count, -np.inf, dtype=np.float32)

    def reset(self) -> None:
        self.color.fill(0)
        self.depth.fill(-np.inf)

    def to_rgb(self) -> np.ndarray:
        packed = self.color.reshape(self.settings.height, self.settings.width)
        rgb = np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1)
        return rgb.astype(np.uint8)


# -------------------------------------------------------------
# Triangle coverage
# -------------------------------------------------------------


class Coverage(NamedTuple):
    indices: np.ndarray
    u: np.ndarray
    v: np.ndarray
    position: Vec3


def project(settings: RenderSettings, v: Vec3) -> tuple:
    cx, cy = settings.center
    scale = settings.scale
    return cx + v.x * scale, cy - v.y * scale


def face_normal(v1: Vec3, v2: Vec3, v3: Vec3) -> Vec3:
    return (v2 - v1).cross(v3 - v1).normalize()


def triangle_coverage(settings: RenderSettings, v1: Vec3, v2: Vec3, v3: Vec3) -> Optional[Coverage]:
    """Pixels inside the projected triangle with their barycentric weights.

    Edges are inclusive, so pixels on an edge shared by two triangles are
    covered by both. ``position`` is interpolated from the world-space
    vertices. Returns None when nothing is covered or the triangle is
    degenerate in screen space.
    """
    p1x, p1y = project(settings, v1)
    p2x, p2y = project(settings, v2)
    p3x, p3y = project(settings, v3)
    xs = (p1x, p2x, p3x)
    ys = (p1y, p2y, p3y)
    if not np.all(np.isfinite(xs + ys)):
        return None

    min_x = int(max(min(xs), 0.0))
    max_x = int(min(max(xs), settings.width - 1.0))
    min_y = int(max(min(ys), 0.0))
    max_y = int(min(max(ys), settings.height - 1.0))
    if min_x > max_x or min_y > max_y:
        return None

    e0x, e0y = p2x - p1x, p2y - p1y
    e1x, e1y = p3x - p1x, p3y - p1y
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        dot00 = e0x * e0x + e0y * e0y
        dot01 = e0x * e1x + e0y * e1y
        dot11 = e1x * e1x + e1y * e1y
        denom = dot00 * dot11 - dot01 * dot01
        # edge-on slivers leave only float32 rounding noise in the denominator
        if not denom > DEGENERATE_EPSILON * dot00 * dot11:
            return None
        inv_denom = np.float32(1.0) / denom
    if not np.isfinite(inv_denom):
        return None

    px, py = np.meshgrid(
        np.arange(min_x, max_x + 1, dtype=np.float32),
        np.arange(min_y, max_y + 1, dtype=np.float32),
    )
    e2x = px - p1x
    e2y = py - p1y
    dot02 = e0x * e2x + e0y * e2y
    dot12 = e1x * e2x + e1y * e2y

    u = (dot11 * dot02 - dot01 * dot12) * inv_denom
    v = (dot00 * dot12 - dot01 * dot02) * inv_denom
    inside = (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0)
    if not inside.any():
        return None

    u = u[inside]
    v = v[inside]
    indices = py[inside].astype(np.intp) * settings.width + px[inside].astype(np.intp)
    position = v1 + (v2 - v1) * u + (v3 - v1) * v
    return Coverage(indices, u, v, position)


# -------------------------------------------------------------
# Rasterizers
# -------------------------------------------------------------


def rasterize_triangle(
    target: RenderTarget,
    v1: Vec3,
    v2: Vec3,
    v3: Vec3,
    shader: Shader,
    time: float,
) -> int:
    """Depth-tested opaque triangle. Returns the number of pixels written."""
    settings = target.settings
    coverage = triangle_coverage(settings, v1, v2, v3)
    if coverage is None:
        return 0

    z = coverage.position.z
    visible = z > target.depth[coverage.indices]
    if not visible.any():
        return 0

    indices = coverage.indices[visible]
    target.depth[indices] = z[visible]

    normal = face_normal(v1, v2, v3)
    intensity = np.maximum(normal.dot(settings.light_direction), 0.0) * DIFFUSE + AMBIENT
    fragment = Fragment(coverage.position.compress(visible), normal, intensity, time)

    color = shader(fragment)
    target.color[indices] = np.broadcast_to(color.to_u32(), indices.shape)
    return int(indices.size)


def blend(new, existing, alpha):
    """Alpha-composite packed colour ``new`` over ``existing``.

    Computed on 0-255 channel values so alpha 0 keeps ``existing`` and
    alpha 1 yields ``new`` exactly.
    """
    alpha = np.clip(as_f32(alpha), 0.0, 1.0)
    inv = np.float32(1.0) - alpha
    src = Color.from_u32(new)
    dst = Color.from_u32(existing)

    def channel(a, b):
        value = np.asarray(a, dtype=np.float32) * alpha + np.asarray(b, dtype=np.float32) * inv
        return np.clip(value, 0.0, 255.0).astype(np.uint32)

    packed = (
        (channel(src.r, dst.r) << 16)
        | (channel(src.g, dst.g) << 8)
        | channel(src.b, dst.b)
    )
    return np.asarray(packed, dtype=np.uint32)[()]


def rasterize_translucent_triangle(
    target: RenderTarget,
    v1: Vec3,
    v2: Vec3,
    v3: Vec3,
    time: float,
    shader: TranslucentShader = ring,
) -> int:
    """Alpha-blended triangle with no depth test. Returns the number of pixels blended."""
    settings = target.settings
    coverage = triangle_coverage(settings, v1, v2, v3)
    if coverage is None:
        return 0

    # both faces of a ring are lit
    normal = face_normal(v1, v2, v3)
    intensity = np.abs(normal.dot(settings.light_direction)) * DIFFUSE + AMBIENT
    fragment = Fragment(coverage.position, normal, intensity, time)

    color, alpha = shader(fragment)
    shape = coverage.indices.shape
    alpha = np.broadcast_to(alpha, shape)
    keep = alpha > ALPHA_CUTOFF
    if not keep.any():
        return 0

    indices = coverage.indices[keep]
    overlay = np.broadcast_to(color.to_u32(), shape)[keep]
    target.color[indices] = blend(overlay, target.color[indices], alpha[keep])
    return int(indices.size)
