from __future__ import annotations

import math

import numpy as np


# -------------------------------------------------------------
# Mesh generators
# -------------------------------------------------------------


def generate_sphere(radius: float, segments: int) -> np.ndarray:
    """Latitude-major grid of ``(segments + 1) ** 2`` vertices, row stride ``segments + 1``."""
    if segments < 1:
        raise ValueError(f"sphere needs at least one segment, got {segments}")
    steps = np.arange(segments + 1, dtype=np.float32)
    theta = np.float32(math.pi) * steps / np.float32(segments)
    phi = np.float32(2.0 * math.pi) * steps / np.float32(segments)

    sin_theta = np.sin(theta)[:, None]
    cos_theta = np.cos(theta)[:, None]
    sin_phi = np.sin(phi)[None, :]
    cos_phi = np.cos(phi)[None, :]

    r = np.float32(radius)
    x = r * sin_theta * cos_phi
    y = r * cos_theta * np.ones_like(cos_phi)
    z = r * sin_theta * sin_phi

    vertices = np.stack([x, y, z], axis=-1)
    return vertices.reshape(-1, 3).astype(np.float32)


def generate_ring(inner_radius: float, outer_radius: float, segments: int) -> np.ndarray:
    """Flat ring strip in the y=0 plane: an (inner, outer) vertex pair per angular step."""
    if segments < 1:
        raise ValueError(f"ring needs at least one segment, got {segments}")
    angle = np.float32(2.0 * math.pi) * np.arange(segments + 1, dtype=np.float32) / np.float32(segments)
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)

    vertices = np.zeros((segments + 1, 2, 3), dtype=np.float32)
    vertices[:, 0, 0] = np.float32(inner_radius) * cos_a
    vertices[:, 0, 2] = np.float32(inner_radius) * sin_a
    vertices[:, 1, 0] = np.float32(outer_radius) * cos_a
    vertices[:, 1, 2] = np.float32(outer_radius) * sin_a
    return vertices.reshape(-1, 3)
