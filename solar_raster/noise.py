"""Cheap deterministic value noise and its two multi-octave composites.

The octave recurrences are fixed: every shader's look depends on them.
"""

from __future__ import annotations

import numpy as np

from .vecmath import Vec3

_HASH_X = np.float32(43758.5453)
_HASH_Y = np.float32(22578.1459)
_HASH_Z = np.float32(19134.3872)


def _fract(value):
    frac = value - np.floor(value)
    # float32 rounding can push tiny negative inputs up to exactly 1.0
    return np.where(frac < 1.0, frac, np.float32(0.0))[()]


def noise_3d(p: Vec3):
    x = np.sin(p.x) * _HASH_X
    y = np.sin(p.y) * _HASH_Y
    z = np.sin(p.z) * _HASH_Z
    return _fract(x + y + z)


def fbm(p: Vec3, octaves: int):
    if octaves < 1:
        raise ValueError(f"fbm needs at least one octave, got {octaves}")
    value = np.float32(0.0)
    amplitude = np.float32(0.5)
    frequency = np.float32(1.0)
    max_value = np.float32(0.0)

    for _ in range(octaves):
        value = value + noise_3d(p * frequency) * amplitude
        max_value += amplitude
        amplitude *= np.float32(0.5)
        frequency *= np.float32(2.0)

    return value / max_value


def turbulence(p: Vec3, octaves: int):
    value = np.float32(0.0)
    amplitude = np.float32(1.0)
    frequency = np.float32(1.0)

    for _ in range(octaves):
        value = value + np.abs(noise_3d(p * frequency) * np.float32(2.0) - np.float32(1.0)) * amplitude
        amplitude *= np.float32(0.5)
        frequency *= np.float32(2.0)

    return value
