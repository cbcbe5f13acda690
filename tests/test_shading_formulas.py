"""Shader outputs pinned against a scalar transcription of the shading formulas.

The hash noise amplifies ``sin`` rounding by ~4e4, so these tests swap in a
smooth wave for ``noise_3d``. Every frequency, threshold and colour constant
then shows up directly in the pixels. The scalar code below runs in single
precision in the same operation order, so it agrees exactly except where a
vectorised and a scalar ``sin`` land on different sides of a truncation; the
comparison allows one step for that and anything beyond means a constant moved.
"""

import math

import numpy as np
import pytest

from solar_raster import noise, shaders
from solar_raster.shaders import Fragment
from solar_raster.vecmath import Vec3

f32 = np.float32
PI = f32(math.pi)
LIGHT = (0.5, 0.5, 1.0)
SAMPLES = 600


# -------------------------------------------------------------
# Smooth noise
# -------------------------------------------------------------


def _wave(x, y, z):
    return 0.5 + 0.4 * np.sin(1.3 * x + 1.7 * y + 0.7 * z)


def _smooth_noise(p: Vec3):
    return 0.5 + 0.4 * np.sin(1.3 * p.x + 1.7 * p.y + 0.7 * p.z)


@pytest.fixture
def smooth_noise(monkeypatch):
    monkeypatch.setattr(noise, "noise_3d", _smooth_noise)
    monkeypatch.setattr(shaders, "noise_3d", _smooth_noise)


# -------------------------------------------------------------
# Scalar formulas
# -------------------------------------------------------------


def _clamp(value, lo, hi):
    return f32(min(max(value, lo), hi))


def _from_float(r, g, b):
    return tuple(int(_clamp(f32(c), 0.0, 1.0) * 255.0) for c in (r, g, b))


def _mix(a, b, t):
    t = _clamp(t, 0.0, 1.0)
    return tuple(int(ca * (1.0 - t) + cb * t) for ca, cb in zip(a, b))


def _scaled(color, factor):
    return _from_float(*(f32(c) / 255.0 * factor for c in color))


def _fbm(x, y, z, octaves):
    value = 0.0
    amplitude = 0.5
    frequency = 1.0
    max_value = 0.0
    for _ in range(octaves):
        value += _wave(x * frequency, y * frequency, z * frequency) * amplitude
        max_value += amplitude
        amplitude *= 0.5
        frequency *= 2.0
    return value / max_value


def _turbulence(x, y, z, octaves):
    value = 0.0
    amplitude = 1.0
    frequency = 1.0
    for _ in range(octaves):
        value += abs(_wave(x * frequency, y * frequency, z * frequency) * 2.0 - 1.0) * amplitude
        amplitude *= 0.5
        frequency *= 2.0
    return value


def _spot(x, y, z, center, size):
    dx = x - center[0]
    dy = y - center[1]
    dz = z - center[2]
    dist = np.sqrt(dx * dx + dy * dy + dz * dz)
    if dist < size:
        return np.cos((1.0 - dist / size) * PI / 2.0) ** 2.0
    return 0.0


def _bands(band, c1, c2, c3):
    if band < 0.33:
        return _mix(c1, c2, band * 3.0)
    if band < 0.66:
        return _mix(c2, c3, (band - 0.33) * 3.0)
    return _mix(c3, c1, (band - 0.66) * 3.0)


def _sun(x, y, z, nz, intensity, time):
    radial = np.sqrt(x * x + y * y + z * z)
    radial_normalized = _clamp(radial * 2.0, 0.0, 1.0)
    core = _from_float(1.0, 1.0, 0.9)
    surface = _from_float(1.0, 0.6, 0.1)
    edge = _from_float(1.0, 0.2, 0.0)
    if radial_normalized < 0.5:
        base = _mix(core, surface, radial_normalized * 2.0)
    else:
        base = _mix(surface, edge, (radial_normalized - 0.5) * 2.0)

    plasma = _turbulence(x * 3.0, y * 3.0 + time * 0.5, z * 3.0, 4)
    flares = _wave(x * 8.0 + time * 0.8, y * 8.0, z * 8.0) ** 3.0
    corona = (1.0 - abs(nz)) ** 3.0
    brightness = intensity * (0.6 + plasma * 0.3 + flares * 0.5 + corona * 0.8)
    return _from_float(
        f32(base[0]) / 255.0 * brightness * (1.0 + corona * 0.5),
        f32(base[1]) / 255.0 * brightness * (1.0 + flares * 0.3),
        f32(base[2]) / 255.0 * brightness * (1.0 + plasma * 0.2),
    )


def _rocky_planet(x, y, z, nz, intensity, time):
    continent = _fbm(x * 2.0, y * 2.0, z * 2.0, 5)
    terrain = _fbm(x * 10.0, y * 10.0, z * 10.0, 4)
    beach = _from_float(0.85, 0.8, 0.6)
    lowland = _from_float(0.2, 0.5, 0.1)
    highland = _from_float(0.4, 0.3, 0.2)
    mountain = _from_float(0.6, 0.6, 0.6)
    if terrain < 0.3:
        land = _mix(beach, lowland, terrain * 3.3)
    elif terrain < 0.6:
        land = _mix(lowland, highland, (terrain - 0.3) * 3.3)
    else:
        land = _mix(highland, mountain, (terrain - 0.6) * 2.5)

    clouds = _fbm(x * 5.0 + time * 0.1, y * 5.0, z * 5.0, 3)
    if continent > 0.48:
        color = land
    else:
        depth = (continent - 0.3) / 0.18
        color = _mix(_from_float(0.0, 0.1, 0.3), _from_float(0.0, 0.3, 0.6), depth)
    if clouds > 0.6:
        color = _mix(color, _from_float(0.95, 0.95, 1.0), _clamp((clouds - 0.6) * 2.5, 0.0, 1.0) * 0.7)
    return _scaled(color, intensity * (0.4 + 0.6 * intensity))


def _gas_giant(x, y, z, nz, intensity, time):
    band = np.sin(y * 8.0) * 0.5 + 0.5
    base = _bands(band, _from_float(0.8, 0.6, 0.4), _from_float(0.5, 0.3, 0.2), _from_float(0.9, 0.7, 0.5))
    flow = _turbulence(x * 6.0 + time * 0.2, y * 12.0, z * 6.0, 4)
    spot = _spot(x, y, z, (0.3, -0.2, 0.8), 0.25)
    detail = _wave(x * 20.0, y * 20.0, z * 20.0) * 0.3

    influence = flow * 0.2 - 0.1
    color = _from_float(*(_clamp(f32(c) / 255.0 + influence, 0.0, 1.0) for c in base))
    color = _mix(color, _from_float(0.7, 0.2, 0.1), spot * 0.8)
    return _scaled(color, intensity * (0.7 + detail))


def _ring(x, y, z, nz, intensity, time):
    radius = np.sqrt(x * x + z * z)
    if radius < 1.3 or radius > 2.0:
        return (0, 0, 0), 0.0
    pattern = np.sin(radius * 15.0) * 0.5 + 0.5
    c1 = _from_float(0.9, 0.8, 0.6)
    c2 = _from_float(0.7, 0.6, 0.4)
    c3 = _from_float(0.5, 0.4, 0.3)
    if pattern < 0.3:
        base = _mix(c1, c2, pattern * 3.3)
    elif pattern < 0.7:
        base = _mix(c2, c3, (pattern - 0.3) * 2.5)
    else:
        base = _mix(c3, c1, (pattern - 0.7) * 3.3)

    gap = 0.3 if _fbm(x * 8.0, 0.0, z * 8.0, 3) > 0.7 else 1.0
    particles = _wave(x * 25.0, 0.0, z * 25.0)
    alpha = _clamp((2.0 - radius) / (2.0 - f32(1.3)) * gap * particles, 0.3, 0.95)
    return _scaled(base, intensity * (0.6 + particles * 0.4)), alpha


def _moon(x, y, z, nz, intensity, time):
    variation = _fbm(x * 4.0, y * 4.0, z * 4.0, 4)
    dark = _from_float(0.3, 0.3, 0.3)
    base = _from_float(0.5, 0.5, 0.5)
    light = _from_float(0.7, 0.7, 0.7)
    if variation < 0.4:
        color = _mix(dark, base, variation * 2.5)
    else:
        color = _mix(base, light, (variation - 0.4) * 1.67)

    craters = _turbulence(x * 12.0, y * 12.0, z * 12.0, 4)
    crater_depth = _clamp((craters - 0.7) * 3.3, 0.0, 1.0) if craters > 0.7 else 0.0
    detail = _wave(x * 30.0, y * 30.0, z * 30.0) * 0.15

    color = _mix(color, _from_float(0.2, 0.2, 0.2), crater_depth * 0.6)
    color = _from_float(*(_clamp(f32(c) / 255.0 + detail - 0.075, 0.0, 1.0) for c in color))
    return _scaled(color, intensity * (0.3 + 0.7 * intensity))


def _ice_giant(x, y, z, nz, intensity, time):
    band = np.sin(y * 12.0 + time * 0.3) * 0.5 + 0.5
    base = _bands(band, _from_float(0.2, 0.4, 0.8), _from_float(0.1, 0.6, 0.9), _from_float(0.3, 0.7, 1.0))
    clouds = _fbm(x * 4.0 + time * 0.15, y * 8.0, z * 4.0, 4)
    spot = _spot(x, y, z, (-0.4, 0.3, 0.7), 0.2)

    influence = clouds * 0.15
    color = _from_float(
        _clamp(f32(base[0]) / 255.0 + influence, 0.0, 1.0),
        _clamp(f32(base[1]) / 255.0 + influence, 0.0, 1.0),
        _clamp(f32(base[2]) / 255.0 + influence * 0.8, 0.0, 1.0),
    )
    color = _mix(color, _from_float(0.1, 0.2, 0.4), spot * 0.6)
    return _scaled(color, intensity * (0.6 + clouds * 0.2))


def _desert_planet(x, y, z, nz, intensity, time):
    terrain = _fbm(x * 3.0, y * 3.0, z * 3.0, 5)
    light = _from_float(0.8, 0.4, 0.2)
    dark = _from_float(0.5, 0.2, 0.1)
    sand = _from_float(0.9, 0.6, 0.3)
    if terrain < 0.3:
        color = _mix(dark, light, terrain * 3.3)
    elif terrain < 0.7:
        color = _mix(light, sand, (terrain - 0.3) * 2.5)
    else:
        color = _mix(sand, dark, (terrain - 0.7) * 3.3)

    crater_effect = np.maximum(_turbulence(x * 8.0, y * 8.0, z * 8.0, 3) - 0.7, 0.0) * 3.0
    polar = abs(y)
    ice = _clamp((polar - 0.7) / (1.0 - f32(0.7)), 0.0, 1.0) if polar > 0.7 else 0.0

    shade = 1.0 - crater_effect * 0.3
    color = _from_float(*(_clamp(f32(c) / 255.0 * shade, 0.0, 1.0) for c in color))
    color = _mix(color, _from_float(0.95, 0.95, 1.0), ice * 0.8)
    return _scaled(color, intensity * (0.5 + terrain * 0.3))


def _volcanic_planet(x, y, z, nz, intensity, time):
    variation = _fbm(x * 2.5, y * 2.5, z * 2.5, 4)
    yellow = _from_float(0.9, 0.8, 0.2)
    orange = _from_float(0.8, 0.5, 0.1)
    white = _from_float(0.95, 0.9, 0.7)
    if variation < 0.4:
        color = _mix(yellow, orange, variation * 2.5)
    else:
        color = _mix(orange, white, (variation - 0.4) * 1.67)

    volcano = _turbulence(x * 6.0, y * 6.0, z * 6.0 + time * 0.5, 4)
    hotspot = _clamp((volcano - 0.75) * 4.0, 0.0, 1.0) if volcano > 0.75 else 0.0
    lava_flow = _fbm(x * 10.0, y * 10.0 + time * 0.3, z * 10.0, 3)
    lava = _clamp((lava_flow - 0.65) * 2.86, 0.0, 1.0) if lava_flow > 0.65 else 0.0
    glow = (1.0 - abs(nz)) ** 2.0 * 0.3

    color = _mix(color, _from_float(1.0, 0.3, 0.0), lava * 0.7)
    color = _mix(color, _from_float(1.0, 0.5, 0.0), hotspot * 0.9)
    brightness = intensity * (0.7 + hotspot * 0.8 + glow)
    return _from_float(
        f32(color[0]) / 255.0 * brightness * (1.0 + hotspot * 0.5),
        f32(color[1]) / 255.0 * brightness * (1.0 + hotspot * 0.3),
        f32(color[2]) / 255.0 * brightness,
    )


# -------------------------------------------------------------
# Fragment batches
# -------------------------------------------------------------


def _body_fragments(seed: int):
    """Points on and inside the unit sphere, lit by the default light."""
    rng = np.random.default_rng(seed)
    normals = rng.normal(size=(SAMPLES, 3))
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    positions = normals * rng.uniform(0.1, 1.05, size=(SAMPLES, 1))
    light = np.asarray(LIGHT) / np.linalg.norm(LIGHT)
    intensity = np.maximum(normals @ light, 0.0) * 0.8 + 0.2
    return (
        positions.astype(np.float32),
        normals.astype(np.float32),
        intensity.astype(np.float32),
    )


def _ring_fragments(seed: int):
    rng = np.random.default_rng(seed)
    radius = rng.uniform(1.25, 2.05, size=SAMPLES)
    angle = rng.uniform(0.0, 2.0 * np.pi, size=SAMPLES)
    positions = np.stack([radius * np.cos(angle), np.zeros(SAMPLES), radius * np.sin(angle)], axis=-1)
    normals = np.tile([0.0, 1.0, 0.0], (SAMPLES, 1))
    intensity = rng.uniform(0.2, 1.0, size=SAMPLES)
    return (
        positions.astype(np.float32),
        normals.astype(np.float32),
        intensity.astype(np.float32),
    )


def _fragment(positions, normals, intensity, time) -> Fragment:
    return Fragment(Vec3.from_array(positions), Vec3.from_array(normals), intensity, time)


def _expected(formula, positions, normals, intensity, time):
    time = f32(time)
    return [
        formula(p[0], p[1], p[2], n[2], i, time)
        for p, n, i in zip(positions, normals, intensity)
    ]


def _channels(color) -> np.ndarray:
    return np.stack([color.r, color.g, color.b], axis=-1).astype(np.int64)


def _assert_pixels_match(got: np.ndarray, expected: np.ndarray) -> None:
    diff = np.abs(got - expected)
    off_by_more = np.any(diff > 1, axis=-1)
    assert off_by_more.mean() < 0.01, f"{off_by_more.sum()} fragments differ, worst by {diff.max()}"
    assert np.mean(diff == 0) > 0.95


# scene times used by the CLI
OPAQUE = [
    ("sun", _sun, 2.5),
    ("rocky_planet", _rocky_planet, 5.0),
    ("gas_giant", _gas_giant, 3.5),
    ("ice_giant", _ice_giant, 4.0),
    ("desert_planet", _desert_planet, 1.5),
    ("volcanic_planet", _volcanic_planet, 3.0),
    ("moon", _moon, 5.0),
]


@pytest.mark.parametrize("name, formula, time", OPAQUE, ids=[entry[0] for entry in OPAQUE])
def test_opaque_shader_matches_formula(smooth_noise, name, formula, time) -> None:
    positions, normals, intensity = _body_fragments(seed=len(name))
    color = shaders.SHADERS[name](_fragment(positions, normals, intensity, time))
    expected = np.array(_expected(formula, positions, normals, intensity, time), dtype=np.int64)
    _assert_pixels_match(_channels(color), expected)


@pytest.mark.parametrize("name, formula, time", OPAQUE, ids=[entry[0] for entry in OPAQUE])
def test_single_fragment_matches_formula(smooth_noise, name, formula, time) -> None:
    position = (0.35, -0.45, 0.6)
    normal = np.array(position) / np.linalg.norm(position)
    fragment = Fragment(Vec3(*position), Vec3(*normal), 0.85, time)
    got = np.array(shaders.SHADERS[name](fragment).as_tuple())
    expected = np.array(
        formula(
            f32(position[0]),
            f32(position[1]),
            f32(position[2]),
            f32(normal[2]),
            f32(0.85),
            f32(time),
        )
    )
    assert np.all(np.abs(got - expected) <= 1), (got, expected)


def test_ring_matches_formula(smooth_noise) -> None:
    positions, normals, intensity = _ring_fragments(seed=11)
    color, alpha = shaders.ring(_fragment(positions, normals, intensity, 0.0))
    expected = _expected(_ring, positions, normals, intensity, 0.0)

    _assert_pixels_match(_channels(color), np.array([c for c, _ in expected], dtype=np.int64))
    alpha_diff = np.abs(alpha - np.array([a for _, a in expected]))
    assert np.mean(alpha_diff > 1e-3) < 0.01


def test_ring_band_covers_both_outcomes(smooth_noise) -> None:
    positions, normals, intensity = _ring_fragments(seed=11)
    _, alpha = shaders.ring(_fragment(positions, normals, intensity, 0.0))
    inside = alpha > 0.0
    assert 0.5 < inside.mean() < 1.0
    assert np.all(alpha[inside] >= np.float32(0.3))
    assert np.any(alpha[inside] > np.float32(0.3))
