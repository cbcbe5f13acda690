from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from .color import BLACK, Color
from .noise import fbm, noise_3d, turbulence
from .vecmath import VIEW_AXIS, Vec3, as_f32

PI = np.float32(math.pi)


@dataclass(frozen=True)
class Fragment:
    """Shading input for one pixel, or for every covered pixel of a triangle."""

    position: Vec3
    normal: Vec3
    intensity: float
    time: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "intensity", as_f32(self.intensity))
        object.__setattr__(self, "time", as_f32(self.time))


Shader = Callable[[Fragment], Color]
TranslucentShader = Callable[[Fragment], Tuple[Color, np.ndarray]]


def _where(condition, a, b):
    return np.where(condition, as_f32(a), as_f32(b))[()]


def _spot(position: Vec3, center: Vec3, size: float):
    dist = (position - center).length()
    falloff = np.cos((1.0 - dist / np.float32(size)) * PI / 2.0) ** 2.0
    return _where(dist < size, falloff, 0.0)


# -------------------------------------------------------------
# Sun
# -------------------------------------------------------------

SUN_CORE = Color.from_float(1.0, 1.0, 0.9)
SUN_SURFACE = Color.from_float(1.0, 0.6, 0.1)
SUN_EDGE = Color.from_float(1.0, 0.2, 0.0)


def sun(fragment: Fragment) -> Color:
    pos = fragment.position
    radial = np.sqrt(pos.x * pos.x + pos.y * pos.y + pos.z * pos.z)
    radial_normalized = np.clip(radial * 2.0, 0.0, 1.0)

    base_color = Color.select(
        radial_normalized < 0.5,
        SUN_CORE.mix(SUN_SURFACE, radial_normalized * 2.0),
        SUN_SURFACE.mix(SUN_EDGE, (radial_normalized - 0.5) * 2.0),
    )

    plasma = turbulence(Vec3(pos.x * 3.0, pos.y * 3.0 + fragment.time * 0.5, pos.z * 3.0), 4)
    flares = noise_3d(Vec3(pos.x * 8.0 + fragment.time * 0.8, pos.y * 8.0, pos.z * 8.0)) ** 3.0

    edge_intensity = 1.0 - np.abs(fragment.normal.dot(VIEW_AXIS))
    corona = edge_intensity ** 3.0

    brightness = fragment.intensity * (0.6 + plasma * 0.3 + flares * 0.5 + corona * 0.8)

    r, g, b = base_color.as_floats()
    return Color.from_float(
        r * brightness * (1.0 + corona * 0.5),
        g * brightness * (1.0 + flares * 0.3),
        b * brightness * (1.0 + plasma * 0.2),
    )


# -------------------------------------------------------------
# Rocky planet
# -------------------------------------------------------------

OCEAN_DEEP = Color.from_float(0.0, 0.1, 0.3)
OCEAN_SHALLOW = Color.from_float(0.0, 0.3, 0.6)
BEACH = Color.from_float(0.85, 0.8, 0.6)
LOWLAND = Color.from_float(0.2, 0.5, 0.1)
HIGHLAND = Color.from_float(0.4, 0.3, 0.2)
MOUNTAIN = Color.from_float(0.6, 0.6, 0.6)
CLOUD = Color.from_float(0.95, 0.95, 1.0)


def rocky_planet(fragment: Fragment) -> Color:
    pos = fragment.position

    continent_noise = fbm(pos * 2.0, 5)
    is_land = continent_noise > 0.48

    terrain = fbm(pos * 10.0, 4)
    land_color = Color.select(
        terrain < 0.3,
        BEACH.mix(LOWLAND, terrain * 3.3),
        Color.select(
            terrain < 0.6,
            LOWLAND.mix(HIGHLAND, (terrain - 0.3) * 3.3),
            HIGHLAND.mix(MOUNTAIN, (terrain - 0.6) * 2.5),
        ),
    )

    clouds = fbm(Vec3(pos.x * 5.0 + fragment.time * 0.1, pos.y * 5.0, pos.z * 5.0), 3)
    has_cloud = clouds > 0.6
    cloud_density = np.clip((clouds - 0.6) * 2.5, 0.0, 1.0)

    depth = (continent_noise - 0.3) / 0.18
    ocean_color = OCEAN_DEEP.mix(OCEAN_SHALLOW, np.clip(depth, 0.0, 1.0))

    final_color = Color.select(is_land, land_color, ocean_color)
    final_color = Color.select(has_cloud, final_color.mix(CLOUD, cloud_density * 0.7), final_color)

    lit = fragment.intensity * (0.4 + 0.6 * fragment.intensity)

    r, g, b = final_color.as_floats()
    return Color.from_float(r * lit, g * lit, b * lit)


# -------------------------------------------------------------
# Gas giant
# -------------------------------------------------------------

GAS_BAND_1 = Color.from_float(0.8, 0.6, 0.4)
GAS_BAND_2 = Color.from_float(0.5, 0.3, 0.2)
GAS_BAND_3 = Color.from_float(0.9, 0.7, 0.5)
GAS_SPOT = Color.from_float(0.7, 0.2, 0.1)
GAS_SPOT_CENTER = Vec3(0.3, -0.2, 0.8)


def _three_band(band, c1: Color, c2: Color, c3: Color) -> Color:
    return Color.select(
        band < 0.33,
        c1.mix(c2, band * 3.0),
        Color.select(
            band < 0.66,
            c2.mix(c3, (band - 0.33) * 3.0),
            c3.mix(c1, (band - 0.66) * 3.0),
        ),
    )


def gas_giant(fragment: Fragment) -> Color:
    pos = fragment.position
    band = np.sin(pos.y * 8.0) * 0.5 + 0.5
    base_band = _three_band(band, GAS_BAND_1, GAS_BAND_2, GAS_BAND_3)

    flow = turbulence(Vec3(pos.x * 6.0 + fragment.time * 0.2, pos.y * 12.0, pos.z * 6.0), 4)
    spot_intensity = _spot(pos, GAS_SPOT_CENTER, 0.25)
    detail = noise_3d(pos * 20.0) * 0.3

    flow_influence = flow * 0.2 - 0.1
    r, g, b = base_band.as_floats()
    final_color = Color.from_float(
        np.clip(r + flow_influence, 0.0, 1.0),
        np.clip(g + flow_influence, 0.0, 1.0),
        np.clip(b + flow_influence, 0.0, 1.0),
    )
    final_color = final_color.mix(GAS_SPOT, spot_intensity * 0.8)

    brightness = fragment.intensity * (0.7 + detail)

    r, g, b = final_color.as_floats()
    return Color.from_float(r * brightness, g * brightness, b * brightness)


# -------------------------------------------------------------
# Ring system
# -------------------------------------------------------------

RING_INNER_RADIUS = np.float32(1.3)
RING_OUTER_RADIUS = np.float32(2.0)
RING_COLOR_1 = Color.from_float(0.9, 0.8, 0.6)
RING_COLOR_2 = Color.from_float(0.7, 0.6, 0.4)
RING_COLOR_3 = Color.from_float(0.5, 0.4, 0.3)


def ring(fragment: Fragment) -> Tuple[Color, np.ndarray]:
    """Banded ring colour plus opacity; zero opacity outside the ring band."""
    pos = fragment.position
    radius = np.sqrt(pos.x * pos.x + pos.z * pos.z)
    outside = (radius < RING_INNER_RADIUS) | (radius > RING_OUTER_RADIUS)

    band_pattern = np.sin(radius * 15.0) * 0.5 + 0.5
    base_color = Color.select(
        band_pattern < 0.3,
        RING_COLOR_1.mix(RING_COLOR_2, band_pattern * 3.3),
        Color.select(
            band_pattern < 0.7,
            RING_COLOR_2.mix(RING_COLOR_3, (band_pattern - 0.3) * 2.5),
            RING_COLOR_3.mix(RING_COLOR_1, (band_pattern - 0.7) * 3.3),
        ),
    )

    gaps = fbm(Vec3(pos.x * 8.0, 0.0, pos.z * 8.0), 3)
    gap_effect = _where(gaps > 0.7, 0.3, 1.0)

    particles = noise_3d(Vec3(pos.x * 25.0, 0.0, pos.z * 25.0))

    band_width = RING_OUTER_RADIUS - RING_INNER_RADIUS
    alpha = ((RING_OUTER_RADIUS - radius) / band_width) * gap_effect * particles
    alpha = np.clip(alpha, 0.3, 0.95)

    brightness = fragment.intensity * (0.6 + particles * 0.4)

    r, g, b = base_color.as_floats()
    final_color = Color.from_float(r * brightness, g * brightness, b * brightness)

    return Color.select(outside, BLACK, final_color), _where(outside, 0.0, alpha)


# -------------------------------------------------------------
# Moon
# -------------------------------------------------------------

MOON_BASE = Color.from_float(0.5, 0.5, 0.5)
MOON_DARK = Color.from_float(0.3, 0.3, 0.3)
MOON_LIGHT = Color.from_float(0.7, 0.7, 0.7)
MOON_CRATER = Color.from_float(0.2, 0.2, 0.2)


def moon(fragment: Fragment) -> Color:
    pos = fragment.position

    surface_variation = fbm(pos * 4.0, 4)
    base_color = Color.select(
        surface_variation < 0.4,
        MOON_DARK.mix(MOON_BASE, surface_variation * 2.5),
        MOON_BASE.mix(MOON_LIGHT, (surface_variation - 0.4) * 1.67),
    )

    craters = turbulence(pos * 12.0, 4)
    crater_depth = _where(craters > 0.7, np.clip((craters - 0.7) * 3.3, 0.0, 1.0), 0.0)

    detail = noise_3d(pos * 30.0) * 0.15

    final_color = base_color.mix(MOON_CRATER, crater_depth * 0.6)
    r, g, b = final_color.as_floats()
    final_color = Color.from_float(
        np.clip(r + detail - 0.075, 0.0, 1.0),
        np.clip(g + detail - 0.075, 0.0, 1.0),
        np.clip(b + detail - 0.075, 0.0, 1.0),
    )

    brightness = fragment.intensity * (0.3 + 0.7 * fragment.intensity)

    r, g, b = final_color.as_floats()
    return Color.from_float(r * brightness, g * brightness, b * brightness)


# -------------------------------------------------------------
# Ice giant
# -------------------------------------------------------------

ICE_BAND_1 = Color.from_float(0.2, 0.4, 0.8)
ICE_BAND_2 = Color.from_float(0.1, 0.6, 0.9)
ICE_BAND_3 = Color.from_float(0.3, 0.7, 1.0)
ICE_SPOT = Color.from_float(0.1, 0.2, 0.4)
ICE_SPOT_CENTER = Vec3(-0.4, 0.3, 0.7)


def ice_giant(fragment: Fragment) -> Color:
    pos = fragment.position
    band = np.sin(pos.y * 12.0 + fragment.time * 0.3) * 0.5 + 0.5
    base_color = _three_band(band, ICE_BAND_1, ICE_BAND_2, ICE_BAND_3)

    clouds = fbm(Vec3(pos.x * 4.0 + fragment.time * 0.15, pos.y * 8.0, pos.z * 4.0), 4)
    spot_intensity = _spot(pos, ICE_SPOT_CENTER, 0.2)

    cloud_influence = clouds * 0.15
    r, g, b = base_color.as_floats()
    final_color = Color.from_float(
        np.clip(r + cloud_influence, 0.0, 1.0),
        np.clip(g + cloud_influence, 0.0, 1.0),
        np.clip(b + cloud_influence * 0.8, 0.0, 1.0),
    )
    final_color = final_color.mix(ICE_SPOT, spot_intensity * 0.6)

    brightness = fragment.intensity * (0.6 + clouds * 0.2)

    r, g, b = final_color.as_floats()
    return Color.from_float(r * brightness, g * brightness, b * brightness)


# -------------------------------------------------------------
# Desert planet
# -------------------------------------------------------------

RUST_LIGHT = Color.from_float(0.8, 0.4, 0.2)
RUST_DARK = Color.from_float(0.5, 0.2, 0.1)
RUST_SAND = Color.from_float(0.9, 0.6, 0.3)
POLAR_ICE = Color.from_float(0.95, 0.95, 1.0)
ICE_CAP_THRESHOLD = np.float32(0.7)


def desert_planet(fragment: Fragment) -> Color:
    pos = fragment.position

    terrain = fbm(pos * 3.0, 5)
    base_color = Color.select(
        terrain < 0.3,
        RUST_DARK.mix(RUST_LIGHT, terrain * 3.3),
        Color.select(
            terrain < 0.7,
            RUST_LIGHT.mix(RUST_SAND, (terrain - 0.3) * 2.5),
            RUST_SAND.mix(RUST_DARK, (terrain - 0.7) * 3.3),
        ),
    )

    craters = turbulence(pos * 8.0, 3)
    crater_effect = np.maximum(craters - 0.7, 0.0) * 3.0

    polar = np.abs(pos.y)
    ice_amount = _where(
        polar > ICE_CAP_THRESHOLD,
        np.clip((polar - ICE_CAP_THRESHOLD) / (1.0 - ICE_CAP_THRESHOLD), 0.0, 1.0),
        0.0,
    )

    shade = 1.0 - crater_effect * 0.3
    r, g, b = base_color.as_floats()
    final_color = Color.from_float(
        np.clip(r * shade, 0.0, 1.0),
        np.clip(g * shade, 0.0, 1.0),
        np.clip(b * shade, 0.0, 1.0),
    )
    final_color = final_color.mix(POLAR_ICE, ice_amount * 0.8)

    brightness = fragment.intensity * (0.5 + terrain * 0.3)

    r, g, b = final_color.as_floats()
    return Color.from_float(r * brightness, g * brightness, b * brightness)


# -------------------------------------------------------------
# Volcanic planet
# -------------------------------------------------------------

SULFUR_YELLOW = Color.from_float(0.9, 0.8, 0.2)
SULFUR_ORANGE = Color.from_float(0.8, 0.5, 0.1)
SULFUR_WHITE = Color.from_float(0.95, 0.9, 0.7)
LAVA = Color.from_float(1.0, 0.3, 0.0)
HOTSPOT = Color.from_float(1.0, 0.5, 0.0)


def volcanic_planet(fragment: Fragment) -> Color:
    pos = fragment.position

    surface_variation = fbm(pos * 2.5, 4)
    base_color = Color.select(
        surface_variation < 0.4,
        SULFUR_YELLOW.mix(SULFUR_ORANGE, surface_variation * 2.5),
        SULFUR_ORANGE.mix(SULFUR_WHITE, (surface_variation - 0.4) * 1.67),
    )

    volcano_noise = turbulence(Vec3(pos.x * 6.0, pos.y * 6.0, pos.z * 6.0 + fragment.time * 0.5), 4)
    hotspot_intensity = _where(
        volcano_noise > 0.75, np.clip((volcano_noise - 0.75) * 4.0, 0.0, 1.0), 0.0
    )

    lava_flow = fbm(Vec3(pos.x * 10.0, pos.y * 10.0 + fragment.time * 0.3, pos.z * 10.0), 3)
    lava_amount = _where(lava_flow > 0.65, np.clip((lava_flow - 0.65) * 2.86, 0.0, 1.0), 0.0)

    edge_intensity = 1.0 - np.abs(fragment.normal.dot(VIEW_AXIS))
    atmosphere_glow = edge_intensity ** 2.0 * 0.3

    final_color = base_color.mix(LAVA, lava_amount * 0.7)
    final_color = final_color.mix(HOTSPOT, hotspot_intensity * 0.9)

    brightness = fragment.intensity * (0.7 + hotspot_intensity * 0.8 + atmosphere_glow)

    r, g, b = final_color.as_floats()
    return Color.from_float(
        r * brightness * (1.0 + hotspot_intensity * 0.5),
        g * brightness * (1.0 + hotspot_intensity * 0.3),
        b * brightness,
    )


SHADERS: Dict[str, Shader] = {
    "sun": sun,
    "rocky_planet": rocky_planet,
    "gas_giant": gas_giant,
    "ice_giant": ice_giant,
    "desert_planet": desert_planet,
    "volcanic_planet": volcanic_planet,
    "moon": moon,
}
