"""Software rasterizer for procedurally shaded planets."""

from .color import Color
from .compositor import render_planet_with_moon, render_planet_with_rings, render_sphere
from .geometry import generate_ring, generate_sphere
from .noise import fbm, noise_3d, turbulence
from .raster import RenderSettings, RenderTarget, rasterize_translucent_triangle, rasterize_triangle
from .shaders import SHADERS, Fragment, ring
from .vecmath import Vec3
