"""Command-line entry point rendering the reference solar-system scenes."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from .compositor import render_planet_with_moon, render_planet_with_rings, render_sphere
from .export import save_ppm
from .geometry import generate_ring, generate_sphere
from .raster import RenderSettings
from .shaders import SHADERS
from .vecmath import Vec3

logger = logging.getLogger(__name__)

SPHERE_SEGMENTS = 50
MOON_SEGMENTS = 30


@dataclass(frozen=True)
class Scene:
    name: str
    shader: str
    time: float
    rotation: float
    kind: str = "sphere"
    moon_orbit_angle: float = 0.0


SCENES: Dict[str, Scene] = {
    scene.name: scene
    for scene in (
        Scene("sun", "sun", 2.5, 0.8),
        Scene("rocky_planet_with_moon", "rocky_planet", 5.0, 1.2, kind="moon", moon_orbit_angle=1.5),
        Scene("gas_giant_with_rings", "gas_giant", 3.5, 0.5, kind="rings"),
        Scene("ice_giant", "ice_giant", 4.0, 0.3),
        Scene("desert_planet", "desert_planet", 1.5, 1.8),
        Scene("volcanic_planet", "volcanic_planet", 3.0, 0.7),
    )
}


@dataclass
class Meshes:
    sphere: np.ndarray
    moon: np.ndarray
    ring: np.ndarray

    @classmethod
    def build(cls) -> "Meshes":
        return cls(
            sphere=generate_sphere(1.0, SPHERE_SEGMENTS),
            moon=generate_sphere(0.3, MOON_SEGMENTS),
            ring=generate_ring(1.3, 2.0, 100),
        )


def render_scene(scene: Scene, meshes: Meshes, settings: RenderSettings, ring_tilt: float = 0.0) -> np.ndarray:
    shader = SHADERS[scene.shader]
    if scene.kind == "moon":
        return render_planet_with_moon(
            meshes.sphere,
            meshes.moon,
            SPHERE_SEGMENTS,
            MOON_SEGMENTS,
            shader,
            scene.time,
            scene.rotation,
            scene.moon_orbit_angle,
            settings,
        )
    if scene.kind == "rings":
        return render_planet_with_rings(
            meshes.sphere,
            meshes.ring,
            SPHERE_SEGMENTS,
            shader,
            scene.time,
            scene.rotation,
            settings,
            ring_tilt=ring_tilt,
        )
    if scene.kind == "sphere":
        return render_sphere(meshes.sphere, SPHERE_SEGMENTS, shader, scene.time, scene.rotation, settings)
    raise ValueError(f"unknown scene kind {scene.kind!r}")


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Software-rasterised procedural planets")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("screenshots"),
        help="Directory the images are written to (default: screenshots)",
    )
    parser.add_argument("--width", type=int, default=800, help="Image width in pixels (default: 800)")
    parser.add_argument("--height", type=int, default=800, help="Image height in pixels (default: 800)")
    parser.add_argument(
        "--light",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(0.5, 0.5, 1.0),
        help="Directional light vector components",
    )
    parser.add_argument(
        "--scene",
        action="append",
        choices=sorted(SCENES),
        help="Scene to render; repeat for several (default: all)",
    )
    parser.add_argument(
        "--format",
        choices=["ppm", "png"],
        default="ppm",
        help="Output image format (default: ppm)",
    )
    parser.add_argument(
        "--ring-tilt",
        type=float,
        default=0.0,
        help="Tilt of the ring plane in radians (default: 0, edge-on)",
    )
    parser.add_argument("--preview", action="store_true", help="Open a window showing the rendered frames")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = RenderSettings(args.width, args.height, light_direction=Vec3(*args.light))
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.format == "png":
        from .preview import save_image as save
    else:
        save = save_ppm

    names: List[str] = args.scene or list(SCENES)
    meshes = Meshes.build()
    frames: Dict[str, np.ndarray] = {}

    try:
        args.output_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            start = time.perf_counter()
            frame = render_scene(SCENES[name], meshes, settings, ring_tilt=args.ring_tilt)
            path = save(args.output_dir / f"{name}.{args.format}", frame)
            logger.info("rendered %s in %.1fs -> %s", name, time.perf_counter() - start, path)
            frames[name] = frame
    except OSError as exc:
        logger.error("could not write output: %s", exc)
        return 1

    logger.info("%d scene(s) rendered", len(frames))

    if args.preview:
        from .preview import show_frames

        return show_frames(frames)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
