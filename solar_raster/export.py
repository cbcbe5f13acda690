from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def check_frame(frame: np.ndarray) -> np.ndarray:
    frame = np.asarray(frame)
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(f"expected an (height, width, 3) frame, got shape {frame.shape}")
    return np.ascontiguousarray(frame, dtype=np.uint8)


def save_ppm(path: PathLike, frame: np.ndarray) -> Path:
    """Write ``frame`` as an ASCII (P3) PPM: one ``r g b`` line per pixel, row-major."""
    frame = check_frame(frame)
    height, width, _ = frame.shape
    out = Path(path)
    with out.open("w", encoding="ascii") as fh:
        fh.write(f"P3\n{width} {height}\n255\n")
        np.savetxt(fh, frame.reshape(-1, 3), fmt="%d")
    logger.debug("wrote %dx%d PPM to %s", width, height, out)
    return out


def load_ppm(path: PathLike) -> np.ndarray:
    tokens = Path(path).read_text(encoding="ascii").split()
    if not tokens or tokens[0] != "P3":
        raise ValueError(f"{path} is not an ASCII PPM file")
    width, height, max_value = (int(t) for t in tokens[1:4])
    if max_value != 255:
        raise ValueError(f"unsupported PPM max value {max_value}")
    data = np.array(tokens[4:], dtype=np.int64)
    if data.size != width * height * 3:
        raise ValueError(f"{path}: expected {width * height * 3} samples, got {data.size}")
    return data.reshape(height, width, 3).astype(np.uint8)
