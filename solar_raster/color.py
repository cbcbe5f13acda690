from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .vecmath import as_f32


def _as_u8(value) -> np.ndarray:
    return np.asarray(value, dtype=np.uint8)[()]


def _to_byte(value) -> np.ndarray:
    v = np.clip(np.nan_to_num(as_f32(value), nan=0.0), 0.0, 1.0) * np.float32(255.0)
    return np.asarray(v).astype(np.uint8)[()]


@dataclass(frozen=True)
class Color:
    """8-bit RGB colour. Channels may be uint8 arrays for batched shading."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", _as_u8(self.r))
        object.__setattr__(self, "g", _as_u8(self.g))
        object.__setattr__(self, "b", _as_u8(self.b))

    @classmethod
    def from_float(cls, r, g, b) -> "Color":
        return cls(_to_byte(r), _to_byte(g), _to_byte(b))

    @classmethod
    def from_u32(cls, packed) -> "Color":
        packed = np.asarray(packed, dtype=np.uint32)
        return cls(
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
        )

    @staticmethod
    def select(condition, a: "Color", b: "Color") -> "Color":
        """Element-wise ``a if condition else b``."""
        return Color(
            np.where(condition, a.r, b.r),
            np.where(condition, a.g, b.g),
            np.where(condition, a.b, b.b),
        )

    def mix(self, other: "Color", t) -> "Color":
        t = np.clip(as_f32(t), 0.0, 1.0)
        inv = np.float32(1.0) - t

        def channel(a, b):
            value = np.asarray(a, dtype=np.float32) * inv + np.asarray(b, dtype=np.float32) * t
            return np.asarray(value).astype(np.uint8)

        return Color(channel(self.r, other.r), channel(self.g, other.g), channel(self.b, other.b))

    def as_floats(self) -> tuple:
        scale = np.float32(255.0)
        return (
            np.asarray(self.r, dtype=np.float32)[()] / scale,
            np.asarray(self.g, dtype=np.float32)[()] / scale,
            np.asarray(self.b, dtype=np.float32)[()] / scale,
        )

    def to_u32(self) -> np.ndarray:
        r = np.asarray(self.r, dtype=np.uint32)
        g = np.asarray(self.g, dtype=np.uint32)
        b = np.asarray(self.b, dtype=np.uint32)
        return ((r << 16) | (g << 8) | b)[()]

    def as_tuple(self) -> tuple[int, int, int]:
        return int(self.r), int(self.g), int(self.b)


BLACK = Color(0, 0, 0)
