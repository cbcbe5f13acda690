from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def as_f32(value) -> np.ndarray:
    """Coerce a scalar or array to float32; scalars come back as numpy scalars."""
    return np.asarray(value, dtype=np.float32)[()]


# -------------------------------------------------------------
# Vector type
# -------------------------------------------------------------


@dataclass(frozen=True)
class Vec3:
    """Immutable single-precision 3D vector.

    Components may also be equally shaped float32 arrays, in which case every
    operation applies element-wise (one vector per covered pixel).
    """

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", as_f32(self.x))
        object.__setattr__(self, "y", as_f32(self.y))
        object.__setattr__(self, "z", as_f32(self.z))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Vec3":
        arr = np.asarray(arr, dtype=np.float32)
        return cls(arr[..., 0], arr[..., 1], arr[..., 2])

    def to_array(self) -> np.ndarray:
        return np.stack(np.broadcast_arrays(self.x, self.y, self.z), axis=-1).astype(np.float32)

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar) -> "Vec3":
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar) -> "Vec3":
        return self.__mul__(scalar)

    def dot(self, other: "Vec3"):
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self):
        return np.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> "Vec3":
        # zero-length vectors normalize to zero instead of NaN
        length = self.length()
        ok = length > 0.0
        safe = np.where(ok, length, np.float32(1.0))
        zero = np.float32(0.0)
        return Vec3(
            np.where(ok, self.x / safe, zero),
            np.where(ok, self.y / safe, zero),
            np.where(ok, self.z / safe, zero),
        )

    def rotate_y(self, angle: float) -> "Vec3":
        angle = as_f32(angle)
        cos_a = np.cos(angle)
        sin_a = np.sin(angle)
        return Vec3(
            self.x * cos_a + self.z * sin_a,
            self.y,
            -self.x * sin_a + self.z * cos_a,
        )

    def rotate_x(self, angle: float) -> "Vec3":
        angle = as_f32(angle)
        cos_a = np.cos(angle)
        sin_a = np.sin(angle)
        return Vec3(
            self.x,
            self.y * cos_a - self.z * sin_a,
            self.y * sin_a + self.z * cos_a,
        )

    def compress(self, mask: np.ndarray) -> "Vec3":
        """Keep only the elements selected by ``mask`` (array-valued vectors)."""
        x, y, z = np.broadcast_arrays(self.x, self.y, self.z)
        return Vec3(x[mask], y[mask], z[mask])

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z


VIEW_AXIS = Vec3(0.0, 0.0, 1.0)
