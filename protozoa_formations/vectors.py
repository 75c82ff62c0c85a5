"""
Vector math for formation generation.

Vector3 is the point type produced by every generator; the helpers below
are shared by the generators and the transition engine.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

# ============================================================================
# Vector3
# ============================================================================


@dataclass(frozen=True)
class Vector3:
    """Immutable floating point triple."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vector3()
        return Vector3(self.x / length, self.y / length, self.z / length)

    def lerp(self, other: "Vector3", t: float) -> "Vector3":
        """Per-axis linear interpolation toward ``other``."""
        return Vector3(
            lerp(self.x, other.x, t),
            lerp(self.y, other.y, t),
            lerp(self.z, other.z, t),
        )

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "Vector3":
        return cls(
            float(data.get("x", 0.0)),
            float(data.get("y", 0.0)),
            float(data.get("z", 0.0)),
        )


# ============================================================================
# Scalar helpers
# ============================================================================


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between a and b by factor t."""
    return a + (b - a) * t


def clamp(value: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Smooth interpolation using cubic Hermite curve."""
    if edge1 == edge0:
        return 1.0 if x >= edge1 else 0.0
    t = clamp((x - edge0) / (edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)


def blend(a: Vector3, b: Vector3, factor: float) -> Vector3:
    """Weighted mix ``a*(1-f) + b*f``; exact at f=0 and f=1."""
    inverse = 1 - factor
    return Vector3(
        a.x * inverse + b.x * factor,
        a.y * inverse + b.y * factor,
        a.z * inverse + b.z * factor,
    )


# ============================================================================
# Rotation / jitter
# ============================================================================


def rotate_xy(x: float, y: float, angle: float) -> Tuple[float, float]:
    """Rotate a point in the X/Y plane (around the Z axis)."""
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def rotate_xz(x: float, z: float, angle: float) -> Tuple[float, float]:
    """Rotate a point in the X/Z plane (around the Y axis)."""
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return x * cos_a - z * sin_a, x * sin_a + z * cos_a


def jitter_vector(random: Callable[[], float], amount: float) -> Vector3:
    """Independent per-axis perturbation in [-amount, amount), drawn x, y, z."""
    jx = (random() * 2 - 1) * amount
    jy = (random() * 2 - 1) * amount
    jz = (random() * 2 - 1) * amount
    return Vector3(jx, jy, jz)
