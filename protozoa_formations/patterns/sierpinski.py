"""
Sierpinski formations: recursive triangle, tetrahedron and carpet point sets.

Point counts are fixed by the recursion depth k: a triangle yields 3*3**k
points, a tetrahedron 4*4**k, a carpet 8**k and the 3D carpet 20**k.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector, rotate_xz
from .base import ParametersMixin, require_tier


class SierpinskiShape(Enum):
    TRIANGLE = "triangle"
    TETRAHEDRON = "tetrahedron"
    CARPET = "carpet"


@dataclass(frozen=True)
class SierpinskiParameters(ParametersMixin):
    size: float = 10.0
    iterations: int = 3
    shape: SierpinskiShape = SierpinskiShape.TRIANGLE
    scale: float = 0.5
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1


TIER_PRESETS = {
    Tier.TIER_5: {"size": 10.0, "iterations": 3, "shape": SierpinskiShape.TRIANGLE,
                  "scale": 0.5, "jitter": 0.10},
    Tier.TIER_6: {"size": 12.0, "iterations": 4, "shape": SierpinskiShape.TETRAHEDRON,
                  "scale": 0.5, "jitter": 0.05},
}


def create_sierpinski_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.SIERPINSKI, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["jitter"] *= 0.5
    elif role == Role.ATTACK:
        values["shape"] = SierpinskiShape.TETRAHEDRON
        values["size"] *= 1.2
    elif role == Role.DEFENSE:
        values["shape"] = SierpinskiShape.CARPET
        values["iterations"] = max(2, values["iterations"] - 1)
    elif role == Role.CONTROL:
        values["jitter"] *= 0.7
        values["iterations"] = min(5, values["iterations"] + 1)
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.5

    return FormationPattern(
        type=PatternType.SIERPINSKI,
        parameters=SierpinskiParameters(**values),
        density=0.7,
        cohesion=0.9,
        flexibility=0.3,
    )


def _midpoint(a: Vector3, b: Vector3) -> Vector3:
    return Vector3((a.x + b.x) / 2, (a.y + b.y) / 2, (a.z + b.z) / 2)


def _rotated(vertices: List[Vector3], angle: float) -> List[Vector3]:
    rotated = []
    for v in vertices:
        x, z = rotate_xz(v.x, v.z, angle)
        rotated.append(Vector3(x, v.y, z))
    return rotated


def _triangle(params: SierpinskiParameters, random: Callable[[], float]) -> List[Vector3]:
    size = params.size
    height = size * math.sqrt(3) / 2
    corners = _rotated([
        Vector3(-size / 2, -height / 3, 0.0),
        Vector3(size / 2, -height / 3, 0.0),
        Vector3(0.0, height * 2 / 3, 0.0),
    ], params.rotation)
    positions: List[Vector3] = []

    def subdivide(p1, p2, p3, depth):
        if depth <= 0:
            for p in (p1, p2, p3):
                positions.append(p + jitter_vector(random, params.jitter * size) + params.offset)
            return
        m12, m23, m31 = _midpoint(p1, p2), _midpoint(p2, p3), _midpoint(p3, p1)
        subdivide(p1, m12, m31, depth - 1)
        subdivide(m12, p2, m23, depth - 1)
        subdivide(m31, m23, p3, depth - 1)

    subdivide(*corners, params.iterations)
    return positions


def _tetrahedron(params: SierpinskiParameters, random: Callable[[], float]) -> List[Vector3]:
    size = params.size
    base_z = -size / (2 * math.sqrt(6))
    corners = _rotated([
        Vector3(0.0, 0.0, size * math.sqrt(2 / 3)),
        Vector3(-size / 2, -size / (2 * math.sqrt(3)), base_z),
        Vector3(size / 2, -size / (2 * math.sqrt(3)), base_z),
        Vector3(0.0, size / math.sqrt(3), base_z),
    ], params.rotation)
    positions: List[Vector3] = []

    def subdivide(p1, p2, p3, p4, depth):
        if depth <= 0:
            for p in (p1, p2, p3, p4):
                positions.append(p + jitter_vector(random, params.jitter * size) + params.offset)
            return
        m12, m23, m31 = _midpoint(p1, p2), _midpoint(p2, p3), _midpoint(p3, p1)
        m14, m24, m34 = _midpoint(p1, p4), _midpoint(p2, p4), _midpoint(p3, p4)
        subdivide(p1, m12, m31, m14, depth - 1)
        subdivide(m12, p2, m23, m24, depth - 1)
        subdivide(m31, m23, p3, m34, depth - 1)
        subdivide(m14, m24, m34, p4, depth - 1)

    subdivide(*corners, params.iterations)
    return positions


def _carpet(params: SierpinskiParameters, random: Callable[[], float]) -> List[Vector3]:
    positions: List[Vector3] = []

    def subdivide(x, y, size, depth):
        if depth <= 0:
            j = jitter_vector(random, params.jitter * size)
            rx, rz = rotate_xz(x, 0.0, params.rotation)
            positions.append(Vector3(rx, y, rz) + j + params.offset)
            return
        step = size / 3
        for i in range(3):
            for k in range(3):
                if i == 1 and k == 1:
                    continue
                subdivide(
                    x - size / 2 + step / 2 + i * step,
                    y - size / 2 + step / 2 + k * step,
                    step,
                    depth - 1,
                )

    subdivide(0.0, 0.0, params.size, params.iterations)
    return positions


_SHAPES = {
    SierpinskiShape.TRIANGLE: _triangle,
    SierpinskiShape.TETRAHEDRON: _tetrahedron,
    SierpinskiShape.CARPET: _carpet,
}


def generate_sierpinski_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    params: SierpinskiParameters = pattern.parameters
    random = create_seeded_random(seed)
    return _SHAPES[params.shape](params, random)


def generate_3d_sierpinski_carpet(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """Menger-sponge points: 20 of the 27 sub-cubes are kept at each level."""
    params: SierpinskiParameters = pattern.parameters
    random = create_seeded_random(seed)
    positions: List[Vector3] = []

    def subdivide(center: Vector3, size: float, depth: int):
        if depth <= 0:
            positions.append(center + jitter_vector(random, params.jitter * size) + params.offset)
            return
        step = size / 3
        for i in range(3):
            for j in range(3):
                for k in range(3):
                    if (i == 1 and j == 1) or (i == 1 and k == 1) or (j == 1 and k == 1):
                        continue
                    corner = -size / 2 + step / 2
                    subdivide(
                        center + Vector3(corner + i * step, corner + j * step, corner + k * step),
                        step,
                        depth - 1,
                    )

    subdivide(Vector3(), params.size, params.iterations)
    return positions
