"""
Grid formations: centred rectangular lattices.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector, rotate_xy
from .base import ParametersMixin, require_tier


@dataclass(frozen=True)
class GridParameters(ParametersMixin):
    spacing: float = 2.0
    dimensions: Vector3 = field(default_factory=lambda: Vector3(3, 3, 1))
    offset: Vector3 = field(default_factory=Vector3)
    rotation: Vector3 = field(default_factory=Vector3)
    jitter: float = 0.1


TIER_PRESETS = {
    Tier.TIER_1: {"spacing": 2.0, "dimensions": (3, 3, 1), "jitter": 0.10},
    Tier.TIER_2: {"spacing": 2.5, "dimensions": (4, 4, 1), "jitter": 0.15},
    Tier.TIER_3: {"spacing": 3.0, "dimensions": (4, 4, 2), "jitter": 0.20},
    Tier.TIER_4: {"spacing": 3.5, "dimensions": (5, 5, 2), "jitter": 0.25},
    Tier.TIER_5: {"spacing": 4.0, "dimensions": (5, 5, 3), "jitter": 0.30},
    Tier.TIER_6: {"spacing": 4.5, "dimensions": (6, 6, 3), "jitter": 0.35},
}


def create_grid_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.GRID, tier)
    preset = TIER_PRESETS[tier]
    spacing = preset["spacing"]
    jitter = preset["jitter"]
    dx, dy, dz = preset["dimensions"]

    if role == Role.CORE:
        spacing *= 0.8
        jitter *= 0.8
    elif role == Role.ATTACK:
        spacing *= 1.2
        dz = max(1, dz - 1)
    elif role == Role.DEFENSE:
        jitter *= 0.7
        dx += 1
        dy += 1
    elif role == Role.CONTROL:
        jitter *= 0.6
        dz += 1
    elif role == Role.MOVEMENT:
        jitter *= 1.3
        spacing *= 1.1

    return FormationPattern(
        type=PatternType.GRID,
        parameters=GridParameters(
            spacing=spacing,
            dimensions=Vector3(dx, dy, dz),
            jitter=jitter,
        ),
        density=0.8,
        cohesion=0.7,
        flexibility=0.4,
    )


def _dims(params: GridParameters):
    d = params.dimensions
    return max(0, int(d.x)), max(0, int(d.y)), max(0, int(d.z))


def generate_grid_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """``x*y*z`` lattice points, rotated about Z by ``rotation.z``."""
    params: GridParameters = pattern.parameters
    random = create_seeded_random(seed)
    size_x, size_y, size_z = _dims(params)
    spacing = params.spacing
    angle = params.rotation.z

    positions: List[Vector3] = []
    for x in range(size_x):
        for y in range(size_y):
            for z in range(size_z):
                base_x = (x - size_x / 2) * spacing
                base_y = (y - size_y / 2) * spacing
                base_z = (z - size_z / 2) * spacing
                j = jitter_vector(random, params.jitter * spacing)
                px, py = rotate_xy(base_x, base_y, angle)
                positions.append(Vector3(px, py, base_z) + j + params.offset)
    return positions


def adaptive_dimensions(particle_count: int):
    """Near-cubic ``(x, y, z)`` box holding at least ``particle_count`` cells."""
    d = 1
    while d * d * d < particle_count:
        d += 1
    z = math.ceil(particle_count / (d * d))
    if z == 1:
        y = math.ceil(math.sqrt(particle_count))
        x = math.ceil(particle_count / y)
        return x, y, 1
    return d, d, z


def generate_adaptive_grid_formation(
    pattern: FormationPattern, seed: int, particle_count: int
) -> List[Vector3]:
    """Exactly ``particle_count`` lattice points, filled z, y, x in order."""
    if particle_count <= 0:
        return []
    params: GridParameters = pattern.parameters
    random = create_seeded_random(seed)
    size_x, size_y, size_z = adaptive_dimensions(particle_count)
    spacing = params.spacing

    positions: List[Vector3] = []
    for z in range(size_z):
        for y in range(size_y):
            for x in range(size_x):
                if len(positions) >= particle_count:
                    return positions
                base = Vector3(
                    (x - size_x / 2) * spacing,
                    (y - size_y / 2) * spacing,
                    (z - size_z / 2) * spacing,
                )
                positions.append(
                    base + jitter_vector(random, params.jitter * spacing) + params.offset
                )
    return positions
