"""
Swarm formations: a random cloud relaxed by a few boids-style passes.

The relaxation is vectorized with numpy; each pass computes every force
from the same snapshot of positions before any particle moves.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3
from .base import ParametersMixin, require_tier


@dataclass(frozen=True)
class SwarmParameters(ParametersMixin):
    volume: float = 10.0
    density: float = 0.6
    cohesion: float = 0.5
    separation: float = 1.0
    alignment: float = 0.5
    offset: Vector3 = field(default_factory=Vector3)
    jitter: float = 0.2
    iterations: int = 3


TIER_PRESETS = {
    Tier.TIER_4: {"volume": 10.0, "density": 0.6, "cohesion": 0.5, "separation": 1.0,
                  "alignment": 0.5, "jitter": 0.20, "iterations": 3},
    Tier.TIER_5: {"volume": 12.0, "density": 0.7, "cohesion": 0.6, "separation": 1.2,
                  "alignment": 0.6, "jitter": 0.25, "iterations": 4},
    Tier.TIER_6: {"volume": 15.0, "density": 0.8, "cohesion": 0.7, "separation": 1.5,
                  "alignment": 0.7, "jitter": 0.30, "iterations": 5},
}


def create_swarm_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.SWARM, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["volume"] *= 0.8
        values["cohesion"] *= 1.2
        values["separation"] *= 0.8
    elif role == Role.ATTACK:
        values["volume"] *= 1.2
        values["alignment"] *= 1.2
        values["jitter"] *= 1.2
    elif role == Role.DEFENSE:
        values["cohesion"] *= 1.2
        values["separation"] *= 1.2
        values["jitter"] *= 0.8
    elif role == Role.CONTROL:
        values["cohesion"] *= 1.1
        values["alignment"] *= 1.1
        values["separation"] *= 1.1
    elif role == Role.MOVEMENT:
        values["volume"] *= 1.3
        values["alignment"] *= 1.3
        values["jitter"] *= 1.3

    return FormationPattern(
        type=PatternType.SWARM,
        parameters=SwarmParameters(**values),
        density=0.7,
        cohesion=0.8,
        flexibility=0.9,
    )


def _draw(random, rows: int) -> np.ndarray:
    """``rows`` x 3 signed draws taken row by row from the stream."""
    values = [random() * 2 - 1 for _ in range(rows * 3)]
    return np.array(values, dtype=np.float64).reshape(rows, 3)


def _relax(positions: np.ndarray, params: SwarmParameters, random) -> np.ndarray:
    count = len(positions)
    # diff[i, j] points from particle i to particle j
    diff = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
    neighbour_radius = params.volume / 4
    neighbours = dist_sq < neighbour_radius * neighbour_radius
    np.fill_diagonal(neighbours, False)

    neighbour_count = neighbours.sum(axis=1)
    cohesion = np.zeros_like(positions)
    has_neighbours = neighbour_count > 0
    if has_neighbours.any():
        centroid = (neighbours.astype(np.float64) @ positions)[has_neighbours]
        centroid /= neighbour_count[has_neighbours, np.newaxis]
        cohesion[has_neighbours] = (centroid - positions[has_neighbours]) * params.cohesion

    separation = np.zeros_like(positions)
    if params.separation > 0:
        dist = np.sqrt(dist_sq)
        close = neighbours & (dist < params.separation) & (dist > 0)
        safe = np.where(close, dist, 1.0)
        weight = np.where(close, (1 - dist / params.separation) / safe, 0.0)
        separation = -np.einsum("ij,ijk->ik", weight, diff)

    jitter = _draw(random, count) * params.jitter
    moved = positions + cohesion + separation * 2 + jitter

    max_dist = params.volume / 2
    radial = np.linalg.norm(moved, axis=1)
    outside = radial > max_dist
    if outside.any():
        moved[outside] *= (max_dist / radial[outside])[:, np.newaxis]
    return moved


def generate_swarm_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """``floor(volume*density*2)`` points after ``iterations`` relaxation passes."""
    params: SwarmParameters = pattern.parameters
    count = int(math.floor(params.volume * params.density * 2))
    if count <= 0:
        return []
    random = create_seeded_random(seed)

    positions = _draw(random, count) * (params.volume / 2)
    for _ in range(max(0, params.iterations)):
        positions = _relax(positions, params, random)

    offset = params.offset
    return [Vector3(float(x), float(y), float(z)) + offset for x, y, z in positions]


def generate_directed_swarm_formation(
    pattern: FormationPattern, seed: int, direction: Optional[Vector3] = None
) -> List[Vector3]:
    """A swarm shifted ``volume*0.2`` along ``direction`` (default +Y)."""
    params: SwarmParameters = pattern.parameters
    if direction is None:
        direction = Vector3(0.0, 1.0, 0.0)
    positions = generate_swarm_formation(
        pattern.with_parameters(alignment=params.alignment * 1.5), seed
    )
    shift = direction.normalized() * (params.volume * 0.2)
    return [p + shift for p in positions]
