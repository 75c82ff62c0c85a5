"""
Cluster formations: several loose spherical clumps scattered around a centre.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random, derive_seed
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, signed


@dataclass(frozen=True)
class ClusterParameters(ParametersMixin):
    density: float = 0.5
    radius: float = 8.0
    clusters: int = 3
    cluster_size: float = 3.0
    offset: Vector3 = field(default_factory=Vector3)
    jitter: float = 0.2


TIER_PRESETS = {
    Tier.TIER_2: {"density": 0.5, "radius": 8.0, "clusters": 3, "cluster_size": 3.0, "jitter": 0.20},
    Tier.TIER_3: {"density": 0.6, "radius": 10.0, "clusters": 4, "cluster_size": 3.5, "jitter": 0.25},
    Tier.TIER_4: {"density": 0.7, "radius": 12.0, "clusters": 5, "cluster_size": 4.0, "jitter": 0.30},
    Tier.TIER_5: {"density": 0.8, "radius": 14.0, "clusters": 6, "cluster_size": 4.5, "jitter": 0.35},
    Tier.TIER_6: {"density": 0.9, "radius": 16.0, "clusters": 7, "cluster_size": 5.0, "jitter": 0.40},
}


def create_cluster_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.CLUSTER, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["radius"] *= 0.8
        values["cluster_size"] *= 0.9
        values["jitter"] *= 0.8
    elif role == Role.ATTACK:
        values["radius"] *= 1.2
        values["clusters"] = max(2, values["clusters"] - 1)
        values["cluster_size"] *= 1.2
    elif role == Role.DEFENSE:
        values["clusters"] += 1
        values["cluster_size"] *= 0.9
    elif role == Role.CONTROL:
        values["jitter"] *= 0.7
        values["density"] *= 1.1
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.3
        values["radius"] *= 1.1

    return FormationPattern(
        type=PatternType.CLUSTER,
        parameters=ClusterParameters(**values),
        density=0.7,
        cohesion=0.8,
        flexibility=0.6,
    )


def _scatter(random, center: Vector3, count: int, size: float, jitter: float,
             offset: Vector3) -> List[Vector3]:
    positions = []
    for _ in range(count):
        a1 = random() * math.pi * 2
        a2 = random() * math.pi * 2
        distance = random() * size
        point = center + Vector3(
            math.sin(a1) * math.cos(a2) * distance,
            math.sin(a1) * math.sin(a2) * distance,
            math.cos(a1) * distance,
        )
        positions.append(point + jitter_vector(random, jitter * size) + offset)
    return positions


def generate_cluster_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """
    ``floor(density*20) * clusters`` points shared unevenly among clusters.

    Each cluster but the last takes 80-120% of an even share of what is
    left; the last takes the remainder, so the total is exact.
    """
    params: ClusterParameters = pattern.parameters
    if params.clusters <= 0:
        return []
    random = create_seeded_random(seed)

    centers = []
    for _ in range(params.clusters):
        angle = random() * math.pi * 2
        distance = random() * params.radius * 0.8
        centers.append(Vector3(
            math.cos(angle) * distance,
            math.sin(angle) * distance,
            signed(random) * params.radius * 0.5,
        ))

    remaining = int(math.floor(params.density * 20)) * params.clusters
    counts = []
    for i in range(params.clusters - 1):
        share = int(math.floor(remaining / (params.clusters - i) * (0.8 + random() * 0.4)))
        counts.append(share)
        remaining -= share
    counts.append(remaining)

    positions: List[Vector3] = []
    for center, count in zip(centers, counts):
        positions.extend(
            _scatter(random, center, count, params.cluster_size, params.jitter,
                     params.offset)
        )
    return positions


def generate_hierarchical_cluster_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    """Tighter, denser clusters plus a central clump of ``floor(density*10)`` points."""
    params: ClusterParameters = pattern.parameters
    positions = generate_cluster_formation(
        pattern.with_parameters(jitter=params.jitter * 0.7, density=params.density * 1.2),
        seed,
    )

    random = create_seeded_random(derive_seed(seed, "central"))
    positions.extend(
        _scatter(
            random,
            Vector3(),
            int(math.floor(params.density * 10)),
            params.cluster_size * 0.8,
            params.jitter * 0.5,
            params.offset,
        )
    )
    return positions
