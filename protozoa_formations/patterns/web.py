"""
Web formations: concentric rings of spoke points plus random cross-links.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, signed


@dataclass(frozen=True)
class WebParameters(ParametersMixin):
    radius: float = 10.0
    density: float = 0.5
    layers: int = 3
    spokes: int = 8
    irregularity: float = 0.3
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1


TIER_PRESETS = {
    Tier.TIER_3: {"radius": 10.0, "density": 0.5, "layers": 3, "spokes": 8,
                  "irregularity": 0.3, "jitter": 0.10},
    Tier.TIER_4: {"radius": 12.0, "density": 0.6, "layers": 4, "spokes": 10,
                  "irregularity": 0.4, "jitter": 0.15},
    Tier.TIER_5: {"radius": 15.0, "density": 0.7, "layers": 5, "spokes": 12,
                  "irregularity": 0.5, "jitter": 0.20},
    Tier.TIER_6: {"radius": 18.0, "density": 0.8, "layers": 6, "spokes": 16,
                  "irregularity": 0.6, "jitter": 0.25},
}


def create_web_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.WEB, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["irregularity"] *= 0.8
        values["jitter"] *= 0.8
    elif role == Role.ATTACK:
        values["spokes"] = max(6, values["spokes"] - 2)
        values["irregularity"] *= 1.2
    elif role == Role.DEFENSE:
        values["density"] *= 1.2
        values["layers"] += 1
    elif role == Role.CONTROL:
        values["jitter"] *= 0.7
        values["spokes"] += 2
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.3
        values["irregularity"] *= 1.3

    return FormationPattern(
        type=PatternType.WEB,
        parameters=WebParameters(**values),
        density=0.7,
        cohesion=0.8,
        flexibility=0.6,
    )


def generate_web_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """
    ``layers * spokes`` ring points, then up to
    ``floor(density * spokes * layers * 0.5)`` cross-link points.

    A cross-link is dropped when both picks land on the same ring point.
    """
    params: WebParameters = pattern.parameters
    if params.layers <= 0 or params.spokes <= 0:
        return []
    random = create_seeded_random(seed)
    positions: List[Vector3] = []

    for layer in range(1, params.layers + 1):
        layer_radius = (layer / params.layers) * params.radius
        for spoke in range(params.spokes):
            base_angle = (spoke / params.spokes) * math.pi * 2
            variation = random() * params.irregularity * (math.pi / params.spokes)
            angle = base_angle + variation + params.rotation
            z = signed(random) * params.radius * 0.2 * params.irregularity
            point = Vector3(math.cos(angle) * layer_radius, math.sin(angle) * layer_radius, z)
            positions.append(
                point + jitter_vector(random, params.jitter * layer_radius) + params.offset
            )

    links = int(math.floor(params.density * params.spokes * params.layers * 0.5))
    for _ in range(links):
        idx1 = int(random() * len(positions))
        idx2 = int(random() * len(positions))
        if idx1 == idx2:
            continue
        t = random()
        point = positions[idx1].lerp(positions[idx2], t)
        positions.append(point + jitter_vector(random, params.jitter * params.radius * 0.2))
    return positions


def generate_complex_web_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    """One more ring, four more spokes and denser cross-linking."""
    params: WebParameters = pattern.parameters
    return generate_web_formation(
        pattern.with_parameters(
            layers=params.layers + 1,
            spokes=params.spokes + 4,
            density=min(1.0, params.density * 1.3),
        ),
        seed,
    )
