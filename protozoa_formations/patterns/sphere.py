"""
Sphere formations: Fibonacci-sphere shells.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, scale_int

GOLDEN_TURN = math.pi * (1 + math.sqrt(5))


@dataclass(frozen=True)
class SphereParameters(ParametersMixin):
    radius: float = 5.0
    count: int = 32
    offset: Vector3 = field(default_factory=Vector3)
    jitter: float = 0.1
    layers: int = 1
    layer_spacing: float = 1.0


TIER_PRESETS = {
    Tier.TIER_1: {"radius": 5.0, "count": 32, "jitter": 0.10, "layers": 1},
    Tier.TIER_2: {"radius": 6.0, "count": 48, "jitter": 0.15, "layers": 1},
    Tier.TIER_3: {"radius": 7.0, "count": 64, "jitter": 0.20, "layers": 2},
    Tier.TIER_4: {"radius": 8.0, "count": 80, "jitter": 0.25, "layers": 2},
    Tier.TIER_5: {"radius": 9.0, "count": 96, "jitter": 0.30, "layers": 3},
    Tier.TIER_6: {"radius": 10.0, "count": 128, "jitter": 0.35, "layers": 3},
}


def create_sphere_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.SPHERE, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["radius"] *= 0.8
        values["jitter"] *= 0.8
    elif role == Role.ATTACK:
        values["radius"] *= 1.2
        values["count"] = scale_int(values["count"], 0.8)
    elif role == Role.DEFENSE:
        values["count"] = scale_int(values["count"], 1.2)
    elif role == Role.CONTROL:
        values["jitter"] *= 0.7
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.3

    return FormationPattern(
        type=PatternType.SPHERE,
        parameters=SphereParameters(layer_spacing=1.0, **values),
        density=0.7,
        cohesion=0.8,
        flexibility=0.5,
    )


def _shell(random, count: int, radius: float, jitter: float,
           offset: Vector3) -> List[Vector3]:
    positions = []
    for i in range(count):
        phi = math.acos(1 - 2 * (i + 0.5) / count)
        theta = GOLDEN_TURN * (i + 0.5)
        base = Vector3(
            math.sin(phi) * math.cos(theta) * radius,
            math.sin(phi) * math.sin(theta) * radius,
            math.cos(phi) * radius,
        )
        positions.append(base + jitter_vector(random, jitter * radius) + offset)
    return positions


def generate_sphere_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    params: SphereParameters = pattern.parameters
    if params.layers <= 0:
        return []
    random = create_seeded_random(seed)
    per_layer = params.count // params.layers
    positions: List[Vector3] = []
    for layer in range(params.layers):
        layer_radius = params.radius + layer * params.layer_spacing
        positions.extend(
            _shell(random, per_layer, layer_radius, params.jitter, params.offset)
        )
    return positions


def generate_multi_layer_sphere_formation(
    pattern: FormationPattern, seed: int, particle_count: int
) -> List[Vector3]:
    """
    Spread exactly ``particle_count`` points over up to five nested shells,
    one point per ten units of shell area, the outermost shell taking the rest.
    """
    if particle_count <= 0:
        return []
    params: SphereParameters = pattern.parameters
    random = create_seeded_random(seed)
    layers = max(1, min(5, math.ceil((particle_count / 10) ** (1 / 3))))

    positions: List[Vector3] = []
    remaining = particle_count
    for layer in range(layers):
        if remaining <= 0:
            break
        layer_radius = params.radius * (1 + layer * 0.5)
        if layer == layers - 1:
            layer_count = remaining
        else:
            ideal = int(math.floor(4 * math.pi * layer_radius * layer_radius / 10))
            layer_count = min(remaining, max(1, ideal))
        positions.extend(
            _shell(random, layer_count, layer_radius, params.jitter, params.offset)
        )
        remaining -= layer_count
    return positions
