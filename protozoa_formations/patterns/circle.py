"""
Circle formations: concentric rings in the X/Y plane.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, scale_int


@dataclass(frozen=True)
class CircleParameters(ParametersMixin):
    radius: float = 5.0
    count: int = 12
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1
    layers: int = 1
    layer_spacing: float = 1.0


TIER_PRESETS = {
    Tier.TIER_1: {"radius": 5.0, "count": 12, "jitter": 0.10, "layers": 1},
    Tier.TIER_2: {"radius": 6.0, "count": 16, "jitter": 0.15, "layers": 2},
    Tier.TIER_3: {"radius": 7.0, "count": 20, "jitter": 0.20, "layers": 2},
    Tier.TIER_4: {"radius": 8.0, "count": 24, "jitter": 0.25, "layers": 3},
    Tier.TIER_5: {"radius": 9.0, "count": 28, "jitter": 0.30, "layers": 3},
    Tier.TIER_6: {"radius": 10.0, "count": 32, "jitter": 0.35, "layers": 4},
}


def create_circle_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.CIRCLE, tier)
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
        type=PatternType.CIRCLE,
        parameters=CircleParameters(layer_spacing=1.0, **values),
        density=0.7,
        cohesion=0.8,
        flexibility=0.5,
    )


def _ring(random, count: int, radius: float, rotation: float, jitter: float,
          offset: Vector3) -> List[Vector3]:
    positions = []
    for i in range(count):
        angle = (i / count) * math.pi * 2 + rotation
        base = Vector3(math.cos(angle) * radius, math.sin(angle) * radius, 0.0)
        positions.append(base + jitter_vector(random, jitter * radius) + offset)
    return positions


def generate_circle_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """Rings of points; ring ``l`` holds ``floor(count * (1 + 0.5*l))`` points."""
    params: CircleParameters = pattern.parameters
    random = create_seeded_random(seed)
    positions: List[Vector3] = []
    for layer in range(max(0, params.layers)):
        layer_radius = params.radius + layer * params.layer_spacing
        layer_count = int(math.floor(params.count * (1 + layer * 0.5)))
        positions.extend(
            _ring(random, layer_count, layer_radius, params.rotation,
                  params.jitter, params.offset)
        )
    return positions


def generate_multi_layer_circle_formation(
    pattern: FormationPattern, seed: int, particle_count: int
) -> List[Vector3]:
    """
    Spread exactly ``particle_count`` points over as many rings as needed.

    Each ring takes up to one point per two units of circumference; the
    outermost ring absorbs whatever is left.
    """
    if particle_count <= 0:
        return []
    params: CircleParameters = pattern.parameters
    random = create_seeded_random(seed)
    layers = max(1, math.ceil(math.sqrt(particle_count / math.pi)))

    positions: List[Vector3] = []
    remaining = particle_count
    for layer in range(layers):
        if remaining <= 0:
            break
        layer_radius = params.radius * (1 + layer * 0.5)
        if layer == layers - 1:
            layer_count = remaining
        else:
            ideal = int(math.floor(2 * math.pi * layer_radius / 2))
            layer_count = min(remaining, max(1, ideal))
        positions.extend(
            _ring(random, layer_count, layer_radius, params.rotation,
                  params.jitter, params.offset)
        )
        remaining -= layer_count
    return positions
