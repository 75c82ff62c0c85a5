"""
Spiral formations: Archimedean spirals in the X/Y plane, plus double-armed
and climbing 3D variants.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, scale_int, signed


@dataclass(frozen=True)
class SpiralParameters(ParametersMixin):
    radius: float = 3.0
    growth: float = 0.2
    turns: float = 2.0
    particles: int = 24
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1


TIER_PRESETS = {
    Tier.TIER_1: {"radius": 3.0, "growth": 0.20, "turns": 2, "particles": 24, "jitter": 0.10},
    Tier.TIER_2: {"radius": 3.5, "growth": 0.25, "turns": 3, "particles": 36, "jitter": 0.15},
    Tier.TIER_3: {"radius": 4.0, "growth": 0.30, "turns": 4, "particles": 48, "jitter": 0.20},
    Tier.TIER_4: {"radius": 4.5, "growth": 0.35, "turns": 5, "particles": 60, "jitter": 0.25},
    Tier.TIER_5: {"radius": 5.0, "growth": 0.40, "turns": 6, "particles": 72, "jitter": 0.30},
    Tier.TIER_6: {"radius": 5.5, "growth": 0.45, "turns": 7, "particles": 84, "jitter": 0.35},
}


def create_spiral_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.SPIRAL, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["radius"] *= 0.8
        values["growth"] *= 0.9
        values["jitter"] *= 0.8
    elif role == Role.ATTACK:
        values["growth"] *= 1.2
        values["turns"] *= 0.8
        values["jitter"] *= 1.2
    elif role == Role.DEFENSE:
        values["jitter"] *= 0.7
        values["particles"] = scale_int(values["particles"], 1.2)
    elif role == Role.CONTROL:
        values["jitter"] *= 0.6
        values["turns"] *= 1.2
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.3
        values["growth"] *= 1.1

    values["turns"] = float(values["turns"])
    return FormationPattern(
        type=PatternType.SPIRAL,
        parameters=SpiralParameters(**values),
        density=0.6,
        cohesion=0.7,
        flexibility=0.8,
    )


def _arm(random, params: SpiralParameters, count: int, steps: int,
         phase: float) -> List[Vector3]:
    positions = []
    for i in range(count):
        t = (i / steps) * params.turns * math.pi * 2 + params.rotation + phase
        r = params.radius + params.growth * t
        base = Vector3(math.cos(t) * r, math.sin(t) * r, 0.0)
        positions.append(base + jitter_vector(random, params.jitter * r) + params.offset)
    return positions


def generate_spiral_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    params: SpiralParameters = pattern.parameters
    if params.particles <= 0:
        return []
    random = create_seeded_random(seed)
    return _arm(random, params, params.particles, params.particles, 0.0)


def generate_double_spiral_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    """Two arms half a turn apart sharing the particle budget."""
    params: SpiralParameters = pattern.parameters
    if params.particles <= 0:
        return []
    random = create_seeded_random(seed)
    per_arm = params.particles // 2
    if per_arm == 0:
        return _arm(random, params, params.particles, params.particles, 0.0)
    positions = _arm(random, params, per_arm, per_arm, 0.0)
    positions.extend(_arm(random, params, params.particles - per_arm, per_arm, math.pi))
    return positions


def generate_3d_spiral_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """A spiral that climbs two units of Z per turn; Z jitter scales with height."""
    params: SpiralParameters = pattern.parameters
    count = params.particles
    if count <= 0:
        return []
    random = create_seeded_random(seed)
    positions: List[Vector3] = []
    for i in range(count):
        t = (i / count) * params.turns * math.pi * 2 + params.rotation
        r = params.radius + params.growth * t
        height = (i / count) * params.turns * 2
        jitter = params.jitter * r
        x = math.cos(t) * r + signed(random) * jitter
        y = math.sin(t) * r + signed(random) * jitter
        z = height + signed(random) * params.jitter * height
        positions.append(Vector3(x, y, z) + params.offset)
    return positions
