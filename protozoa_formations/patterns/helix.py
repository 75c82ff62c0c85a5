"""
Helix formations: one or more phase-offset strands climbing the Z axis.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3
from .base import ParametersMixin, require_tier, scale_int, signed


@dataclass(frozen=True)
class HelixParameters(ParametersMixin):
    radius: float = 3.0
    height: float = 10.0
    turns: float = 3.0
    particles: int = 36
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1
    strands: int = 1


TIER_PRESETS = {
    Tier.TIER_1: {"radius": 3.0, "height": 10.0, "turns": 3, "particles": 36, "jitter": 0.10, "strands": 1},
    Tier.TIER_2: {"radius": 3.5, "height": 12.0, "turns": 4, "particles": 48, "jitter": 0.15, "strands": 1},
    Tier.TIER_3: {"radius": 4.0, "height": 14.0, "turns": 5, "particles": 60, "jitter": 0.20, "strands": 2},
    Tier.TIER_4: {"radius": 4.5, "height": 16.0, "turns": 6, "particles": 72, "jitter": 0.25, "strands": 2},
    Tier.TIER_5: {"radius": 5.0, "height": 18.0, "turns": 7, "particles": 84, "jitter": 0.30, "strands": 3},
    Tier.TIER_6: {"radius": 5.5, "height": 20.0, "turns": 8, "particles": 96, "jitter": 0.35, "strands": 3},
}


def create_helix_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.HELIX, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["radius"] *= 0.8
        values["height"] *= 0.8
        values["jitter"] *= 0.8
    elif role == Role.ATTACK:
        values["radius"] *= 1.2
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
        values["height"] *= 1.2

    values["turns"] = float(values["turns"])
    return FormationPattern(
        type=PatternType.HELIX,
        parameters=HelixParameters(**values),
        density=0.6,
        cohesion=0.7,
        flexibility=0.8,
    )


def generate_helix_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    """``strands`` helices of ``particles // strands`` points each."""
    params: HelixParameters = pattern.parameters
    if params.strands <= 0:
        return []
    random = create_seeded_random(seed)
    per_strand = params.particles // params.strands
    if per_strand <= 0:
        return []
    height = params.height
    z_jitter = params.jitter * height / params.turns if params.turns else 0.0

    positions: List[Vector3] = []
    for strand in range(params.strands):
        strand_offset = (strand / params.strands) * math.pi * 2
        for i in range(per_strand):
            t = i / per_strand
            angle = t * params.turns * math.pi * 2 + strand_offset + params.rotation
            x = math.cos(angle) * params.radius
            y = math.sin(angle) * params.radius
            z = t * height - height / 2
            jx = signed(random) * params.jitter * params.radius
            jy = signed(random) * params.jitter * params.radius
            jz = signed(random) * z_jitter
            positions.append(Vector3(x + jx, y + jy, z + jz) + params.offset)
    return positions


def generate_double_helix_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    return generate_helix_formation(pattern.with_parameters(strands=2), seed)


def generate_triple_helix_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    return generate_helix_formation(pattern.with_parameters(strands=3), seed)
