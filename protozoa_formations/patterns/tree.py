"""
Tree formations: a tapering trunk with breadth-first branching and leaf
clouds on the outermost branches.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector
from .base import ParametersMixin, require_tier, signed


@dataclass(frozen=True)
class TreeParameters(ParametersMixin):
    height: float = 10.0
    branch_levels: int = 3
    branch_factor: int = 2
    branch_angle: float = 0.5
    branch_length: float = 2.0
    trunk_width: float = 1.0
    leaf_density: float = 0.5
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.1


class Branch(NamedTuple):
    start: Vector3
    direction: Vector3
    level: int
    length: float


TIER_PRESETS = {
    Tier.TIER_4: {"height": 10.0, "branch_levels": 3, "branch_factor": 2, "branch_angle": 0.5,
                  "branch_length": 2.0, "trunk_width": 1.0, "leaf_density": 0.5, "jitter": 0.10},
    Tier.TIER_5: {"height": 12.0, "branch_levels": 4, "branch_factor": 2, "branch_angle": 0.6,
                  "branch_length": 2.5, "trunk_width": 1.2, "leaf_density": 0.6, "jitter": 0.15},
    Tier.TIER_6: {"height": 15.0, "branch_levels": 5, "branch_factor": 3, "branch_angle": 0.7,
                  "branch_length": 3.0, "trunk_width": 1.5, "leaf_density": 0.7, "jitter": 0.20},
}


def create_tree_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.TREE, tier)
    values = dict(TIER_PRESETS[tier])

    if role == Role.CORE:
        values["branch_factor"] = max(2, values["branch_factor"])
    elif role == Role.ATTACK:
        values["branch_angle"] *= 0.8
        values["height"] *= 1.2
    elif role == Role.DEFENSE:
        values["branch_angle"] *= 1.2
        values["trunk_width"] *= 1.2
    elif role == Role.CONTROL:
        values["jitter"] *= 0.8
        values["branch_levels"] = min(values["branch_levels"] + 1, 5)
    elif role == Role.MOVEMENT:
        values["jitter"] *= 1.2
        values["leaf_density"] *= 1.2

    return FormationPattern(
        type=PatternType.TREE,
        parameters=TreeParameters(**values),
        density=0.6,
        cohesion=0.7,
        flexibility=0.5,
    )


def _perpendicular(direction: Vector3) -> Vector3:
    if abs(direction.y) > 0.9:
        perp = Vector3(0.0, -direction.z, direction.y)
    else:
        perp = Vector3(direction.z, 0.0, -direction.x)
    if perp.length() == 0:
        return Vector3(1.0, 0.0, 0.0)
    return perp.normalized()


def _trunk(random, params: TreeParameters) -> List[Vector3]:
    positions = []
    if params.branch_length > 0:
        segments = max(1, math.ceil(params.height / params.branch_length))
    else:
        segments = 1
    for i in range(segments + 1):
        t = i / segments
        y = t * params.height
        radius = params.trunk_width * (1 - t * 0.7)
        ring = max(3, int(math.floor(params.trunk_width * 3 * (1 - t * 0.7))))
        for j in range(ring):
            angle = (j / ring) * math.pi * 2 + params.rotation
            jx = signed(random) * params.jitter * radius
            jz = signed(random) * params.jitter * radius
            jy = signed(random) * params.jitter * params.branch_length * 0.2
            positions.append(
                Vector3(math.cos(angle) * radius + jx, y + jy, math.sin(angle) * radius + jz)
                + params.offset
            )
    return positions


def _initial_branches(random, params: TreeParameters) -> deque:
    queue = deque()
    start_y = params.height * 0.3
    end_y = params.height * 0.9
    steps = max(3, params.branch_levels)
    for i in range(steps):
        t = i / (steps - 1)
        y = start_y + t * (end_y - start_y)
        count = max(2, int(math.floor(params.branch_factor * (1 + t))))
        for j in range(count):
            angle = (j / count) * math.pi * 2 + params.rotation + random() * 0.5
            direction = Vector3(
                math.cos(angle) * math.sin(params.branch_angle),
                math.cos(params.branch_angle),
                math.sin(angle) * math.sin(params.branch_angle),
            )
            queue.append(
                Branch(Vector3(0.0, y, 0.0), direction, 1, params.branch_length * (0.8 + t * 0.4))
            )
    return queue


def generate_tree_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    params: TreeParameters = pattern.parameters
    random = create_seeded_random(seed)
    positions = _trunk(random, params)
    queue = _initial_branches(random, params)

    while queue:
        branch = queue.popleft()
        end = branch.start + branch.direction * branch.length

        steps = max(3, int(math.floor(branch.length * 2)))
        for i in range(steps + 1):
            point = branch.start.lerp(end, i / steps)
            positions.append(
                point
                + jitter_vector(random, params.jitter * branch.length * 0.1)
                + params.offset
            )

        if branch.level < params.branch_levels:
            children = max(2, params.branch_factor - branch.level)
            d = branch.direction
            for i in range(children):
                angle_offset = (i / children) * math.pi * 2
                sub_angle = params.branch_angle * (0.8 + random() * 0.4)
                perp = _perpendicular(d)
                cos_sub, sin_sub = math.cos(sub_angle), math.sin(sub_angle)
                child = Vector3(
                    d.x * cos_sub + perp.x * sin_sub * math.cos(angle_offset),
                    d.y * cos_sub + perp.y * sin_sub * math.cos(angle_offset),
                    d.z * cos_sub + perp.z * sin_sub * math.sin(angle_offset),
                )
                queue.append(Branch(end, child, branch.level + 1, branch.length * 0.7))

        if branch.level == params.branch_levels:
            leaf_radius = branch.length * 0.5
            for _ in range(int(math.floor(params.leaf_density * 10))):
                a1 = random() * math.pi * 2
                a2 = random() * math.pi
                leaf = Vector3(
                    math.sin(a2) * math.cos(a1),
                    math.sin(a2) * math.sin(a1),
                    math.cos(a2),
                ) * leaf_radius
                positions.append(end + leaf + params.offset)

    return positions


def generate_fractal_tree_formation(
    pattern: FormationPattern, seed: int
) -> List[Vector3]:
    """One level deeper, bushier and more regular than the base tree."""
    params: TreeParameters = pattern.parameters
    return generate_tree_formation(
        pattern.with_parameters(
            branch_levels=min(params.branch_levels + 1, 6),
            branch_factor=min(params.branch_factor + 1, 4),
            branch_angle=params.branch_angle * 0.9,
            jitter=params.jitter * 0.8,
        ),
        seed,
    )
