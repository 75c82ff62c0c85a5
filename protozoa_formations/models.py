"""
Data models for the formation engine.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .vectors import Vector3


class Role(Enum):
    CORE = "CORE"
    CONTROL = "CONTROL"
    MOVEMENT = "MOVEMENT"
    DEFENSE = "DEFENSE"
    ATTACK = "ATTACK"


class Tier(Enum):
    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"
    TIER_3 = "TIER_3"
    TIER_4 = "TIER_4"
    TIER_5 = "TIER_5"
    TIER_6 = "TIER_6"

    @property
    def level(self) -> int:
        """Ordinal 1-6."""
        return int(self.value.rsplit("_", 1)[1])

    @classmethod
    def from_level(cls, level: int) -> "Tier":
        return cls(f"TIER_{int(level)}")

    @classmethod
    def for_rarity(cls, rarity: "Rarity") -> "Tier":
        return cls.from_level(list(Rarity).index(rarity) + 1)


class Rarity(Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"
    MYTHIC = "MYTHIC"

    @classmethod
    def for_tier(cls, tier: Tier) -> "Rarity":
        return list(cls)[tier.level - 1]


class PatternType(Enum):
    CIRCLE = "circle"
    GRID = "grid"
    SPIRAL = "spiral"
    SPHERE = "sphere"
    HELIX = "helix"
    CLUSTER = "cluster"
    SWARM = "swarm"
    TREE = "tree"
    SIERPINSKI = "sierpinski"
    MANDELBROT = "mandelbrot"
    WEB = "web"


@dataclass(frozen=True)
class FormationPattern:
    """
    Typed, parameterized description of a formation's geometry.

    ``density``, ``cohesion`` and ``flexibility`` are advisory tuning
    scalars in [0, 1] for caller-side heuristics; generators read only
    ``parameters``, a frozen per-family parameter record.
    """

    type: PatternType
    parameters: Any
    density: float = 0.7
    cohesion: float = 0.8
    flexibility: float = 0.5

    def with_parameters(self, **changes: Any) -> "FormationPattern":
        """Copy with some parameter values replaced."""
        return dataclasses.replace(
            self, parameters=dataclasses.replace(self.parameters, **changes)
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "density": self.density,
            "cohesion": self.cohesion,
            "flexibility": self.flexibility,
            "parameters": self.parameters.to_dict(),
        }


@dataclass(frozen=True)
class FormationEffect:
    """Gameplay effect granted while a formation is held."""

    type: str
    strength: float = 1.0
    duration: float = 0.0  # seconds
    radius: float = 0.0
    conditions: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "conditions", MappingProxyType(dict(self.conditions)))

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "strength": self.strength,
            "duration": self.duration,
            "radius": self.radius,
            "conditions": dict(self.conditions),
        }


@dataclass(frozen=True)
class Formation:
    """A named, role/tier-scoped target shape for a particle group."""

    id: str
    name: str
    role: Role
    tier: Tier
    pattern: FormationPattern
    effect: FormationEffect
    center: Vector3 = field(default_factory=Vector3)
    description: str = ""

    @property
    def rarity(self) -> Rarity:
        return Rarity.for_tier(self.tier)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "tier": self.tier.value,
            "pattern": self.pattern.to_dict(),
            "effect": self.effect.to_dict(),
            "center": self.center.to_dict(),
            "description": self.description,
        }


def formation_id(role: Role, tier: Tier, index: int) -> str:
    """Bank-unique id for the ``index``-th formation of a role/tier."""
    return f"formation-{role.value}-{tier.value}-{index}"
