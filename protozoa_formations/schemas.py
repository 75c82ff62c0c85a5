"""Pydantic schemas for authored formation files."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import Formation, FormationEffect, FormationPattern, PatternType, Role, Tier
from .patterns import get_family, require_tier
from .vectors import Vector3

# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class Vector3Schema(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)


# ---------------------------------------------------------------------------
# Formation schemas
# ---------------------------------------------------------------------------


class FormationEffectSchema(BaseModel):
    type: str = Field(..., min_length=1)
    strength: float = 1.0
    duration: float = Field(default=0.0, ge=0)
    radius: float = Field(default=0.0, ge=0)
    conditions: dict[str, Any] = Field(default_factory=dict)


class FormationPatternSchema(BaseModel):
    type: PatternType
    density: float = Field(default=0.7, ge=0, le=1)
    cohesion: float = Field(default=0.8, ge=0, le=1)
    flexibility: float = Field(default=0.5, ge=0, le=1)
    parameters: dict[str, Any] = Field(default_factory=dict)


class FormationSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    role: Role
    tier: Tier
    pattern: FormationPatternSchema
    effect: FormationEffectSchema
    center: Vector3Schema = Field(default_factory=Vector3Schema)
    description: str = ""

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return v.strip()

    def to_formation(self) -> Formation:
        """Convert to the runtime model.

        Raises FormationConfigError when the pattern is locked at this tier
        or its parameters do not fit the pattern family.
        """
        require_tier(self.pattern.type, self.tier)
        family = get_family(self.pattern.type)
        pattern = FormationPattern(
            type=self.pattern.type,
            parameters=family.parameters.from_dict(self.pattern.parameters),
            density=self.pattern.density,
            cohesion=self.pattern.cohesion,
            flexibility=self.pattern.flexibility,
        )
        return Formation(
            id=self.id,
            name=self.name,
            role=self.role,
            tier=self.tier,
            pattern=pattern,
            effect=FormationEffect(**self.effect.model_dump()),
            center=self.center.to_vector(),
            description=self.description,
        )


def formation_to_schema(formation: Formation) -> FormationSchema:
    return FormationSchema.model_validate(formation.to_dict())
