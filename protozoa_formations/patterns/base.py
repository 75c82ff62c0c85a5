"""
Shared pieces for the pattern families: tier gating, the parameter record
mixin and small numeric helpers used by the factories.
"""

import dataclasses
import math
import typing
from enum import Enum
from typing import Any, Dict

from ..errors import FormationConfigError
from ..models import PatternType, Tier
from ..vectors import Vector3

# ============================================================================
# Tier gating
# ============================================================================

MIN_TIER_LEVEL: Dict[PatternType, int] = {
    PatternType.CIRCLE: 1,
    PatternType.GRID: 1,
    PatternType.SPIRAL: 1,
    PatternType.SPHERE: 1,
    PatternType.HELIX: 1,
    PatternType.CLUSTER: 2,
    PatternType.WEB: 3,
    PatternType.SWARM: 4,
    PatternType.TREE: 4,
    PatternType.SIERPINSKI: 5,
    PatternType.MANDELBROT: 6,
}


def is_available(pattern_type: PatternType, tier: Tier) -> bool:
    return tier.level >= MIN_TIER_LEVEL[pattern_type]


def require_tier(pattern_type: PatternType, tier: Tier) -> None:
    """Raise FormationConfigError if ``pattern_type`` is locked at ``tier``."""
    if not is_available(pattern_type, tier):
        raise FormationConfigError(
            f"{pattern_type.value} formations require tier "
            f"{MIN_TIER_LEVEL[pattern_type]} or higher, got {tier.value}"
        )


# ============================================================================
# Parameter records
# ============================================================================


def _encode(value: Any) -> Any:
    if isinstance(value, Vector3):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    return value


def _finite(value: Any, expected: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected {expected}, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value!r}")
    return value


def _decode(hint: Any, value: Any) -> Any:
    if hint is Vector3:
        if isinstance(value, Vector3):
            return value
        if not isinstance(value, dict):
            raise TypeError(f"expected a vector object, got {value!r}")
        return Vector3(*(float(_finite(value.get(axis, 0.0), "a number")) for axis in "xyz"))
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    if hint is int:
        return int(_finite(value, "an integer"))
    if hint is float:
        return float(_finite(value, "a number"))
    if hint is bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected a boolean, got {value!r}")
        return value
    return value


class ParametersMixin:
    """JSON-friendly conversion for the frozen per-family parameter records."""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: _encode(getattr(self, f.name)) for f in dataclasses.fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Build a record from authored data.

        Unknown keys are ignored and missing keys fall back to the field
        defaults; badly typed values raise FormationConfigError.
        """
        hints = typing.get_type_hints(cls)
        kwargs = {}
        for f in dataclasses.fields(cls):
            if f.name not in data:
                continue
            try:
                kwargs[f.name] = _decode(hints[f.name], data[f.name])
            except (TypeError, ValueError, OverflowError) as e:
                raise FormationConfigError(
                    f"Invalid {cls.__name__}.{f.name}: {e}"
                ) from e
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise FormationConfigError(f"Incomplete {cls.__name__}: {e}") from e


# ============================================================================
# Factory helpers
# ============================================================================


def scale_int(value: int, factor: float) -> int:
    """Scale an integer parameter, flooring the result."""
    return int(math.floor(value * factor))


def signed(random) -> float:
    """Uniform value in [-1, 1) from a bare random callable."""
    return random() * 2 - 1
