"""
Transition engine: assigns formation targets to particle groups and eases
live particle positions toward them over time.

Each in-flight particle carries a TransitionState under
``behavior_params["transition"]``. Applying a new formation overwrites it;
completing a transition pins the particle to its end position and clears it.
"""

import logging
import time
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import get_settings
from .models import Formation, Role
from .patterns import generate_sized_positions
from .vectors import Vector3, blend, clamp, smoothstep

logger = logging.getLogger(__name__)

TRANSITION_KEY = "transition"


@dataclass(frozen=True)
class TransitionState:
    start_position: Vector3
    end_position: Vector3
    start_time: float
    duration: float  # seconds

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def position_at(self, current_time: float) -> Vector3:
        """Eased position; the start before ``start_time``, the end after ``end_time``."""
        if self.duration <= 0 or current_time >= self.end_time:
            return self.end_position
        progress = smoothstep(0.0, 1.0, (current_time - self.start_time) / self.duration)
        return self.start_position.lerp(self.end_position, progress)


@dataclass
class Particle:
    id: str
    position: Vector3 = field(default_factory=Vector3)
    target_position: Optional[Vector3] = None
    behavior_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def transition(self) -> Optional[TransitionState]:
        return self.behavior_params.get(TRANSITION_KEY)


@dataclass
class ParticleGroup:
    id: str
    role: Role
    particles: List[Particle] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.particles)


def formation_seed(formation: Formation) -> int:
    """Stable 32-bit seed derived from the formation id."""
    return zlib.crc32(formation.id.encode("utf-8")) & 0xFFFFFFFF


def formation_positions(
    formation: Formation, count: int, seed: Optional[int] = None
) -> List[Vector3]:
    """Up to ``count`` target points for ``formation``, shifted to its centre."""
    if seed is None:
        seed = formation_seed(formation)
    center = formation.center
    return [p + center for p in generate_sized_positions(formation.pattern, seed, count)]


def _assign_targets(
    group: ParticleGroup,
    targets: List[Vector3],
    transition_time: Optional[float],
    now: Optional[float],
) -> int:
    if transition_time is None:
        transition_time = get_settings().default_transition_time
    if now is None:
        now = time.time()

    assigned = min(group.count, len(targets))
    for particle, target in zip(group.particles, targets):
        particle.target_position = target
        if transition_time <= 0:
            particle.position = target
            particle.behavior_params.pop(TRANSITION_KEY, None)
        else:
            particle.behavior_params[TRANSITION_KEY] = TransitionState(
                start_position=particle.position,
                end_position=target,
                start_time=now,
                duration=transition_time,
            )
    return assigned


def apply_formation(
    group: ParticleGroup,
    formation: Formation,
    transition_time: Optional[float] = None,
    now: Optional[float] = None,
    seed: Optional[int] = None,
) -> ParticleGroup:
    """
    Start moving ``group`` into ``formation``.

    Particle ``i`` targets point ``i``; particles beyond the generated point
    count keep their current state. A ``transition_time`` of zero or less
    snaps particles into place immediately.
    """
    targets = formation_positions(formation, group.count, seed)
    assigned = _assign_targets(group, targets, transition_time, now)
    logger.debug(
        f"Applied formation {formation.id} to group {group.id}",
        extra={"formation_id": formation.id, "pattern": formation.pattern.type.value,
               "count": assigned},
    )
    return group


def blend_formations(
    group: ParticleGroup,
    formation_a: Formation,
    formation_b: Formation,
    blend_factor: float,
    transition_time: Optional[float] = None,
    now: Optional[float] = None,
    seed: Optional[int] = None,
) -> ParticleGroup:
    """Move ``group`` toward a per-point mix of two formations (0 = a, 1 = b)."""
    factor = clamp(blend_factor)
    targets_a = formation_positions(formation_a, group.count, seed)
    targets_b = formation_positions(formation_b, group.count, seed)
    targets = [blend(a, b, factor) for a, b in zip(targets_a, targets_b)]
    assigned = _assign_targets(group, targets, transition_time, now)
    logger.debug(
        f"Blended formations {formation_a.id} and {formation_b.id} at {factor:.2f}",
        extra={"formation_id": formation_b.id, "count": assigned},
    )
    return group


def update_formation_transitions(group: ParticleGroup, current_time: float) -> ParticleGroup:
    """Advance every in-flight transition in ``group`` to ``current_time``."""
    for particle in group.particles:
        state = particle.transition
        if state is None:
            continue
        particle.position = state.position_at(current_time)
        if current_time >= state.end_time:
            del particle.behavior_params[TRANSITION_KEY]
    return group
