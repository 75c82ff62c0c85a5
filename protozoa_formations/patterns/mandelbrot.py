"""
Mandelbrot formations: rejection-sampled points from the Mandelbrot set, or
from a quaternion Julia set when ``is_3d`` is set.

Sampling stops at the target count or after ten times that many attempts,
whichever comes first, so sparse regions return fewer points.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..rng import create_seeded_random
from ..vectors import Vector3, jitter_vector, rotate_xy, rotate_xz
from .base import ParametersMixin, require_tier, signed

logger = logging.getLogger(__name__)

ACCEPT_RATIO = 0.7


@dataclass(frozen=True)
class MandelbrotParameters(ParametersMixin):
    center_x: float = -0.5
    center_y: float = 0.0
    scale: float = 2.5
    iterations: int = 50
    threshold: float = 4.0
    density: float = 0.5
    offset: Vector3 = field(default_factory=Vector3)
    rotation: float = 0.0
    jitter: float = 0.05
    is_3d: bool = False


BASE_PRESET = {
    "center_x": -0.5,
    "center_y": 0.0,
    "scale": 2.5,
    "iterations": 50,
    "threshold": 4.0,
    "density": 0.5,
    "jitter": 0.05,
    "is_3d": False,
}


def create_mandelbrot_formation(
    role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    require_tier(PatternType.MANDELBROT, tier)
    values = dict(BASE_PRESET)

    if role == Role.CORE:
        values.update(center_x=-0.5, center_y=0.0, scale=2.0)
    elif role == Role.ATTACK:
        values.update(center_x=-0.75, center_y=0.1, scale=1.5)
    elif role == Role.DEFENSE:
        values["iterations"] = 100
        values["jitter"] *= 0.5
    elif role == Role.CONTROL:
        values.update(center_x=-1.25, center_y=0.0, scale=0.5)
    elif role == Role.MOVEMENT:
        values["is_3d"] = True
        values["iterations"] = 30

    return FormationPattern(
        type=PatternType.MANDELBROT,
        parameters=MandelbrotParameters(**values),
        density=0.8,
        cohesion=0.9,
        flexibility=0.2,
    )


def mandelbrot_escape_count(cx: float, cy: float, max_iterations: int,
                            threshold: float = 4.0) -> int:
    """Iterations of ``z -> z^2 + c`` from 0 before ``|z|^2`` reaches threshold."""
    zx = zy = 0.0
    iteration = 0
    while zx * zx + zy * zy < threshold and iteration < max_iterations:
        zx, zy = zx * zx - zy * zy + cx, 2 * zx * zy + cy
        iteration += 1
    return iteration


def julia_escape_count_3d(x: float, y: float, z: float, julia_a: float, julia_b: float,
                          max_iterations: int, threshold: float = 4.0) -> int:
    """Escape count of the quaternion ``(x, y, z, 0)`` under ``q -> q^2 + (a, b, 0, 0)``."""
    qx, qy, qz, qw = x, y, z, 0.0
    iteration = 0
    while qx * qx + qy * qy + qz * qz + qw * qw < threshold and iteration < max_iterations:
        qx, qy, qz, qw = (
            qx * qx - qy * qy - qz * qz - qw * qw + julia_a,
            2 * qx * qy + julia_b,
            2 * qx * qz,
            2 * qx * qw,
        )
        iteration += 1
    return iteration


def _accepted(count: int, iterations: int) -> bool:
    return count > 0 and count >= iterations * ACCEPT_RATIO


def _mandelbrot_2d(params: MandelbrotParameters, seed: int) -> Tuple[List[Vector3], int]:
    random = create_seeded_random(seed)
    target = int(math.floor(params.density * 200))
    max_attempts = target * 10
    positions: List[Vector3] = []
    attempts = 0
    while len(positions) < target and attempts < max_attempts:
        attempts += 1
        x = params.center_x + signed(random) * params.scale
        y = params.center_y + signed(random) * params.scale
        count = mandelbrot_escape_count(x, y, params.iterations, params.threshold)
        if not _accepted(count, params.iterations):
            continue
        relief = (count / params.iterations) * params.scale * 0.5
        rx, ry = rotate_xy(x, y, params.rotation)
        positions.append(
            Vector3(rx, ry, relief)
            + jitter_vector(random, params.jitter * params.scale)
            + params.offset
        )
    return positions, target


def _julia_3d(params: MandelbrotParameters, seed: int) -> Tuple[List[Vector3], int]:
    random = create_seeded_random(seed)
    target = int(math.floor(params.density * 300))
    max_attempts = target * 10
    positions: List[Vector3] = []
    attempts = 0
    while len(positions) < target and attempts < max_attempts:
        attempts += 1
        x = signed(random) * params.scale
        y = signed(random) * params.scale
        z = signed(random) * params.scale
        count = julia_escape_count_3d(
            x, y, z, params.center_x, params.center_y, params.iterations, params.threshold
        )
        if not _accepted(count, params.iterations):
            continue
        j = jitter_vector(random, params.jitter * params.scale)
        rx, rz = rotate_xz(x, z, params.rotation)
        positions.append(Vector3(rx, y, rz) + j + params.offset)
    return positions, target


def generate_mandelbrot_formation(pattern: FormationPattern, seed: int) -> List[Vector3]:
    params: MandelbrotParameters = pattern.parameters
    if params.iterations <= 0:
        return []
    sampler = _julia_3d if params.is_3d else _mandelbrot_2d
    positions, target = sampler(params, seed)
    if len(positions) < target:
        logger.debug(
            "Mandelbrot sampling accepted %d of %d points",
            len(positions),
            target,
            extra={"pattern": PatternType.MANDELBROT.value, "seed": seed, "count": len(positions)},
        )
    return positions
