"""
Formation pattern families.

Each family module provides a ``create_<family>_formation(role, tier, rarity)``
factory returning a FormationPattern and a ``generate_<family>_formation(pattern,
seed)`` generator returning a list of Vector3 points. This package ties them
together in a registry keyed by PatternType.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..errors import FormationConfigError
from ..models import FormationPattern, PatternType, Rarity, Role, Tier
from ..vectors import Vector3
from .base import MIN_TIER_LEVEL, is_available, require_tier
from .circle import (
    CircleParameters,
    create_circle_formation,
    generate_circle_formation,
    generate_multi_layer_circle_formation,
)
from .cluster import (
    ClusterParameters,
    create_cluster_formation,
    generate_cluster_formation,
    generate_hierarchical_cluster_formation,
)
from .grid import (
    GridParameters,
    create_grid_formation,
    generate_adaptive_grid_formation,
    generate_grid_formation,
)
from .helix import (
    HelixParameters,
    create_helix_formation,
    generate_double_helix_formation,
    generate_helix_formation,
    generate_triple_helix_formation,
)
from .mandelbrot import (
    MandelbrotParameters,
    create_mandelbrot_formation,
    generate_mandelbrot_formation,
    julia_escape_count_3d,
    mandelbrot_escape_count,
)
from .sierpinski import (
    SierpinskiParameters,
    SierpinskiShape,
    create_sierpinski_formation,
    generate_3d_sierpinski_carpet,
    generate_sierpinski_formation,
)
from .sphere import (
    SphereParameters,
    create_sphere_formation,
    generate_multi_layer_sphere_formation,
    generate_sphere_formation,
)
from .spiral import (
    SpiralParameters,
    create_spiral_formation,
    generate_3d_spiral_formation,
    generate_double_spiral_formation,
    generate_spiral_formation,
)
from .swarm import (
    SwarmParameters,
    create_swarm_formation,
    generate_directed_swarm_formation,
    generate_swarm_formation,
)
from .tree import (
    TreeParameters,
    create_tree_formation,
    generate_fractal_tree_formation,
    generate_tree_formation,
)
from .web import (
    WebParameters,
    create_web_formation,
    generate_complex_web_formation,
    generate_web_formation,
)

Factory = Callable[..., FormationPattern]
Generator = Callable[[FormationPattern, int], List[Vector3]]


@dataclass(frozen=True)
class PatternFamily:
    """Registry entry for one pattern family."""

    create: Factory
    generate: Generator
    parameters: type
    name: str
    description: str
    variants: Dict[str, Generator]

    @property
    def min_tier(self) -> Tier:
        return Tier.from_level(MIN_TIER_LEVEL[self.pattern_type])

    @property
    def pattern_type(self) -> PatternType:
        return PatternType(self.name)


# ============================================================================
# Pattern Registry
# ============================================================================

PATTERNS: Dict[PatternType, PatternFamily] = {
    PatternType.CIRCLE: PatternFamily(
        create_circle_formation, generate_circle_formation, CircleParameters,
        "circle", "Concentric rings in the X/Y plane", {},
    ),
    PatternType.GRID: PatternFamily(
        create_grid_formation, generate_grid_formation, GridParameters,
        "grid", "Centred rectangular lattice", {},
    ),
    PatternType.SPIRAL: PatternFamily(
        create_spiral_formation, generate_spiral_formation, SpiralParameters,
        "spiral", "Archimedean spiral",
        {"double": generate_double_spiral_formation, "3d": generate_3d_spiral_formation},
    ),
    PatternType.SPHERE: PatternFamily(
        create_sphere_formation, generate_sphere_formation, SphereParameters,
        "sphere", "Fibonacci-sphere shells", {},
    ),
    PatternType.HELIX: PatternFamily(
        create_helix_formation, generate_helix_formation, HelixParameters,
        "helix", "Phase-offset strands climbing the Z axis",
        {"double": generate_double_helix_formation, "triple": generate_triple_helix_formation},
    ),
    PatternType.CLUSTER: PatternFamily(
        create_cluster_formation, generate_cluster_formation, ClusterParameters,
        "cluster", "Loose spherical clumps around a centre",
        {"hierarchical": generate_hierarchical_cluster_formation},
    ),
    PatternType.SWARM: PatternFamily(
        create_swarm_formation, generate_swarm_formation, SwarmParameters,
        "swarm", "Random cloud relaxed by cohesion and separation",
        {"directed": generate_directed_swarm_formation},
    ),
    PatternType.TREE: PatternFamily(
        create_tree_formation, generate_tree_formation, TreeParameters,
        "tree", "Trunk, branches and leaves",
        {"fractal": generate_fractal_tree_formation},
    ),
    PatternType.SIERPINSKI: PatternFamily(
        create_sierpinski_formation, generate_sierpinski_formation, SierpinskiParameters,
        "sierpinski", "Sierpinski triangle, tetrahedron or carpet",
        {"3d-carpet": generate_3d_sierpinski_carpet},
    ),
    PatternType.MANDELBROT: PatternFamily(
        create_mandelbrot_formation, generate_mandelbrot_formation, MandelbrotParameters,
        "mandelbrot", "Mandelbrot set, or a quaternion Julia set in 3D", {},
    ),
    PatternType.WEB: PatternFamily(
        create_web_formation, generate_web_formation, WebParameters,
        "web", "Spoked rings with random cross-links",
        {"complex": generate_complex_web_formation},
    ),
}

# Families that can hit an exact point count directly.
_SIZED: Dict[PatternType, Callable[[FormationPattern, int, int], List[Vector3]]] = {
    PatternType.CIRCLE: generate_multi_layer_circle_formation,
    PatternType.SPHERE: generate_multi_layer_sphere_formation,
    PatternType.GRID: generate_adaptive_grid_formation,
}


def get_family(pattern_type: PatternType) -> PatternFamily:
    try:
        return PATTERNS[pattern_type]
    except KeyError:
        raise FormationConfigError(f"Unknown pattern type: {pattern_type!r}") from None


def create_pattern(
    pattern_type: PatternType, role: Role, tier: Tier, rarity: Optional[Rarity] = None
) -> FormationPattern:
    """Build the tier/role-tuned pattern for a family."""
    return get_family(pattern_type).create(role, tier, rarity)


def generate_positions(pattern: FormationPattern, seed: int) -> List[Vector3]:
    return get_family(pattern.type).generate(pattern, seed)


def generate_variant(pattern: FormationPattern, seed: int, variant: str) -> List[Vector3]:
    """Generate one of a family's named variants (e.g. ``"double"`` for spirals)."""
    family = get_family(pattern.type)
    try:
        generator = family.variants[variant]
    except KeyError:
        raise FormationConfigError(
            f"{family.name} has no variant {variant!r}; "
            f"choose from {sorted(family.variants) or 'none'}"
        ) from None
    return generator(pattern, seed)


def generate_sized_positions(
    pattern: FormationPattern, seed: int, count: int
) -> List[Vector3]:
    """
    Generate at most ``count`` points.

    Circle, sphere and grid patterns are laid out for exactly ``count``
    points; every other family is generated as-is and truncated.
    """
    if count <= 0:
        return []
    sized = _SIZED.get(pattern.type)
    if sized is not None:
        return sized(pattern, seed, count)
    return generate_positions(pattern, seed)[:count]


def generate_many(
    requests: Iterable[Tuple[FormationPattern, int]], max_workers: Optional[int] = None
) -> List[List[Vector3]]:
    """Generate independent ``(pattern, seed)`` requests concurrently, in order."""
    requests = list(requests)
    if not requests:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda req: generate_positions(*req), requests))


def available_patterns(tier: Tier) -> List[PatternType]:
    """Pattern families unlocked at ``tier``."""
    return [t for t in PATTERNS if is_available(t, tier)]


def list_patterns() -> List[Dict[str, str]]:
    """List all pattern families."""
    return [
        {
            "id": key.value,
            "name": family.name,
            "description": family.description,
            "min_tier": family.min_tier.value,
            "variants": ", ".join(sorted(family.variants)),
        }
        for key, family in PATTERNS.items()
    ]


__all__ = [
    "PATTERNS",
    "PatternFamily",
    "CircleParameters",
    "ClusterParameters",
    "GridParameters",
    "HelixParameters",
    "MandelbrotParameters",
    "SierpinskiParameters",
    "SierpinskiShape",
    "SphereParameters",
    "SpiralParameters",
    "SwarmParameters",
    "TreeParameters",
    "WebParameters",
    "available_patterns",
    "create_pattern",
    "generate_many",
    "generate_positions",
    "generate_sized_positions",
    "generate_variant",
    "get_family",
    "julia_escape_count_3d",
    "list_patterns",
    "mandelbrot_escape_count",
    "require_tier",
]
