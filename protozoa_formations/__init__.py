"""
Protozoa Formations - deterministic particle formations.

Seeded generators for geometric and fractal point clouds, a role/tier
formation bank, and a transition engine that eases particle groups into them.
"""

__version__ = "1.0.0"

from .bank import FormationBank, create_mock_formation_bank, load_from_files, save_to_files
from .errors import FormationBankError, FormationConfigError, FormationError
from .models import (
    Formation,
    FormationEffect,
    FormationPattern,
    PatternType,
    Rarity,
    Role,
    Tier,
)
from .patterns import (
    PATTERNS,
    available_patterns,
    create_pattern,
    generate_many,
    generate_positions,
    generate_sized_positions,
)
from .rng import SeededRandom, create_seeded_random, derive_seed
from .transitions import (
    Particle,
    ParticleGroup,
    TransitionState,
    apply_formation,
    blend_formations,
    formation_seed,
    update_formation_transitions,
)
from .vectors import Vector3

__all__ = [
    "PATTERNS",
    "Formation",
    "FormationBank",
    "FormationBankError",
    "FormationConfigError",
    "FormationEffect",
    "FormationError",
    "FormationPattern",
    "Particle",
    "ParticleGroup",
    "PatternType",
    "Rarity",
    "Role",
    "SeededRandom",
    "Tier",
    "TransitionState",
    "Vector3",
    "apply_formation",
    "available_patterns",
    "blend_formations",
    "create_mock_formation_bank",
    "create_pattern",
    "create_seeded_random",
    "derive_seed",
    "formation_seed",
    "generate_many",
    "generate_positions",
    "generate_sized_positions",
    "load_from_files",
    "save_to_files",
    "update_formation_transitions",
]
