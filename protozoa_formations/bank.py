"""
Formation bank: the immutable collection of named formations, plus loading
it from authored JSON files and building a deterministic mock bank.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import TypeAdapter

from .config import get_settings
from .errors import FormationBankError, FormationError
from .models import Formation, FormationEffect, PatternType, Rarity, Role, Tier, formation_id
from .patterns import create_pattern
from .patterns.base import is_available
from .rng import create_seeded_random, derive_seed
from .schemas import FormationSchema, formation_to_schema

logger = logging.getLogger(__name__)

FORMATIONS_DIR = "formations"

_FILE_ADAPTER = TypeAdapter(List[FormationSchema])


class FormationBank:
    """
    Read-only collection of formations with lookup views.

    The views are derived from the formation tuple when the bank is built;
    ``with_formations`` returns a new bank rather than mutating this one.
    """

    def __init__(self, formations: Iterable[Formation] = ()):
        self._formations: Tuple[Formation, ...] = tuple(formations)

        by_id: Dict[str, Formation] = {}
        by_role: Dict[Role, List[Formation]] = {role: [] for role in Role}
        by_tier: Dict[Tier, List[Formation]] = {tier: [] for tier in Tier}
        for formation in self._formations:
            if formation.id in by_id:
                raise FormationBankError(f"Duplicate formation id: {formation.id}")
            by_id[formation.id] = formation
            by_role[formation.role].append(formation)
            by_tier[formation.tier].append(formation)

        self._by_id = MappingProxyType(by_id)
        self._by_role = MappingProxyType({k: tuple(v) for k, v in by_role.items()})
        self._by_tier = MappingProxyType({k: tuple(v) for k, v in by_tier.items()})

    @property
    def formations(self) -> Tuple[Formation, ...]:
        return self._formations

    @property
    def by_id(self) -> Mapping[str, Formation]:
        return self._by_id

    @property
    def by_role(self) -> Mapping[Role, Tuple[Formation, ...]]:
        return self._by_role

    @property
    def by_tier(self) -> Mapping[Tier, Tuple[Formation, ...]]:
        return self._by_tier

    def with_formations(self, formations: Iterable[Formation]) -> "FormationBank":
        return FormationBank(formations)

    def get_formations_by_role(self, role: Role) -> List[Formation]:
        return list(self._by_role.get(role, ()))

    def get_formations_by_rarity(self, rarity: Union[Tier, Rarity]) -> List[Formation]:
        """Formations of a tier; a Rarity is mapped to its tier first."""
        if isinstance(rarity, Rarity):
            rarity = Tier.for_rarity(rarity)
        return list(self._by_tier.get(rarity, ()))

    def get_formation_by_id(self, formation_id: str) -> Optional[Formation]:
        return self._by_id.get(formation_id)

    def roles(self) -> List[Role]:
        return [role for role in Role if self._by_role[role]]

    def __len__(self) -> int:
        return len(self._formations)

    def __iter__(self) -> Iterator[Formation]:
        return iter(self._formations)

    def __repr__(self) -> str:
        return f"FormationBank({len(self)} formations)"


# ============================================================================
# Mock bank
# ============================================================================

ROLE_PATTERNS: Dict[Role, Tuple[PatternType, ...]] = {
    Role.CORE: (PatternType.SPHERE, PatternType.CIRCLE, PatternType.SPIRAL,
                PatternType.CLUSTER, PatternType.SIERPINSKI, PatternType.MANDELBROT),
    Role.CONTROL: (PatternType.GRID, PatternType.HELIX, PatternType.WEB,
                   PatternType.TREE, PatternType.SIERPINSKI, PatternType.MANDELBROT),
    Role.MOVEMENT: (PatternType.SPIRAL, PatternType.HELIX, PatternType.SWARM,
                    PatternType.WEB, PatternType.MANDELBROT),
    Role.DEFENSE: (PatternType.CIRCLE, PatternType.SPHERE, PatternType.GRID,
                   PatternType.CLUSTER, PatternType.WEB, PatternType.TREE,
                   PatternType.SIERPINSKI),
    Role.ATTACK: (PatternType.SPIRAL, PatternType.HELIX, PatternType.CLUSTER,
                  PatternType.SWARM, PatternType.SIERPINSKI, PatternType.MANDELBROT),
}

ROLE_NAMES: Dict[Role, Tuple[str, ...]] = {
    Role.CORE: ("Nucleus", "Orbit", "Nexus", "Pulse", "Beacon"),
    Role.CONTROL: ("Grid", "Matrix", "Network", "Command", "Dominion"),
    Role.MOVEMENT: ("Flux", "Stream", "Surge", "Drift", "Glide"),
    Role.DEFENSE: ("Shield", "Barrier", "Bulwark", "Aegis", "Rampart"),
    Role.ATTACK: ("Strike", "Assault", "Barrage", "Onslaught", "Volley"),
}

ROLE_EFFECTS: Dict[Role, str] = {
    Role.CORE: "stability",
    Role.CONTROL: "alignment",
    Role.MOVEMENT: "speed",
    Role.DEFENSE: "cohesion",
    Role.ATTACK: "separation",
}

ROLE_SCALES: Dict[Role, float] = {
    Role.CORE: 0.8,
    Role.CONTROL: 1.2,
    Role.MOVEMENT: 1.5,
    Role.DEFENSE: 1.0,
    Role.ATTACK: 1.3,
}

RARITY_SCALES: Dict[Rarity, float] = {
    Rarity.COMMON: 0.8,
    Rarity.UNCOMMON: 1.0,
    Rarity.RARE: 1.2,
    Rarity.EPIC: 1.4,
    Rarity.LEGENDARY: 1.6,
    Rarity.MYTHIC: 2.0,
}

RARITY_MULTIPLIERS: Dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.2,
    Rarity.RARE: 1.5,
    Rarity.EPIC: 1.8,
    Rarity.LEGENDARY: 2.2,
    Rarity.MYTHIC: 3.0,
}

BASE_EFFECT_RADIUS = 5.0
BASE_EFFECT_STRENGTH = 1.5
ROLE_BONUS = 0.2


def formation_effect(role: Role, tier: Tier) -> FormationEffect:
    """The role's signature effect, scaled by rarity."""
    rarity = Rarity.for_tier(tier)
    multiplier = RARITY_MULTIPLIERS[rarity]
    return FormationEffect(
        type=ROLE_EFFECTS[role],
        strength=BASE_EFFECT_STRENGTH * multiplier,
        duration=0.0,
        radius=BASE_EFFECT_RADIUS * ROLE_SCALES[role] * RARITY_SCALES[rarity],
        conditions={"role": role.value, "role_bonus": ROLE_BONUS * multiplier},
    )


def _mock_formations_for_role(role: Role, seed: int, per_tier: int) -> List[Formation]:
    random = create_seeded_random(derive_seed(seed, f"formations-{role.value}"))
    formations = []
    for tier in Tier:
        rarity = Rarity.for_tier(tier)
        choices = [p for p in ROLE_PATTERNS[role] if is_available(p, tier)]
        for i in range(per_tier):
            pattern_type = random.choice(choices)
            name = random.choice(ROLE_NAMES[role])
            formations.append(
                Formation(
                    id=formation_id(role, tier, i),
                    name=f"{name} {rarity.value.title()}",
                    role=role,
                    tier=tier,
                    pattern=create_pattern(pattern_type, role, tier, rarity),
                    effect=formation_effect(role, tier),
                    description=(
                        f"A {rarity.value.lower()} tier formation for "
                        f"{role.value.lower()} particles."
                    ),
                )
            )
    return formations


def create_mock_formation_bank(
    seed: Optional[int] = None, per_tier: Optional[int] = None
) -> FormationBank:
    """Deterministic bank with ``per_tier`` formations for every role and tier."""
    settings = get_settings()
    seed = settings.default_seed if seed is None else seed
    per_tier = settings.mock_formations_per_tier if per_tier is None else per_tier

    formations: List[Formation] = []
    for role in Role:
        formations.extend(_mock_formations_for_role(role, seed, per_tier))
    return FormationBank(formations)


# ============================================================================
# File storage
# ============================================================================


def formation_file(base_path: Union[str, Path], role: Role, tier: Tier) -> Path:
    """``<base>/formations/<role>_tier<n>_formations.json``"""
    return Path(base_path) / FORMATIONS_DIR / f"{role.value.lower()}_tier{tier.level}_formations.json"


def _read_formation_file(path: Path, role: Role, tier: Tier) -> List[Formation]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    formations = []
    for schema in _FILE_ADAPTER.validate_python(data):
        if schema.role != role or schema.tier != tier:
            raise FormationBankError(
                f"{path.name}: formation {schema.id} is {schema.role.value}/"
                f"{schema.tier.value}, expected {role.value}/{tier.value}"
            )
        formations.append(schema.to_formation())
    if not formations:
        raise FormationBankError(f"{path.name}: no formations")
    return formations


def load_from_files(
    base_path: Optional[Union[str, Path]] = None, seed: Optional[int] = None
) -> FormationBank:
    """
    Load every role/tier formation file under ``base_path``.

    All files must load; if any one is missing or invalid the whole load is
    abandoned and the mock bank for ``seed`` is returned instead.
    """
    base_path = Path(get_settings().data_path if base_path is None else base_path)
    formations: List[Formation] = []
    try:
        for role in Role:
            for tier in Tier:
                formations.extend(_read_formation_file(formation_file(base_path, role, tier), role, tier))
        bank = FormationBank(formations)
    except (OSError, ValueError, FormationError) as e:
        logger.warning(f"Falling back to mock formation bank: {e}")
        return create_mock_formation_bank(seed)

    logger.info(f"Loaded {len(bank)} formations from {base_path}")
    return bank


def save_to_files(bank: FormationBank, base_path: Union[str, Path]) -> List[str]:
    """Write the bank in the layout ``load_from_files`` reads; returns the paths."""
    paths = []
    for role in Role:
        for tier in Tier:
            path = formation_file(base_path, role, tier)
            path.parent.mkdir(parents=True, exist_ok=True)
            entries = [
                formation_to_schema(f).model_dump(mode="json")
                for f in bank.by_role[role]
                if f.tier == tier
            ]
            with open(path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2)
            paths.append(str(path))
    logger.info(f"Saved {len(bank)} formations to {base_path}")
    return paths
