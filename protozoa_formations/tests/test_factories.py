"""
Unit tests for the pattern factories: tier tables, role adjustments and
tier gating.

Run with: python -m pytest protozoa_formations/tests/test_factories.py -v
"""

import pytest

from protozoa_formations.errors import FormationConfigError
from protozoa_formations.models import PatternType, Rarity, Role, Tier
from protozoa_formations.patterns import (
    PATTERNS,
    SierpinskiShape,
    available_patterns,
    create_pattern,
)
from protozoa_formations.patterns.base import MIN_TIER_LEVEL
from protozoa_formations.patterns.circle import create_circle_formation
from protozoa_formations.patterns.cluster import create_cluster_formation
from protozoa_formations.patterns.grid import create_grid_formation
from protozoa_formations.patterns.mandelbrot import create_mandelbrot_formation
from protozoa_formations.patterns.sierpinski import create_sierpinski_formation
from protozoa_formations.patterns.spiral import create_spiral_formation
from protozoa_formations.patterns.tree import create_tree_formation
from protozoa_formations.patterns.web import create_web_formation

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _gated_combinations():
    for pattern_type, level in MIN_TIER_LEVEL.items():
        for tier in Tier:
            yield pattern_type, tier, tier.level >= level


# ===========================================================================
# Circle
# ===========================================================================


class TestCircleFactory:
    def test_core_tier_one_values(self):
        pattern = create_circle_formation(Role.CORE, Tier.TIER_1, Rarity.COMMON)
        params = pattern.parameters
        assert pattern.type == PatternType.CIRCLE
        assert params.radius == pytest.approx(4.0)
        assert params.count == 12
        assert params.jitter == pytest.approx(0.08)
        assert params.layers == 1

    def test_factory_is_pure(self):
        a = create_circle_formation(Role.CORE, Tier.TIER_1, Rarity.COMMON)
        b = create_circle_formation(Role.CORE, Tier.TIER_1, Rarity.COMMON)
        assert a == b

    def test_rarity_does_not_change_values(self):
        a = create_circle_formation(Role.DEFENSE, Tier.TIER_3, Rarity.COMMON)
        b = create_circle_formation(Role.DEFENSE, Tier.TIER_3, Rarity.MYTHIC)
        assert a == b

    def test_attack_floors_scaled_count(self):
        # 20 * 0.8 = 16
        pattern = create_circle_formation(Role.ATTACK, Tier.TIER_3)
        assert pattern.parameters.count == 16
        assert pattern.parameters.radius == pytest.approx(8.4)

    def test_defense_increases_count(self):
        # floor(28 * 1.2) = 33
        assert create_circle_formation(Role.DEFENSE, Tier.TIER_5).parameters.count == 33

    def test_tier_six_has_four_layers(self):
        assert create_circle_formation(Role.CONTROL, Tier.TIER_6).parameters.layers == 4

    def test_advisory_scalars(self):
        pattern = create_circle_formation(Role.CORE, Tier.TIER_1)
        assert (pattern.density, pattern.cohesion, pattern.flexibility) == (0.7, 0.8, 0.5)


# ===========================================================================
# Other families
# ===========================================================================


class TestFamilyAdjustments:
    def test_grid_attack_drops_a_layer(self):
        dims = create_grid_formation(Role.ATTACK, Tier.TIER_1).parameters.dimensions
        assert (dims.x, dims.y, dims.z) == (3, 3, 1)

    def test_grid_defense_widens(self):
        dims = create_grid_formation(Role.DEFENSE, Tier.TIER_3).parameters.dimensions
        assert (dims.x, dims.y, dims.z) == (5, 5, 2)

    def test_grid_control_adds_depth(self):
        dims = create_grid_formation(Role.CONTROL, Tier.TIER_6).parameters.dimensions
        assert dims.z == 4

    def test_spiral_defense_particles_floored(self):
        # floor(24 * 1.2) = 28
        assert create_spiral_formation(Role.DEFENSE, Tier.TIER_1).parameters.particles == 28

    def test_cluster_attack_keeps_two_clusters(self):
        params = create_cluster_formation(Role.ATTACK, Tier.TIER_2).parameters
        assert params.clusters == 2

    def test_web_attack_spoke_floor(self):
        assert create_web_formation(Role.ATTACK, Tier.TIER_3).parameters.spokes == 6

    def test_tree_control_level_cap(self):
        assert create_tree_formation(Role.CONTROL, Tier.TIER_6).parameters.branch_levels == 5
        assert create_tree_formation(Role.CONTROL, Tier.TIER_4).parameters.branch_levels == 4

    @pytest.mark.parametrize(
        "role,shape",
        [
            (Role.ATTACK, SierpinskiShape.TETRAHEDRON),
            (Role.DEFENSE, SierpinskiShape.CARPET),
            (Role.CORE, SierpinskiShape.TRIANGLE),
        ],
    )
    def test_sierpinski_role_shapes(self, role, shape):
        assert create_sierpinski_formation(role, Tier.TIER_5).parameters.shape == shape

    def test_sierpinski_control_iteration_cap(self):
        assert create_sierpinski_formation(Role.CONTROL, Tier.TIER_6).parameters.iterations == 5

    def test_mandelbrot_movement_is_3d(self):
        params = create_mandelbrot_formation(Role.MOVEMENT, Tier.TIER_6).parameters
        assert params.is_3d is True
        assert params.iterations == 30

    def test_mandelbrot_control_centre(self):
        params = create_mandelbrot_formation(Role.CONTROL, Tier.TIER_6).parameters
        assert (params.center_x, params.center_y, params.scale) == (-1.25, 0.0, 0.5)


# ===========================================================================
# Tier gating
# ===========================================================================


class TestTierGating:
    @pytest.mark.parametrize("pattern_type,tier,allowed", list(_gated_combinations()))
    def test_gate(self, pattern_type, tier, allowed):
        if allowed:
            pattern = create_pattern(pattern_type, Role.CORE, tier)
            assert pattern.type == pattern_type
        else:
            with pytest.raises(FormationConfigError):
                create_pattern(pattern_type, Role.CORE, tier)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            create_mandelbrot_formation(Role.CORE, Tier.TIER_5)

    def test_available_patterns_grow_with_tier(self):
        assert set(available_patterns(Tier.TIER_1)) == {
            PatternType.CIRCLE,
            PatternType.GRID,
            PatternType.SPIRAL,
            PatternType.SPHERE,
            PatternType.HELIX,
        }
        assert set(available_patterns(Tier.TIER_6)) == set(PatternType)

    def test_every_family_registered(self):
        assert set(PATTERNS) == set(PatternType)
        for pattern_type, family in PATTERNS.items():
            assert family.pattern_type == pattern_type
            assert family.min_tier.level == MIN_TIER_LEVEL[pattern_type]

    @pytest.mark.parametrize("role", list(Role))
    @pytest.mark.parametrize("pattern_type", list(PatternType))
    def test_all_roles_build_at_top_tier(self, pattern_type, role):
        pattern = create_pattern(pattern_type, role, Tier.TIER_6)
        assert pattern.type == pattern_type


class TestRarityMapping:
    def test_tier_rarity_round_trip(self):
        for tier in Tier:
            assert Tier.for_rarity(Rarity.for_tier(tier)) == tier

    def test_levels(self):
        assert [t.level for t in Tier] == [1, 2, 3, 4, 5, 6]
        assert Rarity.for_tier(Tier.TIER_6) == Rarity.MYTHIC
