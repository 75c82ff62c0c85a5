"""
Tests for the transition engine: target assignment, easing, completion and
blending.

Run with: python -m pytest protozoa_formations/tests/test_transitions.py -v
"""

import pytest

from protozoa_formations.models import PatternType, Role, Tier
from protozoa_formations.patterns import create_pattern, generate_sized_positions
from protozoa_formations.transitions import (
    TRANSITION_KEY,
    TransitionState,
    apply_formation,
    blend_formations,
    formation_positions,
    formation_seed,
    update_formation_transitions,
)
from protozoa_formations.vectors import Vector3, smoothstep


def _assert_close(a, b):
    assert a.x == pytest.approx(b.x)
    assert a.y == pytest.approx(b.y)
    assert a.z == pytest.approx(b.z)


# ===========================================================================
# TransitionState
# ===========================================================================


class TestTransitionState:
    def test_eased_midpoint(self):
        state = TransitionState(Vector3(0, 0, 0), Vector3(10, 0, 0), 100.0, 2.0)
        assert state.end_time == 102.0
        _assert_close(state.position_at(101.0), Vector3(5.0, 0.0, 0.0))

    def test_ease_in_is_slower_than_linear(self):
        state = TransitionState(Vector3(0, 0, 0), Vector3(10, 0, 0), 0.0, 1.0)
        assert state.position_at(0.25).x < 2.5

    def test_before_start_holds_start(self):
        state = TransitionState(Vector3(1, 2, 3), Vector3(10, 0, 0), 100.0, 2.0)
        assert state.position_at(50.0) == Vector3(1, 2, 3)

    def test_after_end_is_exact(self):
        end = Vector3(0.1, 0.2, 0.3)
        state = TransitionState(Vector3(9, 9, 9), end, 0.0, 1.0)
        assert state.position_at(5.0) == end

    def test_epoch_clock_progress(self):
        start = 1_700_000_000.0
        state = TransitionState(Vector3(0, 0, 0), Vector3(10, 0, 0), start, 0.1)
        position = state.position_at(start + 0.0625)
        assert position.x == pytest.approx(10.0 * smoothstep(0.0, 1.0, 0.625), rel=1e-12)


# ===========================================================================
# apply_formation / update_formation_transitions
# ===========================================================================


class TestApplyFormation:
    def test_targets_and_state_assigned(self, circle_formation, group_factory):
        group = group_factory(12)
        apply_formation(group, circle_formation, transition_time=2.0, now=100.0)
        expected = formation_positions(circle_formation, 12)
        for particle, target in zip(group.particles, expected):
            assert particle.target_position == target
            state = particle.transition
            assert state.start_time == 100.0
            assert state.duration == 2.0
            assert state.end_position == target

    def test_positions_do_not_move_until_update(self, circle_formation, group_factory):
        group = group_factory(4)
        apply_formation(group, circle_formation, transition_time=2.0, now=100.0)
        assert [p.position for p in group.particles] == [Vector3(float(i), 0, 0) for i in range(4)]

    def test_halfway_update(self, circle_formation, group_factory):
        group = group_factory(12)
        starts = [p.position for p in group.particles]
        apply_formation(group, circle_formation, transition_time=2.0, now=100.0)
        update_formation_transitions(group, 101.0)
        for start, particle in zip(starts, group.particles):
            _assert_close(particle.position, start.lerp(particle.target_position, 0.5))
            assert TRANSITION_KEY in particle.behavior_params

    def test_completion_pins_and_clears(self, circle_formation, group_factory):
        group = group_factory(12)
        apply_formation(group, circle_formation, transition_time=2.0, now=100.0)
        update_formation_transitions(group, 102.0)
        for particle in group.particles:
            assert particle.position == particle.target_position
            assert particle.transition is None
        # further updates are no-ops
        update_formation_transitions(group, 500.0)
        assert all(p.position == p.target_position for p in group.particles)

    @pytest.mark.parametrize("transition_time", [0.0, -1.0])
    def test_non_positive_time_snaps(self, sphere_formation, group_factory, transition_time):
        group = group_factory(10)
        apply_formation(group, sphere_formation, transition_time=transition_time, now=0.0)
        for particle in group.particles:
            assert particle.position == particle.target_position
            assert particle.transition is None

    def test_default_time_from_settings(self, monkeypatch, circle_formation, group_factory):
        monkeypatch.setenv("PROTOZOA_DEFAULT_TRANSITION_TIME", "3.5")
        group = group_factory(2)
        apply_formation(group, circle_formation, now=10.0)
        assert group.particles[0].transition.duration == 3.5

    def test_new_formation_overwrites_in_flight(
        self, circle_formation, sphere_formation, group_factory
    ):
        group = group_factory(8)
        apply_formation(group, circle_formation, transition_time=2.0, now=100.0)
        update_formation_transitions(group, 101.0)
        midway = [p.position for p in group.particles]
        apply_formation(group, sphere_formation, transition_time=4.0, now=101.0)
        for start, particle in zip(midway, group.particles):
            state = particle.transition
            assert state.start_position == start
            assert state.start_time == 101.0
            assert state.end_position == particle.target_position

    def test_extra_particles_keep_state(self, formation_factory, group_factory):
        pattern = create_pattern(PatternType.SPIRAL, Role.CORE, Tier.TIER_1)
        formation = formation_factory(pattern.with_parameters(particles=3), "formation-spiral-0")
        group = group_factory(5)
        apply_formation(group, formation, transition_time=1.0, now=0.0)
        assert all(p.target_position is not None for p in group.particles[:3])
        for particle in group.particles[3:]:
            assert particle.target_position is None
            assert particle.transition is None

    def test_centre_offsets_targets(self, formation_factory, group_factory):
        pattern = create_pattern(PatternType.CIRCLE, Role.CORE, Tier.TIER_1)
        centre = Vector3(100.0, 50.0, -20.0)
        formation = formation_factory(pattern, "formation-centred", center=centre)
        group = group_factory(6)
        apply_formation(group, formation, transition_time=0.0)
        raw = generate_sized_positions(pattern, formation_seed(formation), 6)
        for particle, point in zip(group.particles, raw):
            assert particle.position == point + centre

    def test_empty_group(self, circle_formation, group_factory):
        group = apply_formation(group_factory(0), circle_formation, transition_time=1.0)
        assert group.count == 0


# ===========================================================================
# Seeds
# ===========================================================================


class TestFormationSeed:
    def test_stable_and_32_bit(self, circle_formation):
        seed = formation_seed(circle_formation)
        assert seed == formation_seed(circle_formation)
        assert 0 <= seed <= 0xFFFFFFFF

    def test_distinct_ids(self, formation_factory):
        pattern = create_pattern(PatternType.CIRCLE, Role.CORE, Tier.TIER_1)
        a = formation_factory(pattern, "formation-a")
        b = formation_factory(pattern, "formation-b")
        assert formation_seed(a) != formation_seed(b)

    def test_explicit_seed_overrides(self, formation_factory):
        pattern = create_pattern(PatternType.CIRCLE, Role.CORE, Tier.TIER_1)
        formation = formation_factory(pattern, "formation-jittered")
        default = formation_positions(formation, 5)
        assert formation_positions(formation, 5, seed=formation_seed(formation)) == default
        assert formation_positions(formation, 5, seed=1) != default


# ===========================================================================
# Blending
# ===========================================================================


class TestBlendFormations:
    def test_factor_zero_and_one(self, circle_formation, sphere_formation, group_factory):
        group = group_factory(10)
        blend_formations(group, circle_formation, sphere_formation, 0.0, transition_time=0.0, seed=3)
        assert [p.position for p in group.particles] == formation_positions(circle_formation, 10, 3)
        blend_formations(group, circle_formation, sphere_formation, 1.0, transition_time=0.0, seed=3)
        assert [p.position for p in group.particles] == formation_positions(sphere_formation, 10, 3)

    def test_factor_clamped(self, circle_formation, sphere_formation, group_factory):
        high = group_factory(10)
        blend_formations(high, circle_formation, sphere_formation, 2.0, transition_time=0.0, seed=3)
        assert [p.position for p in high.particles] == formation_positions(sphere_formation, 10, 3)
        low = group_factory(10)
        blend_formations(low, circle_formation, sphere_formation, -1.0, transition_time=0.0, seed=3)
        assert [p.position for p in low.particles] == formation_positions(circle_formation, 10, 3)

    def test_midpoint(self, circle_formation, sphere_formation, group_factory):
        group = group_factory(10)
        blend_formations(group, circle_formation, sphere_formation, 0.5, transition_time=0.0, seed=3)
        a = formation_positions(circle_formation, 10, 3)
        b = formation_positions(sphere_formation, 10, 3)
        for particle, pa, pb in zip(group.particles, a, b):
            _assert_close(particle.position, pa.lerp(pb, 0.5))

    def test_blend_starts_transition(self, circle_formation, sphere_formation, group_factory):
        group = group_factory(4)
        blend_formations(group, circle_formation, sphere_formation, 0.3,
                         transition_time=1.5, now=20.0)
        assert all(p.transition.end_time == 21.5 for p in group.particles)
