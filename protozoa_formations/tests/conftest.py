"""Shared pytest fixtures for the formation engine test suite."""

from __future__ import annotations

import pytest

from protozoa_formations.config import get_settings
from protozoa_formations.models import Formation, FormationEffect, PatternType, Role, Tier
from protozoa_formations.patterns import create_pattern
from protozoa_formations.transitions import Particle, ParticleGroup
from protozoa_formations.vectors import Vector3


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Drop the cached Settings so env overrides in one test never leak."""
    for name in ("PROTOZOA_DEFAULT_SEED", "PROTOZOA_DATA_PATH", "PROTOZOA_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_formation(pattern, formation_id="formation-test-0", role=Role.CORE,
                   tier=Tier.TIER_1, center=None):
    return Formation(
        id=formation_id,
        name="Test Formation",
        role=role,
        tier=tier,
        pattern=pattern,
        effect=FormationEffect(type="stability", strength=1.5, radius=4.0),
        center=center or Vector3(),
    )


def make_group(count, role=Role.CORE):
    return ParticleGroup(
        id="group-0",
        role=role,
        particles=[Particle(id=f"p{i}", position=Vector3(float(i), 0.0, 0.0)) for i in range(count)],
    )


@pytest.fixture()
def circle_formation():
    pattern = create_pattern(PatternType.CIRCLE, Role.CORE, Tier.TIER_1)
    return make_formation(pattern.with_parameters(jitter=0.0), "formation-circle-0")


@pytest.fixture()
def sphere_formation():
    pattern = create_pattern(PatternType.SPHERE, Role.DEFENSE, Tier.TIER_1)
    return make_formation(pattern.with_parameters(jitter=0.0), "formation-sphere-0")


@pytest.fixture()
def formation_factory():
    return make_formation


@pytest.fixture()
def group_factory():
    return make_group
