"""
Tests for the formation bank: mock generation, lookups, file storage and
the fall back to the mock bank.

Run with: python -m pytest protozoa_formations/tests/test_bank.py -v
"""

import json
import logging

import pytest

from protozoa_formations.bank import (
    FormationBank,
    create_mock_formation_bank,
    formation_effect,
    formation_file,
    load_from_files,
    save_to_files,
)
from protozoa_formations.errors import FormationBankError
from protozoa_formations.models import PatternType, Rarity, Role, Tier
from protozoa_formations.patterns import create_pattern
from protozoa_formations.patterns.base import is_available
from protozoa_formations.schemas import FormationSchema, formation_to_schema

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def mock_bank():
    return create_mock_formation_bank(seed=42)


@pytest.fixture()
def saved_bank(tmp_path, mock_bank):
    save_to_files(mock_bank, tmp_path)
    return tmp_path


# ===========================================================================
# Mock bank
# ===========================================================================


class TestMockBank:
    def test_size(self, mock_bank):
        assert len(mock_bank) == 5 * 6 * 3

    def test_ids_unique(self, mock_bank):
        ids = [f.id for f in mock_bank]
        assert len(set(ids)) == len(ids)

    def test_per_role_counts(self, mock_bank):
        for role in Role:
            assert len(mock_bank.get_formations_by_role(role)) == 18
        assert mock_bank.roles() == list(Role)

    def test_gating_respected(self, mock_bank):
        for formation in mock_bank:
            assert is_available(formation.pattern.type, formation.tier)

    def test_rarity_matches_tier(self, mock_bank):
        for tier in Tier:
            rarity = Rarity.for_tier(tier)
            formations = mock_bank.get_formations_by_rarity(rarity)
            assert len(formations) == 15
            assert formations == mock_bank.get_formations_by_rarity(tier)
            for formation in formations:
                assert formation.rarity == rarity
                assert formation.name.endswith(rarity.value.title())

    def test_deterministic(self, mock_bank):
        assert create_mock_formation_bank(seed=42).formations == mock_bank.formations

    def test_seed_changes_choices(self, mock_bank):
        other = create_mock_formation_bank(seed=7)
        assert [f.name for f in other] != [f.name for f in mock_bank]

    def test_per_tier_override(self):
        assert len(create_mock_formation_bank(seed=1, per_tier=1)) == 30

    def test_default_seed_from_settings(self, monkeypatch):
        monkeypatch.setenv("PROTOZOA_DEFAULT_SEED", "42")
        assert create_mock_formation_bank().formations == create_mock_formation_bank(42).formations

    def test_lookup_by_id(self, mock_bank):
        formation = mock_bank.get_formation_by_id("formation-CORE-TIER_1-0")
        assert formation is not None
        assert formation.role == Role.CORE
        assert mock_bank.get_formation_by_id("missing") is None

    def test_effect_scaling(self):
        effect = formation_effect(Role.MOVEMENT, Tier.TIER_6)
        assert effect.type == "speed"
        assert effect.strength == pytest.approx(4.5)
        assert effect.radius == pytest.approx(5.0 * 1.5 * 2.0)
        assert effect.conditions["role_bonus"] == pytest.approx(0.6)

    def test_effect_conditions_read_only(self, mock_bank):
        effect = mock_bank.formations[0].effect
        with pytest.raises(TypeError):
            effect.conditions["role"] = "ATTACK"
        assert effect.to_dict()["conditions"]["role"] == "CORE"


class TestFormationBank:
    def test_duplicate_id_raises(self, mock_bank):
        first = mock_bank.formations[0]
        with pytest.raises(FormationBankError):
            FormationBank([first, first])

    def test_views_are_read_only(self, mock_bank):
        with pytest.raises(TypeError):
            mock_bank.by_id["x"] = mock_bank.formations[0]

    def test_with_formations_returns_new_bank(self, mock_bank):
        smaller = mock_bank.with_formations(mock_bank.formations[:5])
        assert len(smaller) == 5
        assert len(mock_bank) == 90

    def test_empty_bank(self):
        bank = FormationBank()
        assert len(bank) == 0
        assert bank.roles() == []
        assert bank.get_formations_by_role(Role.CORE) == []
        assert repr(bank) == "FormationBank(0 formations)"


# ===========================================================================
# File storage
# ===========================================================================


class TestFileStorage:
    def test_file_naming(self, tmp_path):
        path = formation_file(tmp_path, Role.DEFENSE, Tier.TIER_4)
        assert path == tmp_path / "formations" / "defense_tier4_formations.json"

    def test_save_writes_every_file(self, tmp_path, mock_bank):
        paths = save_to_files(mock_bank, tmp_path)
        assert len(paths) == 30
        with open(formation_file(tmp_path, Role.CORE, Tier.TIER_2)) as f:
            assert len(json.load(f)) == 3

    def test_round_trip(self, saved_bank, mock_bank):
        loaded = load_from_files(saved_bank, seed=999)
        assert loaded.formations == mock_bank.formations

    def test_missing_files_fall_back(self, tmp_path, caplog, mock_bank):
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            bank = load_from_files(tmp_path / "nowhere", seed=42)
        assert bank.formations == mock_bank.formations
        assert "Falling back to mock formation bank" in caplog.text

    def test_empty_file_falls_back(self, saved_bank, caplog, mock_bank):
        formation_file(saved_bank, Role.CORE, Tier.TIER_1).write_text("[]")
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            bank = load_from_files(saved_bank, seed=42)
        assert bank.formations == mock_bank.formations
        assert "no formations" in caplog.text

    def test_non_finite_parameter_falls_back(self, saved_bank, caplog, mock_bank):
        path = formation_file(saved_bank, Role.CORE, Tier.TIER_1)
        entries = json.loads(path.read_text())
        parameters = entries[0]["pattern"]["parameters"]
        key = next(k for k, v in parameters.items() if type(v) in (int, float))
        parameters[key] = 1e309
        path.write_text(json.dumps(entries))
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            bank = load_from_files(saved_bank, seed=42)
        assert bank.formations == mock_bank.formations
        assert "Falling back" in caplog.text

    def test_malformed_json_falls_back(self, saved_bank, caplog, mock_bank):
        formation_file(saved_bank, Role.ATTACK, Tier.TIER_3).write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            bank = load_from_files(saved_bank, seed=42)
        assert bank.formations == mock_bank.formations
        assert "Falling back" in caplog.text

    def test_gated_pattern_falls_back(self, saved_bank, caplog):
        path = formation_file(saved_bank, Role.CORE, Tier.TIER_1)
        entries = json.loads(path.read_text())
        entries[0]["pattern"]["type"] = PatternType.MANDELBROT.value
        path.write_text(json.dumps(entries))
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            bank = load_from_files(saved_bank, seed=5)
        assert bank.formations == create_mock_formation_bank(seed=5).formations
        assert "require tier" in caplog.text

    def test_role_mismatch_falls_back(self, saved_bank, caplog):
        path = formation_file(saved_bank, Role.CORE, Tier.TIER_1)
        entries = json.loads(path.read_text())
        entries[0]["role"] = Role.ATTACK.value
        path.write_text(json.dumps(entries))
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            load_from_files(saved_bank, seed=5)
        assert "expected CORE/TIER_1" in caplog.text

    def test_duplicate_ids_across_files_fall_back(self, saved_bank, caplog):
        source = json.loads(formation_file(saved_bank, Role.CORE, Tier.TIER_1).read_text())
        target = formation_file(saved_bank, Role.CORE, Tier.TIER_2)
        entries = json.loads(target.read_text())
        entries[0]["id"] = source[0]["id"]
        target.write_text(json.dumps(entries))
        with caplog.at_level(logging.WARNING, logger="protozoa_formations.bank"):
            load_from_files(saved_bank, seed=5)
        assert "Duplicate formation id" in caplog.text


# ===========================================================================
# Schemas
# ===========================================================================


class TestSchemas:
    def test_schema_round_trip(self, mock_bank):
        for formation in mock_bank:
            assert formation_to_schema(formation).to_formation() == formation

    def test_parameters_validated(self, mock_bank):
        data = formation_to_schema(mock_bank.formations[0]).model_dump(mode="json")
        data["pattern"]["parameters"]["radius"] = "wide"
        schema = FormationSchema.model_validate(data)
        with pytest.raises(ValueError):
            schema.to_formation()

    def test_scalars_bounded(self):
        pattern = create_pattern(PatternType.CIRCLE, Role.CORE, Tier.TIER_1)
        data = {
            "id": "formation-x",
            "name": "X",
            "role": "CORE",
            "tier": "TIER_1",
            "pattern": dict(pattern.to_dict(), density=1.5),
            "effect": {"type": "stability"},
        }
        with pytest.raises(ValueError):
            FormationSchema.model_validate(data)
