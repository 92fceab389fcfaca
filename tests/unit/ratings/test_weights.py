"""Tests for rating weight configuration."""
from __future__ import annotations

import json
import math
from pathlib import Path

import pytest

from volley_ratings.config import Settings
from volley_ratings.ratings.weights import (
    DEFAULT_POSITION_WEIGHTS,
    DEFAULT_RATING_CONFIG,
    DEFAULT_TEAM_WEIGHTS,
    RatingConfig,
    load_weight_overrides,
)
from volley_ratings.types import (
    ConfigurationError,
    PlayerSkill,
    Position,
    TeamSkill,
    UnknownPositionError,
)


class TestDefaultWeights:
    """Tests for the default weight tables."""

    @pytest.mark.parametrize("position", list(Position))
    def test_position_vectors_sum_to_one(self, position: Position) -> None:
        vector = DEFAULT_POSITION_WEIGHTS[position]

        assert set(vector) == set(PlayerSkill)
        assert math.fsum(vector.values()) == pytest.approx(1.0)

    def test_team_vector_sums_to_one(self) -> None:
        assert set(DEFAULT_TEAM_WEIGHTS) == set(TeamSkill)
        assert math.fsum(DEFAULT_TEAM_WEIGHTS.values()) == pytest.approx(1.0)

    def test_libero_ignores_attack(self) -> None:
        assert DEFAULT_RATING_CONFIG.weights_for("libero")[PlayerSkill.ATTACK] == 0.0


class TestRatingConfig:
    """Tests for RatingConfig."""

    def test_weights_for_parses_labels(self) -> None:
        weights = DEFAULT_RATING_CONFIG.weights_for("Middle Blocker")

        assert weights[PlayerSkill.BLOCK] == 0.30

    def test_weights_for_unknown_position(self) -> None:
        with pytest.raises(UnknownPositionError):
            DEFAULT_RATING_CONFIG.weights_for("striker")

    def test_tier_multiplier(self) -> None:
        config = RatingConfig()

        assert config.tier_multiplier(5) == pytest.approx(1.0)
        assert config.tier_multiplier(9) == pytest.approx(1.2)
        assert config.tier_multiplier(1) == pytest.approx(0.8)

    def test_tables_are_read_only(self) -> None:
        """A shared config should not be editable in place."""
        with pytest.raises(TypeError):
            DEFAULT_RATING_CONFIG.team_weights[TeamSkill.ATTACK] = 1.0  # type: ignore[index]

    def test_rejects_vector_not_summing_to_one(self) -> None:
        team = dict(DEFAULT_TEAM_WEIGHTS)
        team[TeamSkill.ATTACK] = 0.5

        with pytest.raises(ConfigurationError, match="sum to"):
            RatingConfig(team_weights=team)

    def test_rejects_missing_skill(self) -> None:
        positions = {p: dict(v) for p, v in DEFAULT_POSITION_WEIGHTS.items()}
        del positions[Position.SETTER][PlayerSkill.MENTAL]

        with pytest.raises(ConfigurationError, match="missing: mental"):
            RatingConfig(position_weights=positions)

    def test_rejects_missing_position(self) -> None:
        positions = {p: v for p, v in DEFAULT_POSITION_WEIGHTS.items() if p != Position.LIBERO}

        with pytest.raises(ConfigurationError, match="libero"):
            RatingConfig(position_weights=positions)

    def test_rejects_negative_weight(self) -> None:
        team = {
            TeamSkill.ATTACK: 1.2,
            TeamSkill.SERVE: -0.2,
            TeamSkill.RECEPTION: 0.0,
            TeamSkill.CONSISTENCY: 0.0,
        }

        with pytest.raises(ConfigurationError, match="negative"):
            RatingConfig(team_weights=team)

    @pytest.mark.parametrize(
        "changes",
        [
            {"provisional_threshold": 0},
            {"midpoint_tier": 0},
            {"tier_step": 0.25},
            {"tier_step": -0.01},
            {"recency_decay_games": 0},
            {"validation_policy": "lenient"},
        ],
    )
    def test_rejects_bad_scalars(self, changes: dict) -> None:
        with pytest.raises(ConfigurationError):
            DEFAULT_RATING_CONFIG.with_overrides(**changes)

    def test_hashable(self) -> None:
        cache = {DEFAULT_RATING_CONFIG: "default"}

        assert cache[RatingConfig()] == "default"
        assert hash(RatingConfig()) == hash(DEFAULT_RATING_CONFIG)

    def test_hash_follows_fields(self) -> None:
        changed = DEFAULT_RATING_CONFIG.with_overrides(tier_step=0.04)

        assert changed != DEFAULT_RATING_CONFIG
        assert changed not in {DEFAULT_RATING_CONFIG}

    def test_with_overrides_returns_copy(self) -> None:
        config = DEFAULT_RATING_CONFIG.with_overrides(provisional_threshold=5)

        assert config.provisional_threshold == 5
        assert DEFAULT_RATING_CONFIG.provisional_threshold == 3


class TestFromSettings:
    """Tests for building a config from settings."""

    def test_copies_scalars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATING_PROVISIONAL_THRESHOLD", "4")
        monkeypatch.setenv("RATING_TIER_STEP", "0.08")
        monkeypatch.setenv("STAT_VALIDATION_POLICY", "clamp")

        config = RatingConfig.from_settings(Settings())

        assert config.provisional_threshold == 4
        assert config.tier_step == 0.08
        assert config.validation_policy == "clamp"

    def test_reads_weights_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "weights.json"
        path.write_text(
            json.dumps(
                {
                    "team": {
                        "attack": 0.25,
                        "serve": 0.25,
                        "reception": 0.25,
                        "consistency": 0.25,
                    }
                }
            )
        )
        monkeypatch.setenv("RATING_WEIGHTS_PATH", str(path))

        config = RatingConfig.from_settings(Settings())

        assert config.team_weights[TeamSkill.ATTACK] == 0.25
        assert config.weights_for("setter") == DEFAULT_POSITION_WEIGHTS[Position.SETTER]


class TestLoadWeightOverrides:
    """Tests for load_weight_overrides."""

    def test_overrides_one_position(self, tmp_path: Path) -> None:
        path = tmp_path / "weights.json"
        vector = {skill.value: 0.0 for skill in PlayerSkill}
        vector["dig"] = 1.0
        path.write_text(json.dumps({"positions": {"Defensive Specialist": vector}}))

        positions, team = load_weight_overrides(path)

        assert positions[Position.DEFENSIVE_SPECIALIST][PlayerSkill.DIG] == 1.0
        assert positions[Position.LIBERO] == DEFAULT_POSITION_WEIGHTS[Position.LIBERO]
        assert team == DEFAULT_TEAM_WEIGHTS

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot load weights"):
            load_weight_overrides(tmp_path / "missing.json")

    def test_unknown_skill(self, tmp_path: Path) -> None:
        path = tmp_path / "weights.json"
        path.write_text(json.dumps({"team": {"blocking": 1.0}}))

        with pytest.raises(ConfigurationError, match="Invalid weights"):
            load_weight_overrides(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "weights.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_weight_overrides(path)
