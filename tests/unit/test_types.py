"""Tests for type definitions."""
from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from volley_ratings.types import (
    COUNT_FIELDS,
    Award,
    AwardType,
    InvalidStatLineError,
    MatchOutcome,
    Position,
    RatingEngineError,
    StatLine,
    UnknownAwardTypeError,
    UnknownPositionError,
)


class TestPosition:
    """Tests for Position parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("outside_hitter", Position.OUTSIDE_HITTER),
            ("Outside Hitter", Position.OUTSIDE_HITTER),
            ("middle-blocker", Position.MIDDLE_BLOCKER),
            (" LIBERO ", Position.LIBERO),
            (Position.SETTER, Position.SETTER),
        ],
    )
    def test_parse_accepts_labels(self, raw: str, expected: Position) -> None:
        """parse should accept enum members, snake_case and display labels."""
        assert Position.parse(raw) is expected

    def test_parse_most_improved(self) -> None:
        assert AwardType.parse("Most Improved") is AwardType.MOST_IMPROVED

    def test_parse_unknown_raises(self) -> None:
        """Unknown positions should raise with the valid options listed."""
        with pytest.raises(UnknownPositionError, match="Expected one of"):
            Position.parse("point_guard")

    def test_unknown_position_is_engine_error(self) -> None:
        """UnknownPositionError should be catchable as the base error."""
        with pytest.raises(RatingEngineError):
            Position.parse("goalkeeper")


class TestAwardType:
    """Tests for AwardType parsing."""

    def test_parse_accepts_display_label(self) -> None:
        assert AwardType.parse("Top Attacker") is AwardType.TOP_ATTACKER

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(UnknownAwardTypeError):
            AwardType.parse("best_attendance")


class TestStatLine:
    """Tests for StatLine."""

    def test_defaults_are_zero(self) -> None:
        """Every count should default to zero."""
        line = StatLine()

        assert all(getattr(line, name) == 0 for name in COUNT_FIELDS)
        assert line.starting_rotation is None
        assert line.player_id is None
        assert not line.has_activity

    def test_is_immutable(self) -> None:
        """StatLine should be frozen."""
        line = StatLine(kills=3)

        with pytest.raises(dataclasses.FrozenInstanceError):
            line.kills = 4  # type: ignore[misc]

    def test_blocks_counts_assists_half(self) -> None:
        line = StatLine(block_solos=2, block_assists=3)

        assert line.blocks == 3.5

    def test_total_attempts(self) -> None:
        line = StatLine(attack_attempts=10, serve_attempts=5, pass_attempts=4, set_attempts=1)

        assert line.total_attempts == 20

    def test_digs_alone_count_as_activity(self) -> None:
        assert StatLine(digs=1).has_activity

    def test_from_dict_round_trip(self) -> None:
        """from_dict should accept the output of to_dict."""
        line = StatLine(kills=4, attack_attempts=9, starting_rotation=3, player_id="p-9")

        assert StatLine.from_dict(line.to_dict()) == line

    def test_from_dict_accepts_integer_floats(self) -> None:
        """Whole-number floats (e.g. from CSV) should be accepted."""
        line = StatLine.from_dict({"kills": 4.0, "attack_attempts": "9"})

        assert line.kills == 4
        assert line.attack_attempts == 9

    def test_from_dict_rejects_fractional_counts(self) -> None:
        with pytest.raises(InvalidStatLineError, match="kills must be an integer"):
            StatLine.from_dict({"kills": 2.5, "player_id": "p-1"})

    def test_from_dict_keeps_large_integers_exact(self) -> None:
        big = 2**53 + 1

        line = StatLine.from_dict({"digs": big, "kills": str(big)})

        assert line.digs == big
        assert line.kills == big

    @pytest.mark.parametrize("value", [True, False])
    def test_from_dict_rejects_booleans(self, value: bool) -> None:
        with pytest.raises(InvalidStatLineError, match="digs must be an integer"):
            StatLine.from_dict({"digs": value})

    def test_from_dict_accepts_numpy_integers(self) -> None:
        line = StatLine.from_dict({"kills": np.int64(6), "attack_attempts": np.int32(11)})

        assert line.kills == 6
        assert type(line.kills) is int
        assert line.attack_attempts == 11

    def test_from_dict_rejects_unknown_fields(self) -> None:
        with pytest.raises(InvalidStatLineError, match="unknown field"):
            StatLine.from_dict({"kils": 3})

    def test_from_dict_blank_optionals_become_none(self) -> None:
        line = StatLine.from_dict({"player_id": "", "starting_rotation": None})

        assert line.player_id is None
        assert line.starting_rotation is None


class TestInvalidStatLineError:
    """Tests for InvalidStatLineError."""

    def test_message_lists_violations(self) -> None:
        error = InvalidStatLineError(["kills is negative (-1)", "digs is negative (-2)"], "p-4")

        assert "p-4" in str(error)
        assert "kills is negative" in str(error)
        assert error.violations == ["kills is negative (-1)", "digs is negative (-2)"]

    def test_is_value_error(self) -> None:
        assert isinstance(InvalidStatLineError(["x"]), ValueError)


class TestMatchOutcome:
    """Tests for MatchOutcome."""

    def test_win(self) -> None:
        outcome = MatchOutcome(sets_won=3, sets_lost=1)

        assert outcome.won
        assert not outcome.lost
        assert not outcome.is_sweep

    def test_sweep(self) -> None:
        assert MatchOutcome(sets_won=3, sets_lost=0).is_sweep

    def test_loss(self) -> None:
        outcome = MatchOutcome(sets_won=2, sets_lost=3)

        assert outcome.lost
        assert not outcome.won


class TestAward:
    """Tests for Award."""

    def test_to_dict(self) -> None:
        award = Award(award_type=AwardType.MVP, player_id="p-1", award_value=24.5)

        assert award.to_dict() == {
            "award_type": "mvp",
            "player_id": "p-1",
            "award_value": 24.5,
        }
