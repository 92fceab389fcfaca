"""Tests for CLI module."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Generator

import pandas as pd
import pytest
from loguru import logger
from typer.testing import CliRunner

from volley_ratings.cli import app
from volley_ratings.config import Settings, reset_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_settings(test_settings: Settings) -> Generator[Settings, None, None]:
    """Point CLI logging at a temp directory and drop sinks afterwards."""
    yield test_settings
    logger.remove()


@pytest.fixture
def write_json(tmp_path: Path):
    """Write records to a JSON file and return its path."""

    def _write(records: Any, name: str = "input.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(records))
        return path

    return _write


class TestMainApp:
    """Tests for main CLI app."""

    def test_help_shows_all_commands(self) -> None:
        """Help should list all commands and groups."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "rate" in result.stdout
        assert "awards" in result.stdout
        assert "trends" in result.stdout
        assert "takeaways" in result.stdout

    def test_version_flag(self) -> None:
        """--version should show version and exit."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_short_version_flag(self) -> None:
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_verbose_flag(self) -> None:
        result = runner.invoke(app, ["--verbose", "rate", "--help"])

        assert result.exit_code == 0

    def test_creates_log_directory(self, test_settings: Settings, stat_file: Path) -> None:
        runner.invoke(app, ["rate", "game", str(stat_file)])

        assert test_settings.log_dir_obj.exists()


class TestRateCommands:
    """Tests for rate subcommands."""

    def test_rate_help(self) -> None:
        result = runner.invoke(app, ["rate", "--help"])

        assert result.exit_code == 0
        assert "game" in result.stdout
        assert "player" in result.stdout
        assert "team" in result.stdout

    def test_rate_game(self, stat_file: Path) -> None:
        result = runner.invoke(
            app, ["rate", "game", str(stat_file), "--position", "outside_hitter", "--tier", "6"]
        )

        assert result.exit_code == 0
        assert "Game Ratings" in result.stdout
        assert "p-1" in result.stdout
        assert "p-2" in result.stdout

    def test_rate_game_from_csv(self, tmp_path: Path, stat_line_records: list[dict]) -> None:
        path = tmp_path / "match.csv"
        pd.DataFrame(stat_line_records).to_csv(path, index=False)

        result = runner.invoke(app, ["rate", "game", str(path), "-p", "libero"])

        assert result.exit_code == 0
        assert "p-2" in result.stdout

    def test_rate_game_unknown_position(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["rate", "game", str(stat_file), "-p", "striker"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_rate_game_invalid_tier(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["rate", "game", str(stat_file), "--tier", "12"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_rate_player(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["rate", "player", str(stat_file), "-p", "outside_hitter"])

        assert result.exit_code == 0
        assert "Overall" in result.stdout
        assert "provisional" in result.stdout
        assert "attack" in result.stdout

    def test_rate_team(self, write_json) -> None:
        path = write_json(
            [
                {"kills": 42, "attack_errors": 10, "attack_attempts": 100, "serve_attempts": 90},
                {"kills": 38, "attack_errors": 14, "attack_attempts": 110, "serve_attempts": 95},
            ]
        )

        result = runner.invoke(app, ["rate", "team", str(path)])

        assert result.exit_code == 0
        assert "Team Rating" in result.stdout
        assert "reception" in result.stdout


class TestInputHandling:
    """Tests for stat file loading."""

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["rate", "game", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_json_must_be_list(self, write_json) -> None:
        path = write_json({"kills": 3})

        result = runner.invoke(app, ["rate", "game", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_unknown_field(self, write_json) -> None:
        path = write_json([{"kils": 3}])

        result = runner.invoke(app, ["rate", "game", str(path)])

        assert result.exit_code == 1
        assert "kils" in result.stdout

    def test_strict_policy_rejects_bad_line(self, write_json) -> None:
        path = write_json([{"player_id": "p-1", "kills": 5, "attack_attempts": 2}])

        result = runner.invoke(app, ["rate", "game", str(path)])

        assert result.exit_code == 1
        assert "Invalid stat line" in result.stdout

    def test_clamp_policy_repairs_bad_line(
        self, write_json, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("STAT_VALIDATION_POLICY", "clamp")
        reset_settings()
        path = write_json([{"player_id": "p-1", "kills": 5, "attack_attempts": 2}])

        result = runner.invoke(app, ["rate", "game", str(path)])

        assert result.exit_code == 0
        assert "p-1" in result.stdout


class TestAwardCommands:
    """Tests for awards subcommands."""

    def test_awards_match(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["awards", "match", str(stat_file)])

        assert result.exit_code == 0
        assert "mvp" in result.stdout
        assert "top_passer" in result.stdout

    def test_awards_season(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["awards", "season", str(stat_file)])

        assert result.exit_code == 0
        assert "mvp" in result.stdout
        assert "top_attacker" in result.stdout

    def test_awards_require_player_ids(self, write_json) -> None:
        path = write_json([{"kills": 3, "attack_attempts": 5}])

        result = runner.invoke(app, ["awards", "match", str(path)])

        assert result.exit_code == 1
        assert "player_id" in result.stdout

    def test_no_eligible_players(self, write_json) -> None:
        path = write_json([{"player_id": "p-1"}])

        result = runner.invoke(app, ["awards", "match", str(path)])

        assert result.exit_code == 0
        assert "No eligible players" in result.stdout


class TestAnalysisCommands:
    """Tests for trends and takeaways commands."""

    def test_trends(self, write_json) -> None:
        path = write_json(
            [
                {"kills": 12, "attack_attempts": 20},
                {"kills": 11, "attack_attempts": 20},
                {"kills": 4, "attack_attempts": 20},
                {"kills": 5, "attack_attempts": 20},
            ]
        )

        result = runner.invoke(app, ["trends", str(path), "--window", "2"])

        assert result.exit_code == 0
        assert "kill_pct" in result.stdout
        assert "up" in result.stdout

    def test_trends_invalid_window(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["trends", str(stat_file), "--window", "0"])

        assert result.exit_code == 1
        assert "window_size" in result.stdout

    def test_takeaways_sweep(self, stat_file: Path) -> None:
        result = runner.invoke(app, ["takeaways", str(stat_file), "--won", "3", "--lost", "0"])

        assert result.exit_code == 0
        assert "Clean sweep" in result.stdout
        assert "Strong passing" in result.stdout

    def test_takeaways_none(self, write_json) -> None:
        path = write_json([{"kills": 5, "attack_attempts": 20}])

        result = runner.invoke(app, ["takeaways", str(path)])

        assert result.exit_code == 0
        assert "No takeaways" in result.stdout
