"""Shared pytest fixtures for rating engine tests.

This module contains fixtures used across multiple test modules:
- Configuration fixtures (test settings)
- Sample stat line fixtures (single player, match roster, season)

Example:
    def test_something(attacker_line, match_lines):
        # attacker_line is a single StatLine
        # match_lines is every player's StatLine for one match
        pass
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Generator

import pytest

from volley_ratings.config import Settings, reset_settings
from volley_ratings.types import StatLine


# =============================================================================
# Paths
# =============================================================================


@pytest.fixture
def tmp_log_dir(tmp_path: Path) -> Path:
    """Create and return temporary log directory."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings(
    tmp_log_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Provide test settings with a temporary log directory.

    Automatically resets settings singleton after test.
    """
    monkeypatch.setenv("LOG_DIR", str(tmp_log_dir))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    reset_settings()
    from volley_ratings.config import get_settings

    settings = get_settings()
    settings.ensure_directories()

    yield settings

    reset_settings()


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def attacker_line() -> StatLine:
    """Outside hitter with 10 kills on 20 swings."""
    return StatLine(
        kills=10,
        attack_errors=2,
        attack_attempts=20,
        aces=1,
        serve_attempts=5,
        digs=8,
        pass_attempts=10,
        pass_sum=24,
        player_id="p-1",
    )


@pytest.fixture
def libero_line() -> StatLine:
    """Libero with heavy passing and digging volume."""
    return StatLine(
        digs=14,
        ball_handling_errors=1,
        pass_attempts=25,
        pass_sum=60,
        set_attempts=6,
        set_sum=12,
        serve_attempts=8,
        service_errors=1,
        player_id="p-2",
    )


@pytest.fixture
def middle_line() -> StatLine:
    """Middle blocker who blocks a lot and attacks quickly."""
    return StatLine(
        kills=5,
        attack_errors=1,
        attack_attempts=12,
        block_solos=2,
        block_assists=4,
        block_touches=7,
        serve_attempts=6,
        service_errors=2,
        aces=2,
        player_id="p-3",
    )


@pytest.fixture
def match_lines(attacker_line: StatLine, libero_line: StatLine, middle_line: StatLine) -> list[StatLine]:
    """Every player's stat line for one match."""
    return [attacker_line, libero_line, middle_line]


@pytest.fixture
def team_match_line() -> StatLine:
    """Team totals for a 3-1 win."""
    return StatLine(
        kills=42,
        attack_errors=10,
        attack_attempts=100,
        aces=9,
        service_errors=7,
        serve_attempts=100,
        pass_attempts=40,
        pass_sum=90,
        digs=55,
    )


@pytest.fixture
def stat_line_records() -> list[dict[str, Any]]:
    """Plain dictionaries as stored in a JSON stat file."""
    return [
        {
            "player_id": "p-1",
            "kills": 10,
            "attack_errors": 2,
            "attack_attempts": 20,
            "aces": 1,
            "serve_attempts": 5,
            "digs": 8,
            "pass_attempts": 10,
            "pass_sum": 24,
        },
        {
            "player_id": "p-2",
            "digs": 14,
            "pass_attempts": 25,
            "pass_sum": 60,
            "serve_attempts": 8,
            "service_errors": 1,
        },
    ]


@pytest.fixture
def stat_file(tmp_path: Path, stat_line_records: list[dict[str, Any]]) -> Path:
    """JSON file holding the sample stat line records."""
    path = tmp_path / "match.json"
    path.write_text(json.dumps(stat_line_records))
    return path


# =============================================================================
# Marker Helpers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
