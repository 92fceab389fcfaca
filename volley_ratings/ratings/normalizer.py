"""Stat line normalization and validation.

Every ratio used anywhere in the engine is computed here, from summed raw
counts. Single-game and multi-game paths both go through
``normalize_many`` so their formulas cannot drift apart, and aggregates are
never averages of per-game percentages.

Formulas:
    kill_pct    = (kills - attack_errors) / attack_attempts
    serve_pct   = (serve_attempts - service_errors) / serve_attempts
    pass_rating = pass_sum / pass_attempts
    set_rating  = set_sum / set_attempts
    blocks      = block_solos + 0.5 * block_assists

Each ratio is 0.0 when its denominator is 0.

Example:
    >>> from volley_ratings.ratings.normalizer import normalize
    >>> from volley_ratings.types import StatLine
    >>> metrics = normalize(StatLine(kills=10, attack_errors=2, attack_attempts=20))
    >>> metrics.kill_pct
    0.4
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from volley_ratings.logging import WARN, get_logger
from volley_ratings.types import (
    COUNT_FIELDS,
    DerivedMetrics,
    InvalidStatLineError,
    StatLine,
)

logger = get_logger(__name__)

# Pass and set quality are graded 0-3 per attempt
MAX_QUALITY_SCORE: int = 3
ROTATION_RANGE: range = range(1, 7)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for a zero denominator."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def combine_stat_lines(
    stat_lines: Iterable[StatLine],
    player_id: str | None = None,
) -> StatLine:
    """Sum raw counts across stat lines.

    Args:
        stat_lines: Lines to combine (e.g. every player in a match for team
            totals, or every match of a player for a season).
        player_id: Player id for the combined line.

    Returns:
        A stat line holding the summed counts. Starting rotation is dropped.
    """
    totals = dict.fromkeys(COUNT_FIELDS, 0)
    for line in stat_lines:
        for name in COUNT_FIELDS:
            totals[name] += getattr(line, name)
    return StatLine(**totals, player_id=player_id)


def _derive(totals: StatLine, games_played: int) -> DerivedMetrics:
    error_actions = totals.attack_attempts + totals.serve_attempts + totals.pass_attempts
    errors = totals.attack_errors + totals.service_errors + totals.ball_handling_errors
    blocks = totals.blocks

    return DerivedMetrics(
        games_played=games_played,
        totals=totals,
        kill_pct=safe_ratio(totals.kills - totals.attack_errors, totals.attack_attempts),
        serve_pct=safe_ratio(
            totals.serve_attempts - totals.service_errors, totals.serve_attempts
        ),
        pass_rating=safe_ratio(totals.pass_sum, totals.pass_attempts),
        set_rating=safe_ratio(totals.set_sum, totals.set_attempts),
        blocks=blocks,
        error_rate=safe_ratio(errors, error_actions),
        kills_per_game=safe_ratio(totals.kills, games_played),
        aces_per_game=safe_ratio(totals.aces, games_played),
        digs_per_game=safe_ratio(totals.digs, games_played),
        blocks_per_game=safe_ratio(blocks, games_played),
    )


def normalize_many(stat_lines: Sequence[StatLine]) -> DerivedMetrics:
    """Derive metrics from the summed counts of several games.

    Args:
        stat_lines: One stat line per game.

    Returns:
        DerivedMetrics with ``games_played == len(stat_lines)``. An empty
        sequence yields all-zero metrics.
    """
    player_ids = {line.player_id for line in stat_lines}
    player_id = player_ids.pop() if len(player_ids) == 1 else None
    return _derive(combine_stat_lines(stat_lines, player_id), len(stat_lines))


def normalize(stat_line: StatLine) -> DerivedMetrics:
    """Derive metrics from a single game's stat line. Never raises."""
    return normalize_many([stat_line])


# =============================================================================
# Validation
# =============================================================================


def find_violations(stat_line: StatLine) -> list[str]:
    """List every rule the stat line breaks (empty when valid)."""
    violations = [
        f"{name} is negative ({getattr(stat_line, name)})"
        for name in COUNT_FIELDS
        if getattr(stat_line, name) < 0
    ]

    s = stat_line
    if s.kills + s.attack_errors > s.attack_attempts:
        violations.append(
            f"kills + attack_errors ({s.kills + s.attack_errors}) exceed "
            f"attack_attempts ({s.attack_attempts})"
        )
    if s.aces + s.service_errors > s.serve_attempts:
        violations.append(
            f"aces + service_errors ({s.aces + s.service_errors}) exceed "
            f"serve_attempts ({s.serve_attempts})"
        )
    if s.set_errors > s.set_attempts:
        violations.append(
            f"set_errors ({s.set_errors}) exceed set_attempts ({s.set_attempts})"
        )
    if s.pass_sum > MAX_QUALITY_SCORE * s.pass_attempts:
        violations.append(
            f"pass_sum ({s.pass_sum}) exceeds {MAX_QUALITY_SCORE} x pass_attempts "
            f"({s.pass_attempts})"
        )
    if s.set_sum > MAX_QUALITY_SCORE * s.set_attempts:
        violations.append(
            f"set_sum ({s.set_sum}) exceeds {MAX_QUALITY_SCORE} x set_attempts "
            f"({s.set_attempts})"
        )
    if s.starting_rotation is not None and s.starting_rotation not in ROTATION_RANGE:
        violations.append(f"starting_rotation ({s.starting_rotation}) must be 1-6")
    return violations


def clamp_stat_line(stat_line: StatLine) -> StatLine:
    """Repair a malformed stat line.

    Negative counts become 0, attempts are raised to cover made actions plus
    errors, quality sums are capped at 3 per attempt and an out-of-range
    starting rotation is dropped.
    """
    counts = {name: max(0, getattr(stat_line, name)) for name in COUNT_FIELDS}

    counts["attack_attempts"] = max(
        counts["attack_attempts"], counts["kills"] + counts["attack_errors"]
    )
    counts["serve_attempts"] = max(
        counts["serve_attempts"], counts["aces"] + counts["service_errors"]
    )
    counts["set_attempts"] = max(counts["set_attempts"], counts["set_errors"])
    counts["pass_sum"] = min(counts["pass_sum"], MAX_QUALITY_SCORE * counts["pass_attempts"])
    counts["set_sum"] = min(counts["set_sum"], MAX_QUALITY_SCORE * counts["set_attempts"])

    rotation = stat_line.starting_rotation
    if rotation is not None and rotation not in ROTATION_RANGE:
        rotation = None

    return replace(stat_line, **counts, starting_rotation=rotation)


def validate_stat_line(stat_line: StatLine, policy: str = "strict") -> StatLine:
    """Apply the validation policy to one stat line.

    Args:
        stat_line: Line to check.
        policy: ``strict`` raises on any violation, ``clamp`` repairs.

    Returns:
        The input line when valid, otherwise the repaired line (clamp).

    Raises:
        InvalidStatLineError: Under the strict policy when rules are broken.
        ValueError: If the policy is unknown.
    """
    if policy not in ("strict", "clamp"):
        raise ValueError(f"Unknown validation policy '{policy}'")

    violations = find_violations(stat_line)
    if not violations:
        return stat_line

    if policy == "strict":
        raise InvalidStatLineError(violations, stat_line.player_id)

    logger.warning(
        "{} Repaired stat line for player {}: {}",
        WARN,
        stat_line.player_id or "<unknown>",
        "; ".join(violations),
    )
    return clamp_stat_line(stat_line)


def validate_stat_lines(stat_lines: Iterable[StatLine], policy: str = "strict") -> list[StatLine]:
    """Apply ``validate_stat_line`` to every line."""
    return [validate_stat_line(line, policy) for line in stat_lines]


__all__ = [
    "MAX_QUALITY_SCORE",
    "clamp_stat_line",
    "combine_stat_lines",
    "find_violations",
    "normalize",
    "normalize_many",
    "safe_ratio",
    "validate_stat_line",
    "validate_stat_lines",
]
