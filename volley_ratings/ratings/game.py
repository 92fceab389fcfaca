"""Single-game rating calculation.

A game rating is built in four steps:

1. Normalize the stat line into DerivedMetrics.
2. Score each skill on a 1-99 scale. Rates are shrunk toward a prior with
   ``bayesian_rate`` so a 2-for-2 attack line does not look like an elite
   attacker.
3. Blend the skill scores with the position weight vector.
4. Scale by the opponent multiplier and clamp into [1, 99].

The skill formulas here are shared with the aggregate calculator, which
feeds them summed multi-game metrics instead of a single game.

Example:
    >>> from volley_ratings.ratings.game import rate_game
    >>> from volley_ratings.types import StatLine
    >>> line = StatLine(kills=10, attack_errors=2, attack_attempts=20)
    >>> rate_game(line, "outside_hitter", opponent_tier=7)
    28
"""

from __future__ import annotations

import numbers
from typing import Any, Mapping

from volley_ratings.logging import get_logger
from volley_ratings.ratings.normalizer import normalize, validate_stat_line
from volley_ratings.ratings.weights import DEFAULT_RATING_CONFIG, RatingConfig
from volley_ratings.types import (
    MAX_OPPONENT_TIER,
    MAX_RATING,
    MIN_OPPONENT_TIER,
    MIN_RATING,
    DerivedMetrics,
    InvalidOpponentTierError,
    PlayerSkill,
    Position,
    Rating,
    StatLine,
    TeamSkill,
)

logger = get_logger(__name__)

# =============================================================================
# Skill scoring constants
# =============================================================================

# (prior rate, prior weight in attempts) for Bayesian shrinkage
ACE_PRIOR: tuple[float, float] = (0.05, 15)
SERVE_ERROR_PRIOR: tuple[float, float] = (0.10, 15)
PASS_PRIOR: tuple[float, float] = (1.5, 10)
SET_PRIOR: tuple[float, float] = (1.5, 10)
SET_ERROR_PRIOR: tuple[float, float] = (0.10, 10)
ATTACK_PRIOR: tuple[float, float] = (0.30, 15)
ERROR_RATE_PRIOR: tuple[float, float] = (0.15, 20)

# Scale factors mapping a rate onto 0-99
SERVE_SCALE: float = 76.0
RECEIVE_SCALE: float = 33.0
ATTACK_SCALE: float = 165.0

# Per-game volume that earns a full 99
BLOCK_POINTS_FOR_MAX: float = 6.0
DIGS_FOR_MAX: float = 15.0

# Error rate at which the mental score reaches zero
MENTAL_ERROR_CEILING: float = 0.30
MENTAL_EXPONENT: float = 1.2


def bayesian_rate(actual: float, attempts: float, prior_rate: float, prior_weight: float) -> float:
    """Shrink an observed rate toward a prior.

    Equivalent to adding ``prior_weight`` pseudo-attempts at ``prior_rate``.
    """
    return (actual + prior_rate * prior_weight) / (attempts + prior_weight)


def clamp_rating(value: float) -> float:
    """Clamp a raw score into [MIN_RATING, MAX_RATING] without rounding."""
    return max(float(MIN_RATING), min(float(MAX_RATING), value))


def to_rating(value: float) -> Rating:
    """Round and clamp a raw score into a published rating."""
    return int(max(MIN_RATING, min(MAX_RATING, round(value))))


# =============================================================================
# Skill scores
# =============================================================================


def serve_score(metrics: DerivedMetrics) -> float:
    t = metrics.totals
    if t.serve_attempts == 0:
        return float(MIN_RATING)
    ace_rate = bayesian_rate(t.aces, t.serve_attempts, *ACE_PRIOR)
    error_rate = bayesian_rate(t.service_errors, t.serve_attempts, *SERVE_ERROR_PRIOR)
    return clamp_rating((ace_rate * 3 + (1 - error_rate)) * SERVE_SCALE)


def receive_score(metrics: DerivedMetrics) -> float:
    t = metrics.totals
    if t.pass_attempts == 0:
        return float(MIN_RATING)
    pass_rating = bayesian_rate(t.pass_sum, t.pass_attempts, *PASS_PRIOR)
    return clamp_rating(pass_rating * RECEIVE_SCALE)


def set_score(metrics: DerivedMetrics) -> float:
    t = metrics.totals
    if t.set_attempts == 0:
        return float(MIN_RATING)
    set_rating = bayesian_rate(t.set_sum, t.set_attempts, *SET_PRIOR)
    error_rate = bayesian_rate(t.set_errors, t.set_attempts, *SET_ERROR_PRIOR)
    return clamp_rating(((set_rating / 3) * 0.8 + (1 - error_rate) * 0.2) * MAX_RATING)


def block_score(metrics: DerivedMetrics) -> float:
    """Solo blocks count two points, assists one."""
    t = metrics.totals
    if metrics.games_played == 0:
        return float(MIN_RATING)
    points_per_game = (t.block_solos * 2 + t.block_assists) / metrics.games_played
    return clamp_rating(min(points_per_game / BLOCK_POINTS_FOR_MAX, 1.0) * MAX_RATING)


def attack_score(metrics: DerivedMetrics) -> float:
    t = metrics.totals
    if t.attack_attempts == 0:
        return float(MIN_RATING)
    efficiency = bayesian_rate(t.kills - t.attack_errors, t.attack_attempts, *ATTACK_PRIOR)
    return clamp_rating(efficiency * ATTACK_SCALE)


def dig_score(metrics: DerivedMetrics) -> float:
    if metrics.games_played == 0:
        return float(MIN_RATING)
    return clamp_rating(min(metrics.digs_per_game / DIGS_FOR_MAX, 1.0) * MAX_RATING)


def mental_score(metrics: DerivedMetrics) -> float:
    """Low error rate across attack, serve and pass scores high."""
    t = metrics.totals
    actions = t.attack_attempts + t.serve_attempts + t.pass_attempts
    if actions == 0:
        return float(MIN_RATING)
    errors = t.attack_errors + t.service_errors + t.ball_handling_errors
    error_rate = bayesian_rate(errors, actions, *ERROR_RATE_PRIOR)
    base = max(0.0, 1 - error_rate / MENTAL_ERROR_CEILING)
    return clamp_rating(base**MENTAL_EXPONENT * MAX_RATING)


def player_sub_ratings(metrics: DerivedMetrics) -> dict[PlayerSkill, float]:
    """Unrounded 1-99 score for every player skill."""
    return {
        PlayerSkill.ATTACK: attack_score(metrics),
        PlayerSkill.SERVE: serve_score(metrics),
        PlayerSkill.RECEIVE: receive_score(metrics),
        PlayerSkill.SET: set_score(metrics),
        PlayerSkill.BLOCK: block_score(metrics),
        PlayerSkill.DIG: dig_score(metrics),
        PlayerSkill.MENTAL: mental_score(metrics),
    }


def team_sub_ratings(metrics: DerivedMetrics) -> dict[TeamSkill, float]:
    """Unrounded 1-99 score for every team skill."""
    return {
        TeamSkill.ATTACK: attack_score(metrics),
        TeamSkill.SERVE: serve_score(metrics),
        TeamSkill.RECEPTION: receive_score(metrics),
        TeamSkill.CONSISTENCY: mental_score(metrics),
    }


# =============================================================================
# Blending
# =============================================================================


def blend(sub_ratings: Mapping[Any, float], weights: Mapping[Any, float]) -> float:
    """Weighted sum of sub-ratings (weights sum to one)."""
    return sum(sub_ratings[skill] * weight for skill, weight in weights.items())


def resolve_opponent_tier(opponent_tier: int | None, config: RatingConfig) -> int:
    """Validate an opponent tier, mapping None to the midpoint.

    Raises:
        InvalidOpponentTierError: If the tier is outside 1-9 or not an integer.
    """
    if opponent_tier is None:
        return config.midpoint_tier
    if isinstance(opponent_tier, bool) or not isinstance(opponent_tier, numbers.Integral):
        raise InvalidOpponentTierError(
            f"Opponent tier must be an integer, got {opponent_tier!r}"
        )
    opponent_tier = int(opponent_tier)
    if not MIN_OPPONENT_TIER <= opponent_tier <= MAX_OPPONENT_TIER:
        raise InvalidOpponentTierError(
            f"Opponent tier {opponent_tier} outside {MIN_OPPONENT_TIER}-{MAX_OPPONENT_TIER}"
        )
    return opponent_tier


def adjust_for_opponent(score: float, opponent_tier: float, config: RatingConfig) -> float:
    """Scale a score by opponent strength and clamp."""
    return clamp_rating(score * config.tier_multiplier(opponent_tier))


def game_score(
    stat_line: StatLine,
    position: Position | str,
    opponent_tier: int | None = None,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> float:
    """Unrounded single-game rating (used for recency-weighted averages)."""
    weights = config.weights_for(position)
    tier = resolve_opponent_tier(opponent_tier, config)
    line = validate_stat_line(stat_line, config.validation_policy)

    raw = blend(player_sub_ratings(normalize(line)), weights)
    return adjust_for_opponent(raw, tier, config)


def rate_game(
    stat_line: StatLine,
    position: Position | str,
    opponent_tier: int | None = None,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> Rating:
    """Rate one player's performance in a single game.

    Args:
        stat_line: The player's counting stats for the game.
        position: Primary position; selects the weight vector.
        opponent_tier: Opponent strength 1-9 (higher is stronger). None
            applies no adjustment.
        config: Weights and tuning constants.

    Returns:
        Rating in [1, 99]. A line with no recorded actions rates 1.

    Raises:
        UnknownPositionError: If the position is not recognized.
        InvalidOpponentTierError: If the tier is outside 1-9.
        InvalidStatLineError: If the line is malformed under the strict policy.
    """
    rating = to_rating(game_score(stat_line, position, opponent_tier, config))
    logger.debug(
        "Rated game for player {} ({}, tier {}): {}",
        stat_line.player_id or "<unknown>",
        Position.parse(position).value,
        opponent_tier,
        rating,
    )
    return rating


__all__ = [
    "adjust_for_opponent",
    "bayesian_rate",
    "blend",
    "game_score",
    "player_sub_ratings",
    "rate_game",
    "resolve_opponent_tier",
    "team_sub_ratings",
    "to_rating",
]
