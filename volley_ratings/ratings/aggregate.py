"""Aggregate ratings over many games for players and teams.

Raw counts are summed across all games first and the summed line goes
through the same normalizer and skill formulas as a single game. Averaging
per-game percentages would let a 1-for-1 game weigh as much as a 15-for-40
game, so it is never done here.

Because the skill formulas shrink toward priors by attempt volume, rating a
single game through ``rate_aggregate`` gives exactly ``rate_game``, and
repeating the same game N times converges instead of diverging.

Example:
    >>> from volley_ratings.ratings.aggregate import rate_aggregate
    >>> from volley_ratings.types import StatLine
    >>> line = StatLine(set_attempts=30, set_sum=66, digs=6, serve_attempts=12)
    >>> rating = rate_aggregate([line] * 4, "setter")
    >>> rating.games_played, rating.is_provisional
    (4, False)
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

import numpy as np

from volley_ratings.logging import get_logger
from volley_ratings.ratings.game import (
    adjust_for_opponent,
    blend,
    game_score,
    player_sub_ratings,
    resolve_opponent_tier,
    team_sub_ratings,
    to_rating,
)
from volley_ratings.ratings.normalizer import normalize_many, validate_stat_lines
from volley_ratings.ratings.weights import (
    DEFAULT_RATING_CONFIG,
    RECENCY_WEIGHT_FLOOR,
    RatingConfig,
)
from volley_ratings.types import (
    MIN_RATING,
    OverallRating,
    PlayerRating,
    Position,
    Rating,
    StatLine,
    TeamRating,
)

logger = get_logger(__name__)


def _resolve_tiers(
    count: int,
    opponent_tiers: Sequence[int | None] | None,
    config: RatingConfig,
) -> list[int]:
    if opponent_tiers is None:
        return [config.midpoint_tier] * count
    if len(opponent_tiers) != count:
        raise ValueError(
            f"Got {len(opponent_tiers)} opponent tiers for {count} stat lines"
        )
    return [resolve_opponent_tier(tier, config) for tier in opponent_tiers]


def _aggregate(
    stat_lines: Sequence[StatLine],
    weights: Mapping[Any, float],
    score_skills: Callable[..., dict[Any, float]],
    opponent_tiers: Sequence[int | None] | None,
    config: RatingConfig,
) -> OverallRating[Any]:
    lines = validate_stat_lines(stat_lines, config.validation_policy)
    tiers = _resolve_tiers(len(lines), opponent_tiers, config)
    metrics = normalize_many(lines)
    games_played = len(lines)

    if games_played == 0:
        return OverallRating(
            overall=MIN_RATING,
            sub_ratings={skill: MIN_RATING for skill in weights},
            games_played=0,
            is_provisional=True,
            aggregated_stats=metrics,
        )

    mean_tier = float(np.mean(tiers))
    raw_sub_ratings = score_skills(metrics)
    overall = to_rating(adjust_for_opponent(blend(raw_sub_ratings, weights), mean_tier, config))
    sub_ratings = {
        skill: to_rating(adjust_for_opponent(value, mean_tier, config))
        for skill, value in raw_sub_ratings.items()
    }

    return OverallRating(
        overall=overall,
        sub_ratings=sub_ratings,
        games_played=games_played,
        is_provisional=games_played < config.provisional_threshold,
        aggregated_stats=metrics,
    )


def rate_aggregate(
    stat_lines: Sequence[StatLine],
    position: Position | str,
    opponent_tiers: Sequence[int | None] | None = None,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> PlayerRating:
    """Rate a player over many games.

    Args:
        stat_lines: The player's stat lines, most recent first.
        position: Primary position; selects the weight vector.
        opponent_tiers: Optional opponent tier per stat line (None entries
            mean the midpoint). The mean tier scales the ratings.
        config: Weights and tuning constants.

    Returns:
        OverallRating with player sub-ratings. An empty list yields minimum
        ratings, zero games and a provisional flag.

    Raises:
        UnknownPositionError: If the position is not recognized.
        ValueError: If ``opponent_tiers`` does not match ``stat_lines``.
    """
    weights = config.weights_for(position)
    rating: PlayerRating = _aggregate(
        stat_lines, weights, player_sub_ratings, opponent_tiers, config
    )
    logger.debug(
        "Aggregate rating for {} over {} games: {} (provisional={})",
        Position.parse(position).value,
        rating.games_played,
        rating.overall,
        rating.is_provisional,
    )
    return rating


def rate_team_aggregate(
    team_game_totals: Sequence[StatLine],
    opponent_tiers: Sequence[int | None] | None = None,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> TeamRating:
    """Rate a team from its per-game totals.

    Args:
        team_game_totals: One summed stat line per game (see
            ``combine_stat_lines``), most recent first.
        opponent_tiers: Optional opponent tier per game.
        config: Weights and tuning constants.

    Returns:
        OverallRating with attack, serve, reception and consistency sub-ratings.
    """
    rating: TeamRating = _aggregate(
        team_game_totals, config.team_weights, team_sub_ratings, opponent_tiers, config
    )
    logger.debug(
        "Team rating over {} games: {} (provisional={})",
        rating.games_played,
        rating.overall,
        rating.is_provisional,
    )
    return rating


def recency_weights(
    count: int,
    decay_games: int,
    floor: float = RECENCY_WEIGHT_FLOOR,
) -> np.ndarray:
    """Linear recency weights, most recent game first.

    The most recent game weighs 1.0, each older game loses ``1/decay_games``
    and no game drops below ``floor``.
    """
    return np.maximum(floor, 1.0 - np.arange(count) / decay_games)


def rate_recent_form(
    stat_lines: Sequence[StatLine],
    position: Position | str,
    opponent_tiers: Sequence[int | None] | None = None,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> Rating:
    """Recency-weighted average of single-game ratings.

    Args:
        stat_lines: The player's stat lines, most recent first.
        position: Primary position.
        opponent_tiers: Optional opponent tier per stat line.
        config: Weights and tuning constants.

    Returns:
        Rating in [1, 99]; MIN_RATING when there are no games.
    """
    config.weights_for(position)
    if not stat_lines:
        return MIN_RATING

    tiers: Sequence[int | None] = (
        opponent_tiers if opponent_tiers is not None else [None] * len(stat_lines)
    )
    if len(tiers) != len(stat_lines):
        raise ValueError(f"Got {len(tiers)} opponent tiers for {len(stat_lines)} stat lines")

    scores = [
        game_score(line, position, tier, config) for line, tier in zip(stat_lines, tiers)
    ]
    weights = recency_weights(len(scores), config.recency_decay_games)
    return to_rating(float(np.average(scores, weights=weights)))


__all__ = [
    "rate_aggregate",
    "rate_recent_form",
    "rate_team_aggregate",
    "recency_weights",
]
