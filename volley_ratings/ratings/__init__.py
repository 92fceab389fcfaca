"""Rating calculations for players and teams.

Submodules:
    normalizer: Ratio formulas and stat line validation
    weights: Explicit weight configuration (RatingConfig)
    game: Single-game ratings and shared skill formulas
    aggregate: Multi-game player/team ratings and recency-weighted form

Example:
    >>> from volley_ratings.ratings import rate_game, rate_aggregate
    >>> rate_game(line, "libero", opponent_tier=6)
    >>> rate_aggregate(season_lines, "libero").overall
"""

from __future__ import annotations

from volley_ratings.ratings.aggregate import (
    rate_aggregate,
    rate_recent_form,
    rate_team_aggregate,
    recency_weights,
)
from volley_ratings.ratings.game import (
    bayesian_rate,
    game_score,
    player_sub_ratings,
    rate_game,
    team_sub_ratings,
)
from volley_ratings.ratings.normalizer import (
    clamp_stat_line,
    combine_stat_lines,
    find_violations,
    normalize,
    normalize_many,
    safe_ratio,
    validate_stat_line,
    validate_stat_lines,
)
from volley_ratings.ratings.weights import (
    DEFAULT_POSITION_WEIGHTS,
    DEFAULT_RATING_CONFIG,
    DEFAULT_TEAM_WEIGHTS,
    RatingConfig,
    load_weight_overrides,
)

__all__ = [
    "DEFAULT_POSITION_WEIGHTS",
    "DEFAULT_RATING_CONFIG",
    "DEFAULT_TEAM_WEIGHTS",
    "RatingConfig",
    "bayesian_rate",
    "clamp_stat_line",
    "combine_stat_lines",
    "find_violations",
    "game_score",
    "load_weight_overrides",
    "normalize",
    "normalize_many",
    "player_sub_ratings",
    "rate_aggregate",
    "rate_game",
    "rate_recent_form",
    "rate_team_aggregate",
    "recency_weights",
    "safe_ratio",
    "team_sub_ratings",
    "validate_stat_line",
    "validate_stat_lines",
]
