"""Volleyball Performance Rating & Awards Engine.

Pure computation over per-game volleyball stat lines: normalized ratios,
0-99 player and team ratings, trend signals, match/season awards and
post-match takeaways.

Example:
    >>> from volley_ratings import StatLine, rate_game, compute_match_awards
    >>> line = StatLine(kills=10, attack_errors=2, attack_attempts=20, player_id="p-1")
    >>> rate_game(line, "outside_hitter", opponent_tier=5)
    >>> compute_match_awards([line])
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Volley Ratings Team"

# Public API exports
from volley_ratings.analysis import (
    categorize_takeaways,
    compute_match_awards,
    compute_season_awards,
    compute_trends,
    rotation_breakdown,
)
from volley_ratings.config import Settings, get_settings
from volley_ratings.ratings import (
    DEFAULT_RATING_CONFIG,
    RatingConfig,
    combine_stat_lines,
    normalize,
    normalize_many,
    rate_aggregate,
    rate_game,
    rate_recent_form,
    rate_team_aggregate,
)
from volley_ratings.types import (
    Award,
    AwardType,
    DerivedMetrics,
    MatchOutcome,
    OverallRating,
    PlayerSkill,
    Position,
    StatLine,
    Takeaway,
    TakeawayCategory,
    TeamSkill,
    Trend,
    TrendDirection,
    TrendMetric,
)

__all__ = [
    "DEFAULT_RATING_CONFIG",
    "Award",
    "AwardType",
    "DerivedMetrics",
    "MatchOutcome",
    "OverallRating",
    "PlayerSkill",
    "Position",
    "RatingConfig",
    "Settings",
    "StatLine",
    "Takeaway",
    "TakeawayCategory",
    "TeamSkill",
    "Trend",
    "TrendDirection",
    "TrendMetric",
    "__author__",
    "__version__",
    "categorize_takeaways",
    "combine_stat_lines",
    "compute_match_awards",
    "compute_season_awards",
    "compute_trends",
    "get_settings",
    "normalize",
    "normalize_many",
    "rate_aggregate",
    "rate_game",
    "rate_recent_form",
    "rate_team_aggregate",
    "rotation_breakdown",
]
