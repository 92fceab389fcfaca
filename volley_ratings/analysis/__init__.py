"""Analysis built on top of ratings: trends, awards and takeaways.

Submodules:
    trends: Recent-window vs previous-window trend detection
    awards: Match and season award selection with deterministic tie-breaks
    takeaways: Rule-based post-match observations
    rotations: Per-starting-rotation breakdown
"""

from __future__ import annotations

from volley_ratings.analysis.awards import (
    MATCH_CATEGORIES,
    SEASON_CATEGORIES,
    AwardCategory,
    compute_match_awards,
    compute_season_awards,
    select_most_improved,
    select_winner,
)
from volley_ratings.analysis.rotations import rotation_breakdown
from volley_ratings.analysis.takeaways import (
    TAKEAWAY_RULES,
    TakeawayRule,
    categorize_takeaways,
)
from volley_ratings.analysis.trends import (
    TREND_BASELINES,
    compute_series_trends,
    compute_trends,
    metric_series,
    trend_for_series,
)

__all__ = [
    "MATCH_CATEGORIES",
    "SEASON_CATEGORIES",
    "TAKEAWAY_RULES",
    "TREND_BASELINES",
    "AwardCategory",
    "TakeawayRule",
    "categorize_takeaways",
    "compute_match_awards",
    "compute_season_awards",
    "compute_series_trends",
    "compute_trends",
    "metric_series",
    "rotation_breakdown",
    "select_most_improved",
    "select_winner",
    "trend_for_series",
]
