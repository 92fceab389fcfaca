"""Trend detection over a player's recent games.

The most recent ``window_size`` games are compared with the ``window_size``
games immediately before them. With no earlier window the recent average is
compared with a fixed per-metric baseline instead, so a new player still gets
a meaningful signal.

    delta          = avg(recent) - avg(previous)
    percent_change = |delta| / |avg(previous)|   (|delta| when avg(previous) == 0)

A change no larger than ``threshold`` is stable. Error rate is a
lower-is-better metric, so its direction is inverted: a falling error rate
trends up.

Example:
    >>> from volley_ratings.analysis.trends import compute_trends
    >>> trends = compute_trends(game_lines)  # most recent first
    >>> trends[TrendMetric.KILL_PCT].direction
    <TrendDirection.UP: 'up'>
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

import numpy as np

from volley_ratings.logging import get_logger
from volley_ratings.ratings.normalizer import normalize
from volley_ratings.types import StatLine, Trend, TrendDirection, TrendMetric

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_WINDOW_SIZE: int = 5
DEFAULT_THRESHOLD: float = 0.05

# Games needed before any trend is reported
MIN_GAMES_FOR_TREND: int = 2

# Absolute tolerance for the stability boundary
BOUNDARY_TOLERANCE: float = 1e-12

# Metrics where a decrease is an improvement
INVERTED_METRICS: frozenset[TrendMetric] = frozenset({TrendMetric.ERROR_RATE})


def overall_composite(kill_pct: float, serve_pct: float, pass_rating: float) -> float:
    """Combine kill %, serve % and pass rating (0-3) into one 0-1 score."""
    return (kill_pct + serve_pct + pass_rating / 3) / 3


# Comparison values used when there is no previous window
TREND_BASELINES: dict[TrendMetric, float] = {
    TrendMetric.KILL_PCT: 0.25,
    TrendMetric.SERVE_PCT: 0.90,
    TrendMetric.PASS_RATING: 2.0,
    TrendMetric.ERROR_RATE: 0.15,
    TrendMetric.OVERALL: overall_composite(0.25, 0.90, 2.0),
}


# =============================================================================
# Series helpers
# =============================================================================


def metric_series(stat_lines: Sequence[StatLine]) -> dict[TrendMetric, list[float]]:
    """Per-game value of every trend metric, in input order."""
    series: dict[TrendMetric, list[float]] = {metric: [] for metric in TrendMetric}
    for line in stat_lines:
        m = normalize(line)
        series[TrendMetric.KILL_PCT].append(m.kill_pct)
        series[TrendMetric.SERVE_PCT].append(m.serve_pct)
        series[TrendMetric.PASS_RATING].append(m.pass_rating)
        series[TrendMetric.ERROR_RATE].append(m.error_rate)
        series[TrendMetric.OVERALL].append(
            overall_composite(m.kill_pct, m.serve_pct, m.pass_rating)
        )
    return series


def _check_parameters(window_size: int, threshold: float) -> None:
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")
    if threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {threshold}")


def _classify(delta: float, percent_change: float, threshold: float, invert: bool) -> TrendDirection:
    if percent_change <= threshold or math.isclose(
        percent_change, threshold, rel_tol=0.0, abs_tol=BOUNDARY_TOLERANCE
    ):
        return TrendDirection.STABLE
    improving = delta > 0
    if invert:
        improving = not improving
    return TrendDirection.UP if improving else TrendDirection.DOWN


def stable_trend() -> Trend:
    """Trend reported when there is not enough history."""
    return Trend(direction=TrendDirection.STABLE, delta=0.0, recent_avg=0.0, percent_change=0.0)


def trend_for_series(
    values: Sequence[float],
    baseline: float,
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: float = DEFAULT_THRESHOLD,
    invert: bool = False,
) -> Trend:
    """Trend of one metric series.

    Args:
        values: Per-game values, most recent first.
        baseline: Comparison value when there is no previous window.
        window_size: Games in each window.
        threshold: Largest relative change still considered stable.
        invert: True for lower-is-better metrics.

    Returns:
        Trend for the series. Fewer than two values yields a stable,
        zero-delta trend.
    """
    _check_parameters(window_size, threshold)
    if len(values) < MIN_GAMES_FOR_TREND:
        return stable_trend()

    recent = np.asarray(values[:window_size], dtype=float)
    previous = np.asarray(values[window_size : 2 * window_size], dtype=float)

    recent_avg = float(recent.mean())
    previous_avg = float(previous.mean()) if previous.size else baseline

    delta = recent_avg - previous_avg
    if previous_avg != 0:
        percent_change = abs(delta) / abs(previous_avg)
    else:
        percent_change = abs(delta)

    return Trend(
        direction=_classify(delta, percent_change, threshold, invert),
        delta=delta,
        recent_avg=recent_avg,
        percent_change=percent_change,
    )


def compute_series_trends(
    series: Mapping[TrendMetric, Sequence[float]],
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: float = DEFAULT_THRESHOLD,
) -> dict[TrendMetric, Trend]:
    """Trends for precomputed metric series.

    Metrics missing from ``series`` are reported as stable.
    """
    _check_parameters(window_size, threshold)
    return {
        metric: trend_for_series(
            series.get(metric, ()),
            TREND_BASELINES[metric],
            window_size=window_size,
            threshold=threshold,
            invert=metric in INVERTED_METRICS,
        )
        for metric in TrendMetric
    }


def compute_trends(
    stat_lines: Sequence[StatLine],
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: float = DEFAULT_THRESHOLD,
) -> dict[TrendMetric, Trend]:
    """Trend of every metric over a player's games.

    Args:
        stat_lines: One stat line per game, most recent first.
        window_size: Games in each comparison window.
        threshold: Largest relative change still considered stable.

    Returns:
        Mapping of every TrendMetric to its Trend.

    Raises:
        ValueError: If ``window_size < 1`` or ``threshold < 0``.
    """
    _check_parameters(window_size, threshold)
    if len(stat_lines) < MIN_GAMES_FOR_TREND:
        return {metric: stable_trend() for metric in TrendMetric}

    trends = compute_series_trends(metric_series(stat_lines), window_size, threshold)
    logger.debug(
        "Trends over {} games: {}",
        len(stat_lines),
        {metric.value: trend.direction.value for metric, trend in trends.items()},
    )
    return trends


__all__ = [
    "DEFAULT_THRESHOLD",
    "DEFAULT_WINDOW_SIZE",
    "INVERTED_METRICS",
    "TREND_BASELINES",
    "compute_series_trends",
    "compute_trends",
    "metric_series",
    "overall_composite",
    "trend_for_series",
]
