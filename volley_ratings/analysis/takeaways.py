"""Rule-based post-match takeaways from team totals.

Each rule is independent and fires at most once; the rule order only
decides presentation order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from volley_ratings.logging import get_logger
from volley_ratings.types import (
    DerivedMetrics,
    MatchOutcome,
    Takeaway,
    TakeawayCategory,
)

logger = get_logger(__name__)

STRONG_KILL_PCT: float = 0.30
WEAK_KILL_PCT: float = 0.15
STRONG_SERVE_PCT: float = 0.92
WEAK_SERVE_PCT: float = 0.85
STRONG_PASS_RATING: float = 2.2
WEAK_PASS_RATING: float = 1.5
ACES_FOR_PRESSURE: int = 8


@dataclass(frozen=True)
class TakeawayRule:
    """A threshold rule producing one takeaway when it matches."""

    name: str
    category: TakeawayCategory
    matches: Callable[[DerivedMetrics, MatchOutcome], bool]
    text: Callable[[DerivedMetrics, MatchOutcome], str]


TAKEAWAY_RULES: tuple[TakeawayRule, ...] = (
    TakeawayRule(
        name="strong_attack",
        category=TakeawayCategory.POSITIVE,
        matches=lambda m, o: m.kill_pct >= STRONG_KILL_PCT,
        text=lambda m, o: "Strong attack efficiency: kill percentage above 30%",
    ),
    TakeawayRule(
        name="weak_attack",
        category=TakeawayCategory.IMPROVEMENT,
        matches=lambda m, o: m.totals.attack_attempts > 0 and m.kill_pct < WEAK_KILL_PCT,
        text=lambda m, o: "Attack efficiency needs work: kill percentage below 15%",
    ),
    TakeawayRule(
        name="consistent_serving",
        category=TakeawayCategory.POSITIVE,
        matches=lambda m, o: m.serve_pct >= STRONG_SERVE_PCT,
        text=lambda m, o: "Excellent serving consistency with low error rate",
    ),
    TakeawayRule(
        name="serve_errors",
        category=TakeawayCategory.IMPROVEMENT,
        matches=lambda m, o: m.totals.serve_attempts > 0 and m.serve_pct < WEAK_SERVE_PCT,
        text=lambda m, o: "Too many service errors: focus on serve accuracy",
    ),
    TakeawayRule(
        name="strong_passing",
        category=TakeawayCategory.POSITIVE,
        matches=lambda m, o: m.pass_rating >= STRONG_PASS_RATING,
        text=lambda m, o: "Strong passing game with pass rating above 2.2",
    ),
    TakeawayRule(
        name="weak_passing",
        category=TakeawayCategory.IMPROVEMENT,
        matches=lambda m, o: 0 < m.pass_rating < WEAK_PASS_RATING,
        text=lambda m, o: "Passing needs improvement: rating below 1.5",
    ),
    TakeawayRule(
        name="serving_pressure",
        category=TakeawayCategory.POSITIVE,
        matches=lambda m, o: m.totals.aces >= ACES_FOR_PRESSURE,
        text=lambda m, o: f"Great serving pressure with {m.totals.aces} aces",
    ),
    TakeawayRule(
        name="win",
        category=TakeawayCategory.MILESTONE,
        matches=lambda m, o: o.won,
        text=lambda m, o: "Team secured the win: momentum heading into the next match",
    ),
    TakeawayRule(
        name="sweep",
        category=TakeawayCategory.MILESTONE,
        matches=lambda m, o: o.is_sweep,
        text=lambda m, o: f"Clean sweep, {o.sets_won}-0 without dropping a set",
    ),
    TakeawayRule(
        name="loss",
        category=TakeawayCategory.IMPROVEMENT,
        matches=lambda m, o: o.lost,
        text=lambda m, o: "Loss provides learning opportunities for the next match",
    ),
)


def categorize_takeaways(
    team_totals: DerivedMetrics,
    outcome: MatchOutcome,
    rules: tuple[TakeawayRule, ...] = TAKEAWAY_RULES,
) -> list[Takeaway]:
    """Evaluate every rule against a match's team totals.

    Args:
        team_totals: Metrics from the team's summed stat lines.
        outcome: Final set score.
        rules: Rules to evaluate, in presentation order.

    Returns:
        One Takeaway per matching rule.
    """
    takeaways = [
        Takeaway(text=rule.text(team_totals, outcome), category=rule.category, rule=rule.name)
        for rule in rules
        if rule.matches(team_totals, outcome)
    ]
    logger.debug(
        "{} takeaways for {}-{} match", len(takeaways), outcome.sets_won, outcome.sets_lost
    )
    return takeaways


__all__ = ["TAKEAWAY_RULES", "TakeawayRule", "categorize_takeaways"]
