"""Match and season award selection.

Each award category pairs a scorer with an eligibility rule and a
tie-break key. The winner is the eligible player with the largest
``(score, *tie_break)`` tuple; any remaining tie goes to the
lexicographically smallest player id. Identical input therefore always
produces identical winners, regardless of input order.

Match categories score one match's summed counts:
    mvp:          2*kills + 3*aces + digs + 2*blocks - 1.5*(attack + service errors)
    top_attacker: kill percentage (minimum 5 attack attempts)
    top_server:   aces (fewer service errors breaks ties)
    top_defender: digs + block solos + block assists
    top_passer:   pass rating (minimum 5 pass attempts)

Season categories rank per-game averages and rates, so a player is not
favored for appearing in more matches:
    mvp:           MVP score per game
    most_improved: rise in MVP score per game from the earlier half of a
                   player's matches to the recent half (at least 2 in each)
    top_attacker:  kill percentage (minimum 20 attack attempts)
    top_server:    ace rate per serve attempt
    top_defender:  digs per set played
    top_passer:    pass rating (minimum 20 pass attempts)

A category nobody qualifies for produces no award. The calculator does not
stop the MVP from also winning a specialty award; callers that want that
convention pass ``exclude_players``.

Example:
    >>> from volley_ratings.analysis.awards import compute_match_awards
    >>> awards = compute_match_awards(match_lines)
    >>> [(a.award_type.value, a.player_id) for a in awards]
    [('mvp', 'p-4'), ('top_attacker', 'p-4'), ('top_server', 'p-9')]
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Collection, Iterable, Sequence

from volley_ratings.logging import get_logger
from volley_ratings.ratings.normalizer import (
    combine_stat_lines,
    normalize_many,
    safe_ratio,
    validate_stat_lines,
)
from volley_ratings.ratings.weights import DEFAULT_RATING_CONFIG, RatingConfig
from volley_ratings.types import (
    Award,
    AwardType,
    DerivedMetrics,
    MissingPlayerIdError,
    PlayerId,
    StatLine,
)

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

MATCH_MIN_ATTACK_ATTEMPTS: int = 5
MATCH_MIN_PASS_ATTEMPTS: int = 5
SEASON_MIN_ATTACK_ATTEMPTS: int = 20
SEASON_MIN_PASS_ATTEMPTS: int = 20
# Matches needed in each half of a season for most improved
MIN_MATCHES_PER_HALF: int = 2


def mvp_score(m: DerivedMetrics) -> float:
    t = m.totals
    return (
        t.kills * 2
        + t.aces * 3
        + t.digs
        + m.blocks * 2
        - (t.attack_errors + t.service_errors) * 1.5
    )


def mvp_score_per_game(m: DerivedMetrics) -> float:
    """MVP score averaged over the games summed into ``m``."""
    return safe_ratio(mvp_score(m), m.games_played)


def defender_total(m: DerivedMetrics) -> int:
    t = m.totals
    return t.digs + t.block_solos + t.block_assists


def ace_rate(m: DerivedMetrics) -> float:
    return safe_ratio(m.totals.aces, m.totals.serve_attempts)


def digs_per_set(m: DerivedMetrics) -> float:
    return safe_ratio(m.totals.digs, m.totals.sets_played)


# =============================================================================
# Category definitions
# =============================================================================


@dataclass(frozen=True)
class AwardCategory:
    """How one award category scores and filters players.

    Attributes:
        award_type: Category identifier.
        score: Primary ranking value (higher wins).
        tie_break: Secondary values compared in order (higher wins).
        is_eligible: Whether a player may win at all.
        award_value: Published value for the winner.
    """

    award_type: AwardType
    score: Callable[[DerivedMetrics], float]
    tie_break: Callable[[DerivedMetrics], tuple[float, ...]]
    is_eligible: Callable[[DerivedMetrics], bool]
    award_value: Callable[[DerivedMetrics], float | None]


def _attacker_category(min_attempts: int) -> AwardCategory:
    return AwardCategory(
        award_type=AwardType.TOP_ATTACKER,
        score=lambda m: m.kill_pct,
        tie_break=lambda m: (m.totals.kills, m.totals.attack_attempts),
        is_eligible=lambda m: m.totals.attack_attempts >= min_attempts,
        award_value=lambda m: round(m.kill_pct * 100, 1),
    )


def _passer_category(min_attempts: int) -> AwardCategory:
    return AwardCategory(
        award_type=AwardType.TOP_PASSER,
        score=lambda m: m.pass_rating,
        tie_break=lambda m: (m.totals.pass_attempts,),
        is_eligible=lambda m: m.totals.pass_attempts >= min_attempts,
        award_value=lambda m: round(m.pass_rating, 2),
    )


MATCH_CATEGORIES: tuple[AwardCategory, ...] = (
    AwardCategory(
        award_type=AwardType.MVP,
        score=mvp_score,
        tie_break=lambda m: (m.totals.total_attempts,),
        is_eligible=lambda m: m.totals.has_activity,
        award_value=lambda m: round(mvp_score(m), 1),
    ),
    _attacker_category(MATCH_MIN_ATTACK_ATTEMPTS),
    AwardCategory(
        award_type=AwardType.TOP_SERVER,
        score=lambda m: m.totals.aces,
        tie_break=lambda m: (-m.totals.service_errors, m.totals.serve_attempts),
        is_eligible=lambda m: m.totals.aces > 0,
        award_value=lambda m: float(m.totals.aces),
    ),
    AwardCategory(
        award_type=AwardType.TOP_DEFENDER,
        score=defender_total,
        tie_break=lambda m: (m.totals.digs,),
        is_eligible=lambda m: defender_total(m) > 0,
        award_value=lambda m: float(defender_total(m)),
    ),
    _passer_category(MATCH_MIN_PASS_ATTEMPTS),
)

# Most improved compares two halves of a season and is selected separately
SEASON_CATEGORIES: tuple[AwardCategory, ...] = (
    AwardCategory(
        award_type=AwardType.MVP,
        score=mvp_score_per_game,
        tie_break=lambda m: (m.totals.total_attempts,),
        is_eligible=lambda m: m.totals.has_activity,
        award_value=lambda m: round(mvp_score_per_game(m), 1),
    ),
    _attacker_category(SEASON_MIN_ATTACK_ATTEMPTS),
    AwardCategory(
        award_type=AwardType.TOP_SERVER,
        score=ace_rate,
        tie_break=lambda m: (-m.totals.service_errors, m.totals.serve_attempts),
        is_eligible=lambda m: m.totals.serve_attempts > 0,
        award_value=lambda m: round(ace_rate(m) * 100, 1),
    ),
    AwardCategory(
        award_type=AwardType.TOP_DEFENDER,
        score=digs_per_set,
        tie_break=lambda m: (m.totals.digs,),
        is_eligible=lambda m: m.totals.sets_played > 0,
        award_value=lambda m: round(digs_per_set(m), 2),
    ),
    _passer_category(SEASON_MIN_PASS_ATTEMPTS),
)


# =============================================================================
# Selection
# =============================================================================


def _lines_by_player(stat_lines: Iterable[StatLine]) -> dict[PlayerId, list[StatLine]]:
    grouped: dict[PlayerId, list[StatLine]] = defaultdict(list)
    for line in stat_lines:
        if not line.player_id:
            raise MissingPlayerIdError("Every stat line needs a player_id to compute awards")
        grouped[line.player_id].append(line)
    return grouped


def select_winner(
    category: AwardCategory,
    metrics: dict[PlayerId, DerivedMetrics],
    exclude_players: Collection[PlayerId] = (),
) -> Award | None:
    """Pick the category winner, or None when nobody is eligible."""
    candidates = [
        (player_id, m)
        for player_id, m in metrics.items()
        if player_id not in exclude_players and category.is_eligible(m)
    ]
    if not candidates:
        return None

    # Sort by player id first so max() keeps the smallest id among equal keys
    candidates.sort(key=lambda item: item[0])
    player_id, winner = max(
        candidates,
        key=lambda item: (category.score(item[1]), *category.tie_break(item[1])),
    )
    return Award(
        award_type=category.award_type,
        player_id=player_id,
        award_value=category.award_value(winner),
    )


def select_most_improved(
    lines_by_player: dict[PlayerId, list[StatLine]],
    exclude_players: Collection[PlayerId] = (),
) -> Award | None:
    """Pick the player whose MVP score per game rose the most.

    Each player's lines are ordered most recent first. The recent half is
    the first ``n // 2`` lines and the earlier half is the rest; both need
    at least MIN_MATCHES_PER_HALF lines. Only a positive rise qualifies.
    """
    best: tuple[float, PlayerId] | None = None
    for player_id in sorted(lines_by_player):
        if player_id in exclude_players:
            continue
        lines = lines_by_player[player_id]
        recent, earlier = lines[: len(lines) // 2], lines[len(lines) // 2 :]
        if len(recent) < MIN_MATCHES_PER_HALF or len(earlier) < MIN_MATCHES_PER_HALF:
            continue

        improvement = mvp_score_per_game(normalize_many(recent)) - mvp_score_per_game(
            normalize_many(earlier)
        )
        if improvement > 0 and (best is None or improvement > best[0]):
            best = (improvement, player_id)

    if best is None:
        return None
    return Award(
        award_type=AwardType.MOST_IMPROVED,
        player_id=best[1],
        award_value=round(best[0], 1),
    )


def _wanted_types(award_types: Iterable[AwardType | str] | None) -> set[AwardType]:
    if award_types is None:
        return set(AwardType)
    return {AwardType.parse(a) for a in award_types}


def _select(
    categories: Sequence[AwardCategory],
    metrics: dict[PlayerId, DerivedMetrics],
    wanted: set[AwardType],
    exclude_players: Collection[PlayerId],
) -> dict[AwardType, Award | None]:
    return {
        category.award_type: select_winner(category, metrics, exclude_players)
        for category in categories
        if category.award_type in wanted
    }


def _ordered(selected: dict[AwardType, Award | None]) -> list[Award]:
    awards = []
    for award_type in AwardType:
        if award_type not in selected:
            continue
        award = selected[award_type]
        if award is None:
            logger.debug("No eligible players for {}", award_type.value)
            continue
        awards.append(award)
    return awards


def compute_match_awards(
    stat_lines: Sequence[StatLine],
    award_types: Iterable[AwardType | str] | None = None,
    exclude_players: Collection[PlayerId] = (),
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> list[Award]:
    """Select match award winners.

    Args:
        stat_lines: Every player's stat line for one match, each with a
            player_id. Several lines for one player are summed.
        award_types: Categories to compute (all when None). Season-only
            categories produce nothing here.
        exclude_players: Player ids that may not win (e.g. the MVP).
        config: Rating configuration; its validation policy applies.

    Returns:
        At most one Award per category, in category order.

    Raises:
        MissingPlayerIdError: If a stat line has no player_id.
        UnknownAwardTypeError: If ``award_types`` names an unknown category.
    """
    wanted = _wanted_types(award_types)
    grouped = _lines_by_player(validate_stat_lines(stat_lines, config.validation_policy))
    # Duplicate entries for a player within one match count as one game
    metrics = {
        player_id: normalize_many([combine_stat_lines(lines, player_id)])
        for player_id, lines in grouped.items()
    }

    awards = _ordered(_select(MATCH_CATEGORIES, metrics, wanted, exclude_players))
    logger.debug("Computed {} match awards from {} stat lines", len(awards), len(stat_lines))
    return awards


def compute_season_awards(
    match_aggregates: Sequence[StatLine],
    award_types: Iterable[AwardType | str] | None = None,
    exclude_players: Collection[PlayerId] = (),
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> list[Award]:
    """Select season award winners.

    Args:
        match_aggregates: One stat line per player per match, each tagged
            with a player_id, most recent match first.
        award_types: Categories to compute (all when None).
        exclude_players: Player ids that may not win.
        config: Rating configuration; its validation policy applies.

    Returns:
        At most one Award per category. MVP ranks the per-game average,
        top_server the ace rate and top_defender digs per set; rate
        awards use season volume thresholds.
    """
    wanted = _wanted_types(award_types)
    grouped = _lines_by_player(validate_stat_lines(match_aggregates, config.validation_policy))
    metrics = {player_id: normalize_many(lines) for player_id, lines in grouped.items()}

    selected = _select(SEASON_CATEGORIES, metrics, wanted, exclude_players)
    if AwardType.MOST_IMPROVED in wanted:
        selected[AwardType.MOST_IMPROVED] = select_most_improved(grouped, exclude_players)

    awards = _ordered(selected)
    logger.debug(
        "Computed {} season awards from {} match aggregates", len(awards), len(match_aggregates)
    )
    return awards


__all__ = [
    "MATCH_CATEGORIES",
    "SEASON_CATEGORIES",
    "AwardCategory",
    "compute_match_awards",
    "compute_season_awards",
    "mvp_score",
    "mvp_score_per_game",
    "select_most_improved",
    "select_winner",
]
