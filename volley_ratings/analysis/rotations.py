"""Per-rotation performance breakdown.

Only stat lines with a recorded starting rotation take part, both in the
per-rotation numbers and in the baseline they are compared against.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from volley_ratings.ratings.normalizer import normalize_many
from volley_ratings.types import RotationStats, StatLine

ROTATIONS: range = range(1, 7)


def rotation_breakdown(stat_lines: Sequence[StatLine]) -> list[RotationStats]:
    """Summarize a player's games by starting rotation.

    A rotation is flagged ``is_below_average`` when its kill percentage,
    pass rating or digs per game falls below the player's overall value.

    Args:
        stat_lines: The player's stat lines.

    Returns:
        One entry per rotation that has games, ordered 1 to 6.
    """
    by_rotation: dict[int, list[StatLine]] = defaultdict(list)
    for line in stat_lines:
        if line.starting_rotation in ROTATIONS:
            by_rotation[line.starting_rotation].append(line)

    if not by_rotation:
        return []

    overall = normalize_many([line for lines in by_rotation.values() for line in lines])

    results = []
    for rotation in ROTATIONS:
        lines = by_rotation.get(rotation)
        if not lines:
            continue
        m = normalize_many(lines)
        results.append(
            RotationStats(
                rotation=rotation,
                games_in_rotation=len(lines),
                kill_pct=m.kill_pct,
                pass_rating=m.pass_rating,
                digs=m.totals.digs,
                is_below_average=(
                    m.kill_pct < overall.kill_pct
                    or m.pass_rating < overall.pass_rating
                    or m.digs_per_game < overall.digs_per_game
                ),
            )
        )
    return results


__all__ = ["rotation_breakdown"]
