"""pandas adapters for tabular callers.

Converts DataFrames of per-game stat rows into StatLine values and rating
results back into DataFrames. Column names match StatLine field names;
missing count columns default to 0.

Example:
    >>> import pandas as pd
    >>> from volley_ratings.frames import stat_lines_from_frame
    >>> df = pd.read_csv("match_stats.csv")
    >>> lines = stat_lines_from_frame(df)
"""

from __future__ import annotations

from dataclasses import fields
from typing import TYPE_CHECKING, Mapping, Sequence

from volley_ratings.logging import get_logger
from volley_ratings.types import COUNT_FIELDS, InvalidStatLineError, OverallRating, StatLine

if TYPE_CHECKING:
    import pandas as pd

logger = get_logger(__name__)

STAT_LINE_COLUMNS: list[str] = [f.name for f in fields(StatLine)]


def stat_lines_from_frame(data_df: pd.DataFrame) -> list[StatLine]:
    """Build stat lines from a DataFrame, one per row.

    Columns that are not StatLine fields are ignored. NaN counts are
    treated as 0 and NaN ids/rotations as missing.

    Raises:
        InvalidStatLineError: If a row holds a non-integer count.
    """
    columns = [c for c in data_df.columns if c in STAT_LINE_COLUMNS]
    ignored = [c for c in data_df.columns if c not in STAT_LINE_COLUMNS]
    if ignored:
        logger.debug("Ignoring non-stat columns: {}", ignored)

    frame = data_df[columns].copy()
    count_columns = [c for c in columns if c in COUNT_FIELDS]
    frame[count_columns] = frame[count_columns].fillna(0)
    frame = frame.astype(object).where(frame.notna(), None)

    lines = []
    for index, row in enumerate(frame.to_dict(orient="records")):
        try:
            lines.append(StatLine.from_dict(row))
        except InvalidStatLineError as e:
            raise InvalidStatLineError(
                [f"row {index}: {v}" for v in e.violations], e.player_id
            ) from e
    return lines


def stat_lines_to_frame(stat_lines: Sequence[StatLine]) -> pd.DataFrame:
    """One row per stat line, columns in StatLine field order."""
    import pandas as pd

    return pd.DataFrame([line.to_dict() for line in stat_lines], columns=STAT_LINE_COLUMNS)


def ratings_frame(ratings: Mapping[str, OverallRating]) -> pd.DataFrame:
    """Tabulate ratings keyed by player (or team) id.

    Returns:
        DataFrame indexed by id with ``overall``, ``games_played``,
        ``is_provisional`` and one column per sub-rating.
    """
    import pandas as pd

    rows = []
    for key, rating in ratings.items():
        row = {
            "id": key,
            "overall": rating.overall,
            "games_played": rating.games_played,
            "is_provisional": rating.is_provisional,
        }
        row.update({skill.value: value for skill, value in rating.sub_ratings.items()})
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=["overall", "games_played", "is_provisional"])
    return pd.DataFrame(rows).set_index("id")


__all__ = [
    "STAT_LINE_COLUMNS",
    "ratings_frame",
    "stat_lines_from_frame",
    "stat_lines_to_frame",
]
