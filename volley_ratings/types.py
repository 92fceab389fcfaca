"""Type definitions for the volleyball rating engine.

This module defines the value types, enums, type aliases and exceptions used
throughout the package. Every type here is an immutable value: calculators
never mutate their inputs, they build new instances.

Example:
    >>> from volley_ratings.types import StatLine
    >>> line = StatLine(kills=10, attack_errors=2, attack_attempts=20)
    >>> line.has_activity
    True
"""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

# =============================================================================
# Type Aliases
# =============================================================================

PlayerId = str
Rating = int

# Ratings are published on a 1-99 scale; 1 is the floor for "no data"
MIN_RATING: Rating = 1
MAX_RATING: Rating = 99

MIN_OPPONENT_TIER: int = 1
MAX_OPPONENT_TIER: int = 9


# =============================================================================
# Exceptions
# =============================================================================


class RatingEngineError(Exception):
    """Base exception for rating engine errors."""


class InvalidStatLineError(RatingEngineError, ValueError):
    """Stat line violates the counting-stat contract.

    Attributes:
        violations: Human-readable description of every broken rule.
    """

    def __init__(self, violations: list[str], player_id: PlayerId | None = None) -> None:
        self.violations = violations
        self.player_id = player_id
        who = f" for player {player_id}" if player_id else ""
        super().__init__(f"Invalid stat line{who}: " + "; ".join(violations))


class UnknownPositionError(RatingEngineError, ValueError):
    """Requested position has no weight vector."""


class UnknownAwardTypeError(RatingEngineError, ValueError):
    """Requested award category does not exist."""


class InvalidOpponentTierError(RatingEngineError, ValueError):
    """Opponent tier outside the supported range."""


class MissingPlayerIdError(RatingEngineError, ValueError):
    """Award input contains a stat line without a player id."""


class ConfigurationError(RatingEngineError):
    """Rating configuration is inconsistent."""


# =============================================================================
# Enums
# =============================================================================


class Position(str, Enum):
    """Primary playing position."""

    SETTER = "setter"
    OUTSIDE_HITTER = "outside_hitter"
    MIDDLE_BLOCKER = "middle_blocker"
    OPPOSITE = "opposite"
    LIBERO = "libero"
    DEFENSIVE_SPECIALIST = "defensive_specialist"
    ALL_AROUND = "all_around"

    @classmethod
    def parse(cls, value: Position | str) -> Position:
        """Resolve a position from an enum member, snake_case or display label.

        Raises:
            UnknownPositionError: If the value matches no position.
        """
        if isinstance(value, Position):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise UnknownPositionError(
                f"Unknown position '{value}'. Expected one of: {valid}"
            ) from None


class PlayerSkill(str, Enum):
    """Sub-rating labels for individual players."""

    ATTACK = "attack"
    SERVE = "serve"
    RECEIVE = "receive"
    SET = "set"
    BLOCK = "block"
    DIG = "dig"
    MENTAL = "mental"


class TeamSkill(str, Enum):
    """Sub-rating labels for team ratings."""

    ATTACK = "attack"
    SERVE = "serve"
    RECEPTION = "reception"
    CONSISTENCY = "consistency"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendMetric(str, Enum):
    """Per-game metrics tracked by the trend analyzer."""

    KILL_PCT = "kill_pct"
    SERVE_PCT = "serve_pct"
    PASS_RATING = "pass_rating"
    ERROR_RATE = "error_rate"
    OVERALL = "overall"


class AwardType(str, Enum):
    """Award categories, in presentation order.

    MOST_IMPROVED is awarded for seasons only.
    """

    MVP = "mvp"
    MOST_IMPROVED = "most_improved"
    TOP_ATTACKER = "top_attacker"
    TOP_SERVER = "top_server"
    TOP_DEFENDER = "top_defender"
    TOP_PASSER = "top_passer"

    @classmethod
    def parse(cls, value: AwardType | str) -> AwardType:
        """Resolve an award category.

        Raises:
            UnknownAwardTypeError: If the value matches no category.
        """
        if isinstance(value, AwardType):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(a.value for a in cls)
            raise UnknownAwardTypeError(
                f"Unknown award type '{value}'. Expected one of: {valid}"
            ) from None


class TakeawayCategory(str, Enum):
    POSITIVE = "positive"
    IMPROVEMENT = "improvement"
    MILESTONE = "milestone"


# =============================================================================
# Dataclasses
# =============================================================================


@dataclass(frozen=True)
class StatLine:
    """One player's (or one team's) counting stats for a single game.

    Pass and set quality are recorded as the sum of 0-3 scores, so
    ``pass_sum / pass_attempts`` is the average pass grade.
    """

    kills: int = 0
    attack_errors: int = 0
    attack_attempts: int = 0
    aces: int = 0
    service_errors: int = 0
    serve_attempts: int = 0
    block_solos: int = 0
    block_assists: int = 0
    block_touches: int = 0
    digs: int = 0
    ball_handling_errors: int = 0
    pass_attempts: int = 0
    pass_sum: int = 0
    set_attempts: int = 0
    set_sum: int = 0
    set_errors: int = 0
    sets_played: int = 0
    rotations_played: int = 0
    starting_rotation: int | None = None
    player_id: PlayerId | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StatLine:
        """Build a stat line from a mapping of field names to values.

        Missing counts default to 0; blank optional fields become None.

        Raises:
            InvalidStatLineError: On unknown keys or non-integer counts.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidStatLineError([f"unknown field(s): {', '.join(unknown)}"])

        values: dict[str, Any] = {}
        problems: list[str] = []
        for name, raw in data.items():
            if name == "player_id":
                values[name] = None if raw in (None, "") else str(raw)
                continue
            if name == "starting_rotation" and raw in (None, ""):
                values[name] = None
                continue
            if isinstance(raw, bool):
                problems.append(f"{name} must be an integer, got {raw!r}")
                continue
            if isinstance(raw, numbers.Integral):
                values[name] = int(raw)
                continue
            if isinstance(raw, str):
                try:
                    values[name] = int(raw)
                    continue
                except ValueError:
                    pass
            try:
                as_float = float(raw)
            except (TypeError, ValueError):
                problems.append(f"{name} must be an integer, got {raw!r}")
                continue
            if as_float != as_float or not as_float.is_integer():
                problems.append(f"{name} must be an integer, got {raw!r}")
                continue
            values[name] = int(as_float)

        if problems:
            raise InvalidStatLineError(problems, values.get("player_id"))
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)

    @property
    def blocks(self) -> float:
        """Block credit: solos count fully, assists count half."""
        return self.block_solos + 0.5 * self.block_assists

    @property
    def total_attempts(self) -> int:
        """Attempts across attack, serve, pass and set."""
        return (
            self.attack_attempts
            + self.serve_attempts
            + self.pass_attempts
            + self.set_attempts
        )

    @property
    def has_activity(self) -> bool:
        """Whether any action at all was recorded."""
        return (
            self.total_attempts > 0
            or self.digs > 0
            or self.block_solos > 0
            or self.block_assists > 0
            or self.block_touches > 0
        )


# Raw counting fields, summed when stat lines are combined
COUNT_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(StatLine) if f.name not in ("starting_rotation", "player_id")
)


@dataclass(frozen=True)
class DerivedMetrics:
    """Ratios and per-game averages derived from summed raw counts.

    Attributes:
        games_played: Number of stat lines that were summed.
        totals: Summed raw counts.
        kill_pct: (kills - attack errors) / attack attempts.
        serve_pct: (serve attempts - service errors) / serve attempts.
        pass_rating: Average pass grade on a 0-3 scale.
        set_rating: Average set grade on a 0-3 scale.
        blocks: Solos plus half of assists.
        error_rate: Attack, service and ball-handling errors per
            attack/serve/pass attempt.
    """

    games_played: int
    totals: StatLine
    kill_pct: float
    serve_pct: float
    pass_rating: float
    set_rating: float
    blocks: float
    error_rate: float
    kills_per_game: float
    aces_per_game: float
    digs_per_game: float
    blocks_per_game: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format for JSON serialization."""
        result = asdict(self)
        result["totals"] = {name: getattr(self.totals, name) for name in COUNT_FIELDS}
        return result


SkillT = TypeVar("SkillT", PlayerSkill, TeamSkill)


@dataclass(frozen=True)
class OverallRating(Generic[SkillT]):
    """Overall rating with labelled sub-ratings.

    Parameterized over the sub-rating label set: ``OverallRating[PlayerSkill]``
    for players and ``OverallRating[TeamSkill]`` for teams.

    Attributes:
        overall: Blended 1-99 rating.
        sub_ratings: 1-99 rating per skill label.
        games_played: Games in the sample.
        is_provisional: True while the sample is below the provisional threshold.
        aggregated_stats: Metrics from the summed raw counts.
    """

    overall: Rating
    sub_ratings: dict[SkillT, Rating]
    games_played: int
    is_provisional: bool
    aggregated_stats: DerivedMetrics

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format for JSON serialization."""
        return {
            "overall": self.overall,
            "sub_ratings": {skill.value: value for skill, value in self.sub_ratings.items()},
            "games_played": self.games_played,
            "is_provisional": self.is_provisional,
            "aggregated_stats": self.aggregated_stats.to_dict(),
        }


PlayerRating = OverallRating[PlayerSkill]
TeamRating = OverallRating[TeamSkill]


@dataclass(frozen=True)
class Trend:
    """Direction of one metric over the recent window.

    Attributes:
        direction: up, down or stable (already polarity-corrected).
        delta: Recent average minus previous average (or baseline).
        recent_avg: Average over the recent window.
        percent_change: Relative change used for the stability test.
    """

    direction: TrendDirection
    delta: float
    recent_avg: float
    percent_change: float = 0.0


@dataclass(frozen=True)
class Award:
    """A category winner for a match or season."""

    award_type: AwardType
    player_id: PlayerId
    award_value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "award_type": self.award_type.value,
            "player_id": self.player_id,
            "award_value": self.award_value,
        }


@dataclass(frozen=True)
class MatchOutcome:
    """Final set score of a match from the team's point of view."""

    sets_won: int
    sets_lost: int

    @property
    def won(self) -> bool:
        return self.sets_won > self.sets_lost

    @property
    def lost(self) -> bool:
        return self.sets_lost > self.sets_won

    @property
    def is_sweep(self) -> bool:
        """Won without dropping a set (3-0 or better)."""
        return self.won and self.sets_lost == 0 and self.sets_won >= 3


@dataclass(frozen=True)
class Takeaway:
    """A human-readable post-match observation."""

    text: str
    category: TakeawayCategory
    rule: str


@dataclass(frozen=True)
class RotationStats:
    """Performance when a player started in one rotation."""

    rotation: int
    games_in_rotation: int
    kill_pct: float
    pass_rating: float
    digs: int
    is_below_average: bool
