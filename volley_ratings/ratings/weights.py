"""Explicit weight configuration for rating calculations.

Position weight vectors, team weights and the scalar tuning constants live in
one frozen ``RatingConfig`` that is built once and passed into every
calculator. Nothing in the calculators reads module-level mutable state.

Weight vectors must cover every skill label and sum to 1.0 so that a blend of
1-99 sub-ratings stays on the 1-99 scale.

Example:
    >>> from volley_ratings.ratings.weights import DEFAULT_RATING_CONFIG
    >>> from volley_ratings.types import PlayerSkill
    >>> DEFAULT_RATING_CONFIG.weights_for("libero")[PlayerSkill.RECEIVE]
    0.34
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal, Mapping

from volley_ratings.logging import get_logger
from volley_ratings.types import (
    MAX_OPPONENT_TIER,
    MIN_OPPONENT_TIER,
    ConfigurationError,
    PlayerSkill,
    Position,
    TeamSkill,
)

if TYPE_CHECKING:
    from volley_ratings.config import Settings

logger = get_logger(__name__)

ValidationPolicy = Literal["strict", "clamp"]

# =============================================================================
# Default weight tables
# =============================================================================

DEFAULT_POSITION_WEIGHTS: dict[Position, dict[PlayerSkill, float]] = {
    Position.OUTSIDE_HITTER: {
        PlayerSkill.ATTACK: 0.28,
        PlayerSkill.SERVE: 0.13,
        PlayerSkill.RECEIVE: 0.17,
        PlayerSkill.SET: 0.05,
        PlayerSkill.BLOCK: 0.09,
        PlayerSkill.DIG: 0.11,
        PlayerSkill.MENTAL: 0.17,
    },
    Position.OPPOSITE: {
        PlayerSkill.ATTACK: 0.35,
        PlayerSkill.SERVE: 0.14,
        PlayerSkill.RECEIVE: 0.09,
        PlayerSkill.SET: 0.06,
        PlayerSkill.BLOCK: 0.12,
        PlayerSkill.DIG: 0.06,
        PlayerSkill.MENTAL: 0.18,
    },
    Position.MIDDLE_BLOCKER: {
        PlayerSkill.ATTACK: 0.26,
        PlayerSkill.SERVE: 0.09,
        PlayerSkill.RECEIVE: 0.06,
        PlayerSkill.SET: 0.06,
        PlayerSkill.BLOCK: 0.30,
        PlayerSkill.DIG: 0.06,
        PlayerSkill.MENTAL: 0.17,
    },
    Position.SETTER: {
        PlayerSkill.ATTACK: 0.06,
        PlayerSkill.SERVE: 0.11,
        PlayerSkill.RECEIVE: 0.17,
        PlayerSkill.SET: 0.33,
        PlayerSkill.BLOCK: 0.06,
        PlayerSkill.DIG: 0.11,
        PlayerSkill.MENTAL: 0.16,
    },
    Position.LIBERO: {
        PlayerSkill.ATTACK: 0.0,
        PlayerSkill.SERVE: 0.0,
        PlayerSkill.RECEIVE: 0.34,
        PlayerSkill.SET: 0.11,
        PlayerSkill.BLOCK: 0.0,
        PlayerSkill.DIG: 0.33,
        PlayerSkill.MENTAL: 0.22,
    },
    Position.DEFENSIVE_SPECIALIST: {
        PlayerSkill.ATTACK: 0.05,
        PlayerSkill.SERVE: 0.11,
        PlayerSkill.RECEIVE: 0.28,
        PlayerSkill.SET: 0.09,
        PlayerSkill.BLOCK: 0.02,
        PlayerSkill.DIG: 0.28,
        PlayerSkill.MENTAL: 0.17,
    },
    Position.ALL_AROUND: {
        PlayerSkill.ATTACK: 0.16,
        PlayerSkill.SERVE: 0.14,
        PlayerSkill.RECEIVE: 0.14,
        PlayerSkill.SET: 0.14,
        PlayerSkill.BLOCK: 0.14,
        PlayerSkill.DIG: 0.14,
        PlayerSkill.MENTAL: 0.14,
    },
}

DEFAULT_TEAM_WEIGHTS: dict[TeamSkill, float] = {
    TeamSkill.ATTACK: 0.35,
    TeamSkill.SERVE: 0.20,
    TeamSkill.RECEPTION: 0.25,
    TeamSkill.CONSISTENCY: 0.20,
}

DEFAULT_PROVISIONAL_THRESHOLD: int = 3
DEFAULT_MIDPOINT_TIER: int = 5
DEFAULT_TIER_STEP: float = 0.05
DEFAULT_RECENCY_DECAY_GAMES: int = 12
RECENCY_WEIGHT_FLOOR: float = 0.3

# Tolerance for weight vectors summing to one
WEIGHT_SUM_TOLERANCE: float = 1e-6


# =============================================================================
# Config
# =============================================================================


def _check_vector(name: str, vector: Mapping[Any, float], labels: type) -> None:
    missing = [label.value for label in labels if label not in vector]
    if missing:
        raise ConfigurationError(f"Weights for {name} missing: {', '.join(missing)}")
    negative = [label.value for label, w in vector.items() if w < 0]
    if negative:
        raise ConfigurationError(f"Weights for {name} negative: {', '.join(negative)}")
    total = math.fsum(vector.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ConfigurationError(f"Weights for {name} sum to {total:.4f}, expected 1.0")


@dataclass(frozen=True)
class RatingConfig:
    """Weights and tuning constants shared by all calculators.

    Attributes:
        position_weights: Player skill weight vector per position.
        team_weights: Team skill weight vector.
        provisional_threshold: Games needed for a non-provisional rating.
        midpoint_tier: Opponent tier with no adjustment.
        tier_step: Multiplier change per tier above/below the midpoint.
        recency_decay_games: Games for recency weights to reach the floor.
        validation_policy: ``strict`` rejects malformed stat lines,
            ``clamp`` repairs them.
    """

    position_weights: Mapping[Position, Mapping[PlayerSkill, float]] = field(
        default_factory=lambda: DEFAULT_POSITION_WEIGHTS
    )
    team_weights: Mapping[TeamSkill, float] = field(
        default_factory=lambda: DEFAULT_TEAM_WEIGHTS
    )
    provisional_threshold: int = DEFAULT_PROVISIONAL_THRESHOLD
    midpoint_tier: int = DEFAULT_MIDPOINT_TIER
    tier_step: float = DEFAULT_TIER_STEP
    recency_decay_games: int = DEFAULT_RECENCY_DECAY_GAMES
    validation_policy: ValidationPolicy = "strict"

    def __post_init__(self) -> None:
        missing = [p.value for p in Position if p not in self.position_weights]
        if missing:
            raise ConfigurationError(f"No weights for position(s): {', '.join(missing)}")
        for position, vector in self.position_weights.items():
            _check_vector(Position(position).value, vector, PlayerSkill)
        _check_vector("team", self.team_weights, TeamSkill)

        if self.provisional_threshold < 1:
            raise ConfigurationError("provisional_threshold must be at least 1")
        if not MIN_OPPONENT_TIER <= self.midpoint_tier <= MAX_OPPONENT_TIER:
            raise ConfigurationError(
                f"midpoint_tier must be within {MIN_OPPONENT_TIER}-{MAX_OPPONENT_TIER}"
            )
        span = max(self.midpoint_tier - MIN_OPPONENT_TIER, MAX_OPPONENT_TIER - self.midpoint_tier)
        if self.tier_step < 0 or self.tier_step * span >= 1.0:
            raise ConfigurationError(
                f"tier_step {self.tier_step} would produce a non-positive multiplier"
            )
        if self.recency_decay_games < 1:
            raise ConfigurationError("recency_decay_games must be at least 1")
        if self.validation_policy not in ("strict", "clamp"):
            raise ConfigurationError(f"Unknown validation policy '{self.validation_policy}'")

        # Freeze the tables so a shared config cannot be altered in place
        frozen_positions = MappingProxyType(
            {
                Position(p): MappingProxyType(dict(v))
                for p, v in self.position_weights.items()
            }
        )
        object.__setattr__(self, "position_weights", frozen_positions)
        object.__setattr__(self, "team_weights", MappingProxyType(dict(self.team_weights)))

    def __hash__(self) -> int:
        # MappingProxyType is unhashable, so hash the tables as sorted tuples
        positions = tuple(
            (position.value, tuple(sorted((skill.value, w) for skill, w in vector.items())))
            for position, vector in sorted(self.position_weights.items())
        )
        team = tuple(sorted((skill.value, w) for skill, w in self.team_weights.items()))
        return hash(
            (
                positions,
                team,
                self.provisional_threshold,
                self.midpoint_tier,
                self.tier_step,
                self.recency_decay_games,
                self.validation_policy,
            )
        )

    def weights_for(self, position: Position | str) -> Mapping[PlayerSkill, float]:
        """Return the weight vector for a position.

        Raises:
            UnknownPositionError: If the position is not recognized.
        """
        return self.position_weights[Position.parse(position)]

    def tier_multiplier(self, opponent_tier: float) -> float:
        """Multiplier applied to a rating earned against ``opponent_tier``."""
        return 1.0 + self.tier_step * (opponent_tier - self.midpoint_tier)

    def with_overrides(self, **changes: Any) -> RatingConfig:
        """Return a copy with some fields replaced (validated again)."""
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: Settings) -> RatingConfig:
        """Build a config from application settings.

        Weight overrides are read from ``settings.weights_path`` when set.
        """
        position_weights: Mapping[Position, Mapping[PlayerSkill, float]] = DEFAULT_POSITION_WEIGHTS
        team_weights: Mapping[TeamSkill, float] = DEFAULT_TEAM_WEIGHTS
        if settings.weights_path_obj is not None:
            position_weights, team_weights = load_weight_overrides(settings.weights_path_obj)

        return cls(
            position_weights=position_weights,
            team_weights=team_weights,
            provisional_threshold=settings.provisional_threshold,
            midpoint_tier=settings.midpoint_tier,
            tier_step=settings.tier_step,
            recency_decay_games=settings.recency_decay_games,
            validation_policy=settings.validation_policy,
        )


def load_weight_overrides(
    path: Path,
) -> tuple[dict[Position, dict[PlayerSkill, float]], dict[TeamSkill, float]]:
    """Load weight overrides from a JSON file.

    The file may contain ``positions`` (position -> skill -> weight) and
    ``team`` (skill -> weight). Positions that are not listed keep their
    default vectors.

    Args:
        path: JSON file path.

    Returns:
        Tuple of (position weights, team weights).

    Raises:
        ConfigurationError: If the file cannot be read or names unknown labels.
    """
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load weights from {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Weights file {path} must contain a JSON object")

    position_weights = {p: dict(v) for p, v in DEFAULT_POSITION_WEIGHTS.items()}
    team_weights = dict(DEFAULT_TEAM_WEIGHTS)

    try:
        for position_name, vector in raw.get("positions", {}).items():
            position = Position.parse(position_name)
            position_weights[position] = {
                PlayerSkill(skill): float(weight) for skill, weight in vector.items()
            }
        if "team" in raw:
            team_weights = {
                TeamSkill(skill): float(weight) for skill, weight in raw["team"].items()
            }
    except (ValueError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"Invalid weights in {path}: {e}") from e

    logger.info("Loaded rating weight overrides from {}", path)
    return position_weights, team_weights


DEFAULT_RATING_CONFIG = RatingConfig()


__all__ = [
    "DEFAULT_MIDPOINT_TIER",
    "DEFAULT_POSITION_WEIGHTS",
    "DEFAULT_PROVISIONAL_THRESHOLD",
    "DEFAULT_RATING_CONFIG",
    "DEFAULT_RECENCY_DECAY_GAMES",
    "DEFAULT_TEAM_WEIGHTS",
    "DEFAULT_TIER_STEP",
    "RECENCY_WEIGHT_FLOOR",
    "RatingConfig",
    "ValidationPolicy",
    "load_weight_overrides",
]
