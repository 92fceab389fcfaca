"""CLI entrypoint using Typer.

Developer tooling for running the rating engine over stat lines stored in a
JSON file (a list of objects keyed by StatLine field names) or a CSV file.

Example:
    $ volley-ratings --help
    $ volley-ratings rate game match.json --position outside_hitter --tier 6
    $ volley-ratings awards match match.json
    $ volley-ratings trends player_games.csv --window 5
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from volley_ratings import __version__
from volley_ratings.analysis import (
    categorize_takeaways,
    compute_match_awards,
    compute_season_awards,
    compute_trends,
)
from volley_ratings.config import get_settings
from volley_ratings.logging import setup_logging
from volley_ratings.ratings import (
    RatingConfig,
    combine_stat_lines,
    normalize_many,
    rate_aggregate,
    rate_game,
    rate_team_aggregate,
    validate_stat_lines,
)
from volley_ratings.types import (
    Award,
    MatchOutcome,
    OverallRating,
    RatingEngineError,
    StatLine,
    TakeawayCategory,
    TrendDirection,
)

# Initialize console for rich output
console = Console()

app = typer.Typer(
    name="volley-ratings",
    help="Volleyball rating and awards engine CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

rate_app = typer.Typer(
    name="rate",
    help="Player, game and team rating commands",
    no_args_is_help=True,
)
awards_app = typer.Typer(
    name="awards",
    help="Match and season award commands",
    no_args_is_help=True,
)

app.add_typer(rate_app, name="rate")
app.add_typer(awards_app, name="awards")

FileArgument = Annotated[
    Path,
    typer.Argument(help="JSON or CSV file of stat lines"),
]
PositionOption = Annotated[
    str,
    typer.Option("--position", "-p", help="Primary position (e.g. outside_hitter)"),
]

TREND_COLORS = {
    TrendDirection.UP: "green",
    TrendDirection.DOWN: "red",
    TrendDirection.STABLE: "white",
}
TAKEAWAY_COLORS = {
    TakeawayCategory.POSITIVE: "green",
    TakeawayCategory.IMPROVEMENT: "yellow",
    TakeawayCategory.MILESTONE: "cyan",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]volley-ratings[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Volleyball rating and awards engine.

    Rates games, players and teams, detects trends and selects awards from
    per-game stat lines.
    """
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, log_dir=settings.log_dir_obj)


# =============================================================================
# Helpers
# =============================================================================


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def _read_records(path: Path) -> list[dict[str, Any]]:
    if path.suffix.lower() == ".csv":
        import pandas as pd

        from volley_ratings.frames import stat_lines_from_frame

        return [line.to_dict() for line in stat_lines_from_frame(pd.read_csv(path))]

    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("JSON input must be a list of stat line objects")
    return data


def load_stat_lines(path: Path) -> list[StatLine]:
    """Load stat lines from a JSON or CSV file, exiting on bad input."""
    if not path.exists():
        _fail(f"File not found: {path}")
    try:
        return [StatLine.from_dict(record) for record in _read_records(path)]
    except (ValueError, TypeError, RatingEngineError) as e:
        _fail(f"Cannot read stat lines from {path}: {e}")


def _rating_config() -> RatingConfig:
    try:
        return RatingConfig.from_settings(get_settings())
    except RatingEngineError as e:
        _fail(str(e))


def _print_rating(title: str, rating: OverallRating[Any]) -> None:
    provisional = " [yellow](provisional)[/yellow]" if rating.is_provisional else ""
    console.print(
        Panel(
            f"[bold]Overall:[/bold] {rating.overall}{provisional}\n"
            f"[bold]Games:[/bold] {rating.games_played}",
            title=title,
        )
    )
    table = Table(title="Sub-ratings")
    table.add_column("Skill", style="cyan")
    table.add_column("Rating", justify="right")
    for skill, value in rating.sub_ratings.items():
        table.add_row(skill.value, str(value))
    console.print(table)


def _print_awards(title: str, awards: list[Award]) -> None:
    if not awards:
        console.print("[yellow]No eligible players for any award.[/yellow]")
        return
    table = Table(title=title)
    table.add_column("Award", style="cyan")
    table.add_column("Player", style="green")
    table.add_column("Value", justify="right")
    for award in awards:
        value = "N/A" if award.award_value is None else f"{award.award_value:g}"
        table.add_row(award.award_type.value, award.player_id, value)
    console.print(table)


# =============================================================================
# Rate Commands
# =============================================================================


@rate_app.command("game")
def rate_game_command(
    file: FileArgument,
    position: PositionOption = "all_around",
    tier: Annotated[
        int | None,
        typer.Option("--tier", "-t", help="Opponent tier 1-9"),
    ] = None,
) -> None:
    """Rate every stat line in the file as a single game."""
    config = _rating_config()
    lines = load_stat_lines(file)

    table = Table(title=f"Game Ratings ({position})")
    table.add_column("#", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Rating", justify="right", style="green")
    try:
        for index, line in enumerate(lines):
            rating = rate_game(line, position, tier, config)
            table.add_row(str(index), line.player_id or "-", str(rating))
    except RatingEngineError as e:
        _fail(str(e))
    console.print(table)


@rate_app.command("player")
def rate_player_command(
    file: FileArgument,
    position: PositionOption = "all_around",
) -> None:
    """Aggregate rating for one player's games (most recent first)."""
    config = _rating_config()
    lines = load_stat_lines(file)
    try:
        rating = rate_aggregate(lines, position, config=config)
    except RatingEngineError as e:
        _fail(str(e))
    _print_rating(f"Player Rating ({position})", rating)


@rate_app.command("team")
def rate_team_command(file: FileArgument) -> None:
    """Team rating from per-game team totals."""
    config = _rating_config()
    lines = load_stat_lines(file)
    try:
        rating = rate_team_aggregate(lines, config=config)
    except RatingEngineError as e:
        _fail(str(e))
    _print_rating("Team Rating", rating)


# =============================================================================
# Award Commands
# =============================================================================


@awards_app.command("match")
def awards_match_command(file: FileArgument) -> None:
    """Match awards from every player's stat line for one match."""
    config = _rating_config()
    lines = load_stat_lines(file)
    try:
        awards = compute_match_awards(lines, config=config)
    except RatingEngineError as e:
        _fail(str(e))
    _print_awards("Match Awards", awards)


@awards_app.command("season")
def awards_season_command(file: FileArgument) -> None:
    """Season awards from per-match stat lines of every player."""
    config = _rating_config()
    lines = load_stat_lines(file)
    try:
        awards = compute_season_awards(lines, config=config)
    except RatingEngineError as e:
        _fail(str(e))
    _print_awards("Season Awards", awards)


# =============================================================================
# Analysis Commands
# =============================================================================


@app.command("trends")
def trends_command(
    file: FileArgument,
    window: Annotated[
        int | None,
        typer.Option("--window", "-w", help="Games per comparison window"),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", help="Relative change treated as stable"),
    ] = None,
) -> None:
    """Trends over one player's games (most recent first)."""
    settings = get_settings()
    lines = load_stat_lines(file)
    try:
        trends = compute_trends(
            lines,
            window_size=window if window is not None else settings.trend_window_size,
            threshold=threshold if threshold is not None else settings.trend_threshold,
        )
    except ValueError as e:
        _fail(str(e))

    table = Table(title=f"Trends over {len(lines)} games")
    table.add_column("Metric", style="cyan")
    table.add_column("Direction")
    table.add_column("Recent Avg", justify="right")
    table.add_column("Delta", justify="right")
    for metric, trend in trends.items():
        color = TREND_COLORS[trend.direction]
        table.add_row(
            metric.value,
            f"[{color}]{trend.direction.value}[/{color}]",
            f"{trend.recent_avg:.3f}",
            f"{trend.delta:+.3f}",
        )
    console.print(table)


@app.command("takeaways")
def takeaways_command(
    file: FileArgument,
    won: Annotated[int, typer.Option("--won", help="Sets won")] = 0,
    lost: Annotated[int, typer.Option("--lost", help="Sets lost")] = 0,
) -> None:
    """Post-match takeaways from every player's stat line for one match."""
    config = _rating_config()
    lines = load_stat_lines(file)
    try:
        valid = validate_stat_lines(lines, config.validation_policy)
    except RatingEngineError as e:
        _fail(str(e))

    team_totals = normalize_many([combine_stat_lines(valid)])
    takeaways = categorize_takeaways(team_totals, MatchOutcome(sets_won=won, sets_lost=lost))
    if not takeaways:
        console.print("[yellow]No takeaways for this match.[/yellow]")
        return

    for takeaway in takeaways:
        color = TAKEAWAY_COLORS[takeaway.category]
        console.print(f"[{color}]{takeaway.category.value:<12}[/{color}] {takeaway.text}")


if __name__ == "__main__":
    app()
